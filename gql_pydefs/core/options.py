"""Configuration objects for a definitions generation run.

Field names are snake_case; the camelCase names used by JSON config files
(``typePaths``, ``emitTypenameField``, ...) are accepted as aliases.
"""

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import ConfigurationError

OutputAs = Literal["class", "interface"]


class DefinitionsGeneratorOptions(BaseModel):
    """Options controlling how the schema maps onto Python declarations."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel
    )

    output_as: OutputAs = "class"
    emit_typename_field: bool = False
    skip_resolver_args: bool = False
    default_scalar_type: str | None = None
    custom_scalar_type_mapping: dict[str, str] = Field(default_factory=dict)
    additional_header: str | None = None
    default_type_mapping: dict[str, str] = Field(default_factory=dict)
    enums_as_types: bool = False


class GenerateOptions(BaseModel):
    """Options for one ``DefinitionsFactory.generate`` invocation."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel
    )

    type_paths: list[str] = Field(default_factory=list)
    path: str
    output_as: OutputAs = "class"
    watch: bool = False
    debug: bool = True
    federation: bool = False
    type_defs: str | list[str] | None = None

    emit_typename_field: bool = False
    skip_resolver_args: bool = False
    default_scalar_type: str | None = None
    custom_scalar_type_mapping: dict[str, str] = Field(default_factory=dict)
    additional_header: str | None = None
    default_type_mapping: dict[str, str] = Field(default_factory=dict)
    enums_as_types: bool = False

    def generator_options(self) -> DefinitionsGeneratorOptions:
        """Return the options that flow through explorer and emitter."""
        return DefinitionsGeneratorOptions(
            output_as=self.output_as,
            emit_typename_field=self.emit_typename_field,
            skip_resolver_args=self.skip_resolver_args,
            default_scalar_type=self.default_scalar_type,
            custom_scalar_type_mapping=self.custom_scalar_type_mapping,
            additional_header=self.additional_header,
            default_type_mapping=self.default_type_mapping,
            enums_as_types=self.enums_as_types,
        )

    @classmethod
    def from_file(cls, config_path: str | Path) -> "GenerateOptions":
        """Load options from a JSON config file."""
        config_file = Path(config_path)
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read config file {config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_file} must contain an object")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config file {config_file}:\n{e}") from e
