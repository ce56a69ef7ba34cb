"""Scalar type mapping for generated declarations.

Maps GraphQL scalars to Python type expressions and the imports they need.

Example usage:
    from gql_pydefs.core.scalars import ScalarRegistry

    registry = ScalarRegistry(
        custom_scalar_type_mapping={"DateTime": "datetime.datetime"},
    )
    target = registry.resolve("DateTime")
    target.python_type       # "datetime"
    target.import_statement  # "from datetime import datetime"
"""

import re
from dataclasses import dataclass

# Built-in GraphQL scalars and their Python equivalents
BUILTIN_SCALARS = {
    "ID": "str",
    "String": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
}

DEFAULT_SCALAR_TYPE = "Any"

# Bare names that are importable from typing
TYPING_NAMES = {"Any", "Dict", "List", "Mapping", "Sequence", "Set", "Tuple"}

_DOTTED_PATH = re.compile(r"^[A-Za-z_][\w.]*\.([A-Za-z_]\w*)$")


@dataclass(frozen=True)
class ScalarTarget:
    """A Python type expression plus the import it requires, if any."""

    python_type: str
    import_statement: str | None = None

    @classmethod
    def parse(cls, spec: str) -> "ScalarTarget":
        """Build a target from a mapping value.

        A dotted path such as ``decimal.Decimal`` becomes ``Decimal`` imported
        from ``decimal``; bare typing names such as ``Any`` import from typing;
        anything else is used verbatim.
        """
        spec = spec.strip()
        match = _DOTTED_PATH.match(spec)
        if match:
            module, _, name = spec.rpartition(".")
            return cls(python_type=name, import_statement=f"from {module} import {name}")
        if spec in TYPING_NAMES:
            return cls(python_type=spec, import_statement=f"from typing import {spec}")
        return cls(python_type=spec)


class ScalarRegistry:
    """Registry resolving GraphQL scalar names to Python targets.

    Lookup order for a scalar name:
    1. ``custom_scalar_type_mapping``
    2. ``default_type_mapping`` (built-in scalars only)
    3. the built-in table
    Custom scalars without a mapping resolve to ``default_scalar_type``,
    falling back to ``Any``.
    """

    def __init__(
        self,
        custom_scalar_type_mapping: dict[str, str] | None = None,
        default_type_mapping: dict[str, str] | None = None,
        default_scalar_type: str | None = None,
    ):
        self._custom: dict[str, ScalarTarget] = {}
        self._builtin: dict[str, ScalarTarget] = {
            name: ScalarTarget(python_type) for name, python_type in BUILTIN_SCALARS.items()
        }
        for name, spec in (default_type_mapping or {}).items():
            if name in self._builtin:
                self._builtin[name] = ScalarTarget.parse(spec)
        for name, spec in (custom_scalar_type_mapping or {}).items():
            self.register(name, ScalarTarget.parse(spec))
        self.default = ScalarTarget.parse(default_scalar_type or DEFAULT_SCALAR_TYPE)

    def register(self, scalar_name: str, target: ScalarTarget):
        """Register a custom target for a scalar."""
        self._custom[scalar_name] = target

    def get(self, scalar_name: str) -> ScalarTarget | None:
        """Get the explicit target for a scalar, or None if it has none."""
        if scalar_name in self._custom:
            return self._custom[scalar_name]
        return self._builtin.get(scalar_name)

    def has(self, scalar_name: str) -> bool:
        """Check if a scalar has an explicit target."""
        return scalar_name in self._custom or scalar_name in self._builtin

    @staticmethod
    def is_builtin(scalar_name: str) -> bool:
        return scalar_name in BUILTIN_SCALARS

    def resolve(self, scalar_name: str) -> ScalarTarget:
        """Resolve a scalar to its target, using the default for unmapped ones."""
        return self.get(scalar_name) or self.default
