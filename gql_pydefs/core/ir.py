"""Intermediate Representation (IR) of the generated declarations.

This module defines dataclasses describing the Python declarations synthesized
from a canonical GraphQL schema, one declaration per named type, in schema
definition order.
"""

import keyword
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DeclarationKind(str, Enum):
    """GraphQL origin of a declaration."""
    OBJECT = "object"
    INTERFACE = "interface"
    UNION = "union"
    ENUM = "enum"
    INPUT = "input"
    SCALAR = "scalar"


def python_identifier(name: str) -> str:
    """Turn a GraphQL name into a usable Python identifier.

    Keywords get a trailing underscore and leading underscores are moved to
    the end, so ``from`` becomes ``from_`` and ``__typename`` ``typename__``.
    """
    stripped = name.lstrip("_")
    if stripped and stripped != name:
        name = stripped + "_" * (len(name) - len(stripped))
    if keyword.iskeyword(name):
        return f"{name}_"
    return name


@dataclass
class IRTypeExpr:
    """A GraphQL type reference mapped onto a Python target type.

    ``item_nullable`` holds one entry per list level, outermost first, telling
    whether that level's items may be null. ``is_reference`` is set when the
    target names another declaration rather than an imported or builtin type.
    """
    graphql_name: str
    target: str
    nullable: bool = True  # True if no ! in GraphQL
    list_depth: int = 0
    item_nullable: list[bool] = field(default_factory=list)
    is_reference: bool = False
    # Fixed string value, rendered as Literal["..."]
    literal: str | None = None


@dataclass
class IRArgument:
    """Represents an argument of a resolver method."""
    name: str
    type: IRTypeExpr
    is_optional: bool = True
    default_value: Any = None
    description: str | None = None

    @property
    def python_name(self) -> str:
        return python_identifier(self.name)


@dataclass
class IRMember:
    """Represents a member of a declaration: a data field or a resolver method."""
    name: str
    type: IRTypeExpr
    arguments: list[IRArgument] = field(default_factory=list)
    is_method: bool = False
    # Fixed literal value, used by the synthetic __typename member
    literal: str | None = None
    # Default of an input field, as a Python value
    default_value: Any = None
    description: str | None = None

    @property
    def python_name(self) -> str:
        return python_identifier(self.name)

    @property
    def needs_alias(self) -> bool:
        return self.python_name != self.name


@dataclass
class IREnumValue:
    """Represents a single value in a GraphQL enum."""
    name: str
    description: str | None = None

    @property
    def python_name(self) -> str:
        return python_identifier(self.name)


@dataclass
class IRDeclaration:
    """Represents one generated declaration.

    Object, interface and input declarations carry ``members``; enums carry
    ``values``; unions carry ``union_types``; scalars carry ``scalar_type``.
    """
    name: str
    kind: DeclarationKind
    output_as: str = "class"
    members: list[IRMember] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)
    values: list[IREnumValue] = field(default_factory=list)
    union_types: list[str] = field(default_factory=list)
    scalar_type: str | None = None
    # Field sets of federation @key directives
    entity_keys: list[str] = field(default_factory=list)
    description: str | None = None
    is_root: bool = False
    literal_union: bool = False

    def get_member(self, name: str) -> IRMember | None:
        """Look up a member by its GraphQL name."""
        for member in self.members:
            if member.name == name:
                return member
        return None


@dataclass
class IRDocument:
    """Complete set of declarations for one generation pass."""
    declarations: list[IRDeclaration] = field(default_factory=list)
    # Import statements required by mapped scalar targets
    imports: set[str] = field(default_factory=set)

    def get(self, name: str) -> IRDeclaration | None:
        """Look up a declaration by name."""
        for declaration in self.declarations:
            if declaration.name == name:
                return declaration
        return None

    @property
    def names(self) -> list[str]:
        return [d.name for d in self.declarations]
