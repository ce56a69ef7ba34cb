"""Federation subgraph support.

Federation composition is an optional capability provided by Ariadne. It is
reached through a provider so a missing package fails with a typed error
instead of an import crash on first use.
"""

import importlib
import importlib.util
from collections.abc import Callable
from copy import copy
from typing import Protocol, runtime_checkable

from graphql import (
    GraphQLNamedType,
    GraphQLSchema,
    is_introspection_type,
    is_specified_directive,
    is_specified_scalar_type,
    print_ast,
)
from graphql.utilities.print_schema import print_type

from .errors import CapabilityMissingError

# Types, query fields and directives that federation adds to a subgraph
FEDERATION_TYPES = {"_Any", "_FieldSet", "FieldSet", "_Service", "_Entity"}
FEDERATION_QUERY_FIELDS = {"_service", "_entities"}
FEDERATION_DIRECTIVES = {
    "key",
    "external",
    "requires",
    "provides",
    "extends",
    "shareable",
    "link",
    "override",
    "inaccessible",
    "tag",
    "composeDirective",
    "interfaceObject",
    "authenticated",
    "requiresScopes",
    "policy",
}
FEDERATION_PREFIXES = ("link__", "federation__")

_MERGED_ATTRIBUTES = ("interfaces", "directives", "fields", "values", "types")


@runtime_checkable
class FederationCapability(Protocol):
    """Builds a subgraph schema from SDL and prints it back."""

    def build_subgraph_schema(self, type_defs: str) -> GraphQLSchema:
        ...

    def print_subgraph_schema(self, schema: GraphQLSchema) -> str:
        ...


@runtime_checkable
class FederationCapabilityProvider(Protocol):
    """Loads the federation capability on demand."""

    def is_available(self) -> bool:
        ...

    def load(self) -> FederationCapability:
        ...


def _is_federation_name(name: str, names: set[str]) -> bool:
    return name in names or name.startswith(FEDERATION_PREFIXES)


def _merged_definition(type_: GraphQLNamedType):
    """Return the type's definition node with its extensions folded in."""
    node = type_.ast_node
    if node is None:
        return None
    extensions = type_.extension_ast_nodes or ()
    if not extensions:
        return node

    merged = copy(node)
    for attr in _MERGED_ATTRIBUTES:
        if not hasattr(node, attr):
            continue
        items = list(getattr(node, attr) or ())
        for extension in extensions:
            items.extend(getattr(extension, attr, None) or ())
        setattr(merged, attr, tuple(items))
    return merged


def _print_schema_definition(schema: GraphQLSchema) -> str | None:
    roots = [
        ("query", schema.query_type, "Query"),
        ("mutation", schema.mutation_type, "Mutation"),
        ("subscription", schema.subscription_type, "Subscription"),
    ]
    if all(type_ is None or type_.name == default for _, type_, default in roots):
        return None
    lines = [f"  {operation}: {type_.name}" for operation, type_, _ in roots if type_]
    return "schema {\n" + "\n".join(lines) + "\n}"


def print_subgraph_schema(schema: GraphQLSchema) -> str:
    """Print a federated schema as subgraph SDL.

    Applied directives such as ``@key`` are kept. The types, query fields and
    directive definitions added by federation itself are left out.
    """
    definitions = []

    schema_definition = _print_schema_definition(schema)
    if schema_definition:
        definitions.append(schema_definition)

    for directive in schema.directives:
        if is_specified_directive(directive):
            continue
        if _is_federation_name(directive.name, FEDERATION_DIRECTIVES):
            continue
        if directive.ast_node is not None:
            definitions.append(print_ast(directive.ast_node))

    for type_ in schema.type_map.values():
        if is_introspection_type(type_) or is_specified_scalar_type(type_):
            continue
        if _is_federation_name(type_.name, FEDERATION_TYPES):
            continue

        node = _merged_definition(type_)
        if node is None:
            definitions.append(print_type(type_))
            continue

        if type_ is schema.query_type:
            node = copy(node)
            node.fields = tuple(
                f for f in node.fields or () if f.name.value not in FEDERATION_QUERY_FIELDS
            )
            if not node.fields:
                continue
        definitions.append(print_ast(node))

    return "\n\n".join(definitions) + "\n"


class AriadneFederation:
    """Federation capability backed by ``ariadne.contrib.federation``."""

    def __init__(self, make_federated_schema: Callable[..., GraphQLSchema]):
        self._make_federated_schema = make_federated_schema

    def build_subgraph_schema(self, type_defs: str) -> GraphQLSchema:
        return self._make_federated_schema(type_defs)

    def print_subgraph_schema(self, schema: GraphQLSchema) -> str:
        return print_subgraph_schema(schema)


class AriadneFederationProvider:
    """Provides federation support when Ariadne is installed."""

    package = "ariadne"
    module = "ariadne.contrib.federation"

    def is_available(self) -> bool:
        return importlib.util.find_spec(self.package) is not None

    def load(self) -> FederationCapability:
        if not self.is_available():
            raise CapabilityMissingError("federation", self.package)
        federation = importlib.import_module(self.module)
        return AriadneFederation(federation.make_federated_schema)
