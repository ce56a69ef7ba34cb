"""Schema normalization.

Builds a validated schema from merged SDL and prints it back to canonical SDL.
Two strategies exist: ``RegularStrategy`` builds a plain executable schema with
graphql-core, ``FederatedStrategy`` composes the SDL as a federation subgraph.
"""

import asyncio
from typing import Protocol

from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLSchema,
    ObjectTypeDefinitionNode,
    OperationType,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    build_ast_schema,
    concat_ast,
    is_introspection_type,
    is_specified_scalar_type,
    parse,
    print_schema,
    validate_schema,
)

from .errors import SchemaBuildError
from .federation import AriadneFederationProvider, FederationCapabilityProvider

# Placeholder field that gives schemas without a query root a valid Query type
MARKER_FIELD = "temp__"
MARKER_TYPE_DEFS = f"type Query {{ {MARKER_FIELD}: Boolean }}"


def _has_query_root(document: DocumentNode) -> bool:
    for definition in document.definitions:
        if isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
            for operation_type in definition.operation_types or ():
                if operation_type.operation == OperationType.QUERY:
                    return True
        elif isinstance(definition, ObjectTypeDefinitionNode):
            if definition.name.value == "Query":
                return True
    return False


def make_executable_schema(type_defs: str | None) -> GraphQLSchema:
    """Build and validate a schema from SDL without requiring any resolvers.

    When the SDL defines no query root, a ``Query`` type holding only the
    marker field is added so the schema passes validation.
    """
    if not type_defs or not type_defs.strip():
        raise SchemaBuildError('"typeDefs" property cannot be null.')
    try:
        document = parse(type_defs)
        if not _has_query_root(document):
            document = concat_ast([document, parse(MARKER_TYPE_DEFS)])
        schema = build_ast_schema(document)
    except (GraphQLError, TypeError) as e:
        raise SchemaBuildError(str(e)) from e

    errors = validate_schema(schema)
    if errors:
        raise SchemaBuildError("\n\n".join(error.message for error in errors))
    return schema


def remove_marker_field(schema: GraphQLSchema) -> GraphQLSchema:
    """Strip the marker field from every type, dropping a Query left empty."""
    for type_ in schema.type_map.values():
        if isinstance(type_, (GraphQLObjectType, GraphQLInterfaceType)):
            type_.fields.pop(MARKER_FIELD, None)

    query_type = schema.query_type
    if query_type is None or query_type.fields:
        return schema

    types = [
        type_
        for type_ in schema.type_map.values()
        if type_ is not query_type
        and not is_introspection_type(type_)
        and not is_specified_scalar_type(type_)
    ]
    return GraphQLSchema(
        mutation=schema.mutation_type,
        subscription=schema.subscription_type,
        types=types,
        directives=schema.directives,
        description=schema.description,
        assume_valid=True,
    )


class NormalizationStrategy(Protocol):
    """Turns merged SDL into canonical SDL."""

    def normalize(self, type_defs: str) -> str:
        ...


class RegularStrategy:
    """Single executable schema, resolvers not required to match fields."""

    def normalize(self, type_defs: str) -> str:
        schema = remove_marker_field(make_executable_schema(type_defs))
        return print_schema(schema)


class FederatedStrategy:
    """Federation subgraph composition, printed back as subgraph SDL."""

    def __init__(self, provider: FederationCapabilityProvider | None = None):
        self.provider = provider or AriadneFederationProvider()

    def ensure_available(self):
        """Raise CapabilityMissingError when federation cannot be loaded."""
        self.provider.load()

    def normalize(self, type_defs: str) -> str:
        capability = self.provider.load()
        if not type_defs or not type_defs.strip():
            raise SchemaBuildError('"typeDefs" property cannot be null.')
        try:
            schema = capability.build_subgraph_schema(type_defs)
        except (GraphQLError, TypeError, ValueError) as e:
            raise SchemaBuildError(str(e)) from e
        return capability.print_subgraph_schema(schema)


class SchemaNormalizer:
    """Selects the normalization strategy for a generation run."""

    def __init__(
        self,
        federation: bool = False,
        federation_provider: FederationCapabilityProvider | None = None,
    ):
        self.federation = federation
        if federation:
            self.strategy: NormalizationStrategy = FederatedStrategy(federation_provider)
        else:
            self.strategy = RegularStrategy()

    def ensure_available(self):
        """Check that every capability the strategy needs is installed."""
        if isinstance(self.strategy, FederatedStrategy):
            self.strategy.ensure_available()

    async def normalize(self, type_defs: str) -> str:
        """Return the canonical SDL for ``type_defs``."""
        return await asyncio.to_thread(self.strategy.normalize, type_defs)
