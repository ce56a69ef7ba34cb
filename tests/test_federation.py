"""Tests for the federated normalization strategy."""

import asyncio

import pytest
from graphql import build_schema, parse

from gql_pydefs.core.errors import CapabilityMissingError, SchemaBuildError
from gql_pydefs.core.explorer import GraphQLAstExplorer
from gql_pydefs.core.federation import (
    AriadneFederationProvider,
    FederationCapability,
    print_subgraph_schema,
)
from gql_pydefs.core.normalizer import FederatedStrategy, SchemaNormalizer

SUBGRAPH_SDL = """
type Product @key(fields: "upc") {
  upc: String!
  name: String
  price: Int
}

type Review {
  body: String
  product: Product
}

type Query {
  topProducts(first: Int = 5): [Product]
}
"""


class TestAriadneFederationProvider:
    """Tests for capability detection."""

    def test_missing_package(self):
        provider = AriadneFederationProvider()
        provider.package = "gql_pydefs_missing_federation_package"
        assert provider.is_available() is False
        with pytest.raises(CapabilityMissingError, match="pip install"):
            provider.load()

    def test_missing_package_fails_strategy(self):
        provider = AriadneFederationProvider()
        provider.package = "gql_pydefs_missing_federation_package"
        with pytest.raises(CapabilityMissingError):
            FederatedStrategy(provider).normalize(SUBGRAPH_SDL)


class TestPrintSubgraphSchema:
    """Tests for printing a plain schema through the subgraph printer."""

    def test_keeps_applied_directives(self):
        schema = build_schema(
            """
            directive @key(fields: String!) repeatable on OBJECT
            type Product @key(fields: "upc") { upc: String! }
            type Query { products: [Product] }
            """
        )
        sdl = print_subgraph_schema(schema)
        assert 'type Product @key(fields: "upc")' in sdl
        assert "directive @key" not in sdl

    def test_folds_extensions(self):
        schema = build_schema(
            "type Query { a: Int }\nextend type Query { b: Int }"
        )
        sdl = print_subgraph_schema(schema)
        assert "extend" not in sdl
        assert build_schema(sdl).query_type.fields.keys() == {"a", "b"}

    def test_custom_directives_kept(self):
        schema = build_schema(
            """
            directive @auth(role: String) on FIELD_DEFINITION
            type Query { secret: String @auth(role: "admin") }
            """
        )
        sdl = print_subgraph_schema(schema)
        assert "directive @auth(role: String) on FIELD_DEFINITION" in sdl


class TestFederatedStrategy:
    """Tests that run the real federation capability."""

    @pytest.fixture(autouse=True)
    def _require_ariadne(self):
        pytest.importorskip("ariadne")

    def test_provider_loads_capability(self):
        capability = AriadneFederationProvider().load()
        assert isinstance(capability, FederationCapability)

    def test_subgraph_sdl_hides_federation_internals(self):
        sdl = FederatedStrategy().normalize(SUBGRAPH_SDL)
        for internal in ("_Service", "_Any", "_Entity", "_service", "_entities", "directive @key"):
            assert internal not in sdl
        assert '@key(fields: "upc")' in sdl
        parse(sdl)

    def test_deterministic(self):
        strategy = FederatedStrategy()
        assert strategy.normalize(SUBGRAPH_SDL) == strategy.normalize(SUBGRAPH_SDL)

    def test_entity_keys_reach_declarations(self):
        sdl = asyncio.run(SchemaNormalizer(federation=True).normalize(SUBGRAPH_SDL))
        document = GraphQLAstExplorer().explore(sdl)
        assert document.get("Product").entity_keys == ["upc"]
        assert document.get("Review").entity_keys == []
        assert document.names == ["Product", "Review", "Query"]

    def test_invalid_subgraph(self):
        with pytest.raises(SchemaBuildError):
            FederatedStrategy().normalize("type Product @key(fields: \"upc\") { upc: Missing }")
