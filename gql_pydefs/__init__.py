"""Generate typed Python declarations from GraphQL schema files."""

__version__ = "0.1.0"
