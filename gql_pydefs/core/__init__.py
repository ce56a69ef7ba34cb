"""Core modules for GraphQL definitions generation."""

from .emitter import DefinitionsEmitter
from .errors import (
    CapabilityMissingError,
    ConfigurationError,
    DefinitionsError,
    PersistenceError,
    RenderError,
    SchemaBuildError,
)
from .explorer import GraphQLAstExplorer
from .factory import DefinitionsFactory
from .federation import (
    AriadneFederationProvider,
    FederationCapability,
    FederationCapabilityProvider,
    print_subgraph_schema,
)
from .hooks import AddHeaderHook, HookRunner, PostGenerateHook
from .ir import (
    DeclarationKind,
    IRArgument,
    IRDeclaration,
    IRDocument,
    IREnumValue,
    IRMember,
    IRTypeExpr,
)
from .loader import TypesLoader, extend_type_defs
from .normalizer import (
    MARKER_FIELD,
    FederatedStrategy,
    RegularStrategy,
    SchemaNormalizer,
    make_executable_schema,
    remove_marker_field,
)
from .options import DefinitionsGeneratorOptions, GenerateOptions
from .scalars import ScalarRegistry, ScalarTarget
from .watcher import ChangeSource, WatchDispatcher, WatchfilesChangeSource

__all__ = [
    # Errors
    "DefinitionsError",
    "ConfigurationError",
    "SchemaBuildError",
    "CapabilityMissingError",
    "PersistenceError",
    "RenderError",
    # Options
    "DefinitionsGeneratorOptions",
    "GenerateOptions",
    # IR types
    "DeclarationKind",
    "IRArgument",
    "IRDeclaration",
    "IRDocument",
    "IREnumValue",
    "IRMember",
    "IRTypeExpr",
    # Scalars
    "ScalarRegistry",
    "ScalarTarget",
    # Hooks
    "AddHeaderHook",
    "HookRunner",
    "PostGenerateHook",
    # Pipeline
    "TypesLoader",
    "extend_type_defs",
    "MARKER_FIELD",
    "RegularStrategy",
    "FederatedStrategy",
    "SchemaNormalizer",
    "make_executable_schema",
    "remove_marker_field",
    "AriadneFederationProvider",
    "FederationCapability",
    "FederationCapabilityProvider",
    "print_subgraph_schema",
    "GraphQLAstExplorer",
    "DefinitionsEmitter",
    "ChangeSource",
    "WatchDispatcher",
    "WatchfilesChangeSource",
    "DefinitionsFactory",
]
