"""Errors raised by the definitions pipeline."""


class DefinitionsError(Exception):
    """Base class for all definitions generation errors."""


class ConfigurationError(DefinitionsError):
    """Raised when required configuration is missing or empty."""


class SchemaBuildError(DefinitionsError):
    """Raised when the merged SDL cannot be built into a valid schema."""


class CapabilityMissingError(DefinitionsError):
    """Raised when an optional capability was requested but is not installed."""

    def __init__(self, capability: str, package: str):
        self.capability = capability
        self.package = package
        super().__init__(
            f'The "{capability}" capability requires the "{package}" package. '
            f"Install it with: pip install {package}"
        )


class PersistenceError(DefinitionsError):
    """Raised when the generated definitions cannot be written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to write definitions to {path}: {reason}")


class RenderError(DefinitionsError):
    """Raised when the rendered definitions are not valid Python."""
