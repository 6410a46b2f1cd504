from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when there is a problem reading or writing configuration."""

class InvalidArgumentError(ConfigurationError, ValueError):
    """Raised when a key, prefix or store argument is missing or empty."""

class ImmutableStoreError(ConfigurationError):
    """Raised when a mutating operation reaches an immutable store."""

    def __init__(self, message: str = "immutable"):
        super().__init__(message)

class ConversionError(ConfigurationError, ValueError):
    """Raised when a stored value cannot be converted to the requested type."""
