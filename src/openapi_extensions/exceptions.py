"""
OpenAPI Extensions Errors

Exceptions raised for misconfiguration and broken example providers.
Resolution misses are never errors; lookups return None instead.
"""

from __future__ import annotations


class OpenApiExtensionsError(Exception):
    """Base class for errors raised by OpenAPI extensions."""


class OpenApiConfigurationError(OpenApiExtensionsError):
    """Raised when the extensions for a document are misconfigured."""

    def __init__(self, message: str, document_name: str | None = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            document_name: Name of the OpenAPI document being configured, if known
        """
        self.document_name = document_name
        super().__init__(message)


class ExampleGenerationError(OpenApiExtensionsError):
    """Raised when an example provider fails or returns an unusable value."""

    def __init__(self, example_type: object, reason: str):
        """
        Initialize example generation error.

        Args:
            example_type: Declared type of the example
            reason: Why the example could not be generated
        """
        self.example_type = example_type
        type_name = getattr(example_type, "__qualname__", None) or repr(example_type)
        super().__init__(f"Failed to generate an example for '{type_name}': {reason}")
