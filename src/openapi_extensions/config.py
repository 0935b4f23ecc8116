"""
OpenAPI Extensions Configuration

Options for the extensions of a single OpenAPI document. Switches can be set
from the environment; transformations, serialization contexts, examples and
documented modules are configured in code.
"""

from __future__ import annotations

from collections.abc import Callable
from types import ModuleType
from typing import Any

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from openapi_extensions.descriptions.transformations import (
    DEFAULT_TRANSFORMATIONS,
    DescriptionTransformation,
    compose_transformations,
)
from openapi_extensions.examples.metadata import ExampleProvider, OpenApiExample
from openapi_extensions.exceptions import OpenApiConfigurationError

logger = structlog.get_logger()


class OpenApiExtensionsOptions(BaseSettings):
    """Options for the OpenAPI extensions of a document."""

    model_config = SettingsConfigDict(
        env_prefix="OPENAPI_EXTENSIONS_",
        case_sensitive=False,
        extra="ignore",
        arbitrary_types_allowed=True,
    )

    # Examples
    add_examples: bool = Field(
        default=False,
        description="Add examples to operations and schemas",
    )
    example_inheritance: bool = Field(
        default=True,
        description="Use examples registered for a base type when a type has none",
    )
    serialization_contexts: list[Any] = Field(
        default_factory=list,
        description="Serialization contexts used to render examples, in order of preference",
    )
    examples_metadata: list[Any] = Field(
        default_factory=list,
        description="Examples for types that do not declare their own",
    )

    # Servers
    add_server_urls: bool = Field(
        default=True,
        description="Add the server URL to documents",
    )
    default_server_url: str | None = Field(
        default=None,
        description="Server URL for documents built outside an HTTP request",
    )

    # Descriptions
    description_transformations: list[Callable[[str], str]] = Field(
        default_factory=lambda: list(DEFAULT_TRANSFORMATIONS),
        description="Transformations applied to descriptions, in order",
    )
    documentation_modules: list[Any] = Field(
        default_factory=list,
        description="Modules or packages whose docstrings document operations and schemas",
    )

    def add_example(
        self,
        schema_type: Any,
        provider: type[ExampleProvider[Any]] | None = None,
    ) -> OpenApiExtensionsOptions:
        """
        Register an example for a type.

        Args:
            schema_type: Type to provide examples for
            provider: Class generating the examples; defaults to the type itself

        Returns:
            These options, for chaining

        Raises:
            OpenApiConfigurationError: If the type already has a registered example
        """
        if any(item.example_type == schema_type for item in self.examples_metadata):
            name = getattr(schema_type, "__qualname__", repr(schema_type))
            logger.error("Duplicate example registration", example_type=name)
            raise OpenApiConfigurationError(
                f"An example for the type '{name}' has already been registered."
            )

        if provider is None:
            metadata = OpenApiExample.of(schema_type)
        else:
            metadata = OpenApiExample.provided_by(schema_type, provider)

        self.examples_metadata.append(metadata)
        return self

    def add_documentation(self, module: ModuleType | str) -> OpenApiExtensionsOptions:
        """
        Document operations and schemas with the docstrings of a module or package.

        Args:
            module: Module or package, or its import name

        Returns:
            These options, for chaining
        """
        self.documentation_modules.append(module)
        return self

    def get_description_transformer(self) -> DescriptionTransformation | None:
        """Get the configured description transformations composed into one, if any."""
        return compose_transformations(self.description_transformations)
