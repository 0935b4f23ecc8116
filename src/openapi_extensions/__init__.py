"""
OpenAPI Extensions for FastAPI

Enriches the OpenAPI documents of FastAPI applications with examples,
descriptions taken from docstrings, transformed descriptions and server URLs,
and serves any named document as JSON or YAML.
"""

from openapi_extensions.config import OpenApiExtensionsOptions
from openapi_extensions.constants import DEFAULT_DOCUMENT_NAME
from openapi_extensions.descriptions import (
    DescriptionService,
    DocstringDescriptionService,
    remove_backticks,
    remove_boilerplate_prefixes,
)
from openapi_extensions.document import OpenApiDocumentService
from openapi_extensions.examples import (
    CompositeSerializationContext,
    ExampleKind,
    ExampleProvider,
    ExampleRegistry,
    JsonSerializerContext,
    OpenApiExample,
    SerializationContext,
    examples_dependency,
    openapi_example,
    with_examples,
)
from openapi_extensions.exceptions import (
    ExampleGenerationError,
    OpenApiConfigurationError,
    OpenApiExtensionsError,
)
from openapi_extensions.extensions import add_openapi, add_openapi_extensions, get_openapi_document
from openapi_extensions.routing import map_openapi, map_openapi_yaml
from openapi_extensions.transformers import openapi_response

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_DOCUMENT_NAME",
    "CompositeSerializationContext",
    "DescriptionService",
    "DocstringDescriptionService",
    "ExampleGenerationError",
    "ExampleKind",
    "ExampleProvider",
    "ExampleRegistry",
    "JsonSerializerContext",
    "OpenApiConfigurationError",
    "OpenApiDocumentService",
    "OpenApiExample",
    "OpenApiExtensionsError",
    "OpenApiExtensionsOptions",
    "SerializationContext",
    "add_openapi",
    "add_openapi_extensions",
    "examples_dependency",
    "get_openapi_document",
    "map_openapi",
    "map_openapi_yaml",
    "openapi_example",
    "openapi_response",
    "remove_backticks",
    "remove_boilerplate_prefixes",
    "with_examples",
]
