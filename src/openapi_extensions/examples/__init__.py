"""
Example metadata, discovery, registry and serialization.
"""

from __future__ import annotations

from openapi_extensions.examples.discovery import (
    attach_examples,
    examples_dependency,
    get_dependency_examples,
    get_endpoint_examples,
    get_type_example,
    openapi_example,
    with_examples,
)
from openapi_extensions.examples.metadata import ExampleKind, ExampleProvider, OpenApiExample
from openapi_extensions.examples.registry import ExampleRegistry
from openapi_extensions.examples.serialization import (
    CompositeSerializationContext,
    JsonSerializerContext,
    SerializationContext,
    combine_contexts,
)

__all__ = [
    "CompositeSerializationContext",
    "ExampleKind",
    "ExampleProvider",
    "ExampleRegistry",
    "JsonSerializerContext",
    "OpenApiExample",
    "SerializationContext",
    "attach_examples",
    "combine_contexts",
    "examples_dependency",
    "get_dependency_examples",
    "get_endpoint_examples",
    "get_type_example",
    "openapi_example",
    "with_examples",
]
