"""
OpenAPI operation, schema and document transformers.
"""

from __future__ import annotations

from openapi_extensions.transformers.base import (
    DocumentContext,
    DocumentTransformer,
    OperationContext,
    OperationTransformer,
    ParameterInfo,
    ParameterLocation,
    PropertyInfo,
    ResponseType,
    SchemaContext,
    SchemaTransformer,
)
from openapi_extensions.transformers.descriptions import DescriptionsTransformer
from openapi_extensions.transformers.documentation import (
    AddOperationDocumentationTransformer,
    AddSchemaDocumentationTransformer,
)
from openapi_extensions.transformers.examples import AddExamplesTransformer, ExamplesCache
from openapi_extensions.transformers.parameters import AddParameterDescriptionsTransformer
from openapi_extensions.transformers.responses import (
    AddResponseDescriptionsTransformer,
    OpenApiResponse,
    openapi_response,
)
from openapi_extensions.transformers.servers import AddServersTransformer

__all__ = [
    "AddExamplesTransformer",
    "AddOperationDocumentationTransformer",
    "AddParameterDescriptionsTransformer",
    "AddResponseDescriptionsTransformer",
    "AddSchemaDocumentationTransformer",
    "AddServersTransformer",
    "DescriptionsTransformer",
    "DocumentContext",
    "DocumentTransformer",
    "ExamplesCache",
    "OpenApiResponse",
    "OperationContext",
    "OperationTransformer",
    "ParameterInfo",
    "ParameterLocation",
    "PropertyInfo",
    "ResponseType",
    "SchemaContext",
    "SchemaTransformer",
    "openapi_response",
]
