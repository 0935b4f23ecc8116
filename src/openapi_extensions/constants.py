"""
OpenAPI Extensions Constants

Default document name, routes and bookkeeping property names.
"""

from __future__ import annotations

DEFAULT_DOCUMENT_NAME = "v1"

DEFAULT_OPENAPI_ROUTE = "/openapi/{documentName}.json"
DEFAULT_OPENAPI_ROUTE_AS_YAML = "/openapi/{documentName}.yaml"

# Route parameter every document route template must contain
DOCUMENT_NAME_PARAMETER = "documentName"

# Internal bookkeeping properties scrubbed from serialized documents
DESCRIPTION_ID = "x-aspnetcore-id"
SCHEMA_ID = "x-schema-id"
SCRUBBED_PROPERTIES = frozenset({DESCRIPTION_ID, SCHEMA_ID})

# Attribute used to attach example metadata to classes and endpoint functions
EXAMPLES_ATTRIBUTE = "__openapi_examples__"

# Attribute used to attach response descriptions to endpoint functions
RESPONSES_ATTRIBUTE = "__openapi_responses__"

YAML_MEDIA_TYPE = "application/yaml"
