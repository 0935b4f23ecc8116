"""
Descriptions Transformer

Applies the configured description transformations to operations and
component schemas.
"""

from __future__ import annotations

from typing import Any

from openapi_extensions.descriptions.transformations import DescriptionTransformation
from openapi_extensions.transformers.base import OperationContext, SchemaContext

DESCRIPTION_KEY = "description"
SUMMARY_KEY = "summary"


class DescriptionsTransformer:
    """
    Operation and schema transformer that rewrites descriptions.

    Each description is rewritten once: the summary, description, parameter
    and inline response property descriptions per operation, and the
    description of a component schema together with those of its properties
    per schema. Property schemas are left to their parent.
    """

    def __init__(self, transformation: DescriptionTransformation):
        self.transformation = transformation

    def transform_operation(self, operation: dict[str, Any], context: OperationContext) -> None:
        for key in (SUMMARY_KEY, DESCRIPTION_KEY):
            if isinstance(operation.get(key), str):
                operation[key] = self.transformation(operation[key])

        for response in (operation.get("responses") or {}).values():
            for media_type in (response.get("content") or {}).values():
                schema = media_type.get("schema") or {}
                self._transform_properties(schema.get("properties") or {})

        for parameter in operation.get("parameters") or ():
            if parameter.get(DESCRIPTION_KEY):
                parameter[DESCRIPTION_KEY] = self.transformation(parameter[DESCRIPTION_KEY])

    def transform_schema(self, schema: dict[str, Any], context: SchemaContext) -> None:
        if context.property is not None:
            return

        if isinstance(schema.get(DESCRIPTION_KEY), str):
            schema[DESCRIPTION_KEY] = self.transformation(schema[DESCRIPTION_KEY])

        self._transform_properties(schema.get("properties") or {})

    def _transform_properties(self, properties: dict[str, Any]) -> None:
        for prop in properties.values():
            if isinstance(prop, dict) and isinstance(prop.get(DESCRIPTION_KEY), str):
                prop[DESCRIPTION_KEY] = self.transformation(prop[DESCRIPTION_KEY])
