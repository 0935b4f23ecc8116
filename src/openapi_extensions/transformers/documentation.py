"""
Documentation Transformers

Fill in operation summaries, operation descriptions, parameter descriptions
and schema descriptions from the docstrings of a documented module or
package. Descriptions already present in the document are kept.
"""

from __future__ import annotations

from typing import Any

import structlog

from openapi_extensions.descriptions.docstrings import REMARKS_SECTION
from openapi_extensions.descriptions.member_names import (
    get_attribute_member_name,
    get_method_member_name,
    get_type_member_name,
)
from openapi_extensions.descriptions.service import DescriptionService, DocstringDescriptionService
from openapi_extensions.transformers.base import (
    OperationContext,
    ParameterInfo,
    SchemaContext,
    find_parameter,
)

logger = structlog.get_logger()


class AddOperationDocumentationTransformer:
    """Operation transformer that adds descriptions from endpoint docstrings."""

    def __init__(self, service: DescriptionService):
        self.service = service

    def transform_operation(self, operation: dict[str, Any], context: OperationContext) -> None:
        method_name = get_method_member_name(context.endpoint)

        if method_name:
            self._apply_operation_description(operation, context, method_name)

        if operation.get("parameters"):
            for parameter in context.parameters:
                self._apply_parameter_description(
                    operation["parameters"], parameter, context.endpoint, method_name
                )

    def _apply_operation_description(
        self,
        operation: dict[str, Any],
        context: OperationContext,
        method_name: str,
    ) -> None:
        # FastAPI fills in a summary generated from the route name
        summary = operation.get("summary")
        if summary is None or (context.route.summary is None and summary == context.default_summary):
            if description := self.service.get_description(method_name):
                operation["summary"] = description

        if not operation.get("description"):
            if remarks := self.service.get_description(method_name, section=REMARKS_SECTION):
                operation["description"] = remarks

    def _apply_parameter_description(
        self,
        parameters: list[dict[str, Any]],
        parameter: ParameterInfo,
        endpoint: Any,
        method_name: str | None,
    ) -> None:
        description = None

        if parameter.model is not None:
            member_name = get_attribute_member_name(parameter.model, parameter.name)
            if member_name:
                description = self.service.get_description(member_name)

        if not description:
            declared_by = parameter.declared_by if parameter.model is not None else parameter.owner
            owner_name = method_name if declared_by is endpoint else get_method_member_name(declared_by)
            if owner_name:
                for name in dict.fromkeys((parameter.name, parameter.alias)):
                    description = self.service.get_description(owner_name, name)
                    if description:
                        break

        if not description:
            return

        target = find_parameter(parameters, parameter)
        if target is not None and not target.get("description"):
            target["description"] = description


class AddSchemaDocumentationTransformer:
    """Schema transformer that adds descriptions from class and attribute docstrings."""

    def __init__(self, service: DocstringDescriptionService):
        self.service = service

    def transform_schema(self, schema: dict[str, Any], context: SchemaContext) -> None:
        if schema.get("description"):
            return

        member_name = self._get_member_name(context)
        if not member_name:
            return

        if description := self.service.get_description(member_name):
            schema["description"] = description
            logger.debug(
                "Schema description added",
                document=context.document_name,
                schema=context.schema_name,
                member=member_name,
            )

    def _get_member_name(self, context: SchemaContext) -> str | None:
        if context.property is not None:
            if not self.service.includes(context.property.owner):
                return None
            return get_attribute_member_name(context.property.owner, context.property.attribute)

        if context.schema_type is None or not self.service.includes(context.schema_type):
            return None

        return get_type_member_name(context.schema_type)

