"""
Parameter Descriptions Transformer

Adds descriptions to operation parameters from ``Doc`` annotations:

    async def get_todo(
        id: Annotated[str, Doc("The Id of the Todo item to get.")],
    ) -> TodoItemModel: ...
"""

from __future__ import annotations

from typing import Any

from typing_extensions import Doc

from openapi_extensions.caching import ConcurrentCache
from openapi_extensions.transformers.base import OperationContext, ParameterInfo, find_parameter
from openapi_extensions.typing_helpers import split_annotated, unwrap_optional


def get_parameter_doc(annotation: Any) -> str | None:
    """Get the documentation carried by a parameter's ``Doc`` annotation, if any."""
    base, metadata = split_annotated(annotation)
    if not metadata:
        _, metadata = split_annotated(unwrap_optional(base))

    for item in metadata:
        if isinstance(item, Doc):
            return item.documentation
    return None


class AddParameterDescriptionsTransformer:
    """Operation transformer that adds parameter descriptions from ``Doc`` annotations."""

    def __init__(self) -> None:
        self._descriptions: ConcurrentCache[tuple[Any, str], str | None] = ConcurrentCache()

    def transform_operation(self, operation: dict[str, Any], context: OperationContext) -> None:
        parameters = operation.get("parameters")
        if not parameters:
            return

        for argument in context.parameters:
            description = self._get_description(argument)
            if description is None:
                continue

            parameter = find_parameter(parameters, argument)
            if parameter is not None and not parameter.get("description"):
                parameter["description"] = description

    def _get_description(self, parameter: ParameterInfo) -> str | None:
        return self._descriptions.get_or_add(
            (parameter.owner, parameter.name),
            lambda _: get_parameter_doc(parameter.annotation),
        )
