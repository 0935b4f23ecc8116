"""
Response Descriptions Transformer

Sets the descriptions of responses declared with ``openapi_response``:

    @app.get("/api/items/{id}", responses={404: {"model": ProblemDetails}})
    @openapi_response(200, "The item was found.")
    @openapi_response(404, "The item was not found.")
    async def get_item(id: str) -> Item: ...
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from openapi_extensions.constants import RESPONSES_ATTRIBUTE
from openapi_extensions.transformers.base import OperationContext

EndpointT = TypeVar("EndpointT", bound=Callable[..., Any])


@dataclass(frozen=True)
class OpenApiResponse:
    """Description of a response of an endpoint."""

    status_code: int
    description: str


def openapi_response(status_code: int, description: str) -> Callable[[EndpointT], EndpointT]:
    """
    Describe a response of an endpoint.

    Args:
        status_code: HTTP status code of the response
        description: Description of the response

    Returns:
        Decorator attaching the response description
    """

    def decorator(endpoint: EndpointT) -> EndpointT:
        existing = vars(endpoint).get(RESPONSES_ATTRIBUTE, ())
        setattr(endpoint, RESPONSES_ATTRIBUTE, (OpenApiResponse(status_code, description), *existing))
        return endpoint

    return decorator


def get_response_descriptions(endpoint: Callable[..., Any]) -> tuple[OpenApiResponse, ...]:
    """Get the response descriptions declared on an endpoint."""
    return tuple(getattr(endpoint, RESPONSES_ATTRIBUTE, ()))


class AddResponseDescriptionsTransformer:
    """Operation transformer that sets declared response descriptions."""

    def transform_operation(self, operation: dict[str, Any], context: OperationContext) -> None:
        responses = operation.get("responses") or {}

        for declared in get_response_descriptions(context.endpoint):
            response = responses.get(str(declared.status_code))
            if response is not None:
                response["description"] = declared.description
