"""
OpenAPI Document Endpoints

Serves the registered OpenAPI documents of an application as JSON and YAML.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any

import structlog
import yaml
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from openapi_extensions.constants import (
    DEFAULT_OPENAPI_ROUTE,
    DEFAULT_OPENAPI_ROUTE_AS_YAML,
    DOCUMENT_NAME_PARAMETER,
    SCRUBBED_PROPERTIES,
    YAML_MEDIA_TYPE,
)
from openapi_extensions.exceptions import OpenApiConfigurationError
from openapi_extensions.extensions import get_openapi_document

logger = structlog.get_logger()

DocumentRenderer = Callable[[dict[str, Any]], Response]
Endpoint = Callable[[Request], Coroutine[Any, Any, Response]]


def scrub(value: Any) -> Any:
    """Remove internal bookkeeping properties from a document, at any depth."""
    if isinstance(value, dict):
        return {key: scrub(item) for key, item in value.items() if key not in SCRUBBED_PROPERTIES}
    if isinstance(value, list):
        return [scrub(item) for item in value]
    return value


def render_yaml(document: dict[str, Any]) -> Response:
    """Render a document as YAML, keeping the order of its keys."""
    content = yaml.safe_dump(
        scrub(document),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return Response(content=content, media_type=YAML_MEDIA_TYPE)


def render_json(document: dict[str, Any]) -> Response:
    """Render a document as JSON."""
    return JSONResponse(content=scrub(document))


def map_openapi(app: FastAPI, pattern: str = DEFAULT_OPENAPI_ROUTE) -> None:
    """
    Serve the OpenAPI documents of an application as JSON.

    Args:
        app: Application to add the endpoint to
        pattern: Route pattern containing a ``{documentName}`` parameter

    Raises:
        OpenApiConfigurationError: If the pattern has no ``{documentName}`` parameter
    """
    _map_document_route(app, pattern, render_json, name="openapi_json")


def map_openapi_yaml(app: FastAPI, pattern: str = DEFAULT_OPENAPI_ROUTE_AS_YAML) -> None:
    """
    Serve the OpenAPI documents of an application as YAML.

    Args:
        app: Application to add the endpoint to
        pattern: Route pattern containing a ``{documentName}`` parameter

    Raises:
        OpenApiConfigurationError: If the pattern has no ``{documentName}`` parameter
    """
    _map_document_route(app, pattern, render_yaml, name="openapi_yaml")


def _map_document_route(app: FastAPI, pattern: str, render: DocumentRenderer, name: str) -> None:
    if f"{{{DOCUMENT_NAME_PARAMETER}}}" not in pattern:
        raise OpenApiConfigurationError(
            f"The route pattern '{pattern}' does not define a '{DOCUMENT_NAME_PARAMETER}' parameter."
        )

    app.add_api_route(
        pattern,
        _document_endpoint(app, render),
        methods=["GET"],
        include_in_schema=False,
        name=name,
    )
    logger.debug("OpenAPI endpoint mapped", pattern=pattern, name=name)


def _document_endpoint(app: FastAPI, render: DocumentRenderer) -> Endpoint:
    async def endpoint(request: Request) -> Response:
        document_name = request.path_params[DOCUMENT_NAME_PARAMETER]
        document = await get_openapi_document(app, document_name, request)

        if document is None:
            return PlainTextResponse(
                f"No OpenAPI document with the name '{document_name}' was found.",
                status_code=404,
            )

        return render(document)

    return endpoint
