"""
Servers Transformer

Sets the server URL of an OpenAPI document from the request it is served for,
honouring the X-Forwarded-Proto and X-Forwarded-Host headers of a reverse
proxy.
"""

from __future__ import annotations

from typing import Any

from starlette.requests import Request

from openapi_extensions.transformers.base import DocumentContext

FORWARDED_PROTO_HEADER = "x-forwarded-proto"
FORWARDED_HOST_HEADER = "x-forwarded-host"


class AddServersTransformer:
    """Document transformer that adds the server URL."""

    def __init__(self, default_server_url: str | None = None):
        """
        Initialize servers transformer.

        Args:
            default_server_url: URL to use when the document is built outside a request
        """
        self.default_server_url = default_server_url

    def transform_document(self, document: dict[str, Any], context: DocumentContext) -> None:
        url = self.get_server_url(context.request)
        if url:
            document["servers"] = [{"url": url}]

    def get_server_url(self, request: Request | None) -> str | None:
        """
        Get the server URL for a request.

        Args:
            request: Request the document is served for, if any

        Returns:
            Server URL without a trailing slash, or the default server URL
        """
        if request is None:
            return self.default_server_url

        scheme = _first_header(request, FORWARDED_PROTO_HEADER) or request.url.scheme
        host = _first_header(request, FORWARDED_HOST_HEADER) or request.url.netloc

        return f"{scheme}://{host}".rstrip("/")


def _first_header(request: Request, name: str) -> str | None:
    value = request.headers.get(name)
    if not value:
        return None
    # Proxies append to the header, the first value is the client-facing one
    return value.split(",")[0].strip() or None
