"""
OpenAPI Extensions Registration

Registers named OpenAPI documents on a FastAPI application and the
extensions that enrich them.

Example:
    >>> app = FastAPI()
    >>> add_openapi(app)
    >>> add_openapi_extensions(app, configure=lambda options: options.add_documentation("todoapp"))
    >>> map_openapi_yaml(app)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from fastapi import FastAPI
from starlette.requests import Request

from openapi_extensions.config import OpenApiExtensionsOptions
from openapi_extensions.constants import DEFAULT_DOCUMENT_NAME
from openapi_extensions.descriptions.service import DocstringDescriptionService
from openapi_extensions.document import OpenApiDocumentService, RouteFilter
from openapi_extensions.examples.registry import ExampleRegistry
from openapi_extensions.examples.serialization import combine_contexts
from openapi_extensions.exceptions import OpenApiConfigurationError
from openapi_extensions.transformers.descriptions import DescriptionsTransformer
from openapi_extensions.transformers.documentation import (
    AddOperationDocumentationTransformer,
    AddSchemaDocumentationTransformer,
)
from openapi_extensions.transformers.examples import AddExamplesTransformer
from openapi_extensions.transformers.parameters import AddParameterDescriptionsTransformer
from openapi_extensions.transformers.responses import AddResponseDescriptionsTransformer
from openapi_extensions.transformers.servers import AddServersTransformer

logger = structlog.get_logger()

ConfigureOptions = Callable[[OpenApiExtensionsOptions], None]


def get_document_services(app: FastAPI) -> dict[str, OpenApiDocumentService]:
    """Get the OpenAPI documents registered on an application, by name."""
    if not hasattr(app.state, "openapi_documents"):
        app.state.openapi_documents = {}
    return app.state.openapi_documents


def add_openapi(
    app: FastAPI,
    document_name: str = DEFAULT_DOCUMENT_NAME,
    route_filter: RouteFilter | None = None,
) -> OpenApiDocumentService:
    """
    Register a named OpenAPI document for an application.

    Args:
        app: Application to document
        document_name: Name of the document
        route_filter: Predicate selecting the routes to include, if not all of them

    Returns:
        Service building the document

    Raises:
        OpenApiConfigurationError: If a document with the name is already registered
    """
    services = get_document_services(app)
    if document_name in services:
        raise OpenApiConfigurationError(
            f"An OpenAPI document with the name \"{document_name}\" has already been registered.",
            document_name=document_name,
        )

    service = OpenApiDocumentService(app, document_name=document_name, route_filter=route_filter)
    services[document_name] = service

    logger.info("OpenAPI document registered", document=document_name)
    return service


def add_openapi_extensions(
    app: FastAPI,
    document_name: str = DEFAULT_DOCUMENT_NAME,
    configure: ConfigureOptions | None = None,
) -> OpenApiExtensionsOptions:
    """
    Register the OpenAPI extensions for a named document.

    The document is registered if it is not already. ``configure`` is called
    with the options, and the transformers are created, when the document is
    first built.

    Args:
        app: Application the document belongs to
        document_name: Name of the document
        configure: Callback configuring the options

    Returns:
        Options of the extensions for the document
    """
    service = get_document_services(app).get(document_name) or add_openapi(app, document_name)
    options = OpenApiExtensionsOptions()

    def configurer(document: OpenApiDocumentService) -> None:
        if configure is not None:
            configure(options)
        _add_transformers(document, options)

    service.add_configurer(configurer)
    return options


async def get_openapi_document(
    app: FastAPI,
    document_name: str = DEFAULT_DOCUMENT_NAME,
    request: Request | None = None,
) -> dict[str, Any] | None:
    """
    Build a named OpenAPI document.

    Args:
        app: Application the document belongs to
        document_name: Name of the document
        request: Request the document is served for, if any

    Returns:
        The document, or None if no document with the name is registered
    """
    service = get_document_services(app).get(document_name)
    if service is None:
        logger.debug("OpenAPI document not found", document=document_name)
        return None

    return await service.get_document(request)


def _add_transformers(document: OpenApiDocumentService, options: OpenApiExtensionsOptions) -> None:
    if options.add_examples and not options.serialization_contexts:
        logger.error("No serialization context configured", document=document.document_name)
        raise OpenApiConfigurationError(
            "No serialization context has been configured on the OpenApiExtensionsOptions "
            f"instance for the OpenAPI document \"{document.document_name}\".",
            document_name=document.document_name,
        )

    transformers: list[Any] = [
        AddParameterDescriptionsTransformer(),
        AddResponseDescriptionsTransformer(),
    ]

    if options.add_server_urls:
        transformers.append(AddServersTransformer(options.default_server_url))

    if options.add_examples:
        transformers.append(
            AddExamplesTransformer(
                ExampleRegistry(options.examples_metadata),
                combine_contexts(options.serialization_contexts),
                include_base_types=options.example_inheritance,
            )
        )

    for module in options.documentation_modules:
        service = DocstringDescriptionService(module)
        transformers.append(AddOperationDocumentationTransformer(service))
        transformers.append(AddSchemaDocumentationTransformer(service))

    if (transformation := options.get_description_transformer()) is not None:
        transformers.append(DescriptionsTransformer(transformation))

    for transformer in transformers:
        document.add_transformer(transformer)

    logger.debug(
        "OpenAPI extensions configured",
        document=document.document_name,
        examples=options.add_examples,
        server_urls=options.add_server_urls,
        documentation_modules=len(options.documentation_modules),
    )
