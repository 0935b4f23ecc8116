"""
OpenAPI Document Service

Builds a named OpenAPI document for a FastAPI application and runs the
registered transformers over it:

1. FastAPI generates the base document from the application's routes
2. Operation transformers run for each operation, in registration order
3. Schema transformers run for each component schema, property schemas first
4. Document transformers run for the whole document

The document is rebuilt on every call, so it reflects the request it is
served for.
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import re
import threading
from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from typing import Any, get_args, get_origin

import structlog
from fastapi import FastAPI
from fastapi import routing as fastapi_routing
from fastapi.datastructures import DefaultPlaceholder
from fastapi.dependencies.models import Dependant
from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRoute
from pydantic import BaseModel
from starlette.requests import Request

from openapi_extensions.caching import ConcurrentCache
from openapi_extensions.constants import DEFAULT_DOCUMENT_NAME
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
from openapi_extensions.typing_helpers import declared_type, get_type_hints, is_class, split_annotated

logger = structlog.get_logger()

RouteFilter = Callable[[APIRoute], bool]

# Routes compare by value and cannot be hashed, so operations are cached by
# the identity of the declared route and the path it is served under
RouteKey = tuple[int, str]

# Suffixes pydantic adds when input and output schemas of a model differ
_MODE_SUFFIXES = ("-Input", "-Output")

_INVALID_NAME_CHARACTERS = re.compile(r"[^a-zA-Z0-9.\-_]")


class OpenApiDocumentService:
    """
    Builds one named OpenAPI document for an application.

    Transformers are registered with ``add_transformer``. Setup that must wait
    until the document is first built (for example validating options) is
    registered with ``add_configurer``; configurers run once, before the
    first build.
    """

    def __init__(
        self,
        app: FastAPI,
        document_name: str = DEFAULT_DOCUMENT_NAME,
        route_filter: RouteFilter | None = None,
    ):
        """
        Initialize document service.

        Args:
            app: Application to document
            document_name: Name of the document
            route_filter: Predicate selecting the routes to include, if not all of them
        """
        self.app = app
        self.document_name = document_name
        self.route_filter = route_filter

        self.operation_transformers: list[OperationTransformer] = []
        self.schema_transformers: list[SchemaTransformer] = []
        self.document_transformers: list[DocumentTransformer] = []

        self._configurers: list[Callable[[OpenApiDocumentService], None]] = []
        self._configured = False
        self._configuration_error: Exception | None = None
        self._configure_lock = threading.Lock()

        self._operations: ConcurrentCache[RouteKey, OperationContext] = ConcurrentCache()
        self._properties: ConcurrentCache[type, dict[str, PropertyInfo]] = ConcurrentCache()

    def __repr__(self) -> str:
        return f"OpenApiDocumentService(document_name={self.document_name!r})"

    def add_transformer(self, transformer: Any) -> OpenApiDocumentService:
        """
        Register a transformer.

        A transformer implementing more than one protocol is registered for
        each of them.

        Args:
            transformer: Operation, schema and/or document transformer

        Returns:
            This service, for chaining

        Raises:
            TypeError: If the object implements no transformer protocol
        """
        registered = False

        if isinstance(transformer, OperationTransformer):
            self.operation_transformers.append(transformer)
            registered = True
        if isinstance(transformer, SchemaTransformer):
            self.schema_transformers.append(transformer)
            registered = True
        if isinstance(transformer, DocumentTransformer):
            self.document_transformers.append(transformer)
            registered = True

        if not registered:
            raise TypeError(f"{type(transformer).__qualname__} is not an OpenAPI transformer")

        logger.debug(
            "Transformer registered",
            document=self.document_name,
            transformer=type(transformer).__name__,
        )
        return self

    def add_configurer(self, configurer: Callable[[OpenApiDocumentService], None]) -> None:
        """Register setup to run once before the document is first built."""
        if self._configured:
            raise RuntimeError(f"The OpenAPI document \"{self.document_name}\" has already been built")
        self._configurers.append(configurer)

    def get_routes(self) -> list[APIRoute]:
        """Get the routes included in the document, including those of included routers."""
        return [
            route
            for route in iter_api_routes(self.app.routes)
            if route.include_in_schema and (self.route_filter is None or self.route_filter(route))
        ]

    async def get_document(self, request: Request | None = None) -> dict[str, Any]:
        """
        Build the document.

        Args:
            request: Request the document is served for, if any

        Returns:
            OpenAPI document as JSON-compatible dictionaries

        Raises:
            OpenApiConfigurationError: If the extensions of the document are misconfigured
            ExampleGenerationError: If an example provider fails
        """
        self._ensure_configured()

        routes = self.get_routes()
        document = get_openapi(
            title=self.app.title,
            version=self.app.version,
            openapi_version=self.app.openapi_version,
            summary=self.app.summary,
            description=self.app.description,
            routes=routes,
            tags=self.app.openapi_tags,
            servers=self.app.servers,
            terms_of_service=self.app.terms_of_service,
            contact=self.app.contact,
            license_info=self.app.license_info,
            separate_input_output_schemas=self.app.separate_input_output_schemas,
        )

        operations = 0
        for route in routes:
            path_item = document.get("paths", {}).get(route.path_format, {})
            for method in sorted(route.methods):
                operation = path_item.get(method.lower())
                if operation is None:
                    continue

                context = self._get_operation_context(route, method)
                for transformer in self.operation_transformers:
                    transformer.transform_operation(operation, context)

                operations += 1
                await asyncio.sleep(0)

        schemas = document.get("components", {}).get("schemas", {})
        if schemas and self.schema_transformers:
            self._transform_schemas(schemas, routes)

        document_context = DocumentContext(document_name=self.document_name, request=request)
        for transformer in self.document_transformers:
            transformer.transform_document(document, document_context)

        logger.info(
            "OpenAPI document built",
            document=self.document_name,
            operations=operations,
            schemas=len(schemas),
        )
        return document

    def _ensure_configured(self) -> None:
        if self._configured:
            if self._configuration_error is not None:
                raise self._configuration_error
            return

        with self._configure_lock:
            # Double-check inside lock
            if self._configured:
                if self._configuration_error is not None:
                    raise self._configuration_error
                return

            # Configurers run once, a failure is reported again on every build
            try:
                for configurer in self._configurers:
                    configurer(self)
            except Exception as e:
                self._configuration_error = e
                raise
            finally:
                self._configured = True

            logger.debug(
                "OpenAPI document configured",
                document=self.document_name,
                operation_transformers=len(self.operation_transformers),
                schema_transformers=len(self.schema_transformers),
                document_transformers=len(self.document_transformers),
            )

    def _get_operation_context(self, route: APIRoute, method: str) -> OperationContext:
        return dataclasses.replace(self._get_route_context(route), method=method)

    def _get_route_context(self, route: APIRoute) -> OperationContext:
        return self._operations.get_or_add(route_key(route), lambda _: self._create_operation_context(route))

    def _create_operation_context(self, route: APIRoute) -> OperationContext:
        parameters, body = collect_parameters(route)
        return OperationContext(
            document_name=self.document_name,
            route=route,
            method="",
            parameters=parameters,
            body=body,
            responses=collect_responses(route),
        )

    def _transform_schemas(self, schemas: dict[str, Any], routes: list[APIRoute]) -> None:
        contexts = [self._get_route_context(route) for route in routes]
        schema_types = get_schema_types(contexts)

        for name, schema in schemas.items():
            schema_type = schema_types.get(_strip_mode_suffix(name))

            properties = schema.get("properties") or {}
            if properties and is_class(schema_type):
                infos = self._properties.get_or_add(schema_type, get_property_infos)
                for json_name, property_schema in properties.items():
                    info = infos.get(json_name)
                    if info is None or not isinstance(property_schema, dict):
                        continue

                    context = SchemaContext(
                        document_name=self.document_name,
                        schema_name=name,
                        schema_type=info.property_type,
                        property=info,
                        parent_schema=schema,
                    )
                    for transformer in self.schema_transformers:
                        transformer.transform_schema(property_schema, context)

            context = SchemaContext(
                document_name=self.document_name,
                schema_name=name,
                schema_type=schema_type,
            )
            for transformer in self.schema_transformers:
                transformer.transform_schema(schema, context)


def iter_api_routes(routes: Iterable[Any]) -> Iterator[APIRoute]:
    """
    Iterate the API routes of an application, descending into included routers.

    FastAPI versions that keep included routers as a single route expose
    ``iter_route_contexts``; the contexts it yields carry the effective path,
    tags and dependencies of the route and are used in its place.

    Args:
        routes: Routes of an application or router

    Yields:
        API routes, or route contexts standing in for them
    """
    iter_route_contexts = getattr(fastapi_routing, "iter_route_contexts", None)
    if iter_route_contexts is None:
        yield from (route for route in routes if isinstance(route, APIRoute))
        return

    for route_context in iter_route_contexts(list(routes)):
        if isinstance(route_context.original_route, APIRoute):
            yield route_context


def route_key(route: APIRoute) -> RouteKey:
    """Get the key identifying a route in the operation cache."""
    original_route = getattr(route, "original_route", route)
    return id(original_route), route.path_format


def collect_parameters(route: APIRoute) -> tuple[tuple[ParameterInfo, ...], ParameterInfo | None]:
    """
    Collect the parameters and the request body parameter of a route.

    Parameters of dependencies are included. Parameters bound from a model
    (for example ``Annotated[FilterParams, Query()]``) are flattened into one
    parameter per model field. The request body is only reported for routes
    with a single, non-embedded body parameter.

    Args:
        route: Route to inspect

    Returns:
        Tuple of the parameters and the request body parameter, if any
    """
    parameters: list[ParameterInfo] = []
    body_fields: list[tuple[Any, Any, dict[str, Any]]] = []

    for dependant in _walk_dependants(route.dependant):
        owner = dependant.call
        hints = _get_call_hints(owner)

        fields = (
            (ParameterLocation.PATH, dependant.path_params),
            (ParameterLocation.QUERY, dependant.query_params),
            (ParameterLocation.HEADER, dependant.header_params),
            (ParameterLocation.COOKIE, dependant.cookie_params),
        )
        for location, params in fields:
            for field in params:
                parameters.extend(_expand_field(field, location, owner, hints))

        body_fields.extend((field, owner, hints) for field in dependant.body_params)

    return tuple(parameters), _body_parameter(body_fields)


def collect_responses(route: APIRoute) -> tuple[ResponseType, ...]:
    """
    Collect the responses of a route that declare a body type.

    Args:
        route: Route to inspect

    Returns:
        Declared responses, the route's own response first
    """
    response_class = route.response_class
    if isinstance(response_class, DefaultPlaceholder):
        response_class = response_class.value
    media_type = getattr(response_class, "media_type", None) or "application/json"

    responses: list[ResponseType] = []

    if route.response_model is not None:
        status_code = str(route.status_code) if route.status_code is not None else "200"
        responses.append(ResponseType(status_code, media_type, declared_type(route.response_model)))

    for status_code, response in (route.responses or {}).items():
        model = response.get("model") if isinstance(response, dict) else None
        if model is not None:
            responses.append(ResponseType(str(status_code), media_type, declared_type(model)))

    return tuple(responses)


def get_schema_types(operations: Iterable[OperationContext]) -> dict[str, Any]:
    """
    Map component schema names to the types they are generated from.

    Models, dataclasses and enums reachable from the routes' parameters,
    request bodies and responses are mapped under the names pydantic gives
    their schemas.

    Args:
        operations: Operations in the document

    Returns:
        Mapping of schema name to type
    """
    found: list[type] = []
    seen: set[Any] = set()

    def visit(annotation: Any) -> None:
        annotation, _ = split_annotated(annotation)

        if get_origin(annotation) is not None:
            for argument in get_args(annotation):
                visit(argument)
            return

        if not isinstance(annotation, type) or annotation in seen:
            return
        seen.add(annotation)

        if issubclass(annotation, Enum):
            found.append(annotation)
        elif issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation):
            found.append(annotation)
            for info in get_property_infos(annotation).values():
                visit(info.annotation)

    for operation in operations:
        for parameter in operation.parameters:
            visit(parameter.model or parameter.annotation)
        if operation.body is not None:
            visit(operation.body.annotation)
        for response in operation.responses:
            visit(response.response_type)

    schema_types: dict[str, Any] = {}
    for schema_type in found:
        for name in _schema_names(schema_type):
            schema_types.setdefault(name, schema_type)

    return schema_types


def get_property_infos(schema_type: type) -> dict[str, PropertyInfo]:
    """
    Get the properties of a model or dataclass, keyed by their schema name.

    Args:
        schema_type: Pydantic model or dataclass

    Returns:
        Mapping of property name in the schema to property information
    """
    infos: dict[str, PropertyInfo] = {}

    if issubclass(schema_type, BaseModel):
        for name, field in schema_type.model_fields.items():
            info = PropertyInfo(schema_type, name, name, field.annotation)
            keys = (field.serialization_alias, field.alias, field.validation_alias, name)
            for key in keys:
                if isinstance(key, str):
                    infos.setdefault(key, dataclasses.replace(info, json_name=key))

        for name, computed in schema_type.model_computed_fields.items():
            key = computed.alias or name
            infos.setdefault(key, PropertyInfo(schema_type, name, key, computed.return_type))

    elif dataclasses.is_dataclass(schema_type):
        hints = get_type_hints(schema_type)
        for field in dataclasses.fields(schema_type):
            infos[field.name] = PropertyInfo(schema_type, field.name, field.name, hints.get(field.name, field.type))

    return infos


def _walk_dependants(dependant: Dependant) -> Iterator[Dependant]:
    seen: set[int] = set()
    pending = [dependant]

    while pending:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))

        yield current
        pending.extend(current.dependencies)


def _expand_field(
    field: Any,
    location: ParameterLocation,
    owner: Any,
    hints: dict[str, Any],
) -> Iterator[ParameterInfo]:
    annotation = hints.get(field.name, field.field_info.annotation)
    field_type = declared_type(annotation)

    if location is not ParameterLocation.PATH and is_class(field_type) and issubclass(field_type, BaseModel):
        model_hints = get_type_hints(field_type)
        for name, model_field in field_type.model_fields.items():
            yield ParameterInfo(
                name=name,
                alias=model_field.alias or name,
                location=location,
                annotation=model_hints.get(name, model_field.annotation),
                owner=field_type,
                model=field_type,
                declared_by=owner,
            )
        return

    yield ParameterInfo(
        name=field.name,
        alias=field.alias,
        location=location,
        annotation=annotation,
        owner=owner,
    )


def _schema_names(schema_type: type) -> list[str]:
    qualified = f"{schema_type.__module__}__{schema_type.__qualname__}".replace(".", "__")
    names = [
        schema_type.__name__,
        _INVALID_NAME_CHARACTERS.sub("_", schema_type.__name__),
        _INVALID_NAME_CHARACTERS.sub("_", qualified),
    ]
    return list(dict.fromkeys(names))


def _strip_mode_suffix(name: str) -> str:
    for suffix in _MODE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def _get_call_hints(call: Any) -> dict[str, Any]:
    if call is None:
        return {}
    # Class dependencies are called with the parameters of their initializer
    if inspect.isclass(call):
        return get_type_hints(call.__init__)
    return get_type_hints(call)


def _body_parameter(body_fields: list[tuple[Any, Any, dict[str, Any]]]) -> ParameterInfo | None:
    if len(body_fields) != 1:
        return None

    field, owner, hints = body_fields[0]
    # Embedded bodies are wrapped in a generated model
    if getattr(field.field_info, "embed", None):
        return None

    return ParameterInfo(
        name=field.name,
        alias=field.alias,
        location=ParameterLocation.BODY,
        annotation=hints.get(field.name, field.field_info.annotation),
        owner=owner,
    )
