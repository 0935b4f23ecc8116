"""
Tests for the OpenAPI document service.

Tests transformer registration, the transformation pipeline and the
collection of parameters, responses and schema types from routes.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import APIRouter, FastAPI
from fastapi.routing import APIRoute

from openapi_extensions import OpenApiDocumentService
from openapi_extensions.document import (
    collect_parameters,
    collect_responses,
    get_property_infos,
    get_schema_types,
    iter_api_routes,
    route_key,
)
from openapi_extensions.transformers import (
    DocumentContext,
    OperationContext,
    ParameterLocation,
    SchemaContext,
)
from tests.models.animals import Animal, Cat, Colour, Spot
from tests.models.app import VehicleFilter, router
from tests.models.greeting import Greeting, ProblemDetails
from tests.models.vehicles import Car, CarType, Vehicle


class RecordingTransformer:
    """Records every call it receives."""

    def __init__(self) -> None:
        self.operations: list[OperationContext] = []
        self.schemas: list[SchemaContext] = []
        self.documents: list[DocumentContext] = []

    def transform_operation(self, operation: dict[str, Any], context: OperationContext) -> None:
        operation["x-visited"] = True
        self.operations.append(context)

    def transform_schema(self, schema: dict[str, Any], context: SchemaContext) -> None:
        self.schemas.append(context)

    def transform_document(self, document: dict[str, Any], context: DocumentContext) -> None:
        document["x-transformed"] = context.document_name
        self.documents.append(context)


@pytest.fixture
def app() -> FastAPI:
    """Create application with the test routes."""
    app = FastAPI(title="Test API", version="1.0.0")
    app.include_router(router)
    return app


def _route(app: FastAPI, path: str, method: str = "GET") -> APIRoute:
    return next(
        route
        for route in iter_api_routes(app.routes)
        if route.path == path and method in route.methods
    )


class TestTransformerRegistration:
    """Test registering transformers."""

    def test_registered_for_each_protocol(self, app):
        """Test a transformer implementing several protocols is registered for each."""
        service = OpenApiDocumentService(app)
        transformer = RecordingTransformer()

        service.add_transformer(transformer)

        assert service.operation_transformers == [transformer]
        assert service.schema_transformers == [transformer]
        assert service.document_transformers == [transformer]

    def test_not_a_transformer(self, app):
        """Test objects implementing no protocol are rejected."""
        service = OpenApiDocumentService(app)

        with pytest.raises(TypeError, match="not an OpenAPI transformer"):
            service.add_transformer(object())

    @pytest.mark.asyncio
    async def test_configurers_run_once(self, app):
        """Test configurers run once, before the first build."""
        service = OpenApiDocumentService(app)
        calls: list[OpenApiDocumentService] = []
        service.add_configurer(calls.append)

        await service.get_document()
        await service.get_document()

        assert calls == [service]
        with pytest.raises(RuntimeError, match="already been built"):
            service.add_configurer(calls.append)

    @pytest.mark.asyncio
    async def test_failed_configuration_is_not_repeated(self, app):
        """Test a failing configurer does not re-run earlier configurers on the next build."""
        service = OpenApiDocumentService(app)
        calls: list[str] = []

        def register(service: OpenApiDocumentService) -> None:
            calls.append("register")
            service.add_transformer(RecordingTransformer())

        def fail(service: OpenApiDocumentService) -> None:
            calls.append("fail")
            raise ValueError("Misconfigured")

        service.add_configurer(register)
        service.add_configurer(fail)

        with pytest.raises(ValueError, match="Misconfigured"):
            await service.get_document()
        with pytest.raises(ValueError, match="Misconfigured"):
            await service.get_document()

        assert calls == ["register", "fail"]
        assert len(service.operation_transformers) == 1


class TestGetDocument:
    """Test building documents."""

    @pytest.mark.asyncio
    async def test_pipeline(self, app):
        """Test operation, schema and document transformers all run."""
        service = OpenApiDocumentService(app, document_name="internal")
        transformer = RecordingTransformer()
        service.add_transformer(transformer)

        document = await service.get_document()

        assert document["info"] == {"title": "Test API", "version": "1.0.0"}
        assert document["paths"]["/hello"]["get"]["x-visited"] is True
        assert document["x-transformed"] == "internal"
        assert {context.method for context in transformer.operations} == {"GET", "POST"}
        assert all(context.document_name == "internal" for context in transformer.operations)

    @pytest.mark.asyncio
    async def test_property_schemas_before_parent(self, app):
        """Test property schemas are transformed before the schema that declares them."""
        service = OpenApiDocumentService(app)
        transformer = RecordingTransformer()
        service.add_transformer(transformer)

        await service.get_document()

        animal = [context for context in transformer.schemas if context.schema_name == "Animal"]
        assert animal[0].property is not None
        assert animal[0].property.attribute == "name"
        assert animal[0].parent_schema is not None
        assert animal[-1].property is None
        assert animal[-1].schema_type is Animal

    @pytest.mark.asyncio
    async def test_route_filter(self, app):
        """Test only the routes accepted by the filter are documented."""
        service = OpenApiDocumentService(app, route_filter=lambda route: route.path.startswith("/cats"))

        document = await service.get_document()

        assert set(document["paths"]) == {"/cats"}

    @pytest.mark.asyncio
    async def test_routes_declared_on_app(self):
        """Test routes declared directly on the application are transformed."""
        app = FastAPI()

        @app.get("/direct")
        async def direct() -> str:
            return "direct"

        service = OpenApiDocumentService(app)
        transformer = RecordingTransformer()
        service.add_transformer(transformer)

        document = await service.get_document()
        await service.get_document()

        assert document["paths"]["/direct"]["get"]["x-visited"] is True
        assert len(transformer.operations) == 2
        assert len(service._operations) == 1

    @pytest.mark.asyncio
    async def test_routes_of_included_routers(self):
        """Test routes of included routers are documented under their prefix."""
        app = FastAPI()
        inner = APIRouter()
        outer = APIRouter()

        @inner.get("/routed")
        async def routed() -> str:
            return "routed"

        @app.get("/direct")
        async def direct() -> str:
            return "direct"

        outer.include_router(inner, prefix="/inner")
        app.include_router(outer, prefix="/outer")

        service = OpenApiDocumentService(app)
        transformer = RecordingTransformer()
        service.add_transformer(transformer)

        document = await service.get_document()

        assert set(document["paths"]) == {"/direct", "/outer/inner/routed"}
        assert document["paths"]["/outer/inner/routed"]["get"]["x-visited"] is True
        assert {context.route.path_format for context in transformer.operations} == {
            "/direct",
            "/outer/inner/routed",
        }

    def test_route_key_is_stable(self, app):
        """Test the same route gets the same key each time routes are listed."""
        first = {route_key(route) for route in iter_api_routes(app.routes)}
        second = {route_key(route) for route in iter_api_routes(app.routes)}

        assert first == second
        assert len(first) == len(list(iter_api_routes(app.routes)))

    @pytest.mark.asyncio
    async def test_document_is_rebuilt(self, app):
        """Test every call builds a new document."""
        service = OpenApiDocumentService(app)

        first = await service.get_document()
        second = await service.get_document()

        assert first == second
        assert first is not second


class TestCollectParameters:
    """Test collecting parameters from routes."""

    def test_path_and_query_parameters(self, app):
        """Test path and query parameters are collected with their annotations."""
        parameters, body = collect_parameters(_route(app, "/cats"))

        assert [(p.name, p.location) for p in parameters] == [
            ("colour", ParameterLocation.QUERY),
            ("other", ParameterLocation.QUERY),
            ("limit", ParameterLocation.QUERY),
        ]
        assert parameters[1].parameter_type is Colour
        assert body is None

    def test_request_body(self, app):
        """Test a single body parameter is the request body."""
        parameters, body = collect_parameters(_route(app, "/cats", "POST"))

        assert parameters == ()
        assert body is not None
        assert body.location is ParameterLocation.BODY
        assert body.parameter_type is Cat

    def test_model_parameters_are_flattened(self, app):
        """Test parameters bound from a model become one parameter per field."""
        parameters, _ = collect_parameters(_route(app, "/vehicles"))

        assert [p.name for p in parameters] == ["manufacturer", "wheels"]
        assert all(p.model is VehicleFilter for p in parameters)


class TestCollectResponses:
    """Test collecting responses from routes."""

    def test_route_and_additional_responses(self, app):
        """Test the route's response comes first, then additional responses with models."""
        responses = collect_responses(_route(app, "/hello"))

        assert [(r.status_code, r.media_type, r.response_type) for r in responses] == [
            ("200", "application/json", Greeting),
            ("500", "application/json", ProblemDetails),
        ]

    def test_status_code(self, app):
        """Test the route's status code is used."""
        responses = collect_responses(_route(app, "/cats", "POST"))

        assert responses[0].status_code == "201"


class TestSchemaTypes:
    """Test mapping schema names to types."""

    def test_reachable_types(self, app):
        """Test models, dataclasses and enums reachable from routes are mapped."""
        service = OpenApiDocumentService(app)
        contexts = [service._create_operation_context(route) for route in service.get_routes()]

        schema_types = get_schema_types(contexts)

        assert schema_types["Animal"] is Animal
        assert schema_types["Spot"] is Spot
        assert schema_types["Colour"] is Colour
        assert schema_types["Car"] is Car
        assert schema_types["CarType"] is CarType
        assert schema_types["Vehicle"] is Vehicle

    def test_property_infos_by_alias(self):
        """Test model properties are keyed by their schema names."""
        infos = get_property_infos(Greeting)

        assert infos["text"].attribute == "text"
        assert infos["text"].property_type is str

    def test_dataclass_property_infos(self):
        """Test dataclass fields are properties, including inherited ones."""
        infos = get_property_infos(Car)

        assert list(infos) == ["wheels", "manufacturer", "type"]
        assert infos["type"].property_type is CarType
