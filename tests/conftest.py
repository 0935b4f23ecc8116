"""Shared fixtures for OpenAPI extensions tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from openapi_extensions import JsonSerializerContext, OpenApiExtensionsOptions
from tests.models.animals import Animal, Cat, Colour, Dog, Spot
from tests.models.app import create_app
from tests.models.greeting import Greeting, ProblemDetails
from tests.models.vehicles import Car, CarType, Motorcycle, Vehicle

MODEL_TYPES = (
    Animal,
    Cat,
    Colour,
    Dog,
    Spot,
    Greeting,
    ProblemDetails,
    Car,
    CarType,
    Motorcycle,
    Vehicle,
)


@pytest.fixture
def serializer_context() -> JsonSerializerContext:
    """Create a serialization context that knows every test model."""
    return JsonSerializerContext(MODEL_TYPES)


@pytest.fixture
def app_factory(serializer_context) -> Callable[..., FastAPI]:
    """Create test applications with examples and docstring documentation enabled."""

    def factory(configure: Callable[[OpenApiExtensionsOptions], None] | None = None) -> FastAPI:
        def configure_options(options: OpenApiExtensionsOptions) -> None:
            options.add_examples = True
            options.serialization_contexts.append(serializer_context)
            options.add_documentation("tests.models")
            if configure is not None:
                configure(options)

        return create_app(configure_options)

    return factory


@pytest.fixture
def client(app_factory) -> TestClient:
    """Create test client for the fully configured application."""
    return TestClient(app_factory())


@pytest.fixture
def document(client) -> dict:
    """Get the fully configured OpenAPI document."""
    response = client.get("/openapi/v1.json")
    assert response.status_code == 200
    return response.json()
