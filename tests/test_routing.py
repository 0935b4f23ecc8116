"""
Tests for the OpenAPI document endpoints.

Tests serving documents as JSON and YAML.
"""

from __future__ import annotations

import pytest
import yaml
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from openapi_extensions import OpenApiConfigurationError, add_openapi, map_openapi, map_openapi_yaml
from openapi_extensions.routing import scrub
from tests.models.app import create_app


@pytest.fixture
def client() -> TestClient:
    """Create test client for the application without extensions configured."""
    return TestClient(create_app())


def test_yaml_document(client):
    """Test documents are served as YAML."""
    response = client.get("/openapi/v1.yaml")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/yaml")

    document = yaml.safe_load(response.text)
    assert document["info"]["title"] == "Test API"
    assert "/hello" in document["paths"]


def test_yaml_keeps_key_order(client):
    """Test YAML documents keep the order of the document's keys."""
    response = client.get("/openapi/v1.yaml")

    assert response.text.startswith("openapi: ")
    assert response.text.index("info:") < response.text.index("paths:")


def test_yaml_matches_json(client):
    """Test YAML and JSON documents describe the same API."""
    as_json = client.get("/openapi/v1.json").json()
    as_yaml = yaml.safe_load(client.get("/openapi/v1.yaml").text)

    assert as_yaml == as_json


def test_unknown_document(client):
    """Test requesting an unknown document returns 404."""
    response = client.get("/openapi/bogus.yaml")

    assert response.status_code == 404
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    assert response.text == "No OpenAPI document with the name 'bogus' was found."


def test_unknown_json_document(client):
    """Test requesting an unknown JSON document returns 404."""
    response = client.get("/openapi/bogus.json")

    assert response.status_code == 404


def test_document_endpoints_not_documented(client):
    """Test the document endpoints are not part of the documents."""
    document = client.get("/openapi/v1.json").json()

    assert not any(path.startswith("/openapi") for path in document["paths"])


def test_custom_pattern():
    """Test documents can be served from a custom route."""
    app = FastAPI()
    add_openapi(app)
    map_openapi_yaml(app, "/docs/{documentName}/openapi.yaml")

    response = TestClient(app).get("/docs/v1/openapi.yaml")

    assert response.status_code == 200
    assert yaml.safe_load(response.text)["openapi"].startswith("3.")


def test_pattern_requires_document_name():
    """Test a route pattern must contain the document name parameter."""
    app = FastAPI()

    with pytest.raises(OpenApiConfigurationError, match="documentName"):
        map_openapi(app, "/openapi.json")


def test_scrub():
    """Test bookkeeping properties are removed at any depth."""
    document = {
        "components": {
            "schemas": {
                "Animal": {"x-schema-id": "Animal", "properties": {"name": {"x-aspnetcore-id": "1"}}},
            }
        },
        "tags": [{"name": "cats", "x-schema-id": "tag"}],
    }

    assert scrub(document) == {
        "components": {"schemas": {"Animal": {"properties": {"name": {}}}}},
        "tags": [{"name": "cats"}],
    }


@pytest.mark.asyncio
async def test_yaml_document_async():
    """Test YAML documents are served to async clients."""
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/openapi/v1.yaml")

    assert response.status_code == 200
    assert "servers:\n- url: http://test\n" in response.text
