"""Tests for the descriptions transformer."""

from __future__ import annotations

from fastapi.testclient import TestClient

from openapi_extensions import remove_boilerplate_prefixes
from openapi_extensions.transformers import DescriptionsTransformer, PropertyInfo, SchemaContext
from tests.models.animals import Animal
from tests.models.app import create_app


def test_schema_and_property_descriptions():
    """Test a schema's description and its properties' descriptions are transformed."""
    schema = {
        "description": "Gets the animal.",
        "properties": {
            "name": {"type": "string", "description": "Gets or sets the name of the animal."},
            "age": {"type": "integer"},
        },
    }

    DescriptionsTransformer(remove_boilerplate_prefixes).transform_schema(
        schema, SchemaContext(document_name="v1", schema_name="Animal", schema_type=Animal)
    )

    assert schema["description"] == "The animal."
    assert schema["properties"]["name"]["description"] == "The name of the animal."
    assert "description" not in schema["properties"]["age"]


def test_property_schemas_left_to_parent():
    """Test property schemas are transformed once, with their parent."""
    prop = {"type": "string", "description": "Gets the name."}
    context = SchemaContext(
        document_name="v1",
        schema_name="Animal",
        schema_type=str,
        property=PropertyInfo(Animal, "name", "name", str),
    )

    DescriptionsTransformer(remove_boilerplate_prefixes).transform_schema(prop, context)

    assert prop["description"] == "Gets the name."


def test_custom_transformations():
    """Test configured transformations replace the defaults."""

    def configure(options):
        options.description_transformations = [str.upper]
        options.add_documentation("tests.models")

    client = TestClient(create_app(configure))
    document = client.get("/openapi/v1.json").json()

    description = document["components"]["schemas"]["Animal"]["properties"]["name"]["description"]
    assert description == "GETS OR SETS THE NAME OF THE ANIMAL."


def test_no_transformations():
    """Test descriptions are kept as written without transformations."""

    def configure(options):
        options.description_transformations = []
        options.add_documentation("tests.models")

    client = TestClient(create_app(configure))
    document = client.get("/openapi/v1.json").json()

    description = document["components"]["schemas"]["Vehicle"]["properties"]["manufacturer"]["description"]
    assert description == "Gets the `manufacturer` of the vehicle."


def test_operation_summary_and_description():
    """Test an operation's summary and description are transformed once each."""
    operation = {
        "summary": "Gets or sets the `animals`.",
        "description": "Gets the `animals`.\n\nReturns every animal.",
        "parameters": [{"name": "name", "in": "query", "description": "Gets the `name`."}],
    }
    calls: list[str] = []

    def transformation(description: str) -> str:
        calls.append(description)
        return remove_boilerplate_prefixes(description.replace("`", ""))

    DescriptionsTransformer(transformation).transform_operation(operation, None)

    assert operation["summary"] == "The animals."
    assert operation["description"] == "The animals.\n\nReturns every animal."
    assert operation["parameters"][0]["description"] == "The name."
    assert len(calls) == 3


def test_documented_operation_summary():
    """Test summaries taken from docstrings are transformed."""

    def configure(options):
        options.description_transformations = [str.upper]
        options.add_documentation("tests.models")

    client = TestClient(create_app(configure))
    operation = client.get("/openapi/v1.json").json()["paths"]["/hello"]["get"]

    assert operation["summary"] == "GETS A GREETING."
    assert operation["description"].startswith("GETS A GREETING.")
