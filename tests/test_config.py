"""
Tests for OpenAPI extensions options.

Tests defaults, environment overrides and example registration.
"""

from __future__ import annotations

import pytest

from openapi_extensions import OpenApiConfigurationError, OpenApiExtensionsOptions
from tests.models.animals import Cat, CatExampleProvider
from tests.models.greeting import Greeting


def test_defaults():
    """Test default options."""
    options = OpenApiExtensionsOptions()

    assert options.add_examples is False
    assert options.example_inheritance is True
    assert options.add_server_urls is True
    assert options.default_server_url is None
    assert options.serialization_contexts == []
    assert options.examples_metadata == []
    assert options.documentation_modules == []
    assert len(options.description_transformations) == 2


def test_environment_overrides(monkeypatch):
    """Test switches are read from the environment."""
    monkeypatch.setenv("OPENAPI_EXTENSIONS_ADD_EXAMPLES", "true")
    monkeypatch.setenv("OPENAPI_EXTENSIONS_ADD_SERVER_URLS", "false")
    monkeypatch.setenv("OPENAPI_EXTENSIONS_DEFAULT_SERVER_URL", "https://api.example.com")

    options = OpenApiExtensionsOptions()

    assert options.add_examples is True
    assert options.add_server_urls is False
    assert options.default_server_url == "https://api.example.com"


def test_add_example():
    """Test examples are registered for types."""
    options = OpenApiExtensionsOptions()

    result = options.add_example(Cat, CatExampleProvider).add_example(Greeting)

    assert result is options
    assert [item.example_type for item in options.examples_metadata] == [Cat, Greeting]


def test_add_example_twice():
    """Test a type can only have one registered example."""
    options = OpenApiExtensionsOptions().add_example(Cat, CatExampleProvider)

    with pytest.raises(OpenApiConfigurationError) as exc_info:
        options.add_example(Cat, CatExampleProvider)

    assert str(exc_info.value) == "An example for the type 'Cat' has already been registered."


def test_description_transformer():
    """Test transformations are composed in order."""
    options = OpenApiExtensionsOptions()
    transformer = options.get_description_transformer()

    assert transformer is not None
    assert transformer("Gets the `name` of the cat.") == "The name of the cat."

    options.description_transformations = []
    assert options.get_description_transformer() is None


def test_add_documentation():
    """Test documented modules are kept in order."""
    options = OpenApiExtensionsOptions().add_documentation("tests.models").add_documentation("todoapp")

    assert options.documentation_modules == ["tests.models", "todoapp"]
