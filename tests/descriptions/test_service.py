"""
Tests for the docstring description service.

Tests indexing of classes, functions, fields and nested modules.
"""

from __future__ import annotations

import pytest

from openapi_extensions import DocstringDescriptionService
from openapi_extensions.descriptions.member_names import (
    get_attribute_member_name,
    get_method_member_name,
    get_type_member_name,
)
from tests.models import animals, app, vehicles


@pytest.fixture
def service() -> DocstringDescriptionService:
    """Create description service for the test models package."""
    return DocstringDescriptionService("tests.models")


class TestDocstringDescriptionService:
    """Test description lookups."""

    def test_type_description(self, service):
        """Test class docstrings describe types."""
        assert service.get_description(get_type_member_name(animals.Dog)) == "A dog."
        assert service.get_description(get_type_member_name(vehicles.CarType)) == "The body style of a car."

    def test_dataclass_without_docstring(self, service):
        """Test generated dataclass docstrings are not descriptions."""
        assert service.get_description(get_type_member_name(vehicles.Vehicle)) is None

    def test_field_description(self, service):
        """Test attribute docstrings describe fields."""
        member_name = get_attribute_member_name(animals.Cat, "name")

        assert service.get_description(member_name) == "Gets or sets the name of the animal."

    def test_dataclass_field_description(self, service):
        """Test attribute docstrings describe dataclass fields."""
        member_name = get_attribute_member_name(vehicles.Motorcycle, "has_sidecar")

        assert service.get_description(member_name) == (
            "Gets a value indicating whether the motorcycle has a sidecar."
        )

    def test_function_sections(self, service):
        """Test endpoint docstrings provide summary, remarks and parameters."""
        member_name = get_method_member_name(app.hello)

        assert service.get_description(member_name) == "Gets a greeting."
        assert service.get_description(member_name, section="remarks") == (
            "Returns the greeting ``Hello, World!``."
        )

    def test_parameter_description(self, service):
        """Test Args entries describe parameters."""
        member_name = get_method_member_name(app.get_animal)

        assert service.get_description(member_name, "name") == "The name of the animal to get."
        assert service.get_description(member_name, "missing") is None

    def test_unknown_member(self, service):
        """Test unknown members have no description."""
        assert service.get_description("T:tests.models.animals.Unicorn") is None

    def test_submodule_service(self):
        """Test a single module can be documented."""
        service = DocstringDescriptionService(animals)

        assert service.get_description(get_type_member_name(animals.Dog)) == "A dog."
        assert service.get_description(get_type_member_name(vehicles.CarType)) is None


class TestIncludes:
    """Test membership of the documented package."""

    def test_includes_package_members(self, service):
        """Test objects of the package and its submodules are included."""
        assert service.includes(animals.Cat)
        assert service.includes(app.find_cats)
        assert service.includes("tests.models")

    def test_excludes_other_modules(self, service):
        """Test objects of other modules are excluded."""
        assert not service.includes(DocstringDescriptionService)
        assert not service.includes("tests.modelsx")
        assert not service.includes(42)
