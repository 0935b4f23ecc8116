"""Tests for description transformations."""

from __future__ import annotations

import pytest

from openapi_extensions import remove_backticks, remove_boilerplate_prefixes
from openapi_extensions.descriptions.transformations import compose_transformations


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Gets or sets the name of the animal.", "The name of the animal."),
        ("Gets the number of wheels of the vehicle.", "The number of wheels of the vehicle."),
        (
            "Gets a value indicating whether the motorcycle has a sidecar.",
            "Whether the motorcycle has a sidecar.",
        ),
        (
            "Gets or sets a value indicating whether the item is complete.",
            "Whether the item is complete.",
        ),
        ("The colour of an animal.", "The colour of an animal."),
        ("", ""),
    ],
)
def test_remove_boilerplate_prefixes(description, expected):
    """Test getter and setter boilerplate is removed."""
    assert remove_boilerplate_prefixes(description) == expected


def test_remove_backticks():
    """Test backticks are removed."""
    assert remove_backticks("Gets the `manufacturer` of the vehicle.") == "Gets the manufacturer of the vehicle."


def test_compose_applies_in_order():
    """Test composed transformations are applied left-to-right."""
    transform = compose_transformations([remove_backticks, remove_boilerplate_prefixes])

    assert transform is not None
    assert transform("Gets the `manufacturer` of the vehicle.") == "The manufacturer of the vehicle."


def test_compose_nothing():
    """Test composing no transformations gives no transformation."""
    assert compose_transformations([]) is None
    assert compose_transformations([str.upper]) is str.upper
