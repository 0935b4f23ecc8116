"""
Descriptions from docstrings, and transformations applied to descriptions.
"""

from __future__ import annotations

from openapi_extensions.descriptions.docstrings import Docstring, parse_docstring
from openapi_extensions.descriptions.member_names import (
    get_attribute_member_name,
    get_method_member_name,
    get_type_member_name,
)
from openapi_extensions.descriptions.service import DescriptionService, DocstringDescriptionService
from openapi_extensions.descriptions.transformations import (
    DEFAULT_TRANSFORMATIONS,
    DescriptionTransformation,
    compose_transformations,
    remove_backticks,
    remove_boilerplate_prefixes,
)

__all__ = [
    "DEFAULT_TRANSFORMATIONS",
    "DescriptionService",
    "DescriptionTransformation",
    "Docstring",
    "DocstringDescriptionService",
    "compose_transformations",
    "get_attribute_member_name",
    "get_method_member_name",
    "get_type_member_name",
    "parse_docstring",
    "remove_backticks",
    "remove_boilerplate_prefixes",
]
