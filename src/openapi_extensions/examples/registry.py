"""
Example Registry

Document-wide, explicitly configured type to example metadata associations.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

import structlog

from openapi_extensions.examples.metadata import OpenApiExample
from openapi_extensions.exceptions import OpenApiConfigurationError
from openapi_extensions.typing_helpers import is_class

logger = structlog.get_logger()

# Examples registered for builtin scalars do not apply to their subclasses
SCALAR_TYPES: frozenset[type] = frozenset({bool, int, float, complex, str, bytes})


class ExampleRegistry:
    """
    Mapping from a declared type to its example metadata.

    Filled from configuration, then only read. Each type may be registered
    only once.
    """

    def __init__(self, metadata: Iterable[OpenApiExample] = ()):
        """
        Initialize registry.

        Args:
            metadata: Configured example metadata

        Raises:
            OpenApiConfigurationError: If a type is registered more than once
        """
        self._entries: dict[Any, OpenApiExample] = {}
        self._examples: Mapping[Any, OpenApiExample] = MappingProxyType(self._entries)

        for item in metadata:
            self.register(item)

    def __len__(self) -> int:
        return len(self._examples)

    def __contains__(self, example_type: object) -> bool:
        return example_type in self._examples

    def register(self, metadata: OpenApiExample) -> None:
        """
        Register the example metadata for its type.

        Args:
            metadata: Example metadata

        Raises:
            OpenApiConfigurationError: If the type already has registered metadata
        """
        if metadata.example_type in self._entries:
            name = getattr(metadata.example_type, "__qualname__", repr(metadata.example_type))
            logger.error("Duplicate example registration", example_type=name)
            raise OpenApiConfigurationError(
                f"An example for the type '{name}' has already been registered."
            )
        self._entries[metadata.example_type] = metadata

    def resolve(self, example_type: Any, include_base_types: bool = True) -> OpenApiExample | None:
        """
        Resolve the example metadata registered for a type.

        Args:
            example_type: Type to resolve
            include_base_types: Walk the type's bases, most-derived first,
                when the type itself is not registered. The walk stops at
                builtin scalar types.

        Returns:
            Registered metadata, or None
        """
        metadata = self._examples.get(example_type)
        if metadata is not None or not include_base_types or not is_class(example_type):
            return metadata

        for base in example_type.__mro__[1:]:
            if base in SCALAR_TYPES:
                break
            metadata = self._examples.get(base)
            if metadata is not None:
                return metadata

        return None
