"""
Example Serialization

Serialization contexts convert typed example values into JSON-compatible
values for a known, closed set of types using pydantic type adapters.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from types import UnionType
from typing import Any, Protocol, Union, get_args, get_origin, runtime_checkable

from pydantic import TypeAdapter

from openapi_extensions.exceptions import ExampleGenerationError
from openapi_extensions.typing_helpers import split_annotated

# JSON scalars every context can serialize
PRIMITIVE_TYPES: frozenset[type] = frozenset({str, int, float, bool, type(None)})

_CONTAINER_ORIGINS: frozenset[Any] = frozenset({list, tuple, set, frozenset, dict})


@runtime_checkable
class SerializationContext(Protocol):
    """Converts values of the types it knows into JSON-compatible values."""

    def can_serialize(self, value_type: Any) -> bool:
        """Check if the context knows how to serialize the type."""
        ...

    def serialize(self, value: Any, value_type: Any) -> Any:
        """Serialize a value as the given declared type."""
        ...


class JsonSerializerContext:
    """
    Serialization context for an explicit set of types.

    Values are dumped in JSON mode through a pydantic ``TypeAdapter`` for the
    declared type, so subclass instances are serialized with the declared
    type's fields only. Containers (``list[T]``, ``dict[str, T]``, ...) and
    unions are known when all of their arguments are known; JSON scalars are
    always known.
    """

    def __init__(
        self,
        types: Iterable[Any],
        *,
        by_alias: bool = True,
        exclude_none: bool = False,
    ):
        """
        Initialize serialization context.

        Args:
            types: Types this context can serialize
            by_alias: Serialize using field aliases (e.g. camelCase alias generators)
            exclude_none: Omit fields whose value is None
        """
        self.types: frozenset[Any] = frozenset(types)
        self.by_alias = by_alias
        self.exclude_none = exclude_none
        self._adapters: dict[Any, TypeAdapter[Any]] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        names = sorted(getattr(t, "__name__", repr(t)) for t in self.types)
        return f"JsonSerializerContext(types=[{', '.join(names)}])"

    def can_serialize(self, value_type: Any) -> bool:
        """
        Check if the context knows how to serialize the type.

        Args:
            value_type: Declared type of the value

        Returns:
            True if the type, or every type argument of a container, is known
        """
        value_type, _ = split_annotated(value_type)

        if value_type in PRIMITIVE_TYPES or value_type in self.types:
            return True

        origin = get_origin(value_type)
        if origin in _CONTAINER_ORIGINS or origin is Union or origin is UnionType:
            arguments = [arg for arg in get_args(value_type) if arg is not Ellipsis]
            return bool(arguments) and all(self.can_serialize(arg) for arg in arguments)

        return False

    def serialize(self, value: Any, value_type: Any) -> Any:
        """
        Serialize a value as the given declared type.

        Args:
            value: Value to serialize
            value_type: Declared type of the value

        Returns:
            JSON-compatible value (dict, list, str, int, float, bool or None)

        Raises:
            ExampleGenerationError: If the type is unknown to this context
        """
        if not self.can_serialize(value_type):
            raise ExampleGenerationError(value_type, f"type is not known to {self!r}")

        return self._get_adapter(value_type).dump_python(
            value,
            mode="json",
            by_alias=self.by_alias,
            exclude_none=self.exclude_none,
        )

    def _get_adapter(self, value_type: Any) -> TypeAdapter[Any]:
        adapter = self._adapters.get(value_type)
        if adapter is None:
            with self._lock:
                adapter = self._adapters.get(value_type)
                if adapter is None:
                    adapter = TypeAdapter(value_type)
                    self._adapters[value_type] = adapter
        return adapter


class CompositeSerializationContext:
    """Tries each context in turn and uses the first that knows the type."""

    def __init__(self, contexts: Sequence[SerializationContext]):
        """
        Initialize composite context.

        Args:
            contexts: Contexts in order of preference
        """
        self.contexts: tuple[SerializationContext, ...] = tuple(contexts)

    def can_serialize(self, value_type: Any) -> bool:
        """Check if any context knows how to serialize the type."""
        return self._find(value_type) is not None

    def serialize(self, value: Any, value_type: Any) -> Any:
        """
        Serialize a value with the first context that knows its declared type.

        Raises:
            ExampleGenerationError: If no context knows the type
        """
        context = self._find(value_type)
        if context is None:
            raise ExampleGenerationError(
                value_type,
                f"none of the {len(self.contexts)} configured serialization contexts knows the type",
            )
        return context.serialize(value, value_type)

    def _find(self, value_type: Any) -> SerializationContext | None:
        for context in self.contexts:
            if context.can_serialize(value_type):
                return context
        return None


def combine_contexts(contexts: Sequence[SerializationContext]) -> SerializationContext:
    """
    Combine serialization contexts into one logical context.

    Args:
        contexts: Configured contexts, at least one

    Returns:
        The only context, or a composite over all of them
    """
    if len(contexts) == 1:
        return contexts[0]
    return CompositeSerializationContext(contexts)
