"""
Type Annotation Helpers

Unwrapping of Annotated and Optional annotations into the declared type and
its metadata, and safe type hint resolution for endpoints.
"""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Callable
from typing import Annotated, Any, Union, get_args, get_origin

import structlog

logger = structlog.get_logger()

_NONE_TYPE = type(None)


def is_annotated(annotation: Any) -> bool:
    """Check if an annotation is ``Annotated[...]``."""
    return get_origin(annotation) is Annotated


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """
    Split an annotation into its underlying type and Annotated metadata.

    Nested Annotated forms are flattened, outermost metadata first.

    Args:
        annotation: Type annotation

    Returns:
        Tuple of the underlying type and the metadata objects
    """
    metadata: tuple[Any, ...] = ()
    while is_annotated(annotation):
        metadata = metadata + tuple(annotation.__metadata__)
        annotation = annotation.__origin__
    return annotation, metadata


def unwrap_optional(annotation: Any) -> Any:
    """Reduce ``X | None`` to ``X``; other unions are returned unchanged."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not _NONE_TYPE]
        if len(members) == 1:
            return members[0]
    return annotation


def declared_type(annotation: Any) -> Any:
    """
    Get the type an annotation declares, ignoring Annotated metadata and Optional.

    Args:
        annotation: Type annotation

    Returns:
        The declared type
    """
    annotation, _ = split_annotated(annotation)
    annotation = unwrap_optional(annotation)
    annotation, _ = split_annotated(annotation)
    return annotation


def is_class(annotation: Any) -> bool:
    """Check if an annotation is a plain runtime class (not a generic alias)."""
    return isinstance(annotation, type) and get_origin(annotation) is None


def get_type_hints(func: Callable[..., Any]) -> dict[str, Any]:
    """
    Resolve type hints for a callable, keeping Annotated metadata.

    Unresolvable hints (for example names only defined in a local scope) are
    skipped rather than raising.

    Args:
        func: Callable to inspect

    Returns:
        Mapping of parameter name (and ``return``) to annotation
    """
    try:
        return typing.get_type_hints(func, include_extras=True)
    except (NameError, TypeError) as exc:
        logger.debug(
            "Falling back to raw annotations",
            callable=getattr(func, "__qualname__", repr(func)),
            error=str(exc),
        )

    hints: dict[str, Any] = {}
    for name, annotation in getattr(func, "__annotations__", {}).items():
        if not isinstance(annotation, str):
            hints[name] = annotation
    return hints


def get_parameters(func: Callable[..., Any]) -> list[inspect.Parameter]:
    """Get the declared parameters of a callable, or an empty list."""
    try:
        return list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return []
