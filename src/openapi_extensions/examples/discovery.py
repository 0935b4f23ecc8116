"""
Example Discovery

Attaches example metadata to classes and endpoint functions, and reads it
back from classes, endpoints, return annotations and parameter annotations.

Examples:
    On a type that generates its own example:

    >>> @openapi_example()
    ... class Greeting(BaseModel):
    ...     text: str
    ...
    ...     @classmethod
    ...     def generate_example(cls) -> Greeting:
    ...         return cls(text="Hello, World!")

    On an endpoint, for a type owned by someone else:

    >>> @app.get("/cars")
    ... @openapi_example(Car, provider=CarExampleProvider)
    ... async def get_car() -> Car: ...

    On a parameter or a return value:

    >>> async def greet(name: Annotated[str, OpenApiExample.literal("Martin")]) -> str: ...

    On every route of a router, or on a single route, as a dependency:

    >>> router = APIRouter(dependencies=[examples_dependency(OpenApiExample.of(Car))])
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import Depends
from fastapi.params import Depends as DependsParam

from openapi_extensions.constants import EXAMPLES_ATTRIBUTE
from openapi_extensions.examples.metadata import ExampleProvider, OpenApiExample
from openapi_extensions.exceptions import OpenApiConfigurationError
from openapi_extensions.typing_helpers import get_type_hints, is_class, split_annotated, unwrap_optional

TargetT = TypeVar("TargetT")


def attach_examples(target: TargetT, *metadata: OpenApiExample) -> TargetT:
    """
    Attach example metadata to a class or function.

    Metadata keeps declaration order: stacked decorators are applied bottom-up,
    so new metadata goes in front of anything already attached.

    Args:
        target: Class or function
        metadata: Example metadata to attach

    Returns:
        The target, unchanged apart from the attached metadata
    """
    existing = vars(target).get(EXAMPLES_ATTRIBUTE, ())
    setattr(target, EXAMPLES_ATTRIBUTE, tuple(metadata) + tuple(existing))
    return target


def openapi_example(
    example_type: Any = None,
    provider: type[ExampleProvider[Any]] | None = None,
) -> Callable[[TargetT], TargetT]:
    """
    Declare an example for a type, on a class or an endpoint function.

    Args:
        example_type: Declared type of the example; defaults to the decorated class
        provider: Class generating the example; defaults to the example type itself

    Returns:
        Decorator attaching the example metadata

    Raises:
        OpenApiConfigurationError: If a function is decorated without an example type
    """

    def decorator(target: TargetT) -> TargetT:
        schema_type = example_type
        if schema_type is None:
            if not inspect.isclass(target):
                raise OpenApiConfigurationError(
                    f"An example type is required to declare an example on "
                    f"'{getattr(target, '__qualname__', target)}'."
                )
            schema_type = target

        if provider is None:
            metadata = OpenApiExample.of(schema_type)
        else:
            metadata = OpenApiExample.provided_by(schema_type, provider)

        return attach_examples(target, metadata)

    return decorator


def with_examples(*metadata: OpenApiExample) -> Callable[[TargetT], TargetT]:
    """
    Attach prebuilt example metadata, such as literals, to an endpoint.

    Args:
        metadata: Example metadata in declaration order

    Returns:
        Decorator attaching the example metadata
    """

    def decorator(target: TargetT) -> TargetT:
        return attach_examples(target, *metadata)

    return decorator


def examples_from_annotation(annotation: Any) -> tuple[OpenApiExample, ...]:
    """Get the example metadata carried by an ``Annotated`` annotation."""
    _, metadata = split_annotated(annotation)
    if not metadata:
        _, metadata = split_annotated(unwrap_optional(split_annotated(annotation)[0]))
    return tuple(item for item in metadata if isinstance(item, OpenApiExample))


def get_endpoint_examples(endpoint: Callable[..., Any]) -> tuple[OpenApiExample, ...]:
    """
    Get the example metadata declared on an endpoint.

    Args:
        endpoint: Endpoint function

    Returns:
        Decorator metadata in declaration order, then return annotation metadata
    """
    declared = tuple(getattr(endpoint, EXAMPLES_ATTRIBUTE, ()))
    hints = get_type_hints(endpoint)
    returned = examples_from_annotation(hints["return"]) if "return" in hints else ()
    return declared + returned


def get_type_example(schema_type: Any) -> OpenApiExample | None:
    """
    Get the example metadata declared on a type or inherited from its bases.

    The type's own declarations come first, then those of its bases in method
    resolution order. Only metadata whose example type the type is assignable
    to is considered.

    Args:
        schema_type: Type to inspect

    Returns:
        First applicable metadata, or None
    """
    if not is_class(schema_type):
        return None

    for klass in schema_type.__mro__:
        for metadata in vars(klass).get(EXAMPLES_ATTRIBUTE, ()):
            if _is_assignable(metadata.example_type, schema_type):
                return metadata

    return None


def _is_assignable(example_type: Any, schema_type: type) -> bool:
    if is_class(example_type):
        try:
            return issubclass(schema_type, example_type)
        except TypeError:
            return False
    return example_type == schema_type


def examples_dependency(*metadata: OpenApiExample) -> DependsParam:
    """
    Create a dependency carrying example metadata.

    Added to the dependencies of a router, the metadata applies to every
    route of the router; added to a route, to that route only. The
    dependency itself does nothing when a request is handled.

    Args:
        metadata: Example metadata in declaration order

    Returns:
        Dependency to add to a router or route
    """

    async def openapi_examples() -> None:
        return None

    return Depends(attach_examples(openapi_examples, *metadata))


def get_dependency_examples(calls: tuple[Callable[..., Any], ...]) -> tuple[OpenApiExample, ...]:
    """
    Get the example metadata declared on dependency functions.

    Classes used as dependencies are skipped; metadata declared on a class
    describes the class itself.

    Args:
        calls: Dependency callables, most specific first

    Returns:
        Metadata of each dependency in turn
    """
    return tuple(
        item
        for call in calls
        if not inspect.isclass(call)
        for item in getattr(call, EXAMPLES_ATTRIBUTE, ())
    )
