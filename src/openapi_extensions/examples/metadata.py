"""
Example Metadata

Declarations of where an example value comes from. Each declaration is one of
three kinds: a literal value, a type that generates its own example, or a
separate provider class that generates examples for a type it does not own.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, TypeVar

import structlog

from openapi_extensions.examples.serialization import SerializationContext
from openapi_extensions.exceptions import ExampleGenerationError, OpenApiConfigurationError
from openapi_extensions.typing_helpers import is_class

logger = structlog.get_logger()

T_co = TypeVar("T_co", covariant=True)


class ExampleKind(str, Enum):
    """Source of an example value."""

    LITERAL = "literal"  # Value supplied at declaration time
    SELF_PROVIDED = "self_provided"  # Type generates its own example
    PROVIDED = "provided"  # Separate provider class generates the example


class ExampleProvider(Protocol[T_co]):
    """A class that can generate an example value of a type."""

    @classmethod
    def generate_example(cls) -> T_co:
        """Generate the example value."""
        ...


@dataclass(frozen=True, eq=False)
class OpenApiExample:
    """
    Example metadata for a declared type.

    Instances are immutable. Use the ``literal``, ``of`` and ``provided_by``
    constructors rather than the initializer, and attach them with the
    ``openapi_example`` decorator or as ``Annotated`` metadata.

    Attributes:
        kind: Source of the example value
        example_type: Declared type the example applies to
        value: Literal example value (``LITERAL`` only)
        provider: Class with a ``generate_example`` method (``PROVIDED`` only)
    """

    kind: ExampleKind
    example_type: Any
    value: Any = None
    provider: Any = None

    @classmethod
    def literal(cls, value: Any) -> OpenApiExample:
        """
        Declare a literal example value.

        Args:
            value: Example value; its type is the declared example type

        Returns:
            Example metadata
        """
        return cls(kind=ExampleKind.LITERAL, example_type=type(value), value=value)

    @classmethod
    def of(cls, schema_type: Any) -> OpenApiExample:
        """
        Declare that a type generates its own example.

        Args:
            schema_type: Type with a ``generate_example`` class or static method

        Returns:
            Example metadata

        Raises:
            OpenApiConfigurationError: If the type cannot generate examples
        """
        _require_generator(schema_type, schema_type)
        return cls(kind=ExampleKind.SELF_PROVIDED, example_type=schema_type)

    @classmethod
    def provided_by(cls, schema_type: Any, provider: type[ExampleProvider[Any]]) -> OpenApiExample:
        """
        Declare that a provider class generates examples for a type.

        Args:
            schema_type: Declared type of the examples
            provider: Class with a ``generate_example`` class or static method

        Returns:
            Example metadata

        Raises:
            OpenApiConfigurationError: If the provider cannot generate examples
        """
        _require_generator(provider, schema_type)
        return cls(kind=ExampleKind.PROVIDED, example_type=schema_type, provider=provider)

    def create_example(self) -> Any:
        """
        Create the typed example value.

        Returns:
            Example value, an instance of ``example_type`` when it is a class

        Raises:
            ExampleGenerationError: If the generator fails or returns a value of the wrong type
        """
        if self.kind is ExampleKind.LITERAL:
            return self.value

        generator = self.example_type if self.kind is ExampleKind.SELF_PROVIDED else self.provider

        try:
            value = generator.generate_example()
        except ExampleGenerationError:
            raise
        except Exception as exc:
            raise ExampleGenerationError(self.example_type, f"{type(exc).__name__}: {exc}") from exc

        if is_class(self.example_type):
            try:
                matches = isinstance(value, self.example_type)
            except TypeError:
                # Non-runtime-checkable protocols cannot be checked
                matches = True

            if not matches:
                raise ExampleGenerationError(
                    self.example_type,
                    f"generator returned an instance of '{type(value).__qualname__}'",
                )

        return value

    def generate_example(self, context: SerializationContext) -> Any:
        """
        Generate the serialized example value.

        The value is serialized as ``example_type``, not as its runtime type.

        Args:
            context: Serialization context to use

        Returns:
            JSON-compatible example value
        """
        value = self.create_example()
        serialized = context.serialize(value, self.example_type)

        logger.debug(
            "Example generated",
            kind=self.kind.value,
            example_type=getattr(self.example_type, "__qualname__", repr(self.example_type)),
        )

        return serialized


def _require_generator(generator: Any, schema_type: Any) -> None:
    if not callable(getattr(generator, "generate_example", None)):
        name = getattr(generator, "__qualname__", repr(generator))
        schema_name = getattr(schema_type, "__qualname__", repr(schema_type))
        raise OpenApiConfigurationError(
            f"'{name}' has no generate_example() method to provide examples for '{schema_name}'."
        )
