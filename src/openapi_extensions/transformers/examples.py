"""
Examples Transformer

Adds example payloads to operation parameters, request bodies, responses and
component schemas.

Example metadata is resolved with a fixed order of precedence. For parameters
and request bodies:

1. Annotated metadata on the parameter whose example type is the parameter type
2. Metadata declared on the parameter type (or inherited from its bases)
3. Metadata declared on the endpoint for exactly the parameter type
4. Metadata registered in the options for the type or one of its bases

Endpoint metadata (3) is that declared on the endpoint function, then that
carried by the route's dependencies, route-level before router-level.

Responses use 3, then 2 and 4. Component schemas use 2 and 4. An example that
is already present in the document is never replaced.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

import structlog

from openapi_extensions.caching import ConcurrentCache
from openapi_extensions.examples.discovery import (
    examples_from_annotation,
    get_dependency_examples,
    get_endpoint_examples,
    get_type_example,
)
from openapi_extensions.examples.metadata import OpenApiExample
from openapi_extensions.examples.registry import ExampleRegistry
from openapi_extensions.examples.serialization import SerializationContext
from openapi_extensions.transformers.base import (
    OperationContext,
    ParameterInfo,
    SchemaContext,
    find_parameter,
)

logger = structlog.get_logger()

EXAMPLE_KEY = "example"


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", None) or repr(value)


class ExamplesCache:
    """
    Memoized example metadata lookups for one document.

    Each lookup is computed at most once per key; results never change.
    """

    def __init__(self, registry: ExampleRegistry, include_base_types: bool = True):
        """
        Initialize examples cache.

        Args:
            registry: Examples registered in the options
            include_base_types: Walk the bases of a type when looking it up in the registry
        """
        self.registry = registry
        self.include_base_types = include_base_types
        self._endpoints: ConcurrentCache[Callable[..., Any], tuple[OpenApiExample, ...]] = ConcurrentCache()
        self._dependencies: ConcurrentCache[tuple[int, ...], tuple[OpenApiExample, ...]] = ConcurrentCache()
        self._parameters: ConcurrentCache[tuple[Any, str], OpenApiExample | None] = ConcurrentCache()
        self._types: ConcurrentCache[tuple[Any, bool], OpenApiExample | None] = ConcurrentCache()

    def get_endpoint_metadata(self, endpoint: Callable[..., Any]) -> tuple[OpenApiExample, ...]:
        """Get the example metadata declared on an endpoint, in declaration order."""
        return self._endpoints.get_or_add(endpoint, get_endpoint_examples)

    def get_operation_metadata(self, context: OperationContext) -> tuple[OpenApiExample, ...]:
        """Get the example metadata of an operation: the endpoint's, then its dependencies'."""
        dependant = context.route.dependant
        calls = tuple(
            dependency.call for dependency in reversed(dependant.dependencies) if dependency.call is not None
        )
        # Dependency callables need not be hashable
        dependencies = self._dependencies.get_or_add(
            tuple(id(call) for call in calls), lambda _: get_dependency_examples(calls)
        )
        return self.get_endpoint_metadata(context.endpoint) + dependencies

    def get_parameter_metadata(self, parameter: ParameterInfo) -> OpenApiExample | None:
        """Get the first parameter-level metadata whose example type is the parameter's type."""

        def resolve(_: tuple[Any, str]) -> OpenApiExample | None:
            return _first_for_type(examples_from_annotation(parameter.annotation), parameter.parameter_type)

        return self._parameters.get_or_add((parameter.owner, parameter.name), resolve)

    def get_type_metadata(self, schema_type: Any, include_registry: bool) -> OpenApiExample | None:
        """
        Get the example metadata for a type.

        Args:
            schema_type: Type to resolve
            include_registry: Fall back to examples registered in the options

        Returns:
            Metadata declared on the type, else (when enabled) registered for it
        """
        return self._types.get_or_add((schema_type, include_registry), self._resolve_type)

    def _resolve_type(self, key: tuple[Any, bool]) -> OpenApiExample | None:
        schema_type, include_registry = key

        metadata = get_type_example(schema_type)
        if metadata is not None or not include_registry:
            return metadata

        return self.registry.resolve(schema_type, include_base_types=self.include_base_types)


class AddExamplesTransformer:
    """Operation and schema transformer that adds examples."""

    def __init__(
        self,
        registry: ExampleRegistry,
        context: SerializationContext,
        include_base_types: bool = True,
    ):
        """
        Initialize examples transformer.

        Args:
            registry: Examples registered in the options
            context: Serialization context used to render examples
            include_base_types: Walk the bases of a type when looking it up in the registry
        """
        self.cache = ExamplesCache(registry, include_base_types=include_base_types)
        self.context = context

    def transform_operation(self, operation: dict[str, Any], context: OperationContext) -> None:
        """Add examples to the parameters, request body and responses of an operation."""
        candidates = self.cache.get_operation_metadata(context)

        if operation.get("parameters"):
            self._add_parameter_examples(operation["parameters"], context.parameters, candidates)

        request_body = operation.get("requestBody")
        if request_body and context.body is not None:
            self._add_request_examples(request_body, context.body, candidates)

        self._add_response_examples(operation.get("responses") or {}, context, candidates)

    def transform_schema(self, schema: dict[str, Any], context: SchemaContext) -> None:
        """Add an example to a component schema or property schema."""
        if context.schema_type is None or EXAMPLE_KEY in schema:
            return

        # Property schemas that only reference a component get their example there
        if context.property is not None and set(schema) == {"$ref"}:
            return

        metadata = self.cache.get_type_metadata(context.schema_type, include_registry=True)
        if metadata is not None:
            schema[EXAMPLE_KEY] = metadata.generate_example(self.context)
            logger.debug(
                "Schema example added",
                document=context.document_name,
                schema=context.schema_name,
                property=context.property.json_name if context.property else None,
            )

    def _resolve_parameter(
        self,
        parameter: ParameterInfo,
        candidates: Sequence[OpenApiExample],
    ) -> OpenApiExample | None:
        parameter_type = parameter.parameter_type
        return (
            self.cache.get_parameter_metadata(parameter)
            or self.cache.get_type_metadata(parameter_type, include_registry=False)
            or _first_for_type(candidates, parameter_type)
            or self.cache.get_type_metadata(parameter_type, include_registry=True)
        )

    def _add_parameter_examples(
        self,
        parameters: list[dict[str, Any]],
        arguments: Iterable[ParameterInfo],
        candidates: Sequence[OpenApiExample],
    ) -> None:
        for argument in arguments:
            metadata = self._resolve_parameter(argument, candidates)
            if metadata is None:
                continue

            parameter = find_parameter(parameters, argument)
            if parameter is not None and EXAMPLE_KEY not in parameter:
                parameter[EXAMPLE_KEY] = metadata.generate_example(self.context)

    def _add_request_examples(
        self,
        request_body: dict[str, Any],
        body: ParameterInfo,
        candidates: Sequence[OpenApiExample],
    ) -> None:
        content = request_body.get("content") or {}
        if not content:
            return

        metadata = self._resolve_parameter(body, candidates)
        if metadata is None:
            return

        for media_type in content.values():
            if EXAMPLE_KEY not in media_type:
                media_type[EXAMPLE_KEY] = metadata.generate_example(self.context)

    def _add_response_examples(
        self,
        responses: dict[str, Any],
        context: OperationContext,
        candidates: Sequence[OpenApiExample],
    ) -> None:
        for declared in context.responses:
            metadata = (
                _first_for_type(candidates, declared.response_type)
                or self.cache.get_type_metadata(declared.response_type, include_registry=True)
            )
            if metadata is None:
                continue

            response = responses.get(declared.status_code)
            media_type = ((response or {}).get("content") or {}).get(declared.media_type)
            if media_type is not None and EXAMPLE_KEY not in media_type:
                media_type[EXAMPLE_KEY] = metadata.generate_example(self.context)
                logger.debug(
                    "Response example added",
                    document=context.document_name,
                    path=context.route.path_format,
                    status_code=declared.status_code,
                    example_type=_type_name(declared.response_type),
                )


def _first_for_type(candidates: Iterable[OpenApiExample], schema_type: Any) -> OpenApiExample | None:
    return next((item for item in candidates if item.example_type == schema_type), None)
