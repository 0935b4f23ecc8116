"""
Transformer Contracts

Protocols implemented by OpenAPI transformers and the context objects the
document service passes to them.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from fastapi.routing import APIRoute
from starlette.requests import Request

from openapi_extensions.typing_helpers import declared_type


class ParameterLocation(str, Enum):
    """Where an operation parameter is bound from."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"
    BODY = "body"


@dataclass(frozen=True)
class ParameterInfo:
    """
    An endpoint parameter that maps to an OpenAPI parameter or request body.

    Attributes:
        name: Python parameter (or model field) name
        alias: Name of the parameter in the OpenAPI document
        location: Where the parameter is bound from
        annotation: Annotation of the parameter, including Annotated metadata
        owner: Callable declaring the parameter, or the model declaring the field
        model: Model the parameter was flattened from, for model-bound parameters
        declared_by: Callable declaring the model parameter, for model-bound parameters
    """

    name: str
    alias: str
    location: ParameterLocation
    annotation: Any
    owner: Any
    model: type | None = None
    declared_by: Any = None

    @property
    def parameter_type(self) -> Any:
        """Declared type of the parameter, without Annotated metadata or Optional."""
        return declared_type(self.annotation)


@dataclass(frozen=True)
class ResponseType:
    """A response declared by a route, with the type of its body."""

    status_code: str
    media_type: str
    response_type: Any


@dataclass
class OperationContext:
    """Context for transforming a single OpenAPI operation."""

    document_name: str
    route: APIRoute
    method: str
    parameters: tuple[ParameterInfo, ...] = ()
    body: ParameterInfo | None = None
    responses: tuple[ResponseType, ...] = ()

    @property
    def endpoint(self) -> Callable[..., Any]:
        """Endpoint function bound to the route."""
        return self.route.endpoint

    @property
    def default_summary(self) -> str:
        """Summary FastAPI generates for the route when none is given."""
        return self.route.name.replace("_", " ").title()


@dataclass(frozen=True)
class PropertyInfo:
    """
    A property of a component schema.

    Attributes:
        owner: Type the schema was generated for
        attribute: Python attribute name
        json_name: Property name in the schema
        annotation: Declared annotation of the attribute
    """

    owner: type
    attribute: str
    json_name: str
    annotation: Any

    @property
    def property_type(self) -> Any:
        return declared_type(self.annotation)


@dataclass
class SchemaContext:
    """
    Context for transforming a component schema or one of its properties.

    ``schema_type`` is the type the schema describes, or None when it could
    not be determined. For property schemas ``property`` is set and
    ``schema_type`` is the declared type of the property.
    """

    document_name: str
    schema_name: str
    schema_type: Any = None
    property: PropertyInfo | None = None
    parent_schema: dict[str, Any] | None = field(default=None, repr=False)


@dataclass
class DocumentContext:
    """Context for transforming a whole OpenAPI document."""

    document_name: str
    request: Request | None = None


@runtime_checkable
class OperationTransformer(Protocol):
    """Transforms OpenAPI operations in place."""

    def transform_operation(self, operation: dict[str, Any], context: OperationContext) -> None: ...


@runtime_checkable
class SchemaTransformer(Protocol):
    """Transforms OpenAPI component schemas in place."""

    def transform_schema(self, schema: dict[str, Any], context: SchemaContext) -> None: ...


@runtime_checkable
class DocumentTransformer(Protocol):
    """Transforms OpenAPI documents in place."""

    def transform_document(self, document: dict[str, Any], context: DocumentContext) -> None: ...


def find_parameter(parameters: list[dict[str, Any]], parameter: ParameterInfo) -> dict[str, Any] | None:
    """Find the OpenAPI parameter an endpoint parameter is documented as."""
    names = {parameter.alias}
    # Header model fields may be documented with underscores converted
    if parameter.location is ParameterLocation.HEADER and parameter.model is not None:
        names.add(parameter.alias.replace("_", "-"))

    return next(
        (p for p in parameters if p.get("name") in names and p.get("in") == parameter.location.value),
        None,
    )
