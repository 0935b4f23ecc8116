"""
Documentation Member Names

Stable identifiers for documented members, used as keys into the
documentation store:

- ``T:pkg.module.Outer.Inner`` for types (generic classes carry a backtick
  arity suffix, e.g. ``T:pkg.module.Page`1``)
- ``M:pkg.module.Class.method(builtins.str,uuid.UUID)`` for functions and
  methods (generic functions carry a double backtick arity suffix and their
  type variables render as ````0``, ````1``, ...)
- ``F:pkg.module.Class.field`` for fields and ``P:pkg.module.Class.prop`` for
  properties, qualified by the class that declares them
"""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Callable
from typing import Any, TypeVar, Union, get_args, get_origin

from openapi_extensions.typing_helpers import get_parameters, get_type_hints, split_annotated

TYPE_PREFIX = "T"
METHOD_PREFIX = "M"
FIELD_PREFIX = "F"
PROPERTY_PREFIX = "P"

_LOCAL_SCOPE = "<locals>"


def get_type_member_name(schema_type: Any) -> str | None:
    """Get the member name of a type, e.g. ``T:pkg.module.Animal``."""
    name = _qualified_name(schema_type)
    return f"{TYPE_PREFIX}:{name}" if name else None


def get_method_member_name(func: Callable[..., Any]) -> str | None:
    """
    Get the member name of a function or method.

    Args:
        func: Function, method or bound method

    Returns:
        Member name, or None for lambdas and functions defined in a local scope
    """
    func = inspect.unwrap(getattr(func, "__func__", func))

    module = getattr(func, "__module__", None)
    qualname = getattr(func, "__qualname__", None)
    if not module or not qualname or _LOCAL_SCOPE in qualname or "<lambda>" in qualname:
        return None

    type_params: tuple[Any, ...] = tuple(getattr(func, "__type_params__", ()))
    parts = [f"{METHOD_PREFIX}:{module}.{qualname}"]
    if type_params:
        parts.append(f"``{len(type_params)}")

    parameters = get_parameters(func)
    if parameters and "." in qualname and parameters[0].name in ("self", "cls"):
        parameters = parameters[1:]

    if parameters:
        hints = get_type_hints(func)
        names = []
        for parameter in parameters:
            annotation = hints.get(parameter.name, Any)
            name = _name_for_type(annotation, type_params)
            if name is None:
                return None
            names.append(name)
        parts.append(f"({','.join(names)})")

    return "".join(parts)


def get_attribute_member_name(owner: type, attribute: str) -> str | None:
    """
    Get the member name of a field or property as declared on a class.

    Annotated class attributes are fields (``F:``); other class attributes,
    such as properties and computed fields, are properties (``P:``). The member
    is qualified by the class in the method resolution order that declares it.

    Args:
        owner: Class the attribute was found on
        attribute: Python attribute name

    Returns:
        Member name, or None if no class declares the attribute
    """
    for klass in inspect.getmro(owner):
        if klass is object:
            break

        if attribute in _own_annotations(klass):
            prefix = FIELD_PREFIX
        elif attribute in vars(klass):
            prefix = PROPERTY_PREFIX
        else:
            continue

        name = _qualified_name(klass)
        return f"{prefix}:{name}.{attribute}" if name else None

    return None


def _own_annotations(klass: type) -> dict[str, Any]:
    # Deferred annotations of a class are evaluated when read
    try:
        return inspect.get_annotations(klass)
    except (NameError, TypeError):
        return {}


def _qualified_name(schema_type: Any, expand_generic_arguments: bool = False) -> str | None:
    schema_type, _ = split_annotated(schema_type)

    origin = get_origin(schema_type)
    if origin is not None:
        return _generic_alias_name(schema_type, origin)

    if not isinstance(schema_type, type):
        return None

    generic = getattr(schema_type, "__pydantic_generic_metadata__", None)
    if generic and generic.get("origin") is not None:
        base = _qualified_name(generic["origin"], expand_generic_arguments=True)
        arguments = [_name_for_type(arg, ()) or repr(arg) for arg in generic.get("args", ())]
        return f"{base}{{{','.join(arguments)}}}" if base else None

    module = schema_type.__module__
    qualname = schema_type.__qualname__
    if _LOCAL_SCOPE in qualname:
        return None

    name = f"{module}.{qualname}" if module else qualname

    parameters = getattr(schema_type, "__parameters__", ())
    if parameters and not expand_generic_arguments:
        name = f"{name}`{len(parameters)}"

    return name


def _generic_alias_name(alias: Any, origin: Any) -> str | None:
    if origin is Union or origin is types.UnionType:
        base = "typing.Union"
    else:
        base = _qualified_name(origin, expand_generic_arguments=True)
        if base is None:
            base = f"typing.{getattr(origin, '_name', None) or repr(origin)}"

    arguments = [_name_for_type(arg, ()) or repr(arg) for arg in get_args(alias)]
    return f"{base}{{{','.join(arguments)}}}" if arguments else base


def _name_for_type(annotation: Any, type_params: tuple[Any, ...]) -> str | None:
    if annotation is Any:
        return "typing.Any"
    if annotation is None:
        return "builtins.NoneType"
    if isinstance(annotation, TypeVar):
        if annotation in type_params:
            return f"``{type_params.index(annotation)}"
        return f"`{annotation.__name__}"
    if isinstance(annotation, typing.ForwardRef):
        return annotation.__forward_arg__
    if isinstance(annotation, str):
        return annotation
    return _qualified_name(annotation, expand_generic_arguments=True)
