"""
Docstring Description Service

Looks up descriptions for documented members of a module or package. Class,
function and method docstrings are parsed as Google-style docstrings, and
fields are documented by attribute docstrings (a string literal directly
below the field).
"""

from __future__ import annotations

import ast
import importlib
import inspect
import pkgutil
import textwrap
import threading
from collections.abc import Callable
from types import ModuleType
from typing import Any, Protocol

import structlog

from openapi_extensions.caching import ConcurrentCache
from openapi_extensions.descriptions.docstrings import SUMMARY_SECTION, Docstring, parse_docstring
from openapi_extensions.descriptions.member_names import (
    get_attribute_member_name,
    get_method_member_name,
    get_type_member_name,
)

logger = structlog.get_logger()


class DescriptionService(Protocol):
    """Looks up descriptions of documented members."""

    def get_description(
        self,
        member_name: str,
        parameter_name: str | None = None,
        section: str | None = SUMMARY_SECTION,
    ) -> str | None:
        """
        Get the description of a member.

        Args:
            member_name: Member name, e.g. ``M:pkg.module.function(builtins.str)``
            parameter_name: Name of a parameter of the member, if any
            section: Section to get, ``summary`` or ``remarks``

        Returns:
            Description, or None if the member is not documented
        """
        ...


class DocstringDescriptionService:
    """
    Description service backed by the docstrings of a module or package.

    The module (and, for a package, every submodule) is indexed on first
    lookup. Lookups are cached.
    """

    def __init__(self, module: ModuleType | str):
        """
        Initialize description service.

        Args:
            module: Module or package, or its import name
        """
        self.module_name = module if isinstance(module, str) else module.__name__
        self._module = module if isinstance(module, ModuleType) else None
        self._members: dict[str, Docstring] | None = None
        self._index_lock = threading.Lock()
        self._descriptions: ConcurrentCache[tuple[str, str | None, str], str | None] = ConcurrentCache()

    def __repr__(self) -> str:
        return f"DocstringDescriptionService(module={self.module_name!r})"

    def includes(self, obj: Any) -> bool:
        """
        Check if an object is defined in the documented module or package.

        Args:
            obj: Class, function or module name

        Returns:
            True if the object belongs to the documented module or package
        """
        module = obj if isinstance(obj, str) else getattr(obj, "__module__", None)
        if not module:
            return False
        return module == self.module_name or module.startswith(f"{self.module_name}.")

    def get_description(
        self,
        member_name: str,
        parameter_name: str | None = None,
        section: str | None = SUMMARY_SECTION,
    ) -> str | None:
        """
        Get the description of a member.

        Args:
            member_name: Member name
            parameter_name: Name of a parameter of the member, if any
            section: Section to get, ``summary`` or ``remarks``

        Returns:
            Description, or None if the member is not documented
        """
        key = (member_name, parameter_name or None, section or SUMMARY_SECTION)
        return self._descriptions.get_or_add(key, self._lookup)

    def _lookup(self, key: tuple[str, str | None, str]) -> str | None:
        member_name, parameter_name, section = key
        docstring = self._get_members().get(member_name)

        if docstring is None:
            description = None
        elif parameter_name is not None:
            description = docstring.parameters.get(parameter_name)
        else:
            description = docstring.get_section(section)

        logger.debug(
            "Description lookup",
            member=member_name,
            parameter=parameter_name,
            section=section,
            found=description is not None,
        )
        return description

    def _get_members(self) -> dict[str, Docstring]:
        if self._members is None:
            with self._index_lock:
                # Double-check inside lock
                if self._members is None:
                    self._members = _DocstringIndexer().index(self._load_modules())
                    logger.info(
                        "Documentation indexed",
                        module=self.module_name,
                        members=len(self._members),
                    )
        return self._members

    def _load_modules(self) -> list[ModuleType]:
        root = self._module or importlib.import_module(self.module_name)
        modules = [root]

        path = getattr(root, "__path__", None)
        if path is not None:
            for info in pkgutil.walk_packages(path, prefix=f"{root.__name__}."):
                try:
                    modules.append(importlib.import_module(info.name))
                except ImportError as exc:
                    logger.warning("Skipping undocumentable module", module=info.name, error=str(exc))

        return modules


class _DocstringIndexer:
    """Collects parsed docstrings keyed by member name."""

    def __init__(self) -> None:
        self.members: dict[str, Docstring] = {}

    def index(self, modules: list[ModuleType]) -> dict[str, Docstring]:
        for module in modules:
            for value in list(vars(module).values()):
                if getattr(value, "__module__", None) != module.__name__:
                    continue
                if inspect.isclass(value):
                    self._add_class(value)
                elif inspect.isfunction(value):
                    self._add_function(value)
        return self.members

    def _add(self, member_name: str | None, docstring: str | None) -> None:
        parsed = parse_docstring(docstring)
        if member_name and parsed is not None:
            self.members.setdefault(member_name, parsed)

    def _add_function(self, func: Callable[..., Any]) -> None:
        self._add(get_method_member_name(func), inspect.getdoc(func))

    def _add_class(self, cls: type) -> None:
        member_name = get_type_member_name(cls)
        if member_name is None or member_name in self.members:
            return

        self._add(member_name, _own_docstring(cls))

        for name, value in list(vars(cls).items()):
            value = getattr(value, "wrapped", value)

            if isinstance(value, (staticmethod, classmethod)):
                self._add_function(value.__func__)
            elif inspect.isfunction(value):
                self._add_function(value)
            elif isinstance(value, property):
                self._add(get_attribute_member_name(cls, name), inspect.getdoc(value))
            elif inspect.isclass(value) and value.__qualname__.startswith(f"{cls.__qualname__}."):
                self._add_class(value)

        for name, docstring in _attribute_docstrings(cls).items():
            self._add(get_attribute_member_name(cls, name), docstring)


def _own_docstring(cls: type) -> str | None:
    docstring = vars(cls).get("__doc__")
    if not isinstance(docstring, str):
        return None
    # Dataclasses without a docstring get their signature as __doc__
    if docstring.startswith(f"{cls.__name__}("):
        return None
    return docstring


def _attribute_docstrings(cls: type) -> dict[str, str]:
    try:
        source = inspect.getsource(cls)
        tree = ast.parse(textwrap.dedent(source))
    except (OSError, TypeError, SyntaxError):
        return {}

    class_def = next((node for node in tree.body if isinstance(node, ast.ClassDef)), None)
    if class_def is None:
        return {}

    docstrings: dict[str, str] = {}
    for previous, node in zip(class_def.body, class_def.body[1:]):
        if not (
            isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str)
        ):
            continue

        if isinstance(previous, ast.AnnAssign) and isinstance(previous.target, ast.Name):
            docstrings[previous.target.id] = node.value.value
        elif (
            isinstance(previous, ast.Assign)
            and len(previous.targets) == 1
            and isinstance(previous.targets[0], ast.Name)
        ):
            docstrings[previous.targets[0].id] = node.value.value

    return docstrings
