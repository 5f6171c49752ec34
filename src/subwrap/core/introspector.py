"""
Namespace Introspector for Sub Wrap

A namespace is a loaded module or a class reachable from one. This module
turns dotted names into namespace objects, lists the subroutines bound in a
namespace and implements the wildcard descendant rule shared by the resolver
and the loader.
"""

import inspect
import sys
import types
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from ..config import Config

SEPARATOR = "."
WILDCARD_SUFFIX = ".*"

Namespace = Union[types.ModuleType, type]


@dataclass(frozen=True)
class NamespacePattern:
    """One entry of a ``packages`` list, parsed."""

    prefix: str
    wildcard: bool = False

    @classmethod
    def parse(cls, text: str) -> "NamespacePattern":
        if text.endswith(WILDCARD_SUFFIX):
            return cls(prefix=text[: -len(WILDCARD_SUFFIX)], wildcard=True)
        return cls(prefix=text)

    def matches(self, name: str) -> bool:
        """Return True if ``name`` is this namespace or, for wildcards, a descendant."""
        if name == self.prefix:
            return True
        return self.wildcard and name.startswith(self.prefix + SEPARATOR)

    def lies_below(self, name: str) -> bool:
        """Return True if this pattern's prefix is nested inside namespace ``name``."""
        return self.prefix.startswith(name + SEPARATOR)

    def __str__(self):
        return self.prefix + WILDCARD_SUFFIX if self.wildcard else self.prefix


def is_routine(value: Any) -> bool:
    """True for functions, builtins and method descriptors, bare or in static/classmethod."""
    if isinstance(value, (staticmethod, classmethod)):
        value = value.__func__
    if isinstance(value, type):
        return False
    return inspect.isroutine(value) or getattr(type(value), "__subwrap_interceptor__", False)


def is_special(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def resolve_namespace(name: str) -> Optional[Namespace]:
    """Return the loaded module or class called ``name``, or None."""
    if not name:
        return None

    module = sys.modules.get(name)
    if isinstance(module, types.ModuleType):
        return module

    parts = name.split(SEPARATOR)
    for cut in range(len(parts) - 1, 0, -1):
        module = sys.modules.get(SEPARATOR.join(parts[:cut]))
        if not isinstance(module, types.ModuleType):
            continue
        obj: Any = module
        for attr in parts[cut:]:
            obj = vars(obj).get(attr) if hasattr(obj, "__dict__") else None
            if obj is None:
                return None
        return obj if isinstance(obj, (type, types.ModuleType)) else None
    return None


def split_name(qualified: str):
    """Split ``pkg.mod.func`` into (``pkg.mod``, ``func``)."""
    owner, _, attr = qualified.rpartition(SEPARATOR)
    return owner, attr


def routine_names(namespace: Namespace, include_special: Optional[bool] = None) -> List[str]:
    """Return the attribute names of routines bound directly in ``namespace``."""
    if include_special is None:
        include_special = Config.get("include_special", False)

    names = []
    for attr, value in list(vars(namespace).items()):
        if not include_special and is_special(attr):
            continue
        if is_routine(value):
            names.append(attr)
    return names


def list_callables(namespace_name: str, include_special: Optional[bool] = None) -> List[str]:
    """List the fully-qualified names of subroutines bound directly in a namespace.

    Child namespaces (submodules, classes) are not descended into. An
    unloaded namespace has no members.
    """
    namespace = resolve_namespace(namespace_name)
    if namespace is None:
        return []
    return [namespace_name + SEPARATOR + attr for attr in routine_names(namespace, include_special)]


def loaded_namespaces(module: types.ModuleType) -> List[str]:
    """Return the module's name plus the qualified names of classes defined in it."""
    module_name = module.__name__
    found = [module_name]
    seen = set()

    def walk(container, prefix):
        for attr, value in list(vars(container).items()):
            if not isinstance(value, type) or id(value) in seen:
                continue
            if getattr(value, "__module__", None) != module_name:
                continue
            qualname = getattr(value, "__qualname__", "")
            if "<locals>" in qualname or qualname != prefix + attr:
                continue
            seen.add(id(value))
            found.append(module_name + SEPARATOR + qualname)
            walk(value, qualname + SEPARATOR)

    walk(module, "")
    return found
