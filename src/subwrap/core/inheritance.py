"""
Inheritance Expander for Sub Wrap

Gives a class local forwarders for the routines it inherits from its direct
parents, so inherited behaviour can be intercepted on the subclass without
touching the parent. Each forwarder looks the routine up through
``super()`` at call time, starting above the class it was bound to, and
calls it in the same shape the forwarder was called in.
"""

import logging
from typing import Any, List

from .interceptor import call_as, current_shape
from .introspector import SEPARATOR, resolve_namespace, routine_names

logger = logging.getLogger(__name__)


def make_forwarder(cls: type, name: str, parent_binding: Any) -> Any:
    """Build a forwarder for ``name`` shaped like the parent's binding."""
    if isinstance(parent_binding, staticmethod):

        def forwarder(*args, **kwargs):
            return call_as(current_shape(), getattr(super(cls, cls), name), *args, **kwargs)

    elif isinstance(parent_binding, classmethod):

        def forwarder(klass, *args, **kwargs):
            return call_as(current_shape(), getattr(super(cls, klass), name), *args, **kwargs)

    else:

        def forwarder(self, *args, **kwargs):
            return call_as(current_shape(), getattr(super(cls, self), name), *args, **kwargs)

    forwarder.__name__ = name
    forwarder.__qualname__ = f"{cls.__qualname__}.{name}"
    forwarder.__module__ = cls.__module__
    forwarder.__doc__ = getattr(parent_binding, "__doc__", None)
    forwarder.__subwrap_forwarder__ = True

    if isinstance(parent_binding, staticmethod):
        return staticmethod(forwarder)
    if isinstance(parent_binding, classmethod):
        return classmethod(forwarder)
    return forwarder


def expand(namespace_name: str) -> List[str]:
    """Bind forwarders in ``namespace_name`` for inherited, non-overridden routines.

    Only classes have parents; any other namespace yields nothing. When two
    parents define the same name the first declared parent wins. Returns the
    fully-qualified names of the forwarders bound.
    """
    cls = resolve_namespace(namespace_name)
    if not isinstance(cls, type):
        return []

    excluded = set(vars(cls))
    bound: List[str] = []

    for parent in cls.__bases__:
        if parent is object:
            continue
        for name in routine_names(parent):
            if name in excluded:
                continue
            excluded.add(name)
            setattr(cls, name, make_forwarder(cls, name, vars(parent)[name]))
            bound.append(namespace_name + SEPARATOR + name)
            logger.debug("Forwarding %s.%s to %s", namespace_name, name, parent.__qualname__)

    return bound
