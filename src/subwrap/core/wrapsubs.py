"""
Entry point for Sub Wrap

``wrapsubs`` takes a target specification and wraps every subroutine it
names: loaded namespaces right away, unloaded ones when they are imported.
It can be called any number of times; a subroutine is only ever wrapped
once.

Example:
    wrapsubs(
        packages=["orchard.tree.*", "orchard.shed"],
        subs=["orchard.util.prune"],
        wrap_inherited=True,
        pre=lambda name, *args, **kwargs: print("called", name, args),
        post=lambda name, *results: print(name, "returned", results),
    )
"""

import functools
import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import Config
from . import inheritance, loader
from .interceptor import InterceptRegistry, default_registry, wrap
from .introspector import list_callables
from .resolver import expand_loaded, partition, validate_names

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetSpec:
    """What to wrap and with which hooks."""

    packages: Tuple[str, ...] = ()
    subs: Tuple[str, ...] = ()
    wrap_inherited: bool = False
    pre: Optional[Callable] = None
    post: Optional[Callable] = None
    post_on_error: bool = False

    def narrowed(self, namespaces: Sequence[str]) -> "TargetSpec":
        """Copy of this target limited to exactly ``namespaces`` and no explicit subs."""
        return replace(self, packages=tuple(namespaces), subs=())

    @property
    def has_hooks(self) -> bool:
        return self.pre is not None or self.post is not None


def wrap_loaded(
    spec: TargetSpec,
    namespaces: Sequence[str],
    registry: Optional[InterceptRegistry] = None,
) -> List[str]:
    """Wrap the given loaded namespaces plus ``spec.subs``."""
    names: List[str] = []

    for namespace in namespaces:
        if spec.wrap_inherited:
            inheritance.expand(namespace)
        names.extend(list_callables(namespace))

    names.extend(spec.subs)

    if not spec.has_hooks:
        logger.debug("No pre or post hook given; %d subroutines left alone", len(names))
        return []

    return wrap(names, spec.pre, spec.post, post_on_error=spec.post_on_error, registry=registry)


def _deferred(spec: TargetSpec, registry: Optional[InterceptRegistry], namespaces: List[str]):
    return wrap_loaded(spec.narrowed(namespaces), namespaces, registry=registry)


def wrapsubs(
    packages: Optional[Sequence[str]] = None,
    subs: Optional[Sequence[str]] = None,
    wrap_inherited: bool = False,
    pre: Optional[Callable] = None,
    post: Optional[Callable] = None,
    post_on_error: Optional[bool] = None,
    registry: Optional[InterceptRegistry] = None,
) -> List[str]:
    """Install ``pre`` and ``post`` around the subroutines of ``packages`` and ``subs``.

    Args:
        packages: namespace names; ``"a.b.*"`` means ``a.b`` and every
            namespace below it. Namespaces not imported yet are wrapped
            when they are.
        subs: fully-qualified subroutine names. These must already exist.
        wrap_inherited: also wrap routines that classes in ``packages``
            inherit from their direct parents.
        pre: called as ``pre(name, *args, **kwargs)`` before each call.
        post: called as ``post(name, *results)`` after each call.
        post_on_error: run ``post(name)`` when the original raises.
            Defaults to the ``post_on_error`` setting.
        registry: where originals are recorded; the process-wide one by default.

    Returns:
        The names wrapped by this call.

    Raises:
        ConfigError: ``packages`` or ``subs`` is not a list of names.
        UnknownSubroutineError: an explicit sub does not exist.
    """
    wildcards, literals = partition(packages)
    spec = TargetSpec(
        packages=tuple(str(p) for p in wildcards + literals),
        subs=validate_names(subs, "subs"),
        wrap_inherited=bool(wrap_inherited),
        pre=pre,
        post=post,
        post_on_error=Config.get("post_on_error", False) if post_on_error is None else post_on_error,
    )
    registry = registry if registry is not None else default_registry()

    namespaces: List[str] = []
    if wildcards or literals:
        loader.install(wildcards, literals, functools.partial(_deferred, spec, registry))
        namespaces = expand_loaded(wildcards + literals)

    wrapped = wrap_loaded(spec, namespaces, registry=registry)
    logger.info("Wrapped %d subroutines in %d namespaces", len(wrapped), len(namespaces))
    return wrapped


def is_wrapped(name: str, registry: Optional[InterceptRegistry] = None) -> bool:
    """Return True if ``name`` has been wrapped."""
    registry = registry if registry is not None else default_registry()
    return name in registry


def original_of(name: str, registry: Optional[InterceptRegistry] = None):
    """Return the binding ``name`` had before it was wrapped, or None."""
    registry = registry if registry is not None else default_registry()
    return registry.original(name)
