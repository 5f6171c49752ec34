"""
Namespace Resolver for Sub Wrap

Expands the ``packages`` part of a target specification into the concrete
namespaces that are loaded right now.
"""

import logging
import sys
import types
from typing import Iterable, List, Sequence, Tuple

from ..exceptions import ConfigError
from .introspector import NamespacePattern, loaded_namespaces, resolve_namespace

logger = logging.getLogger(__name__)


def validate_names(value, option: str) -> Tuple[str, ...]:
    """Check that ``value`` is a list-like collection of strings and return it as a tuple."""
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
        raise ConfigError(f"Bad param {option!r}: expected a list of names, got {type(value).__name__}")
    for item in value:
        if not isinstance(item, str) or not item:
            raise ConfigError(f"Bad param {option!r}: {item!r} is not a namespace name")
    return tuple(value)


def partition(packages) -> Tuple[List[NamespacePattern], List[NamespacePattern]]:
    """Split ``packages`` into (wildcards, literals)."""
    wildcards, literals = [], []
    for text in validate_names(packages, "packages"):
        pattern = NamespacePattern.parse(text)
        (wildcards if pattern.wildcard else literals).append(pattern)
    return wildcards, literals


def candidate_modules(patterns: Sequence[NamespacePattern]) -> List[types.ModuleType]:
    """Loaded modules that either match a pattern or may contain a matching class."""
    modules = []
    for name, module in list(sys.modules.items()):
        if not isinstance(module, types.ModuleType):
            continue
        if any(p.matches(name) or p.lies_below(name) for p in patterns):
            modules.append(module)
    return modules


def expand_loaded(patterns: Iterable[NamespacePattern]) -> List[str]:
    """Return the currently-loaded namespaces named by ``patterns``.

    Literal names are kept when they resolve. Wildcards are matched against
    every loaded module and every class defined in one. Nothing matching is
    not an error.
    """
    patterns = list(patterns)
    wildcards = [p for p in patterns if p.wildcard]
    found: List[str] = []

    for pattern in patterns:
        if not pattern.wildcard and resolve_namespace(pattern.prefix) is not None:
            found.append(pattern.prefix)

    if wildcards:
        for module in candidate_modules(wildcards):
            for name in loaded_namespaces(module):
                if any(p.matches(name) for p in wildcards):
                    found.append(name)

    namespaces = list(dict.fromkeys(found))
    logger.debug("Resolved %s to %d loaded namespaces", [str(p) for p in patterns], len(namespaces))
    return namespaces
