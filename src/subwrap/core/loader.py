"""
Loader Interceptor for Sub Wrap

Namespaces that are not imported yet are wrapped the moment their module
finishes executing. A finder at the front of ``sys.meta_path`` spots imports
of watched modules, lets the other finders locate them, and swaps in a
loader that runs the real ``exec_module`` and then applies the pending
interceptions before the import statement returns.

The finder is process-wide and is never removed once installed.
"""

import inspect
import logging
import sys
import types
from dataclasses import dataclass
from importlib.abc import Loader, MetaPathFinder
from importlib.machinery import ModuleSpec
from typing import Callable, List, Optional, Sequence, Tuple

from ..exceptions import LoadError
from .introspector import NamespacePattern, loaded_namespaces

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingInterception:
    """Patterns still waiting for their modules, and what to do when one loads."""

    patterns: Tuple[NamespacePattern, ...]
    apply: Callable[[List[str]], object]

    def is_relevant(self, module_name: str) -> bool:
        """True if the module matches, or might hold a class that matches."""
        return any(p.matches(module_name) or p.lies_below(module_name) for p in self.patterns)

    def select(self, namespaces: Sequence[str]) -> List[str]:
        return [name for name in namespaces if any(p.matches(name) for p in self.patterns)]


class InterceptingLoader(Loader):
    """Runs the real loader, then the pending interceptions for the module."""

    def __init__(self, loader: Loader, finder: "InterceptingFinder"):
        self.loader = loader
        self.finder = finder

    def create_module(self, spec: ModuleSpec):
        create = getattr(self.loader, "create_module", None)
        return create(spec) if create is not None else None

    def exec_module(self, module: types.ModuleType) -> None:
        self.loader.exec_module(module)
        self.finder.module_loaded(module)

    def __getattr__(self, item: str):
        # get_source, is_package, get_resource_reader, ...
        return getattr(self.loader, item)

    def __repr__(self):
        return f"<InterceptingLoader for {self.loader!r}>"


class InterceptingFinder(MetaPathFinder):
    """Meta path finder that hands watched modules to an InterceptingLoader."""

    def __init__(self):
        self._pending: List[PendingInterception] = []

    def add(self, entry: PendingInterception) -> None:
        self._pending.append(entry)

    def pending(self) -> List[PendingInterception]:
        return list(self._pending)

    def clear(self) -> None:
        self._pending.clear()

    def find_spec(self, fullname, path, target=None) -> Optional[ModuleSpec]:
        if not any(entry.is_relevant(fullname) for entry in self._pending):
            return None

        spec = self._find_elsewhere(fullname, path, target)
        if spec is None:
            if _is_being_imported(fullname):
                raise LoadError(fullname)
            # importlib.util.find_spec and friends only ask whether it exists
            return None

        if spec.loader is None or not hasattr(spec.loader, "exec_module"):
            logger.warning("Cannot intercept %s: loader %r has no exec_module", fullname, spec.loader)
            return spec

        spec.loader = InterceptingLoader(spec.loader, self)
        return spec

    def _find_elsewhere(self, fullname, path, target) -> Optional[ModuleSpec]:
        """Ask the other meta path finders, with this one taken off the path."""
        try:
            index = sys.meta_path.index(self)
        except ValueError:
            index = None
        else:
            del sys.meta_path[index]

        try:
            for finder in list(sys.meta_path):
                find_spec = getattr(finder, "find_spec", None)
                if find_spec is None:
                    continue
                spec = find_spec(fullname, path, target)
                if spec is not None:
                    return spec
            return None
        finally:
            if index is not None:
                sys.meta_path.insert(index, self)

    def module_loaded(self, module: types.ModuleType) -> None:
        """Apply every pending interception that names part of ``module``."""
        namespaces = loaded_namespaces(module)
        for entry in list(self._pending):
            selected = entry.select(namespaces)
            if selected:
                logger.info("Deferred wrap of %s", ", ".join(selected))
                entry.apply(selected)


def _is_being_imported(fullname: str) -> bool:
    """True if the nearest import in progress on the stack is loading ``fullname``.

    The import statement and ``importlib.import_module`` both go through
    ``importlib._bootstrap._find_and_load(name, ...)``; a bare
    ``importlib.util.find_spec`` does not.
    """
    frame = inspect.currentframe()
    try:
        while frame is not None:
            code = frame.f_code
            if code.co_name == "_find_and_load" and "importlib" in code.co_filename:
                return frame.f_locals.get("name") == fullname
            frame = frame.f_back
        return False
    finally:
        del frame


_finder: Optional[InterceptingFinder] = None


def get_finder() -> InterceptingFinder:
    global _finder
    if _finder is None:
        _finder = InterceptingFinder()
    return _finder


def install(
    wildcards: Sequence[NamespacePattern],
    literals: Sequence[NamespacePattern],
    apply: Callable[[List[str]], object],
) -> InterceptingFinder:
    """Watch for future imports of the given namespaces.

    ``apply`` receives the matching namespaces of each watched module right
    after the module's own code has run.
    """
    finder = get_finder()
    finder.add(PendingInterception(patterns=tuple(wildcards) + tuple(literals), apply=apply))

    if finder not in sys.meta_path:
        sys.meta_path.insert(0, finder)
        logger.info("Installed subwrap import hook")
    return finder


def pending() -> List[PendingInterception]:
    """Return the pending interceptions currently being watched."""
    return get_finder().pending()


def reset() -> None:
    """Forget all pending interceptions and uninstall the finder."""
    finder = get_finder()
    finder.clear()
    while finder in sys.meta_path:
        sys.meta_path.remove(finder)
