"""
Interception Engine for Sub Wrap

Replaces subroutine bindings with Interceptor objects that run a ``pre``
hook, the original, then a ``post`` hook, all in the call shape the caller
asked for.

Python has a single return convention, so the caller states the shape it
wants with ``call_as``. A plain call is a SINGLE call. Functions that
behave differently per shape read ``current_shape()`` on entry.

The shape belongs to the function ``call_as`` invoked and nobody else:
``current_shape()`` only reports it when read from that function's own
frame. Anything it calls in the normal way sees SINGLE.

Known limitations: the wrapped function sees an extra frame on the stack,
so code that inspects its immediate caller will find the interceptor.
Callables without a Python code object (builtins, C extensions) never see
a shape other than SINGLE.
"""

import functools
import inspect
import logging
import types
from contextvars import ContextVar
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..exceptions import UnknownSubroutineError
from .introspector import is_routine, resolve_namespace, split_name

logger = logging.getLogger(__name__)


class CallShape(Enum):
    """What the caller expects back from a call."""

    VOID = "void"
    SINGLE = "single"
    SEQUENCE = "sequence"


class _ShapeRequest:
    """A shape asked for one call of one function."""

    __slots__ = ("shape", "codes", "frames")

    def __init__(self, shape: CallShape, codes: Tuple[types.CodeType, ...]):
        self.shape = shape
        self.codes = codes
        # per code object, the frame that first read the shape
        self.frames: Dict[types.CodeType, types.FrameType] = {}


_current_shape: ContextVar[Optional[_ShapeRequest]] = ContextVar("subwrap_call_shape", default=None)
_call_depth: ContextVar[int] = ContextVar("subwrap_call_depth", default=0)


def current_shape() -> CallShape:
    """Return the shape the calling function was invoked in.

    Only the function handed to ``call_as`` sees the requested shape;
    every other caller, including functions it calls and recursive calls
    of itself, gets SINGLE.
    """
    request = _current_shape.get()
    if request is None:
        return CallShape.SINGLE

    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    del frame
    if caller is None:
        return CallShape.SINGLE

    code = caller.f_code
    if code not in request.codes:
        return CallShape.SINGLE
    return request.shape if request.frames.setdefault(code, caller) is caller else CallShape.SINGLE


def call_depth() -> int:
    """Return how many intercepted calls are currently in progress."""
    return _call_depth.get()


def _codes_of(func: Any) -> Tuple[types.CodeType, ...]:
    """Code objects that run first when ``func`` is called, decorator layers included."""
    codes = []
    seen = set()
    while func is not None and id(func) not in seen:
        seen.add(id(func))
        if isinstance(func, types.MethodType):
            func = func.__func__
        elif isinstance(func, functools.partial):
            func = func.func
        if isinstance(func, (types.MethodType, functools.partial)):
            continue

        code = getattr(func, "__code__", None)
        if code is None and not inspect.isroutine(func):
            code = getattr(getattr(type(func), "__call__", None), "__code__", None)
        if isinstance(code, types.CodeType):
            codes.append(code)
        func = getattr(func, "__wrapped__", None)
    return tuple(codes)


def shape_result(shape: CallShape, value: Any) -> Any:
    """Coerce a return value to ``shape``."""
    if shape is CallShape.VOID:
        return None
    if shape is CallShape.SEQUENCE:
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(value)
        return (value,)
    return value


def call_as(shape: CallShape, func: Callable, *args, **kwargs) -> Any:
    """Call ``func`` in ``shape`` and return its shaped result."""
    if isinstance(func, Interceptor):
        return func.call_as(shape, *args, **kwargs)
    if isinstance(func, types.MethodType) and isinstance(func.__func__, Interceptor):
        return func.__func__.call_as(shape, func.__self__, *args, **kwargs)

    request = _ShapeRequest(shape, _codes_of(func))
    token = _current_shape.set(request)
    try:
        return shape_result(shape, func(*args, **kwargs))
    finally:
        request.frames.clear()
        _current_shape.reset(token)


class InterceptRegistry:
    """Maps fully-qualified names to the original bindings they replaced.

    A name is registered at most once and never removed.
    """

    def __init__(self):
        self._originals: Dict[str, Any] = {}

    def register_if_absent(self, name: str, original: Any) -> bool:
        """Record ``original`` under ``name`` unless the name is already known."""
        if name in self._originals:
            return False
        self._originals[name] = original
        return True

    def original(self, name: str) -> Optional[Any]:
        return self._originals.get(name)

    def names(self) -> List[str]:
        return list(self._originals)

    def __contains__(self, name: str) -> bool:
        return name in self._originals

    def __len__(self) -> int:
        return len(self._originals)


_default_registry = InterceptRegistry()


def default_registry() -> InterceptRegistry:
    """Return the process-wide registry."""
    return _default_registry


class Interceptor:
    """Stand-in for a wrapped subroutine."""

    __subwrap_interceptor__ = True

    def __init__(
        self,
        name: str,
        func: Callable,
        pre: Optional[Callable] = None,
        post: Optional[Callable] = None,
        post_on_error: bool = False,
    ):
        # update_wrapper copies func.__dict__, so it must run before our own state is set
        functools.update_wrapper(self, func)
        self.__wrapped__ = func

        self.name = name
        self.func = func
        self.pre = pre
        self.post = post
        self.post_on_error = post_on_error

    def __call__(self, *args, **kwargs):
        return self.call_as(CallShape.SINGLE, *args, **kwargs)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def call_as(self, shape: CallShape, *args, **kwargs) -> Any:
        """Run pre, the original and post in ``shape``."""
        depth = _call_depth.set(_call_depth.get() + 1)
        try:
            if self.pre is not None:
                call_as(shape, self.pre, self.name, *args, **kwargs)

            try:
                result = call_as(shape, self.func, *args, **kwargs)
            except Exception:
                if self.post_on_error and self.post is not None:
                    call_as(shape, self.post, self.name)
                raise

            if self.post is not None:
                if shape is CallShape.VOID:
                    call_as(shape, self.post, self.name)
                elif shape is CallShape.SEQUENCE:
                    call_as(shape, self.post, self.name, *result)
                else:
                    call_as(shape, self.post, self.name, result)

            return result
        finally:
            _call_depth.reset(depth)

    def __repr__(self):
        return f"<Interceptor {self.name}>"


def _install(owner, attr: str, name: str, raw: Any, pre, post, post_on_error) -> None:
    if isinstance(raw, staticmethod):
        replacement = staticmethod(Interceptor(name, raw.__func__, pre, post, post_on_error))
    elif isinstance(raw, classmethod):
        replacement = classmethod(Interceptor(name, raw.__func__, pre, post, post_on_error))
    else:
        replacement = Interceptor(name, raw, pre, post, post_on_error)
    setattr(owner, attr, replacement)


def wrap(
    names: Iterable[str],
    pre: Optional[Callable] = None,
    post: Optional[Callable] = None,
    post_on_error: bool = False,
    registry: Optional[InterceptRegistry] = None,
) -> List[str]:
    """Wrap every subroutine in ``names`` that is not already wrapped.

    Returns the names wrapped by this call.
    """
    if pre is None and post is None:
        return []

    registry = registry if registry is not None else default_registry()
    wrapped = []

    for name in dict.fromkeys(names):
        if name in registry:
            logger.debug("Skipping %s: already wrapped", name)
            continue

        owner_name, attr = split_name(name)
        owner = resolve_namespace(owner_name)
        if owner is None:
            raise UnknownSubroutineError(name, f"namespace {owner_name!r} is not loaded")

        raw = vars(owner).get(attr)
        if raw is None or not is_routine(raw):
            raise UnknownSubroutineError(name, "no such subroutine")

        _install(owner, attr, name, raw, pre, post, post_on_error)
        registry.register_if_absent(name, raw)
        wrapped.append(name)
        logger.debug("Wrapped %s", name)

    return wrapped
