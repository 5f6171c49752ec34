"""
Core functionality package for Sub Wrap.

This package contains namespace discovery, the import hook for namespaces
that are not loaded yet, inherited-method forwarding and the interception
engine itself.
"""

from .call_logger import CallLogger
from .interceptor import (
    CallShape,
    InterceptRegistry,
    Interceptor,
    call_as,
    call_depth,
    current_shape,
    default_registry,
    wrap,
)
from .introspector import NamespacePattern, list_callables, loaded_namespaces, resolve_namespace
from .wrapsubs import TargetSpec, is_wrapped, original_of, wrap_loaded, wrapsubs

__all__ = [
    "CallLogger",
    "CallShape",
    "InterceptRegistry",
    "Interceptor",
    "NamespacePattern",
    "TargetSpec",
    "call_as",
    "call_depth",
    "current_shape",
    "default_registry",
    "is_wrapped",
    "list_callables",
    "loaded_namespaces",
    "original_of",
    "resolve_namespace",
    "wrap",
    "wrap_loaded",
    "wrapsubs",
]
