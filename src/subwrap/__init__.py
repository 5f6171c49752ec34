"""
Sub Wrap - pre- and post-execution hooks around every function in a package

Wrap all the functions and methods of whole module families, including
modules that have not been imported yet, with caller-supplied hooks that
see each call's arguments and results.
"""

__version__ = "2.0.0"
__license__ = "Artistic-2.0 OR GPL-2.0-only"

# Configuration
from .config import SubWrapConfig, load_config, save_config
from .core.call_logger import CallLogger
from .core.interceptor import (
    CallShape,
    InterceptRegistry,
    Interceptor,
    call_as,
    current_shape,
    default_registry,
)
from .core.introspector import list_callables
from .core.wrapsubs import TargetSpec, is_wrapped, original_of, wrapsubs
from .exceptions import ConfigError, LoadError, SubWrapError, UnknownSubroutineError

# Convenience alias
wrap_packages = wrapsubs

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Core functionality
    "wrapsubs",
    "wrap_packages",
    "TargetSpec",
    "is_wrapped",
    "original_of",
    "list_callables",
    # Call shapes
    "CallShape",
    "call_as",
    "current_shape",
    # Registry
    "InterceptRegistry",
    "Interceptor",
    "default_registry",
    # Logging hooks
    "CallLogger",
    # Errors
    "SubWrapError",
    "ConfigError",
    "LoadError",
    "UnknownSubroutineError",
    # Configuration
    "SubWrapConfig",
    "load_config",
    "save_config",
]
