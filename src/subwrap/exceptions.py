"""
Exception hierarchy for Sub Wrap.

Configuration and load failures are raised by the library itself. Anything
raised by a wrapped function (or by the pre/post hooks) is never caught or
re-wrapped and reaches the caller unchanged.
"""


class SubWrapError(Exception):
    """Base class for errors raised by Sub Wrap."""


class ConfigError(SubWrapError, TypeError):
    """A target specification has an unusable shape."""


class LoadError(SubWrapError, ModuleNotFoundError):
    """A watched module matched but no finder could locate it."""

    def __init__(self, name: str):
        super().__init__(f"No module named {name!r} (watched by subwrap)", name=name)


class UnknownSubroutineError(SubWrapError, LookupError):
    """An explicitly requested subroutine does not exist."""

    def __init__(self, name: str, reason: str = "not found"):
        self.sub_name = name
        super().__init__(f"Cannot wrap {name!r}: {reason}")
