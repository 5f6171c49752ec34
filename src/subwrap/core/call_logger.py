"""
Call Logger for Sub Wrap

A ready-made pre/post pair that writes every intercepted call and return to
a standard ``logging`` logger. Used by the CLI, and handy on its own:

    calls = CallLogger()
    wrapsubs(packages=["myapp.*"], pre=calls.pre, post=calls.post)
"""

import logging
import time
from collections import Counter
from typing import Any, Dict, List, Optional, Union

from ..config import Config
from .interceptor import CallShape, call_depth, current_shape


class CallLogger:
    """Log intercepted calls and returns."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        level: Union[int, str] = logging.INFO,
        max_value_length: Optional[int] = None,
        include_memory: bool = False,
    ):
        self.logger = logger or logging.getLogger("subwrap.calls")
        self.level = logging.getLevelName(level) if isinstance(level, str) else level
        self.max_value_length = max_value_length or Config.get("max_value_length", 1000)
        self.include_memory = include_memory

        self.call_counts: Counter = Counter()
        # start times keyed by interceptor nesting depth
        self._started: Dict[int, float] = {}

    def pre(self, name: str, *args, **kwargs) -> None:
        """Log a call."""
        self.call_counts[name] += 1
        depth = call_depth()
        self._forget_deeper_than(depth)
        self._started[depth] = time.perf_counter()

        args_str = self._truncate_value(", ".join(repr(a) for a in args))
        if kwargs:
            kwargs_str = ", ".join(f"{k}={v!r}" for k, v in kwargs.items())
            args_str = self._truncate_value(f"{args_str}, {kwargs_str}" if args else kwargs_str)

        self.logger.log(self.level, "→ %s(%s)", name, args_str)

    def post(self, name: str, *results) -> None:
        """Log a return."""
        depth = call_depth()
        started = self._started.pop(depth, None)
        self._forget_deeper_than(depth)
        elapsed = time.perf_counter() - started if started is not None else 0.0

        shape = current_shape()
        if shape is CallShape.VOID:
            shown = "(void)"
        elif shape is CallShape.SEQUENCE:
            shown = self._truncate_value(repr(results))
        else:
            shown = self._truncate_value(repr(results[0]) if results else "None")

        message = "← %s → %s (%.3fs)"
        values: List[Any] = [name, shown, elapsed]
        if self.include_memory:
            message += " rss=%s"
            values.append(self._get_memory_usage())

        self.logger.log(self.level, message, *values)

    def hooks(self):
        """Return ``(pre, post)`` ready to hand to ``wrapsubs``."""
        return self.pre, self.post

    def get_stats(self) -> Dict[str, Any]:
        """Get call statistics."""
        return {
            "total_calls": sum(self.call_counts.values()),
            "calls": dict(self.call_counts),
        }

    def _forget_deeper_than(self, depth: int) -> None:
        """Drop start times of nested calls that raised and never reached post."""
        for stale in [d for d in self._started if d > depth]:
            del self._started[stale]

    def _truncate_value(self, value: str) -> str:
        """Truncate long values."""
        if len(value) > self.max_value_length:
            return value[: self.max_value_length] + "..."
        return value

    def _get_memory_usage(self) -> Optional[int]:
        """Get current memory usage in bytes."""
        try:
            import psutil

            return psutil.Process().memory_info().rss
        except (ImportError, OSError):
            return None
