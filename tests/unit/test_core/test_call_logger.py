"""Unit tests for the call logger hooks."""

import logging

import pytest

from subwrap.config import Config
from subwrap.core.call_logger import CallLogger
from subwrap.core.interceptor import CallShape, call_as, wrap

SOURCE = """
def simple_function(x, y):
    return x + y

def listing():
    return [1, 2]

def error_function():
    raise ValueError("Test error")

def guarded():
    try:
        error_function()
    except ValueError:
        return "caught"
"""


@pytest.fixture
def funcs(make_module, unique_name):
    return make_module(unique_name("calls"), SOURCE)


@pytest.fixture
def calls():
    return CallLogger(logger=logging.getLogger("subwrap.calls.test"))


def messages(caplog):
    return [r.getMessage() for r in caplog.records if r.name == "subwrap.calls.test"]


class TestCallLogger:
    """Test the logged lines."""

    def test_call_and_return(self, funcs, calls, registry, caplog):
        name = f"{funcs.__name__}.simple_function"
        wrap([name], *calls.hooks(), registry=registry)

        with caplog.at_level(logging.INFO, logger="subwrap.calls.test"):
            assert funcs.simple_function(2, y=3) == 5

        logged = messages(caplog)
        assert logged[0] == f"→ {name}(2, y=3)"
        assert logged[1].startswith(f"← {name} → 5 (")

    def test_shapes(self, funcs, calls, registry, caplog):
        name = f"{funcs.__name__}.listing"
        wrap([name], calls.pre, calls.post, registry=registry)

        with caplog.at_level(logging.INFO, logger="subwrap.calls.test"):
            call_as(CallShape.SEQUENCE, funcs.listing)
            call_as(CallShape.VOID, funcs.listing)

        returns = [m for m in messages(caplog) if m.startswith("←")]
        assert returns[0].startswith(f"← {name} → (1, 2) (")
        assert returns[1].startswith(f"← {name} → (void) (")

    def test_level(self, funcs, registry, caplog):
        calls = CallLogger(logger=logging.getLogger("subwrap.calls.test"), level="DEBUG")
        wrap([f"{funcs.__name__}.simple_function"], *calls.hooks(), registry=registry)

        with caplog.at_level(logging.INFO, logger="subwrap.calls.test"):
            funcs.simple_function(1, 1)
        assert messages(caplog) == []

        with caplog.at_level(logging.DEBUG, logger="subwrap.calls.test"):
            funcs.simple_function(1, 1)
        assert len(messages(caplog)) == 2

    def test_error_logged_with_post_on_error(self, funcs, calls, registry, caplog):
        name = f"{funcs.__name__}.error_function"
        wrap([name], *calls.hooks(), post_on_error=True, registry=registry)

        with caplog.at_level(logging.INFO, logger="subwrap.calls.test"):
            with pytest.raises(ValueError):
                funcs.error_function()

        assert messages(caplog)[1].startswith(f"← {name} → None (")

    def test_stats(self, funcs, calls, registry):
        name = f"{funcs.__name__}.simple_function"
        wrap([name], *calls.hooks(), registry=registry)

        funcs.simple_function(1, 2)
        funcs.simple_function(3, 4)

        assert calls.get_stats() == {"total_calls": 2, "calls": {name: 2}}

    def test_truncation(self, calls):
        calls.max_value_length = 10
        assert calls._truncate_value("x" * 20) == "x" * 10 + "..."
        assert calls._truncate_value("short") == "short"

    def test_max_value_length_from_config(self):
        Config.set("max_value_length", 42)
        assert CallLogger().max_value_length == 42

    def test_memory(self, funcs, registry, caplog):
        calls = CallLogger(logger=logging.getLogger("subwrap.calls.test"), include_memory=True)
        wrap([f"{funcs.__name__}.simple_function"], *calls.hooks(), registry=registry)

        with caplog.at_level(logging.INFO, logger="subwrap.calls.test"):
            funcs.simple_function(1, 2)

        assert " rss=" in messages(caplog)[1]
        assert isinstance(calls._get_memory_usage(), int)

    def test_failing_calls_leave_no_timers(self, funcs, calls, registry):
        """Calls that raise without reaching post do not pile up start times."""
        wrap(
            [f"{funcs.__name__}.error_function", f"{funcs.__name__}.simple_function"],
            *calls.hooks(),
            registry=registry,
        )

        for _ in range(1000):
            with pytest.raises(ValueError):
                funcs.error_function()
        assert len(calls._started) <= 1

        funcs.simple_function(1, 2)
        assert calls._started == {}

    def test_nested_failure_cleaned_up_by_caller(self, funcs, calls, registry):
        wrap(
            [f"{funcs.__name__}.guarded", f"{funcs.__name__}.error_function"],
            *calls.hooks(),
            registry=registry,
        )

        assert funcs.guarded() == "caught"
        assert calls._started == {}
        assert calls.get_stats()["total_calls"] == 2
