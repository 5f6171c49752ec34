"""Test fixtures for Sub Wrap tests."""

import importlib
import sys
import textwrap
import types
import uuid

import pytest

from subwrap.config import Config
from subwrap.core import loader
from subwrap.core.interceptor import InterceptRegistry, current_shape


@pytest.fixture(autouse=True)
def clean_state():
    """Leave no import hook or settings behind between tests."""
    Config.reset()
    yield
    loader.reset()
    Config.reset()


@pytest.fixture
def registry():
    """A fresh registry so tests do not see each other's wrapped names."""
    return InterceptRegistry()


@pytest.fixture
def unique_name():
    """Return a module-name factory that never repeats."""

    def make(stem="swtest"):
        return f"{stem}_{uuid.uuid4().hex[:10]}"

    return make


@pytest.fixture
def make_module(monkeypatch):
    """Create an in-memory module from source and register it in sys.modules."""

    def make(name, source=""):
        module = types.ModuleType(name)
        exec(textwrap.dedent(source), module.__dict__)
        monkeypatch.setitem(sys.modules, name, module)
        return module

    return make


@pytest.fixture
def package_dir(tmp_path, monkeypatch):
    """Write source files under tmp_path and make them importable.

    Returns a function taking ``{relative_path: source}``. Modules imported
    from the tree are dropped from sys.modules afterwards.
    """
    monkeypatch.syspath_prepend(str(tmp_path))
    before = set(sys.modules)

    def write(files):
        for relative, source in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(source))
        importlib.invalidate_caches()
        return tmp_path

    yield write

    for name in set(sys.modules) - before:
        module = sys.modules.get(name)
        if str(tmp_path) in str(getattr(module, "__file__", "") or ""):
            del sys.modules[name]


class Recorder:
    """Collects pre and post calls along with the shape each ran in."""

    def __init__(self):
        self.calls = []

    def pre(self, name, *args, **kwargs):
        self.calls.append(("pre", name, args, kwargs, current_shape()))

    def post(self, name, *results):
        self.calls.append(("post", name, results, current_shape()))

    def pres(self):
        return [c for c in self.calls if c[0] == "pre"]

    def posts(self):
        return [c for c in self.calls if c[0] == "post"]


@pytest.fixture
def recorder():
    """Pre/post hooks that remember what they saw."""
    return Recorder()
