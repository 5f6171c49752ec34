"""Test to verify pytest setup is working correctly."""


def test_basic_setup():
    """Verify basic test setup works."""
    assert True


def test_import_subwrap():
    """Verify we can import the subwrap package."""
    import subwrap

    assert subwrap.wrapsubs is subwrap.wrap_packages
    assert subwrap.__version__ == "2.0.0"


def test_python_version():
    """Verify Python version is 3.9+."""
    import sys

    assert sys.version_info >= (3, 9)
