"""Smoke test to verify the project is set up correctly."""

from py_memviz import __doc__


def test_package_is_importable() -> None:
    """Verify that py_memviz can be imported."""
    assert __doc__ is not None
