"""Helper composition for tests."""

from apiharness.fixtures.composer import HelperSet, compose_helpers

__all__ = ["HelperSet", "compose_helpers"]
