"""Numerical utilities."""

from .rootfinding import RootFindingError, RootResult, brent, find_bracket

__all__ = ["RootFindingError", "RootResult", "brent", "find_bracket"]
