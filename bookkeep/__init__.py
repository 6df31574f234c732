"""Bookkeep - personal reading tracker."""

__version__ = "1.0.0"
