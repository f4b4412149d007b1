"""Futarchy proposal threshold tracker."""

__version__ = "0.1.0"
