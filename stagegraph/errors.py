"""Errors raised by the editor session."""

from __future__ import annotations


class GraphEditError(ValueError):
    """An edit request that cannot be applied to the current graph."""
