"""stagegraph core package.

Validates the pipeline graph drawn on the canvas and keeps its undo history.
This package has no dependency on the UI runtime; the canvas talks to it over
``stagegraph.rpc.server``.
"""

from __future__ import annotations

from stagegraph.domain.models import Edge, Node, Position, Snapshot, ValidationResult
from stagegraph.services.history import EditHistory
from stagegraph.services.session import EditorSession
from stagegraph.services.validator import validate_dag

__version__ = "0.1.0"

__all__ = [
    "EditHistory",
    "EditorSession",
    "Edge",
    "Node",
    "Position",
    "Snapshot",
    "ValidationResult",
    "validate_dag",
]
