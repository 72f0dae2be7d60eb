"""Domain models shared by the validator, history and editor session."""

from stagegraph.domain.models import Edge, Handle, Node, Position, Snapshot, ValidationResult

__all__ = ["Edge", "Handle", "Node", "Position", "Snapshot", "ValidationResult"]
