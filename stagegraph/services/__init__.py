"""Core services for stagegraph."""

from .history import EditHistory
from .layout import layered_layout
from .session import EditorSession, is_valid_connection
from .validator import validate_dag

__all__ = [
	"EditHistory",
	"EditorSession",
	"is_valid_connection",
	"layered_layout",
	"validate_dag",
]
