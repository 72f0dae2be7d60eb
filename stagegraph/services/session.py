"""Editor session: the canvas graph state plus its undo history.

Every structural edit goes through ``EditorSession._mutate``, which computes the
new node/edge tuples, snapshots the prior state and swaps the new one in. An
edit that is rejected or changes nothing leaves no history entry. Dragging a
node (``move_node``) is positional only and is not recorded.
"""

from __future__ import annotations

import sys
import time
from typing import Any, Callable, Iterable

from stagegraph.config import EditorConfig
from stagegraph.domain.models import Edge, Handle, Node, Position, Snapshot, ValidationResult
from stagegraph.errors import GraphEditError
from stagegraph.services.history import EditHistory
from stagegraph.services.layout import layered_layout
from stagegraph.services.validator import validate_dag

_State = tuple[tuple[Node, ...], tuple[Edge, ...]]
_Change = Callable[[tuple[Node, ...], tuple[Edge, ...]], "_State | None"]


def is_valid_connection(source: str, target: str, source_handle: str | None, target_handle: str | None) -> bool:
    """Only outgoing (right) to incoming (left) handles, never a node to itself."""
    if source == target:
        return False
    return source_handle == "out" and target_handle == "in"


class EditorSession:
    """Graph state for one interactive editor."""

    def __init__(
        self,
        config: EditorConfig | None = None,
        *,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
    ) -> None:
        self.config = config or EditorConfig()
        self.history = EditHistory(limit=self.config.history_limit)
        self._nodes: tuple[Node, ...] = tuple(nodes)
        self._edges: tuple[Edge, ...] = tuple(edges)

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._nodes

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    # ------------------------------------------------------------------
    # Structural edits (undoable)
    # ------------------------------------------------------------------

    def add_node(
        self,
        label: str,
        *,
        kind: str | None = None,
        position: Position | None = None,
        node_id: str | None = None,
    ) -> Node:
        """Add a stage and return it.

        Raises:
            GraphEditError: If the label is empty, or ``node_id`` is blank or taken.
        """
        if not label or not label.strip():
            raise GraphEditError("Node label must be a non-empty string")

        existing = {node.id for node in self._nodes}
        if node_id is None:
            node_id = self._next_node_id(existing)
        elif not node_id.strip():
            raise GraphEditError("Node id must be a non-empty string")
        elif node_id in existing:
            raise GraphEditError(f"Node id already exists: {node_id}")

        node = Node(id=node_id, label=label, kind=kind, position=position or Position())
        self._mutate(f"add_node {node_id}", lambda nodes, edges: ((*nodes, node), edges))
        return node

    def connect(
        self,
        source: str,
        target: str,
        *,
        source_handle: Handle | str | None = "out",
        target_handle: Handle | str | None = "in",
    ) -> Edge | None:
        """Connect two nodes; returns None when the connection is not allowed.

        Raises:
            GraphEditError: If either endpoint is not a node of this session.
        """
        known = {node.id for node in self._nodes}
        for endpoint in (source, target):
            if endpoint not in known:
                raise GraphEditError(f"Unknown node id: {endpoint}")

        if not is_valid_connection(source, target, source_handle, target_handle):
            sys.stderr.write(
                f"[SESSION] Rejected connection {source}.{source_handle} -> {target}.{target_handle}\n"
            )
            sys.stderr.flush()
            return None

        if any(e.source == source and e.target == target for e in self._edges):
            return None

        edge = Edge(
            id=self._next_edge_id(source, target),
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle,
        )
        self._mutate(f"connect {edge.id}", lambda nodes, edges: (nodes, (*edges, edge)))
        return edge

    def delete_nodes(self, node_ids: Iterable[str]) -> None:
        """Remove nodes together with every edge touching them."""
        doomed = set(node_ids)

        def change(nodes: tuple[Node, ...], edges: tuple[Edge, ...]) -> _State | None:
            if not any(node.id in doomed for node in nodes):
                return None
            kept_nodes = tuple(n for n in nodes if n.id not in doomed)
            kept_edges = tuple(e for e in edges if e.source not in doomed and e.target not in doomed)
            return kept_nodes, kept_edges

        self._mutate(f"delete_nodes {sorted(doomed)}", change)

    def delete_edges(self, edge_ids: Iterable[str]) -> None:
        doomed = set(edge_ids)

        def change(nodes: tuple[Node, ...], edges: tuple[Edge, ...]) -> _State | None:
            if not any(edge.id in doomed for edge in edges):
                return None
            return nodes, tuple(e for e in edges if e.id not in doomed)

        self._mutate(f"delete_edges {sorted(doomed)}", change)

    def auto_layout(self) -> dict[str, Position]:
        """Reposition every node with the layered layout (one undo step)."""
        positions = layered_layout(
            self._nodes,
            self._edges,
            node_width=self.config.node_width,
            node_height=self.config.node_height,
            rank_sep=self.config.rank_sep,
            node_sep=self.config.node_sep,
        )

        def change(nodes: tuple[Node, ...], edges: tuple[Edge, ...]) -> _State | None:
            if not nodes:
                return None
            return tuple(n.model_copy(update={"position": positions[n.id]}) for n in nodes), edges

        self._mutate("auto_layout", change)
        return positions

    # ------------------------------------------------------------------
    # Non-structural
    # ------------------------------------------------------------------

    def move_node(self, node_id: str, position: Position) -> Node:
        """Drag a node. Positional only, so it is not recorded in history."""
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                moved = node.model_copy(update={"position": position})
                self._nodes = (*self._nodes[:index], moved, *self._nodes[index + 1:])
                return moved
        raise GraphEditError(f"Unknown node id: {node_id}")

    def undo(self) -> bool:
        """Restore the previous snapshot. Returns False if there was nothing to undo."""
        previous = self.history.undo()
        if previous is None:
            return False
        self._nodes = previous.nodes
        self._edges = previous.edges
        sys.stderr.write(f"[SESSION] Undo -> {len(self._nodes)} nodes, {len(self._edges)} edges\n")
        sys.stderr.flush()
        return True

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def snapshot(self) -> Snapshot:
        return Snapshot(nodes=self._nodes, edges=self._edges)

    def validate(self) -> ValidationResult:
        return validate_dag(self._nodes, self._edges)

    def state(self) -> dict[str, Any]:
        """JSON-ready view of the session for the canvas."""
        return {
            "nodes": [node.model_dump(by_alias=True, mode="json") for node in self._nodes],
            "edges": [edge.model_dump(by_alias=True, mode="json") for edge in self._edges],
            "validation": self.validate().model_dump(by_alias=True, mode="json"),
            "canUndo": self.can_undo(),
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _mutate(self, action: str, change: _Change) -> bool:
        """Snapshot the current state, then apply ``change`` as one step.

        ``change`` returns the new ``(nodes, edges)`` or None to reject the edit.
        """
        updated = change(self._nodes, self._edges)
        if updated is None:
            return False

        self.history.snapshot(self._nodes, self._edges)
        self._nodes, self._edges = updated
        sys.stderr.write(f"[SESSION] {action} (history={len(self.history)})\n")
        sys.stderr.flush()
        return True

    @staticmethod
    def _next_node_id(existing: set[str]) -> str:
        candidate = time.time_ns() // 1_000_000
        while str(candidate) in existing:
            candidate += 1
        return str(candidate)

    def _next_edge_id(self, source: str, target: str) -> str:
        existing = {edge.id for edge in self._edges}
        base = f"e{source}-{target}"
        if base not in existing:
            return base
        suffix = 1
        while f"{base}-{suffix}" in existing:
            suffix += 1
        return f"{base}-{suffix}"
