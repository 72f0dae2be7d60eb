"""Linear undo stack of full graph snapshots.

Snapshots are pushed *before* a structural mutation and popped on undo. A
popped snapshot is discarded: there is no redo.
"""

from __future__ import annotations

import sys
from typing import Iterable

from stagegraph.domain.models import Edge, Node, Snapshot


class EditHistory:
    """Append-only undo stack owned by one editing surface."""

    def __init__(self, limit: int | None = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError("limit must be a positive integer or None")
        self._limit = limit
        self._entries: list[Snapshot] = []

    def snapshot(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> Snapshot:
        """Record the state about to be mutated."""
        entry = Snapshot(nodes=tuple(nodes), edges=tuple(edges))
        self._entries.append(entry)

        if self._limit is not None and len(self._entries) > self._limit:
            dropped = len(self._entries) - self._limit
            del self._entries[:dropped]
            sys.stderr.write(f"[HISTORY] Limit {self._limit} reached, dropped {dropped} oldest snapshot(s)\n")
            sys.stderr.flush()

        return entry

    def undo(self) -> Snapshot | None:
        """Pop the most recent snapshot, or return None when there is none."""
        if not self._entries:
            return None
        return self._entries.pop()

    def can_undo(self) -> bool:
        return bool(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
