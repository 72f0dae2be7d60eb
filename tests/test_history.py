"""Unit tests for the undo stack."""

from __future__ import annotations

import pytest

from stagegraph.domain.models import Edge, Node, Snapshot
from stagegraph.services.history import EditHistory


def test_empty_history_cannot_undo() -> None:
    history = EditHistory()

    assert history.can_undo() is False
    assert history.undo() is None
    assert len(history) == 0


def test_undo_returns_snapshot_taken_before_mutation() -> None:
    history = EditHistory()
    s1_nodes = [Node(id="1", label="A"), Node(id="2", label="B")]
    s1_edges = [Edge(id="e1", source="1", target="2")]

    history.snapshot(s1_nodes, s1_edges)
    # Mutating the caller's lists afterwards must not leak into the snapshot.
    s1_nodes.append(Node(id="3", label="C"))
    s1_edges.clear()

    restored = history.undo()

    assert restored == Snapshot(
        nodes=(Node(id="1", label="A"), Node(id="2", label="B")),
        edges=(Edge(id="e1", source="1", target="2"),),
    )
    assert history.can_undo() is False
    assert history.undo() is None


def test_undo_is_last_in_first_out() -> None:
    history = EditHistory()
    history.snapshot([Node(id="a")], [])
    history.snapshot([Node(id="a"), Node(id="b")], [])

    assert [n.id for n in history.undo().nodes] == ["a", "b"]
    assert [n.id for n in history.undo().nodes] == ["a"]


def test_limit_drops_oldest_entries() -> None:
    history = EditHistory(limit=2)
    for i in range(4):
        history.snapshot([Node(id=str(i))], [])

    assert len(history) == 2
    assert history.undo().nodes[0].id == "3"
    assert history.undo().nodes[0].id == "2"
    assert history.undo() is None


def test_invalid_limit_is_rejected() -> None:
    with pytest.raises(ValueError):
        EditHistory(limit=0)


def test_clear_empties_the_stack() -> None:
    history = EditHistory()
    history.snapshot([], [])
    history.clear()

    assert history.can_undo() is False
