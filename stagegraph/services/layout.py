"""Left-to-right layered layout for the canvas.

Ranks come from a longest-path pass over Kahn's topological order, so every
edge of the acyclic part points rightwards. Nodes left over by Kahn (members
of a cycle) are ranked one step after their already ranked predecessors.
"""

from __future__ import annotations

from collections import deque
from typing import Sequence

from stagegraph.domain.models import Edge, Node, Position


def layered_layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    *,
    node_width: float = 172.0,
    node_height: float = 36.0,
    rank_sep: float = 50.0,
    node_sep: float = 50.0,
) -> dict[str, Position]:
    """Compute a position for every node id.

    Args:
        nodes: Nodes to place; their order breaks ties within a rank.
        edges: Edges between them. Self-loops and dangling edges are ignored.

    Returns:
        Mapping of node id to its new top-left position.
    """

    order = list(dict.fromkeys(node.id for node in nodes))
    known = set(order)

    successors: dict[str, list[str]] = {node_id: [] for node_id in order}
    predecessors: dict[str, list[str]] = {node_id: [] for node_id in order}
    for edge in edges:
        if edge.is_self_loop or edge.source not in known or edge.target not in known:
            continue
        successors[edge.source].append(edge.target)
        predecessors[edge.target].append(edge.source)

    in_degree = {node_id: len(predecessors[node_id]) for node_id in order}
    rank = {node_id: 0 for node_id in order}
    ranked: set[str] = set()

    queue = deque(node_id for node_id in order if in_degree[node_id] == 0)
    while queue:
        node_id = queue.popleft()
        ranked.add(node_id)
        for neighbor in successors[node_id]:
            rank[neighbor] = max(rank[neighbor], rank[node_id] + 1)
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    for node_id in order:
        if node_id in ranked:
            continue
        placed = [rank[p] + 1 for p in predecessors[node_id] if p in ranked]
        rank[node_id] = max(placed, default=0)
        ranked.add(node_id)

    positions: dict[str, Position] = {}
    slots: dict[int, int] = {}
    for node_id in order:
        column = rank[node_id]
        row = slots.get(column, 0)
        slots[column] = row + 1
        positions[node_id] = Position(
            x=column * (node_width + rank_sep),
            y=row * (node_height + node_sep),
        )

    return positions
