"""DAG validation for the pipeline canvas.

Checks run in a fixed order and the first failure decides the verdict:

1. at least two nodes
2. every node touches at least one edge (otherwise every edge is flagged)
3. no cycle (only the first cycle found by the DFS is reported)
4. no self-loop

Self-loop edges are collected up front and stay flagged in the cycle verdict.
The cycle search steps over them, so a self-loop never hides a longer cycle;
the self-loop verdict applies only when no other cycle exists.
The reported cycle depends on node order: the DFS starts from each node in
the order given, so with several cycles present only one of them is returned.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from stagegraph.domain.models import Edge, Node, ValidationResult

MSG_TOO_FEW_NODES = "INVALID: Add at least 2 nodes"
MSG_DISCONNECTED = "INVALID: All nodes must be connected to at least one edge"
MSG_CYCLE = "INVALID: The graph contains a cycle"
MSG_SELF_LOOP = "INVALID: The graph contains a self-loop"
MSG_VALID = "VALID: The graph is a valid DAG"


def validate_dag(nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
    """Validate a node/edge snapshot.

    Args:
        nodes: Nodes on the canvas, in display order.
        edges: Edges on the canvas.

    Returns:
        The verdict. Never raises; dangling edge endpoints are inert.
    """

    if len(nodes) < 2:
        return ValidationResult(valid=False, message=MSG_TOO_FEW_NODES)

    self_loop_ids = [edge.id for edge in edges if edge.is_self_loop]

    connected: set[str] = set()
    for edge in edges:
        connected.add(edge.source)
        connected.add(edge.target)

    if any(node.id not in connected for node in nodes):
        return ValidationResult(
            valid=False,
            message=MSG_DISCONNECTED,
            invalid_edge_ids=_unique(edge.id for edge in edges),
        )

    adjacency: dict[str, list[str]] = {node.id: [] for node in nodes}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)

    cycle = find_first_cycle([node.id for node in nodes], adjacency)

    if cycle is not None:
        # First edge per (source, target) pair, in input order.
        first_edge: dict[tuple[str, str], str] = {}
        for edge in edges:
            first_edge.setdefault((edge.source, edge.target), edge.id)

        cycle_edge_ids = []
        for index, source in enumerate(cycle):
            target = cycle[(index + 1) % len(cycle)]
            edge_id = first_edge.get((source, target))
            if edge_id is not None:
                cycle_edge_ids.append(edge_id)
        return ValidationResult(
            valid=False,
            message=MSG_CYCLE,
            invalid_edge_ids=_unique([*self_loop_ids, *cycle_edge_ids]),
        )

    if self_loop_ids:
        return ValidationResult(
            valid=False,
            message=MSG_SELF_LOOP,
            invalid_edge_ids=_unique(self_loop_ids),
        )

    return ValidationResult(valid=True, message=MSG_VALID)


def find_first_cycle(order: Sequence[str], adjacency: dict[str, list[str]]) -> list[str] | None:
    """Return the first cycle reached by a DFS over ``order``, or None.

    The cycle is the suffix of the DFS path starting at the node that was
    found on the recursion stack. Self-loop edges are skipped, so a returned
    cycle always spans at least two nodes. Iterative, so deep chains do not
    hit the interpreter's recursion limit.
    """

    visited: set[str] = set()
    on_stack: set[str] = set()

    for start in order:
        if start in visited:
            continue

        visited.add(start)
        on_stack.add(start)
        path = [start]
        frames = [iter(adjacency.get(start, ()))]

        while frames:
            for neighbor in frames[-1]:
                if neighbor == path[-1]:
                    continue
                if neighbor in on_stack:
                    return path[path.index(neighbor):]
                if neighbor not in visited:
                    visited.add(neighbor)
                    on_stack.add(neighbor)
                    path.append(neighbor)
                    frames.append(iter(adjacency.get(neighbor, ())))
                    break
            else:
                frames.pop()
                on_stack.discard(path.pop())

    return None


def _unique(ids: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(ids))
