"""stagegraph CLI - check and lay out pipeline graph files.

Usage:
    stagegraph validate <graph.json>
    stagegraph layout <graph.json>
    stagegraph rpc [--history-limit N]
    stagegraph --version

A graph file is a JSON object with "nodes" and "edges" lists, in the same
shape the canvas exports.

Examples:
    stagegraph validate pipeline.json
    stagegraph layout pipeline.json > positions.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from stagegraph import __version__
from stagegraph.config import EditorConfig
from stagegraph.domain.models import Snapshot
from stagegraph.rpc.server import main as rpc_main
from stagegraph.services.layout import layered_layout
from stagegraph.services.validator import validate_dag


def load_graph(path: Path) -> Snapshot:
    """Read a graph file into a snapshot.

    Raises:
        ValueError: If the file is not valid JSON or not a graph object.
    """
    try:
        data = json.loads(path.read_text(encoding="utf8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Graph file must contain a JSON object")

    try:
        return Snapshot.model_validate(
            {"nodes": data.get("nodes", []), "edges": data.get("edges", [])}
        )
    except ValidationError as exc:
        raise ValueError(exc.errors(include_url=False)) from exc


def _read(args: argparse.Namespace) -> Snapshot | None:
    graph_file = Path(args.file)

    if not graph_file.exists():
        print(f"Error: File not found: {graph_file}", file=sys.stderr)
        return None

    try:
        return load_graph(graph_file)
    except (OSError, ValueError) as e:
        print(f"Error reading graph: {e}", file=sys.stderr)
        return None


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a graph file.

    Returns:
        Exit code (0 when the graph is a valid DAG, 1 otherwise)
    """
    graph = _read(args)
    if graph is None:
        return 1

    result = validate_dag(graph.nodes, graph.edges)

    print(f"File: {args.file}")
    print(f"  Nodes: {len(graph.nodes)}  Edges: {len(graph.edges)}")
    print()
    print(("✓ " if result.valid else "✗ ") + result.message)

    if result.invalid_edge_ids:
        print()
        print("Invalid edges:")
        for edge_id in result.invalid_edge_ids:
            print(f"  • {edge_id}")

    return 0 if result.valid else 1


def cmd_layout(args: argparse.Namespace) -> int:
    """Print auto-layout positions for a graph file as JSON."""
    graph = _read(args)
    if graph is None:
        return 1

    config = EditorConfig()
    positions = layered_layout(
        graph.nodes,
        graph.edges,
        node_width=config.node_width,
        node_height=config.node_height,
        rank_sep=config.rank_sep,
        node_sep=config.node_sep,
    )
    print(json.dumps({node_id: pos.model_dump() for node_id, pos in positions.items()}, indent=2))
    return 0


def cmd_rpc(args: argparse.Namespace) -> int:
    argv = []
    if args.history_limit is not None:
        argv += ["--history-limit", str(args.history_limit)]
    rpc_main(argv)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="stagegraph",
        description="stagegraph - pipeline DAG validation and editing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stagegraph validate pipeline.json
  stagegraph layout pipeline.json
  stagegraph rpc --history-limit 100
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"stagegraph {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    validate_parser = subparsers.add_parser(
        "validate",
        help="Check that a graph file is a valid DAG"
    )
    validate_parser.add_argument(
        "file",
        help="Path to the graph JSON file"
    )

    layout_parser = subparsers.add_parser(
        "layout",
        help="Print left-to-right layout positions for a graph file"
    )
    layout_parser.add_argument(
        "file",
        help="Path to the graph JSON file"
    )

    rpc_parser = subparsers.add_parser(
        "rpc",
        help="Serve an editor session over stdin/stdout"
    )
    rpc_parser.add_argument(
        "--history-limit",
        type=int,
        default=None,
        help="Maximum number of undo snapshots (default: unbounded)"
    )

    args = parser.parse_args(argv)

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "layout":
        return cmd_layout(args)
    elif args.command == "rpc":
        return cmd_rpc(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
