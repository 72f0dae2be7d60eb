"""Stdio RPC server driving one editor session.

Protocol:
- JSON per line over stdin/stdout.
- Requests: {"id": number, "method": string, "params"?: object}
- Responses: {"id": number, "result"?: any, "error"?: {"message": string}}

Session methods answer with the full session state (nodes, edges, validation,
canUndo) so the canvas can re-render from a single response. Diagnostics go to
stderr; stdout carries responses only.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from stagegraph.config import EditorConfig
from stagegraph.domain.models import Edge, Node, Position
from stagegraph.services.session import EditorSession
from stagegraph.services.validator import validate_dag


class _ValidateParams(BaseModel):
    nodes: list[Node] = []
    edges: list[Edge] = []


class _AddNodeParams(BaseModel):
    label: str
    kind: str | None = None
    position: Position | None = None
    node_id: str | None = None


class _ConnectParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str
    target: str
    source_handle: str | None = Field("out", alias="sourceHandle")
    target_handle: str | None = Field("in", alias="targetHandle")


class _DeleteNodesParams(BaseModel):
    node_ids: list[str]


class _DeleteEdgesParams(BaseModel):
    edge_ids: list[str]


class _MoveNodeParams(BaseModel):
    node_id: str
    position: Position


def main(argv: list[str] | None = None) -> None:
    """Run the RPC loop reading stdin and writing stdout."""

    parser = argparse.ArgumentParser(description="stagegraph stdio RPC server")
    parser.add_argument(
        "--history-limit",
        type=int,
        default=None,
        help="Maximum number of undo snapshots (default: unbounded)",
    )
    args = parser.parse_args(argv)

    serve(EditorSession(EditorConfig(history_limit=args.history_limit)))


def serve(session: EditorSession, stdin: Any = None, stdout: Any = None) -> None:
    """Answer requests for ``session`` until shutdown or end of input."""

    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    for line in stdin:
        line = line.strip()
        if not line:
            continue

        try:
            request = json.loads(line)
        except json.JSONDecodeError:
            sys.stderr.write(f"[RPC] Ignoring non-JSON line: {line[:80]}\n")
            sys.stderr.flush()
            continue

        response = handle_request(request, session)
        stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
        stdout.flush()

        if response.get("result") == "shutdown":
            return


def handle_request(request: Any, session: EditorSession) -> dict[str, Any]:
    """Handle one RPC request.

    Args:
        request: Parsed JSON object.
        session: The editor session the request applies to.

    Returns:
        RPC response dict.
    """

    if not isinstance(request, dict):
        return {"id": -1, "error": {"message": "Invalid request"}}

    request_id = request.get("id")
    method = request.get("method")

    if not isinstance(request_id, int) or not isinstance(method, str):
        return {"id": -1, "error": {"message": "Invalid request fields"}}

    if method == "hello":
        return {"id": request_id, "result": "hello from stagegraph"}

    if method == "ping":
        return {"id": request_id, "result": "pong"}

    if method == "shutdown":
        return {"id": request_id, "result": "shutdown"}

    handler = _HANDLERS.get(method)
    if handler is None:
        return {"id": request_id, "error": {"message": f"Unknown method: {method}"}}

    try:
        return {"id": request_id, "result": handler(session, request.get("params"))}
    except Exception as exc:  # noqa: BLE001 - return structured RPC errors
        sys.stderr.write(f"[RPC] {method} failed: {_format_error(exc)}\n")
        sys.stderr.flush()
        return {"id": request_id, "error": {"message": _format_error(exc)}}


def _validate(session: EditorSession, raw: Any) -> dict[str, Any]:
    params = _parse_params(raw, _ValidateParams)
    return validate_dag(params.nodes, params.edges).model_dump(by_alias=True, mode="json")


def _state(session: EditorSession, raw: Any) -> dict[str, Any]:
    return session.state()


def _add_node(session: EditorSession, raw: Any) -> dict[str, Any]:
    params = _parse_params(raw, _AddNodeParams)
    session.add_node(params.label, kind=params.kind, position=params.position, node_id=params.node_id)
    return session.state()


def _connect(session: EditorSession, raw: Any) -> dict[str, Any]:
    params = _parse_params(raw, _ConnectParams)
    session.connect(
        params.source,
        params.target,
        source_handle=params.source_handle,
        target_handle=params.target_handle,
    )
    return session.state()


def _delete_nodes(session: EditorSession, raw: Any) -> dict[str, Any]:
    params = _parse_params(raw, _DeleteNodesParams)
    session.delete_nodes(params.node_ids)
    return session.state()


def _delete_edges(session: EditorSession, raw: Any) -> dict[str, Any]:
    params = _parse_params(raw, _DeleteEdgesParams)
    session.delete_edges(params.edge_ids)
    return session.state()


def _move_node(session: EditorSession, raw: Any) -> dict[str, Any]:
    params = _parse_params(raw, _MoveNodeParams)
    session.move_node(params.node_id, params.position)
    return session.state()


def _auto_layout(session: EditorSession, raw: Any) -> dict[str, Any]:
    session.auto_layout()
    return session.state()


def _undo(session: EditorSession, raw: Any) -> dict[str, Any]:
    session.undo()
    return session.state()


_HANDLERS: dict[str, Callable[[EditorSession, Any], Any]] = {
    "validate": _validate,
    "state": _state,
    "add_node": _add_node,
    "connect": _connect,
    "delete_nodes": _delete_nodes,
    "delete_edges": _delete_edges,
    "move_node": _move_node,
    "auto_layout": _auto_layout,
    "undo": _undo,
}


def _parse_params(value: Any, model: type[BaseModel]) -> Any:
    if value is None:
        # Pydantic will produce a helpful error.
        value = {}
    if not isinstance(value, dict):
        raise ValueError("params must be an object")

    try:
        return model.model_validate(value)
    except ValidationError as exc:
        # Keep errors readable for the canvas.
        raise ValueError(exc.errors(include_url=False)) from exc


def _format_error(exc: Exception) -> str:
    message = str(exc).strip() or exc.__class__.__name__
    return message


if __name__ == "__main__":
    main()
