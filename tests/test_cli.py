"""Tests for the stagegraph CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from stagegraph.cli import load_graph, main


def _write(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "pipeline.json"
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def valid_graph(tmp_path: Path) -> Path:
    return _write(
        tmp_path,
        {
            "nodes": [{"id": "1", "label": "A"}, {"id": "2", "label": "B"}],
            "edges": [{"id": "e1", "source": "1", "target": "2", "sourceHandle": "out", "targetHandle": "in"}],
        },
    )


def test_validate_valid_graph(valid_graph: Path, capsys) -> None:
    assert main(["validate", str(valid_graph)]) == 0

    out = capsys.readouterr().out
    assert "VALID: The graph is a valid DAG" in out


def test_validate_cycle_lists_edges(tmp_path: Path, capsys) -> None:
    path = _write(
        tmp_path,
        {
            "nodes": [{"id": "1"}, {"id": "2"}],
            "edges": [
                {"id": "e1", "source": "1", "target": "2"},
                {"id": "e2", "source": "2", "target": "1"},
            ],
        },
    )

    assert main(["validate", str(path)]) == 1

    out = capsys.readouterr().out
    assert "contains a cycle" in out
    assert "• e1" in out
    assert "• e2" in out


def test_missing_file(tmp_path: Path, capsys) -> None:
    assert main(["validate", str(tmp_path / "nope.json")]) == 1
    assert "File not found" in capsys.readouterr().err


def test_malformed_file(tmp_path: Path, capsys) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    assert main(["validate", str(path)]) == 1
    assert "Invalid JSON" in capsys.readouterr().err


def test_load_graph_rejects_bad_shapes(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_graph(_write(tmp_path, [1, 2, 3]))

    with pytest.raises(ValueError):
        load_graph(_write(tmp_path, {"nodes": [{"label": "no id"}]}))


def test_layout_prints_positions(valid_graph: Path, capsys) -> None:
    assert main(["layout", str(valid_graph)]) == 0

    positions = json.loads(capsys.readouterr().out)
    assert positions == {"1": {"x": 0.0, "y": 0.0}, "2": {"x": 222.0, "y": 0.0}}


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "usage: stagegraph" in capsys.readouterr().out
