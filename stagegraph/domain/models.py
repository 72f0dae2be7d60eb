"""Pydantic domain models for the stagegraph editor.

- Position / Node / Edge: the canvas graph as the editing surface sees it
- Snapshot: the immutable unit of undo
- ValidationResult: the verdict the surface renders as status text

The canvas speaks camelCase (``sourceHandle``, ``invalidEdgeIds``); models accept
either spelling and dump camelCase with ``by_alias=True``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Handle = Literal["in", "out"]


class Position(BaseModel):
    """2D position in the editor canvas."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(0.0, description="X coordinate")
    y: float = Field(0.0, description="Y coordinate")


class Node(BaseModel):
    """A pipeline stage placed on the canvas."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier within a snapshot")
    label: str = Field("", description="Display name")
    position: Position = Field(default_factory=Position, description="Canvas position")
    kind: str | None = Field(default=None, description="Optional stage kind tag")


class Edge(BaseModel):
    """A directed connection from ``source`` to ``target``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Unique identifier within a snapshot")
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    source_handle: Handle = Field("out", alias="sourceHandle", description="Handle on the source node")
    target_handle: Handle = Field("in", alias="targetHandle", description="Handle on the target node")

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class Snapshot(BaseModel):
    """Full node/edge collections captured at one instant."""

    model_config = ConfigDict(frozen=True)

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()


class ValidationResult(BaseModel):
    """Outcome of validating one snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    valid: bool
    message: str
    invalid_edge_ids: tuple[str, ...] = Field(default=(), alias="invalidEdgeIds")
