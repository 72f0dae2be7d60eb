"""Editor configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EditorConfig(BaseModel):
    """Settings for one editor session.

    The geometry defaults match the node box the canvas renders.
    """

    model_config = ConfigDict(frozen=True)

    history_limit: int | None = Field(default=None, ge=1, description="Max undo entries (None = unbounded)")
    node_width: float = Field(default=172.0, gt=0, description="Node box width used by auto layout")
    node_height: float = Field(default=36.0, gt=0, description="Node box height used by auto layout")
    rank_sep: float = Field(default=50.0, ge=0, description="Horizontal gap between ranks")
    node_sep: float = Field(default=50.0, ge=0, description="Vertical gap between nodes of one rank")
