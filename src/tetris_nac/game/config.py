# src/tetris_nac/game/config.py
from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from tetris_nac.config.base import ConfigBase, normalize_tag
from tetris_nac.game.holes import HOLE_COUNTERS, HoleStrategy


class BoardConfig(ConfigBase):
    """
    Board geometry and feature conventions of the simulator.

    observation_log_length:
      - 0 disables the per-step observation log
      - N > 0 keeps at most N observations per episode
    """

    rows: int = Field(default=20, ge=1)
    columns: int = Field(default=10, ge=1)
    hole_strategy: HoleStrategy = "under_topline"
    terminal_state_bias: float = 0.0
    terminal_action_bias: float = 1.0
    observation_log_length: int = Field(default=0, ge=0)

    @field_validator("hole_strategy", mode="before")
    @classmethod
    def _hole_strategy_tag(cls, v: object) -> str:
        s = normalize_tag(v)
        if s not in HOLE_COUNTERS:
            known = ", ".join(sorted(HOLE_COUNTERS))
            raise ValueError(f"board.hole_strategy must be one of [{known}] (got {v!r})")
        return s

    @model_validator(mode="after")
    def _fits_pieces(self) -> "BoardConfig":
        # smallest board that holds a vertical I piece and a flat one
        if int(self.rows) < 4 or int(self.columns) < 4:
            raise ValueError(f"board must be at least 4x4 (got {self.rows}x{self.columns})")
        return self


__all__ = ["BoardConfig"]
