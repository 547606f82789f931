# src/tetris_nac/runners/config.py
from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator

from tetris_nac.config.base import ConfigBase


class StopConfig(ConfigBase):
    """
    Episode stopping rule applied by the runner (the simulator only knows
    about terminal states).

    An episode keeps going while it is not terminal, its total reward lies in
    total_reward_range and fewer than max_steps actions were taken.
    """

    max_steps: Optional[int] = Field(default=None, ge=1)
    # None leaves that side unbounded
    total_reward_range: tuple[Optional[float], Optional[float]] = (None, None)

    @model_validator(mode="after")
    def _range_ordered(self) -> "StopConfig":
        lo, hi = self.reward_bounds()
        if lo > hi:
            raise ValueError(f"stop.total_reward_range must be [min, max] with min <= max (got {self.total_reward_range})")
        return self

    def reward_bounds(self) -> tuple[float, float]:
        lo, hi = self.total_reward_range
        return (-math.inf if lo is None else float(lo), math.inf if hi is None else float(hi))


class TrainConfig(ConfigBase):
    iterations: int = Field(default=10, ge=1)
    episodes_per_update: int = Field(default=1, ge=1)
    learning_rate: float = 1.0
    lspe_iterations: int = Field(default=100, ge=1)
    ridge: float = Field(default=1e-6, ge=0.0)


class RunConfig(ConfigBase):
    name: str = "nac"
    out_root: Path = Path("experiments")
    seed: int = 0
    save_stats: bool = True

    @field_validator("name")
    @classmethod
    def _name_nonempty(cls, v: str) -> str:
        s = str(v).strip()
        if not s:
            raise ValueError("run.name must be a non-empty string")
        return s

    @field_validator("out_root")
    @classmethod
    def _out_root_nonempty(cls, v: Path) -> Path:
        s = str(v).strip()
        if not s:
            raise ValueError("run.out_root must be a non-empty string")
        return Path(s)


__all__ = ["RunConfig", "StopConfig", "TrainConfig"]
