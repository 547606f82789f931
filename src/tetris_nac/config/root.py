# src/tetris_nac/config/root.py
from __future__ import annotations

from tetris_nac.config.base import ConfigBase
from tetris_nac.game.config import BoardConfig
from tetris_nac.nac.config import AgentConfig
from tetris_nac.runners.config import RunConfig, StopConfig, TrainConfig


class ExperimentConfig(ConfigBase):
    log_level: str = "info"
    run: RunConfig = RunConfig()
    board: BoardConfig = BoardConfig()
    agent: AgentConfig = AgentConfig()
    stop: StopConfig = StopConfig()
    train: TrainConfig = TrainConfig()


__all__ = ["ExperimentConfig"]
