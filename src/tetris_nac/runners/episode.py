# src/tetris_nac/runners/episode.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from tetris_nac.game.tetris import TetrisSimulator
from tetris_nac.nac.controller import NaturalActorCritic
from tetris_nac.runners.config import StopConfig


@dataclass(frozen=True)
class EpisodeResult:
    total_reward: float
    steps: int
    terminal: bool
    observation_log: Optional[np.ndarray] = None


def run_episode(
    simulator: TetrisSimulator,
    agent: NaturalActorCritic,
    stop: StopConfig | None = None,
) -> EpisodeResult:
    """
    Play one episode with the agent's current policy.

    The loop runs while the board is not terminal, the total reward stays in
    the configured range and the step cap is not reached. The agent sees the
    state it stopped in once more after the loop, so the last transition is
    learned even when the episode was cut short.
    """
    stop = stop or StopConfig()
    lo, hi = stop.reward_bounds()
    max_steps = stop.max_steps

    step_data = simulator.reset()
    agent.new_episode()

    steps = 0
    while (
        not simulator.terminal
        and lo <= simulator.total_reward <= hi
        and (max_steps is None or steps < int(max_steps))
    ):
        action = agent.step(step_data)
        if action is None:
            break
        simulator.step(action)
        step_data = simulator.step_data
        steps += 1

    agent.step(step_data)

    log = simulator.logged_observations() if simulator.observation_log_length > 0 else None
    return EpisodeResult(
        total_reward=float(simulator.total_reward),
        steps=int(steps),
        terminal=bool(simulator.terminal),
        observation_log=log,
    )


__all__ = ["EpisodeResult", "run_episode"]
