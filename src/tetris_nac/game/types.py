# src/tetris_nac/game/types.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def state_dim(columns: int) -> int:
    # heights (C), |height diffs| (C-1), max height, holes, bias
    return 2 * int(columns) - 1 + 3


def state_action_dim(columns: int) -> int:
    # state features of the resulting state + immediate reward
    return state_dim(columns) + 1


@dataclass(frozen=True)
class StepData:
    """
    Everything the agent sees of one decision point.

    Terminal states are not flagged explicitly: their observation is the zero
    vector (bias slot aside) and action_count is 0.

    transition_reward:  rows cleared by the transition into this state
    observation:        (state_dim,) state features
    actions:            (action_count, state_action_dim) features per legal action
    is_action_terminal: (action_count,) whether the action ends the episode
    """

    transition_reward: float
    observation: np.ndarray
    actions: np.ndarray
    is_action_terminal: np.ndarray
    action_count: int

    @property
    def is_terminal(self) -> bool:
        return self.action_count == 0


__all__ = ["StepData", "state_action_dim", "state_dim"]
