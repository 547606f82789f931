# tests/conftest.py
from __future__ import annotations

from itertools import cycle
from typing import Iterable

import numpy as np
import pytest

from tetris_nac.game.types import StepData


class ScriptedStream:
    """RandomStream that replays a fixed list of draws, cycling forever."""

    def __init__(self, values: Iterable[float]) -> None:
        vals = [float(v) for v in values]
        if not vals:
            raise ValueError("ScriptedStream needs at least one value")
        self._it = cycle(vals)
        self.draws = 0

    def next(self) -> float:
        self.draws += 1
        return next(self._it)


def piece_draw(index: int, num_pieces: int = 7) -> float:
    """Uniform draw that selects piece `index` of the catalog."""
    return (int(index) + 0.5) / float(num_pieces)


def make_step(
    observation: Iterable[float],
    actions: Iterable[Iterable[float]] | None = None,
    terminal: Iterable[bool] | None = None,
    reward: float = 0.0,
) -> StepData:
    obs = np.asarray(list(observation), dtype=np.float64)
    if actions is None:
        acts = np.zeros((0, obs.shape[0] + 1), dtype=np.float64)
    else:
        acts = np.asarray([list(a) for a in actions], dtype=np.float64)
    term = np.zeros((acts.shape[0],), dtype=bool) if terminal is None else np.asarray(list(terminal), dtype=bool)
    return StepData(
        transition_reward=float(reward),
        observation=obs,
        actions=acts,
        is_action_terminal=term,
        action_count=int(acts.shape[0]),
    )


@pytest.fixture
def scripted_stream():
    return ScriptedStream
