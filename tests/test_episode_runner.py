# tests/test_episode_runner.py
from __future__ import annotations

import numpy as np

from conftest import ScriptedStream, piece_draw
from tetris_nac.game.tetris import TetrisSimulator
from tetris_nac.nac.controller import NaturalActorCritic
from tetris_nac.nac.critics import LSTDCritic
from tetris_nac.nac.policy import SoftmaxPolicy
from tetris_nac.runners.config import StopConfig
from tetris_nac.runners.episode import run_episode


def _agent(sim: TetrisSimulator, *, reject_terminal: bool = True) -> NaturalActorCritic:
    dim = sim.state_dim + sim.state_action_dim
    return NaturalActorCritic(
        policy=SoftmaxPolicy(np.zeros(sim.state_action_dim), reject_terminal=reject_terminal),
        critic=LSTDCritic(dim=dim, gamma=1.0, lam=0.0, gradient_offset=sim.state_dim),
        rstream=ScriptedStream([0.0]),
        state_dim=sim.state_dim,
    )


def test_episode_runs_until_terminal_and_learns_last_transition() -> None:
    # O pieces always dropped into column 0 of a 4-row board overflow on the third drop
    sim = TetrisSimulator(rstream=ScriptedStream([piece_draw(0)]), rows=4, columns=4)
    agent = _agent(sim, reject_terminal=False)
    result = run_episode(sim, agent)
    assert result.terminal
    assert result.steps == 3
    assert result.total_reward == 0.0
    assert agent.export().steps == 3
    assert result.observation_log is None


def test_step_cap_stops_episode() -> None:
    sim = TetrisSimulator(rstream=ScriptedStream([piece_draw(1), piece_draw(4), piece_draw(2)]))
    agent = _agent(sim)
    result = run_episode(sim, agent, StopConfig(max_steps=4))
    assert not result.terminal
    assert result.steps == 4
    # the state the episode stopped in is still shown to the agent
    assert agent.export().steps == 4
    assert agent.steps == 5


def test_reward_range_stops_episode() -> None:
    # horizontal I pieces on a 4-wide board clear a row on every drop
    sim = TetrisSimulator(rstream=ScriptedStream([piece_draw(2)]), rows=20, columns=4)
    agent = NaturalActorCritic(
        policy=SoftmaxPolicy(np.array([0.0] * 10 + [10.0])),
        critic=LSTDCritic(dim=21, gamma=1.0, lam=0.0, gradient_offset=10),
        rstream=ScriptedStream([0.0]),
        state_dim=10,
    )
    result = run_episode(sim, agent, StopConfig(total_reward_range=(None, 2.0)))
    assert result.total_reward == 3.0
    assert result.steps == 3
    assert not result.terminal


def test_observation_log_is_returned_when_enabled() -> None:
    sim = TetrisSimulator(rstream=ScriptedStream([piece_draw(0)]), rows=4, columns=4, observation_log_length=10)
    agent = _agent(sim, reject_terminal=False)
    result = run_episode(sim, agent)
    assert result.observation_log is not None
    assert result.observation_log.shape == (3, sim.state_dim)
