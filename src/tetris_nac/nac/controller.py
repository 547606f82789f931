# src/tetris_nac/nac/controller.py
from __future__ import annotations

from typing import Optional

import numpy as np

from tetris_nac.game.types import StepData
from tetris_nac.nac.critics import Critic, CriticStats, VarianceReduction
from tetris_nac.nac.policy import SoftmaxPolicy
from tetris_nac.random_stream import RandomStream


class NaturalActorCritic:
    """
    Per-episode actor-critic agent: picks actions with a softmax policy and
    feeds each observed transition to a critic.

    Critic features are phi = [observation | grad log pi(a|s)] with

        grad log pi(a|s) = actions[a] - sum_b pi(b|s) actions[b]

    (the 1/tau factor is left out). When variance reduction is on the
    gradient block of phi1 stays zero.

    step() acts before it learns: the action for the current state is drawn
    first, then the transition from the previous state is absorbed. This is
    equivalent to learning first only because theta never changes within an
    episode; the policy must not be updated between two step() calls of the
    same episode.
    """

    def __init__(
        self,
        *,
        policy: SoftmaxPolicy,
        critic: Critic,
        rstream: RandomStream,
        state_dim: int,
        learning: bool = True,
        variance_reduction: VarianceReduction = "on",
    ) -> None:
        self.policy = policy
        self.critic = critic
        self.rstream = rstream
        self.learning = bool(learning)
        self.variance_reduction = variance_reduction
        self.state_dim = int(state_dim)
        self.state_action_dim = int(self.state_dim + 1)

        if self.policy.num_params != self.state_action_dim:
            raise ValueError(
                f"theta has {self.policy.num_params} entries, expected {self.state_action_dim} "
                "(one per action feature)"
            )
        expected_dim = self.state_dim + self.state_action_dim
        if int(self.critic.dim) != expected_dim:
            raise ValueError(f"critic dim {self.critic.dim} does not match feature dim {expected_dim}")
        if self.variance_reduction == "corrected" and self.critic.kind != "lstd":
            raise ValueError("variance_reduction='corrected' is implemented only for the lstd critic")

        self.first_step = True
        self.steps = 0
        self._prev_step_data: Optional[StepData] = None
        self._prev_probabilities: Optional[np.ndarray] = None
        self._prev_action: Optional[int] = None
        self.probabilities = np.zeros((0,), dtype=np.float64)
        self.action: Optional[int] = None

    def new_episode(self) -> None:
        self.first_step = True
        self._prev_step_data = None
        self._prev_probabilities = None
        self._prev_action = None

    def step(self, step_data: StepData) -> Optional[int]:
        """Return the chosen action, or None for a terminal state (no actions)."""
        self.probabilities, self.action = self._act(step_data)

        if self.learning and not self.first_step:
            self._learn(step_data)

        self._prev_step_data = step_data
        self._prev_probabilities = self.probabilities
        self._prev_action = self.action
        self.first_step = False
        self.steps += 1
        return self.action

    def export(self) -> CriticStats:
        return self.critic.export()

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    def _act(self, s: StepData) -> tuple[np.ndarray, Optional[int]]:
        probs = self.policy.probabilities(s.actions, s.is_action_terminal)
        if s.action_count == 0:
            return probs, None
        return probs, self.policy.sample(probs, self.rstream)

    def _gradient(self, s: StepData, probs: np.ndarray, action: int) -> np.ndarray:
        return s.actions[action] - probs @ s.actions

    def _learn(self, s1: StepData) -> None:
        s0 = self._prev_step_data
        pr0 = self._prev_probabilities
        a0 = self._prev_action
        if s0 is None or pr0 is None or a0 is None:
            raise RuntimeError("no previous non-terminal step to learn from")

        dim = self.state_dim + self.state_action_dim
        phi0 = np.zeros((dim,), dtype=np.float64)
        phi1 = np.zeros((dim,), dtype=np.float64)

        phi0[: self.state_dim] = s0.observation
        phi0[self.state_dim :] = self._gradient(s0, pr0, a0)

        phi1[: self.state_dim] = s1.observation
        if self.variance_reduction == "off" and self.action is not None:
            phi1[self.state_dim :] = self._gradient(s1, self.probabilities, self.action)

        self.critic.update(phi0, phi1, s1.transition_reward)


__all__ = ["NaturalActorCritic"]
