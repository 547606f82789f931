# src/tetris_nac/nac/policy.py
from __future__ import annotations

import numpy as np

from tetris_nac.random_stream import RandomStream


def action_probabilities(
    actions: np.ndarray,
    is_terminal: np.ndarray,
    theta: np.ndarray,
    tau: float,
    *,
    reject_terminal: bool = True,
) -> np.ndarray:
    """
    Softmax over linear action scores `actions @ theta / tau`.

    With `reject_terminal`, actions flagged terminal score -inf and are never
    chosen while a non-terminal alternative exists. If every action scores
    -inf the result is uniform.
    """
    a = np.asarray(actions, dtype=np.float64)
    n = int(a.shape[0])
    if n == 0:
        return np.zeros((0,), dtype=np.float64)

    scores = (a @ np.asarray(theta, dtype=np.float64)) / float(tau)
    if reject_terminal:
        scores = np.where(np.asarray(is_terminal, dtype=bool), -np.inf, scores)

    max_score = float(np.max(scores))
    if max_score == -np.inf:
        return np.full((n,), 1.0 / n, dtype=np.float64)

    e = np.exp(scores - max_score)
    return e / e.sum()


def sample_action(probabilities: np.ndarray, rstream: RandomStream) -> int:
    """
    Draw one uniform value and return the first action whose cumulative
    probability exceeds it. Rounding that leaves the draw above the final
    cumulative sum selects the last action.
    """
    p = np.asarray(probabilities, dtype=np.float64)
    n = int(p.shape[0])
    if n == 0:
        raise ValueError("cannot sample from an empty action set")
    r = rstream.next()
    idx = int(np.searchsorted(np.cumsum(p), r, side="right"))
    return min(idx, n - 1)


class SoftmaxPolicy:
    """Linear softmax policy over action feature vectors."""

    def __init__(self, theta: np.ndarray, *, tau: float = 1.0, reject_terminal: bool = True) -> None:
        if float(tau) <= 0.0:
            raise ValueError(f"tau must be > 0 (got {tau})")
        self.theta = np.array(theta, dtype=np.float64, copy=True).reshape(-1)
        self.tau = float(tau)
        self.reject_terminal = bool(reject_terminal)

    @property
    def num_params(self) -> int:
        return int(self.theta.shape[0])

    def probabilities(self, actions: np.ndarray, is_terminal: np.ndarray) -> np.ndarray:
        return action_probabilities(
            actions,
            is_terminal,
            self.theta,
            self.tau,
            reject_terminal=self.reject_terminal,
        )

    def sample(self, probabilities: np.ndarray, rstream: RandomStream) -> int:
        return sample_action(probabilities, rstream)


__all__ = ["SoftmaxPolicy", "action_probabilities", "sample_action"]
