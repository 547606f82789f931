# src/tetris_nac/nac/actor.py
from __future__ import annotations

import numpy as np

from tetris_nac.nac.critics import CriticStats, LSPEStats, LSTDCritic, LSTDStats, RawSampleStats, merge_stats


def _lstsq(M: np.ndarray, v: np.ndarray, *, ridge: float) -> np.ndarray:
    n = int(M.shape[0])
    return np.linalg.lstsq(M + float(ridge) * np.eye(n), v, rcond=None)[0]


def solve_lstd(stats: LSTDStats, *, ridge: float = 0.0) -> np.ndarray:
    """Critic weights w with A w = b."""
    return _lstsq(stats.A, stats.b, ridge=ridge)


def solve_lspe(stats: LSPEStats, *, ridge: float = 0.0, iterations: int = 100) -> np.ndarray:
    """Fixed point of w <- w + B^-1 (A w + b), started from zero."""
    w = np.zeros_like(stats.b)
    for _ in range(max(1, int(iterations))):
        w = w + _lstsq(stats.B, stats.A @ w + stats.b, ridge=ridge)
    return w


def lstd_from_samples(
    stats: RawSampleStats,
    *,
    gamma: float,
    lam: float,
    gradient_offset: int,
) -> LSTDStats:
    """
    Replay recorded transitions through LSTD(lambda), one fresh accumulator
    per recorded episode, and sum the per-episode statistics. This is what
    an LSTD critic per episode followed by merge_stats would have produced.
    """
    dim = int(stats.s0.shape[1])
    merged = LSTDStats(
        A=np.zeros((dim, dim), dtype=np.float64),
        b=np.zeros((dim,), dtype=np.float64),
        z=np.zeros((dim,), dtype=np.float64),
        steps=0,
    )
    for rows in stats.episodes():
        critic = LSTDCritic(dim=dim, gamma=gamma, lam=lam, gradient_offset=gradient_offset, variance_reduction="on")
        for phi0, phi1, r in zip(stats.s0[rows], stats.s1[rows], stats.r[rows]):
            critic.update(phi0, phi1, float(r))
        merged = merge_stats(merged, critic.export())
    return merged


def natural_gradient(
    stats: CriticStats,
    *,
    state_dim: int,
    gamma: float,
    lam: float,
    ridge: float = 0.0,
    lspe_iterations: int = 100,
) -> np.ndarray:
    """
    Natural policy gradient estimate: the advantage block w[state_dim:] of
    the critic weights. The compatible advantage features are the policy's
    log-gradient, so these weights are the natural gradient direction.
    """
    if isinstance(stats, LSTDStats):
        w = solve_lstd(stats, ridge=ridge)
    elif isinstance(stats, LSPEStats):
        w = solve_lspe(stats, ridge=ridge, iterations=lspe_iterations)
    elif isinstance(stats, RawSampleStats):
        if stats.n == 0:
            return np.zeros((stats.s0.shape[1] - int(state_dim),), dtype=np.float64)
        replayed = lstd_from_samples(stats, gamma=gamma, lam=lam, gradient_offset=state_dim)
        w = solve_lstd(replayed, ridge=ridge)
    else:
        raise TypeError(f"unsupported critic stats type: {type(stats).__name__}")
    return np.asarray(w[int(state_dim) :], dtype=np.float64)


def update_theta(theta: np.ndarray, gradient: np.ndarray, *, learning_rate: float) -> np.ndarray:
    t = np.asarray(theta, dtype=np.float64)
    g = np.asarray(gradient, dtype=np.float64)
    if t.shape != g.shape:
        raise ValueError(f"theta shape {t.shape} does not match gradient shape {g.shape}")
    return t + float(learning_rate) * g


__all__ = [
    "lstd_from_samples",
    "natural_gradient",
    "solve_lspe",
    "solve_lstd",
    "update_theta",
]
