# src/tetris_nac/nac/critics/factory.py
from __future__ import annotations

from typing import Callable, Dict, Union

import numpy as np

from tetris_nac.nac.critics.common import VarianceReduction
from tetris_nac.nac.critics.lspe import LSPECritic, LSPEStats
from tetris_nac.nac.critics.lstd import LSTDCritic, LSTDStats
from tetris_nac.nac.critics.raw_samples import DEFAULT_MAX_SAMPLES, RawSampleCritic, RawSampleStats

Critic = Union[LSTDCritic, LSPECritic, RawSampleCritic]
CriticStats = Union[LSTDStats, LSPEStats, RawSampleStats]

CriticBuilder = Callable[..., Critic]


def _build_lstd(
    *, dim: int, gamma: float, lam: float, gradient_offset: int, variance_reduction: VarianceReduction, max_samples: int
) -> Critic:
    _ = max_samples
    return LSTDCritic(
        dim=dim,
        gamma=gamma,
        lam=lam,
        gradient_offset=gradient_offset,
        variance_reduction=variance_reduction,
    )


def _build_lspe(
    *, dim: int, gamma: float, lam: float, gradient_offset: int, variance_reduction: VarianceReduction, max_samples: int
) -> Critic:
    _ = gradient_offset
    _ = variance_reduction
    _ = max_samples
    return LSPECritic(dim=dim, gamma=gamma, lam=lam)


def _build_raw(
    *, dim: int, gamma: float, lam: float, gradient_offset: int, variance_reduction: VarianceReduction, max_samples: int
) -> Critic:
    _ = gradient_offset
    _ = variance_reduction
    return RawSampleCritic(dim=dim, gamma=gamma, lam=lam, max_samples=max_samples)


CRITIC_REGISTRY: Dict[str, CriticBuilder] = {
    "lstd": _build_lstd,
    "lspe": _build_lspe,
    "raw": _build_raw,
}


def make_critic(
    kind: str,
    *,
    dim: int,
    gamma: float,
    lam: float,
    gradient_offset: int = 0,
    variance_reduction: VarianceReduction = "on",
    max_samples: int = DEFAULT_MAX_SAMPLES,
) -> Critic:
    tag = str(kind).strip().lower()
    try:
        builder = CRITIC_REGISTRY[tag]
    except KeyError as e:
        known = ", ".join(sorted(CRITIC_REGISTRY))
        raise ValueError(f"unknown critic kind {kind!r}. known: [{known}]") from e

    if variance_reduction == "corrected" and tag != "lstd":
        raise ValueError("variance_reduction='corrected' is implemented only for the lstd critic")
    if variance_reduction == "corrected" and int(gradient_offset) <= 0:
        raise ValueError("variance_reduction='corrected' needs gradient_offset > 0 (the state feature count)")

    return builder(
        dim=int(dim),
        gamma=float(gamma),
        lam=float(lam),
        gradient_offset=int(gradient_offset),
        variance_reduction=variance_reduction,
        max_samples=int(max_samples),
    )


def merge_stats(a: CriticStats | None, b: CriticStats) -> CriticStats:
    """
    Combine the statistics of two independent runs of the same critic kind:
    LSTD/LSPE accumulators add up, raw samples are concatenated with the
    episode starts of `b` shifted past the rows of `a`. The trace of the
    later run is kept.
    """
    if a is None:
        return b
    if type(a) is not type(b):
        raise TypeError(f"cannot merge {type(a).__name__} with {type(b).__name__}")

    if isinstance(a, LSTDStats) and isinstance(b, LSTDStats):
        return LSTDStats(A=a.A + b.A, b=a.b + b.b, z=b.z.copy(), steps=a.steps + b.steps)
    if isinstance(a, LSPEStats) and isinstance(b, LSPEStats):
        return LSPEStats(B=a.B + b.B, A=a.A + b.A, b=a.b + b.b, z=b.z.copy(), steps=a.steps + b.steps)
    if isinstance(a, RawSampleStats) and isinstance(b, RawSampleStats):
        return RawSampleStats(
            s0=np.vstack([a.s0, b.s0]),
            s1=np.vstack([a.s1, b.s1]),
            r=np.concatenate([a.r, b.r]),
            n=a.n + b.n,
            episode_starts=np.concatenate(
                [np.asarray(a.episode_starts, dtype=np.int64), np.asarray(b.episode_starts, dtype=np.int64) + int(a.n)]
            ),
        )
    raise TypeError(f"unsupported critic stats type: {type(a).__name__}")


__all__ = ["CRITIC_REGISTRY", "Critic", "CriticStats", "make_critic", "merge_stats"]
