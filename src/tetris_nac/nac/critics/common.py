# src/tetris_nac/nac/critics/common.py
from __future__ import annotations

from typing import Literal

import numpy as np

CriticKind = Literal["lstd", "lspe", "raw"]

# Peters' variance reduction: "on" drops the gradient block of phi1,
# "corrected" additionally compensates A for it (LSTD only).
VarianceReduction = Literal["off", "on", "corrected"]


def as_phi(phi: np.ndarray, *, dim: int, name: str) -> np.ndarray:
    v = np.asarray(phi, dtype=np.float64)
    if v.shape != (int(dim),):
        raise ValueError(f"{name} must have shape ({dim},), got {v.shape}")
    return v


def check_trace_params(*, gamma: float, lam: float) -> None:
    if not 0.0 <= float(gamma) <= 1.0:
        raise ValueError(f"gamma must be in [0, 1] (got {gamma})")
    if not 0.0 <= float(lam) <= 1.0:
        raise ValueError(f"lambda must be in [0, 1] (got {lam})")


__all__ = ["CriticKind", "VarianceReduction", "as_phi", "check_trace_params"]
