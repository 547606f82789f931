# src/tetris_nac/nac/critics/lstd.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from tetris_nac.nac.critics.common import VarianceReduction, as_phi, check_trace_params


@dataclass(frozen=True)
class LSTDStats:
    A: np.ndarray
    b: np.ndarray
    z: np.ndarray
    steps: int

    def as_arrays(self) -> dict[str, np.ndarray]:
        return {"A": self.A, "b": self.b, "z": self.z, "steps": np.asarray(self.steps)}


@dataclass
class LSTDCritic:
    """
    LSTD(lambda) sufficient statistics.

        z <- gamma*lambda*z + phi0
        A <- A + z (phi0 - gamma*phi1)^T
        b <- b + z*r

    In "corrected" variance reduction mode the columns of A that belong to
    the policy gradient block (index >= gradient_offset) also get
    -gamma*lambda * z_prev phi0^T, with z_prev the trace before this update.
    """

    dim: int
    gamma: float
    lam: float
    gradient_offset: int = 0
    variance_reduction: VarianceReduction = "on"
    kind: str = field(default="lstd", init=False)
    A: np.ndarray = field(init=False)
    b: np.ndarray = field(init=False)
    z: np.ndarray = field(init=False)
    steps: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        check_trace_params(gamma=self.gamma, lam=self.lam)
        if not 0 <= int(self.gradient_offset) <= int(self.dim):
            raise ValueError(f"gradient_offset must be in [0, {self.dim}] (got {self.gradient_offset})")
        if self.variance_reduction == "corrected" and int(self.gradient_offset) == 0:
            raise ValueError("variance_reduction='corrected' needs gradient_offset > 0 (the state feature count)")
        self.A = np.zeros((self.dim, self.dim), dtype=np.float64)
        self.b = np.zeros((self.dim,), dtype=np.float64)
        self.z = np.zeros((self.dim,), dtype=np.float64)

    def update(self, phi0: np.ndarray, phi1: np.ndarray, reward: float) -> None:
        p0 = as_phi(phi0, dim=self.dim, name="phi0")
        p1 = as_phi(phi1, dim=self.dim, name="phi1")
        decay = self.gamma * self.lam

        z_prev = self.z.copy() if self.variance_reduction == "corrected" else None
        self.z = decay * self.z + p0

        self.A += np.outer(self.z, p0 - self.gamma * p1)
        if z_prev is not None:
            g = int(self.gradient_offset)
            self.A[:, g:] -= decay * np.outer(z_prev, p0[g:])

        self.b += self.z * float(reward)
        self.steps += 1

    def export(self) -> LSTDStats:
        return LSTDStats(A=self.A.copy(), b=self.b.copy(), z=self.z.copy(), steps=int(self.steps))


__all__ = ["LSTDCritic", "LSTDStats"]
