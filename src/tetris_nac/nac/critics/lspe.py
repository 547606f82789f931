# src/tetris_nac/nac/critics/lspe.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from tetris_nac.nac.critics.common import as_phi, check_trace_params


@dataclass(frozen=True)
class LSPEStats:
    B: np.ndarray
    A: np.ndarray
    b: np.ndarray
    z: np.ndarray
    steps: int

    def as_arrays(self) -> dict[str, np.ndarray]:
        return {"B": self.B, "A": self.A, "b": self.b, "z": self.z, "steps": np.asarray(self.steps)}


@dataclass
class LSPECritic:
    """
    LSPE(lambda) sufficient statistics.

        B <- B + phi0 phi0^T
        z <- gamma*lambda*z + phi0
        A <- A + z (gamma*phi1 - phi0)^T
        b <- b + z*r
    """

    dim: int
    gamma: float
    lam: float
    kind: str = field(default="lspe", init=False)
    B: np.ndarray = field(init=False)
    A: np.ndarray = field(init=False)
    b: np.ndarray = field(init=False)
    z: np.ndarray = field(init=False)
    steps: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        check_trace_params(gamma=self.gamma, lam=self.lam)
        self.B = np.zeros((self.dim, self.dim), dtype=np.float64)
        self.A = np.zeros((self.dim, self.dim), dtype=np.float64)
        self.b = np.zeros((self.dim,), dtype=np.float64)
        self.z = np.zeros((self.dim,), dtype=np.float64)

    def update(self, phi0: np.ndarray, phi1: np.ndarray, reward: float) -> None:
        p0 = as_phi(phi0, dim=self.dim, name="phi0")
        p1 = as_phi(phi1, dim=self.dim, name="phi1")

        self.B += np.outer(p0, p0)
        self.z = self.gamma * self.lam * self.z + p0
        self.A += np.outer(self.z, self.gamma * p1 - p0)
        self.b += self.z * float(reward)
        self.steps += 1

    def export(self) -> LSPEStats:
        return LSPEStats(
            B=self.B.copy(),
            A=self.A.copy(),
            b=self.b.copy(),
            z=self.z.copy(),
            steps=int(self.steps),
        )


__all__ = ["LSPECritic", "LSPEStats"]
