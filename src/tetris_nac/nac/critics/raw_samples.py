# src/tetris_nac/nac/critics/raw_samples.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from tetris_nac.nac.critics.common import as_phi, check_trace_params

DEFAULT_MAX_SAMPLES: int = 1_000_000


def _no_starts() -> np.ndarray:
    return np.zeros((0,), dtype=np.int64)


@dataclass(frozen=True)
class RawSampleStats:
    s0: np.ndarray  # (n, dim)
    s1: np.ndarray  # (n, dim)
    r: np.ndarray  # (n,)
    n: int
    # first row of every recorded episode; row 0 always starts one
    episode_starts: np.ndarray = field(default_factory=_no_starts)

    def as_arrays(self) -> dict[str, np.ndarray]:
        return {
            "s0": self.s0,
            "s1": self.s1,
            "r": self.r,
            "n": np.asarray(self.n),
            "episode_starts": self.episode_starts,
        }

    def episodes(self) -> list[slice]:
        """Row ranges of the recorded episodes, in order."""
        n = int(self.n)
        if n == 0:
            return []
        starts = {0, *(int(s) for s in self.episode_starts if 0 < int(s) < n)}
        bounds = [*sorted(starts), n]
        return [slice(lo, hi) for lo, hi in zip(bounds[:-1], bounds[1:])]


@dataclass
class RawSampleCritic:
    """
    Records every (phi0, phi1, r) transition for offline TD(lambda).

    Holds at most `max_samples` transitions; one more raises RuntimeError
    and leaves the recorded data untouched.
    """

    dim: int
    gamma: float
    lam: float
    max_samples: int = DEFAULT_MAX_SAMPLES
    kind: str = field(default="raw", init=False)
    _s0: list[np.ndarray] = field(default_factory=list, init=False, repr=False)
    _s1: list[np.ndarray] = field(default_factory=list, init=False, repr=False)
    _r: list[float] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        check_trace_params(gamma=self.gamma, lam=self.lam)
        if int(self.max_samples) <= 0:
            raise ValueError(f"max_samples must be >= 1 (got {self.max_samples})")

    @property
    def n(self) -> int:
        return len(self._r)

    def update(self, phi0: np.ndarray, phi1: np.ndarray, reward: float) -> None:
        if self.n >= int(self.max_samples):
            raise RuntimeError(f"raw sample capacity exceeded: max_samples={self.max_samples}")
        p0 = as_phi(phi0, dim=self.dim, name="phi0")
        p1 = as_phi(phi1, dim=self.dim, name="phi1")
        self._s0.append(p0.copy())
        self._s1.append(p1.copy())
        self._r.append(float(reward))

    def export(self) -> RawSampleStats:
        if self.n == 0:
            empty = np.zeros((0, self.dim), dtype=np.float64)
            return RawSampleStats(s0=empty, s1=empty.copy(), r=np.zeros((0,), dtype=np.float64), n=0)
        return RawSampleStats(
            s0=np.vstack(self._s0),
            s1=np.vstack(self._s1),
            r=np.asarray(self._r, dtype=np.float64),
            n=int(self.n),
            episode_starts=np.zeros((1,), dtype=np.int64),
        )


__all__ = ["DEFAULT_MAX_SAMPLES", "RawSampleCritic", "RawSampleStats"]
