# src/tetris_nac/random_stream.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

DEFAULT_BUFFER_SIZE: int = 1024


@runtime_checkable
class RandomStream(Protocol):
    """Source of independent uniform doubles in [0, 1)."""

    def next(self) -> float:
        raise NotImplementedError


class BufferedRandomStream:
    """
    RandomStream backed by a numpy Generator.

    Draws are pulled in batches of `buffer_size`; the refill is the only
    non-trivial work done by next(). Two streams built from the same seed and
    buffer size yield identical sequences.
    """

    def __init__(
        self,
        seed: int | None = None,
        *,
        rng: np.random.Generator | None = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        if rng is not None and seed is not None:
            raise ValueError("pass either seed or rng, not both")
        if int(buffer_size) <= 0:
            raise ValueError(f"buffer_size must be >= 1 (got {buffer_size})")
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self.buffer_size = int(buffer_size)
        self._buffer = np.empty((0,), dtype=np.float64)
        self._idx = 0

    def _refill(self) -> None:
        self._buffer = self._rng.random(self.buffer_size)
        self._idx = 0

    def next(self) -> float:
        if self._idx >= self._buffer.shape[0]:
            self._refill()
        v = float(self._buffer[self._idx])
        self._idx += 1
        return v


__all__ = ["BufferedRandomStream", "DEFAULT_BUFFER_SIZE", "RandomStream"]
