# src/tetris_nac/utils/seed.py
"""
Deterministic seed derivation.

Every random consumer of a run (piece selection, action sampling) gets its
own stream derived from the run seed, so changing how often one consumer
draws never shifts the numbers seen by another.
"""

from __future__ import annotations

ENV_STREAM: int = 0x7E00
AGENT_STREAM: int = 0xA600

STREAM_IDS: dict[str, int] = {
    "env": ENV_STREAM,
    "agent": AGENT_STREAM,
}


def splitmix64(x: int) -> int:
    z = (int(x) + 0x9E3779B97F4A7C15) & 0xFFFFFFFFFFFFFFFF
    z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & 0xFFFFFFFFFFFFFFFF
    z = (z ^ (z >> 27)) * 0x94D049BB133111EB & 0xFFFFFFFFFFFFFFFF
    return int((z ^ (z >> 31)) & 0xFFFFFFFFFFFFFFFF)


def seed32_from(*, base_seed: int, stream_id: int) -> int:
    """Same (base_seed, stream_id) always yields the same seed in [0, 2^31 - 1]."""
    mixed = splitmix64((int(base_seed) << 32) ^ int(stream_id))
    return int(mixed & 0x7FFFFFFF)


def role_seed(*, base_seed: int, role: str) -> int:
    try:
        stream_id = STREAM_IDS[str(role)]
    except KeyError as e:
        known = ", ".join(sorted(STREAM_IDS))
        raise ValueError(f"unknown random stream role {role!r}. known: [{known}]") from e
    return seed32_from(base_seed=int(base_seed), stream_id=stream_id)


__all__ = ["AGENT_STREAM", "ENV_STREAM", "STREAM_IDS", "role_seed", "seed32_from", "splitmix64"]
