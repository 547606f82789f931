# src/tetris_nac/game/holes.py
from __future__ import annotations

from typing import Callable, Dict, Literal

import numpy as np

from tetris_nac.game.seed_fill import FillWindow, seed_fill

HoleStrategy = Literal["covered_by", "under_topline", "flood_fill"]

HoleCounter = Callable[[np.ndarray, np.ndarray, int], int]


def count_holes_covered_by(grid: np.ndarray, heightmap: np.ndarray, heightmap_min: int) -> int:
    """
    Empty cells with a filled cell directly above them, scanning only rows
    below the running heightmap minimum.
    """
    _ = heightmap
    rows = int(grid.shape[0])
    top = int(heightmap_min)
    if top + 1 >= rows:
        return 0
    below = grid[top + 1 :]
    above = grid[top:-1]
    return int(np.count_nonzero(~below & above))


def count_holes_under_topline(grid: np.ndarray, heightmap: np.ndarray, heightmap_min: int) -> int:
    """Empty cells strictly below their own column's topmost filled cell."""
    _ = heightmap_min
    rows = int(grid.shape[0])
    row_idx = np.arange(rows)[:, None]
    under = row_idx > np.asarray(heightmap)[None, :]
    return int(np.count_nonzero(under & ~grid))


def count_holes_flood_fill(grid: np.ndarray, heightmap: np.ndarray, heightmap_min: int) -> int:
    """
    Empty cells below a column's topline that cannot be reached from the open
    area above the stack by 4-connected empty moves. Works on a private copy.
    """
    rows, columns = int(grid.shape[0]), int(grid.shape[1])
    top = int(heightmap_min)
    if top >= rows:
        return 0

    reached = np.array(grid, dtype=bool, copy=True)
    window = FillWindow(x0=0, y0=top, x1=columns - 1, y1=rows - 1)
    holes = 0
    for col in range(columns):
        seed_fill(reached, col, top, window, True)
        holes += int(np.count_nonzero(~reached[int(heightmap[col]) + 1 :, col]))
    return holes


HOLE_COUNTERS: Dict[str, HoleCounter] = {
    "covered_by": count_holes_covered_by,
    "under_topline": count_holes_under_topline,
    "flood_fill": count_holes_flood_fill,
}


def hole_counter(strategy: str) -> HoleCounter:
    key = str(strategy).strip().lower()
    try:
        return HOLE_COUNTERS[key]
    except KeyError as e:
        known = ", ".join(sorted(HOLE_COUNTERS))
        raise ValueError(f"unknown hole strategy {strategy!r}. known: [{known}]") from e


__all__ = [
    "HOLE_COUNTERS",
    "HoleCounter",
    "HoleStrategy",
    "count_holes_covered_by",
    "count_holes_flood_fill",
    "count_holes_under_topline",
    "hole_counter",
]
