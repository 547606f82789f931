# src/tetris_nac/game/seed_fill.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy import ndimage

# 4-connectivity (no diagonals)
_FOUR_CONNECTED = ndimage.generate_binary_structure(2, 1)


@dataclass(frozen=True)
class FillWindow:
    """Axis-aligned rectangle, bounds inclusive. x is the column, y the row."""

    x0: int
    y0: int
    x1: int
    y1: int

    def contains(self, x: int, y: int) -> bool:
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1


def seed_fill(grid: np.ndarray, x: int, y: int, window: FillWindow, new_value: bool) -> None:
    """
    Set the cell (x, y) and every 4-connected cell of the same old value to
    `new_value`, never leaving `window`. Mutates `grid` in place.

    Nothing happens when the seed lies outside the window or already holds
    `new_value`.
    """
    if grid.ndim != 2:
        raise ValueError(f"grid must be 2D, got shape={grid.shape}")
    if not window.contains(x, y):
        return
    old_value = bool(grid[y, x])
    if old_value == bool(new_value):
        return

    x0 = max(0, window.x0)
    y0 = max(0, window.y0)
    x1 = min(grid.shape[1] - 1, window.x1)
    y1 = min(grid.shape[0] - 1, window.y1)

    view = grid[y0 : y1 + 1, x0 : x1 + 1]
    labels, _count = ndimage.label(view == old_value, structure=_FOUR_CONNECTED)
    region = labels == labels[y - y0, x - x0]
    view[region] = bool(new_value)


__all__ = ["FillWindow", "seed_fill"]
