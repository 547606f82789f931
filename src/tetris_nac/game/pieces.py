# src/tetris_nac/game/pieces.py
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
import yaml


def _parse_rotation(rows: Sequence[str]) -> np.ndarray:
    if not isinstance(rows, (list, tuple)) or len(rows) == 0:
        raise ValueError("rotation must be a non-empty list of strings")

    width = None
    out: List[List[bool]] = []
    for r in rows:
        if not isinstance(r, str) or len(r) == 0:
            raise ValueError(f"rotation rows must be non-empty strings, got {r!r}")
        if width is None:
            width = len(r)
        elif len(r) != width:
            raise ValueError(f"rotation rows must have equal width, got widths {width} and {len(r)}")
        out.append([ch == "#" for ch in r])

    arr = np.asarray(out, dtype=bool)
    if not arr.any(axis=0).all() or not arr.any(axis=1).all():
        raise ValueError("rotation mask must be tight: every row and column needs a filled cell ('#')")
    return arr


@dataclass(frozen=True)
class PieceShape:
    """
    One (piece, rotation) entry of the catalog.

    top_offsets[c]:    mask row of the topmost filled cell in column c
    bottom_offsets[c]: one past the mask row of the lowest filled cell in column c

    A piece whose top-left corner sits at board row `row` occupies column
    `col + c` from row `row + top_offsets[c]` down to `row + bottom_offsets[c] - 1`.
    """

    width: int
    height: int
    top_offsets: Tuple[int, ...]
    bottom_offsets: Tuple[int, ...]
    mask: np.ndarray  # (height, width) bool, read-only

    @classmethod
    def from_mask(cls, mask: np.ndarray) -> "PieceShape":
        m = np.array(mask, dtype=bool, copy=True)
        h, w = m.shape
        top = tuple(int(np.argmax(m[:, c])) for c in range(w))
        bottom = tuple(int(h - np.argmax(m[::-1, c])) for c in range(w))
        m.setflags(write=False)
        return cls(width=int(w), height=int(h), top_offsets=top, bottom_offsets=bottom, mask=m)

    def legal_columns(self, board_columns: int) -> int:
        return max(0, int(board_columns) - self.width + 1)


@dataclass(frozen=True)
class PieceCatalog:
    """
    Immutable lookup table indexed by (piece, rotation).

    Action indices are rotation-major: for a given piece, action a decodes to
    the first rotation r for which a < legal_columns(r), after subtracting the
    legal column counts of all earlier rotations. The remainder is the column.
    """

    kinds: Tuple[str, ...]
    shapes: Tuple[Tuple[PieceShape, ...], ...]

    @staticmethod
    def default_path() -> Path:
        return Path(__file__).resolve().parent / "assets" / "classic7.yaml"

    @classmethod
    def from_yaml(cls, path: Path, *, expected_cells: Optional[int] = None) -> "PieceCatalog":
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"piece YAML must be a mapping at top-level, got {type(data)!r}")

        if expected_cells is None:
            v = data.get("expected_cells", None)
            expected_cells = None if v is None else int(v)

        pieces_node = data.get("pieces")
        if not isinstance(pieces_node, dict) or not pieces_node:
            raise ValueError("piece YAML must contain non-empty mapping 'pieces:'")

        kinds: List[str] = []
        shapes: List[Tuple[PieceShape, ...]] = []
        for kind, spec in pieces_node.items():
            if not isinstance(spec, dict):
                raise ValueError(f"piece spec for {kind!r} must be a mapping, got {type(spec)!r}")
            rotations_node = spec.get("rotations")
            if not isinstance(rotations_node, list) or not rotations_node:
                raise ValueError(f"{kind!r}: 'rotations' must be a non-empty list")

            masks = [_parse_rotation(rows) for rows in rotations_node]
            cell_counts = {int(m.sum()) for m in masks}
            if len(cell_counts) != 1:
                raise ValueError(f"{kind!r}: rotations must have same filled cell count, got {sorted(cell_counts)}")
            if expected_cells is not None and cell_counts != {int(expected_cells)}:
                raise ValueError(f"{kind!r}: expected {expected_cells} filled cells, got {cell_counts.pop()}")

            kinds.append(str(kind))
            shapes.append(tuple(PieceShape.from_mask(m) for m in masks))

        return cls(kinds=tuple(kinds), shapes=tuple(shapes))

    @property
    def num_pieces(self) -> int:
        return len(self.kinds)

    def num_rotations(self, piece: int) -> int:
        return len(self.shapes[int(piece)])

    def shape(self, piece: int, rotation: int) -> PieceShape:
        return self.shapes[int(piece)][int(rotation)]

    def max_width(self) -> int:
        return max(s.width for rots in self.shapes for s in rots)

    def max_height(self) -> int:
        return max(s.height for rots in self.shapes for s in rots)

    def action_count(self, piece: int, board_columns: int) -> int:
        return sum(s.legal_columns(board_columns) for s in self.shapes[int(piece)])

    def decode_action(self, piece: int, action: int, board_columns: int) -> Tuple[int, int]:
        """Return (rotation, column) of a rotation-major action index."""
        a = int(action)
        if a < 0:
            raise ValueError(f"action must be >= 0, got {action}")
        for rot, s in enumerate(self.shapes[int(piece)]):
            n = s.legal_columns(board_columns)
            if a < n:
                return rot, a
            a -= n
        raise ValueError(
            f"action {action} out of range for piece {self.kinds[int(piece)]!r} "
            f"({self.action_count(piece, board_columns)} actions)"
        )


@lru_cache(maxsize=None)
def classic_catalog() -> PieceCatalog:
    return PieceCatalog.from_yaml(PieceCatalog.default_path(), expected_cells=4)


__all__ = ["PieceCatalog", "PieceShape", "classic_catalog"]
