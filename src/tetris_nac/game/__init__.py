from .holes import HOLE_COUNTERS, HoleStrategy, hole_counter
from .pieces import PieceCatalog, PieceShape, classic_catalog
from .seed_fill import FillWindow, seed_fill
from .tetris import BoardSnapshot, TetrisSimulator
from .types import StepData, state_action_dim, state_dim

__all__ = [
    "BoardSnapshot",
    "FillWindow",
    "HOLE_COUNTERS",
    "HoleStrategy",
    "PieceCatalog",
    "PieceShape",
    "StepData",
    "TetrisSimulator",
    "classic_catalog",
    "hole_counter",
    "seed_fill",
    "state_action_dim",
    "state_dim",
]
