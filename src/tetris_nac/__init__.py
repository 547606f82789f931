# src/tetris_nac/__init__.py
from .game import StepData, TetrisSimulator
from .nac import NaturalActorCritic, SoftmaxPolicy, make_critic, merge_stats, natural_gradient, update_theta
from .random_stream import BufferedRandomStream, RandomStream

__all__ = [
    "BufferedRandomStream",
    "NaturalActorCritic",
    "RandomStream",
    "SoftmaxPolicy",
    "StepData",
    "TetrisSimulator",
    "make_critic",
    "merge_stats",
    "natural_gradient",
    "update_theta",
]
