from .actor import natural_gradient, update_theta
from .controller import NaturalActorCritic
from .critics import Critic, CriticKind, CriticStats, VarianceReduction, make_critic, merge_stats
from .policy import SoftmaxPolicy, action_probabilities, sample_action

__all__ = [
    "Critic",
    "CriticKind",
    "CriticStats",
    "NaturalActorCritic",
    "SoftmaxPolicy",
    "VarianceReduction",
    "action_probabilities",
    "make_critic",
    "merge_stats",
    "natural_gradient",
    "sample_action",
    "update_theta",
]
