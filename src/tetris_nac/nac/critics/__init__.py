from .common import CriticKind, VarianceReduction
from .factory import CRITIC_REGISTRY, Critic, CriticStats, make_critic, merge_stats
from .lspe import LSPECritic, LSPEStats
from .lstd import LSTDCritic, LSTDStats
from .raw_samples import DEFAULT_MAX_SAMPLES, RawSampleCritic, RawSampleStats

__all__ = [
    "CRITIC_REGISTRY",
    "Critic",
    "CriticKind",
    "CriticStats",
    "DEFAULT_MAX_SAMPLES",
    "LSPECritic",
    "LSPEStats",
    "LSTDCritic",
    "LSTDStats",
    "RawSampleCritic",
    "RawSampleStats",
    "VarianceReduction",
    "make_critic",
    "merge_stats",
]
