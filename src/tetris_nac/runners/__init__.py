from .artifacts import load_run_artifacts, pick_run_dir, save_run_artifacts
from .config import RunConfig, StopConfig, TrainConfig
from .episode import EpisodeResult, run_episode

__all__ = [
    "EpisodeResult",
    "RunConfig",
    "StopConfig",
    "TrainConfig",
    "load_run_artifacts",
    "pick_run_dir",
    "run_episode",
    "save_run_artifacts",
]
