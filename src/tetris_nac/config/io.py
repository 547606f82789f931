# src/tetris_nac/config/io.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel

from tetris_nac.config.root import ExperimentConfig


def to_plain_dict(cfg: Any) -> dict[str, Any]:
    """Plain (JSON-safe) mapping of a pydantic model, DictConfig or mapping; the Hydra block is dropped."""
    if isinstance(cfg, BaseModel):
        data: Any = cfg.model_dump(mode="json")
    elif isinstance(cfg, DictConfig):
        data = OmegaConf.to_container(cfg, resolve=True)
    elif isinstance(cfg, Mapping):
        data = dict(cfg)
    else:
        raise TypeError(f"unsupported config type: {type(cfg).__name__}")
    if not isinstance(data, dict):
        raise TypeError("config must resolve to a mapping")
    data.pop("hydra", None)
    return data


def load_yaml(path: Path) -> dict[str, Any]:
    return to_plain_dict(OmegaConf.load(Path(path)))


def load_experiment_config(path: Path) -> ExperimentConfig:
    return ExperimentConfig.model_validate(load_yaml(path))


def save_experiment_config(cfg: ExperimentConfig, path: Path) -> Path:
    """Write the validated config as YAML; load_experiment_config reads it back."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    OmegaConf.save(config=OmegaConf.create(to_plain_dict(cfg)), f=out)
    return out


__all__ = ["load_experiment_config", "load_yaml", "save_experiment_config", "to_plain_dict"]
