# src/tetris_nac/nac/config.py
from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator, model_validator

from tetris_nac.config.base import ConfigBase, normalize_tag
from tetris_nac.nac.critics import DEFAULT_MAX_SAMPLES, CriticKind, VarianceReduction

_CRITIC_ALIASES = {
    "lstd": "lstd",
    "lspe": "lspe",
    "raw": "raw",
    "raw_sample": "raw",
    "raw_samples": "raw",
}


class AgentConfig(ConfigBase):
    critic: CriticKind = "lstd"
    gamma: float = Field(default=1.0, ge=0.0, le=1.0)
    lam: float = Field(default=0.0, ge=0.0, le=1.0)
    tau: float = Field(default=1.0, gt=0.0)
    learning: bool = True
    reject_terminal_actions: bool = True
    variance_reduction: VarianceReduction = "on"
    max_samples: int = Field(default=DEFAULT_MAX_SAMPLES, ge=1)

    # initial policy parameters, one per action feature; None means zeros
    theta: Optional[list[float]] = None

    @field_validator("critic", mode="before")
    @classmethod
    def _critic_tag(cls, v: object) -> str:
        s = normalize_tag(v)
        if s not in _CRITIC_ALIASES:
            raise ValueError(f"agent.critic must be 'lstd', 'lspe' or 'raw' (got {v!r})")
        return _CRITIC_ALIASES[s]

    @field_validator("variance_reduction", mode="before")
    @classmethod
    def _variance_reduction_tag(cls, v: object) -> str:
        # YAML reads bare on/off as booleans
        if isinstance(v, bool):
            return "on" if v else "off"
        return normalize_tag(v)

    @model_validator(mode="after")
    def _corrected_needs_lstd(self) -> "AgentConfig":
        if self.variance_reduction == "corrected" and self.critic != "lstd":
            raise ValueError("agent.variance_reduction='corrected' is implemented only for critic='lstd'")
        return self


__all__ = ["AgentConfig"]
