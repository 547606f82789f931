# src/tetris_nac/config/base.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ConfigBase(BaseModel):
    """Immutable config section; unknown keys in YAML are errors."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )


def normalize_tag(v: object) -> str:
    """'Flood-Fill ' -> 'flood_fill'"""
    return str(v).strip().lower().replace("-", "_")


__all__ = ["ConfigBase", "normalize_tag"]
