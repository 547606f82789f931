# src/tetris_nac/runners/artifacts.py
from __future__ import annotations

import io
import json
import zipfile
from dataclasses import fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from tetris_nac.nac.critics import CriticStats, LSPEStats, LSTDStats, RawSampleStats

_STATS_TYPES: Dict[str, type] = {
    "lstd": LSTDStats,
    "lspe": LSPEStats,
    "raw": RawSampleStats,
}


def to_jsonable(obj: Any) -> Any:
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


def stats_kind(stats: CriticStats) -> str:
    for kind, cls in _STATS_TYPES.items():
        if isinstance(stats, cls):
            return kind
    raise TypeError(f"unsupported critic stats type: {type(stats).__name__}")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _is_nonempty_dir(p: Path) -> bool:
    if not p.exists() or not p.is_dir():
        return False
    return any(p.iterdir())


def pick_run_dir(out_root: Path, name: str) -> Path:
    """
    Choose a run directory without creating it: <out_root>/<name>_001, then
    _002, ... An existing but empty candidate is reused.
    """
    out_root = Path(out_root)
    for i in range(1, 10_000):
        cand = out_root / f"{name}_{i:03d}"
        if not cand.exists():
            return cand
        if cand.is_dir() and not _is_nonempty_dir(cand):
            return cand
    raise RuntimeError(f"could not find a free run dir under {out_root} for name={name!r}")


def save_run_artifacts(
    *,
    path: Path,
    meta: Dict[str, Any],
    cfg: Dict[str, Any],
    returns: list[float],
    stats: Optional[CriticStats] = None,
) -> Path:
    """
    Layout of the archive:
      meta.json            run metadata (+ "stats_kind" when stats are stored)
      cfg.json             resolved experiment config
      returns.json         episode returns in play order
      stats/<field>.npy    one array per critic statistics field
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    meta_out = dict(meta)
    if stats is not None:
        meta_out["stats_kind"] = stats_kind(stats)

    with zipfile.ZipFile(out_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("meta.json", json.dumps(to_jsonable(meta_out), indent=2))
        zf.writestr("cfg.json", json.dumps(to_jsonable(cfg), indent=2))
        zf.writestr("returns.json", json.dumps([float(r) for r in returns]))

        if stats is not None:
            for name, arr in stats.as_arrays().items():
                buf = io.BytesIO()
                np.save(buf, np.asarray(arr), allow_pickle=False)
                zf.writestr(f"stats/{name}.npy", buf.getvalue())

    return out_path


def load_run_artifacts(path: Path) -> Dict[str, Any]:
    path = Path(path)
    with zipfile.ZipFile(path, "r") as zf:
        with zf.open("meta.json") as fh:
            meta = json.load(fh)
        with zf.open("cfg.json") as fh:
            cfg = json.load(fh)
        with zf.open("returns.json") as fh:
            returns = [float(r) for r in json.load(fh)]

        stats = None
        kind = meta.get("stats_kind")
        if kind is not None:
            try:
                cls = _STATS_TYPES[str(kind)]
            except KeyError as e:
                raise ValueError(f"unknown stats kind in {path}: {kind!r}") from e
            values: Dict[str, Any] = {}
            for f in fields(cls):
                with zf.open(f"stats/{f.name}.npy") as fh:
                    arr = np.load(io.BytesIO(fh.read()), allow_pickle=False)
                values[f.name] = int(arr) if arr.ndim == 0 else arr
            stats = cls(**values)

    return {
        "meta": meta,
        "cfg": cfg,
        "returns": returns,
        "stats": stats,
    }


__all__ = [
    "load_run_artifacts",
    "pick_run_dir",
    "save_run_artifacts",
    "stats_kind",
    "to_jsonable",
    "utc_now_iso",
]
