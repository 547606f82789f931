# src/tetris_nac/cli/train.py
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from hydra import compose, initialize_config_dir
from omegaconf import DictConfig

from tetris_nac.runners.experiment import run_experiment


def _looks_like_path_or_yaml(arg: str) -> bool:
    s = str(arg).strip().strip('"').strip("'")
    if not s:
        return False
    if s.endswith((".yaml", ".yml")):
        return True
    return s.startswith((".", "/", "~"))


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Train a Tetris policy with natural actor-critic.",
        allow_abbrev=False,
    )
    ap.add_argument("-cfg", "--config-file", dest="config_file", default=None, help="path to a YAML config file")
    ap.add_argument("-c", "--config-name", dest="config_name", default=None, help="config name (no .yaml)")
    ap.add_argument("-p", "--config-path", dest="config_path", default="configs", help="config directory")
    ap.add_argument("--no-rich", dest="use_rich", action="store_false", help="plain log output, no progress bar")

    # tetris-nac-train ./configs/nac.yaml is the same as -cfg ./configs/nac.yaml
    ap.add_argument("config_pos", nargs="?", default=None, help="optional config file path or name")
    ap.add_argument("overrides", nargs=argparse.REMAINDER, help="Hydra overrides (after --)")
    args = ap.parse_args(argv)

    if args.config_pos is not None:
        cp = str(args.config_pos)
        if args.config_file is not None or args.config_name is not None or cp == "--":
            args.overrides = [cp, *list(args.overrides or [])]
        elif _looks_like_path_or_yaml(cp):
            args.config_file = cp
        else:
            args.config_name = cp
        args.config_pos = None

    if args.config_file is None and args.config_name is None:
        args.config_name = "nac"
    return args


def _resolve_config_selection(args: argparse.Namespace) -> tuple[Path, str]:
    if args.config_file:
        p = Path(str(args.config_file)).expanduser().resolve()
        if not p.is_file():
            raise FileNotFoundError(f"--config-file not found: {p}")
        return p.parent, p.stem
    base = Path(str(args.config_path)).expanduser()
    if not base.is_absolute():
        base = (Path.cwd() / base).resolve()
    return base, str(args.config_name)


def _normalize_overrides(overrides: Sequence[str] | None) -> list[str]:
    return [str(o) for o in (overrides or []) if str(o) != "--"]


def compose_config(args: argparse.Namespace) -> DictConfig:
    cfg_path, cfg_name = _resolve_config_selection(args)
    overrides = _normalize_overrides(args.overrides)
    with initialize_config_dir(version_base=None, config_dir=str(cfg_path)):
        return compose(config_name=str(cfg_name), overrides=overrides)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    cfg = compose_config(args)
    run_experiment(cfg, use_rich=bool(args.use_rich))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())


__all__ = ["compose_config", "main", "parse_args"]
