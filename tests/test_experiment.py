# tests/test_experiment.py
from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from tetris_nac.cli.train import main, parse_args
from tetris_nac.config.root import ExperimentConfig
from tetris_nac.runners.artifacts import load_run_artifacts
from tetris_nac.runners.experiment import initial_theta, run_experiment

REPO_ROOT = Path(__file__).resolve().parents[1]


def _cfg(tmp_path: Path, **agent: object) -> ExperimentConfig:
    return ExperimentConfig.model_validate(
        {
            "log_level": "warning",
            "run": {"name": "t", "out_root": str(tmp_path), "seed": 5, "save_stats": True},
            "agent": {"gamma": 0.9, **agent},
            "stop": {"max_steps": 30},
            "train": {"iterations": 2, "episodes_per_update": 2, "learning_rate": 0.01, "lspe_iterations": 20, "ridge": 1e-3},
        }
    )


@pytest.mark.parametrize("critic", ["lstd", "lspe", "raw"])
def test_experiment_updates_theta_and_saves_artifacts(tmp_path: Path, critic: str) -> None:
    result = run_experiment(_cfg(tmp_path, critic=critic), use_rich=False)
    assert len(result.returns) == 4
    assert result.theta.shape == (23,)
    assert np.all(np.isfinite(result.theta))
    assert result.run_dir is not None
    assert (result.run_dir / "config.yaml").is_file()
    assert (result.run_dir / "train.log").is_file()

    loaded = load_run_artifacts(result.run_dir / "nac.zip")
    assert loaded["meta"]["stats_kind"] == critic
    assert loaded["returns"] == result.returns
    np.testing.assert_allclose(loaded["meta"]["theta"], result.theta)


def test_experiment_is_deterministic_for_a_seed(tmp_path: Path) -> None:
    a = run_experiment(_cfg(tmp_path / "a"), use_rich=False)
    b = run_experiment(_cfg(tmp_path / "b"), use_rich=False)
    assert a.returns == b.returns
    np.testing.assert_array_equal(a.theta, b.theta)


def test_experiment_without_learning_keeps_theta(tmp_path: Path) -> None:
    result = run_experiment(_cfg(tmp_path, learning=False), use_rich=False)
    np.testing.assert_array_equal(result.theta, np.zeros(23))


def test_initial_theta_length_is_checked() -> None:
    cfg = ExperimentConfig.model_validate({"agent": {"theta": [0.0, 1.0]}})
    with pytest.raises(ValueError, match="agent.theta must have 23 entries"):
        initial_theta(agent=cfg.agent, columns=10)


def test_positional_yaml_is_a_config_file() -> None:
    args = parse_args(["configs/nac.yaml"])
    assert args.config_file == "configs/nac.yaml"
    assert args.config_name is None


def test_positional_name_is_a_config_name() -> None:
    args = parse_args(["nac"])
    assert args.config_name == "nac"


def test_default_config_name() -> None:
    assert parse_args([]).config_name == "nac"


def test_cli_trains_with_overrides(tmp_path: Path) -> None:
    rc = main(
        [
            "-cfg",
            str(REPO_ROOT / "configs" / "nac.yaml"),
            "--no-rich",
            "--",
            "train.iterations=1",
            "train.episodes_per_update=1",
            "stop.max_steps=5",
            f"run.out_root='{tmp_path.as_posix()}'",
            "log_level=warning",
        ]
    )
    assert rc == 0
    assert (tmp_path / "nac_001" / "nac.zip").is_file()
