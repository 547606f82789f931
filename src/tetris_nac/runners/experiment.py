# src/tetris_nac/runners/experiment.py
from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import numpy as np
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from tetris_nac.config.io import save_experiment_config, to_plain_dict
from tetris_nac.config.root import ExperimentConfig
from tetris_nac.game.config import BoardConfig
from tetris_nac.game.tetris import TetrisSimulator
from tetris_nac.game.types import state_action_dim, state_dim
from tetris_nac.nac.actor import natural_gradient, update_theta
from tetris_nac.nac.config import AgentConfig
from tetris_nac.nac.controller import NaturalActorCritic
from tetris_nac.nac.critics import CriticStats, make_critic, merge_stats
from tetris_nac.nac.policy import SoftmaxPolicy
from tetris_nac.random_stream import BufferedRandomStream, RandomStream
from tetris_nac.runners.artifacts import pick_run_dir, save_run_artifacts, utc_now_iso
from tetris_nac.runners.episode import run_episode
from tetris_nac.utils.logging import setup_logger
from tetris_nac.utils.seed import role_seed


@dataclass(frozen=True)
class ExperimentResult:
    theta: np.ndarray
    returns: list[float]
    stats: Optional[CriticStats]
    run_dir: Optional[Path]


def make_simulator(*, board: BoardConfig, rstream: RandomStream) -> TetrisSimulator:
    return TetrisSimulator(
        rstream=rstream,
        rows=int(board.rows),
        columns=int(board.columns),
        hole_strategy=str(board.hole_strategy),
        terminal_state_bias=float(board.terminal_state_bias),
        terminal_action_bias=float(board.terminal_action_bias),
        observation_log_length=int(board.observation_log_length),
    )


def make_agent(
    *,
    agent: AgentConfig,
    theta: np.ndarray,
    rstream: RandomStream,
    columns: int,
) -> NaturalActorCritic:
    """Fresh controller with a fresh critic; theta is copied into the policy."""
    s_dim = state_dim(int(columns))
    dim = s_dim + state_action_dim(int(columns))
    critic = make_critic(
        agent.critic,
        dim=dim,
        gamma=float(agent.gamma),
        lam=float(agent.lam),
        gradient_offset=s_dim,
        variance_reduction=agent.variance_reduction,
        max_samples=int(agent.max_samples),
    )
    policy = SoftmaxPolicy(theta, tau=float(agent.tau), reject_terminal=bool(agent.reject_terminal_actions))
    return NaturalActorCritic(
        policy=policy,
        critic=critic,
        rstream=rstream,
        state_dim=s_dim,
        learning=bool(agent.learning),
        variance_reduction=agent.variance_reduction,
    )


def initial_theta(*, agent: AgentConfig, columns: int) -> np.ndarray:
    n = state_action_dim(int(columns))
    if agent.theta is None:
        return np.zeros((n,), dtype=np.float64)
    theta = np.asarray(agent.theta, dtype=np.float64)
    if theta.shape != (n,):
        raise ValueError(f"agent.theta must have {n} entries for {columns} columns (got {theta.shape[0]})")
    return theta


def run_experiment(cfg: Any, *, use_rich: bool = True) -> ExperimentResult:
    """
    Alternate critic evaluation and policy improvement.

    Each iteration plays `train.episodes_per_update` episodes with a fixed
    theta, every episode with a fresh controller and critic. The exported
    statistics are merged, the natural gradient is solved from them and
    theta moves along it. With agent.learning disabled the episodes are
    only played and theta stays put.
    """
    exp_cfg = cfg if isinstance(cfg, ExperimentConfig) else ExperimentConfig.model_validate(to_plain_dict(cfg))
    run_cfg = exp_cfg.run
    board_cfg = exp_cfg.board
    agent_cfg = exp_cfg.agent
    train_cfg = exp_cfg.train

    t0 = time.perf_counter()
    run_dir: Optional[Path] = None
    if bool(run_cfg.save_stats):
        run_dir = pick_run_dir(Path(run_cfg.out_root), str(run_cfg.name))
        run_dir.mkdir(parents=True, exist_ok=True)

    logger = setup_logger(
        name="tetris_nac.train",
        use_rich=use_rich,
        level=str(exp_cfg.log_level),
        log_file=None if run_dir is None else run_dir / "train.log",
    )

    if run_dir is not None:
        save_experiment_config(exp_cfg, run_dir / "config.yaml")
        logger.info("[run] dir: %s", run_dir)
        logger.info(f"[timing] paths+snapshot: {time.perf_counter() - t0:.2f}s")

    env_stream = BufferedRandomStream(role_seed(base_seed=int(run_cfg.seed), role="env"))
    agent_stream = BufferedRandomStream(role_seed(base_seed=int(run_cfg.seed), role="agent"))
    simulator = make_simulator(board=board_cfg, rstream=env_stream)
    theta = initial_theta(agent=agent_cfg, columns=int(board_cfg.columns))
    s_dim = int(simulator.state_dim)

    logger.info(
        "[nac] board=%dx%d holes=%s critic=%s gamma=%.3f lambda=%.3f tau=%.3f vr=%s",
        int(board_cfg.rows),
        int(board_cfg.columns),
        str(board_cfg.hole_strategy),
        str(agent_cfg.critic),
        float(agent_cfg.gamma),
        float(agent_cfg.lam),
        float(agent_cfg.tau),
        str(agent_cfg.variance_reduction),
    )
    logger.info(
        "[nac] iterations=%d episodes/update=%d lr=%.4g ridge=%.1e learning=%s seed=%d",
        int(train_cfg.iterations),
        int(train_cfg.episodes_per_update),
        float(train_cfg.learning_rate),
        float(train_cfg.ridge),
        bool(agent_cfg.learning),
        int(run_cfg.seed),
    )

    returns: list[float] = []
    stats: Optional[CriticStats] = None
    total_episodes = int(train_cfg.iterations) * int(train_cfg.episodes_per_update)

    progress = Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(bar_width=None),
        MofNCompleteColumn(),
        TextColumn("["),
        TimeElapsedColumn(),
        TextColumn("<"),
        TimeRemainingColumn(),
        TextColumn("]"),
        TextColumn("{task.fields[tail]}"),
        disable=not use_rich,
    )
    with progress:
        task = progress.add_task("episodes", total=total_episodes, tail="")
        for it in range(int(train_cfg.iterations)):
            stats = None
            batch: list[float] = []
            for _ in range(int(train_cfg.episodes_per_update)):
                agent = make_agent(agent=agent_cfg, theta=theta, rstream=agent_stream, columns=int(board_cfg.columns))
                result = run_episode(simulator, agent, exp_cfg.stop)
                batch.append(float(result.total_reward))
                stats = merge_stats(stats, agent.export())
                progress.update(task, advance=1, tail=f"return={result.total_reward:.0f}")

            returns.extend(batch)
            mean_ret = float(np.mean(batch))

            if bool(agent_cfg.learning) and stats is not None:
                grad = natural_gradient(
                    stats,
                    state_dim=s_dim,
                    gamma=float(agent_cfg.gamma),
                    lam=float(agent_cfg.lam),
                    ridge=float(train_cfg.ridge),
                    lspe_iterations=int(train_cfg.lspe_iterations),
                )
                theta = update_theta(theta, grad, learning_rate=float(train_cfg.learning_rate))
                logger.info(
                    "[nac] iter=%d mean_return=%.2f max_return=%.0f |g|=%.4g |theta|=%.4g",
                    it + 1,
                    mean_ret,
                    float(np.max(batch)),
                    float(np.linalg.norm(grad)),
                    float(np.linalg.norm(theta)),
                )
            else:
                logger.info("[nac] iter=%d mean_return=%.2f (no update)", it + 1, mean_ret)
            logger.debug("[nac] theta=%s", np.array2string(theta, precision=4))

    if run_dir is not None:
        path = save_run_artifacts(
            path=run_dir / "nac.zip",
            meta={
                "created_at_utc": utc_now_iso(),
                "iterations": int(train_cfg.iterations),
                "episodes": len(returns),
                "theta": theta,
            },
            cfg=exp_cfg.model_dump(mode="json"),
            returns=returns,
            stats=stats,
        )
        logger.info("[run] artifacts: %s", path)

    logger.info("[done]")
    return ExperimentResult(theta=theta, returns=returns, stats=stats, run_dir=run_dir)


__all__ = ["ExperimentResult", "initial_theta", "make_agent", "make_simulator", "run_experiment"]
