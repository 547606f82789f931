# src/tetris_nac/game/tetris.py
"""
Single-piece Tetris simulator producing features for a linear softmax policy.

Board conventions:
  - grid[row, col] is True for a filled cell, row 0 is the top.
  - heightmap[col] is the row of the topmost filled cell, or `rows` if the
    column is empty. heightmap_min is its exact minimum.

Terminal features:
  - The observation of a terminal state is a zero vector except for the bias
    slot, which holds `terminal_state_bias`.
  - The features of an action that leads to termination are a zero vector
    except for the bias slot (`terminal_action_bias`) and the immediate
    reward slot, which holds the rows the trial drop cleared (always 0 since
    an overflowing drop leaves the board untouched).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from tetris_nac.game.holes import HoleCounter, hole_counter
from tetris_nac.game.pieces import PieceCatalog, classic_catalog
from tetris_nac.game.types import StepData, state_action_dim, state_dim
from tetris_nac.random_stream import RandomStream

NON_TERMINAL_BIAS: float = 1.0


@dataclass(frozen=True)
class BoardSnapshot:
    grid: np.ndarray
    heightmap: np.ndarray
    heightmap_min: int


class TetrisSimulator:
    def __init__(
        self,
        *,
        rstream: RandomStream,
        rows: int = 20,
        columns: int = 10,
        hole_strategy: str = "under_topline",
        terminal_state_bias: float = 0.0,
        terminal_action_bias: float = 1.0,
        observation_log_length: int = 0,
        catalog: Optional[PieceCatalog] = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else classic_catalog()
        self.rows = int(rows)
        self.columns = int(columns)
        if self.rows < self.catalog.max_height() or self.columns < self.catalog.max_width():
            raise ValueError(
                f"board {self.rows}x{self.columns} is smaller than the largest piece "
                f"({self.catalog.max_height()}x{self.catalog.max_width()})"
            )
        if int(observation_log_length) < 0:
            raise ValueError("observation_log_length must be >= 0")

        self.rstream = rstream
        self.hole_strategy = str(hole_strategy)
        self._count_holes: HoleCounter = hole_counter(hole_strategy)
        self.terminal_state_bias = float(terminal_state_bias)
        self.terminal_action_bias = float(terminal_action_bias)

        self.state_dim = state_dim(self.columns)
        self.state_action_dim = state_action_dim(self.columns)
        self._max_height_idx = 2 * self.columns - 1
        self._holes_idx = self._max_height_idx + 1
        self._bias_idx = self._max_height_idx + 2
        self._reward_idx = self._max_height_idx + 3

        self.grid = np.zeros((self.rows, self.columns), dtype=bool)
        self.heightmap = np.full((self.columns,), self.rows, dtype=np.int64)
        self.heightmap_min = self.rows
        self.falling_piece = 0
        self.cleared_rows = 0
        self.total_cleared_rows = 0
        self.terminal = False
        self.episode = 0

        self.observation_log = np.zeros((int(observation_log_length), self.state_dim), dtype=np.float64)
        self.observation_log_len = 0

        self._step_data: Optional[StepData] = None

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    @property
    def step_data(self) -> StepData:
        if self._step_data is None:
            raise RuntimeError("reset() must be called before the first step")
        return self._step_data

    @property
    def total_reward(self) -> float:
        return float(self.total_cleared_rows)

    @property
    def observation_log_length(self) -> int:
        return int(self.observation_log.shape[0])

    def reset(self) -> StepData:
        self.grid[:, :] = False
        self.heightmap[:] = self.rows
        self.heightmap_min = self.rows
        self.falling_piece = self._draw_piece()
        self.cleared_rows = 0
        self.total_cleared_rows = 0
        self.terminal = False
        self.observation_log_len = 0
        self._step_data = self._generate_step_data()
        self.episode += 1
        return self._step_data

    def step(self, action: int) -> float:
        if self._step_data is None:
            raise RuntimeError("reset() must be called before the first step")
        if self.terminal:
            raise RuntimeError("cannot step a terminal state; call reset()")
        if not 0 <= int(action) < self._step_data.action_count:
            raise ValueError(f"action {action} out of range [0, {self._step_data.action_count})")

        self._log_observation()
        self.cleared_rows = self._drop_piece(int(action))
        self.total_cleared_rows += self.cleared_rows
        self.falling_piece = self._draw_piece()
        self._step_data = self._generate_step_data()
        return float(self.cleared_rows)

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            grid=self.grid.copy(),
            heightmap=self.heightmap.copy(),
            heightmap_min=int(self.heightmap_min),
        )

    def restore(self, snap: BoardSnapshot) -> None:
        self.grid[:, :] = snap.grid
        self.heightmap[:] = snap.heightmap
        self.heightmap_min = int(snap.heightmap_min)

    def action_count(self) -> int:
        return self.catalog.action_count(self.falling_piece, self.columns)

    def logged_observations(self) -> np.ndarray:
        return self.observation_log[: self.observation_log_len].copy()

    def compute_observation(self) -> np.ndarray:
        obs = np.zeros((self.state_dim,), dtype=np.float64)
        if self.terminal:
            obs[self._bias_idx] = self.terminal_state_bias
            return obs

        c = self.columns
        heights = self.rows - self.heightmap
        obs[:c] = heights
        obs[c : 2 * c - 1] = np.abs(np.diff(heights))
        obs[self._max_height_idx] = self.rows - self.heightmap_min
        obs[self._holes_idx] = self._count_holes(self.grid, self.heightmap, self.heightmap_min)
        obs[self._bias_idx] = NON_TERMINAL_BIAS
        return obs

    def compute_actions(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Features of every legal action of the falling piece, obtained by trial
        drops on the live board with a snapshot restored after each trial.
        """
        if self.terminal:
            return (
                np.zeros((0, self.state_action_dim), dtype=np.float64),
                np.zeros((0,), dtype=bool),
            )

        n = self.action_count()
        actions = np.zeros((n, self.state_action_dim), dtype=np.float64)
        is_terminal = np.zeros((n,), dtype=bool)

        snap = self.snapshot()
        for a in range(n):
            cleared = self._drop_piece(a)
            actions[a, : self.state_dim] = self.compute_observation()
            if self.terminal:
                actions[a, self._bias_idx] = self.terminal_action_bias
            actions[a, self._reward_idx] = cleared
            is_terminal[a] = self.terminal

            self.restore(snap)
            self.terminal = False
        return actions, is_terminal

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    def _draw_piece(self) -> int:
        n = self.catalog.num_pieces
        return min(int(self.rstream.next() * n), n - 1)

    def _generate_step_data(self) -> StepData:
        observation = self.compute_observation()
        actions, is_terminal = self.compute_actions()
        for arr in (observation, actions, is_terminal):
            arr.setflags(write=False)
        return StepData(
            transition_reward=float(self.cleared_rows),
            observation=observation,
            actions=actions,
            is_action_terminal=is_terminal,
            action_count=int(actions.shape[0]),
        )

    def _drop_piece(self, action: int) -> int:
        """
        Hard-drop the falling piece. Updates grid, heightmap, heightmap_min and
        the terminal flag. Returns the number of cleared rows.
        """
        rot, col = self.catalog.decode_action(self.falling_piece, action, self.columns)
        shape = self.catalog.shape(self.falling_piece, rot)
        span = slice(col, col + shape.width)

        # topmost row of the piece, resting on the highest obstruction
        row = int(np.min(self.heightmap[span] - np.asarray(shape.bottom_offsets)))
        if row < 0:
            self.terminal = True
            return 0

        self.grid[row : row + shape.height, span] |= shape.mask
        self.heightmap[span] = row + np.asarray(shape.top_offsets)
        self.heightmap_min = min(self.heightmap_min, int(self.heightmap[span].min()))

        # clear full rows inside the piece's rows, compacting the region as we go
        filled = 0
        for r in range(row, row + shape.height):
            if self.grid[r].all():
                filled += 1
                self._shift_rows(row, r - 1, 1)

        if filled > 0:
            self._shift_rows(self.heightmap_min, row - 1, filled)
            self.heightmap_min += filled
            self._recompute_heightmap()

        return filled

    def _shift_rows(self, first: int, last: int, shift: int) -> None:
        """Move rows first..last down by `shift` and clear rows first..first+shift-1."""
        if last >= first:
            self.grid[first + shift : last + shift + 1] = self.grid[first : last + 1].copy()
        self.grid[first : first + shift] = False

    def _recompute_heightmap(self) -> None:
        top = int(self.heightmap_min)
        if top >= self.rows:
            self.heightmap[:] = self.rows
            self.heightmap_min = self.rows
            return
        region = self.grid[top:]
        any_filled = region.any(axis=0)
        first = np.argmax(region, axis=0)
        self.heightmap[:] = np.where(any_filled, top + first, self.rows)
        self.heightmap_min = int(self.heightmap.min())

    def _log_observation(self) -> None:
        if self.observation_log_len < self.observation_log.shape[0]:
            self.observation_log[self.observation_log_len] = self.step_data.observation
            self.observation_log_len += 1


__all__ = ["BoardSnapshot", "NON_TERMINAL_BIAS", "TetrisSimulator"]
