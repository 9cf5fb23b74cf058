"""
State Snapshot
==============

Read-only view of a session for the presentation layer, plus packing into
fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from flappy_fin.fin_core.config_loader import Cosmetic, Difficulty, GameConfig, get_config
from flappy_fin.fin_core.progression import ProgressionTracker, UnlockState
from flappy_fin.fin_core.session import GameSession, RunState

RUN_STATE_IDS: Dict[RunState, int] = {state: i for i, state in enumerate(RunState)}


@dataclass(frozen=True)
class ObstacleView:
    """Immutable copy of an obstacle."""
    x: float
    gap_top: float
    gap_bottom: float
    scored: bool


@dataclass(frozen=True)
class GameSnapshot:
    """
    Complete per-frame game state.

    Holds copies only; mutating the game afterwards never changes a snapshot.
    """
    # Run state
    tick: int
    run_state: RunState
    score: int

    # Difficulty and progression
    difficulty: Difficulty
    difficulty_name: str
    gap: float
    best_score: int
    unlocks: UnlockState
    selected_cosmetic: Cosmetic

    # Avatar
    avatar_x: float
    avatar_y: float
    avatar_vy: float
    visual_radius: float
    hit_radius: float

    # Obstacles, left to right
    obstacles: Tuple[ObstacleView, ...]
    obstacle_width: float

    # Board info (for normalization)
    board_width: float
    board_height: float

    @property
    def is_over(self) -> bool:
        return self.run_state == RunState.OVER

    @property
    def next_obstacle(self) -> Optional[ObstacleView]:
        """First obstacle the avatar has not yet passed."""
        for obstacle in self.obstacles:
            if not obstacle.scored:
                return obstacle
        return None

    def to_obs_dict(self, max_obstacles: int) -> Dict[str, np.ndarray]:
        """
        Convert to Gymnasium observation dictionary.

        Args:
            max_obstacles: Length of the padded obstacle arrays.
        """
        obs_x = np.zeros(max_obstacles, dtype=np.float32)
        obs_gap_top = np.zeros(max_obstacles, dtype=np.float32)
        obs_gap_bottom = np.zeros(max_obstacles, dtype=np.float32)
        obs_mask = np.zeros(max_obstacles, dtype=np.int8)

        for i, obstacle in enumerate(self.obstacles[:max_obstacles]):
            obs_x[i] = obstacle.x
            obs_gap_top[i] = obstacle.gap_top
            obs_gap_bottom[i] = obstacle.gap_bottom
            obs_mask[i] = 1

        # Relative features for the obstacle ahead
        upcoming = self.next_obstacle
        if upcoming is not None:
            next_dx = upcoming.x - self.avatar_x
            next_gap_center_dy = (upcoming.gap_top + upcoming.gap_bottom) / 2.0 - self.avatar_y
        else:
            next_dx = self.board_width
            next_gap_center_dy = 0.0

        return {
            "avatar_y": np.array(self.avatar_y, dtype=np.float32),
            "avatar_vy": np.array(self.avatar_vy, dtype=np.float32),
            "score": np.array(self.score, dtype=np.int64),
            "run_state": RUN_STATE_IDS[self.run_state],
            "next_dx": np.array(next_dx, dtype=np.float32),
            "next_gap_center_dy": np.array(next_gap_center_dy, dtype=np.float32),
            "obs_x": obs_x,
            "obs_gap_top": obs_gap_top,
            "obs_gap_bottom": obs_gap_bottom,
            "obs_mask": obs_mask,
        }


class SnapshotBuilder:
    """Builds game state snapshots."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._difficulty_map = config.difficulty_map

    def build(
        self,
        session: GameSession,
        progression: ProgressionTracker
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        tier = self._difficulty_map[session.difficulty]
        obstacles = tuple(
            ObstacleView(o.x, o.gap_top, o.gap_bottom, o.scored)
            for o in session.obstacles
        )
        return GameSnapshot(
            tick=session.ticks,
            run_state=session.run_state,
            score=session.score,
            difficulty=session.difficulty,
            difficulty_name=tier.name,
            gap=tier.gap,
            best_score=progression.best_score(session.difficulty),
            unlocks=progression.unlock_state(),
            selected_cosmetic=progression.selected_cosmetic,
            avatar_x=self._config.avatar.x,
            avatar_y=session.avatar.y,
            avatar_vy=session.avatar.vy,
            visual_radius=self._config.avatar.visual_radius,
            hit_radius=self._config.avatar.hit_radius,
            obstacles=obstacles,
            obstacle_width=self._config.obstacles.width,
            board_width=self._config.board.width,
            board_height=self._config.board.height
        )
