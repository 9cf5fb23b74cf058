"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to Flappy Fin.
Reward is always 0.0 - consumers compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from flappy_fin.fin_core.config_loader import Difficulty, GameConfig, load_config
from flappy_fin.fin_core.game import CoreGame
from flappy_fin.fin_core.persistence import KeyValueStore
from flappy_fin.fin_core.session import RunState
from flappy_fin.fin_core.state_snapshot import GameSnapshot

ACTION_IDLE = 0
ACTION_JUMP = 1


class FlappyEnv(gym.Env):
    """
    Flappy Fin as a Gymnasium environment.

    Action Space:
        Discrete(2): 0 = do nothing, 1 = jump.
        The first jump after reset starts the run.

    Observation Space:
        Dict with avatar state, run state and padded obstacle arrays.

    Reward:
        Always 0.0. Use info["delta_score"] or info["score"].

    Termination:
        terminated when the run ends, truncated after max_episode_ticks steps.
    """

    metadata = {
        "render_modes": ["human", "rgb_array"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        difficulty: Optional[Difficulty] = None,
        store: Optional[KeyValueStore] = None,
        render_mode: Optional[str] = None,
    ):
        """
        Initialize Flappy Fin environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Already-loaded configuration; takes precedence over config_path.
            difficulty: Tier to play. Selected only if unlocked in the store.
            store: Persistence backend. In-memory if None.
            render_mode: "human" for window, "rgb_array" for numpy, None for headless.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self.render_mode = render_mode

        self._game = CoreGame(config=self._config, store=store)
        if difficulty is not None:
            self._game.select_difficulty(difficulty)

        self._max_obstacles = self._config.observation.max_obstacles
        self._max_ticks = self._config.observation.max_episode_ticks
        self._steps = 0

        self._renderer = None

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        n = self._max_obstacles
        return spaces.Dict({
            "avatar_y": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "avatar_vy": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "run_state": spaces.Discrete(len(RunState)),
            "next_dx": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "next_gap_center_dy": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "obs_x": spaces.Box(low=-np.inf, high=np.inf, shape=(n,), dtype=np.float32),
            "obs_gap_top": spaces.Box(low=-np.inf, high=np.inf, shape=(n,), dtype=np.float32),
            "obs_gap_bottom": spaces.Box(low=-np.inf, high=np.inf, shape=(n,), dtype=np.float32),
            "obs_mask": spaces.MultiBinary(n),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.reset(seed=seed)
        self._steps = 0

        info = self._game.get_info()
        info["delta_score"] = 0
        return self._snapshot_to_obs(snapshot), info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step: optional jump, then one tick.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())

        action = int(action)
        if action not in (ACTION_IDLE, ACTION_JUMP):
            raise ValueError(f"Invalid action {action}; expected {ACTION_IDLE} or {ACTION_JUMP}")

        if action == ACTION_JUMP:
            self._game.jump()
        result = self._game.tick()
        self._steps += 1

        truncated = not result.terminated and self._steps >= self._max_ticks

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["new_best"] = result.new_best

        return self._snapshot_to_obs(result.snapshot), 0.0, result.terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        return snapshot.to_obs_dict(self._max_obstacles)

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode is None:
            return None

        if self._renderer is None:
            from flappy_fin.fin_core.render_pygame import PygameRenderer
            self._renderer = PygameRenderer(self._config)

        snapshot = self._game.snapshot()
        if self.render_mode == "rgb_array":
            return self._renderer.render(snapshot)
        self._renderer.render_to_screen(snapshot)
        return None

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
