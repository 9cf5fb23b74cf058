"""
Fin Core - The heart of the game.

This module provides the core game simulation, Gymnasium environment wrapper,
and all supporting systems (physics, obstacle RNG, scoring, progression).

Main exports:
- CoreGame: Game loop and state machine
- FlappyEnv: Gymnasium environment for agent training
- GameConfig: Configuration loaded from game_config.yaml
- Difficulty / Cosmetic: Tier and skin enums
- MemoryStore / JsonFileStore: Persistence backends
"""

from flappy_fin.fin_core.config_loader import (
    ConfigurationError,
    Cosmetic,
    Difficulty,
    GameConfig,
    load_config,
)
from flappy_fin.fin_core.events import InputEvent, InputType
from flappy_fin.fin_core.game import CoreGame, TickResult
from flappy_fin.fin_core.persistence import JsonFileStore, KeyValueStore, MemoryStore
from flappy_fin.fin_core.progression import ProgressionTracker, UnlockState
from flappy_fin.fin_core.session import RunState
from flappy_fin.fin_core.state_snapshot import GameSnapshot
from flappy_fin.fin_core.env_gym import FlappyEnv

__all__ = [
    "ConfigurationError",
    "Cosmetic",
    "Difficulty",
    "GameConfig",
    "load_config",
    "InputEvent",
    "InputType",
    "CoreGame",
    "TickResult",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "ProgressionTracker",
    "UnlockState",
    "RunState",
    "GameSnapshot",
    "FlappyEnv",
]
