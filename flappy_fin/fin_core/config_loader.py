"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml


class ConfigurationError(ValueError):
    """Raised when game_config.yaml describes an unplayable game."""


class Difficulty(str, Enum):
    """Difficulty tiers, in unlock-chain order."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXTREME = "extreme"


class Cosmetic(str, Enum):
    """Selectable fin skins."""
    SCHOOL_FIN = "schoolfin"
    POOL_FIN = "poolfin"


@dataclass(frozen=True)
class BoardConfig:
    """Playfield extents."""
    width: int
    height: int


@dataclass(frozen=True)
class PhysicsConfig:
    """Per-tick integration constants."""
    gravity: float       # Added to vertical velocity every tick
    jump_impulse: float  # Velocity set on jump (negative is upward)


@dataclass(frozen=True)
class AvatarConfig:
    """Fin geometry."""
    x: float              # Fixed horizontal position
    visual_radius: float
    hit_radius: float     # Radius used for collision tests


@dataclass(frozen=True)
class ObstacleConfig:
    """Pipe geometry and scrolling."""
    width: float
    spacing: float        # Horizontal distance between consecutive pipes
    speed: float          # Pixels scrolled left per tick
    corner_radius: float
    top_margin: float     # Minimum gap top
    bottom_margin: float  # Minimum distance from gap bottom to floor
    initial_offset: float


@dataclass(frozen=True)
class DifficultyConfig:
    """Configuration for a single difficulty tier."""
    tier: Difficulty
    name: str
    gap: float


@dataclass(frozen=True)
class CosmeticConfig:
    """Configuration for a single fin skin."""
    cosmetic: Cosmetic
    name: str
    image: str
    gated: bool


@dataclass(frozen=True)
class ProgressionConfig:
    """Unlock gate parameters."""
    enabled: bool
    unlock_threshold: int
    default_difficulty: Difficulty


@dataclass(frozen=True)
class PersistenceConfig:
    """Save-data location and key naming."""
    key_prefix: str
    save_path: str


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_obstacles: int
    max_episode_ticks: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    physics: PhysicsConfig
    avatar: AvatarConfig
    obstacles: ObstacleConfig
    difficulties: Tuple[DifficultyConfig, ...]
    cosmetics: Tuple[CosmeticConfig, ...]
    progression: ProgressionConfig
    persistence: PersistenceConfig
    observation: ObservationConfig

    @property
    def difficulty_map(self) -> Dict[Difficulty, DifficultyConfig]:
        """Tier configs keyed by tier."""
        return {d.tier: d for d in self.difficulties}

    @property
    def cosmetic_map(self) -> Dict[Cosmetic, CosmeticConfig]:
        """Cosmetic configs keyed by cosmetic."""
        return {c.cosmetic: c for c in self.cosmetics}

    def get_difficulty(self, tier: Difficulty) -> DifficultyConfig:
        """Get tier config by tier."""
        for difficulty in self.difficulties:
            if difficulty.tier == tier:
                return difficulty
        raise ValueError(f"Invalid difficulty: {tier}")

    def get_cosmetic(self, cosmetic: Cosmetic) -> CosmeticConfig:
        """Get cosmetic config by cosmetic."""
        for entry in self.cosmetics:
            if entry.cosmetic == cosmetic:
                return entry
        raise ValueError(f"Invalid cosmetic: {cosmetic}")


def _parse_enum(enum_cls, value, section: str):
    try:
        return enum_cls(str(value))
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"Unknown {section} key '{value}' (expected one of: {valid})")


def _optional_section(raw: dict, name: str) -> dict:
    """An optional top-level mapping; absent or empty sections read as {}."""
    data = raw.get(name)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Section '{name}' must be a mapping, got {type(data).__name__}")
    return data


def _parse_bool(value, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be true or false, got {value!r}")
    return value


def _parse_difficulty(data: dict) -> DifficultyConfig:
    """Parse a single difficulty tier from YAML."""
    return DifficultyConfig(
        tier=_parse_enum(Difficulty, data["key"], "difficulty"),
        name=str(data["name"]),
        gap=float(data["gap"])
    )


def _parse_cosmetic(data: dict) -> CosmeticConfig:
    """Parse a single cosmetic from YAML."""
    return CosmeticConfig(
        cosmetic=_parse_enum(Cosmetic, data["key"], "cosmetic"),
        name=str(data["name"]),
        image=str(data.get("image", "")),
        gated=_parse_bool(data.get("gated", False), "gated")
    )


def _check_exhaustive(keys: List, enum_cls, section: str) -> None:
    seen = set()
    for key in keys:
        if key in seen:
            raise ConfigurationError(f"Duplicate {section} entry: '{key.value}'")
        seen.add(key)
    missing = [member.value for member in enum_cls if member not in seen]
    if missing:
        raise ConfigurationError(f"Missing {section} entries: {', '.join(missing)}")


def validate_config(config: GameConfig) -> None:
    """
    Validate configuration consistency.

    Raises:
        ConfigurationError: If the configuration cannot produce a playable game.
    """
    board = config.board
    if board.width <= 0 or board.height <= 0:
        raise ConfigurationError(
            f"Board extents must be positive, got {board.width}x{board.height}"
        )

    avatar = config.avatar
    if avatar.visual_radius <= 0 or avatar.hit_radius <= 0:
        raise ConfigurationError(
            f"Avatar radii must be positive, got visual={avatar.visual_radius} "
            f"hit={avatar.hit_radius}"
        )
    if not 0 <= avatar.x <= board.width:
        raise ConfigurationError(f"Avatar x ({avatar.x}) lies outside the board")
    if 2 * avatar.hit_radius >= board.height:
        raise ConfigurationError("Avatar hitbox does not fit on the board")

    obstacles = config.obstacles
    if obstacles.width <= 0:
        raise ConfigurationError(f"Obstacle width must be positive, got {obstacles.width}")
    if obstacles.speed <= 0:
        raise ConfigurationError(f"Obstacle speed must be positive, got {obstacles.speed}")
    if obstacles.spacing <= 0:
        raise ConfigurationError(f"Obstacle spacing must be positive, got {obstacles.spacing}")
    if obstacles.top_margin < 0 or obstacles.bottom_margin < 0:
        raise ConfigurationError("Obstacle margins must not be negative")

    # Every tier exactly once, in any order
    _check_exhaustive([d.tier for d in config.difficulties], Difficulty, "difficulty")
    for difficulty in config.difficulties:
        if difficulty.gap <= 0:
            raise ConfigurationError(
                f"Gap for '{difficulty.tier.value}' must be positive, got {difficulty.gap}"
            )
        room = board.height - obstacles.top_margin - obstacles.bottom_margin
        if difficulty.gap > room:
            raise ConfigurationError(
                f"Gap for '{difficulty.tier.value}' ({difficulty.gap}) does not fit between "
                f"the margins of a {board.height}px board (at most {room})"
            )

    _check_exhaustive([c.cosmetic for c in config.cosmetics], Cosmetic, "cosmetic")
    if config.get_cosmetic(Cosmetic.SCHOOL_FIN).gated:
        raise ConfigurationError("The default cosmetic 'schoolfin' cannot be gated")

    if config.progression.unlock_threshold < 1:
        raise ConfigurationError(
            f"unlock_threshold must be at least 1, got {config.progression.unlock_threshold}"
        )

    if config.observation.max_obstacles < 2:
        raise ConfigurationError(
            f"observation.max_obstacles must be at least 2, got {config.observation.max_obstacles}"
        )
    if config.observation.max_episode_ticks < 1:
        raise ConfigurationError("observation.max_episode_ticks must be at least 1")


def _default_config_path() -> str:
    return os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "game_config.yaml"
    )


def parse_config(raw: dict) -> GameConfig:
    """
    Build and validate a GameConfig from an already-parsed YAML mapping.

    Raises:
        ConfigurationError: If a section is missing or validation fails.
    """
    if not isinstance(raw, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    try:
        board_data = raw["board"]
        board = BoardConfig(
            width=int(board_data["width"]),
            height=int(board_data["height"])
        )

        physics_data = raw["physics"]
        physics = PhysicsConfig(
            gravity=float(physics_data["gravity"]),
            jump_impulse=float(physics_data["jump_impulse"])
        )

        avatar_data = raw["avatar"]
        visual_radius = float(avatar_data["visual_radius"])
        avatar = AvatarConfig(
            x=float(avatar_data["x"]),
            visual_radius=visual_radius,
            hit_radius=float(avatar_data.get("hit_radius", visual_radius))
        )

        obstacle_data = raw["obstacles"]
        obstacles = ObstacleConfig(
            width=float(obstacle_data["width"]),
            spacing=float(obstacle_data["spacing"]),
            speed=float(obstacle_data["speed"]),
            corner_radius=float(obstacle_data.get("corner_radius", 12)),
            top_margin=float(obstacle_data.get("top_margin", 80)),
            bottom_margin=float(obstacle_data.get("bottom_margin", 120)),
            initial_offset=float(obstacle_data.get("initial_offset", 80))
        )

        difficulties = tuple(_parse_difficulty(d) for d in raw["difficulties"])
        cosmetics = tuple(_parse_cosmetic(c) for c in raw["cosmetics"])

        # Remaining sections are optional
        progression_data = _optional_section(raw, "progression")
        progression = ProgressionConfig(
            enabled=_parse_bool(progression_data.get("enabled", True), "enabled"),
            unlock_threshold=int(progression_data.get("unlock_threshold", 10)),
            default_difficulty=_parse_enum(
                Difficulty, progression_data.get("default_difficulty", "easy"), "difficulty"
            )
        )

        persistence_data = _optional_section(raw, "persistence")
        persistence = PersistenceConfig(
            key_prefix=str(persistence_data.get("key_prefix", "flappy-fin")),
            save_path=str(persistence_data.get("save_path", "~/.flappy_fin/save.json"))
        )

        obs_data = _optional_section(raw, "observation")
        observation = ObservationConfig(
            max_obstacles=int(obs_data.get("max_obstacles", 3)),
            max_episode_ticks=int(obs_data.get("max_episode_ticks", 20000))
        )
    except ConfigurationError:
        raise
    except KeyError as e:
        raise ConfigurationError(f"Missing required configuration key: {e.args[0]}") from e
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed configuration value: {e}") from e

    config = GameConfig(
        board=board,
        physics=physics,
        avatar=avatar,
        obstacles=obstacles,
        difficulties=difficulties,
        cosmetics=cosmetics,
        progression=progression,
        persistence=persistence,
        observation=observation
    )

    validate_config(config)
    return config


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If config validation fails.
    """
    if config_path is None:
        config_path = _default_config_path()

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    return parse_config(raw)


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
