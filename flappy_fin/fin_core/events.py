"""
Input Events
============

Discrete events the presentation layer sends into the core.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from flappy_fin.fin_core.config_loader import Cosmetic, Difficulty


class InputType(Enum):
    """Event types accepted by CoreGame.handle()."""
    TICK = auto()
    JUMP = auto()
    RESET = auto()
    SELECT_DIFFICULTY = auto()
    SELECT_COSMETIC = auto()


@dataclass(frozen=True)
class InputEvent:
    """
    Event data container.

    Attributes:
        type: Event type
        difficulty: Target tier for SELECT_DIFFICULTY
        cosmetic: Target skin for SELECT_COSMETIC
    """
    type: InputType
    difficulty: Optional[Difficulty] = None
    cosmetic: Optional[Cosmetic] = None

    def __post_init__(self) -> None:
        if self.type == InputType.SELECT_DIFFICULTY and self.difficulty is None:
            raise ValueError("SELECT_DIFFICULTY requires a difficulty")
        if self.type == InputType.SELECT_COSMETIC and self.cosmetic is None:
            raise ValueError("SELECT_COSMETIC requires a cosmetic")

    @classmethod
    def tick(cls) -> "InputEvent":
        return cls(InputType.TICK)

    @classmethod
    def jump(cls) -> "InputEvent":
        return cls(InputType.JUMP)

    @classmethod
    def reset(cls) -> "InputEvent":
        return cls(InputType.RESET)

    @classmethod
    def select_difficulty(cls, difficulty: Difficulty) -> "InputEvent":
        return cls(InputType.SELECT_DIFFICULTY, difficulty=difficulty)

    @classmethod
    def select_cosmetic(cls, cosmetic: Cosmetic) -> "InputEvent":
        return cls(InputType.SELECT_COSMETIC, cosmetic=cosmetic)
