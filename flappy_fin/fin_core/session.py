"""
Game Session
============

Mutable state of a single run: the avatar, the obstacle queue, the run state
and the run score. Every core component receives the session explicitly.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque

from flappy_fin.fin_core.config_loader import Difficulty


class RunState(str, Enum):
    """Lifecycle of a run."""
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    OVER = "over"


@dataclass
class Avatar:
    """The fin. Horizontal position is fixed by config; only y moves."""
    y: float
    vy: float = 0.0

    def top(self, radius: float) -> float:
        return self.y - radius

    def bottom(self, radius: float) -> float:
        return self.y + radius


@dataclass
class Obstacle:
    """
    A pipe pair with an open gap.

    gap_bottom - gap_top always equals the gap size of the tier that
    generated it.
    """
    x: float
    gap_top: float
    gap_bottom: float
    scored: bool = False

    @property
    def gap(self) -> float:
        return self.gap_bottom - self.gap_top

    def right_edge(self, width: float) -> float:
        return self.x + width


@dataclass
class GameSession:
    """Everything that changes while a run is being played."""
    avatar: Avatar
    difficulty: Difficulty
    obstacles: Deque[Obstacle] = field(default_factory=deque)
    run_state: RunState = RunState.NOT_STARTED
    score: int = 0
    ticks: int = 0

    @property
    def is_playing(self) -> bool:
        return self.run_state == RunState.PLAYING

    @property
    def is_over(self) -> bool:
        return self.run_state == RunState.OVER
