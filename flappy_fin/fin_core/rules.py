"""
Game Rules
==========

Handles termination conditions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flappy_fin.fin_core.config_loader import GameConfig, get_config
from flappy_fin.fin_core.physics_world import PhysicsWorld
from flappy_fin.fin_core.session import GameSession


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, reason)


class TerminationRules:
    """
    Handles run termination conditions.

    - Collision: hitbox overlaps a pipe outside its gap
    - Out of bounds: hitbox leaves the top or bottom of the playfield
    """

    COLLISION = "collision"
    OUT_OF_BOUNDS = "out_of_bounds"

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        physics: Optional[PhysicsWorld] = None
    ):
        """
        Initialize termination rules.

        Args:
            config: Game configuration. Uses default if None.
            physics: Physics world for overlap queries. Built from config if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._physics = physics if physics is not None else PhysicsWorld(config)

    def check_termination(self, session: GameSession) -> TerminationResult:
        """
        Check all termination conditions.

        Args:
            session: Session after this tick's movement.

        Returns:
            TerminationResult indicating run state.
        """
        if self._physics.any_collision(session):
            return TerminationResult.game_over(self.COLLISION)

        if self._physics.out_of_bounds(session.avatar):
            return TerminationResult.game_over(self.OUT_OF_BOUNDS)

        return TerminationResult.none()
