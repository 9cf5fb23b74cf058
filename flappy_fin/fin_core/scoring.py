"""
Scoring System
==============

Counts obstacles passed during a run.
"""

from __future__ import annotations

from dataclasses import dataclass

from flappy_fin.fin_core.session import GameSession, Obstacle


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    total: int
    obstacle_x: float

    def __repr__(self) -> str:
        return f"ScoreEvent(+{self.points} -> {self.total})"


class ScoreTracker:
    """
    Applies score for passed obstacles.

    One point per obstacle. The obstacle's scored flag is set by the physics
    pass check, so each obstacle reaches here at most once.
    """

    POINTS_PER_OBSTACLE = 1

    def apply_pass(self, session: GameSession, obstacle: Obstacle) -> ScoreEvent:
        """
        Add score for one passed obstacle.

        Args:
            session: The running session; its score is incremented.
            obstacle: The obstacle that was just passed.

        Returns:
            ScoreEvent describing the points awarded.
        """
        session.score += self.POINTS_PER_OBSTACLE
        return ScoreEvent(
            points=self.POINTS_PER_OBSTACLE,
            total=session.score,
            obstacle_x=obstacle.x
        )
