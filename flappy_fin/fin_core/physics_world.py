"""
Physics World
=============

Advances the avatar and the obstacle queue by one tick and answers overlap
queries. Integration is explicit Euler with per-tick constants; the game feel
depends on the exact values in game_config.yaml.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from flappy_fin.fin_core.config_loader import GameConfig, get_config
from flappy_fin.fin_core.rng import ObstacleGenerator
from flappy_fin.fin_core.session import Avatar, GameSession, Obstacle


class PhysicsWorld:
    """
    Stateless physics over a GameSession.

    Handles:
    - Gravity and jump impulses
    - Obstacle scrolling, FIFO eviction and refill
    - Pass detection for scoring
    - Obstacle and playfield-bounds collision tests
    """

    # Queue length maintained during play
    MIN_OBSTACLES = 2

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize physics world.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._gravity = config.physics.gravity
        self._jump_impulse = config.physics.jump_impulse
        self._avatar_x = config.avatar.x
        self._hit_radius = config.avatar.hit_radius
        self._board_width = config.board.width
        self._board_height = config.board.height
        self._obstacle_width = config.obstacles.width
        self._spacing = config.obstacles.spacing
        self._speed = config.obstacles.speed

    @property
    def board_width(self) -> float:
        return self._board_width

    @property
    def board_height(self) -> float:
        return self._board_height

    @property
    def avatar_x(self) -> float:
        return self._avatar_x

    @property
    def hit_radius(self) -> float:
        return self._hit_radius

    @property
    def obstacle_width(self) -> float:
        return self._obstacle_width

    def initial_positions(self) -> Tuple[float, float]:
        """Horizontal positions of the two obstacles placed on reset."""
        first = self._board_width + self._config.obstacles.initial_offset
        return (first, first + self._spacing)

    def spawn_avatar(self) -> Avatar:
        """Fresh avatar at the vertical centre, at rest."""
        return Avatar(y=self._board_height / 2, vy=0.0)

    def apply_jump(self, avatar: Avatar) -> None:
        """Overwrite vertical velocity with the jump impulse."""
        avatar.vy = self._jump_impulse

    def integrate_avatar(self, avatar: Avatar) -> None:
        """velocity += gravity, then position += velocity."""
        avatar.vy += self._gravity
        avatar.y += avatar.vy

    def advance_obstacles(self, session: GameSession) -> None:
        """Scroll every obstacle left by the configured speed."""
        for obstacle in session.obstacles:
            obstacle.x -= self._speed

    def evict_offscreen(self, session: GameSession) -> Optional[Obstacle]:
        """
        Evict the leftmost obstacle once its right edge has passed x = 0.

        Returns:
            The evicted obstacle, or None.
        """
        if session.obstacles and session.obstacles[0].right_edge(self._obstacle_width) < 0:
            return session.obstacles.popleft()
        return None

    def refill(
        self,
        session: GameSession,
        generator: ObstacleGenerator,
        gap_size: float
    ) -> Optional[Obstacle]:
        """
        Append one obstacle a spacing beyond the rightmost one if the queue is short.

        Returns:
            The new obstacle, or None if the queue was already full.
        """
        if len(session.obstacles) >= self.MIN_OBSTACLES:
            return None
        x = session.obstacles[-1].x + self._spacing
        obstacle = generator.generate(x, gap_size, self._board_height)
        session.obstacles.append(obstacle)
        return obstacle

    def collect_passed(self, session: GameSession) -> List[Obstacle]:
        """
        Mark obstacles whose right edge has passed the avatar as scored.

        Each obstacle is returned at most once over its lifetime.
        """
        passed = []
        for obstacle in session.obstacles:
            if not obstacle.scored and obstacle.right_edge(self._obstacle_width) < self._avatar_x:
                obstacle.scored = True
                passed.append(obstacle)
        return passed

    def collides(self, avatar: Avatar, obstacle: Obstacle) -> bool:
        """
        Test the avatar hitbox against one obstacle.

        Collision requires horizontal overlap and the hitbox poking above the
        gap top or below the gap bottom.
        """
        left = self._avatar_x - self._hit_radius
        right = self._avatar_x + self._hit_radius
        if right > obstacle.x and left < obstacle.right_edge(self._obstacle_width):
            if avatar.top(self._hit_radius) < obstacle.gap_top:
                return True
            if avatar.bottom(self._hit_radius) > obstacle.gap_bottom:
                return True
        return False

    def any_collision(self, session: GameSession) -> bool:
        return any(self.collides(session.avatar, o) for o in session.obstacles)

    def out_of_bounds(self, avatar: Avatar) -> bool:
        """True if the hitbox leaves the top or bottom of the playfield."""
        return (
            avatar.top(self._hit_radius) < 0
            or avatar.bottom(self._hit_radius) > self._board_height
        )
