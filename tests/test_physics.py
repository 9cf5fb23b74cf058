"""
Tests for avatar physics, obstacle queue and collision.
"""

from collections import deque
from dataclasses import replace

import pytest

from flappy_fin.fin_core.config_loader import Difficulty, load_config
from flappy_fin.fin_core.physics_world import PhysicsWorld
from flappy_fin.fin_core.rng import ObstacleGenerator
from flappy_fin.fin_core.rules import TerminationRules
from flappy_fin.fin_core.session import Avatar, GameSession, Obstacle, RunState


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def physics(config):
    return PhysicsWorld(config)


@pytest.fixture
def generator(config):
    return ObstacleGenerator(config, seed=42)


def make_session(*obstacles, y=320.0, vy=0.0):
    return GameSession(
        avatar=Avatar(y=y, vy=vy),
        difficulty=Difficulty.EASY,
        obstacles=deque(obstacles),
        run_state=RunState.PLAYING
    )


class TestAvatarIntegration:
    """Test gravity and jump."""

    def test_single_tick_from_centre(self, physics):
        """y=320, vy=0, gravity 0.38 -> vy=0.38, y=320.38."""
        avatar = Avatar(y=320.0, vy=0.0)

        physics.integrate_avatar(avatar)

        assert avatar.vy == pytest.approx(0.38)
        assert avatar.y == pytest.approx(320.38)

    def test_jump_overwrites_velocity(self, physics):
        """Jump sets velocity to the impulse regardless of prior velocity."""
        avatar = Avatar(y=320.0, vy=4.2)

        physics.apply_jump(avatar)
        assert avatar.vy == -6.0

        physics.apply_jump(avatar)
        assert avatar.vy == -6.0

    def test_velocity_accumulates_gravity(self, physics, config):
        """Without jumps velocity grows by exactly gravity each tick."""
        avatar = Avatar(y=100.0, vy=-6.0)
        gravity = config.physics.gravity

        previous = avatar.vy
        for _ in range(30):
            physics.integrate_avatar(avatar)
            assert avatar.vy - previous == pytest.approx(gravity)
            assert avatar.vy > previous
            previous = avatar.vy

    def test_spawn_avatar_centered(self, physics, config):
        """Fresh avatar starts at the vertical centre at rest."""
        avatar = physics.spawn_avatar()

        assert avatar.y == config.board.height / 2
        assert avatar.vy == 0.0


class TestObstacleQueue:
    """Test scrolling, eviction and refill."""

    def test_obstacles_scroll_left(self, physics, config):
        """Every obstacle moves left by the speed constant."""
        session = make_session(Obstacle(300, 100, 250), Obstacle(500, 100, 250))

        physics.advance_obstacles(session)

        assert session.obstacles[0].x == pytest.approx(300 - config.obstacles.speed)
        assert session.obstacles[1].x == pytest.approx(500 - config.obstacles.speed)

    def test_evicted_when_right_edge_below_zero(self, physics, config):
        """Obstacle at x=0 (width 64) is evicted on the tick where x + width < 0."""
        width = config.obstacles.width
        first = Obstacle(64 - width, 100, 250)
        second = Obstacle(200, 100, 250)
        session = make_session(first, second)

        ticks = 0
        evicted = None
        while evicted is None:
            physics.advance_obstacles(session)
            ticks += 1
            if first.x + width >= 0:
                assert physics.evict_offscreen(session) is None
            else:
                evicted = physics.evict_offscreen(session)

        assert evicted is first
        assert first.x + width < 0
        assert first.x + config.obstacles.speed + width >= 0
        assert session.obstacles[0] is second

    def test_refill_after_eviction(self, physics, generator, config):
        """A short queue gains one obstacle a spacing beyond the rightmost."""
        session = make_session(Obstacle(-100, 100, 250), Obstacle(100, 100, 250))

        physics.evict_offscreen(session)
        assert len(session.obstacles) == 1

        added = physics.refill(session, generator, 155)

        assert len(session.obstacles) == 2
        assert added.x == pytest.approx(100 + config.obstacles.spacing)
        assert session.obstacles[-1] is added

    def test_refill_noop_when_full(self, physics, generator):
        """A queue of two is left alone."""
        session = make_session(Obstacle(100, 100, 250), Obstacle(300, 100, 250))

        assert physics.refill(session, generator, 155) is None
        assert len(session.obstacles) == 2

    def test_queue_never_below_two(self, physics, generator, config):
        """Repeated scroll/evict/refill keeps at least two obstacles in FIFO order."""
        first, second = physics.initial_positions()
        session = make_session(
            generator.generate(first, 130, config.board.height),
            generator.generate(second, 130, config.board.height)
        )

        seen = list(session.obstacles)
        evicted = []
        for _ in range(2000):
            physics.advance_obstacles(session)
            gone = physics.evict_offscreen(session)
            if gone is not None:
                assert gone.right_edge(config.obstacles.width) < 0
                evicted.append(gone)
            added = physics.refill(session, generator, 130)
            if added is not None:
                seen.append(added)
            assert len(session.obstacles) >= 2
            xs = [o.x for o in session.obstacles]
            assert xs == sorted(xs)

        assert evicted == seen[:len(evicted)]
        assert len(evicted) > 5


class TestPassDetection:
    """Test scoring flag."""

    def test_marked_once(self, physics, config):
        """An obstacle is reported as passed exactly once."""
        width = config.obstacles.width
        obstacle = Obstacle(config.avatar.x - width + 1, 100, 250)
        session = make_session(obstacle)

        assert physics.collect_passed(session) == []

        obstacle.x -= 2  # right edge now behind the avatar
        assert physics.collect_passed(session) == [obstacle]
        assert obstacle.scored
        assert physics.collect_passed(session) == []

    def test_edge_exactly_at_avatar_not_passed(self, physics, config):
        """Right edge equal to avatar x has not passed yet."""
        obstacle = Obstacle(config.avatar.x - config.obstacles.width, 100, 250)
        session = make_session(obstacle)

        assert physics.collect_passed(session) == []


class TestCollision:
    """Test overlap tests."""

    def test_large_hitbox_overlapping_pipe(self, config):
        """Gap [100, 250]; hitbox spanning [90, 310] at horizontal overlap collides."""
        big = replace(config, avatar=replace(config.avatar, hit_radius=110.0))
        physics = PhysicsWorld(big)
        avatar = Avatar(y=200.0)
        obstacles = [Obstacle(50, 100, 250), Obstacle(60, 100, 250)]

        assert avatar.top(110.0) == 90.0
        assert avatar.bottom(110.0) == 310.0
        for obstacle in obstacles:
            assert physics.collides(avatar, obstacle)

    def test_bottom_poke_collides(self, physics, config):
        """Hitbox below the gap bottom collides."""
        r = config.avatar.hit_radius
        obstacle = Obstacle(config.avatar.x - 10, 100, 250)
        avatar = Avatar(y=250 - r + 1)

        assert physics.collides(avatar, obstacle)

    def test_inside_gap_is_safe(self, physics, config):
        """Hitbox fully inside the gap does not collide."""
        obstacle = Obstacle(config.avatar.x - 10, 100, 250)
        avatar = Avatar(y=175)

        assert not physics.collides(avatar, obstacle)

    def test_no_horizontal_overlap_is_safe(self, physics, config):
        """A pipe out of reach horizontally never collides."""
        r = config.avatar.hit_radius
        obstacle = Obstacle(config.avatar.x + r, 300, 400)  # touching edge only
        avatar = Avatar(y=100)

        assert not physics.collides(avatar, obstacle)

    def test_hit_radius_is_forgiving(self, config):
        """Visual overlap inside the forgiveness margin is not a collision."""
        physics = PhysicsWorld(config)
        obstacle = Obstacle(config.avatar.x - 10, 100, 250)
        # Visual circle pokes 2px above the gap, hitbox does not
        y = 100 + config.avatar.visual_radius - 2

        assert config.avatar.hit_radius < config.avatar.visual_radius
        assert not physics.collides(Avatar(y=y), obstacle)

    def test_out_of_bounds(self, physics, config):
        """Hitbox leaving the board top or bottom is out of bounds."""
        r = config.avatar.hit_radius
        height = config.board.height

        assert physics.out_of_bounds(Avatar(y=r - 0.5))
        assert physics.out_of_bounds(Avatar(y=height - r + 0.5))
        assert not physics.out_of_bounds(Avatar(y=r))
        assert not physics.out_of_bounds(Avatar(y=height / 2))


class TestTerminationRules:
    """Test rule aggregation."""

    def test_collision_reason(self, config, physics):
        rules = TerminationRules(config, physics)
        session = make_session(Obstacle(config.avatar.x - 10, 300, 400), y=200)

        result = rules.check_termination(session)

        assert result.terminated
        assert result.reason == "collision"

    def test_out_of_bounds_reason(self, config, physics):
        rules = TerminationRules(config, physics)
        session = make_session(Obstacle(400, 100, 250), y=-5)

        result = rules.check_termination(session)

        assert result.terminated
        assert result.reason == "out_of_bounds"

    def test_safe_flight(self, config, physics):
        rules = TerminationRules(config, physics)
        session = make_session(Obstacle(400, 100, 250), y=320)

        assert not rules.check_termination(session).terminated
