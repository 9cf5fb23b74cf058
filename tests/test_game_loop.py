"""
Tests for the game loop and run state machine.
"""

import pytest

from flappy_fin.fin_core.config_loader import Cosmetic, Difficulty, load_config
from flappy_fin.fin_core.events import InputEvent, InputType
from flappy_fin.fin_core.game import CoreGame
from flappy_fin.fin_core.persistence import MemoryStore
from flappy_fin.fin_core.session import Obstacle, RunState


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def game(config, store):
    return CoreGame(config=config, seed=42, store=store)


def clear_path(game):
    """Move every obstacle far out of reach so the avatar only falls."""
    for i, obstacle in enumerate(game.session.obstacles):
        obstacle.x = 10_000 + i * game.config.obstacles.spacing


def pass_one_obstacle(game):
    """Queue a wide-open obstacle that the next tick scrolls past the avatar."""
    config = game.config
    session = game.session
    height = config.board.height
    first_x = config.avatar.x - config.obstacles.width + 0.5

    session.obstacles.clear()
    session.obstacles.append(Obstacle(first_x, 0, height))
    session.obstacles.append(Obstacle(first_x + config.obstacles.spacing, 0, height))
    session.avatar.y = height / 2
    session.avatar.vy = 0.0


class TestReset:
    """Test initial and reset state."""

    def test_initial_state(self, game, config):
        snapshot = game.snapshot()

        assert snapshot.run_state == RunState.NOT_STARTED
        assert snapshot.score == 0
        assert snapshot.avatar_y == config.board.height / 2
        assert snapshot.avatar_vy == 0.0
        assert snapshot.difficulty == Difficulty.EASY
        assert len(snapshot.obstacles) == 2

    def test_initial_obstacle_offsets(self, game, config):
        xs = [o.x for o in game.session.obstacles]
        first = config.board.width + config.obstacles.initial_offset

        assert xs == [first, first + config.obstacles.spacing]

    def test_reset_after_game_over(self, game, config):
        game.jump()
        game.session.avatar.y = -100
        game.tick()
        assert game.is_over

        snapshot = game.reset()

        assert snapshot.run_state == RunState.NOT_STARTED
        assert snapshot.score == 0
        assert snapshot.avatar_y == config.board.height / 2
        assert len(snapshot.obstacles) == 2
        assert all(not o.scored for o in snapshot.obstacles)
        assert game.termination_reason == ""

    def test_reset_with_seed_is_reproducible(self, game):
        gaps1 = [o.gap_top for o in game.reset(seed=7).obstacles]
        gaps2 = [o.gap_top for o in game.reset(seed=7).obstacles]

        assert gaps1 == gaps2


class TestStateMachine:
    """Test run state transitions."""

    def test_tick_before_start_is_noop(self, game):
        before = game.snapshot()

        result = game.tick()

        assert not result.terminated
        assert result.snapshot.avatar_y == before.avatar_y
        assert [o.x for o in result.snapshot.obstacles] == [o.x for o in before.obstacles]
        assert result.snapshot.tick == 0

    def test_first_jump_starts_and_applies_impulse(self, game, config):
        snapshot = game.jump()

        assert snapshot.run_state == RunState.PLAYING
        assert snapshot.avatar_vy == config.physics.jump_impulse

    def test_first_tick_after_start_moves_up(self, game, config):
        game.jump()
        result = game.tick()

        expected_vy = config.physics.jump_impulse + config.physics.gravity
        assert result.snapshot.avatar_vy == pytest.approx(expected_vy)
        assert result.snapshot.avatar_y == pytest.approx(config.board.height / 2 + expected_vy)

    def test_jump_while_playing_overwrites(self, game, config):
        game.jump()
        clear_path(game)
        for _ in range(10):
            game.tick()

        game.jump()

        assert game.session.avatar.vy == config.physics.jump_impulse

    def test_gravity_accumulates_while_playing(self, game, config):
        game.jump()
        clear_path(game)

        previous = game.session.avatar.vy
        for _ in range(15):
            result = game.tick()
            assert result.snapshot.avatar_vy - previous == pytest.approx(config.physics.gravity)
            previous = result.snapshot.avatar_vy

    def test_falling_ends_run_out_of_bounds(self, game):
        game.jump()
        clear_path(game)

        result = None
        for _ in range(500):
            result = game.tick()
            if result.terminated:
                break

        assert result.terminated
        assert result.termination_reason == "out_of_bounds"
        assert game.run_state == RunState.OVER

    def test_collision_ends_run(self, game, config):
        game.jump()
        obstacle = game.session.obstacles[0]
        obstacle.x = config.avatar.x
        obstacle.gap_top = 500
        obstacle.gap_bottom = 600

        result = game.tick()

        assert result.terminated
        assert result.termination_reason == "collision"

    def test_over_ignores_jump_and_tick(self, game):
        game.jump()
        game.session.avatar.y = -100
        game.tick()
        frozen = game.snapshot()

        game.jump()
        result = game.tick()

        assert result.terminated
        assert result.snapshot.avatar_y == frozen.avatar_y
        assert result.snapshot.avatar_vy == frozen.avatar_vy
        assert result.snapshot.tick == frozen.tick

    def test_queue_stays_full_while_playing(self, game):
        game.jump()
        centre = game.config.board.height / 2
        for _ in range(400):
            avatar = game.session.avatar
            if avatar.y > centre and avatar.vy > 0:
                game.jump()
            # Keep the avatar in the current gap
            for obstacle in game.session.obstacles:
                obstacle.gap_top = 0
                obstacle.gap_bottom = game.config.board.height
            result = game.tick()
            assert len(result.snapshot.obstacles) >= 2
            assert not result.terminated


class TestScoring:
    """Test score updates inside ticks."""

    def test_score_increments_once_per_obstacle(self, game):
        game.jump()
        pass_one_obstacle(game)

        first = game.tick()
        second = game.tick()

        assert first.delta_score == 1
        assert len(first.score_events) == 1
        assert second.delta_score == 0
        assert game.score == 1

    def test_score_callback_fires(self, config, store):
        events = []
        game = CoreGame(config=config, seed=1, store=store, on_score_changed=events.append)
        game.jump()
        pass_one_obstacle(game)

        game.tick()

        assert len(events) == 1
        assert events[0].total == 1

    def test_new_best_persisted(self, game, store):
        game.jump()
        pass_one_obstacle(game)

        result = game.tick()

        assert result.new_best
        assert store.get("flappy-fin-highscore-easy") == "1"
        assert result.snapshot.best_score == 1

    def test_reaching_threshold_notifies_unlocks(self, config, store):
        unlocks = []
        game = CoreGame(config=config, seed=1, store=store, on_unlocks_changed=unlocks.append)
        game.jump()

        flagged = []
        for _ in range(config.progression.unlock_threshold):
            pass_one_obstacle(game)
            result = game.tick()
            flagged.append(result.unlocks_changed)

        assert game.score == config.progression.unlock_threshold
        assert flagged[-1] and not any(flagged[:-1])
        assert len(unlocks) == 1
        assert unlocks[0].difficulties[Difficulty.MEDIUM]
        assert game.snapshot().unlocks.difficulties[Difficulty.MEDIUM]


class TestSelection:
    """Test difficulty and cosmetic selection."""

    def test_locked_difficulty_rejected(self, game):
        assert not game.select_difficulty(Difficulty.HARD)
        assert game.difficulty == Difficulty.EASY

    def test_unlocked_difficulty_resets_run(self, config):
        store = MemoryStore({"flappy-fin-highscore-easy": "10"})
        game = CoreGame(config=config, seed=3, store=store)
        game.jump()
        game.tick()

        assert game.select_difficulty(Difficulty.MEDIUM)

        snapshot = game.snapshot()
        assert snapshot.difficulty == Difficulty.MEDIUM
        assert snapshot.run_state == RunState.NOT_STARTED
        assert snapshot.gap == config.get_difficulty(Difficulty.MEDIUM).gap
        for obstacle in game.session.obstacles:
            assert obstacle.gap == pytest.approx(snapshot.gap)

    def test_refilled_obstacles_use_active_gap(self, config):
        store = MemoryStore({"flappy-fin-highscore-easy": "10"})
        game = CoreGame(config=config, seed=3, store=store)
        game.select_difficulty(Difficulty.MEDIUM)
        game.jump()
        game.session.obstacles[0].x = -config.obstacles.width - 1
        game.session.obstacles[1].x = 5_000

        game.tick()

        gap = config.get_difficulty(Difficulty.MEDIUM).gap
        assert game.session.obstacles[-1].gap == pytest.approx(gap)
        assert game.session.obstacles[-1].x == pytest.approx(
            game.session.obstacles[0].x + config.obstacles.spacing
        )

    def test_locked_cosmetic_rejected(self, game):
        assert not game.select_cosmetic(Cosmetic.POOL_FIN)
        assert game.snapshot().selected_cosmetic == Cosmetic.SCHOOL_FIN


class TestEventDispatch:
    """Test the presentation-layer event entry point."""

    def test_jump_then_tick(self, game):
        game.handle(InputEvent.jump())
        snapshot = game.handle(InputEvent.tick())

        assert snapshot.run_state == RunState.PLAYING
        assert snapshot.tick == 1

    def test_reset_event(self, game):
        game.handle(InputEvent.jump())
        snapshot = game.handle(InputEvent.reset())

        assert snapshot.run_state == RunState.NOT_STARTED

    def test_select_events(self, game):
        snapshot = game.handle(InputEvent.select_difficulty(Difficulty.EXTREME))
        assert snapshot.difficulty == Difficulty.EASY

        snapshot = game.handle(InputEvent.select_cosmetic(Cosmetic.SCHOOL_FIN))
        assert snapshot.selected_cosmetic == Cosmetic.SCHOOL_FIN

    def test_select_event_requires_target(self):
        with pytest.raises(ValueError):
            InputEvent(InputType.SELECT_DIFFICULTY)

    def test_snapshot_is_a_copy(self, game):
        game.jump()
        snapshot = game.snapshot()
        clear_path(game)
        game.tick()

        assert snapshot.tick == 0
        assert snapshot.obstacles[0].x != game.session.obstacles[0].x
