"""
Core Game
=========

Main game orchestrator combining physics, obstacle generation, scoring,
progression and rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from flappy_fin.fin_core.catalog import TierCatalog
from flappy_fin.fin_core.config_loader import Cosmetic, Difficulty, GameConfig, get_config
from flappy_fin.fin_core.events import InputEvent, InputType
from flappy_fin.fin_core.persistence import KeyValueStore
from flappy_fin.fin_core.physics_world import PhysicsWorld
from flappy_fin.fin_core.progression import ProgressionTracker, UnlockState
from flappy_fin.fin_core.rng import ObstacleGenerator
from flappy_fin.fin_core.rules import TerminationRules
from flappy_fin.fin_core.scoring import ScoreEvent, ScoreTracker
from flappy_fin.fin_core.session import GameSession, RunState
from flappy_fin.fin_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Result of a single game tick."""
    snapshot: GameSnapshot
    terminated: bool
    termination_reason: str
    delta_score: int
    score_events: List[ScoreEvent] = field(default_factory=list)
    new_best: bool = False
    unlocks_changed: bool = False


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Physics world
    - Obstacle generator (RNG)
    - Scoring
    - Progression and persistence
    - Termination rules
    - State snapshots

    State machine:
        NOT_STARTED --jump--> PLAYING --collision/bounds--> OVER --reset--> NOT_STARTED

    One tick = one display refresh. The caller owns the cadence and must not
    start a tick before the previous one returns.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        store: Optional[KeyValueStore] = None,
        on_score_changed: Optional[Callable[[ScoreEvent], None]] = None,
        on_unlocks_changed: Optional[Callable[[UnlockState], None]] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            store: Persistence backend for progress. In-memory if None.
            on_score_changed: Called after every score increment.
            on_unlocks_changed: Called when a best score reaches the unlock threshold.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._on_score_changed = on_score_changed
        self._on_unlocks_changed = on_unlocks_changed

        # Initialize subsystems
        self._catalog = TierCatalog(config)
        self._physics = PhysicsWorld(config)
        self._generator = ObstacleGenerator(config, seed)
        self._scorer = ScoreTracker()
        self._rules = TerminationRules(config, self._physics)
        self._progression = ProgressionTracker(config, store)
        self._snapshot_builder = SnapshotBuilder(config)

        difficulty = config.progression.default_difficulty
        if not self._progression.is_unlocked(difficulty):
            difficulty = self._catalog.first.key

        self._termination_reason: str = ""
        self._session = self._new_session(difficulty)

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def session(self) -> GameSession:
        """The live session. Presentation code should prefer snapshot()."""
        return self._session

    @property
    def physics(self) -> PhysicsWorld:
        """Physics world instance."""
        return self._physics

    @property
    def progression(self) -> ProgressionTracker:
        """Best scores, unlocks and cosmetic choice."""
        return self._progression

    @property
    def catalog(self) -> TierCatalog:
        return self._catalog

    @property
    def score(self) -> int:
        """Current run score."""
        return self._session.score

    @property
    def run_state(self) -> RunState:
        return self._session.run_state

    @property
    def difficulty(self) -> Difficulty:
        """Active difficulty tier."""
        return self._session.difficulty

    @property
    def is_over(self) -> bool:
        """True if the run has ended."""
        return self._session.is_over

    @property
    def termination_reason(self) -> str:
        """Reason for run end, or empty string."""
        return self._termination_reason

    def _gap(self, difficulty: Difficulty) -> float:
        return self._catalog[difficulty].gap

    def _new_session(self, difficulty: Difficulty) -> GameSession:
        session = GameSession(
            avatar=self._physics.spawn_avatar(),
            difficulty=difficulty
        )
        gap = self._gap(difficulty)
        for x in self._physics.initial_positions():
            session.obstacles.append(
                self._generator.generate(x, gap, self._physics.board_height)
            )
        return session

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start a fresh run on the active difficulty.

        Args:
            seed: New random seed. Continues the current stream if None.

        Returns:
            Initial game snapshot.
        """
        if seed is not None:
            self._seed = seed
            self._generator.reset(seed)

        self._termination_reason = ""
        self._session = self._new_session(self._session.difficulty)
        logger.debug("Run reset on %s", self._session.difficulty.value)
        return self.snapshot()

    def jump(self) -> GameSnapshot:
        """
        Handle a jump input.

        Starts the run if it has not started yet; the impulse is applied in
        both cases so the avatar moves on the first input. Ignored once over.
        """
        session = self._session
        if session.run_state == RunState.OVER:
            return self.snapshot()

        if session.run_state == RunState.NOT_STARTED:
            session.run_state = RunState.PLAYING
            logger.info("Run started on %s", session.difficulty.value)

        self._physics.apply_jump(session.avatar)
        return self.snapshot()

    def tick(self) -> TickResult:
        """
        Advance the run by one frame.

        Order: avatar integration, obstacle scroll, eviction, refill,
        scoring, collision and bounds checks. A no-op unless playing.

        Returns:
            TickResult with new state and metadata.
        """
        session = self._session
        if not session.is_playing:
            return TickResult(
                snapshot=self.snapshot(),
                terminated=session.is_over,
                termination_reason=self._termination_reason,
                delta_score=0
            )

        score_before = session.score
        session.ticks += 1

        self._physics.integrate_avatar(session.avatar)
        self._physics.advance_obstacles(session)
        self._physics.evict_offscreen(session)
        self._physics.refill(session, self._generator, self._gap(session.difficulty))

        events: List[ScoreEvent] = []
        new_best = False
        unlocks_changed = False
        for obstacle in self._physics.collect_passed(session):
            event = self._scorer.apply_pass(session, obstacle)
            events.append(event)
            if self._on_score_changed is not None:
                self._on_score_changed(event)

            update = self._progression.record_score(session.difficulty, session.score)
            new_best = new_best or update.new_best
            if update.unlocks_changed:
                unlocks_changed = True
                if self._on_unlocks_changed is not None:
                    self._on_unlocks_changed(self._progression.unlock_state())

        result = self._rules.check_termination(session)
        if result.terminated:
            session.run_state = RunState.OVER
            self._termination_reason = result.reason
            logger.info(
                "Game over (%s) on %s with score %d",
                result.reason, session.difficulty.value, session.score
            )

        return TickResult(
            snapshot=self.snapshot(),
            terminated=result.terminated,
            termination_reason=self._termination_reason,
            delta_score=session.score - score_before,
            score_events=events,
            new_best=new_best,
            unlocks_changed=unlocks_changed
        )

    def select_difficulty(self, difficulty: Difficulty) -> bool:
        """
        Make a tier active and reset the run.

        Returns:
            True if selected, False if the tier is locked.
        """
        if not self._progression.is_unlocked(difficulty):
            return False
        self._session.difficulty = difficulty
        self.reset()
        return True

    def select_cosmetic(self, cosmetic: Cosmetic) -> bool:
        """
        Select and persist a fin skin.

        Returns:
            True if selected, False if the skin is locked.
        """
        return self._progression.select_cosmetic(cosmetic)

    def handle(self, event: InputEvent) -> GameSnapshot:
        """
        Dispatch a presentation-layer event.

        Returns:
            Snapshot after the event was applied.
        """
        if event.type == InputType.TICK:
            return self.tick().snapshot
        if event.type == InputType.JUMP:
            return self.jump()
        if event.type == InputType.RESET:
            return self.reset()
        if event.type == InputType.SELECT_DIFFICULTY:
            self.select_difficulty(event.difficulty)
            return self.snapshot()
        if event.type == InputType.SELECT_COSMETIC:
            self.select_cosmetic(event.cosmetic)
            return self.snapshot()
        raise ValueError(f"Unhandled event type: {event.type}")

    def snapshot(self) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(self._session, self._progression)

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._session.score,
            "best_score": self._progression.best_score(self._session.difficulty),
            "difficulty": self._session.difficulty.value,
            "run_state": self._session.run_state.value,
            "ticks": self._session.ticks,
            "terminated_reason": self._termination_reason,
        }
