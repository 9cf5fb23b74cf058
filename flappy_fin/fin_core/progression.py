"""
Progression
===========

Per-difficulty best scores, unlock gates and the selected cosmetic.

Unlock chain:
- The first tier is always unlocked
- Each later tier needs a best score >= unlock_threshold on the tier before it
- Gated cosmetics need a best score >= unlock_threshold on the hardest tier

Persistence failures never reach gameplay: reads fall back to defaults and
failed writes are logged and dropped, so the previous save comes back on the
next load.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from flappy_fin.fin_core.catalog import TierCatalog
from flappy_fin.fin_core.config_loader import Cosmetic, Difficulty, GameConfig, get_config
from flappy_fin.fin_core.persistence import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnlockState:
    """Which tiers and cosmetics are currently selectable."""
    difficulties: Dict[Difficulty, bool] = field(default_factory=dict)
    cosmetics: Dict[Cosmetic, bool] = field(default_factory=dict)


@dataclass
class ProgressUpdate:
    """Outcome of recording a run score."""
    new_best: bool
    best: int
    unlocks_changed: bool = False


class ProgressionTracker:
    """
    Tracks best scores and derives unlock state from them.

    Best scores are monotonically non-decreasing per tier, so an unlock never
    reverts during a session.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Optional[KeyValueStore] = None
    ):
        """
        Initialize tracker and load saved progress.

        Args:
            config: Game configuration. Uses default if None.
            store: Persistence backend. In-memory if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._catalog = TierCatalog(config)
        self._store = store if store is not None else MemoryStore()
        self._enabled = config.progression.enabled
        self._threshold = config.progression.unlock_threshold
        self._prefix = config.persistence.key_prefix

        self._best: Dict[Difficulty, int] = {tier.key: 0 for tier in self._catalog}
        self._selected_cosmetic: Cosmetic = self._catalog.default_cosmetic

        self.load()

    # --- keys -----------------------------------------------------------

    def best_score_key(self, tier: Difficulty) -> str:
        return f"{self._prefix}-highscore-{tier.value}"

    @property
    def cosmetic_key(self) -> str:
        return f"{self._prefix}-currentfin"

    # --- storage --------------------------------------------------------

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._store.get(key)
        except Exception as e:
            logger.warning("Could not read '%s' from save data: %s", key, e)
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            self._store.set(key, value)
        except Exception as e:
            logger.warning("Could not persist '%s'=%s: %s", key, value, e)

    def load(self) -> None:
        """Reload best scores and cosmetic choice from the store."""
        for tier in self._catalog:
            raw = self._read(self.best_score_key(tier.key))
            best = 0
            if raw is not None:
                try:
                    best = max(0, int(raw))
                except ValueError:
                    logger.warning(
                        "Ignoring malformed best score for %s: %r", tier.key.value, raw
                    )
            self._best[tier.key] = best

        self._selected_cosmetic = self._catalog.default_cosmetic
        saved = TierCatalog.parse_cosmetic(self._read(self.cosmetic_key))
        if saved is not None and self.is_cosmetic_unlocked(saved):
            self._selected_cosmetic = saved

    # --- queries --------------------------------------------------------

    @property
    def unlock_threshold(self) -> int:
        return self._threshold

    @property
    def progression_enabled(self) -> bool:
        return self._enabled

    def best_score(self, tier: Difficulty) -> int:
        return self._best[tier]

    @property
    def best_scores(self) -> Dict[Difficulty, int]:
        """Copy of all best scores."""
        return dict(self._best)

    def is_unlocked(self, tier: Difficulty) -> bool:
        """True if the tier can be selected."""
        if not self._enabled:
            return True
        previous = self._catalog.previous(tier)
        if previous is None:
            return True
        return self._best[previous.key] >= self._threshold

    def is_cosmetic_unlocked(self, cosmetic: Cosmetic) -> bool:
        """True if the cosmetic can be selected."""
        if not self._enabled or not self._catalog.cosmetic(cosmetic).gated:
            return True
        return self._best[self._catalog.hardest.key] >= self._threshold

    def unlock_state(self) -> UnlockState:
        """Current unlock state for every tier and cosmetic."""
        return UnlockState(
            difficulties={tier.key: self.is_unlocked(tier.key) for tier in self._catalog},
            cosmetics={c.cosmetic: self.is_cosmetic_unlocked(c.cosmetic) for c in self._catalog.cosmetics}
        )

    @property
    def selected_cosmetic(self) -> Cosmetic:
        return self._selected_cosmetic

    # --- updates --------------------------------------------------------

    def record_score(self, tier: Difficulty, score: int) -> ProgressUpdate:
        """
        Record a run score for a tier.

        A score above the current best replaces it and is persisted. Reaching
        exactly the unlock threshold flags that dependent menus need a refresh.

        Args:
            tier: The tier being played.
            score: The current run score.

        Returns:
            ProgressUpdate describing what changed.
        """
        current = self._best[tier]
        if score <= current:
            return ProgressUpdate(new_best=False, best=current)

        self._best[tier] = score
        self._write(self.best_score_key(tier), str(score))

        unlocks_changed = score == self._threshold
        if unlocks_changed:
            logger.info("Best score %d on %s reached the unlock threshold", score, tier.value)
        return ProgressUpdate(new_best=True, best=score, unlocks_changed=unlocks_changed)

    def select_cosmetic(self, cosmetic: Cosmetic) -> bool:
        """
        Select and persist a cosmetic.

        Returns:
            True if selected, False if it is still locked.
        """
        if not self.is_cosmetic_unlocked(cosmetic):
            return False
        self._selected_cosmetic = cosmetic
        self._write(self.cosmetic_key, cosmetic.value)
        return True
