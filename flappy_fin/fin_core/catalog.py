"""
Tier Catalog
============

Provides convenient access to difficulty tier and cosmetic definitions
loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from flappy_fin.fin_core.config_loader import (
    Cosmetic,
    CosmeticConfig,
    Difficulty,
    DifficultyConfig,
    GameConfig,
    get_config
)


@dataclass(frozen=True)
class Tier:
    """
    Runtime representation of a difficulty tier.

    Wraps DifficultyConfig with its position in the unlock chain.
    """
    config: DifficultyConfig
    index: int

    @property
    def key(self) -> Difficulty:
        return self.config.tier

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def gap(self) -> float:
        return self.config.gap

    def __repr__(self) -> str:
        return f"Tier({self.index}: {self.key.value})"


class TierCatalog:
    """
    Collection of all difficulty tiers and cosmetics.

    Tiers are ordered by the Difficulty enum, which is also the unlock chain:
    each tier is gated by the one before it.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        difficulty_map = config.difficulty_map
        self._tiers: Tuple[Tier, ...] = tuple(
            Tier(difficulty_map[key], index) for index, key in enumerate(Difficulty)
        )
        cosmetic_map = config.cosmetic_map
        self._cosmetics: Tuple[CosmeticConfig, ...] = tuple(
            cosmetic_map[key] for key in Cosmetic
        )

    def __len__(self) -> int:
        """Number of tiers."""
        return len(self._tiers)

    def __getitem__(self, key: Difficulty) -> Tier:
        """Get tier by key."""
        for tier in self._tiers:
            if tier.key == key:
                return tier
        raise KeyError(f"Unknown difficulty: {key}")

    def __iter__(self) -> Iterator[Tier]:
        """Iterate over tiers in chain order."""
        return iter(self._tiers)

    @property
    def tiers(self) -> Tuple[Tier, ...]:
        return self._tiers

    @property
    def first(self) -> Tier:
        """The always-unlocked entry tier."""
        return self._tiers[0]

    @property
    def hardest(self) -> Tier:
        """The last tier in the chain; gates the locked cosmetics."""
        return self._tiers[-1]

    def previous(self, key: Difficulty) -> Optional[Tier]:
        """
        Get the tier that gates the given tier.

        Returns:
            The preceding tier, or None for the first tier.
        """
        index = self[key].index
        if index == 0:
            return None
        return self._tiers[index - 1]

    @property
    def cosmetics(self) -> Tuple[CosmeticConfig, ...]:
        return self._cosmetics

    @property
    def default_cosmetic(self) -> Cosmetic:
        return Cosmetic.SCHOOL_FIN

    def cosmetic(self, key: Cosmetic) -> CosmeticConfig:
        return self._config.get_cosmetic(key)

    @staticmethod
    def parse_cosmetic(value: Optional[str]) -> Optional[Cosmetic]:
        """Cosmetic for a stored tag, or None if unknown."""
        if value is None:
            return None
        try:
            return Cosmetic(value)
        except ValueError:
            return None
