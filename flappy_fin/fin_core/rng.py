"""
RNG - Obstacle Generator
========================

Produces obstacles with a uniformly placed vertical gap. Seedable for
reproducible runs.
"""

from __future__ import annotations

import random
from typing import Optional, Tuple

from flappy_fin.fin_core.config_loader import GameConfig, get_config
from flappy_fin.fin_core.session import Obstacle


class ObstacleGenerator:
    """
    Generates one obstacle at a time.

    The gap top is drawn uniformly from
    [top_margin, vertical_extent - gap_size - bottom_margin].
    Apart from the random source there are no side effects.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize generator.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._top_margin = config.obstacles.top_margin
        self._bottom_margin = config.obstacles.bottom_margin
        self._rng = random.Random(seed)

    @property
    def top_margin(self) -> float:
        return self._top_margin

    @property
    def bottom_margin(self) -> float:
        return self._bottom_margin

    def gap_top_range(self, gap_size: float, vertical_extent: float) -> Tuple[float, float]:
        """
        Valid range for the gap top.

        Returns:
            (low, high) tuple. high may be below low when the gap does not fit.
        """
        low = self._top_margin
        high = vertical_extent - gap_size - self._bottom_margin
        return (low, high)

    def generate(
        self,
        x: float,
        gap_size: float,
        vertical_extent: float
    ) -> Obstacle:
        """
        Create an obstacle at horizontal position x.

        Args:
            x: Left edge of the obstacle.
            gap_size: Height of the open gap.
            vertical_extent: Playfield height.

        Returns:
            A new, unscored Obstacle.
        """
        low, high = self.gap_top_range(gap_size, vertical_extent)
        span = max(0.0, high - low)
        if span == 0.0:
            # Empty or inverted range: use the midpoint of the requested bounds
            gap_top = (low + high) / 2.0
        else:
            gap_top = low + self._rng.random() * span
        return Obstacle(x=x, gap_top=gap_top, gap_bottom=gap_top + gap_size)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reseed the generator.

        Args:
            seed: New random seed. Keeps current stream if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
