"""
Human Play Mode
================

Play Flappy Fin interactively. Drives one core tick per frame.

Controls:
    - Space / Click: Jump (first jump starts the run)
    - 1-4: Select difficulty (before a run starts)
    - C: Cycle fin skin
    - M: Back to menu after game over
    - R: Restart
    - H: Toggle hitbox outline
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--fps FPS] [--config PATH] [--save PATH]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from flappy_fin.fin_core.config_loader import Cosmetic, Difficulty, GameConfig, load_config
from flappy_fin.fin_core.events import InputEvent
from flappy_fin.fin_core.game import CoreGame
from flappy_fin.fin_core.persistence import JsonFileStore
from flappy_fin.fin_core.progression import UnlockState
from flappy_fin.fin_core.scoring import ScoreEvent
from flappy_fin.fin_core.session import RunState

logger = logging.getLogger(__name__)

DIFFICULTY_KEYS = {
    "1": Difficulty.EASY,
    "2": Difficulty.MEDIUM,
    "3": Difficulty.HARD,
    "4": Difficulty.EXTREME,
}


class HumanPlayer:
    """Presentation driver: maps pygame input to core events and draws snapshots."""

    def __init__(
        self,
        config: GameConfig,
        save_path: str,
        seed: Optional[int] = None,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for human play mode")

        from flappy_fin.fin_core.render_pygame import PygameRenderer

        self._config = config
        self._target_fps = target_fps
        self._game = CoreGame(
            config=config,
            seed=seed,
            store=JsonFileStore(save_path),
            on_score_changed=self._on_score,
            on_unlocks_changed=self._on_unlocks
        )

        pygame.init()
        pygame.display.set_caption("Flappy Fin")
        self._screen = pygame.display.set_mode((config.board.width, config.board.height))
        self._clock = pygame.time.Clock()
        self._renderer = PygameRenderer(config)
        self._running = True

    def _on_score(self, event: ScoreEvent) -> None:
        logger.debug("Score %d", event.total)

    def _on_unlocks(self, unlocks: UnlockState) -> None:
        unlocked = [d.value for d, ok in unlocks.difficulties.items() if ok]
        logger.info("Unlocked tiers: %s", ", ".join(unlocked))

    def run(self) -> int:
        """Run the game loop. Returns the last run's score."""
        while self._running:
            self._handle_events()
            self._game.handle(InputEvent.tick())
            self._render()
            self._clock.tick(self._target_fps)

        pygame.quit()
        return self._game.score

    def _cycle_cosmetic(self) -> None:
        skins = list(Cosmetic)
        current = skins.index(self._game.progression.selected_cosmetic)
        for step in range(1, len(skins) + 1):
            candidate = skins[(current + step) % len(skins)]
            if self._game.select_cosmetic(candidate):
                return

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_SPACE:
                    self._game.handle(InputEvent.jump())
                elif event.key in (pygame.K_r, pygame.K_m):
                    self._game.handle(InputEvent.reset())
                elif event.key == pygame.K_c:
                    self._cycle_cosmetic()
                elif event.key == pygame.K_h:
                    self._renderer.show_hitbox = not self._renderer.show_hitbox
                elif event.unicode in DIFFICULTY_KEYS and self._game.run_state == RunState.NOT_STARTED:
                    tier = DIFFICULTY_KEYS[event.unicode]
                    if not self._game.select_difficulty(tier):
                        logger.info("%s is locked", tier.value)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._game.handle(InputEvent.jump())

    def _render(self) -> None:
        snapshot = self._game.snapshot()
        self._renderer.draw(
            self._screen,
            snapshot,
            show_menu=snapshot.run_state == RunState.NOT_STARTED
        )
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Flappy Fin interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS (one tick per frame)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--save", type=str, default=None, help="Save file (default from config)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

    try:
        config = load_config(args.config)
        player = HumanPlayer(
            config=config,
            save_path=args.save or config.persistence.save_path,
            seed=args.seed,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
