"""
Pygame Renderer
===============

Draws a GameSnapshot with pygame. Supports both display mode (human play) and
headless RGB output. Consumes snapshots only; never touches game state.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

import numpy as np

from flappy_fin.fin_core.config_loader import Cosmetic, Difficulty, GameConfig, get_config
from flappy_fin.fin_core.session import RunState
from flappy_fin.fin_core.state_snapshot import GameSnapshot

Color = Tuple[int, int, int]

# Fallback fill per skin (no image assets are loaded)
COSMETIC_COLORS: Dict[Cosmetic, Color] = {
    Cosmetic.SCHOOL_FIN: (255, 207, 47),
    Cosmetic.POOL_FIN: (80, 170, 255),
}


class PygameRenderer:
    """
    Renderer using pygame.

    Supports:
    - Pipes with rounded gap corners
    - Fin drawn at visual radius, optional hitbox outline
    - Score / best / difficulty HUD and start / game-over overlays
    - Screen display for human mode
    - RGB array output for agents
    """

    def __init__(self, config: Optional[GameConfig] = None, show_hitbox: bool = False):
        """
        Initialize renderer.

        Args:
            config: Game configuration.
            show_hitbox: Outline the collision radius around the fin.
        """
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for PygameRenderer")

        if config is None:
            config = get_config()

        self._config = config
        self._show_hitbox = show_hitbox
        self._size = (config.board.width, config.board.height)

        if not pygame.get_init():
            pygame.init()

        # Display surface (created on demand)
        self._screen: Optional[pygame.Surface] = None

        pygame.font.init()
        self._font = pygame.font.Font(None, 28)
        self._font_large = pygame.font.Font(None, 56)
        self._font_small = pygame.font.Font(None, 22)

        self._sky_top = (112, 197, 230)
        self._sky_bottom = (190, 232, 245)
        self._pipe_dark = (24, 106, 33)
        self._pipe_light = (87, 225, 79)
        self._text_color = (255, 255, 255)
        self._locked_color = (150, 150, 150)

        self._background = self._create_gradient_background()

    def _create_gradient_background(self) -> "pygame.Surface":
        width, height = self._size
        surface = pygame.Surface((width, height))
        for y in range(height):
            t = y / height
            color = tuple(
                int(top * (1 - t) + bottom * t)
                for top, bottom in zip(self._sky_top, self._sky_bottom)
            )
            pygame.draw.line(surface, color, (0, y), (width, y))
        return surface

    @property
    def show_hitbox(self) -> bool:
        return self._show_hitbox

    @show_hitbox.setter
    def show_hitbox(self, value: bool) -> None:
        self._show_hitbox = bool(value)

    def render(self, snapshot: GameSnapshot) -> np.ndarray:
        """
        Render to RGB array.

        Returns:
            (height, width, 3) uint8 array.
        """
        surface = pygame.Surface(self._size)
        self.draw(surface, snapshot)
        array = pygame.surfarray.array3d(surface)
        return np.transpose(array, (1, 0, 2))

    def render_to_screen(self, snapshot: GameSnapshot) -> None:
        """Render to a display window, creating it on first use."""
        if self._screen is None:
            self._screen = pygame.display.set_mode(self._size)
            pygame.display.set_caption("Flappy Fin")
        self.draw(self._screen, snapshot)
        pygame.display.flip()

    def draw(
        self,
        surface: "pygame.Surface",
        snapshot: GameSnapshot,
        show_menu: bool = False
    ) -> None:
        """Draw the complete scene onto a surface."""
        surface.blit(self._background, (0, 0))

        for obstacle in snapshot.obstacles:
            self._draw_pipe(surface, obstacle.x, obstacle.gap_top, obstacle.gap_bottom, snapshot)

        self._draw_fin(surface, snapshot)
        self._draw_hud(surface, snapshot)

        if snapshot.run_state == RunState.OVER:
            self._draw_overlay(surface, "Game Over", "R to restart, M for menu", 115)
        elif snapshot.run_state == RunState.NOT_STARTED:
            self._draw_overlay(surface, "Flappy Fin", "Space to start", 56)
            if show_menu:
                self._draw_menu(surface, snapshot)

    def _draw_pipe(
        self,
        surface: "pygame.Surface",
        x: float,
        top: float,
        bottom: float,
        snapshot: GameSnapshot
    ) -> None:
        width = int(snapshot.obstacle_width)
        radius = int(self._config.obstacles.corner_radius)
        left = int(x)
        board_height = int(snapshot.board_height)

        # Top pipe rounded at its lower edge, bottom pipe at its upper edge
        top_rect = pygame.Rect(left, -radius, width, int(top) + radius)
        bottom_rect = pygame.Rect(left, int(bottom), width, board_height - int(bottom) + radius)
        for rect in (top_rect, bottom_rect):
            pygame.draw.rect(surface, self._pipe_dark, rect, border_radius=radius)
            inner = rect.inflate(-width // 2, 0)
            pygame.draw.rect(surface, self._pipe_light, inner, border_radius=radius)

    def _draw_fin(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        center = (int(snapshot.avatar_x), int(snapshot.avatar_y))
        color = COSMETIC_COLORS.get(snapshot.selected_cosmetic, (255, 207, 47))
        pygame.draw.circle(surface, color, center, int(snapshot.visual_radius))
        pygame.draw.circle(surface, (40, 40, 40), center, int(snapshot.visual_radius), 2)
        if self._show_hitbox:
            pygame.draw.circle(surface, (255, 0, 0), center, int(snapshot.hit_radius), 1)

    def _draw_hud(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        score = self._font_large.render(str(snapshot.score), True, self._text_color)
        surface.blit(score, ((surface.get_width() - score.get_width()) // 2, 20))

        line = f"{snapshot.difficulty_name}   Best: {snapshot.best_score}"
        hud = self._font_small.render(line, True, self._text_color)
        surface.blit(hud, (10, 10))

    def _draw_overlay(
        self,
        surface: "pygame.Surface",
        title: str,
        subtitle: str,
        alpha: int
    ) -> None:
        shade = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        shade.fill((0, 0, 0, alpha))
        surface.blit(shade, (0, 0))

        cx = surface.get_width() // 2
        cy = surface.get_height() // 2
        title_surf = self._font_large.render(title, True, self._text_color)
        surface.blit(title_surf, (cx - title_surf.get_width() // 2, cy - 60))
        sub_surf = self._font.render(subtitle, True, self._text_color)
        surface.blit(sub_surf, (cx - sub_surf.get_width() // 2, cy - 10))

    def _draw_menu(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        """Tier and skin list with lock markers, keyed to number keys."""
        y = surface.get_height() // 2 + 40
        for i, tier in enumerate(Difficulty, start=1):
            unlocked = snapshot.unlocks.difficulties.get(tier, False)
            name = self._config.get_difficulty(tier).name
            marker = ">" if tier == snapshot.difficulty else " "
            label = f"{marker} {i}: {name}" + ("" if unlocked else " (locked)")
            color = self._text_color if unlocked else self._locked_color
            text = self._font_small.render(label, True, color)
            surface.blit(text, (40, y))
            y += 24

        y += 10
        for cosmetic in Cosmetic:
            unlocked = snapshot.unlocks.cosmetics.get(cosmetic, False)
            name = self._config.get_cosmetic(cosmetic).name
            marker = ">" if cosmetic == snapshot.selected_cosmetic else " "
            label = f"{marker} C: {name}" + ("" if unlocked else " (locked)")
            color = self._text_color if unlocked else self._locked_color
            text = self._font_small.render(label, True, color)
            surface.blit(text, (40, y))
            y += 24

    def close(self) -> None:
        """Clean up pygame resources."""
        if self._screen is not None:
            self._screen = None
