"""
Who Is Daphne? - UI Elements
=============================
Small pygame widgets the renderer draws panel controls with, plus the
word-wrapping helper every text box uses.
"""

from __future__ import annotations

import pygame

from casefile.core.constants import (
    COLOR_BTN_BORDER,
    COLOR_BTN_BORDER_HOVER,
    COLOR_BTN_DISABLED,
    COLOR_BTN_HOVER,
    COLOR_BTN_NORMAL,
    COLOR_BTN_TEXT,
    COLOR_TEXT_DIM,
)


def wrap_text(text: str, font: pygame.font.Font, max_width: int) -> list[str]:
    """Greedy word wrap; explicit newlines always break."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if font.size(candidate)[0] <= max_width or not current:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


class UIButton:
    """Rounded rectangle button with hover, disabled and hover-label states."""

    def __init__(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        label: str,
        font: pygame.font.Font | None = None,
        hover_label: str | None = None,
        enabled: bool = True,
    ) -> None:
        self.rect = pygame.Rect(x, y, width, height)
        self.label = label
        self.hover_label = hover_label
        self.font = font
        self.enabled = enabled
        self.struck = 0  # 1 = single strike, 2 = double strike
        self._hovered = False

    def is_hovered(self, pos: tuple[int, int]) -> bool:
        self._hovered = self.rect.collidepoint(pos)
        return self._hovered

    def draw(self, surface: pygame.Surface) -> None:
        hovered = self._hovered and self.enabled
        if not self.enabled:
            fill, border, text_color = COLOR_BTN_DISABLED, COLOR_BTN_BORDER, COLOR_TEXT_DIM
        elif hovered:
            fill, border, text_color = COLOR_BTN_HOVER, COLOR_BTN_BORDER_HOVER, COLOR_BTN_TEXT
        else:
            fill, border, text_color = COLOR_BTN_NORMAL, COLOR_BTN_BORDER, COLOR_BTN_TEXT

        pygame.draw.rect(surface, fill, self.rect, border_radius=6)
        pygame.draw.rect(surface, border, self.rect, width=2, border_radius=6)

        if self.font is None:
            return
        text = self.hover_label if hovered and self.hover_label else self.label
        text_surf = self.font.render(text, True, text_color)
        text_rect = text_surf.get_rect(center=self.rect.center)
        surface.blit(text_surf, text_rect)

        # Strike lines across the label
        for i in range(self.struck):
            y = text_rect.centery + (i * 6 - 3 if self.struck > 1 else 0)
            pygame.draw.line(surface, text_color, (text_rect.left - 4, y), (text_rect.right + 4, y), 2)
