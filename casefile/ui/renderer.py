"""
Who Is Daphne? - Panel Renderer
================================
Draws a ``Panel`` every frame and remembers where each control ended up
so the input layer can turn a mouse click into ``panel.click(group, key)``.

Images are looked up by name under ``assets_dir/images``; a missing
file is drawn as a labelled card so the story stays playable without art.
"""

from __future__ import annotations

import logging
import math
import random
from pathlib import Path

import pygame

from casefile.core.constants import (
    BUTTON_HEIGHT,
    BUTTON_SPACING,
    BUTTON_WIDTH,
    COLOR_ACCENT,
    COLOR_BG,
    COLOR_FLASH,
    COLOR_PANEL_BG,
    COLOR_PANEL_BORDER,
    COLOR_TEXT,
    COLOR_TEXT_ACTION,
    COLOR_TEXT_DIM,
    COLOR_TEXT_LOUD,
    DIALOGUE_BOX_HEIGHT,
    DIALOGUE_BOX_WIDTH,
    DIALOGUE_BOX_X,
    DIALOGUE_BOX_Y,
    FLOATING_COLORS,
    HAIR_COLORS,
    LEADS_PANEL_HEIGHT,
    LEADS_PANEL_WIDTH,
    LEADS_PANEL_X,
    LEADS_PANEL_Y,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    SHAKE_AMPLITUDE,
    SPEAKER_COLORS,
)
from casefile.engine.surface import (
    ACTION,
    BACK,
    CHOICES,
    COFFEE,
    CONFIRM,
    CONTINUE,
    DIALOGUE_TEXT,
    DIM,
    DOUBLE_STRIKE,
    DREAMS,
    END_MESSAGE,
    ENTER_HINT,
    FADE_OVERLAY,
    FEAR_WORDS,
    FINALE_PORTRAITS,
    FINALE_TEXT,
    GRID,
    IDLE_BUBBLE,
    ITEMS,
    LEADS_LIST,
    LOUD,
    MENU_BUTTONS,
    MOL,
    OVERLAY_IMAGE,
    PLAY_AGAIN,
    PORTRAIT,
    SCREEN,
    START,
    STRIKE,
    Panel,
    TextSpan,
)
from casefile.ui.elements import UIButton, wrap_text

logger = logging.getLogger(__name__)

# group -> (layout, x, y); "column" stacks buttons, "grid" wraps them in rows
_GROUP_LAYOUT: dict[str, tuple[str, int, int]] = {
    START: ("column", SCREEN_WIDTH // 2 - BUTTON_WIDTH // 2, SCREEN_HEIGHT // 2),
    MENU_BUTTONS: ("column", SCREEN_WIDTH // 2 - BUTTON_WIDTH // 2, 150),
    CHOICES: ("column", DIALOGUE_BOX_X + DIALOGUE_BOX_WIDTH // 2 - BUTTON_WIDTH // 2, 250),
    CONFIRM: ("column", DIALOGUE_BOX_X + DIALOGUE_BOX_WIDTH // 2 - BUTTON_WIDTH // 2, 330),
    CONTINUE: ("column", DIALOGUE_BOX_X + DIALOGUE_BOX_WIDTH - BUTTON_WIDTH, 440),
    ITEMS: ("grid", DIALOGUE_BOX_X, 120),
    GRID: ("grid", DIALOGUE_BOX_X, 120),
    DREAMS: ("column", DIALOGUE_BOX_X + 40, 80),
    FEAR_WORDS: ("flow", DIALOGUE_BOX_X, 80),
    BACK: ("column", LEADS_PANEL_X, LEADS_PANEL_Y + LEADS_PANEL_HEIGHT + 20),
    COFFEE: ("column", SCREEN_WIDTH - BUTTON_WIDTH - 40, SCREEN_HEIGHT - 150),
    PLAY_AGAIN: ("column", SCREEN_WIDTH // 2 - BUTTON_WIDTH // 2, SCREEN_HEIGHT // 2 + 60),
}

_MOOD_TINT: dict[str, tuple[int, int, int, int]] = {
    "alien": (40, 160, 60, 40),
    "depression-1": (0, 0, 0, 60),
    "depression-2": (0, 0, 0, 110),
    "depression-3": (0, 0, 0, 160),
    "depression-4": (0, 0, 0, 200),
    "recovery-1": (0, 0, 0, 150),
    "recovery-2": (0, 0, 0, 100),
    "recovery-3": (0, 0, 0, 50),
}


def span_color(span: TextSpan) -> tuple[int, int, int]:
    for style in span.styles:
        if style.startswith("hair:"):
            return HAIR_COLORS.get(style[5:], COLOR_TEXT)
        if style.startswith("speaker:"):
            return SPEAKER_COLORS.get(style[8:], COLOR_TEXT)
    if LOUD in span.styles:
        return COLOR_TEXT_LOUD
    if ACTION in span.styles:
        return COLOR_TEXT_ACTION
    if DIM in span.styles:
        return COLOR_TEXT_DIM
    return COLOR_TEXT


class PanelRenderer:
    """Stateless apart from font/image caches and last frame's hit boxes."""

    def __init__(self, assets_dir: str = "") -> None:
        self._assets = Path(assets_dir) / "images" if assets_dir else None
        self._images: dict[str, pygame.Surface | None] = {}
        self._font: pygame.font.Font | None = None
        self._font_small: pygame.font.Font | None = None
        self._font_title: pygame.font.Font | None = None
        self._float_fonts: dict[int, pygame.font.Font] = {}
        self._buttons: list[tuple[str, str, UIButton]] = []
        self._shake = random.Random(0)
        self._time = 0.0

    def init_fonts(self) -> None:
        self._font = pygame.font.SysFont("georgia", 22)
        self._font_small = pygame.font.SysFont("consolas", 16)
        self._font_title = pygame.font.SysFont("georgia", 56, bold=True)

    # ── Hit testing ─────────────────────────────────────────────────
    def hit(self, pos: tuple[int, int]) -> tuple[str, str] | None:
        for group, key, button in reversed(self._buttons):
            if button.enabled and button.rect.collidepoint(pos):
                return group, key
        return None

    def hover(self, pos: tuple[int, int]) -> None:
        for _, _, button in self._buttons:
            button.is_hovered(pos)

    # ── Frame ───────────────────────────────────────────────────────
    def draw(self, surface: pygame.Surface, panel: Panel, dt: float) -> None:
        if self._font is None:
            self.init_fonts()
        self._time += dt
        hovered = {(g, k) for g, k, b in self._buttons if b._hovered}
        self._buttons = []

        canvas = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT))
        canvas.fill(COLOR_BG)

        if panel.screen == "start":
            self._draw_title(canvas, "Who Is Daphne?")
        elif panel.screen == "title":
            self._draw_title(canvas, "WHO IS DAPHNE?")

        self._draw_images(canvas, panel)
        self._draw_floating(canvas, panel)
        if panel.screen not in ("start", "title", "end", "menu"):
            self._draw_dialogue_box(canvas, panel)
        if panel.is_visible(LEADS_LIST):
            self._draw_leads(canvas, panel)
        if panel.is_visible(IDLE_BUBBLE):
            self._draw_bubble(canvas, panel.text(IDLE_BUBBLE))
        if panel.is_visible(FINALE_TEXT):
            self._draw_spans(canvas, panel.spans(FINALE_TEXT), pygame.Rect(140, 420, 1000, 160))

        for group in _GROUP_LAYOUT:
            if panel.is_visible(group):
                self._draw_group(canvas, panel, group, hovered)

        if panel.input is not None:
            self._draw_input(canvas, panel.input.value)

        self._draw_mood(canvas, panel)
        if panel.is_visible(FADE_OVERLAY):
            canvas.fill((0, 0, 0))
            self._draw_centered(canvas, panel.text(FADE_OVERLAY), SCREEN_HEIGHT // 2)
        if panel.is_visible(END_MESSAGE):
            self._draw_centered(canvas, "Thank you for playing.", SCREEN_HEIGHT // 2 - 40)
        if "flash" in panel.effects:
            veil = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)
            veil.fill((*COLOR_FLASH, 90))
            canvas.blit(veil, (0, 0))

        offset = (0, 0)
        if "shake" in panel.effects:
            offset = (self._shake.randint(-SHAKE_AMPLITUDE, SHAKE_AMPLITUDE),
                      self._shake.randint(-SHAKE_AMPLITUDE, SHAKE_AMPLITUDE))
        surface.fill(COLOR_BG)
        surface.blit(canvas, offset)

    # ── Pieces ──────────────────────────────────────────────────────
    def _draw_title(self, canvas: pygame.Surface, text: str) -> None:
        pulse = 0.7 + 0.3 * math.sin(self._time * 1.5)
        color = tuple(int(c * pulse) for c in COLOR_ACCENT)
        title = self._font_title.render(text, True, color)
        canvas.blit(title, (SCREEN_WIDTH // 2 - title.get_width() // 2, 160))

    def _image(self, name: str) -> pygame.Surface | None:
        if name not in self._images:
            surf = None
            if self._assets is not None:
                path = self._assets / f"{name}.png"
                if path.exists():
                    try:
                        surf = pygame.image.load(str(path)).convert_alpha()
                    except pygame.error as exc:
                        logger.warning("[Render] Could not load %s: %s", path, exc)
            self._images[name] = surf
        return self._images[name]

    def _draw_card(self, canvas: pygame.Surface, name: str, rect: pygame.Rect) -> None:
        image = self._image(name)
        if image is not None:
            canvas.blit(pygame.transform.smoothscale(image, rect.size), rect)
            return
        pygame.draw.rect(canvas, COLOR_PANEL_BG, rect, border_radius=10)
        pygame.draw.rect(canvas, COLOR_PANEL_BORDER, rect, width=2, border_radius=10)
        label = self._font_small.render(name, True, COLOR_TEXT_DIM)
        canvas.blit(label, label.get_rect(center=rect.center))

    def _draw_images(self, canvas: pygame.Surface, panel: Panel) -> None:
        if panel.screen in ("menu", "evidence", "leads", "witness", "identify") and MOL in panel.images:
            self._draw_card(canvas, panel.images[MOL], pygame.Rect(DIALOGUE_BOX_X, 300, 160, 180))
        if panel.is_visible(PORTRAIT) and PORTRAIT in panel.images:
            wide = panel.has_flag(PORTRAIT, "wide")
            rect = pygame.Rect(560, 80, 360 if wide else 240, 300)
            if panel.has_flag(PORTRAIT, "fly_away") or panel.has_flag(PORTRAIT, "vanish"):
                rect.y -= 40
            self._draw_card(canvas, panel.images[PORTRAIT], rect)
        if panel.is_visible(OVERLAY_IMAGE) and OVERLAY_IMAGE in panel.images:
            self._draw_card(canvas, panel.images[OVERLAY_IMAGE], pygame.Rect(520, 100, 260, 320))
        if panel.is_visible(FINALE_PORTRAITS):
            lift = -60 if panel.has_flag(FINALE_PORTRAITS, "float_up") else 0
            self._draw_card(canvas, "mol", pygame.Rect(360, 120 + lift, 220, 260))
            self._draw_card(canvas, panel.images.get(FINALE_PORTRAITS, "luisa"), pygame.Rect(700, 120 + lift, 220, 260))

    def _draw_floating(self, canvas: pygame.Surface, panel: Panel) -> None:
        for word in list(panel.floating.values()):
            size = int(16 * word.size)
            font = self._float_fonts.get(size)
            if font is None:
                font = self._float_fonts[size] = pygame.font.SysFont("georgia", size)
            text = font.render(word.text, True, FLOATING_COLORS.get(word.color, COLOR_TEXT))
            opacity = word.opacity * (0.3 if word.fading else 1.0)
            text.set_alpha(int(255 * opacity))
            canvas.blit(text, (SCREEN_WIDTH * word.x / 100, SCREEN_HEIGHT * word.y / 100))

    def _draw_dialogue_box(self, canvas: pygame.Surface, panel: Panel) -> None:
        box = pygame.Rect(DIALOGUE_BOX_X, DIALOGUE_BOX_Y, DIALOGUE_BOX_WIDTH, DIALOGUE_BOX_HEIGHT)
        pygame.draw.rect(canvas, COLOR_PANEL_BG, box, border_radius=8)
        pygame.draw.rect(canvas, COLOR_PANEL_BORDER, box, width=2, border_radius=8)
        self._draw_spans(canvas, panel.spans(DIALOGUE_TEXT), box.inflate(-40, -30))
        if panel.is_visible(ENTER_HINT):
            hint = self._font_small.render("[ENTER] / click", True, COLOR_TEXT_DIM)
            canvas.blit(hint, (box.right - hint.get_width() - 14, box.bottom - hint.get_height() - 8))

    def _draw_spans(self, canvas: pygame.Surface, spans: list[TextSpan], rect: pygame.Rect) -> None:
        x, y = rect.x, rect.y
        line_h = self._font.get_linesize()
        space = self._font.size(" ")[0]
        for span in spans:
            color = span_color(span)
            for i, word in enumerate(span.text.split(" ")):
                if i > 0:
                    x += space
                if not word:
                    continue
                surf = self._font.render(word, True, color)
                if x + surf.get_width() > rect.right and x > rect.x:
                    x, y = rect.x, y + line_h
                canvas.blit(surf, (x, y))
                if STRIKE in span.styles:
                    mid = y + line_h // 2
                    pygame.draw.line(canvas, color, (x, mid), (x + surf.get_width(), mid), 2)
                x += surf.get_width()

    def _draw_leads(self, canvas: pygame.Surface, panel: Panel) -> None:
        rect = pygame.Rect(LEADS_PANEL_X, LEADS_PANEL_Y, LEADS_PANEL_WIDTH, LEADS_PANEL_HEIGHT)
        pygame.draw.rect(canvas, COLOR_PANEL_BG, rect, border_radius=8)
        pygame.draw.rect(canvas, COLOR_PANEL_BORDER, rect, width=2, border_radius=8)
        heading = self._font_small.render("LEADS", True, COLOR_ACCENT)
        canvas.blit(heading, (rect.x + 14, rect.y + 10))
        y = rect.y + 40
        index = 0
        while f"{LEADS_LIST}.{index}" in panel.texts:
            for line in wrap_text("- " + panel.text(f"{LEADS_LIST}.{index}"), self._font_small, rect.width - 28):
                canvas.blit(self._font_small.render(line, True, COLOR_TEXT), (rect.x + 14, y))
                y += self._font_small.get_linesize()
            index += 1

    def _draw_bubble(self, canvas: pygame.Surface, text: str) -> None:
        lines = wrap_text(text, self._font_small, 360)
        rect = pygame.Rect(SCREEN_WIDTH - 440, SCREEN_HEIGHT - 260, 400, 24 + len(lines) * self._font_small.get_linesize())
        pygame.draw.rect(canvas, COLOR_PANEL_BG, rect, border_radius=14)
        pygame.draw.rect(canvas, COLOR_ACCENT, rect, width=2, border_radius=14)
        for i, line in enumerate(lines):
            canvas.blit(self._font_small.render(line, True, COLOR_TEXT),
                        (rect.x + 20, rect.y + 12 + i * self._font_small.get_linesize()))

    def _draw_group(self, canvas: pygame.Surface, panel: Panel, group: str, hovered: set) -> None:
        layout, x0, y0 = _GROUP_LAYOUT[group]
        x, y = x0, y0
        for control in panel.controls.get(group, ()):
            if "separator" in control.flags:
                x, y = x0, y + BUTTON_HEIGHT + BUTTON_SPACING * 2
                continue
            label = control.label or " "
            if layout == "flow":
                width = self._font_small.size(label)[0] + 30
                if x + width > DIALOGUE_BOX_X + DIALOGUE_BOX_WIDTH:
                    x, y = x0, y + BUTTON_HEIGHT + BUTTON_SPACING
            else:
                width = BUTTON_WIDTH if layout == "column" else 200
            button = UIButton(x, y, width, BUTTON_HEIGHT, label, font=self._font_small,
                              hover_label=control.hover_label, enabled=control.enabled)
            button._hovered = (group, control.key) in hovered
            if DOUBLE_STRIKE in control.flags:
                button.struck = 2
            elif STRIKE in control.flags:
                button.struck = 1
            button.draw(canvas)
            self._buttons.append((group, control.key, button))

            if layout == "column":
                y += BUTTON_HEIGHT + BUTTON_SPACING
            else:
                x += width + BUTTON_SPACING
                if layout == "grid" and x + width > DIALOGUE_BOX_X + DIALOGUE_BOX_WIDTH:
                    x, y = x0, y + BUTTON_HEIGHT + BUTTON_SPACING

    def _draw_input(self, canvas: pygame.Surface, value: str) -> None:
        rect = pygame.Rect(DIALOGUE_BOX_X + 40, DIALOGUE_BOX_Y - 70, DIALOGUE_BOX_WIDTH - 80, 48)
        pygame.draw.rect(canvas, COLOR_PANEL_BG, rect, border_radius=6)
        pygame.draw.rect(canvas, COLOR_ACCENT, rect, width=2, border_radius=6)
        caret = "_" if int(self._time * 2) % 2 == 0 else ""
        text = self._font.render(value + caret, True, COLOR_TEXT)
        canvas.blit(text, (rect.x + 14, rect.centery - text.get_height() // 2))

    def _draw_mood(self, canvas: pygame.Surface, panel: Panel) -> None:
        for flag, rgba in _MOOD_TINT.items():
            if panel.has_flag(SCREEN, flag):
                veil = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SRCALPHA)
                veil.fill(rgba)
                canvas.blit(veil, (0, 0))

    def _draw_centered(self, canvas: pygame.Surface, text: str, y: int) -> None:
        if not text:
            return
        surf = self._font_title.render(text, True, COLOR_TEXT)
        canvas.blit(surf, (SCREEN_WIDTH // 2 - surf.get_width() // 2, y - surf.get_height() // 2))
