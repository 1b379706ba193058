"""
Who Is Daphne? - Story State
=============================
The pygame-facing side of a ``Story``: turns window events into story
input and hands the panel to the renderer each frame.

    Mouse Left   - press a control, otherwise advance the dialogue
    Enter        - submit the open text field, otherwise advance
    Backspace    - edit the open text field
    Escape       - skip the intro speech
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pygame

from casefile.ui.renderer import PanelRenderer

if TYPE_CHECKING:
    from casefile.engine.story import Story

logger = logging.getLogger(__name__)

_MAX_INPUT = 40


class StoryState:
    def __init__(self, story: "Story", renderer: PanelRenderer) -> None:
        self.story = story
        self.panel = story.panel
        self.renderer = renderer
        self._dt = 0.0

    # ── Lifecycle ───────────────────────────────────────────────────
    def enter(self) -> None:
        self.renderer.init_fonts()
        pygame.key.start_text_input()
        self.story.boot()

    def exit(self) -> None:
        pygame.key.stop_text_input()

    # ── Events ──────────────────────────────────────────────────────
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            target = self.renderer.hit(event.pos)
            if target is not None:
                self.panel.click(*target)
            elif self.panel.input is None:
                self.story.advance()

        elif event.type == pygame.TEXTINPUT:
            field = self.panel.input
            if field is not None and len(field.value) < _MAX_INPUT:
                field.value += event.text

        elif event.type == pygame.KEYDOWN:
            field = self.panel.input
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                if field is not None:
                    self.panel.submit_input()
                else:
                    self.story.advance()
            elif event.key == pygame.K_BACKSPACE and field is not None:
                field.value = field.value[:-1]
            elif event.key == pygame.K_ESCAPE:
                self.story.skip()

    # ── Update / draw ───────────────────────────────────────────────
    def update(self, dt: float) -> None:
        self._dt = dt
        self.panel.tick(dt * 1000.0)
        self.renderer.hover(pygame.mouse.get_pos())

    def draw(self, surface: pygame.Surface) -> None:
        self.renderer.draw(surface, self.panel, self._dt)
