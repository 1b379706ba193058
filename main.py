"""
Who Is Daphne?
===============
A small interactive case file: a cadet, a detective cat called Mol and a
suspect nobody seems able to describe.

Entry point - loads settings, opens the window and runs the frame loop
on asyncio so the story's typing and timers interleave with drawing.

Controls:
  Mouse Left    - Buttons / advance dialogue
  Enter         - Advance dialogue / submit text
  Escape        - Skip the intro speech
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

import pygame

from casefile.audio.mixer import create_audio
from casefile.audio.voice import VoiceSynth
from casefile.core.config import Settings, load_settings
from casefile.core.constants import FPS, LOG_LEVEL_ENV_VAR, SCREEN_HEIGHT, SCREEN_WIDTH, TITLE
from casefile.core.session import Pacing
from casefile.engine.story import Story
from casefile.states.story_state import StoryState
from casefile.ui.renderer import PanelRenderer

logger = logging.getLogger("casefile")


class Game:
    """Top-level application: owns the window, clock and the story."""

    def __init__(self, settings: Settings) -> None:
        pygame.init()
        pygame.display.set_caption(TITLE)
        flags = pygame.FULLSCREEN if settings.window_mode == "fullscreen" else 0
        self._screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), flags)
        self._clock = pygame.time.Clock()
        self._settings = settings
        self._running = True
        self._state: StoryState | None = None

    async def run(self) -> None:
        """Main loop."""
        pacing = Pacing(self._settings.text_speed)
        story = Story(
            audio=create_audio(self._settings, pacing),
            voice=VoiceSynth(volume=self._settings.sfx_volume, enabled=self._settings.voice_enabled),
            pacing=pacing,
        )
        self._state = StoryState(story, PanelRenderer(self._settings.assets_dir))
        self._state.enter()

        while self._running:
            dt = self._clock.tick() / 1000.0  # seconds since last frame

            # ── Events ──────────────────────────────────────────────
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self._running = False
                    break
                self._state.handle_event(event)

            # ── Update ──────────────────────────────────────────────
            self._state.update(dt)

            # ── Draw ────────────────────────────────────────────────
            self._state.draw(self._screen)
            pygame.display.flip()

            # Let the story's coroutines run until the next frame
            await asyncio.sleep(1 / FPS)

        self._state.exit()
        story.router.reset()


def configure_logging(settings: Settings) -> None:
    level = os.environ.get(LOG_LEVEL_ENV_VAR, settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def main() -> None:
    settings = load_settings()
    configure_logging(settings)
    logger.info("Starting %s", TITLE)
    try:
        asyncio.run(Game(settings).run())
    finally:
        pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
