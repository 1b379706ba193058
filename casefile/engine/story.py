"""
Who Is Daphne? - Story
=======================
Wires one play session together: the panel every screen writes into,
the shared flags and pacing, audio and voice, the typewriter, progress,
content, the router with every screen registered, and the menu chatter.

``Story`` is what the pygame front end drives and what the tests build
with zero pacing and a seeded random generator.
"""

from __future__ import annotations

import logging
import random

from casefile.audio.gateway import AudioGateway
from casefile.audio.voice import SilentVoice, Voice
from casefile.core.constants import TRACK_MAIN
from casefile.core.progress import CaseProgress
from casefile.core.screen_router import ScreenId, ScreenRouter
from casefile.core.session import Pacing, SessionFlags
from casefile.engine.content import StoryContent, load_content
from casefile.engine.menu_idle import MenuIdle
from casefile.engine.reveal import TextReveal
from casefile.engine.surface import Panel
from casefile.screens.evidence import EvidenceScreen
from casefile.screens.identify import IdentifyScreen
from casefile.screens.intro import IntroScreen, StartScreen, TitleScreen
from casefile.screens.leads import LeadsScreen
from casefile.screens.menu import EndScreen, MenuScreen
from casefile.screens.witness import WitnessScreen

logger = logging.getLogger(__name__)


class Story:
    def __init__(
        self,
        content: StoryContent | None = None,
        *,
        audio: AudioGateway | None = None,
        voice: Voice | None = None,
        pacing: Pacing | None = None,
        rng: random.Random | None = None,
        panel: Panel | None = None,
    ) -> None:
        self.content = content or load_content()
        self.panel = panel or Panel()
        self.flags = SessionFlags()
        self.pacing = pacing or Pacing()
        self.rng = rng or random.Random()
        self.audio = audio or AudioGateway(pacing=self.pacing)
        self.voice = voice or SilentVoice()
        self.reveal = TextReveal(self.panel, self.flags, self.pacing, self.voice)
        self.progress = CaseProgress(
            total_evidence=len(self.content.evidence.items),
            total_witnesses=len(self.content.witnesses.witnesses),
        )
        self.router = ScreenRouter(self.panel, self.flags)
        self.menu_idle = MenuIdle(
            self.panel,
            self.audio,
            self.content.menu,
            self.rng,
            self.pacing,
            witnesses_done=lambda: self.progress.all_witnesses_complete,
        )
        self._register_screens()

    def _register_screens(self) -> None:
        for screen_cls in (
            StartScreen, IntroScreen, TitleScreen, MenuScreen, LeadsScreen,
            EvidenceScreen, WitnessScreen, IdentifyScreen, EndScreen,
        ):
            self.router.register(screen_cls(self))

    # ── Flow ────────────────────────────────────────────────────────
    def boot(self) -> None:
        self.router.show(ScreenId.START)

    def start(self) -> None:
        """Start button: audio comes up and the intro begins."""
        self.audio.register_defaults()
        self.audio.play_track(TRACK_MAIN)
        logger.info("[Story] New session")
        self.router.show(ScreenId.DIALOGUE)

    def advance(self) -> bool:
        return self.router.advance()

    def skip(self) -> bool:
        return self.router.skip()

    def exit_to_end(self) -> None:
        self.audio.pause_current()
        self.router.show(ScreenId.END)

    def play_again(self) -> None:
        """Put every piece of session state back to a cold start."""
        self.router.reset()
        self.menu_idle.reset()
        self.progress.reset()
        self.flags.reset()
        self.panel.reset()
        self.audio.stop_all()
        logger.info("[Story] Play again")
        self.router.show(ScreenId.START)

    @property
    def current(self) -> ScreenId | None:
        return self.router.current_id
