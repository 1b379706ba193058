"""
Who Is Daphne? - Start, Intro & Title Screens
==============================================
The opening: a Start button (which is also what unlocks audio), Mol's
welcome speech with the name prompt, and the title card that leads to
the menu.  Escape during the speech jumps straight to the title.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from casefile.core.screen_router import ScreenId
from casefile.engine.choices import ChoiceResolver
from casefile.engine.script import Action, DialogueStep
from casefile.engine.sequencer import Flow, Sequencer
from casefile.engine.surface import CONFIRM, CONTINUE, NAME_PROMPT, START, Control
from casefile.screens.base import Screen

if TYPE_CHECKING:
    from casefile.engine.story import Story

logger = logging.getLogger(__name__)


class StartScreen(Screen):
    screen_id = ScreenId.START

    def enter(self) -> None:
        self.panel.set_controls(START, [Control(key="start", label="Start", on_click=self._press)])

    def _press(self) -> None:
        self.audio.play_sfx("click")
        self.story.start()

    def exit(self) -> None:
        super().exit()
        self.panel.clear_controls(START)


class IntroScreen(Screen):
    screen_id = ScreenId.DIALOGUE

    def __init__(self, story: "Story") -> None:
        super().__init__(story)
        self.sequencer = Sequencer(
            "Intro", self.reveal, self.audio, {Action.NAME_INPUT: self._name_input}
        )
        self.confirm = ChoiceResolver(self.panel, self.audio, group=CONFIRM)

    def enter(self) -> None:
        self.spawn(self._play())

    async def _play(self) -> None:
        if await self.sequencer.run(self.content.intro):
            self.go(ScreenId.TITLE)

    # ── Name prompt ─────────────────────────────────────────────────
    async def _name_input(self, step: DialogueStep) -> Flow:
        await self.sequencer.say_step(step)
        while True:
            name = await self.ask_name()
            self.flags.player_name = name
            await self.sequencer.say(f"Is your name {name}?")
            if await self.confirm.present(["Yes", "No"]) == 0:
                logger.info("[Intro] Cadet name: %s", name)
                return Flow.ADVANCE

    async def ask_name(self) -> str:
        """Open the name field until a non-blank name is submitted."""
        submitted: asyncio.Future[str] = asyncio.get_running_loop().create_future()

        def on_submit(value: str) -> None:
            self.audio.play_sfx("click")
            name = value.strip()
            if name and not submitted.done():
                self.panel.close_input()
                submitted.set_result(name)

        self.panel.open_input(NAME_PROMPT, on_submit)
        try:
            return await submitted
        finally:
            if self.panel.input is not None and self.panel.input.name == NAME_PROMPT:
                self.panel.close_input()

    # ── Input ───────────────────────────────────────────────────────
    def advance(self) -> bool:
        return self.sequencer.advance()

    def skip(self) -> bool:
        logger.debug("[Intro] Skipped to title")
        self.go(ScreenId.TITLE)
        return True

    def exit(self) -> None:
        super().exit()
        self.sequencer.reset()
        self.panel.close_input()
        for group in (CONFIRM, CONTINUE):
            self.panel.clear_controls(group)

    def reset(self) -> None:
        super().reset()
        self.sequencer.reset()


class TitleScreen(Screen):
    screen_id = ScreenId.TITLE

    def enter(self) -> None:
        self.panel.set_controls(CONTINUE, [Control(key="continue", label="Continue", on_click=self._press)])

    def _press(self) -> None:
        self.audio.play_sfx("click")
        self.go(ScreenId.MENU)

    def exit(self) -> None:
        super().exit()
        self.panel.clear_controls(CONTINUE)
