"""
Who Is Daphne? - Dreams
========================
A handful of half-finished sentences.  Clicking one completes it and
Mol answers; each can only be opened once.  When all are open the
closing lines play and the finale begins.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import TYPE_CHECKING

from casefile.core.constants import (
    DREAMS_CONCLUSION_DELAY,
    DREAMS_FADE,
    DREAMS_FINALE_DELAY,
    DREAMS_LINE_PAUSE,
)
from casefile.engine.script import Action
from casefile.engine.surface import DIALOGUE_TEXT, DIM, DREAMS, ITALIC, Control

if TYPE_CHECKING:
    from casefile.engine.content import DreamContent
    from casefile.screens.identify import IdentifyScreen

logger = logging.getLogger(__name__)


class DreamSequence:
    def __init__(self, screen: "IdentifyScreen", content: "DreamContent") -> None:
        self.screen = screen
        self.content = content
        self.panel = screen.panel
        self.reveal = screen.reveal
        self.pacing = screen.pacing
        self.revealed: set[int] = set()
        self._all_revealed = asyncio.Event()

    async def run(self) -> None:
        controls = [
            Control(key=str(i), label=item.surface, on_click=partial(self.open, i))
            for i, item in enumerate(self.content.items)
        ]
        self.panel.set_controls(DREAMS, controls)
        if not controls:
            self._all_revealed.set()

        await self._all_revealed.wait()
        await self.pacing.sleep(DREAMS_CONCLUSION_DELAY)
        await self._play_conclusion()

    def open(self, index: int) -> bool:
        """Complete dream *index*.  Unknown or already opened dreams are ignored."""
        if index in self.revealed or not 0 <= index < len(self.content.items):
            return False
        item = self.content.items[index]
        self.revealed.add(index)
        self.screen.audio.play_sfx("click")

        control = self.panel.control(DREAMS, str(index))
        if control is not None:
            control.label = f"{item.surface} {item.hidden}"
            control.enabled = False
            control.flags.add("revealed")
        logger.debug("[Dreams] Opened %d", index)

        self.screen.spawn(self._respond(item.response))
        return True

    async def _respond(self, response: str) -> None:
        await self.reveal.reveal(response, DIALOGUE_TEXT)
        if len(self.revealed) == len(self.content.items):
            self._all_revealed.set()

    @property
    def complete(self) -> bool:
        return self._all_revealed.is_set()

    async def _play_conclusion(self) -> None:
        for step in self.content.conclusion:
            text = step.text or ""
            styles = {ITALIC} if step.italic else set()
            if step.low_opacity:
                await self.reveal.reveal(" " + text, DIALOGUE_TEXT, styles=styles | {DIM}, clear=False)
            else:
                await self.reveal.reveal(text, DIALOGUE_TEXT, loud=step.loud, styles=styles)

            if step.action is Action.SHOW_FINALE:
                await self.pacing.sleep(DREAMS_FINALE_DELAY)
                break
            await self.pacing.sleep(DREAMS_LINE_PAUSE)

        self.panel.set_flag(DREAMS, "fading")
        await self.pacing.sleep(DREAMS_FADE)
        self.panel.clear_controls(DREAMS)
        self.panel.set_flag(DREAMS, "fading", False)

    def reset(self) -> None:
        self.panel.clear_controls(DREAMS)
        self.panel.set_flag(DREAMS, "fading", False)
