"""
Who Is Daphne? - Finale
========================
Affirmations drift across the screen and Mol asks the last question.
Any of the accepted answers (or the name the cadet gave at the start)
opens the reveal; anything else gets a gentle retry message.

The reveal is a short two-speaker conversation.  A ``start_fade`` line
lets the music and the portraits drift away; the ``end`` line fades to
black, shows the closing messages one at a time and hands over to the
end screen.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Iterable

from casefile.core.constants import (
    FINALE_END_PAUSE,
    FINALE_FALLBACK_FADE,
    FINALE_FALLBACK_HOLD,
    FINALE_INPUT_DELAY,
    FINALE_LINE_PAUSE,
    FINALE_MESSAGE_GAP,
    FINALE_MESSAGE_HOLD,
    FINALE_OVERLAY_HOLD,
    FINALE_PORTRAIT_DELAY,
    FINALE_REVEAL_HOLD,
    FINALE_SLOW_FADE,
    FINALE_SPEAKER_PITCH,
    PORTRAIT_LUISA,
)
from casefile.engine.floating_text import AFFIRMATION_CLOUD, FloatingText
from casefile.engine.reveal import speaker_style
from casefile.engine.script import Action, DialogueStep
from casefile.engine.surface import (
    DIALOGUE_TEXT,
    FADE_OVERLAY,
    FINALE_INPUT,
    FINALE_PORTRAITS,
    FINALE_TEXT,
    SCREEN,
)

if TYPE_CHECKING:
    from casefile.engine.content import FinaleContent
    from casefile.screens.identify import IdentifyScreen

logger = logging.getLogger(__name__)


def check_answer(answer: str, valid_answers: Iterable[str], player_name: str = "") -> bool:
    """Case-insensitive match against the accepted answers and the cadet's own name."""
    normalized = answer.strip().lower()
    if not normalized:
        return False
    accepted = {a.strip().lower() for a in valid_answers}
    name = player_name.strip().lower()
    if name:
        accepted.add(name)
    return normalized in accepted


class FinaleSequence:
    def __init__(self, screen: "IdentifyScreen", content: "FinaleContent") -> None:
        self.screen = screen
        self.content = content
        self.panel = screen.panel
        self.audio = screen.audio
        self.reveal = screen.reveal
        self.pacing = screen.pacing
        self.attempts = 0
        self.cloud: FloatingText | None = None
        self._answered = asyncio.Event()
        self._retry: asyncio.Task | None = None

    async def run(self) -> None:
        self.cloud = self.screen.float_words(self.content.floating_words, AFFIRMATION_CLOUD)
        await self.reveal.reveal(self.content.prompt, DIALOGUE_TEXT)
        await self.pacing.sleep(FINALE_INPUT_DELAY)
        self.panel.open_input(FINALE_INPUT, self.submit)

        await self._answered.wait()
        await self._play_reveal()

    # ── Answer ──────────────────────────────────────────────────────
    def submit(self, value: str) -> bool:
        """Check one submitted answer.  Blank input is ignored."""
        if self._answered.is_set() or not value.strip():
            return False
        if check_answer(value, self.content.valid_answers, self.screen.flags.player_name):
            logger.info("[Finale] Accepted %r", value.strip())
            self._cancel_retry()
            self.panel.close_input()
            self._answered.set()
            return True

        messages = self.content.wrong_answer_messages
        message = messages[self.attempts % len(messages)]
        self.attempts += 1
        logger.debug("[Finale] Retry %d", self.attempts)
        if self.panel.input is not None:
            self.panel.input.value = ""
        self._cancel_retry()
        self._retry = self.screen.spawn(self.reveal.reveal(message, DIALOGUE_TEXT))
        return False

    def _cancel_retry(self) -> None:
        if self._retry is not None and not self._retry.done():
            self._retry.cancel()
        self._retry = None

    @property
    def answered(self) -> bool:
        return self._answered.is_set()

    # ── Reveal ──────────────────────────────────────────────────────
    async def _play_reveal(self) -> None:
        self.panel.clear_text(DIALOGUE_TEXT)
        self.panel.set_flag(SCREEN, "finale")
        self.panel.show(FINALE_TEXT)
        await self.pacing.sleep(FINALE_PORTRAIT_DELAY)
        self.panel.set_image(FINALE_PORTRAITS, PORTRAIT_LUISA)
        self.panel.show(FINALE_PORTRAITS)
        await self.pacing.sleep(FINALE_REVEAL_HOLD)

        for step in self.content.final_dialogue:
            await self._say(step)
            if step.action is Action.START_FADE:
                self._start_fade()
            elif step.action is Action.END:
                await self._end()
                return
            await self.pacing.sleep(FINALE_LINE_PAUSE)

        # The script ran out without an ``end`` line.
        await self.pacing.sleep(FINALE_END_PAUSE)
        self.panel.show(FADE_OVERLAY)
        if self.cloud is not None:
            self.cloud.stop()
        await self.audio.fade_out(None, FINALE_FALLBACK_FADE)
        await self.pacing.sleep(FINALE_FALLBACK_HOLD)
        self.screen.finish_story()

    async def _say(self, step: DialogueStep) -> None:
        pitch = FINALE_SPEAKER_PITCH.get(step.speaker or "", "normal")
        style = speaker_style(step.speaker)
        self.panel.clear_text(FINALE_TEXT)
        await self.reveal.type_voiced(step.text or "", FINALE_TEXT, {style} if style else (), pitch=pitch)

    def _start_fade(self) -> None:
        self.panel.set_flag(FINALE_PORTRAITS, "float_up")
        if self.cloud is not None:
            self.cloud.stop()
        self.screen.spawn(self.audio.fade_out(None, FINALE_SLOW_FADE))

    async def _end(self) -> None:
        await self.pacing.sleep(FINALE_END_PAUSE)
        self.panel.show(FADE_OVERLAY)
        await self.pacing.sleep(FINALE_OVERLAY_HOLD)
        for message in self.content.end_messages:
            self.panel.set_text(FADE_OVERLAY, message)
            await self.pacing.sleep(FINALE_MESSAGE_HOLD)
            self.panel.clear_text(FADE_OVERLAY)
            await self.pacing.sleep(FINALE_MESSAGE_GAP)
        self.panel.hide(FADE_OVERLAY)
        self.screen.finish_story()

    def reset(self) -> None:
        self.panel.close_input()
        for name in (FINALE_PORTRAITS, FADE_OVERLAY, FINALE_TEXT):
            self.panel.hide(name)
        self.panel.clear_text(FINALE_TEXT)
        self.panel.clear_text(FADE_OVERLAY)
        self.panel.set_flag(FINALE_PORTRAITS, "float_up", False)
        self.panel.set_flag(SCREEN, "finale", False)
