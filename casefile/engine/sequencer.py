"""
Who Is Daphne? - Dialogue Sequencer
====================================
One generic interpreter for every screen's script.

A screen hands the sequencer a table of ``Action -> handler``.  Each
handler does its side effects and returns a ``Flow``:

    ADVANCE  - move straight on to the next step
    WAIT     - wait for the player (click / Enter) first; if the next step
               is a text-less ``choice`` its options are shown instead
    STOP     - end this script and every script enclosing it

Steps without a handler are typed and then WAIT (or present their inline
choices).  ``choice`` steps go through the ``ChoiceResolver``; a
``Steps`` response runs recursively on the same sequencer, so the top
level cursor only moves once the whole branch has resolved.

``advance()`` is the single external driver.  Its first act is the gate:
it does nothing unless the state is ``WAITING_FOR_INPUT`` and no text is
being typed.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Awaitable, Callable, Mapping

from casefile.core.constants import FLASH_ONLY_DURATION, SHAKE_FLASH_DURATION
from casefile.engine.choices import ChoiceResolver
from casefile.engine.script import Action, DialogueStep, Effect, Script
from casefile.engine.surface import CONTINUE, DIALOGUE_TEXT, ENTER_HINT, Control

if TYPE_CHECKING:
    from casefile.audio.gateway import AudioGateway
    from casefile.engine.reveal import TextReveal

logger = logging.getLogger(__name__)


class SequencerState(Enum):
    IDLE = auto()
    TYPING = auto()
    WAITING_FOR_INPUT = auto()
    WAITING_FOR_CHOICE = auto()
    SUB_SEQUENCE = auto()
    COMPLETE = auto()


class Flow(Enum):
    ADVANCE = auto()
    WAIT = auto()
    STOP = auto()


Handler = Callable[[DialogueStep], Awaitable[Flow]]


def apply_effect(panel, effect: Effect | None) -> None:
    if effect is Effect.SHAKE_FLASH:
        panel.pulse("shake", SHAKE_FLASH_DURATION)
        panel.pulse("flash", SHAKE_FLASH_DURATION)
    elif effect is Effect.SHAKE:
        panel.pulse("shake", SHAKE_FLASH_DURATION)
    elif effect is Effect.FLASH:
        panel.pulse("flash", FLASH_ONLY_DURATION)


class Sequencer:
    """Walks a ``Script`` with a per-screen handler table."""

    def __init__(
        self,
        name: str,
        reveal: "TextReveal",
        audio: "AudioGateway",
        handlers: Mapping[Action, Handler] | None = None,
        *,
        target: str = DIALOGUE_TEXT,
        pitch_for: Callable[[DialogueStep], str] | None = None,
        before_step: Callable[[DialogueStep], None] | None = None,
    ) -> None:
        self.name = name
        self.reveal = reveal
        self.panel = reveal.panel
        self.flags = reveal.flags
        self.audio = audio
        self.handlers: dict[Action, Handler] = dict(handlers or {})
        self.target = target
        self.pitch_for = pitch_for or (lambda step: step.pitch or "normal")
        self.before_step = before_step
        self.choices = ChoiceResolver(self.panel, audio)

        self.state = SequencerState.IDLE
        self.cursor = 0
        self.depth = 0
        self._input: asyncio.Future[None] | None = None

    # ── Running ─────────────────────────────────────────────────────
    async def run(self, script: Script) -> bool:
        """Play *script* from the top.  ``False`` means a step stopped it."""
        self.cursor = 0
        self.depth = 0
        self.state = SequencerState.IDLE
        completed = await self._walk(script)
        self.state = SequencerState.COMPLETE if completed else SequencerState.IDLE
        logger.debug("[%s] Script %s at step %d", self.name, "finished" if completed else "stopped", self.cursor)
        return completed

    async def run_nested(self, steps: Script) -> bool:
        self.depth += 1
        self.state = SequencerState.SUB_SEQUENCE
        try:
            return await self._walk(steps)
        finally:
            self.depth -= 1
            self._settle()

    async def _walk(self, script: Script) -> bool:
        top = self.depth == 0
        index = 0
        while index < len(script):
            if top:
                self.cursor = index
            step = script[index]
            if self.before_step is not None:
                self.before_step(step)

            flow = await self.process(step)
            if flow is Flow.STOP:
                return False
            if flow is Flow.WAIT:
                upcoming = script[index + 1] if index + 1 < len(script) else None
                if upcoming is not None and upcoming.action is Action.CHOICE and not upcoming.text:
                    index += 1
                    if top:
                        self.cursor = index
                    if not await self.offer_choices(upcoming):
                        return False
                else:
                    await self.wait_for_input()
            index += 1

        if top:
            self.cursor = len(script)
        return True

    async def process(self, step: DialogueStep) -> Flow:
        handler = self.handlers.get(step.action)
        if handler is not None:
            return await handler(step)
        if step.action is Action.CHOICE or step.has_choices:
            return Flow.ADVANCE if await self.resolve_choice(step) else Flow.STOP
        if step.action is Action.CONTINUE_BUTTON:
            await self.say_step(step)
            await self.wait_for_button(step.button_text or "Continue")
            return Flow.ADVANCE
        if step.text:
            await self.say_step(step)
            return Flow.WAIT
        logger.debug("[%s] Ignoring %s step without text", self.name, step.action.value)
        return Flow.ADVANCE

    # ── Primitives ──────────────────────────────────────────────────
    async def say_step(self, step: DialogueStep, *, sound: bool = True) -> None:
        """Fire the step's sound and effect, then type its text."""
        if sound and step.sound:
            self.audio.play_sfx(step.sound)
        apply_effect(self.panel, step.effect)
        if step.text:
            await self.say(step.text, loud=step.loud, speaker=step.speaker, pitch=self.pitch_for(step))

    async def say(self, text: str, *, loud: bool = False, speaker: str | None = None,
                  pitch: str = "normal") -> None:
        self.state = SequencerState.TYPING
        try:
            await self.reveal.reveal(text, self.target, loud=loud, speaker=speaker, pitch=pitch)
        finally:
            self._settle()

    async def say_line(self, text: str) -> None:
        await self.say(text)

    async def wait_for_input(self) -> None:
        self._input = asyncio.get_running_loop().create_future()
        self.state = SequencerState.WAITING_FOR_INPUT
        self.panel.show(ENTER_HINT)
        try:
            await self._input
        finally:
            self._input = None
            self.panel.hide(ENTER_HINT)
            self._settle()

    async def wait_for_button(self, label: str, group: str = CONTINUE) -> None:
        pressed: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def press() -> None:
            if pressed.done():
                return
            self.audio.play_sfx("click")
            self.panel.clear_controls(group)
            pressed.set_result(None)

        self.state = SequencerState.WAITING_FOR_CHOICE
        self.panel.set_controls(group, [Control(key="continue", label=label, on_click=press)])
        try:
            await pressed
        finally:
            self.panel.clear_controls(group)
            self._settle()

    async def resolve_choice(self, step: DialogueStep) -> bool:
        """Type the prompt (if any), then offer the step's options."""
        if step.text:
            await self.say_step(step)
        return await self.offer_choices(step)

    async def offer_choices(self, step: DialogueStep) -> bool:
        self.state = SequencerState.WAITING_FOR_CHOICE
        try:
            index = await self.choices.present(step.choices, step.hovers)
        finally:
            self._settle()
        logger.debug("[%s] Picked %r", self.name, step.choices[index])
        closing = step.button_labels[index] if index < len(step.button_labels) else None
        return await self.choices.resolve(step.responses[index], self, closing)

    # ── Input ───────────────────────────────────────────────────────
    def advance(self) -> bool:
        """Release a pending input wait.  Returns whether anything happened."""
        match self.state:
            case SequencerState.WAITING_FOR_INPUT if not self.flags.typing:
                self._settle()
                self.audio.play_sfx("click")
                self.panel.hide(ENTER_HINT)
                if self._input is not None and not self._input.done():
                    self._input.set_result(None)
                return True
            case _:
                return False

    @property
    def waiting_for_input(self) -> bool:
        return self.state is SequencerState.WAITING_FOR_INPUT

    # ── Lifecycle ───────────────────────────────────────────────────
    def _settle(self) -> None:
        self.state = SequencerState.SUB_SEQUENCE if self.depth else SequencerState.IDLE

    def reset(self) -> None:
        if self._input is not None and not self._input.done():
            self._input.cancel()
        self._input = None
        self.state = SequencerState.IDLE
        self.cursor = 0
        self.depth = 0
