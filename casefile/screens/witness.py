"""
Who Is Daphne? - Witness Reports Screen
========================================
An intro, then a list of witnesses to interview one at a time.  Each
witness brings a portrait, optionally their own music and voice, and a
few theatrical exits: spinning, flying off in a helicopter, beaming up
to a spaceship, vanishing with a snap.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from casefile.core.constants import PORTRAIT_MOL, PORTRAIT_MOL_SURPRISED
from casefile.core.screen_router import ScreenId
from casefile.engine.script import Action, DialogueStep
from casefile.engine.sequencer import Flow, Sequencer
from casefile.engine.surface import (
    BACK,
    CHOICES,
    CONTINUE,
    DIALOGUE_TEXT,
    ITEMS,
    MOL,
    PORTRAIT,
    SCREEN,
    Control,
)
from casefile.screens.base import Screen

if TYPE_CHECKING:
    from casefile.engine.content import Witness
    from casefile.engine.story import Story

logger = logging.getLogger(__name__)

SELECT_FIRST = "Select a witness to interview."
SELECT_ANOTHER = "Select another witness to interview."
ALL_INTERVIEWED = "All witnesses have been interviewed. Return to the menu to continue."
ALREADY_INTERVIEWED = "You've already interviewed all witnesses."

ALIEN_WITNESS = "glorp"
PORTRAIT_MOTION = ("spinning", "fly_away", "vanish", "wide")


class WitnessScreen(Screen):
    screen_id = ScreenId.WITNESS
    shows_leads = True

    def __init__(self, story: "Story") -> None:
        super().__init__(story)
        self.sequencer = Sequencer(
            "Witness",
            self.reveal,
            self.audio,
            {
                Action.SHOW_IMAGE: self._show_image,
                Action.SPIN: self._spin,
                Action.FLY_AWAY: self._fly_away,
                Action.BEAM_UP: self._beam_up,
                Action.VANISH: self._vanish,
            },
            pitch_for=self.pitch_for,
            before_step=self._before_step,
        )
        self.intro_complete = False
        self.current: Witness | None = None

    # ── Lifecycle ───────────────────────────────────────────────────
    def enter(self) -> None:
        self.audio.play_sfx("papers")
        self._hide_portrait()
        self._build_list()
        self.set_list_enabled(False)
        self.show_back_button(on_back=self._leave)

        if not self.intro_complete:
            self.spawn(self._play_intro())
        elif self.progress.all_witnesses_complete:
            self.set_list_enabled(True)
            self.panel.set_text(DIALOGUE_TEXT, ALREADY_INTERVIEWED)
        else:
            self.set_list_enabled(True)
            self.panel.set_text(DIALOGUE_TEXT, SELECT_FIRST)

    def exit(self) -> None:
        super().exit()
        self.sequencer.reset()
        self.current = None
        self._hide_portrait()
        self.panel.set_flag(SCREEN, "alien", False)
        self.panel.set_image(MOL, PORTRAIT_MOL)
        for group in (ITEMS, BACK, CHOICES, CONTINUE):
            self.panel.clear_controls(group)

    def reset(self) -> None:
        super().reset()
        self.sequencer.reset()
        self.intro_complete = False
        self.current = None

    def _leave(self) -> None:
        self.audio.switch_to_main_music()

    # ── List ────────────────────────────────────────────────────────
    def _build_list(self) -> None:
        controls = [
            Control(key=w.id, label=w.label, on_click=partial(self.select, w.id))
            for w in self.content.witnesses.witnesses
        ]
        self.panel.set_controls(ITEMS, controls)

    def set_list_enabled(self, enabled: bool) -> None:
        for control in self.panel.controls.get(ITEMS, ()):
            done = self.progress.is_witness_complete(control.key)
            control.enabled = enabled and not done
            if done:
                control.flags.add("completed")

    async def _play_intro(self) -> None:
        if not await self.sequencer.run(self.content.witnesses.intro):
            return
        self.intro_complete = True
        self.set_list_enabled(True)
        self.panel.set_text(DIALOGUE_TEXT, SELECT_FIRST)

    # ── Interview ───────────────────────────────────────────────────
    def select(self, witness_id: str) -> bool:
        witness = self.content.witnesses.find(witness_id)
        if witness is None:
            logger.debug("[Witness] Unknown witness %r", witness_id)
            return False
        if self.current is not None or self.progress.is_witness_complete(witness_id):
            return False

        self.audio.play_sfx("click")
        self.current = witness
        self.set_list_enabled(False)
        self.panel.hide(ITEMS)

        self._hide_portrait()
        if not witness.delay_image:
            self._show_portrait(witness)
        if witness.music:
            self.audio.switch_to_witness_music(witness.id)
        if witness.id == ALIEN_WITNESS:
            self.panel.set_flag(SCREEN, "alien")

        logger.info("[Witness] Interviewing %s", witness.id)
        self.spawn(self._interview(witness))
        return True

    async def _interview(self, witness: "Witness") -> None:
        if await self.sequencer.run(witness.dialogue):
            await self.finish(witness)

    async def finish(self, witness: "Witness") -> None:
        self.audio.switch_to_main_music()
        for lead in witness.leads:
            await self.add_lead(lead)
        self.progress.mark_witness_complete(witness.id)

        self.current = None
        self._hide_portrait()
        self.panel.set_flag(SCREEN, "alien", False)
        self.panel.show(ITEMS)
        self.set_list_enabled(True)
        if self.progress.all_witnesses_complete:
            self.panel.set_text(DIALOGUE_TEXT, ALL_INTERVIEWED)
        else:
            self.panel.set_text(DIALOGUE_TEXT, SELECT_ANOTHER)

    def pitch_for(self, step: DialogueStep) -> str:
        if step.pitch:
            return step.pitch
        if self.current is not None and step.speaker == self.current.id:
            return self.current.pitch
        return "normal"

    # ── Portrait ────────────────────────────────────────────────────
    def _show_portrait(self, witness: "Witness") -> None:
        for flag in PORTRAIT_MOTION:
            self.panel.set_flag(PORTRAIT, flag, False)
        if witness.image:
            self.panel.set_image(PORTRAIT, witness.image)
        self.panel.set_flag(PORTRAIT, "wide", witness.wide)
        self.panel.show(PORTRAIT)

    def _hide_portrait(self) -> None:
        self.panel.hide(PORTRAIT)
        for flag in PORTRAIT_MOTION:
            self.panel.set_flag(PORTRAIT, flag, False)

    # ── Step handlers ───────────────────────────────────────────────
    def _before_step(self, step: DialogueStep) -> None:
        self.panel.set_image(MOL, PORTRAIT_MOL)
        if step.change_image:
            self.panel.set_image(PORTRAIT, step.change_image)

    async def _show_image(self, step: DialogueStep) -> Flow:
        if self.current is not None:
            self._show_portrait(self.current)
        return Flow.ADVANCE

    async def _spin(self, step: DialogueStep) -> Flow:
        if step.sound:
            self.audio.play_sfx(step.sound)
        self.panel.set_flag(PORTRAIT, "spinning")
        if step.text:
            await self.sequencer.say_step(step, sound=False)
        await self.sequencer.wait_for_button(step.button_text or "Continue")
        self.panel.set_flag(PORTRAIT, "spinning", False)
        return Flow.ADVANCE

    async def _fly_away(self, step: DialogueStep) -> Flow:
        self.audio.play_sfx("helicopter")
        self.panel.set_flag(PORTRAIT, "fly_away")
        self.panel.set_image(MOL, PORTRAIT_MOL_SURPRISED)
        self.panel.clear_text(DIALOGUE_TEXT)
        await self.sequencer.wait_for_button(step.button_text or "Continue")
        self.panel.hide(PORTRAIT)
        self.panel.set_image(MOL, PORTRAIT_MOL)
        return Flow.ADVANCE

    async def _beam_up(self, step: DialogueStep) -> Flow:
        if step.text:
            await self.sequencer.say_step(step, sound=False)
        self.audio.play_sfx("spaceship")
        self.panel.set_flag(PORTRAIT, "fly_away")
        self.panel.set_image(MOL, PORTRAIT_MOL_SURPRISED)
        if step.has_choices:
            return Flow.ADVANCE if await self.sequencer.offer_choices(step) else Flow.STOP
        return Flow.WAIT

    async def _vanish(self, step: DialogueStep) -> Flow:
        if step.text:
            await self.sequencer.say_step(step, sound=False)
        if step.sound:
            self.audio.play_sfx(step.sound)
        self.panel.set_flag(PORTRAIT, "vanish")
        await self.sequencer.wait_for_button(step.button_text or "Continue")
        self.panel.hide(PORTRAIT)
        return Flow.ADVANCE

    def advance(self) -> bool:
        return self.sequencer.advance()
