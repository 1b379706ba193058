"""
Who Is Daphne? - Leads Screen
==============================
Mol reads the dossier aloud.  Leads are written into the persistent
list on the right as they come up; the hair colour argument gets its
own coloured, struck-through treatment; the Fritz Kola bottle appears
as an overlay for a couple of lines.

Finishing the briefing marks the leads as complete, which is one of
the three conditions for "Identify Suspect".
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from casefile.core.constants import (
    DELAY_DEFAULT,
    OVERLAY_KOLA,
    STRIKETHROUGH_DELAY,
)
from casefile.core.screen_router import ScreenId
from casefile.engine.script import Action, DialogueStep
from casefile.engine.sequencer import Flow, Sequencer
from casefile.engine.surface import BACK, CHOICES, CONTINUE, DIALOGUE_TEXT, OVERLAY_IMAGE, STRIKE
from casefile.screens.base import Screen

if TYPE_CHECKING:
    from casefile.engine.story import Story

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "You've already reviewed the leads."
END_OF_LEADS = "That's all for now."

# (text, colour, struck through)
HAIR_CHAOS: tuple[tuple[str, str, bool], ...] = (
    ("Pink", "pink", True),
    ("Blue", "blue", False),
    ("Blonde", "blonde", False),
    ("brown", "brown", True),
    ("Red??", "red", False),
)


def hair_style(color: str | None) -> str:
    return f"hair:{color or 'brown'}"


class LeadsScreen(Screen):
    screen_id = ScreenId.LEADS
    shows_leads = True

    def __init__(self, story: "Story") -> None:
        super().__init__(story)
        self.sequencer = Sequencer(
            "Leads",
            self.reveal,
            self.audio,
            {
                Action.ADD_LEAD: self._add_lead,
                Action.COLORED_TEXT: self._colored_text,
                Action.HAIR_CHAOS: self._hair_chaos,
                Action.SHOW_KOLA: self._show_kola,
                Action.HIDE_KOLA: self._hide_kola,
                Action.END_LEADS: self._end_leads,
            },
        )

    def enter(self) -> None:
        self.audio.play_sfx("papers")
        if self.progress.leads_complete:
            self.panel.set_text(DIALOGUE_TEXT, ALREADY_REVIEWED)
            self.show_back_button()
            return
        self.spawn(self.sequencer.run(self.content.leads))

    # ── Handlers ────────────────────────────────────────────────────
    async def _add_lead(self, step: DialogueStep) -> Flow:
        await self.add_lead(step.lead or "")
        return Flow.ADVANCE

    async def _colored_text(self, step: DialogueStep) -> Flow:
        text = step.text or ""
        style = hair_style(step.color)
        self.panel.clear_text(DIALOGUE_TEXT)
        await self.reveal.type_voiced(text, DIALOGUE_TEXT, {style}, letter_delay=DELAY_DEFAULT)
        if step.strikethrough:
            await self.pacing.sleep(STRIKETHROUGH_DELAY)
            self.panel.set_text(DIALOGUE_TEXT, text, {style, STRIKE})
        return Flow.WAIT

    async def _hair_chaos(self, step: DialogueStep) -> Flow:
        self.panel.clear_text(DIALOGUE_TEXT)
        for text, color, struck in HAIR_CHAOS:
            style = hair_style(color)
            self.panel.append_text(DIALOGUE_TEXT, text, {style})
            await self.pacing.sleep(400)
            if struck:
                await self.pacing.sleep(300)
                last = self.panel.texts[DIALOGUE_TEXT][-1]
                last.styles = frozenset({style, STRIKE})
            self.panel.append_text(DIALOGUE_TEXT, " ")
            await self.pacing.sleep(200)
        return Flow.WAIT

    async def _show_kola(self, step: DialogueStep) -> Flow:
        self.audio.play_sfx("papers")
        self.panel.set_image(OVERLAY_IMAGE, OVERLAY_KOLA)
        self.panel.show(OVERLAY_IMAGE)
        return Flow.ADVANCE

    async def _hide_kola(self, step: DialogueStep) -> Flow:
        self.audio.play_sfx("papers")
        self.panel.hide(OVERLAY_IMAGE)
        return Flow.ADVANCE

    async def _end_leads(self, step: DialogueStep) -> Flow:
        await self.sequencer.say(step.text or END_OF_LEADS)
        self.progress.leads_complete = True
        logger.info("[Leads] Briefing complete (%d leads)", len(self.progress.leads))
        self.show_back_button()
        return Flow.STOP

    # ── Input & lifecycle ───────────────────────────────────────────
    def advance(self) -> bool:
        return self.sequencer.advance()

    def exit(self) -> None:
        super().exit()
        self.sequencer.reset()
        self.panel.hide(OVERLAY_IMAGE)
        for group in (BACK, CHOICES, CONTINUE):
            self.panel.clear_controls(group)

    def reset(self) -> None:
        super().reset()
        self.sequencer.reset()
