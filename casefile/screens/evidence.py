"""
Who Is Daphne? - Physical Evidence Screen
==========================================
An intro briefing the first time round, then a grid of evidence items.
Each item plays its own script; finishing it adds the item's lead and
greys the item out.  Mol's portrait reacts to a few lines (jam, pretzels,
a surprisingly tactical manuscript) and resets before the next one.

Leads that change after examination (the manuscript going missing) are
renamed in place when the player leaves through the Back button.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from casefile.core.constants import (
    PORTRAIT_MOL,
    PORTRAIT_MOL_JAM,
    PORTRAIT_MOL_PRETZEL,
    PORTRAIT_MOL_SURPRISED,
)
from casefile.core.screen_router import ScreenId
from casefile.engine.script import DialogueStep
from casefile.engine.sequencer import Sequencer
from casefile.engine.surface import BACK, CHOICES, CONTINUE, DIALOGUE_TEXT, ITEMS, MOL, Control
from casefile.screens.base import Screen

if TYPE_CHECKING:
    from casefile.engine.content import EvidenceItem
    from casefile.engine.story import Story

logger = logging.getLogger(__name__)

SELECT_FIRST = "Select an evidence item to examine."
SELECT_ANOTHER = "Select another evidence item to examine."
ALL_EXAMINED = "All evidence has been examined. Return to the menu to continue."
ALREADY_EXAMINED = "You've already examined all the evidence."

JAM_CUE = "strawberry jam"
SURPRISE_CUE = "tactical positioning described here is"


class EvidenceScreen(Screen):
    screen_id = ScreenId.EVIDENCE
    shows_leads = True

    def __init__(self, story: "Story") -> None:
        super().__init__(story)
        self.sequencer = Sequencer("Evidence", self.reveal, self.audio, before_step=self._react)
        self.intro_complete = False
        self.current: EvidenceItem | None = None
        self._sprite: str | None = None

    # ── Lifecycle ───────────────────────────────────────────────────
    def enter(self) -> None:
        self.audio.play_sfx("papers")
        self.panel.set_image(MOL, PORTRAIT_MOL)
        self._build_grid()
        self.set_grid_enabled(False)
        self.show_back_button(on_back=self.apply_renames)

        if not self.intro_complete:
            self.spawn(self._play_intro())
        elif self.progress.all_evidence_complete:
            self.set_grid_enabled(True)
            self.panel.set_text(DIALOGUE_TEXT, ALREADY_EXAMINED)
        else:
            self.set_grid_enabled(True)
            self.panel.set_text(DIALOGUE_TEXT, SELECT_FIRST)

    def exit(self) -> None:
        super().exit()
        self.sequencer.reset()
        self.current = None
        self._reset_sprite()
        for group in (ITEMS, BACK, CHOICES, CONTINUE):
            self.panel.clear_controls(group)

    def reset(self) -> None:
        super().reset()
        self.sequencer.reset()
        self.intro_complete = False
        self.current = None
        self._sprite = None

    # ── Grid ────────────────────────────────────────────────────────
    def _build_grid(self) -> None:
        controls = [
            Control(key=item.id, label=item.label, on_click=partial(self.select, item.id))
            for item in self.content.evidence.items
        ]
        self.panel.set_controls(ITEMS, controls)

    def set_grid_enabled(self, enabled: bool) -> None:
        for control in self.panel.controls.get(ITEMS, ()):
            done = self.progress.is_evidence_complete(control.key)
            control.enabled = enabled and not done
            if done:
                control.flags.add("completed")

    # ── Intro ───────────────────────────────────────────────────────
    async def _play_intro(self) -> None:
        if not await self.sequencer.run(self.content.evidence.intro):
            return
        self._reset_sprite()
        self.intro_complete = True
        self.set_grid_enabled(True)
        self.panel.set_text(DIALOGUE_TEXT, SELECT_FIRST)

    # ── Items ───────────────────────────────────────────────────────
    def select(self, evidence_id: str) -> bool:
        item = self.content.evidence.find(evidence_id)
        if item is None:
            logger.debug("[Evidence] Unknown item %r", evidence_id)
            return False
        if self.current is not None or self.progress.is_evidence_complete(evidence_id):
            return False
        self.audio.play_sfx("click")
        self.current = item
        self.set_grid_enabled(False)
        self.spawn(self._examine(item))
        return True

    async def _examine(self, item: "EvidenceItem") -> None:
        if await self.sequencer.run(item.dialogue):
            await self.finish(item)

    async def finish(self, item: "EvidenceItem") -> None:
        self._reset_sprite()
        await self.add_lead(item.lead_text)
        if item.lead_text_after and self.progress.has_lead(item.lead_text):
            self.progress.schedule_rename(item.lead_text, item.lead_text_after)
        self.progress.mark_evidence_complete(item.id)
        logger.info("[Evidence] Examined %s", item.id)

        self.current = None
        self.set_grid_enabled(True)
        self.panel.set_text(DIALOGUE_TEXT, ALL_EXAMINED if self.progress.all_evidence_complete else SELECT_ANOTHER)

    def apply_renames(self) -> None:
        renamed = self.progress.apply_pending_renames()
        if renamed:
            self.redraw_leads()
            logger.debug("[Evidence] Renamed leads %s", [index for index, _ in renamed])

    # ── Portrait reactions ──────────────────────────────────────────
    def _react(self, step: DialogueStep) -> None:
        self._reset_sprite()
        text = step.text or ""
        if not self.intro_complete and JAM_CUE in text:
            self.audio.play_sfx("sparkle")
            self._set_sprite(PORTRAIT_MOL_JAM)
        if step.sound == "munch":
            self.audio.play_sfx("sparkle")
            self._set_sprite(PORTRAIT_MOL_PRETZEL)
        if SURPRISE_CUE in text:
            self.audio.play_sfx("surprise")
            self._set_sprite(PORTRAIT_MOL_SURPRISED)

    def _set_sprite(self, sprite: str) -> None:
        self._sprite = sprite
        self.panel.set_image(MOL, sprite)

    def _reset_sprite(self) -> None:
        if self._sprite is not None:
            self._sprite = None
            self.panel.set_image(MOL, PORTRAIT_MOL)

    def advance(self) -> bool:
        return self.sequencer.advance()
