"""
Who Is Daphne? - Identify Suspect Screen
=========================================
The last act.  It runs as a one-way chain of phases:

    INTRO           Mol's opening, ends by showing the grid
    GRID            five items; each plays a short script and floats its trait
    AFTER_EVIDENCE  the turn, ends on ``start_fears`` inside a choice
    FEARS           see ``casefile.screens.fears``
    DREAMS          see ``casefile.screens.dreams``
    FINALE          see ``casefile.screens.finale``
    COMPLETE

Every phase is entered exactly once per visit; re-entering the screen
starts again from INTRO.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Sequence

from casefile.core.constants import (
    GRID_FADE,
    MUSIC_CHANGE_FADE,
    START_FEARS_DELAY,
    TRACK_FINAL,
    TRAIT_CLOUD_COPIES,
    TRAIT_REVEAL_DELAY,
    TRAIT_SETTLE_DELAY,
)
from casefile.core.screen_router import ScreenId
from casefile.engine.floating_text import TRAIT_CLOUD, FloatingOptions, FloatingText
from casefile.engine.script import Action, DialogueStep, Script
from casefile.engine.sequencer import Flow, Sequencer
from casefile.engine.surface import CHOICES, CONTINUE, DIALOGUE_TEXT, GRID, LEADS_LIST, SCREEN, Control
from casefile.screens.base import Screen
from casefile.screens.dreams import DreamSequence
from casefile.screens.fears import FearSequence
from casefile.screens.finale import FinaleSequence

if TYPE_CHECKING:
    from casefile.engine.content import IdentifyItem
    from casefile.engine.story import Story

logger = logging.getLogger(__name__)

SELECT_ANOTHER = "Select another item to examine."


class IdentifyPhase(Enum):
    INTRO = "intro"
    GRID = "grid"
    AFTER_EVIDENCE = "afterEvidence"
    FEARS = "fears"
    DREAMS = "dreams"
    FINALE = "finale"
    COMPLETE = "complete"


class IdentifyScreen(Screen):
    screen_id = ScreenId.IDENTIFY

    def __init__(self, story: "Story") -> None:
        super().__init__(story)
        self.data = self.content.identify
        self.sequencer = Sequencer(
            "Identify",
            self.reveal,
            self.audio,
            {
                Action.MUSIC_CHANGE: self._music_change,
                Action.SHOW_GRID: self._show_grid,
                Action.HIDE_GRID: self._hide_grid,
                Action.START_FEARS: self._start_fears,
            },
        )
        self.phase = IdentifyPhase.INTRO
        self.revealed: list[str] = []
        self.current: IdentifyItem | None = None
        self.fears: FearSequence | None = None
        self.dreams: DreamSequence | None = None
        self.finale: FinaleSequence | None = None
        self._clouds: list[FloatingText] = []

    # ── Lifecycle ───────────────────────────────────────────────────
    def enter(self) -> None:
        self._restart()
        self.spawn(self._play_segment(self.data.intro))

    def exit(self) -> None:
        super().exit()
        self.sequencer.reset()
        self._teardown()

    def reset(self) -> None:
        super().reset()
        self.sequencer.reset()
        self._teardown()
        self.phase = IdentifyPhase.INTRO
        self.revealed = []
        self.current = None

    def _restart(self) -> None:
        self.phase = IdentifyPhase.INTRO
        self.revealed = []
        self.current = None
        self.fears = FearSequence(self, self.data.fears)
        self.dreams = DreamSequence(self, self.data.dreams)
        self.finale = FinaleSequence(self, self.data.finale)

        self.panel.clear_text(DIALOGUE_TEXT)
        self.panel.hide(LEADS_LIST)
        controls = [
            Control(key=item.id, label=item.name, enabled=False, on_click=partial(self.select, item.id))
            for item in self.data.items
        ]
        self.panel.set_controls(GRID, controls)
        self.panel.hide(GRID)

    def _teardown(self) -> None:
        for cloud in self._clouds:
            cloud.dispose()
        self._clouds.clear()
        for sequence in (self.fears, self.dreams, self.finale):
            if sequence is not None:
                sequence.reset()
        self.panel.clear_controls(GRID)
        self.panel.set_flag(GRID, "fading", False)
        self.panel.set_flag(SCREEN, "finale", False)
        for group in (CHOICES, CONTINUE):
            self.panel.clear_controls(group)

    def float_words(self, words: Sequence[str], options: FloatingOptions) -> FloatingText:
        """Start a word cloud owned by this screen."""
        cloud = FloatingText(self.panel, words, options, self.story.rng, self.pacing).start()
        self._clouds.append(cloud)
        return cloud

    # ── Main script ─────────────────────────────────────────────────
    async def _play_segment(self, script: Script) -> None:
        await self.sequencer.run(script)
        if self.phase is IdentifyPhase.FEARS:
            await self._play_ending()

    async def _play_ending(self) -> None:
        logger.info("[Identify] Fears")
        await self.fears.run()
        self.phase = IdentifyPhase.DREAMS
        logger.info("[Identify] Dreams")
        await self.dreams.run()
        self.phase = IdentifyPhase.FINALE
        logger.info("[Identify] Finale")
        await self.finale.run()

    def finish_story(self) -> None:
        self.phase = IdentifyPhase.COMPLETE
        logger.info("[Identify] Story complete")
        self.go(ScreenId.END)

    async def _music_change(self, step: DialogueStep) -> Flow:
        self.spawn(self.audio.fade_to_track(TRACK_FINAL, MUSIC_CHANGE_FADE))
        self.panel.hide(LEADS_LIST)
        if step.text:
            await self.sequencer.say_step(step)
            return Flow.WAIT
        return Flow.ADVANCE

    async def _show_grid(self, step: DialogueStep) -> Flow:
        await self.sequencer.say_step(step)
        self.panel.set_flag(GRID, "fading", False)
        self.panel.show(GRID)
        self.phase = IdentifyPhase.GRID
        self.set_grid_enabled(True)
        return Flow.STOP

    async def _hide_grid(self, step: DialogueStep) -> Flow:
        await self.sequencer.say_step(step)
        self.panel.set_flag(GRID, "fading")
        await self.pacing.sleep(GRID_FADE)
        self.panel.hide(GRID)
        self.panel.set_flag(GRID, "fading", False)
        return Flow.WAIT

    async def _start_fears(self, step: DialogueStep) -> Flow:
        await self.sequencer.say_step(step)
        await self.pacing.sleep(START_FEARS_DELAY)
        self.phase = IdentifyPhase.FEARS
        return Flow.STOP

    # ── Evidence grid ───────────────────────────────────────────────
    def set_grid_enabled(self, enabled: bool) -> None:
        for control in self.panel.controls.get(GRID, ()):
            if control.key not in self.revealed:
                control.enabled = enabled

    def select(self, item_id: str) -> bool:
        item = self.data.find(item_id)
        if item is None:
            logger.debug("[Identify] Unknown item %r", item_id)
            return False
        if self.phase is not IdentifyPhase.GRID or self.current is not None or item_id in self.revealed:
            return False
        self.audio.play_sfx("click")
        self.current = item
        self.set_grid_enabled(False)
        self.spawn(self._examine(item))
        return True

    async def _examine(self, item: "IdentifyItem") -> None:
        if not await self.sequencer.run(item.dialogue):
            return

        cloud = self.float_words([item.trait] * TRAIT_CLOUD_COPIES, TRAIT_CLOUD)
        await self.pacing.sleep(TRAIT_REVEAL_DELAY)
        control = self.panel.control(GRID, item.id)
        if control is not None:
            control.label = item.trait
            control.flags.add("revealed")
        cloud.stop()
        await self.pacing.sleep(TRAIT_SETTLE_DELAY)

        if item.id not in self.revealed:
            self.revealed.append(item.id)
        self.current = None
        logger.debug("[Identify] Revealed %s (%d/%d)", item.trait, len(self.revealed), len(self.data.items))

        if self.all_revealed:
            self.panel.clear_text(DIALOGUE_TEXT)
            self.phase = IdentifyPhase.AFTER_EVIDENCE
            await self._play_segment(self.data.after_evidence)
        else:
            self.panel.set_text(DIALOGUE_TEXT, SELECT_ANOTHER)
            self.set_grid_enabled(True)

    @property
    def all_revealed(self) -> bool:
        return len(self.revealed) >= len(self.data.items)

    # ── Input ───────────────────────────────────────────────────────
    def advance(self) -> bool:
        return self.sequencer.advance()
