"""
Who Is Daphne? - Screen Base
=============================
Shared plumbing for every screen: access to the story's collaborators,
ownership of the asyncio tasks a screen starts, the leads list writer
and the "Back to Menu" button.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Coroutine

from casefile.core.screen_router import ScreenId
from casefile.engine.surface import BACK, LEADS_LIST, Control

if TYPE_CHECKING:
    from casefile.engine.story import Story

logger = logging.getLogger(__name__)


def lead_slot(index: int) -> str:
    """Panel text name of the *index*-th entry of the leads list."""
    return f"{LEADS_LIST}.{index}"


class Screen:
    screen_id: ScreenId
    shows_leads: bool = False

    def __init__(self, story: "Story") -> None:
        self.story = story
        self.panel = story.panel
        self.flags = story.flags
        self.pacing = story.pacing
        self.audio = story.audio
        self.reveal = story.reveal
        self.progress = story.progress
        self.content = story.content
        self._tasks: set[asyncio.Task[None]] = set()

    # ── Lifecycle ───────────────────────────────────────────────────
    def enter(self) -> None:
        return None

    def exit(self) -> None:
        self.cancel_tasks()

    def advance(self) -> bool:
        return False

    def skip(self) -> bool:
        return False

    def reset(self) -> None:
        self.cancel_tasks()

    # ── Owned tasks ─────────────────────────────────────────────────
    def spawn(self, coro: Coroutine[None, None, object]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("[%s] Screen task failed", self.screen_id.value, exc_info=exc)

    def cancel_tasks(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    # ── Shared widgets ──────────────────────────────────────────────
    def go(self, screen_id: ScreenId) -> None:
        self.story.router.show(screen_id)

    def show_back_button(self, label: str = "Back to Menu", on_back: Callable[[], None] | None = None) -> None:
        def press() -> None:
            self.audio.play_sfx("click")
            if on_back is not None:
                on_back()
            self.go(ScreenId.MENU)

        self.panel.set_controls(BACK, [Control(key="back", label=label, on_click=press)])

    async def add_lead(self, text: str) -> bool:
        """Append *text* to the leads list with the silent reveal; duplicates are skipped."""
        if not self.progress.add_lead(text):
            logger.debug("[Leads] Already listed: %s", text)
            return False
        index = len(self.progress.leads) - 1
        slot = lead_slot(index)
        self.panel.clear_text(slot)
        try:
            await self.reveal.type_silent(text, slot)
        finally:
            # An interrupted reveal still leaves the whole lead in its slot.
            if self.progress.leads[index:index + 1] == [text]:
                self.panel.set_text(slot, text)
        return True

    def redraw_leads(self) -> None:
        for index, text in enumerate(self.progress.leads):
            self.panel.set_text(lead_slot(index), text)
