"""
Who Is Daphne? - Menu Idle Chatter
===================================
Mol mutters at the cadet while the menu is open: a speech bubble with a
random line every so often, a "Give coffee" button under the coffee
lines, a happy portrait and a reaction when coffee arrives.

Every timer here belongs to the ``MenuIdle`` instance.  The menu screen
calls ``start()`` on enter and ``stop()`` on exit; ``stop()`` cancels
all of them so nothing fires on another screen.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Callable, Coroutine

from casefile.core.constants import (
    COFFEE_COOLDOWN,
    COFFEE_REACTION_HIDE,
    COFFEE_RESUME_DELAY,
    COFFEE_SLURP_DELAY,
    IDLE_FIRST_DELAY,
    IDLE_HIDE_COFFEE,
    IDLE_HIDE_NORMAL,
    IDLE_INTERVAL,
    IDLE_MAX_PICK_ATTEMPTS,
    PORTRAIT_MOL,
    PORTRAIT_MOL_COFFEE,
    SPECIAL_PORTRAIT_CHANCE,
)
from casefile.core.session import Pacing
from casefile.engine.surface import COFFEE, IDLE_BUBBLE, MOL, Control, Panel

if TYPE_CHECKING:
    from casefile.audio.gateway import AudioGateway
    from casefile.engine.content import MenuContent

logger = logging.getLogger(__name__)


class MenuIdle:
    """Owner of the menu's chatter, hide and coffee timers."""

    def __init__(
        self,
        panel: Panel,
        audio: "AudioGateway",
        content: "MenuContent",
        rng: random.Random | None = None,
        pacing: Pacing | None = None,
        witnesses_done: Callable[[], bool] = lambda: False,
    ) -> None:
        self.panel = panel
        self.audio = audio
        self.content = content
        self.rng = rng or random.Random()
        self.pacing = pacing or Pacing()
        self.witnesses_done = witnesses_done

        self.last_index: int | None = None
        self.coffee_cooldown = 0
        self.happy = False
        self.is_running = False

        self._chatter: asyncio.Task[None] | None = None
        self._hide: asyncio.Task[None] | None = None
        self._others: set[asyncio.Task[None]] = set()

    # ── Picking ─────────────────────────────────────────────────────
    def is_coffee_line(self, index: int | None) -> bool:
        return index is not None and index in self.content.coffee_lines

    def pick_line(self) -> str:
        lines = self.content.idle_lines
        attempts = 0
        while True:
            index = self.rng.randrange(len(lines))
            attempts += 1
            if attempts > IDLE_MAX_PICK_ATTEMPTS:
                break
            repeat = index == self.last_index and len(lines) > 1
            thirsty = self.coffee_cooldown > 0 and self.is_coffee_line(index)
            if not (repeat or thirsty):
                break
        self.last_index = index
        if self.coffee_cooldown > 0:
            self.coffee_cooldown -= 1
        return lines[index]

    # ── Showing ─────────────────────────────────────────────────────
    def show_line(self) -> str:
        self._cancel(self._hide)
        self.happy = False

        line = self.pick_line()
        self.panel.set_text(IDLE_BUBBLE, line)

        coffee = self.is_coffee_line(self.last_index)
        if coffee:
            self.panel.set_controls(COFFEE, [Control(key="coffee", label="Give coffee", on_click=self.give_coffee)])
            self.panel.set_image(MOL, PORTRAIT_MOL)
        else:
            self.panel.clear_controls(COFFEE)
            specials = self.content.special_portraits
            if specials and self.witnesses_done() and self.rng.random() < SPECIAL_PORTRAIT_CHANCE:
                self.panel.set_image(MOL, self.rng.choice(specials))
            else:
                self.panel.set_image(MOL, PORTRAIT_MOL)

        self.panel.show(IDLE_BUBBLE)
        self._hide = self._spawn(self._hide_after(IDLE_HIDE_COFFEE if coffee else IDLE_HIDE_NORMAL))
        logger.debug("[Menu] Idle line %d", self.last_index)
        return line

    def give_coffee(self) -> str:
        self._cancel(self._hide)
        self._cancel(self._chatter)

        self.audio.play_sfx("sparkle")
        self._spawn(self._slurp())

        self.happy = True
        self.panel.set_image(MOL, PORTRAIT_MOL_COFFEE)
        self.coffee_cooldown = COFFEE_COOLDOWN

        reaction = self.rng.choice(self.content.coffee_reactions)
        self.panel.set_text(IDLE_BUBBLE, reaction)
        self.panel.clear_controls(COFFEE)

        self._hide = self._spawn(self._hide_after(COFFEE_REACTION_HIDE))
        self._chatter = self._spawn(self._chatter_loop(COFFEE_RESUME_DELAY + IDLE_INTERVAL))
        return reaction

    # ── Timers ──────────────────────────────────────────────────────
    async def _chatter_loop(self, first_delay: float) -> None:
        await self.pacing.sleep(first_delay)
        while True:
            self.show_line()
            await self.pacing.sleep(IDLE_INTERVAL)

    async def _hide_after(self, delay: float) -> None:
        await self.pacing.sleep(delay)
        self.panel.hide(IDLE_BUBBLE)
        self.panel.clear_controls(COFFEE)

    async def _slurp(self) -> None:
        await self.pacing.sleep(COFFEE_SLURP_DELAY)
        self.audio.play_sfx("slurp")

    def _spawn(self, coro: Coroutine[None, None, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._others.add(task)
        task.add_done_callback(self._others.discard)
        return task

    @staticmethod
    def _cancel(task: asyncio.Task[None] | None) -> None:
        if task is not None and not task.done():
            task.cancel()

    # ── Lifecycle ───────────────────────────────────────────────────
    def start(self) -> None:
        if self.is_running:
            return
        self.is_running = True
        self._chatter = self._spawn(self._chatter_loop(IDLE_FIRST_DELAY))

    def stop(self) -> None:
        self.is_running = False
        for task in list(self._others):
            task.cancel()
        self._others.clear()
        self._chatter = None
        self._hide = None
        self.panel.hide(IDLE_BUBBLE)
        self.panel.clear_controls(COFFEE)
        self.happy = False
        self.panel.set_image(MOL, PORTRAIT_MOL)

    @property
    def pending_tasks(self) -> int:
        return sum(1 for task in self._others if not task.done())

    def reset(self) -> None:
        self.stop()
        self.last_index = None
        self.coffee_cooldown = 0
