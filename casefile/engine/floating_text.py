"""
Who Is Daphne? - Floating Words
================================
Ambient word clouds: fears drifting round the edges of the screen during
the fear sequence, the trait cloud in the identify grid, affirmations in
the finale.

A ``FloatingText`` owns its spawn task and every removal timer it
schedules.  ``stop()`` stops new words; ``clear()`` also fades the ones
on screen and removes them a second later; ``dispose()`` drops
everything at once.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import random
from dataclasses import dataclass
from typing import Sequence

from casefile.core.constants import (
    FLOATING_CLEAR_FADE,
    FLOATING_LEFT_BAND,
    FLOATING_REMOVE_GRACE,
    FLOATING_RIGHT_BAND,
    FLOATING_Y_BAND,
)
from casefile.core.session import Pacing
from casefile.engine.surface import FloatingWord, Panel

logger = logging.getLogger(__name__)

_word_ids = itertools.count(1)


@dataclass(frozen=True)
class FloatingOptions:
    variant: str = "normal"
    interval: int = 800
    duration: int = 3000
    loop: bool = False
    min_size: float = 1.0
    max_size: float = 2.5
    min_opacity: float = 0.2
    max_opacity: float = 0.5


# ── Presets ─────────────────────────────────────────────────────────
NORMAL = FloatingOptions()
FEAR_CLOUD = FloatingOptions(
    variant="negative", interval=1000, duration=5000, loop=True,
    min_size=1.2, max_size=2.5, min_opacity=0.25, max_opacity=0.5,
)
TRAIT_CLOUD = FloatingOptions(
    variant="soft", interval=800, duration=5000, loop=False,
    min_size=1.5, max_size=3.2, min_opacity=0.12, max_opacity=0.35,
)
AFFIRMATION_CLOUD = FloatingOptions(
    variant="soft", interval=600, duration=5000, loop=True,
    min_size=1.0, max_size=2.0, min_opacity=0.2, max_opacity=0.45,
)


class FloatingText:
    """Spawns *words* into ``panel.floating`` on a fixed interval."""

    def __init__(
        self,
        panel: Panel,
        words: Sequence[str],
        options: FloatingOptions = NORMAL,
        rng: random.Random | None = None,
        pacing: Pacing | None = None,
    ) -> None:
        self.panel = panel
        self.words = list(words)
        self.options = options
        self.rng = rng or random.Random()
        self.pacing = pacing or Pacing()
        self.is_running = False
        self.spawned = 0
        self._index = 0
        self._task: asyncio.Task[None] | None = None
        self._timers: dict[int, asyncio.TimerHandle] = {}
        self._owned: set[int] = set()

    def start(self) -> "FloatingText":
        if not self.words:
            return self
        self.is_running = True
        self._spawn()
        if self.is_running:
            self._task = asyncio.get_running_loop().create_task(self._spawn_loop())
        return self

    async def _spawn_loop(self) -> None:
        while self.is_running:
            await self.pacing.sleep(self.options.interval)
            if not self.is_running:
                break
            self._spawn()

    def _spawn(self) -> None:
        word = self.words[self._index]
        self._index += 1
        if self._index >= len(self.words):
            if self.options.loop:
                self._index = 0
            else:
                self.is_running = False

        opts = self.options
        if self.rng.random() > 0.5:
            x = self.rng.uniform(*FLOATING_LEFT_BAND)
        else:
            x = self.rng.uniform(*FLOATING_RIGHT_BAND)
        floating = FloatingWord(
            id=next(_word_ids),
            text=word,
            x=x,
            y=self.rng.uniform(*FLOATING_Y_BAND),
            size=self.rng.uniform(opts.min_size, opts.max_size),
            opacity=self.rng.uniform(opts.min_opacity, opts.max_opacity),
            color=opts.variant,
        )
        self.panel.floating[floating.id] = floating
        self._owned.add(floating.id)
        self.spawned += 1
        self._schedule_removal(floating.id, opts.duration + FLOATING_REMOVE_GRACE)

    def _schedule_removal(self, word_id: int, ms: float) -> None:
        """One pending removal per word; a later schedule replaces the earlier one."""
        previous = self._timers.pop(word_id, None)
        if previous is not None:
            previous.cancel()
        loop = asyncio.get_running_loop()
        self._timers[word_id] = loop.call_later(self.pacing.seconds(ms), self._remove, word_id)

    def _remove(self, word_id: int) -> None:
        self._timers.pop(word_id, None)
        self.panel.floating.pop(word_id, None)
        self._owned.discard(word_id)

    # ── Controller ──────────────────────────────────────────────────
    def stop(self) -> None:
        """Stop spawning; words already on screen finish their own life."""
        self.is_running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def clear(self) -> None:
        """Stop, fade every word this cloud spawned, then remove them."""
        self.stop()
        for word in self.live_words:
            word.fading = True
            self._schedule_removal(word.id, FLOATING_CLEAR_FADE)

    def dispose(self) -> None:
        self.stop()
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        for wid in self._owned:
            self.panel.floating.pop(wid, None)
        self._owned.clear()

    @property
    def live_words(self) -> list[FloatingWord]:
        return [self.panel.floating[w] for w in self._owned if w in self.panel.floating]
