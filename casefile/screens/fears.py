"""
Who Is Daphne? - The Shadows
=============================
The fear sequence of the identify screen.

Clusters of ugly words are typed into an overlay one after another while
the screen drains of colour and the music sinks.  Mol's lines between
clusters play on their own, no input needed.  When the last cluster is
up, crossing out begins:

* only words of the *active* cluster respond to clicks;
* a word flagged ``doubleClick`` needs two clicks (single strike, then
  double strike) before it counts;
* the first resolved word of a cluster starts Mol's reaction typing,
  which keeps going while the player crosses the rest;
* once every word of the active cluster is resolved the colour comes
  back a little and either the next cluster becomes active or a new one
  is typed in.

After the last cluster the conclusion lines play and the sequence hands
over to the dreams.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

from casefile.audio.voice import is_voiced
from casefile.core.constants import (
    DEPRESSION_STAGE_ONE_VOLUME,
    FEAR_CLUSTER_SETTLE,
    FEAR_CONCLUSION_DELAY,
    FEAR_CONCLUSION_PAUSE,
    FEAR_DREAMS_DELAY,
    FEAR_FADE_WORDS,
    FEAR_INTRO_PAUSE,
    FEAR_LETTER_DELAY,
    FEAR_LINE_PAUSE,
    FEAR_NEXT_CLUSTER_PAUSE,
    FEAR_RECOVERY_PAUSE,
    FEAR_TYPING_POLL,
    FEAR_VOICE_PITCH,
    FEAR_WORD_GAP,
    RECOVERED_MUSIC_VOLUME,
)
from casefile.engine.floating_text import FEAR_CLOUD, FloatingText
from casefile.engine.script import Action
from casefile.engine.surface import DIALOGUE_TEXT, DOUBLE_STRIKE, FEAR_WORDS, SCREEN, STRIKE, Control

if TYPE_CHECKING:
    from casefile.engine.content import FearContent
    from casefile.screens.identify import IdentifyScreen

logger = logging.getLogger(__name__)


class DepressionStage(IntEnum):
    """How far the colour has drained.  Only ever rises while clusters appear."""

    NONE = 0
    GREY = 1
    DIM = 2
    DARK = 3
    VOID = 4


class RecoveryStage(IntEnum):
    """How much colour has come back while crossing out."""

    NONE = 0
    FIRST_LIGHT = 1
    WARMING = 2
    BRIGHT = 3
    FULL = 4


_MOOD_FLAGS = [f"depression-{n}" for n in range(1, 5)] + [f"recovery-{n}" for n in range(1, 5)]


@dataclass
class FearWord:
    key: str
    text: str
    cluster: int
    double: bool = False
    clicks: int = 0

    @property
    def resolved(self) -> bool:
        return self.clicks >= (2 if self.double else 1)


class FearSequence:
    def __init__(self, screen: "IdentifyScreen", content: "FearContent") -> None:
        self.screen = screen
        self.content = content
        self.panel = screen.panel
        self.audio = screen.audio
        self.reveal = screen.reveal
        self.pacing = screen.pacing

        self.depression = DepressionStage.NONE
        self.recovery = RecoveryStage.NONE
        self.words: dict[str, FearWord] = {}
        self.active_cluster = 0
        self.crossing_enabled = False
        self.crossed_clusters = 0
        self.additional_index = 0
        self.response_started = False
        self.cloud: FloatingText | None = None
        self._separators = 0
        self._finished = asyncio.Event()

    # ── Mood ────────────────────────────────────────────────────────
    def _clear_mood(self) -> None:
        for flag in _MOOD_FLAGS:
            self.panel.set_flag(SCREEN, flag, False)

    def set_depression(self, stage: int) -> None:
        self._clear_mood()
        self.depression = DepressionStage(max(0, min(4, stage)))
        if self.depression:
            self.panel.set_flag(SCREEN, f"depression-{int(self.depression)}")
        if self.depression == DepressionStage.GREY:
            self.audio.set_volume(DEPRESSION_STAGE_ONE_VOLUME)
        elif self.depression >= DepressionStage.DIM:
            self.audio.set_volume(0.0)

    def set_recovery(self, stage: int) -> None:
        self._clear_mood()
        self.recovery = RecoveryStage(max(0, min(4, stage)))
        if self.recovery:
            self.panel.set_flag(SCREEN, f"recovery-{int(self.recovery)}")

    # ── Running ─────────────────────────────────────────────────────
    async def run(self) -> None:
        self.panel.clear_controls(FEAR_WORDS)
        self.cloud = self.screen.float_words(self.content.all_words, FEAR_CLOUD)

        await self._play_intro()
        await self._show_clusters()
        if not self.crossing_enabled:
            self.enable_crossing(0)
        await self._finished.wait()
        await self._play_conclusion()

    async def _play_intro(self) -> None:
        for step in self.content.intro:
            await self.reveal.reveal(step.text or "", DIALOGUE_TEXT, loud=step.loud)
            if step.action is Action.SHOW_FEARS:
                self.panel.show(FEAR_WORDS)
                return
            await self.pacing.sleep(FEAR_INTRO_PAUSE)
        self.panel.show(FEAR_WORDS)

    async def _show_clusters(self) -> None:
        clusters = self.content.clusters
        for index, cluster in enumerate(clusters):
            self.set_depression(cluster.depression_stage)
            for word in cluster.words:
                await self._type_word(word, index, double=(word == cluster.double_click))
                await self.pacing.sleep(FEAR_WORD_GAP)
            await self.pacing.sleep(FEAR_CLUSTER_SETTLE)

            for step in cluster.after_appear:
                await self.reveal.reveal(step.text or "", DIALOGUE_TEXT, loud=step.loud)
                if step.action is Action.SHOW_NEXT_CLUSTER:
                    if index + 1 < len(clusters):
                        await self.pacing.sleep(FEAR_NEXT_CLUSTER_PAUSE)
                    break
                if step.action is Action.ENABLE_CROSSING:
                    self.enable_crossing(0)
                    return
                await self.pacing.sleep(FEAR_LINE_PAUSE)

    async def _type_word(self, text: str, cluster: int, double: bool = False) -> FearWord:
        key = f"{cluster}:{sum(1 for w in self.words.values() if w.cluster == cluster)}"
        word = FearWord(key=key, text=text, cluster=cluster, double=double)
        self.words[key] = word
        control = Control(key=key, label="", enabled=False, on_click=lambda: self.cross(key))
        self._add_control(control)

        for i, char in enumerate(text):
            control.label = text[: i + 1]
            if self.depression and is_voiced(char):
                self.reveal.voice.emit(char, False, FEAR_VOICE_PITCH)
            await self.pacing.sleep(FEAR_LETTER_DELAY)
        return word

    def _add_control(self, control: Control) -> None:
        self.panel.controls.setdefault(FEAR_WORDS, []).append(control)
        self.panel.show(FEAR_WORDS)

    # ── Crossing out ────────────────────────────────────────────────
    def enable_crossing(self, cluster: int) -> None:
        self.active_cluster = cluster
        self.crossing_enabled = True
        for word in self.words.values():
            control = self.panel.control(FEAR_WORDS, word.key)
            if control is None:
                continue
            live = word.cluster == cluster and not word.resolved
            control.enabled = live
            if live:
                control.flags.add("clickable")
        logger.debug("[Fears] Cluster %d is live", cluster)

    def cluster_words(self, cluster: int) -> list[FearWord]:
        return [w for w in self.words.values() if w.cluster == cluster]

    def cross(self, key: str) -> bool:
        """One click on a fear word.  Returns whether it did anything."""
        word = self.words.get(key)
        if word is None or not self.crossing_enabled:
            return False
        if word.cluster != self.active_cluster or word.resolved:
            return False

        word.clicks += 1
        self.audio.play_sfx("click")
        control = self.panel.control(FEAR_WORDS, key)
        if control is not None:
            control.flags.add(STRIKE)
            if word.double and word.clicks >= 2:
                control.flags.add(DOUBLE_STRIKE)
        if not word.resolved:
            return True

        if control is not None:
            control.enabled = False
            control.flags.discard("clickable")

        if not self.response_started:
            self.response_started = True
            line = self._current_response()
            if line:
                self.screen.spawn(self.reveal.reveal(line, DIALOGUE_TEXT))

        if all(w.resolved for w in self.cluster_words(self.active_cluster)):
            self.crossing_enabled = False
            self.screen.spawn(self._cluster_crossed())
        return True

    def _current_response(self) -> str:
        if self.crossed_clusters < len(self.content.cross_out_responses):
            return self.content.cross_out_responses[self.crossed_clusters].dialogue
        if self.additional_index < len(self.content.additional_clusters):
            return self.content.additional_clusters[self.additional_index].cross_out_response
        return ""

    async def _cluster_crossed(self) -> None:
        while self.screen.flags.typing:
            await self.pacing.sleep(FEAR_TYPING_POLL)

        responses = self.content.cross_out_responses
        additional = self.content.additional_clusters
        self.response_started = False

        if self.crossed_clusters < len(responses):
            response = responses[self.crossed_clusters]
            if response.recovery_stage:
                self.set_recovery(response.recovery_stage)
            self.crossed_clusters += 1
            if response.show_more_words and self.additional_index < len(additional):
                await self._show_additional()
                return
            next_cluster = self.active_cluster + 1
            if self.cluster_words(next_cluster):
                self.enable_crossing(next_cluster)
                return
        elif self.additional_index < len(additional):
            extra = additional[self.additional_index]
            if extra.recovery_stage:
                self.set_recovery(extra.recovery_stage)
            self.additional_index += 1
            if self.additional_index < len(additional):
                await self._show_additional()
                return

        await self.pacing.sleep(FEAR_CONCLUSION_DELAY)
        self._finished.set()

    async def _show_additional(self) -> None:
        extra = self.content.additional_clusters[self.additional_index]
        cluster = len(self.content.clusters) + self.additional_index
        self.active_cluster = cluster

        self._separators += 1
        self._add_control(Control(key=f"separator:{self._separators}", label="", enabled=False,
                                  flags={"separator"}))
        for text in extra.words:
            await self._type_word(text, cluster)
            await self.pacing.sleep(FEAR_WORD_GAP)
        self.enable_crossing(cluster)

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    # ── Conclusion ──────────────────────────────────────────────────
    async def _play_conclusion(self) -> None:
        if self.cloud is not None:
            self.cloud.stop()

        for step in self.content.conclusion:
            await self.reveal.reveal(step.text or "", DIALOGUE_TEXT, loud=step.loud)
            if step.action is Action.FADE_WORDS:
                self.panel.set_flag(FEAR_WORDS, "fading")
                await self.pacing.sleep(FEAR_FADE_WORDS)
                self.panel.clear_controls(FEAR_WORDS)
                self.panel.set_flag(FEAR_WORDS, "fading", False)
            elif step.action is Action.FULL_RECOVERY:
                self.set_recovery(RecoveryStage.FULL)
                if self.cloud is not None:
                    self.cloud.clear()
                self.audio.set_volume(RECOVERED_MUSIC_VOLUME)
                await self.pacing.sleep(FEAR_RECOVERY_PAUSE)
            elif step.action is Action.SHOW_DREAMS:
                await self.pacing.sleep(FEAR_DREAMS_DELAY)
                return
            else:
                await self.pacing.sleep(FEAR_CONCLUSION_PAUSE)

        self.audio.set_volume(RECOVERED_MUSIC_VOLUME)

    def reset(self) -> None:
        self._clear_mood()
        self.panel.clear_controls(FEAR_WORDS)
