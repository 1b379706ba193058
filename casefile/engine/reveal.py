"""
Who Is Daphne? - Text Reveal
=============================
Types a line into a panel text surface one character at a time.

* Punctuation sets the pace: long pauses after sentence ends, shorter
  after commas, dashes and ellipses.
* Every letter outside ``*stage directions*`` is voiced.
* Shouty lines (all caps, a ``!``, or three capitals in a row) are drawn
  and voiced loud; an explicit ``loud`` flag also shakes and flashes.
* Setting ``SessionFlags.skip`` stops the loop at the next character and
  leaves whatever was revealed on screen.  A newer reveal supersedes an
  older one the same way.
"""

from __future__ import annotations

import re
from typing import Iterable

from casefile.audio.voice import Voice, is_voiced
from casefile.core.constants import (
    DELAY_COMMA,
    DELAY_DEFAULT,
    DELAY_ELLIPSIS_DASH,
    DELAY_SENTENCE_END,
    DELAY_SILENT,
    EMPHASIS_MARKER,
    SHAKE_FLASH_DURATION,
)
from casefile.core.session import Pacing, SessionFlags
from casefile.engine.surface import ACTION, DIALOGUE_TEXT, LOUD, Panel

_CAPS_RUN = re.compile(r"[A-Z]{3,}")
_NON_LETTERS = re.compile(r"[^a-zA-Z]")


def is_shouty(text: str) -> bool:
    letters = _NON_LETTERS.sub("", text)
    all_caps = bool(letters) and letters == letters.upper()
    return all_caps or "!" in text or bool(_CAPS_RUN.search(text))


def delay_for(char: str) -> int:
    if char in ".!?":
        return DELAY_SENTENCE_END
    if char == ",":
        return DELAY_COMMA
    if char in "…—":
        return DELAY_ELLIPSIS_DASH
    return DELAY_DEFAULT


def speaker_style(speaker: str | None) -> str | None:
    if speaker and speaker != "mol":
        return f"speaker:{speaker}"
    return None


class TextReveal:
    """The typewriter shared by every screen."""

    def __init__(self, panel: Panel, flags: SessionFlags, pacing: Pacing, voice: Voice) -> None:
        self.panel = panel
        self.flags = flags
        self.pacing = pacing
        self.voice = voice
        self._generation = 0

    async def reveal(
        self,
        text: str,
        target: str = DIALOGUE_TEXT,
        *,
        loud: bool = False,
        speaker: str | None = None,
        pitch: str = "normal",
        styles: Iterable[str] = (),
        clear: bool = True,
    ) -> None:
        self._generation += 1
        generation = self._generation
        self.flags.typing = True
        self.flags.skip = False

        if clear:
            self.panel.clear_text(target)
        auto_loud = loud or is_shouty(text)
        if loud:
            self.panel.pulse("shake", SHAKE_FLASH_DURATION)
            self.panel.pulse("flash", SHAKE_FLASH_DURATION)

        base = set(styles)
        if auto_loud:
            base.add(LOUD)
        tag = speaker_style(speaker)
        if tag:
            base.add(tag)

        inside = False
        try:
            for char in text:
                if self.flags.skip or generation != self._generation:
                    break
                if char == EMPHASIS_MARKER:
                    inside = not inside
                span_styles = base | {ACTION} if inside or char == EMPHASIS_MARKER else base
                self.panel.append_text(target, char, span_styles)
                if not inside and is_voiced(char):
                    self.voice.emit(char, auto_loud, pitch)
                await self.pacing.sleep(delay_for(char))
        finally:
            # A newer reveal owns the flag once it has started.
            if generation == self._generation:
                self.flags.typing = False

    async def type_silent(self, text: str, target: str, styles: Iterable[str] = ()) -> None:
        """Fixed-pace, voiceless reveal used for the leads list."""
        styles = frozenset(styles)
        for char in text:
            self.panel.append_text(target, char, styles)
            await self.pacing.sleep(DELAY_SILENT)

    async def type_voiced(
        self,
        text: str,
        target: str,
        styles: Iterable[str] = (),
        pitch: str = "normal",
        letter_delay: int | None = None,
        voiced: bool = True,
    ) -> None:
        """Append *text* to *target* with voice but without the shouty rules.

        With ``letter_delay`` every character waits the same time; otherwise
        sentence ends and commas pause longer.
        """
        styles = frozenset(styles)
        for char in text:
            self.panel.append_text(target, char, styles)
            if voiced and is_voiced(char):
                self.voice.emit(char, False, pitch)
            if letter_delay is not None:
                await self.pacing.sleep(letter_delay)
            elif char in ".!?":
                await self.pacing.sleep(DELAY_SENTENCE_END)
            elif char == ",":
                await self.pacing.sleep(DELAY_COMMA)
            else:
                await self.pacing.sleep(DELAY_DEFAULT)
