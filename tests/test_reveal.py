from __future__ import annotations

import asyncio
import random

from casefile.audio.voice import is_voiced, tone_for
from casefile.core.constants import (
    DELAY_COMMA,
    DELAY_DEFAULT,
    DELAY_ELLIPSIS_DASH,
    DELAY_SENTENCE_END,
    PITCH_MULTIPLIERS,
    VOICE_VOLUME_LOUD,
    VOICE_VOLUME_NORMAL,
)
from casefile.engine.reveal import delay_for, is_shouty
from casefile.engine.surface import ACTION, DIALOGUE_TEXT, LOUD


# ── Pure helpers ────────────────────────────────────────────────────
def test_shouty_lines() -> None:
    assert is_shouty("PAY ATTENTION!")
    assert is_shouty("Stop!")
    assert is_shouty("the FBI knows")
    assert not is_shouty("A perfectly calm sentence.")
    assert not is_shouty("...")


def test_punctuation_pacing() -> None:
    assert delay_for(".") == DELAY_SENTENCE_END
    assert delay_for("?") == DELAY_SENTENCE_END
    assert delay_for(",") == DELAY_COMMA
    assert delay_for("…") == DELAY_ELLIPSIS_DASH
    assert delay_for("—") == DELAY_ELLIPSIS_DASH
    assert delay_for("a") == DELAY_DEFAULT


def test_only_ascii_letters_are_voiced() -> None:
    assert is_voiced("a") and is_voiced("Z")
    assert not is_voiced(" ")
    assert not is_voiced("!")
    assert not is_voiced("é")


def test_tone_follows_the_alphabet_regardless_of_case() -> None:
    rng_a, rng_b = random.Random(1), random.Random(1)
    lower = tone_for("m", False, "normal", rng_a)
    upper = tone_for("M", False, "normal", rng_b)
    assert lower == upper
    assert tone_for("?", False, "normal", random.Random(1)) is None


def test_pitch_profile_scales_the_tone() -> None:
    low = tone_for("a", False, "low", random.Random(3))
    high = tone_for("a", False, "high", random.Random(3))
    assert low.frequency < high.frequency
    assert PITCH_MULTIPLIERS["low"] < PITCH_MULTIPLIERS["high"]


def test_loud_tones_are_louder() -> None:
    assert tone_for("b", True, "normal", random.Random(0)).volume == VOICE_VOLUME_LOUD
    assert tone_for("b", False, "normal", random.Random(0)).volume == VOICE_VOLUME_NORMAL


def test_alien_voice_is_buzzy() -> None:
    spec = tone_for("g", False, "alien", random.Random(0))
    assert spec.waveform == "sawtooth"
    assert spec.highpass is not None


# ── Reveal ──────────────────────────────────────────────────────────
def test_reveal_types_the_whole_line(reveal, panel, voice) -> None:
    asyncio.run(reveal.reveal("Hi there, cadet."))

    assert panel.text(DIALOGUE_TEXT) == "Hi there, cadet."
    assert voice.text == "Hitherecadet"
    assert reveal.flags.typing is False


def test_stage_directions_are_not_voiced(reveal, panel, voice) -> None:
    asyncio.run(reveal.reveal("Well *sips tea* fine."))

    assert voice.text == "Wellfine"
    action = [span.text for span in panel.spans(DIALOGUE_TEXT) if ACTION in span.styles]
    assert "".join(action) == "*sips tea*"


def test_shouty_line_is_drawn_and_voiced_loud(reveal, panel, voice) -> None:
    asyncio.run(reveal.reveal("NO!"))

    assert all(loud for _, loud, _ in voice.emitted)
    assert all(LOUD in span.styles for span in panel.spans(DIALOGUE_TEXT))
    assert "shake" not in panel.effects


def test_explicit_loud_shakes_and_flashes(reveal, panel) -> None:
    asyncio.run(reveal.reveal("quiet words", loud=True))

    assert "shake" in panel.effects and "flash" in panel.effects


def test_skip_leaves_partial_text(reveal, panel) -> None:
    async def scenario() -> None:
        task = asyncio.create_task(reveal.reveal("A long line that will be cut short."))
        for _ in range(3):
            await asyncio.sleep(0)
        reveal.flags.skip = True
        await task

    asyncio.run(scenario())

    shown = panel.text(DIALOGUE_TEXT)
    assert 0 < len(shown) < len("A long line that will be cut short.")
    assert reveal.flags.typing is False


def test_newer_reveal_supersedes_older(reveal, panel) -> None:
    async def scenario() -> None:
        first = asyncio.create_task(reveal.reveal("First line that keeps going."))
        await asyncio.sleep(0)
        await reveal.reveal("Second.")
        await first

    asyncio.run(scenario())

    assert panel.text(DIALOGUE_TEXT) == "Second."
