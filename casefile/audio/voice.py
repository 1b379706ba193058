"""
Who Is Daphne? - Synthesized Voice
===================================
The chattering "animalese" voice: every revealed letter emits one short
tone whose pitch follows the letter's place in the alphabet, scaled by
the speaker's pitch profile.

``tone_for`` is the pure part (what to play).  ``VoiceSynth`` renders a
``ToneSpec`` into a pygame ``Sound`` and fires it on a free channel; tones
overlap freely.
"""

from __future__ import annotations

import io
import logging
import random
from dataclasses import dataclass
from typing import Protocol

import pygame

from casefile.audio.procedural import encode_wav, exp_ramp, highpass, render, sawtooth, square
from casefile.core.constants import (
    ALIEN_BASE_MULTIPLIER,
    ALIEN_HIGHPASS_HZ,
    ALIEN_JITTER,
    ALIEN_LETTER_DURATION,
    ALIEN_VARIATION_RANGE,
    ALIEN_VARIATION_SPREAD,
    PITCH_MULTIPLIERS,
    VOICE_BASE_FREQUENCY,
    VOICE_DECAY_FLOOR,
    VOICE_JITTER,
    VOICE_LETTER_DURATION,
    VOICE_LETTER_SPREAD,
    VOICE_LOUD_FACTOR,
    VOICE_SAMPLE_RATE,
    VOICE_VOLUME_ALIEN,
    VOICE_VOLUME_LOUD,
    VOICE_VOLUME_NORMAL,
)

logger = logging.getLogger(__name__)

ALIEN = "alien"


@dataclass(frozen=True)
class ToneSpec:
    frequency: float
    volume: float
    duration: float  # seconds
    waveform: str  # "square" | "sawtooth"
    highpass: float | None = None


def is_voiced(char: str) -> bool:
    return len(char) == 1 and char.isascii() and char.isalpha()


def tone_for(char: str, loud: bool, profile: str, rng: random.Random) -> ToneSpec | None:
    """Work out the tone for one revealed character, or ``None`` for non-letters."""
    if not is_voiced(char):
        return None

    position = (ord(char.lower()) - ord("a")) / 26
    volume = VOICE_VOLUME_LOUD if loud else (VOICE_VOLUME_ALIEN if profile == ALIEN else VOICE_VOLUME_NORMAL)

    if profile == ALIEN:
        # Flat, buzzy, fast: fixed high base and almost no intonation.
        base = VOICE_BASE_FREQUENCY * ALIEN_BASE_MULTIPLIER
        variation = position * ALIEN_VARIATION_SPREAD * ALIEN_VARIATION_RANGE
        return ToneSpec(
            frequency=base + variation + rng.random() * ALIEN_JITTER,
            volume=volume,
            duration=ALIEN_LETTER_DURATION,
            waveform="sawtooth",
            highpass=ALIEN_HIGHPASS_HZ,
        )

    multiplier = PITCH_MULTIPLIERS.get(profile, 1.0)
    base = VOICE_BASE_FREQUENCY * (VOICE_LOUD_FACTOR if loud else 1.0) * multiplier
    variation = position * VOICE_LETTER_SPREAD * multiplier
    jitter = rng.uniform(-VOICE_JITTER, VOICE_JITTER)
    return ToneSpec(
        frequency=base + variation + jitter,
        volume=volume,
        duration=VOICE_LETTER_DURATION,
        waveform="square",
    )


def tone_wav(spec: ToneSpec, sample_rate: int = VOICE_SAMPLE_RATE) -> bytes:
    wave_fn = sawtooth if spec.waveform == "sawtooth" else square

    def gen(t: float, i: int, n: int) -> float:
        return wave_fn(spec.frequency, t) * exp_ramp(spec.volume, VOICE_DECAY_FLOOR, t, spec.duration)

    values = render(sample_rate, spec.duration, gen)
    if spec.highpass:
        values = highpass(values, spec.highpass, sample_rate)
    return encode_wav(sample_rate, values)


# ── Emitters ────────────────────────────────────────────────────────
class Voice(Protocol):
    def emit(self, char: str, loud: bool, profile: str) -> None: ...


class SilentVoice:
    def emit(self, char: str, loud: bool, profile: str) -> None:
        return None


class VoiceSynth:
    """Fire-and-forget letter tones through the pygame mixer."""

    def __init__(self, rng: random.Random | None = None, volume: float = 1.0, enabled: bool = True) -> None:
        self._rng = rng or random.Random()
        self.volume = volume
        self.enabled = enabled

    def emit(self, char: str, loud: bool, profile: str) -> None:
        if not self.enabled or not pygame.mixer.get_init():
            return
        spec = tone_for(char, loud, profile, self._rng)
        if spec is None:
            return
        try:
            sound = pygame.mixer.Sound(file=io.BytesIO(tone_wav(spec)))
            sound.set_volume(self.volume)
            sound.play()
        except pygame.error as exc:
            logger.debug("[Voice] Tone dropped: %s", exc)
