"""
Who Is Daphne? - Procedural Audio
==================================
Every sound the game needs can be synthesised, so a checkout with no
audio assets still plays.  Samples are generated as floats in -1..1,
packed into 16-bit mono WAV bytes and handed to ``pygame.mixer.Sound``.
"""

from __future__ import annotations

import io
import math
import random
import wave
from array import array
from typing import Callable, Iterable

from casefile.core.constants import VOICE_SAMPLE_RATE

Generator = Callable[[float, int, int], float]


# ── WAV packing ─────────────────────────────────────────────────────
def encode_wav(sample_rate: int, values: Iterable[float]) -> bytes:
    """Pack float samples (-1..1) into mono 16-bit WAV bytes."""
    samples = array("h")
    for v in values:
        v = max(-1.0, min(1.0, v))
        samples.append(int(v * 32767))
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(samples.tobytes())
    buf.seek(0)
    return buf.read()


def render(sample_rate: int, duration_sec: float, generator: Generator) -> list[float]:
    n_samples = int(sample_rate * duration_sec)
    return [generator(i / sample_rate, i, n_samples) for i in range(n_samples)]


def make_wav_bytes(sample_rate: int, duration_sec: float, generator: Generator) -> bytes:
    """Generate WAV file bytes from a sample generator (yields -1..1 floats)."""
    return encode_wav(sample_rate, render(sample_rate, duration_sec, generator))


# ── Oscillators & filters ───────────────────────────────────────────
def square(freq: float, t: float) -> float:
    return 1.0 if math.sin(2 * math.pi * freq * t) >= 0 else -1.0


def sawtooth(freq: float, t: float) -> float:
    phase = (t * freq) % 1.0
    return 2.0 * phase - 1.0


def exp_ramp(start: float, end: float, t: float, duration: float) -> float:
    """Exponential ramp from *start* to *end* over *duration* seconds."""
    if t >= duration:
        return end
    return start * (end / start) ** (t / duration)


def highpass(values: list[float], cutoff: float, sample_rate: int) -> list[float]:
    """One-pole high-pass filter."""
    if not values:
        return []
    rc = 1.0 / (2 * math.pi * cutoff)
    dt = 1.0 / sample_rate
    alpha = rc / (rc + dt)
    out = [values[0]]
    for i in range(1, len(values)):
        out.append(alpha * (out[i - 1] + values[i] - values[i - 1]))
    return out


# ── Sound effects ───────────────────────────────────────────────────
def _noise(seed: int) -> Callable[[], float]:
    rng = random.Random(seed)
    return lambda: rng.uniform(-1.0, 1.0)


def _blip(freq: float, length: float, level: float = 0.5, decay: float = 30.0) -> Generator:
    def gen(t: float, i: int, n: int) -> float:
        if t > length:
            return 0.0
        return level * math.sin(2 * math.pi * freq * t) * math.exp(-t * decay)

    return gen


def _sweep(f0: float, f1: float, length: float, level: float = 0.4) -> Generator:
    def gen(t: float, i: int, n: int) -> float:
        progress = min(1.0, t / length)
        freq = f0 + (f1 - f0) * progress
        env = math.sin(math.pi * progress)
        return level * env * math.sin(2 * math.pi * freq * t)

    return gen


def _noise_burst(length: float, level: float, bursts: int = 1, seed: int = 7) -> Generator:
    noise = _noise(seed)
    period = length / bursts

    def gen(t: float, i: int, n: int) -> float:
        local = t % period
        return level * noise() * math.exp(-local * 25)

    return gen


def _arpeggio(freqs: tuple[float, ...], step: float, level: float = 0.35) -> Generator:
    def gen(t: float, i: int, n: int) -> float:
        value = 0.0
        for k, freq in enumerate(freqs):
            start = k * step
            if t >= start:
                local = t - start
                value += level * math.sin(2 * math.pi * freq * local) * math.exp(-local * 6)
        return value / max(1, len(freqs) // 2)

    return gen


def _helicopter(length: float) -> Generator:
    noise = _noise(11)

    def gen(t: float, i: int, n: int) -> float:
        chop = 0.5 + 0.5 * math.sin(2 * math.pi * 14 * t)
        fade = 1.0 - t / length
        return 0.35 * chop * fade * noise()

    return gen


def _warble(base: float, length: float) -> Generator:
    def gen(t: float, i: int, n: int) -> float:
        freq = base + 180 * math.sin(2 * math.pi * 9 * t)
        return 0.3 * (1.0 - t / length) * sawtooth(freq, t)

    return gen


SFX_RECIPES: dict[str, tuple[float, Generator]] = {
    "click": (0.06, _blip(1400, 0.05, 0.4, 60)),
    "papers": (0.35, _noise_burst(0.35, 0.25, bursts=2, seed=3)),
    "dice": (0.5, _noise_burst(0.5, 0.35, bursts=5, seed=5)),
    "harp": (1.4, _arpeggio((392.0, 494.0, 587.0, 784.0, 988.0), 0.09)),
    "munch": (0.45, _noise_burst(0.45, 0.3, bursts=3, seed=9)),
    "clack": (0.12, _blip(320, 0.1, 0.5, 45)),
    "sparkle": (0.9, _arpeggio((1318.0, 1568.0, 2093.0, 2637.0), 0.07, 0.25)),
    "surprise": (0.4, _sweep(300, 900, 0.4)),
    "squeak": (0.25, _sweep(1800, 2600, 0.25, 0.3)),
    "helicopter": (1.6, _helicopter(1.6)),
    "snap": (0.1, _noise_burst(0.1, 0.6, seed=13)),
    "slurp": (0.6, _sweep(700, 250, 0.6, 0.3)),
    "alien": (0.7, _warble(620, 0.7)),
    "spaceship": (1.8, _sweep(120, 1400, 1.8, 0.3)),
}


def sfx_wav(name: str, sample_rate: int = VOICE_SAMPLE_RATE) -> bytes | None:
    recipe = SFX_RECIPES.get(name)
    if recipe is None:
        return None
    duration, generator = recipe
    return make_wav_bytes(sample_rate, duration, generator)


# ── Music loops ─────────────────────────────────────────────────────
TRACK_CHORDS: dict[str, tuple[float, ...]] = {
    "bgm": (110.0, 164.8, 220.0),
    "bgm-cait": (261.6, 329.6, 392.0),
    "bgm-glorp": (146.8, 207.7, 277.2),
    "bgm-couple": (98.0, 116.5, 146.8),
    "bgm-final": (130.8, 196.0, 246.9, 329.6),
}


def track_wav(name: str, sample_rate: int = VOICE_SAMPLE_RATE, seconds: float = 4.0) -> bytes | None:
    """A soft, seamlessly looping drone for *name*."""
    chord = TRACK_CHORDS.get(name)
    if chord is None:
        return None

    def gen(t: float, i: int, n: int) -> float:
        swell = 0.75 + 0.25 * math.sin(2 * math.pi * t / seconds)
        return 0.12 * swell * sum(math.sin(2 * math.pi * f * t) for f in chord) / len(chord)

    return make_wav_bytes(sample_rate, seconds, gen)
