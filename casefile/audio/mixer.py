"""
Who Is Daphne? - Pygame Mixer Backend
======================================
Loads ``{assets_dir}/audio/{name}.ogg|.wav|.mp3`` when present and falls
back to the procedural sounds otherwise.  Each music track gets its own
``Sound`` playing on a looping channel so several tracks can be
registered (and faded) independently.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pygame

from casefile.audio.gateway import AudioGateway, NullHandle, NullLoader, Playable
from casefile.audio.procedural import sfx_wav, track_wav
from casefile.core.config import Settings
from casefile.core.constants import AUDIO_EXTENSIONS, VOICE_SAMPLE_RATE
from casefile.core.session import Pacing

logger = logging.getLogger(__name__)


class TrackHandle:
    """A looping music track on its own channel."""

    def __init__(self, sound: pygame.mixer.Sound, gain: float = 1.0) -> None:
        self._sound = sound
        self._gain = gain
        self._channel: pygame.mixer.Channel | None = None
        self._paused = False
        self._volume = 0.0

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value
        try:
            self._sound.set_volume(value * self._gain)
        except pygame.error as exc:
            logger.debug("[Audio] set_volume failed: %s", exc)

    def play(self, loop: bool = False) -> None:
        try:
            if self._channel is not None and self._paused:
                self._channel.unpause()
            elif self._channel is None or not self._channel.get_busy():
                self._channel = self._sound.play(loops=-1 if loop else 0)
            self._paused = False
        except pygame.error as exc:
            logger.warning("[Audio] Track playback failed: %s", exc)

    def pause(self) -> None:
        if self._channel is not None:
            self._channel.pause()
            self._paused = True

    def rewind(self) -> None:
        if self._channel is not None:
            self._channel.stop()
        self._channel = None
        self._paused = False


class EffectHandle:
    """A one-shot effect; every ``play`` grabs a fresh channel."""

    def __init__(self, sound: pygame.mixer.Sound, gain: float = 1.0) -> None:
        self._sound = sound
        self._sound.set_volume(gain)
        self.volume = gain

    def play(self, loop: bool = False) -> None:
        try:
            self._sound.play()
        except pygame.error as exc:
            logger.debug("[Audio] Effect playback failed: %s", exc)

    def pause(self) -> None:
        return None

    def rewind(self) -> None:
        return None


class PygameLoader:
    def __init__(self, assets_dir: str = "", music_gain: float = 1.0, sfx_gain: float = 1.0) -> None:
        self._audio_dir = Path(assets_dir) / "audio" if assets_dir else None
        self._music_gain = music_gain
        self._sfx_gain = sfx_gain

    def _from_file(self, name: str) -> pygame.mixer.Sound | None:
        if self._audio_dir is None:
            return None
        for ext in AUDIO_EXTENSIONS:
            path = self._audio_dir / f"{name}{ext}"
            if path.is_file():
                try:
                    return pygame.mixer.Sound(str(path))
                except pygame.error as exc:
                    logger.warning("[Audio] Could not load %s: %s", path, exc)
        return None

    def _load(self, name: str, fallback: bytes | None) -> pygame.mixer.Sound | None:
        sound = self._from_file(name)
        if sound is None and fallback is not None:
            sound = pygame.mixer.Sound(file=io.BytesIO(fallback))
        return sound

    def track(self, name: str) -> Playable:
        sound = self._load(name, track_wav(name))
        return TrackHandle(sound, self._music_gain) if sound else NullHandle()

    def sfx(self, name: str) -> Playable:
        sound = self._load(name, sfx_wav(name))
        return EffectHandle(sound, self._sfx_gain) if sound else NullHandle()


def create_audio(settings: Settings, pacing: Pacing) -> AudioGateway:
    """Build the gateway for *settings*; a mixer that will not start yields silence."""
    try:
        if not pygame.mixer.get_init():
            pygame.mixer.init(frequency=VOICE_SAMPLE_RATE, size=-16, channels=1, buffer=512)
        pygame.mixer.set_num_channels(32)
    except pygame.error as exc:
        logger.warning("[Audio] Mixer unavailable, running silent: %s", exc)
        return AudioGateway(NullLoader(), pacing)
    loader = PygameLoader(settings.assets_dir, settings.music_volume, settings.sfx_volume)
    return AudioGateway(loader, pacing)
