"""
Who Is Daphne? - Audio Gateway
===============================
Named music tracks and one-shot effects behind one small object.

* At most one track is *current*; ``play_track`` pauses whatever was
  playing before.
* Effects are fire-and-forget and may overlap the music and each other.
* Fades step the volume in ``FADE_STEPS`` increments and are serialised
  with an ``asyncio.Lock`` so a screen-exit fade can never interleave
  with a screen-enter fade on the same track.
* Nothing here raises during playback.  Unknown names are ignored and
  the backend handles swallow their own errors.

The gateway is backend-agnostic: it drives ``Playable`` handles.  The
pygame handles live in ``casefile.audio.mixer``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from casefile.core.constants import (
    ALL_TRACKS,
    FADE_STEPS,
    FADE_TO_TRACK_DEFAULT,
    MAIN_MUSIC_VOLUME,
    SFX_NAMES,
    TRACK_DEFAULT_VOLUME,
    TRACK_MAIN,
    TRACK_REGISTER_VOLUME,
    WITNESS_MUSIC_VOLUME,
    WITNESS_TRACKS,
)
from casefile.core.session import Pacing

logger = logging.getLogger(__name__)


# ── Backend seam ────────────────────────────────────────────────────
class Playable(Protocol):
    volume: float

    def play(self, loop: bool = False) -> None: ...
    def pause(self) -> None: ...
    def rewind(self) -> None: ...


class AssetLoader(Protocol):
    def track(self, name: str) -> Playable: ...
    def sfx(self, name: str) -> Playable: ...


class NullHandle:
    """A handle that remembers its volume and does nothing else."""

    def __init__(self) -> None:
        self.volume = 0.0
        self.playing = False

    def play(self, loop: bool = False) -> None:
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def rewind(self) -> None:
        self.playing = False


class NullLoader:
    def track(self, name: str) -> Playable:
        return NullHandle()

    def sfx(self, name: str) -> Playable:
        return NullHandle()


@dataclass
class Track:
    name: str
    handle: Playable
    default_volume: float


# ── Gateway ─────────────────────────────────────────────────────────
class AudioGateway:
    """Track registry, current-track bookkeeping and serialised fades."""

    def __init__(self, loader: AssetLoader | None = None, pacing: Pacing | None = None) -> None:
        self._loader = loader or NullLoader()
        self._pacing = pacing or Pacing()
        self._tracks: dict[str, Track] = {}
        self._sfx: dict[str, Playable] = {}
        self._current: Track | None = None
        self._fade_lock = asyncio.Lock()
        self.current_witness: str | None = None

    # ── Registration ────────────────────────────────────────────────
    def register_track(self, name: str, handle: Playable, default_volume: float = TRACK_DEFAULT_VOLUME) -> None:
        self._tracks[name] = Track(name, handle, default_volume)

    def register_sfx(self, name: str, handle: Playable) -> None:
        self._sfx[name] = handle

    def register_defaults(self) -> None:
        """Register every track and effect the story uses, through the loader."""
        for name in ALL_TRACKS:
            self.register_track(name, self._loader.track(name), TRACK_REGISTER_VOLUME)
        for name in SFX_NAMES:
            self.register_sfx(name, self._loader.sfx(name))
        logger.debug("[Audio] Registered %d tracks, %d effects", len(self._tracks), len(self._sfx))

    # ── Queries ─────────────────────────────────────────────────────
    @property
    def current_track(self) -> str | None:
        return self._current.name if self._current else None

    def track_volume(self, name: str) -> float | None:
        track = self._tracks.get(name)
        return track.handle.volume if track else None

    # ── Music ───────────────────────────────────────────────────────
    def play_track(self, name: str, volume: float | None = None) -> None:
        track = self._tracks.get(name)
        if track is None:
            logger.debug("[Audio] Unknown track %r", name)
            return
        if self._current is not None:
            self._current.handle.pause()
        track.handle.volume = track.default_volume if volume is None else volume
        track.handle.play(loop=True)
        self._current = track

    def pause_current(self) -> None:
        if self._current is not None:
            self._current.handle.pause()

    def set_volume(self, volume: float) -> None:
        if self._current is not None:
            self._current.handle.volume = max(0.0, min(1.0, volume))

    async def fade_to_track(self, name: str, duration_ms: float = FADE_TO_TRACK_DEFAULT) -> None:
        new = self._tracks.get(name)
        if new is None:
            logger.debug("[Audio] Unknown track %r", name)
            return
        async with self._fade_lock:
            if self._current is not None:
                await self._fade_out(self._current.handle, duration_ms / 2)
                self._current.handle.pause()
            new.handle.volume = 0.0
            new.handle.play(loop=True)
            await self._fade_in(new.handle, new.default_volume, duration_ms / 2)
            self._current = new
        logger.debug("[Audio] Now playing %s", name)

    async def fade_out(self, name: str | None = None, duration_ms: float = FADE_TO_TRACK_DEFAULT) -> None:
        """Fade *name* (default: the current track) down to silence."""
        track = self._tracks.get(name) if name else self._current
        if track is None:
            return
        async with self._fade_lock:
            await self._fade_out(track.handle, duration_ms)

    async def fade_in(self, name: str, target: float, duration_ms: float = FADE_TO_TRACK_DEFAULT) -> None:
        track = self._tracks.get(name)
        if track is None:
            return
        async with self._fade_lock:
            await self._fade_in(track.handle, target, duration_ms)

    async def _fade_out(self, handle: Playable, duration_ms: float) -> None:
        step_ms = duration_ms / FADE_STEPS
        step = handle.volume / FADE_STEPS
        while handle.volume > 0.01:
            handle.volume = max(0.0, handle.volume - step)
            await self._pacing.sleep(step_ms)
        handle.volume = 0.0

    async def _fade_in(self, handle: Playable, target: float, duration_ms: float) -> None:
        step_ms = duration_ms / FADE_STEPS
        step = target / FADE_STEPS
        while handle.volume < target - 0.01:
            handle.volume = min(target, handle.volume + step)
            await self._pacing.sleep(step_ms)
        handle.volume = target

    # ── Witness music ───────────────────────────────────────────────
    def stop_witness_music(self) -> None:
        for name in WITNESS_TRACKS:
            track = self._tracks.get(name)
            if track is not None:
                track.handle.pause()
                track.handle.rewind()
        self.current_witness = None

    def switch_to_witness_music(self, witness_id: str) -> None:
        self.pause_current()
        self.stop_witness_music()
        self.play_track(f"bgm-{witness_id}", WITNESS_MUSIC_VOLUME)
        self.current_witness = witness_id

    def switch_to_main_music(self) -> None:
        self.stop_witness_music()
        self.play_track(TRACK_MAIN, MAIN_MUSIC_VOLUME)

    # ── Effects ─────────────────────────────────────────────────────
    def play_sfx(self, name: str) -> None:
        handle = self._sfx.get(name)
        if handle is None:
            logger.debug("[Audio] Unknown effect %r", name)
            return
        handle.rewind()
        handle.play()

    # ── Reset ───────────────────────────────────────────────────────
    def stop_all(self) -> None:
        """Pause and rewind every track; nothing is current afterwards."""
        for track in self._tracks.values():
            track.handle.pause()
            track.handle.rewind()
        self._current = None
        self.current_witness = None
