"""
Who Is Daphne? - Settings
==========================
Runtime configuration that persists between sessions as a small JSON file.

The location defaults to ``~/.casefile/settings.json`` and can be moved
with the ``CASEFILE_SETTINGS`` environment variable.  Corrupt or missing
files never stop the game from starting; defaults are used instead.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from casefile.core.constants import DEFAULT_SETTINGS_PATH, SETTINGS_ENV_VAR

logger = logging.getLogger(__name__)

_WINDOW_MODES = {"windowed", "fullscreen"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def settings_path() -> Path:
    override = os.environ.get(SETTINGS_ENV_VAR)
    return Path(override) if override else DEFAULT_SETTINGS_PATH


@dataclass
class Settings:
    """Player-facing toggles plus a couple of developer knobs."""

    # ── Audio ───────────────────────────────────────────────────────
    audio_master: float = 1.0
    audio_music: float = 1.0
    audio_sfx: float = 1.0
    voice_enabled: bool = True

    # ── Pacing ──────────────────────────────────────────────────────
    text_speed: float = 1.0  # multiplier on every delay; 0 = instant

    # ── Display ─────────────────────────────────────────────────────
    window_mode: str = "windowed"

    # ── Developer ───────────────────────────────────────────────────
    log_level: str = "INFO"
    assets_dir: str = ""

    def clamp(self) -> "Settings":
        self.audio_master = _clamp(float(self.audio_master), 0.0, 1.0)
        self.audio_music = _clamp(float(self.audio_music), 0.0, 1.0)
        self.audio_sfx = _clamp(float(self.audio_sfx), 0.0, 1.0)
        self.voice_enabled = bool(self.voice_enabled)
        self.text_speed = _clamp(float(self.text_speed), 0.0, 4.0)

        mode = str(self.window_mode).lower()
        self.window_mode = mode if mode in _WINDOW_MODES else "windowed"

        level = str(self.log_level).upper()
        self.log_level = level if level in _LOG_LEVELS else "INFO"
        self.assets_dir = str(self.assets_dir or "")
        return self

    @property
    def music_volume(self) -> float:
        return self.audio_master * self.audio_music

    @property
    def sfx_volume(self) -> float:
        return self.audio_master * self.audio_sfx

    def copy(self) -> "Settings":
        return Settings.from_dict(self.to_dict())

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Settings":
        if not isinstance(data, dict):
            return cls()

        def _as_float(key: str, default: float) -> float:
            try:
                return float(data.get(key, default))
            except (TypeError, ValueError):
                return default

        def _as_bool(key: str, default: bool) -> bool:
            value = data.get(key, default)
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in {"true", "1", "yes", "on"}:
                    return True
                if lowered in {"false", "0", "no", "off"}:
                    return False
            return bool(value) if value is not None else default

        settings = cls(
            audio_master=_as_float("audio_master", 1.0),
            audio_music=_as_float("audio_music", 1.0),
            audio_sfx=_as_float("audio_sfx", 1.0),
            voice_enabled=_as_bool("voice_enabled", True),
            text_speed=_as_float("text_speed", 1.0),
            window_mode=str(data.get("window_mode", "windowed")),
            log_level=str(data.get("log_level", "INFO")),
            assets_dir=str(data.get("assets_dir", "") or ""),
        )
        return settings.clamp()


def load_settings(path: Path | str | None = None) -> Settings:
    path = Path(path) if path is not None else settings_path()
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return Settings()
    except (OSError, json.JSONDecodeError, TypeError) as exc:
        logger.warning("[Settings] Ignoring unreadable settings file %s: %s", path, exc)
        return Settings()
    return Settings.from_dict(data)


def save_settings(settings: Settings, path: Path | str | None = None) -> Settings:
    path = Path(path) if path is not None else settings_path()
    sanitized = settings.copy().clamp()
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=path.parent, prefix=path.name, suffix=".tmp", encoding="utf-8"
        ) as tmp_file:
            json.dump(sanitized.to_dict(), tmp_file, indent=2)
            tmp_file.write("\n")
            tmp_path = Path(tmp_file.name)
        os.replace(str(tmp_path), str(path))
    except OSError as exc:
        logger.error("[Settings] Failed to save settings: %s", exc)
        if tmp_path is not None:
            try:
                tmp_path.unlink()
            except OSError:
                pass
    return sanitized
