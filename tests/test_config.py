from __future__ import annotations

import json

from casefile.core.config import Settings, load_settings, save_settings


def test_out_of_range_values_are_clamped() -> None:
    settings = Settings.from_dict(
        {"audio_master": 3, "audio_sfx": -1, "text_speed": 12, "window_mode": "Borderless", "log_level": "chatty"}
    )

    assert settings.audio_master == 1.0
    assert settings.audio_sfx == 0.0
    assert settings.text_speed == 4.0
    assert settings.window_mode == "windowed"
    assert settings.log_level == "INFO"


def test_loose_types_are_coerced() -> None:
    settings = Settings.from_dict({"audio_music": "0.5", "voice_enabled": "off", "text_speed": "fast"})

    assert settings.audio_music == 0.5
    assert settings.voice_enabled is False
    assert settings.text_speed == 1.0


def test_effective_volumes() -> None:
    settings = Settings(audio_master=0.5, audio_music=0.5, audio_sfx=1.0)

    assert settings.music_volume == 0.25
    assert settings.sfx_volume == 0.5


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_settings(tmp_path / "nope.json") == Settings()


def test_corrupt_file_gives_defaults(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    assert load_settings(path) == Settings()


def test_save_then_load(tmp_path) -> None:
    path = tmp_path / "nested" / "settings.json"
    saved = save_settings(Settings(text_speed=9, window_mode="fullscreen"), path)

    assert saved.text_speed == 4.0
    assert json.loads(path.read_text(encoding="utf-8"))["window_mode"] == "fullscreen"
    assert load_settings(path) == saved
    assert not list(path.parent.glob("*.tmp"))


def test_settings_path_follows_the_environment(tmp_path, monkeypatch) -> None:
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"text_speed": 0}), encoding="utf-8")
    monkeypatch.setenv("CASEFILE_SETTINGS", str(path))

    assert load_settings().text_speed == 0.0
