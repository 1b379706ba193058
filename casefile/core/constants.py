"""
Who Is Daphne? - Global Constants
==================================
All magic numbers, colours, timings and asset names live here.
Durations are in milliseconds unless the name says otherwise.
"""

from __future__ import annotations

from pathlib import Path

# ── Window ──────────────────────────────────────────────────────────
SCREEN_WIDTH: int = 1280
SCREEN_HEIGHT: int = 720
FPS: int = 60
TITLE: str = "Who Is Daphne?"

# ── Paths ───────────────────────────────────────────────────────────
PACKAGE_DIR: Path = Path(__file__).resolve().parent.parent
CONTENT_PATH: Path = PACKAGE_DIR / "content" / "dialogues.json"
DEFAULT_SETTINGS_PATH: Path = Path.home() / ".casefile" / "settings.json"
SETTINGS_ENV_VAR: str = "CASEFILE_SETTINGS"
LOG_LEVEL_ENV_VAR: str = "CASEFILE_LOG_LEVEL"

# ── Layout ──────────────────────────────────────────────────────────
DIALOGUE_BOX_X: int = 60
DIALOGUE_BOX_Y: int = 500
DIALOGUE_BOX_WIDTH: int = 860
DIALOGUE_BOX_HEIGHT: int = 180
LEADS_PANEL_X: int = 960
LEADS_PANEL_Y: int = 40
LEADS_PANEL_WIDTH: int = 290
LEADS_PANEL_HEIGHT: int = 420
BUTTON_WIDTH: int = 300
BUTTON_HEIGHT: int = 46
BUTTON_SPACING: int = 14
SHAKE_AMPLITUDE: int = 8  # px

# ── Colours ─────────────────────────────────────────────────────────
COLOR_BG: tuple[int, int, int] = (24, 22, 30)
COLOR_PANEL_BG: tuple[int, int, int] = (36, 33, 44)
COLOR_PANEL_BORDER: tuple[int, int, int] = (92, 86, 112)
COLOR_TEXT: tuple[int, int, int] = (232, 228, 236)
COLOR_TEXT_DIM: tuple[int, int, int] = (138, 134, 146)
COLOR_TEXT_LOUD: tuple[int, int, int] = (235, 64, 64)
COLOR_TEXT_ACTION: tuple[int, int, int] = (170, 164, 190)
COLOR_ACCENT: tuple[int, int, int] = (242, 156, 196)
COLOR_FLASH: tuple[int, int, int] = (255, 255, 255)

COLOR_BTN_NORMAL: tuple[int, int, int] = (46, 42, 58)
COLOR_BTN_HOVER: tuple[int, int, int] = (66, 60, 84)
COLOR_BTN_DISABLED: tuple[int, int, int] = (34, 32, 40)
COLOR_BTN_BORDER: tuple[int, int, int] = (96, 90, 118)
COLOR_BTN_BORDER_HOVER: tuple[int, int, int] = (242, 156, 196)
COLOR_BTN_TEXT: tuple[int, int, int] = (228, 224, 232)

# Speaker colours (Mol speaks in the default text colour)
SPEAKER_COLORS: dict[str, tuple[int, int, int]] = {
    "cait": (255, 196, 120),
    "glorp": (130, 235, 140),
    "r": (205, 70, 90),
    "a": (200, 190, 255),
    "luisa": (250, 170, 210),
    "mol": COLOR_TEXT,
}

HAIR_COLORS: dict[str, tuple[int, int, int]] = {
    "pink": (255, 130, 190),
    "blue": (110, 160, 255),
    "blonde": (250, 220, 120),
    "brown": (150, 100, 60),
    "red": (230, 60, 60),
}

FLOATING_COLORS: dict[str, tuple[int, int, int]] = {
    "normal": (220, 220, 230),
    "negative": (200, 60, 70),
    "soft": (250, 200, 225),
}

# ── Text reveal pacing ──────────────────────────────────────────────
DELAY_DEFAULT: int = 50
DELAY_SENTENCE_END: int = 300  # after . ! ?
DELAY_COMMA: int = 150
DELAY_ELLIPSIS_DASH: int = 200  # after … and —
DELAY_SILENT: int = 30  # leads list reveal
EMPHASIS_MARKER: str = "*"
SHAKE_FLASH_DURATION: int = 500
FLASH_ONLY_DURATION: int = 300

# ── Voice synthesis ─────────────────────────────────────────────────
VOICE_SAMPLE_RATE: int = 22050
VOICE_BASE_FREQUENCY: float = 200.0
VOICE_LOUD_FACTOR: float = 1.5
VOICE_LETTER_DURATION: float = 0.06  # seconds
VOICE_LETTER_SPREAD: float = 150.0  # Hz across a..z
VOICE_JITTER: float = 15.0  # +/- Hz
VOICE_DECAY_FLOOR: float = 0.001

VOICE_VOLUME_LOUD: float = 0.18
VOICE_VOLUME_ALIEN: float = 0.14
VOICE_VOLUME_NORMAL: float = 0.08

ALIEN_BASE_MULTIPLIER: float = 2.0
ALIEN_VARIATION_RANGE: float = 0.15
ALIEN_VARIATION_SPREAD: float = 50.0
ALIEN_JITTER: float = 10.0
ALIEN_LETTER_DURATION: float = 0.04  # seconds
ALIEN_HIGHPASS_HZ: float = 300.0

PITCH_MULTIPLIERS: dict[str, float] = {
    "normal": 1.0,
    "medium": 1.3,
    "high": 1.8,
    "low": 0.7,
    "veryHigh": 2.2,
    "alien": 2.0,
    "luisa": 1.15,
}

# ── Audio ───────────────────────────────────────────────────────────
TRACK_MAIN: str = "bgm"
TRACK_FINAL: str = "bgm-final"
WITNESS_TRACKS: tuple[str, ...] = ("bgm-cait", "bgm-glorp", "bgm-couple")
ALL_TRACKS: tuple[str, ...] = (TRACK_MAIN, *WITNESS_TRACKS, TRACK_FINAL)
TRACK_DEFAULT_VOLUME: float = 0.4
TRACK_REGISTER_VOLUME: float = 0.3
WITNESS_MUSIC_VOLUME: float = 0.3
MAIN_MUSIC_VOLUME: float = 0.4
FADE_STEPS: int = 20
FADE_TO_TRACK_DEFAULT: int = 1000
AUDIO_EXTENSIONS: tuple[str, ...] = (".ogg", ".wav", ".mp3")

SFX_NAMES: tuple[str, ...] = (
    "click", "papers", "dice", "harp", "munch", "clack", "sparkle",
    "surprise", "squeak", "helicopter", "snap", "slurp", "alien", "spaceship",
)

# ── Floating text ───────────────────────────────────────────────────
FLOATING_LEFT_BAND: tuple[float, float] = (2.0, 25.0)  # % of width
FLOATING_RIGHT_BAND: tuple[float, float] = (75.0, 98.0)
FLOATING_Y_BAND: tuple[float, float] = (5.0, 95.0)  # % of height
FLOATING_REMOVE_GRACE: int = 100
FLOATING_CLEAR_FADE: int = 1000

# ── Menu idle chatter ───────────────────────────────────────────────
IDLE_FIRST_DELAY: int = 2000
IDLE_INTERVAL: int = 15000
IDLE_HIDE_COFFEE: int = 8000
IDLE_HIDE_NORMAL: int = 6000
IDLE_MAX_PICK_ATTEMPTS: int = 20
COFFEE_COOLDOWN: int = 2
COFFEE_SLURP_DELAY: int = 400
COFFEE_REACTION_HIDE: int = 10000
COFFEE_RESUME_DELAY: int = 20000
SPECIAL_PORTRAIT_CHANCE: float = 0.5

# ── Leads ───────────────────────────────────────────────────────────
STRIKETHROUGH_DELAY: int = 400
MANUSCRIPT_LEAD_ID: str = "manuscript"

# ── Identify: evidence grid ─────────────────────────────────────────
TRAIT_CLOUD_COPIES: int = 12
TRAIT_REVEAL_DELAY: int = 4000
TRAIT_SETTLE_DELAY: int = 3000
GRID_FADE: int = 1000
START_FEARS_DELAY: int = 1000
MUSIC_CHANGE_FADE: int = 2000

# ── Identify: fears ─────────────────────────────────────────────────
FEAR_INTRO_PAUSE: int = 1500
FEAR_LETTER_DELAY: int = 50
FEAR_WORD_GAP: int = 400
FEAR_CLUSTER_SETTLE: int = 800
FEAR_LINE_PAUSE: int = 1200
FEAR_NEXT_CLUSTER_PAUSE: int = 500
FEAR_TYPING_POLL: int = 100
FEAR_CONCLUSION_DELAY: int = 1000
FEAR_FADE_WORDS: int = 2000
FEAR_RECOVERY_PAUSE: int = 1500
FEAR_DREAMS_DELAY: int = 1000
FEAR_CONCLUSION_PAUSE: int = 1500
FEAR_VOICE_PITCH: str = "low"
DEPRESSION_STAGE_ONE_VOLUME: float = 0.15
RECOVERED_MUSIC_VOLUME: float = 0.3

# ── Identify: dreams ────────────────────────────────────────────────
DREAMS_CONCLUSION_DELAY: int = 1500
DREAMS_LINE_PAUSE: int = 1500
DREAMS_FINALE_DELAY: int = 2000
DREAMS_FADE: int = 2000

# ── Identify: finale ────────────────────────────────────────────────
FINALE_INPUT_DELAY: int = 500
FINALE_PORTRAIT_DELAY: int = 800
FINALE_REVEAL_HOLD: int = 3000
FINALE_LINE_PAUSE: int = 1800
FINALE_SLOW_FADE: int = 8000
FINALE_END_PAUSE: int = 2000
FINALE_OVERLAY_HOLD: int = 3500
FINALE_MESSAGE_HOLD: int = 4000
FINALE_MESSAGE_GAP: int = 2000
FINALE_FALLBACK_FADE: int = 3000
FINALE_FALLBACK_HOLD: int = 4000
FINALE_SPEAKER_PITCH: dict[str, str] = {"luisa": "luisa"}

# ── Portraits ───────────────────────────────────────────────────────
PORTRAIT_MOL: str = "mol"
PORTRAIT_MOL_SURPRISED: str = "mol_surprised"
PORTRAIT_MOL_JAM: str = "mol_jam"
PORTRAIT_MOL_PRETZEL: str = "mol_pretzel"
PORTRAIT_MOL_COFFEE: str = "mol_happy_coffee"
PORTRAIT_LUISA: str = "luisa"
OVERLAY_KOLA: str = "kola"
