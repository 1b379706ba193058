"""
Who Is Daphne? - Render Surface
================================
The seam between the dialogue engine and whatever draws it.

Screens never touch pygame.  They write into a ``Panel``: named text
surfaces made of styled spans, a visibility set, per-element flags,
named groups of clickable controls, one optional text input, portrait
slots, transient effects and the floating word cloud.  The pygame
renderer reads the same panel every frame; the tests inspect it
directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

logger = logging.getLogger(__name__)


# ── Element names ───────────────────────────────────────────────────
DIALOGUE_TEXT = "dialogue"
ENTER_HINT = "enter_hint"
NAME_PROMPT = "name_prompt"
LEADS_LIST = "leads"
OVERLAY_IMAGE = "overlay_image"
PORTRAIT = "portrait"
MOL = "mol"
GRID = "grid"
FEAR_WORDS = "fear_words"
DREAMS = "dreams"
FINALE_TEXT = "finale_text"
FINALE_INPUT = "finale_input"
FINALE_PORTRAITS = "finale_portraits"
FADE_OVERLAY = "fade_overlay"
END_MESSAGE = "end_message"
IDLE_BUBBLE = "idle_bubble"
MENU = "menu"
SCREEN = "screen"  # whole-window flags such as the alien tint

# Control groups
CHOICES = "choices"
CONTINUE = "continue"
CONFIRM = "confirm"
BACK = "back"
MENU_BUTTONS = "menu_buttons"
COFFEE = "coffee"
ITEMS = "items"
START = "start"
PLAY_AGAIN = "play_again"

# Span styles
LOUD = "loud"
ACTION = "action"
DIM = "dim"
ITALIC = "italic"
STRIKE = "strike"
DOUBLE_STRIKE = "double_strike"


@dataclass
class TextSpan:
    text: str
    styles: frozenset[str] = frozenset()


@dataclass
class Control:
    """One clickable thing: a choice, a button, a grid cell, a word."""

    key: str
    label: str
    on_click: Callable[[], None] | None = None
    hover_label: str | None = None
    enabled: bool = True
    flags: set[str] = field(default_factory=set)


@dataclass
class TextInput:
    name: str
    on_submit: Callable[[str], None]
    value: str = ""


@dataclass
class FloatingWord:
    id: int
    text: str
    x: float  # % of width
    y: float  # % of height
    size: float  # rem-like multiplier of the base font
    opacity: float
    color: str
    fading: bool = False


# ── Panel ───────────────────────────────────────────────────────────
class Panel:
    """In-memory render surface shared by every screen."""

    def __init__(self) -> None:
        self.screen: str = ""
        self.texts: dict[str, list[TextSpan]] = {}
        self.visible: set[str] = set()
        self.flags: dict[str, set[str]] = {}
        self.controls: dict[str, list[Control]] = {}
        self.images: dict[str, str] = {}
        self.effects: dict[str, float] = {}
        self.floating: dict[int, FloatingWord] = {}
        self.input: TextInput | None = None

    # ── Text ────────────────────────────────────────────────────────
    def clear_text(self, name: str) -> None:
        self.texts[name] = []

    def set_text(self, name: str, text: str, styles: Iterable[str] = ()) -> None:
        self.texts[name] = [TextSpan(text, frozenset(styles))] if text else []

    def append_text(self, name: str, text: str, styles: Iterable[str] = ()) -> None:
        styles = frozenset(styles)
        spans = self.texts.setdefault(name, [])
        if spans and spans[-1].styles == styles:
            spans[-1].text += text
        else:
            spans.append(TextSpan(text, styles))

    def text(self, name: str) -> str:
        return "".join(span.text for span in self.texts.get(name, ()))

    def spans(self, name: str) -> list[TextSpan]:
        return list(self.texts.get(name, ()))

    # ── Visibility & flags ──────────────────────────────────────────
    def show(self, name: str) -> None:
        self.visible.add(name)

    def hide(self, name: str) -> None:
        self.visible.discard(name)

    def is_visible(self, name: str) -> bool:
        return name in self.visible

    def set_flag(self, name: str, flag: str, on: bool = True) -> None:
        bucket = self.flags.setdefault(name, set())
        if on:
            bucket.add(flag)
        else:
            bucket.discard(flag)

    def has_flag(self, name: str, flag: str) -> bool:
        return flag in self.flags.get(name, ())

    def set_image(self, name: str, image: str | None) -> None:
        if image is None:
            self.images.pop(name, None)
        else:
            self.images[name] = image

    # ── Controls ────────────────────────────────────────────────────
    def set_controls(self, group: str, controls: list[Control]) -> None:
        self.controls[group] = list(controls)
        self.visible.add(group)

    def clear_controls(self, group: str) -> None:
        self.controls.pop(group, None)
        self.visible.discard(group)

    def control(self, group: str, key: str) -> Control | None:
        return next((c for c in self.controls.get(group, ()) if c.key == key), None)

    def labels(self, group: str) -> list[str]:
        return [c.label for c in self.controls.get(group, ())]

    def set_enabled(self, group: str, enabled: bool, key: str | None = None) -> None:
        for control in self.controls.get(group, ()):
            if key is None or control.key == key:
                control.enabled = enabled

    def click(self, group: str, key: str) -> bool:
        """Fire a control's callback.  Hidden or disabled controls do nothing."""
        if group not in self.visible:
            return False
        control = self.control(group, key)
        if control is None or not control.enabled or control.on_click is None:
            return False
        control.on_click()
        return True

    # ── Text input ──────────────────────────────────────────────────
    def open_input(self, name: str, on_submit: Callable[[str], None]) -> None:
        self.input = TextInput(name, on_submit)
        self.visible.add(name)

    def close_input(self) -> None:
        if self.input is not None:
            self.visible.discard(self.input.name)
        self.input = None

    def submit_input(self, value: str | None = None) -> bool:
        if self.input is None:
            return False
        if value is not None:
            self.input.value = value
        self.input.on_submit(self.input.value)
        return True

    # ── Transient effects ───────────────────────────────────────────
    def pulse(self, effect: str, duration_ms: float) -> None:
        """Start (or extend) a timed effect such as ``shake`` or ``flash``."""
        self.effects[effect] = max(self.effects.get(effect, 0.0), float(duration_ms))

    def tick(self, dt_ms: float) -> None:
        for effect in list(self.effects):
            remaining = self.effects[effect] - dt_ms
            if remaining <= 0:
                del self.effects[effect]
            else:
                self.effects[effect] = remaining

    # ── Reset ───────────────────────────────────────────────────────
    def reset(self) -> None:
        self.screen = ""
        self.texts.clear()
        self.visible.clear()
        self.flags.clear()
        self.controls.clear()
        self.images.clear()
        self.effects.clear()
        self.floating.clear()
        self.input = None
        logger.debug("[Panel] Reset")
