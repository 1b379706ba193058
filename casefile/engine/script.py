"""
Who Is Daphne? - Dialogue Script Model
=======================================
Typed representation of the dialogue content and the loader that turns
raw JSON-shaped data into it.

A script is a tuple of ``DialogueStep``.  Every step carries exactly one
``Action``.  ``choice`` steps carry parallel ``choices``/``responses``
tuples; each response is decided *here*, at load time, to be one of:

    Plain(text)        - one line, then wait for the player
    Lines(lines)       - several lines, each waiting for the player
    Steps(steps)       - a nested script, which may contain more choices

Anything that does not fit (an empty response, a list mixing strings and
objects, an unknown action tag) raises ``ContentError`` naming the path
of the offending node.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class ContentError(ValueError):
    """Raised when dialogue content does not match the expected shape."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class Action(str, Enum):
    # Flow
    WAIT = "wait"
    CHOICE = "choice"
    NAME_INPUT = "name_input"
    CONTINUE_BUTTON = "continue_button"
    # Leads
    ADD_LEAD = "add_lead"
    COLORED_TEXT = "colored_text"
    HAIR_CHAOS = "hair_chaos"
    SHOW_KOLA = "show_kola"
    HIDE_KOLA = "hide_kola"
    END_LEADS = "end_leads"
    # Witnesses
    SHOW_IMAGE = "show_image"
    FLY_AWAY = "fly_away"
    SPIN = "spin"
    BEAM_UP = "beam_up"
    VANISH = "vanish"
    # Identify
    MUSIC_CHANGE = "music_change"
    SHOW_GRID = "show_grid"
    HIDE_GRID = "hide_grid"
    START_FEARS = "start_fears"
    SHOW_FEARS = "show_fears"
    SHOW_NEXT_CLUSTER = "show_next_cluster"
    ENABLE_CROSSING = "enable_crossing"
    FADE_WORDS = "fade_words"
    FULL_RECOVERY = "full_recovery"
    SHOW_DREAMS = "show_dreams"
    SHOW_FINALE = "show_finale"
    START_FADE = "start_fade"
    END = "end"


class Effect(str, Enum):
    SHAKE_FLASH = "shake_flash"
    SHAKE = "shake"
    FLASH = "flash"


# Actions whose step is meaningless without a line of text.
TEXT_REQUIRED: frozenset[Action] = frozenset({Action.WAIT, Action.NAME_INPUT, Action.COLORED_TEXT})


@dataclass(frozen=True)
class Plain:
    text: str


@dataclass(frozen=True)
class Lines:
    lines: tuple[str, ...]


@dataclass(frozen=True)
class Steps:
    steps: tuple["DialogueStep", ...]


ResponsePayload = Union[Plain, Lines, Steps]


@dataclass(frozen=True)
class DialogueStep:
    """One atomic unit of a script."""

    action: Action
    text: str | None = None
    loud: bool = False
    effect: Effect | None = None
    sound: str | None = None
    speaker: str | None = None
    pitch: str | None = None

    # continue-style buttons
    button_text: str | None = None
    button_labels: tuple[str | None, ...] = ()  # per-choice closing buttons

    # choice
    choices: tuple[str, ...] = ()
    hovers: tuple[str | None, ...] = ()
    responses: tuple[ResponsePayload, ...] = ()

    # screen specific extras
    lead: str | None = None
    color: str | None = None
    strikethrough: bool = False
    change_image: str | None = None
    italic: bool = False
    low_opacity: bool = False

    @property
    def has_choices(self) -> bool:
        return bool(self.choices)


Script = tuple[DialogueStep, ...]


# ── Loading ─────────────────────────────────────────────────────────
def _opt_str(raw: dict[str, Any], key: str, path: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ContentError(f"{path}.{key}", f"expected a string, got {type(value).__name__}")
    return value


def parse_payload(raw: Any, path: str) -> ResponsePayload:
    """Decide the shape of one choice response."""
    if isinstance(raw, str):
        return Plain(raw)
    if not isinstance(raw, list):
        raise ContentError(path, f"response must be a string or a list, got {type(raw).__name__}")
    if not raw:
        raise ContentError(path, "response list is empty")
    if all(isinstance(item, str) for item in raw):
        return Lines(tuple(raw))
    if all(isinstance(item, dict) for item in raw):
        return Steps(tuple(parse_step(item, f"{path}[{i}]") for i, item in enumerate(raw)))
    raise ContentError(path, "response list mixes strings with other values")


def parse_step(raw: Any, path: str) -> DialogueStep:
    if not isinstance(raw, dict):
        raise ContentError(path, f"step must be an object, got {type(raw).__name__}")

    tag = raw.get("action")
    try:
        action = Action(tag)
    except ValueError:
        raise ContentError(f"{path}.action", f"unknown action {tag!r}") from None

    text = _opt_str(raw, "text", path)
    if action in TEXT_REQUIRED and not text:
        raise ContentError(path, f"'{action.value}' step needs text")

    effect_raw = raw.get("effect")
    effect: Effect | None = None
    if effect_raw is not None:
        try:
            effect = Effect(effect_raw)
        except ValueError:
            raise ContentError(f"{path}.effect", f"unknown effect {effect_raw!r}") from None

    choices_raw = raw.get("choices")
    responses_raw = raw.get("responses")
    choices: tuple[str, ...] = ()
    responses: tuple[ResponsePayload, ...] = ()
    hovers: tuple[str | None, ...] = ()
    if action is Action.CHOICE or choices_raw is not None:
        if not isinstance(choices_raw, list) or not choices_raw:
            raise ContentError(f"{path}.choices", "choice step needs a non-empty list of labels")
        if not all(isinstance(label, str) for label in choices_raw):
            raise ContentError(f"{path}.choices", "choice labels must be strings")
        if not isinstance(responses_raw, list) or len(responses_raw) != len(choices_raw):
            raise ContentError(f"{path}.responses", "needs exactly one response per choice")
        choices = tuple(choices_raw)
        responses = tuple(
            parse_payload(item, f"{path}.responses[{i}]") for i, item in enumerate(responses_raw)
        )
        hover_raw = raw.get("choiceHover") or []
        hovers = tuple(
            hover_raw[i] if i < len(hover_raw) and isinstance(hover_raw[i], str) else None
            for i in range(len(choices))
        )

    button_raw = raw.get("buttonText")
    button_text: str | None = None
    button_labels: tuple[str | None, ...] = ()
    if isinstance(button_raw, list):
        button_labels = tuple(label if isinstance(label, str) else None for label in button_raw)
    elif button_raw is not None:
        button_text = _opt_str(raw, "buttonText", path)

    lead = _opt_str(raw, "lead", path)
    if action is Action.ADD_LEAD and not lead:
        raise ContentError(path, "'add_lead' step needs a lead")

    return DialogueStep(
        action=action,
        text=text,
        loud=bool(raw.get("loud", False)),
        effect=effect,
        sound=_opt_str(raw, "sound", path),
        speaker=_opt_str(raw, "speaker", path),
        pitch=_opt_str(raw, "pitch", path),
        button_text=button_text,
        button_labels=button_labels,
        choices=choices,
        hovers=hovers,
        responses=responses,
        lead=lead,
        color=_opt_str(raw, "color", path),
        strikethrough=bool(raw.get("strikethrough", False)),
        change_image=_opt_str(raw, "changeImage", path),
        italic=bool(raw.get("italic", False)),
        low_opacity=bool(raw.get("lowOpacity", False)),
    )


def parse_script(raw: Any, path: str) -> Script:
    if not isinstance(raw, list):
        raise ContentError(path, f"script must be a list, got {type(raw).__name__}")
    return tuple(parse_step(item, f"{path}[{i}]") for i, item in enumerate(raw))
