from __future__ import annotations

import pytest

from casefile.engine.content import parse_content
from casefile.engine.script import (
    Action,
    ContentError,
    Effect,
    Lines,
    Plain,
    Steps,
    parse_payload,
    parse_script,
    parse_step,
)


# ── Response payloads ───────────────────────────────────────────────
def test_payload_shapes_are_decided_at_load_time() -> None:
    assert parse_payload("Fine.", "r") == Plain("Fine.")
    assert parse_payload(["One.", "Two."], "r") == Lines(("One.", "Two."))

    nested = parse_payload([{"action": "wait", "text": "Deeper."}], "r")
    assert isinstance(nested, Steps)
    assert nested.steps[0].action is Action.WAIT
    assert nested.steps[0].text == "Deeper."


@pytest.mark.parametrize("raw", [[], ["text", {"action": "wait", "text": "x"}], [1, 2], 42])
def test_ill_typed_payload_is_rejected(raw: object) -> None:
    with pytest.raises(ContentError):
        parse_payload(raw, "leads[3].responses[0]")


def test_error_names_the_offending_path() -> None:
    raw = [
        {"action": "wait", "text": "ok"},
        {"action": "choice", "text": "?", "choices": ["a", "b"], "responses": ["fine", []]},
    ]
    with pytest.raises(ContentError) as info:
        parse_script(raw, "leads")
    assert info.value.path == "leads[1].responses[1]"


# ── Steps ───────────────────────────────────────────────────────────
def test_unknown_action_is_rejected() -> None:
    with pytest.raises(ContentError, match="unknown action"):
        parse_step({"action": "teleport", "text": "Whoosh"}, "intro[0]")


def test_choice_needs_one_response_per_label() -> None:
    with pytest.raises(ContentError):
        parse_step({"action": "choice", "choices": ["a", "b"], "responses": ["only one"]}, "x")


def test_add_lead_needs_a_lead() -> None:
    with pytest.raises(ContentError):
        parse_step({"action": "add_lead"}, "leads[0]")


def test_wait_needs_text() -> None:
    with pytest.raises(ContentError):
        parse_step({"action": "wait"}, "leads[0]")


def test_step_fields_are_mapped() -> None:
    step = parse_step(
        {
            "action": "choice",
            "text": "Pick",
            "loud": True,
            "effect": "shake_flash",
            "choices": ["A", "B"],
            "choiceHover": ["a?", None],
            "responses": ["ra", ["rb1", "rb2"]],
            "buttonText": ["Continue", None],
        },
        "s",
    )
    assert step.loud
    assert step.effect is Effect.SHAKE_FLASH
    assert step.hovers == ("a?", None)
    assert step.button_labels == ("Continue", None)
    assert step.has_choices


# ── Whole content file ──────────────────────────────────────────────
def test_shipped_content_loads(content) -> None:
    assert content.intro[0].action is Action.WAIT
    assert [item.id for item in content.identify.items] == ["candle", "d20", "manuscript", "harpstring", "snack"]
    assert len(content.menu.idle_lines) == 24
    assert len(content.menu.coffee_reactions) == 12
    assert content.menu.coffee_lines == frozenset({0, 1, 2, 3, 4, 5, 14})
    assert "daphne" in content.identify.finale.valid_answers


def test_content_root_must_be_an_object() -> None:
    with pytest.raises(ContentError):
        parse_content([])
