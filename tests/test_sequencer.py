from __future__ import annotations

import asyncio

from conftest import until

from casefile.audio.gateway import AudioGateway
from casefile.core.session import Pacing
from casefile.engine.script import Action, parse_script
from casefile.engine.sequencer import Flow, Sequencer, SequencerState
from casefile.engine.surface import CHOICES, CONTINUE, DIALOGUE_TEXT, ENTER_HINT


def make_sequencer(reveal, handlers=None) -> Sequencer:
    return Sequencer("Test", reveal, AudioGateway(pacing=Pacing(0)), handlers)


def test_advance_is_gated_while_typing(reveal, panel) -> None:
    sequencer = make_sequencer(reveal)
    script = parse_script(
        [{"action": "wait", "text": "Hello there."}, {"action": "wait", "text": "Bye."}], "s"
    )

    async def scenario() -> bool:
        task = asyncio.create_task(sequencer.run(script))
        await asyncio.sleep(0)
        assert reveal.flags.typing
        assert sequencer.advance() is False

        await until(lambda: sequencer.waiting_for_input)
        assert panel.text(DIALOGUE_TEXT) == "Hello there."
        assert panel.is_visible(ENTER_HINT)
        assert sequencer.cursor == 0
        assert sequencer.advance() is True

        await until(lambda: sequencer.cursor == 1 and sequencer.waiting_for_input)
        assert panel.text(DIALOGUE_TEXT) == "Bye."
        sequencer.advance()
        return await task

    assert asyncio.run(scenario()) is True
    assert sequencer.state is SequencerState.COMPLETE
    assert not panel.is_visible(ENTER_HINT)


def test_textless_choice_is_offered_without_an_extra_wait(reveal, panel) -> None:
    sequencer = make_sequencer(reveal)
    script = parse_script(
        [
            {"action": "wait", "text": "Pick one."},
            {"action": "choice", "choices": ["A", "B"], "responses": ["Went A.", ["B one.", "B two."]]},
            {"action": "wait", "text": "After."},
        ],
        "s",
    )

    async def scenario() -> bool:
        task = asyncio.create_task(sequencer.run(script))
        await until(lambda: bool(panel.controls.get(CHOICES)))
        assert panel.text(DIALOGUE_TEXT) == "Pick one."
        assert panel.labels(CHOICES) == ["A", "B"]
        assert sequencer.cursor == 1

        panel.click(CHOICES, "1")
        assert not panel.is_visible(CHOICES)

        await until(lambda: sequencer.waiting_for_input)
        assert panel.text(DIALOGUE_TEXT) == "B one."
        sequencer.advance()
        await until(lambda: sequencer.waiting_for_input and panel.text(DIALOGUE_TEXT) == "B two.")
        # The branch has not resolved yet, so the top-level cursor holds.
        assert sequencer.cursor == 1
        sequencer.advance()

        await until(lambda: sequencer.waiting_for_input and panel.text(DIALOGUE_TEXT) == "After.")
        assert sequencer.cursor == 2
        sequencer.advance()
        return await task

    assert asyncio.run(scenario()) is True


def test_choice_with_closing_button(reveal, panel) -> None:
    sequencer = make_sequencer(reveal)
    script = parse_script(
        [{"action": "choice", "text": "Ready?", "choices": ["Yes"], "responses": ["Good."],
          "buttonText": ["Onwards"]}],
        "s",
    )

    async def scenario() -> bool:
        task = asyncio.create_task(sequencer.run(script))
        await until(lambda: bool(panel.controls.get(CHOICES)))
        panel.click(CHOICES, "0")
        await until(lambda: bool(panel.controls.get(CONTINUE)))
        assert panel.labels(CONTINUE) == ["Onwards"]
        # Enter does not release a labelled button.
        assert sequencer.advance() is False
        panel.click(CONTINUE, "continue")
        return await task

    assert asyncio.run(scenario()) is True


def test_stop_inside_a_nested_branch_ends_the_whole_script(reveal, panel) -> None:
    seen: list[str] = []

    async def stop(step) -> Flow:
        seen.append("stop")
        return Flow.STOP

    sequencer = make_sequencer(reveal, {Action.START_FEARS: stop})
    script = parse_script(
        [
            {"action": "choice", "text": "Go?", "choices": ["Go"],
             "responses": [[{"action": "start_fears"}, {"action": "wait", "text": "Unreachable."}]]},
            {"action": "wait", "text": "Also unreachable."},
        ],
        "s",
    )

    async def scenario() -> bool:
        task = asyncio.create_task(sequencer.run(script))
        await until(lambda: bool(panel.controls.get(CHOICES)))
        panel.click(CHOICES, "0")
        return await task

    assert asyncio.run(scenario()) is False
    assert seen == ["stop"]
    assert panel.text(DIALOGUE_TEXT) == "Go?"
    assert sequencer.state is SequencerState.IDLE


def test_handler_advance_moves_straight_on(reveal, panel) -> None:
    calls: list[str] = []

    async def music(step) -> Flow:
        calls.append(step.action.value)
        return Flow.ADVANCE

    sequencer = make_sequencer(reveal, {Action.MUSIC_CHANGE: music})
    script = parse_script([{"action": "music_change"}, {"action": "wait", "text": "Now."}], "s")

    async def scenario() -> bool:
        task = asyncio.create_task(sequencer.run(script))
        await until(lambda: sequencer.waiting_for_input)
        assert sequencer.cursor == 1
        sequencer.advance()
        return await task

    assert asyncio.run(scenario()) is True
    assert calls == ["music_change"]


def test_effects_pulse_the_panel(reveal, panel) -> None:
    sequencer = make_sequencer(reveal)
    script = parse_script([{"action": "wait", "text": "Boom.", "effect": "shake"}], "s")

    async def scenario() -> None:
        task = asyncio.create_task(sequencer.run(script))
        await until(lambda: sequencer.waiting_for_input)
        assert "shake" in panel.effects and "flash" not in panel.effects
        sequencer.advance()
        await task

    asyncio.run(scenario())


def test_nested_branch_with_its_own_choice_advances_the_parent_once(reveal, panel) -> None:
    sequencer = make_sequencer(reveal)
    script = parse_script(
        [
            {"action": "choice", "text": "Outer?", "choices": ["Go"],
             "responses": [[
                 {"action": "wait", "text": "Inner one."},
                 {"action": "choice", "choices": ["X", "Y"], "responses": ["Picked X.", "Picked Y."]},
             ]]},
            {"action": "wait", "text": "After."},
            {"action": "wait", "text": "End."},
        ],
        "s",
    )

    async def scenario() -> bool:
        task = asyncio.create_task(sequencer.run(script))
        await until(lambda: panel.labels(CHOICES) == ["Go"])
        panel.click(CHOICES, "0")

        await until(lambda: panel.is_visible(CHOICES) and panel.labels(CHOICES) == ["X", "Y"])
        assert panel.text(DIALOGUE_TEXT) == "Inner one."
        assert sequencer.cursor == 0
        panel.click(CHOICES, "1")

        await until(lambda: sequencer.waiting_for_input and panel.text(DIALOGUE_TEXT) == "Picked Y.")
        assert sequencer.cursor == 0
        sequencer.advance()

        await until(lambda: sequencer.waiting_for_input and panel.text(DIALOGUE_TEXT) == "After.")
        assert sequencer.cursor == 1
        sequencer.advance()
        await until(lambda: sequencer.waiting_for_input and panel.text(DIALOGUE_TEXT) == "End.")
        assert sequencer.cursor == 2
        sequencer.advance()
        return await task

    assert asyncio.run(scenario()) is True
    assert sequencer.state is SequencerState.COMPLETE
