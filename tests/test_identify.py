from __future__ import annotations

import asyncio

import pytest
from conftest import drive, until

from casefile.core.constants import TRACK_FINAL
from casefile.core.screen_router import ScreenId
from casefile.engine.surface import (
    DIALOGUE_TEXT,
    DOUBLE_STRIKE,
    DREAMS,
    FADE_OVERLAY,
    FEAR_WORDS,
    FINALE_INPUT,
    FINALE_TEXT,
    GRID,
    SCREEN,
    START,
    STRIKE,
)
from casefile.screens.dreams import DreamSequence
from casefile.screens.fears import DepressionStage, FearSequence, RecoveryStage
from casefile.screens.finale import FinaleSequence, check_answer
from casefile.screens.identify import IdentifyPhase


def identify_screen(story, started: bool = True):
    if started:
        story.boot()
        story.panel.click(START, "start")
    return story.router.screen(ScreenId.IDENTIFY)


def cross_active_cluster(fears: FearSequence) -> None:
    for word in fears.cluster_words(fears.active_cluster):
        while not word.resolved:
            assert fears.cross(word.key)


# ── Answer checking ─────────────────────────────────────────────────
@pytest.mark.parametrize("answer", ["Daphne", "  me ", "IT IS I", "luiza"])
def test_accepted_answers(answer: str) -> None:
    assert check_answer(answer, ["me", "i", "daphne", "luisa", "luiza", "it is i"])


@pytest.mark.parametrize("answer", ["", "   ", "nobody", "daph", "luisaa"])
def test_rejected_answers(answer: str) -> None:
    assert not check_answer(answer, ["me", "daphne"])


def test_the_cadets_own_name_is_accepted() -> None:
    assert check_answer("jess", ["daphne"], player_name="Jess")
    assert not check_answer("jess", ["daphne"])


# ── Grid ────────────────────────────────────────────────────────────
def test_grid_items_reveal_their_traits(story) -> None:
    panel = story.panel

    async def scenario() -> IdentifyPhase:
        screen = identify_screen(story)
        story.router.show(ScreenId.IDENTIFY)
        assert not screen.select("candle")  # grid not up yet

        await drive(story, lambda: screen.phase is IdentifyPhase.GRID)
        assert panel.is_visible(GRID)
        assert story.audio.current_track == TRACK_FINAL

        assert screen.select("candle")
        assert not screen.select("d20")
        await drive(story, lambda: "candle" in screen.revealed)
        control = panel.control(GRID, "candle")
        assert control.label == story.content.identify.find("candle").trait
        assert "revealed" in control.flags
        assert not screen.select("candle")
        assert panel.control(GRID, "d20").enabled

        for item in story.content.identify.items[1:]:
            assert screen.select(item.id)
            await drive(story, lambda: item.id in screen.revealed or screen.phase is not IdentifyPhase.GRID)
        await drive(story, lambda: screen.phase is IdentifyPhase.FEARS)
        return screen.phase

    assert asyncio.run(scenario()) is IdentifyPhase.FEARS


# ── Fears ───────────────────────────────────────────────────────────
def test_crossing_out_follows_the_active_cluster(story) -> None:
    panel = story.panel

    async def scenario() -> FearSequence:
        screen = identify_screen(story, started=False)
        fears = FearSequence(screen, story.content.identify.fears)
        task = asyncio.create_task(fears.run())

        await until(lambda: fears.crossing_enabled)
        assert fears.depression is DepressionStage.DARK
        assert panel.has_flag(SCREEN, "depression-3")
        assert fears.cloud is not None and fears.cloud.is_running

        # Words outside the active cluster do nothing.
        assert fears.active_cluster == 0
        assert not fears.cross("1:0")
        assert not panel.click(FEAR_WORDS, "1:0")

        assert panel.click(FEAR_WORDS, "0:0")
        assert STRIKE in panel.control(FEAR_WORDS, "0:0").flags
        assert not fears.cross("0:0")
        cross_active_cluster(fears)

        await until(lambda: fears.crossing_enabled and fears.active_cluster == 1)

        # "Disgusting." needs two strikes.
        disgusting = fears.words["1:3"]
        assert disgusting.double
        assert fears.cross("1:3")
        control = panel.control(FEAR_WORDS, "1:3")
        assert not disgusting.resolved
        assert STRIKE in control.flags and DOUBLE_STRIKE not in control.flags
        assert control.enabled
        assert fears.cross("1:3")
        assert disgusting.resolved and DOUBLE_STRIKE in control.flags
        cross_active_cluster(fears)

        await until(lambda: fears.crossing_enabled and fears.active_cluster == 2)
        assert fears.recovery is RecoveryStage.FIRST_LIGHT

        # The rest, including the extra clusters typed in afterwards.
        while not fears.finished:
            await until(lambda: fears.crossing_enabled or fears.finished)
            if fears.crossing_enabled:
                cross_active_cluster(fears)
            await asyncio.sleep(0)

        await task
        return fears

    fears = asyncio.run(scenario())

    assert fears.crossed_clusters == 3
    assert fears.additional_index == len(story.content.identify.fears.additional_clusters)
    assert fears.recovery is RecoveryStage.FULL
    assert FEAR_WORDS not in panel.controls
    assert not fears.cloud.is_running


# ── Dreams ──────────────────────────────────────────────────────────
def test_each_dream_opens_once(story) -> None:
    panel = story.panel
    items = story.content.identify.dreams.items

    async def scenario() -> DreamSequence:
        screen = identify_screen(story, started=False)
        dreams = DreamSequence(screen, story.content.identify.dreams)
        task = asyncio.create_task(dreams.run())
        await until(lambda: DREAMS in panel.controls)

        assert panel.click(DREAMS, "0")
        assert panel.control(DREAMS, "0").label == f"{items[0].surface} {items[0].hidden}"
        assert not panel.click(DREAMS, "0")
        assert not dreams.open(0)
        assert not dreams.open(len(items))

        for i in range(1, len(items)):
            assert dreams.open(i)
        await until(lambda: dreams.complete)
        await task
        return dreams

    dreams = asyncio.run(scenario())

    assert dreams.revealed == set(range(len(items)))
    assert DREAMS not in panel.controls


# ── Finale ──────────────────────────────────────────────────────────
def test_wrong_answers_cycle_through_the_retry_messages(story) -> None:
    panel = story.panel
    messages = story.content.identify.finale.wrong_answer_messages

    async def scenario() -> FinaleSequence:
        screen = identify_screen(story, started=False)
        finale = FinaleSequence(screen, story.content.identify.finale)
        task = asyncio.create_task(finale.run())
        await until(lambda: panel.input is not None)
        assert panel.input.name == FINALE_INPUT

        assert not finale.submit("   ")
        assert finale.attempts == 0

        for attempt in range(len(messages) + 1):
            panel.input.value = "someone else"
            assert panel.submit_input() is True
            assert panel.input.value == ""
            await until(lambda: panel.text(DIALOGUE_TEXT) == messages[attempt % len(messages)])

        assert not finale.answered
        panel.submit_input("Daphne")
        assert finale.answered
        assert panel.input is None
        await drive(story, lambda: story.current is ScreenId.END)
        await task
        return finale

    finale = asyncio.run(scenario())

    assert finale.attempts == len(messages) + 1
    assert not panel.is_visible(FADE_OVERLAY)
    assert story.router.screen(ScreenId.IDENTIFY).phase is IdentifyPhase.COMPLETE


def test_right_answer_interrupts_a_retry_message(story) -> None:
    panel = story.panel
    retry = story.content.identify.finale.wrong_answer_messages[0]

    async def scenario() -> None:
        screen = identify_screen(story, started=False)
        finale = FinaleSequence(screen, story.content.identify.finale)
        task = asyncio.create_task(finale.run())
        await until(lambda: panel.input is not None)

        panel.submit_input("someone else")
        await until(lambda: 0 < len(panel.text(DIALOGUE_TEXT)) < len(retry)
                    and retry.startswith(panel.text(DIALOGUE_TEXT)))
        panel.submit_input("Daphne")
        await until(lambda: panel.is_visible(FINALE_TEXT))
        for _ in range(20):
            await asyncio.sleep(0)
        assert panel.text(DIALOGUE_TEXT) == ""

        await drive(story, lambda: story.current is ScreenId.END)
        await task

    asyncio.run(scenario())


def test_leaving_identify_tears_everything_down(story) -> None:
    panel = story.panel

    async def scenario() -> None:
        screen = identify_screen(story)
        story.router.show(ScreenId.IDENTIFY)
        await drive(story, lambda: screen.phase is IdentifyPhase.GRID)
        screen.select("candle")
        await drive(story, lambda: "candle" in screen.revealed)
        story.router.show(ScreenId.MENU)
        assert GRID not in panel.controls
        assert panel.floating == {}

        story.router.show(ScreenId.IDENTIFY)
        assert screen.phase is IdentifyPhase.INTRO
        assert screen.revealed == []

    asyncio.run(scenario())
