from __future__ import annotations

import asyncio
import random

from conftest import drive, until

from casefile.audio.gateway import AudioGateway
from casefile.core.constants import TRACK_MAIN
from casefile.core.screen_router import ScreenId
from casefile.core.session import Pacing
from casefile.engine.story import Story
from casefile.engine.surface import BACK, DIALOGUE_TEXT, MENU_BUTTONS, PLAY_AGAIN, SCREEN, START
from casefile.screens.base import lead_slot


def start_story(story: Story) -> None:
    story.boot()
    assert story.panel.click(START, "start")


# ── Opening ─────────────────────────────────────────────────────────
def test_new_cadet_reaches_the_menu_and_reads_the_leads(story) -> None:
    panel = story.panel

    async def scenario() -> None:
        start_story(story)
        assert story.current is ScreenId.DIALOGUE
        assert story.audio.current_track == TRACK_MAIN

        await drive(story, lambda: panel.input is not None)
        assert panel.submit_input("  Jess ")
        assert story.flags.player_name == "Jess"

        await drive(story, lambda: story.current is ScreenId.MENU)
        menu = story.router.screen(ScreenId.MENU)
        assert menu.identify_enabled is False

        assert panel.click(MENU_BUTTONS, "leads")
        await drive(story, lambda: story.progress.leads_complete)

    asyncio.run(scenario())

    assert story.progress.leads == ["Woman. 20s.", "Has hair.", "Weird beverage called Fritz Kola."]
    assert panel.text(lead_slot(0)) == "Woman. 20s."
    assert panel.is_visible(BACK)
    assert story.progress.can_identify is False


def test_blank_name_keeps_the_prompt_open(story) -> None:
    panel = story.panel

    async def scenario() -> None:
        start_story(story)
        await drive(story, lambda: panel.input is not None)
        panel.submit_input("   ")
        await asyncio.sleep(0)
        assert panel.input is not None
        assert story.flags.player_name == ""

    asyncio.run(scenario())


def test_escape_skips_to_the_title(story) -> None:
    async def scenario() -> None:
        start_story(story)
        await asyncio.sleep(0)
        assert story.skip()
        assert story.current is ScreenId.TITLE

    asyncio.run(scenario())


# ── Evidence ────────────────────────────────────────────────────────
def test_evidence_is_examined_once(story) -> None:
    screen = story.router.screen(ScreenId.EVIDENCE)

    async def scenario() -> None:
        start_story(story)
        story.router.show(ScreenId.EVIDENCE)
        await drive(story, lambda: screen.intro_complete)

        assert screen.select("candle")
        assert not screen.select("d20")  # one at a time
        await drive(story, lambda: story.progress.is_evidence_complete("candle"))
        assert not screen.select("candle")
        assert not screen.select("nonexistent")

    asyncio.run(scenario())

    assert story.progress.leads == ["A Lavender Scented Candle"]
    assert story.progress.completed_evidence == ["candle"]


def test_missing_manuscript_is_renamed_on_leaving(story) -> None:
    screen = story.router.screen(ScreenId.EVIDENCE)
    panel = story.panel

    async def scenario() -> None:
        start_story(story)
        story.router.show(ScreenId.EVIDENCE)
        await drive(story, lambda: screen.intro_complete)
        screen.select("manuscript")
        await drive(story, lambda: story.progress.is_evidence_complete("manuscript"))

        assert story.progress.leads == ["Digital questionable manuscript"]
        assert panel.click(BACK, "back")
        assert story.current is ScreenId.MENU

    asyncio.run(scenario())

    assert story.progress.leads == ["Digital questionable manuscript (Suspiciously missing)"]
    assert panel.text(lead_slot(0)) == "Digital questionable manuscript (Suspiciously missing)"


def test_leaving_while_a_lead_types_keeps_the_lead_and_its_rename(story) -> None:
    screen = story.router.screen(ScreenId.EVIDENCE)
    panel = story.panel
    lead = "Digital questionable manuscript"

    async def scenario() -> None:
        start_story(story)
        story.router.show(ScreenId.EVIDENCE)
        await drive(story, lambda: screen.intro_complete)
        screen.select("manuscript")
        await drive(story, lambda: story.progress.has_lead(lead))
        assert panel.text(lead_slot(0)) != lead
        assert panel.click(BACK, "back")
        await until(lambda: panel.text(lead_slot(0)) == lead)
        assert not story.progress.is_evidence_complete("manuscript")

        story.router.show(ScreenId.EVIDENCE)
        assert screen.select("manuscript")
        await drive(story, lambda: story.progress.is_evidence_complete("manuscript"))
        assert panel.click(BACK, "back")

    asyncio.run(scenario())

    assert story.progress.leads == ["Digital questionable manuscript (Suspiciously missing)"]
    assert panel.text(lead_slot(0)) == "Digital questionable manuscript (Suspiciously missing)"


# ── Witnesses ───────────────────────────────────────────────────────
def test_witness_interview_brings_music_and_leads(story) -> None:
    screen = story.router.screen(ScreenId.WITNESS)
    cait = story.content.witnesses.find("cait")

    async def scenario() -> None:
        start_story(story)
        story.router.show(ScreenId.WITNESS)
        await drive(story, lambda: screen.intro_complete)

        assert screen.select("cait")
        assert story.audio.current_witness == "cait"
        assert story.audio.current_track == "bgm-cait"

        await drive(story, lambda: story.progress.is_witness_complete("cait"))
        assert not screen.select("cait")

    asyncio.run(scenario())

    assert story.progress.leads == list(cait.leads)
    assert story.audio.current_track == TRACK_MAIN
    assert story.audio.current_witness is None


def test_abandoned_interview_can_be_finished_later(story) -> None:
    screen = story.router.screen(ScreenId.WITNESS)
    panel = story.panel
    cait = story.content.witnesses.find("cait")

    async def scenario() -> None:
        start_story(story)
        story.router.show(ScreenId.WITNESS)
        await drive(story, lambda: screen.intro_complete)

        # Walk away during the first line.
        assert screen.select("cait")
        await until(lambda: screen.sequencer.waiting_for_input)
        assert panel.click(BACK, "back")
        assert story.audio.current_track == TRACK_MAIN
        assert story.progress.leads == []

        # Walk away again while the first lead is being written down.
        story.router.show(ScreenId.WITNESS)
        assert screen.select("cait")
        await drive(story, lambda: story.progress.has_lead(cait.leads[0]))
        assert panel.click(BACK, "back")
        await until(lambda: panel.text(lead_slot(0)) == cait.leads[0])
        assert not story.progress.is_witness_complete("cait")

        story.router.show(ScreenId.WITNESS)
        assert screen.select("cait")
        await drive(story, lambda: story.progress.is_witness_complete("cait"))

    asyncio.run(scenario())

    assert story.progress.leads == list(cait.leads)
    for index, lead in enumerate(cait.leads):
        assert panel.text(lead_slot(index)) == lead


def test_alien_witness_tints_the_screen(story) -> None:
    screen = story.router.screen(ScreenId.WITNESS)
    panel = story.panel

    async def scenario() -> None:
        start_story(story)
        story.router.show(ScreenId.WITNESS)
        await drive(story, lambda: screen.intro_complete)
        screen.select("glorp")
        assert panel.has_flag(SCREEN, "alien")
        await drive(story, lambda: story.progress.is_witness_complete("glorp"))

    asyncio.run(scenario())

    assert not panel.has_flag(SCREEN, "alien")


# ── Gating ──────────────────────────────────────────────────────────
def test_identify_unlocks_once_everything_is_done(story) -> None:
    progress = story.progress

    async def scenario() -> None:
        start_story(story)
        progress.leads_complete = True
        for item in story.content.evidence.items:
            progress.mark_evidence_complete(item.id)
        story.router.show(ScreenId.MENU)
        assert story.router.screen(ScreenId.MENU).identify_enabled is False

        for witness in story.content.witnesses.witnesses:
            progress.mark_witness_complete(witness.id)
        story.router.show(ScreenId.LEADS)
        story.router.show(ScreenId.MENU)
        assert story.router.screen(ScreenId.MENU).identify_enabled is True
        assert story.panel.click(MENU_BUTTONS, "identify")
        assert story.current is ScreenId.IDENTIFY

    asyncio.run(scenario())


# ── Play again ──────────────────────────────────────────────────────
def test_play_again_returns_to_a_cold_start(story, content) -> None:
    panel = story.panel
    fresh = Story(content, audio=AudioGateway(pacing=Pacing(0)), pacing=Pacing(0), rng=random.Random(7))

    async def scenario() -> None:
        start_story(story)
        await drive(story, lambda: panel.input is not None)
        panel.submit_input("Jess")
        await drive(story, lambda: story.current is ScreenId.MENU)
        panel.click(MENU_BUTTONS, "leads")
        await drive(story, lambda: story.progress.leads_complete)
        panel.click(BACK, "back")

        assert panel.click(MENU_BUTTONS, "exit")
        assert story.current is ScreenId.END
        assert panel.click(PLAY_AGAIN, "again")
        await asyncio.sleep(0)
        fresh.boot()

    asyncio.run(scenario())

    assert story.current is ScreenId.START
    assert story.progress.leads == []
    assert not story.progress.leads_complete
    assert story.flags.player_name == ""
    assert story.audio.current_track is None
    assert panel.visible == fresh.panel.visible
    assert panel.labels(START) == fresh.panel.labels(START)
    assert panel.texts == fresh.panel.texts
    assert not story.menu_idle.is_running

    evidence = story.router.screen(ScreenId.EVIDENCE)
    assert evidence.intro_complete is False


def test_play_again_then_replay_the_opening(story, content) -> None:
    panel = story.panel
    intro = story.router.screen(ScreenId.DIALOGUE)
    first_line = content.intro[0].text

    async def opening() -> str:
        start_story(story)
        await until(lambda: intro.sequencer.waiting_for_input)
        return panel.text(DIALOGUE_TEXT)

    async def scenario() -> tuple[str, str]:
        cold = await opening()
        story.exit_to_end()
        panel.click(PLAY_AGAIN, "again")
        assert story.current is ScreenId.START
        again = await opening()
        return cold, again

    cold, again = asyncio.run(scenario())

    assert cold == again == first_line
    assert story.current is ScreenId.DIALOGUE
    assert story.progress.can_identify is False
