from __future__ import annotations

import asyncio
import random
from typing import Callable

import pytest

from casefile.audio.gateway import AudioGateway
from casefile.core.session import Pacing, SessionFlags
from casefile.engine.content import StoryContent, load_content
from casefile.engine.reveal import TextReveal
from casefile.engine.story import Story
from casefile.engine.surface import CHOICES, CONFIRM, CONTINUE, Panel


# ── Fakes ───────────────────────────────────────────────────────────
class RecordingHandle:
    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log
        self.volume = 0.0
        self.playing = False
        self.rewinds = 0

    def play(self, loop: bool = False) -> None:
        self.playing = True
        self.log.append(self.name)

    def pause(self) -> None:
        self.playing = False

    def rewind(self) -> None:
        self.rewinds += 1


class RecordingLoader:
    """Hands out recording handles; ``played`` lists every play() in order."""

    def __init__(self) -> None:
        self.played: list[str] = []
        self.handles: dict[str, RecordingHandle] = {}

    def _handle(self, name: str) -> RecordingHandle:
        handle = self.handles.setdefault(name, RecordingHandle(name, self.played))
        return handle

    def track(self, name: str) -> RecordingHandle:
        return self._handle(name)

    def sfx(self, name: str) -> RecordingHandle:
        return self._handle(name)


class RecordingVoice:
    def __init__(self) -> None:
        self.emitted: list[tuple[str, bool, str]] = []

    def emit(self, char: str, loud: bool, profile: str) -> None:
        self.emitted.append((char, loud, profile))

    @property
    def text(self) -> str:
        return "".join(c for c, _, _ in self.emitted)


# ── Async helpers ───────────────────────────────────────────────────
async def until(predicate: Callable[[], bool], limit: int = 50_000) -> None:
    """Yield to the loop until *predicate* holds."""
    for _ in range(limit):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition was never reached")


async def drive(story: Story, predicate: Callable[[], bool], limit: int = 200_000) -> None:
    """Keep pressing whatever the story waits on (Enter, Continue, first choice) until *predicate*."""
    panel = story.panel
    for _ in range(limit):
        if predicate():
            return
        story.advance()
        for group in (CONTINUE, CONFIRM, CHOICES):
            controls = panel.controls.get(group)
            if controls and panel.is_visible(group):
                panel.click(group, controls[0].key)
                break
        await asyncio.sleep(0)
    raise AssertionError("story never reached the expected point")


# ── Fixtures ────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def content() -> StoryContent:
    return load_content()


@pytest.fixture
def loader() -> RecordingLoader:
    return RecordingLoader()


@pytest.fixture
def voice() -> RecordingVoice:
    return RecordingVoice()


@pytest.fixture
def story(content: StoryContent, loader: RecordingLoader, voice: RecordingVoice) -> Story:
    pacing = Pacing(0)
    return Story(
        content,
        audio=AudioGateway(loader, pacing),
        voice=voice,
        pacing=pacing,
        rng=random.Random(7),
    )


@pytest.fixture
def panel() -> Panel:
    return Panel()


@pytest.fixture
def reveal(panel: Panel, voice: RecordingVoice) -> TextReveal:
    return TextReveal(panel, SessionFlags(), Pacing(0), voice)
