from __future__ import annotations

import asyncio
import random

from casefile.core.constants import FLOATING_LEFT_BAND, FLOATING_RIGHT_BAND
from casefile.core.session import Pacing
from casefile.engine.floating_text import FEAR_CLOUD, NORMAL, TRAIT_CLOUD, FloatingText


def test_one_shot_cloud_spawns_every_word_once(panel) -> None:
    cloud = FloatingText(panel, ["kind", "brave", "funny"], TRAIT_CLOUD, random.Random(1), Pacing(0))

    async def scenario() -> None:
        cloud.start()
        for _ in range(10):
            await asyncio.sleep(0)

    asyncio.run(scenario())

    assert cloud.spawned == 3
    assert not cloud.is_running


def test_looping_cloud_runs_until_stopped(panel) -> None:
    cloud = FloatingText(panel, ["Fat.", "Loud."], FEAR_CLOUD, random.Random(1), Pacing(0))

    async def scenario() -> int:
        cloud.start()
        for _ in range(10):
            await asyncio.sleep(0)
        assert cloud.spawned > 2
        cloud.stop()
        stopped_at = cloud.spawned
        for _ in range(10):
            await asyncio.sleep(0)
        return stopped_at

    stopped_at = asyncio.run(scenario())

    assert cloud.spawned == stopped_at


def test_words_spawn_at_the_edges(panel) -> None:
    cloud = FloatingText(panel, ["soft"], NORMAL, random.Random(5), Pacing(1))

    async def scenario() -> None:
        cloud.start()
        (word,) = cloud.live_words
        assert word.text == "soft"
        assert FLOATING_LEFT_BAND[0] <= word.x <= FLOATING_LEFT_BAND[1] or \
            FLOATING_RIGHT_BAND[0] <= word.x <= FLOATING_RIGHT_BAND[1]
        assert NORMAL.min_opacity <= word.opacity <= NORMAL.max_opacity
        cloud.dispose()

    asyncio.run(scenario())


def test_clear_fades_then_dispose_removes(panel) -> None:
    cloud = FloatingText(panel, ["a", "b"], FEAR_CLOUD, random.Random(2), Pacing(1))

    async def scenario() -> None:
        cloud.start()
        assert len(panel.floating) == 1
        cloud.clear()
        assert not cloud.is_running
        assert all(word.fading for word in panel.floating.values())
        cloud.dispose()
        assert panel.floating == {}

    asyncio.run(scenario())


def test_empty_cloud_never_starts(panel) -> None:
    cloud = FloatingText(panel, [], NORMAL, random.Random(0), Pacing(0))
    cloud.start()

    assert not cloud.is_running
    assert panel.floating == {}


def test_looping_cloud_only_holds_timers_for_words_on_screen(panel) -> None:
    cloud = FloatingText(panel, ["Fat.", "Loud.", "Weird."], FEAR_CLOUD, random.Random(3), Pacing(0))

    async def scenario() -> None:
        cloud.start()
        for _ in range(40):
            await asyncio.sleep(0)
        assert cloud.spawned > 10
        assert set(cloud._timers) == {word.id for word in cloud.live_words}
        cloud.dispose()

    asyncio.run(scenario())

    assert cloud._timers == {}
