from __future__ import annotations

import asyncio

from casefile.audio.gateway import AudioGateway
from casefile.core.constants import (
    MAIN_MUSIC_VOLUME,
    TRACK_FINAL,
    TRACK_MAIN,
    TRACK_REGISTER_VOLUME,
    WITNESS_MUSIC_VOLUME,
)
from casefile.core.session import Pacing


def make_gateway(loader) -> AudioGateway:
    gateway = AudioGateway(loader, Pacing(0))
    gateway.register_defaults()
    return gateway


def test_one_current_track(loader) -> None:
    gateway = make_gateway(loader)

    gateway.play_track(TRACK_MAIN)
    gateway.play_track(TRACK_FINAL, 0.2)

    assert gateway.current_track == TRACK_FINAL
    assert not loader.handles[TRACK_MAIN].playing
    assert loader.handles[TRACK_FINAL].playing
    assert gateway.track_volume(TRACK_FINAL) == 0.2


def test_unknown_names_are_ignored(loader) -> None:
    gateway = make_gateway(loader)
    gateway.play_track("bgm-nope")
    gateway.play_sfx("kazoo")
    asyncio.run(gateway.fade_to_track("bgm-nope"))

    assert gateway.current_track is None
    assert "kazoo" not in loader.played


def test_effects_rewind_before_playing(loader) -> None:
    gateway = make_gateway(loader)
    gateway.play_sfx("click")
    gateway.play_sfx("click")

    assert loader.played.count("click") == 2
    assert loader.handles["click"].rewinds == 2


def test_fade_to_track_swaps_the_current_track(loader) -> None:
    gateway = make_gateway(loader)
    gateway.play_track(TRACK_MAIN)

    asyncio.run(gateway.fade_to_track(TRACK_FINAL, 2000))

    assert gateway.current_track == TRACK_FINAL
    assert gateway.track_volume(TRACK_MAIN) == 0.0
    assert not loader.handles[TRACK_MAIN].playing
    assert gateway.track_volume(TRACK_FINAL) == TRACK_REGISTER_VOLUME


def test_fades_do_not_interleave(loader) -> None:
    gateway = make_gateway(loader)
    gateway.play_track(TRACK_MAIN)

    async def scenario() -> None:
        await asyncio.gather(
            gateway.fade_out(TRACK_MAIN, 1000),
            gateway.fade_in(TRACK_MAIN, 0.8, 1000),
        )

    asyncio.run(scenario())

    # The fade-in waited for the fade-out to finish, so it has the last word.
    assert gateway.track_volume(TRACK_MAIN) == 0.8


def test_witness_music_round_trip(loader) -> None:
    gateway = make_gateway(loader)
    gateway.play_track(TRACK_MAIN)

    gateway.switch_to_witness_music("glorp")
    assert gateway.current_witness == "glorp"
    assert gateway.current_track == "bgm-glorp"
    assert gateway.track_volume("bgm-glorp") == WITNESS_MUSIC_VOLUME
    assert not loader.handles[TRACK_MAIN].playing

    gateway.switch_to_main_music()
    assert gateway.current_witness is None
    assert gateway.current_track == TRACK_MAIN
    assert gateway.track_volume(TRACK_MAIN) == MAIN_MUSIC_VOLUME
    assert not loader.handles["bgm-glorp"].playing
    assert loader.handles["bgm-glorp"].rewinds >= 1


def test_stop_all_leaves_nothing_current(loader) -> None:
    gateway = make_gateway(loader)
    gateway.play_track(TRACK_MAIN)
    gateway.stop_all()

    assert gateway.current_track is None
    assert not any(handle.playing for handle in loader.handles.values())
