"""
Who Is Daphne? - Choice Resolver
=================================
Shows mutually exclusive options and plays the chosen response.

The response shapes were fixed when the content was loaded:

    Plain   - reveal it, then one closing wait
    Lines   - reveal each, waiting for the player between them, then one
              closing wait
    Steps   - hand the nested script back to the host sequencer, which may
              meet further choices inside it

The closing wait is a labelled button when the choice step supplied one
for the picked option, otherwise an ordinary "press Enter" wait.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import TYPE_CHECKING, Protocol, Sequence

from casefile.engine.script import Lines, Plain, ResponsePayload, Script, Steps
from casefile.engine.surface import CHOICES, Control, Panel

if TYPE_CHECKING:
    from casefile.audio.gateway import AudioGateway

logger = logging.getLogger(__name__)


class ResponseHost(Protocol):
    """What a response needs from the sequencer that asked the question."""

    async def say_line(self, text: str) -> None: ...
    async def wait_for_input(self) -> None: ...
    async def wait_for_button(self, label: str) -> None: ...
    async def run_nested(self, steps: Script) -> bool: ...


class ChoiceResolver:
    def __init__(self, panel: Panel, audio: "AudioGateway", group: str = CHOICES) -> None:
        self.panel = panel
        self.audio = audio
        self.group = group

    async def present(self, labels: Sequence[str], hovers: Sequence[str | None] = ()) -> int:
        """Mount one control per label and wait for the first pick."""
        picked: asyncio.Future[int] = asyncio.get_running_loop().create_future()

        def pick(index: int) -> None:
            if picked.done():
                return
            self.audio.play_sfx("click")
            self.panel.clear_controls(self.group)
            picked.set_result(index)

        controls = [
            Control(
                key=str(i),
                label=label,
                hover_label=hovers[i] if i < len(hovers) else None,
                on_click=partial(pick, i),
            )
            for i, label in enumerate(labels)
        ]
        self.panel.set_controls(self.group, controls)
        try:
            return await picked
        finally:
            if not picked.done() or picked.cancelled():
                self.panel.clear_controls(self.group)

    async def resolve(self, payload: ResponsePayload, host: ResponseHost, closing_label: str | None = None) -> bool:
        """Play *payload*.  Returns ``False`` when a nested script stopped early."""
        match payload:
            case Plain(text=text):
                await host.say_line(text)
            case Lines(lines=lines):
                for i, line in enumerate(lines):
                    await host.say_line(line)
                    if i < len(lines) - 1:
                        await host.wait_for_input()
            case Steps(steps=steps):
                return await host.run_nested(steps)

        if closing_label:
            await host.wait_for_button(closing_label)
        else:
            await host.wait_for_input()
        return True
