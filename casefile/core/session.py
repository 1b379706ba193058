"""
Who Is Daphne? - Session Flags & Pacing
========================================
The small amount of state every screen shares: whether text is being
typed right now, whether in-flight typing should bail out, and the name
the player typed at the start.  ``Pacing`` turns the millisecond delays
sprinkled through the screens into awaitable pauses.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass


@dataclass
class SessionFlags:
    """Cooperative clock shared by all sequencers.

    Only one screen is live at a time; the router flips ``skip`` when it
    switches screens so a reveal loop still running on the previous screen
    observes it and returns.
    """

    typing: bool = False
    skip: bool = False
    player_name: str = ""

    def interrupt(self) -> None:
        self.skip = True
        self.typing = False

    def reset(self) -> None:
        self.typing = False
        self.skip = False
        self.player_name = ""


class Pacing:
    """Scales every dramatic pause by a single factor.

    A scale of ``0`` keeps all ordering (each pause still yields to the
    event loop once) but removes the wall-clock wait, which is what the
    test-suite runs with.
    """

    def __init__(self, scale: float = 1.0) -> None:
        self.scale = max(0.0, float(scale))

    def seconds(self, ms: float) -> float:
        return (ms / 1000.0) * self.scale

    async def sleep(self, ms: float) -> None:
        await asyncio.sleep(self.seconds(ms))
