"""
Who Is Daphne? - Screen Router
===============================
Shows exactly one screen at a time.

    start → dialogue → title → menu ⇄ leads / evidence / witness
                                  menu → identify → end
                                  menu → end (Exit)

Switching is immediate: the shared flags are interrupted first so any
reveal loop still running on the old screen bails out, then the old
screen's ``exit`` cancels the tasks it owns, then the new screen
``enter``s.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from casefile.engine.surface import LEADS_LIST

if TYPE_CHECKING:
    from casefile.core.session import SessionFlags
    from casefile.engine.surface import Panel

logger = logging.getLogger(__name__)


class ScreenId(str, Enum):
    START = "start"
    DIALOGUE = "dialogue"
    TITLE = "title"
    MENU = "menu"
    LEADS = "leads"
    EVIDENCE = "evidence"
    WITNESS = "witness"
    IDENTIFY = "identify"
    END = "end"


# ── Screen Protocol ─────────────────────────────────────────────────
class ScreenProtocol(Protocol):
    """Every screen implements these."""

    screen_id: ScreenId
    shows_leads: bool

    def enter(self) -> None: ...
    def exit(self) -> None: ...
    def advance(self) -> bool: ...
    def skip(self) -> bool: ...
    def reset(self) -> None: ...


# ── Router ──────────────────────────────────────────────────────────
class ScreenRouter:
    def __init__(self, panel: "Panel", flags: "SessionFlags") -> None:
        self._panel = panel
        self._flags = flags
        self._screens: dict[ScreenId, ScreenProtocol] = {}
        self._current: ScreenId | None = None

    def register(self, screen: ScreenProtocol) -> None:
        self._screens[screen.screen_id] = screen

    @property
    def current_id(self) -> ScreenId | None:
        return self._current

    @property
    def current(self) -> ScreenProtocol | None:
        return self._screens[self._current] if self._current is not None else None

    def screen(self, screen_id: ScreenId) -> ScreenProtocol:
        return self._screens[screen_id]

    def show(self, screen_id: ScreenId) -> None:
        target = self._screens.get(screen_id)
        if target is None:
            logger.debug("[Router] No screen registered for %s", screen_id)
            return

        self._flags.interrupt()
        previous = self.current
        if previous is not None:
            previous.exit()

        logger.debug("[Router] %s -> %s", self._current.value if self._current else "-", screen_id.value)
        self._current = screen_id
        self._panel.screen = screen_id.value
        if target.shows_leads:
            self._panel.show(LEADS_LIST)
        else:
            self._panel.hide(LEADS_LIST)
        target.enter()

    # ── Input funnel ────────────────────────────────────────────────
    def advance(self) -> bool:
        """Click / Enter on the dialogue box of whichever screen is live."""
        screen = self.current
        return screen.advance() if screen is not None else False

    def skip(self) -> bool:
        screen = self.current
        return screen.skip() if screen is not None else False

    def reset(self) -> None:
        if self.current is not None:
            self.current.exit()
        for screen in self._screens.values():
            screen.reset()
        self._current = None
