"""
Who Is Daphne? - Menu & End Screens
====================================
The hub between case sections, and the end card.

    LEADS              → leads briefing
    PHYSICAL EVIDENCE  → evidence grid
    WITNESS REPORTS    → witness list
    IDENTIFY SUSPECT   → finale (only once everything else is done)
    EXIT               → end card
"""

from __future__ import annotations

from functools import partial

from casefile.core.screen_router import ScreenId
from casefile.engine.surface import END_MESSAGE, MENU_BUTTONS, PLAY_AGAIN, Control
from casefile.screens.base import Screen

_MENU_ITEMS: list[tuple[str, str, ScreenId]] = [
    ("leads", "Leads", ScreenId.LEADS),
    ("evidence", "Physical Evidence", ScreenId.EVIDENCE),
    ("witness", "Witness Reports", ScreenId.WITNESS),
    ("identify", "Identify Suspect", ScreenId.IDENTIFY),
]


class MenuScreen(Screen):
    screen_id = ScreenId.MENU
    shows_leads = True

    def enter(self) -> None:
        controls = [
            Control(key=key, label=label, on_click=partial(self._open, target))
            for key, label, target in _MENU_ITEMS
        ]
        controls.append(Control(key="exit", label="Exit", on_click=self._exit_game))
        self.panel.set_controls(MENU_BUTTONS, controls)
        self.refresh_gating()
        self.story.menu_idle.start()

    def refresh_gating(self) -> None:
        self.panel.set_enabled(MENU_BUTTONS, self.progress.can_identify, key="identify")

    @property
    def identify_enabled(self) -> bool:
        control = self.panel.control(MENU_BUTTONS, "identify")
        return bool(control and control.enabled)

    def _open(self, target: ScreenId) -> None:
        self.audio.play_sfx("click")
        self.go(target)

    def _exit_game(self) -> None:
        self.audio.play_sfx("click")
        self.story.exit_to_end()

    def exit(self) -> None:
        super().exit()
        self.story.menu_idle.stop()
        self.panel.clear_controls(MENU_BUTTONS)


class EndScreen(Screen):
    screen_id = ScreenId.END

    def enter(self) -> None:
        self.audio.pause_current()
        self.panel.show(END_MESSAGE)
        self.panel.set_controls(PLAY_AGAIN, [Control(key="again", label="Play Again", on_click=self._again)])

    def _again(self) -> None:
        self.audio.play_sfx("click")
        self.story.play_again()

    def exit(self) -> None:
        super().exit()
        self.panel.hide(END_MESSAGE)
        self.panel.clear_controls(PLAY_AGAIN)
