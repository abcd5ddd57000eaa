"""Style descriptors for keypad and control buttons."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

RGB = Tuple[int, int, int]

FROSTED_OPACITY = 0.7

LIGHT_PANEL = (240, 240, 240)
DARK_PANEL = (40, 40, 40)


class ButtonRole(Enum):
    KEY = "key"
    CONTROL = "control"


def blend(color: RGB, background: RGB, opacity: float) -> RGB:
    """Composite *color* over *background* at *opacity*."""

    return tuple(
        int(round(c * opacity + b * (1.0 - opacity))) for c, b in zip(color, background)
    )  # type: ignore[return-value]


def to_hex(color: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


# (idle, hover, pressed) per role/theme; light keypad colours depend on the mode.
_KEY_DARK = ((40, 40, 40), (50, 50, 50), (30, 30, 30))
_KEY_LIGHT_NUMERIC = ((200, 220, 240), (200, 200, 200), (180, 180, 180))
_KEY_LIGHT_SHORTCUT = ((240, 220, 200), (200, 200, 200), (180, 180, 180))
_CONTROL_DARK = ((60, 60, 60), (80, 80, 80), (100, 100, 100))
_CONTROL_LIGHT = ((240, 240, 240), (220, 220, 220), (200, 200, 200))


@dataclass(frozen=True)
class ButtonStyle:
    role: ButtonRole
    numeric_mode: bool
    dark_theme: bool
    frosted: bool

    @property
    def panel(self) -> RGB:
        return DARK_PANEL if self.dark_theme else LIGHT_PANEL

    def _palette(self) -> Tuple[RGB, RGB, RGB]:
        if self.role is ButtonRole.CONTROL:
            return _CONTROL_DARK if self.dark_theme else _CONTROL_LIGHT
        if self.dark_theme:
            return _KEY_DARK
        return _KEY_LIGHT_NUMERIC if self.numeric_mode else _KEY_LIGHT_SHORTCUT

    def _surface(self, color: RGB) -> str:
        if self.frosted:
            color = blend(color, self.panel, FROSTED_OPACITY)
        return to_hex(color)

    @property
    def fill(self) -> str:
        return self._surface(self._palette()[0])

    @property
    def hover(self) -> str:
        return self._surface(self._palette()[1])

    @property
    def pressed(self) -> str:
        return self._surface(self._palette()[2])

    @property
    def foreground(self) -> str:
        return "#ffffff" if self.dark_theme else "#000000"

    @property
    def border(self) -> str:
        return self.foreground

    @property
    def font_size(self) -> int:
        if self.role is ButtonRole.KEY and self.numeric_mode:
            return 16
        return 12


def style_for(role: ButtonRole, *, numeric_mode: bool, dark_theme: bool, frosted: bool) -> ButtonStyle:
    return ButtonStyle(role=role, numeric_mode=numeric_mode, dark_theme=dark_theme, frosted=frosted)
