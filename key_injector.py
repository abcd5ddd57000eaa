"""Synthetic keystrokes delivered to the foreground application."""

from __future__ import annotations

import logging
import sys
from typing import Dict, List, Optional, Sequence, Tuple

NUMERIC_SYMBOLS = frozenset("0123456789.=+-*/")

# Symbol -> (virtual key constant name, extended-key flag). "=" is keypad Enter.
_NUMPAD_KEYS: Dict[str, Tuple[str, bool]] = {
    **{str(digit): (f"VK_NUMPAD{digit}", False) for digit in range(10)},
    ".": ("VK_DECIMAL", False),
    "=": ("VK_RETURN", True),
    "+": ("VK_ADD", False),
    "-": ("VK_SUBTRACT", False),
    "*": ("VK_MULTIPLY", False),
    "/": ("VK_DIVIDE", True),
}

SHORTCUT_CHORDS: Dict[str, Tuple[str, ...]] = {
    "COPY": ("VK_CONTROL", "C"),
    "PASTE": ("VK_CONTROL", "V"),
    "SAVE": ("VK_CONTROL", "S"),
    "CUT": ("VK_CONTROL", "X"),
    "UNDO": ("VK_CONTROL", "Z"),
    "REDO": ("VK_CONTROL", "Y"),
    "NEW": ("VK_CONTROL", "N"),
    "OPEN": ("VK_CONTROL", "O"),
    "FIND": ("VK_CONTROL", "F"),
    "REPLACE": ("VK_CONTROL", "H"),
    "PRINT": ("VK_CONTROL", "P"),
    "HELP": ("VK_F1",),
}

KEYEVENTF_EXTENDEDKEY = 0x0001
KEYEVENTF_KEYUP = 0x0002


class InjectionError(RuntimeError):
    """Raised when the platform refuses to synthesise keyboard input."""


def _vk_constant(win32con: object, name: str) -> int:
    if len(name) == 1:
        return ord(name.upper())
    try:
        return getattr(win32con, name)
    except AttributeError as exc:
        raise InjectionError(f"Unknown virtual key {name}") from exc


class KeyInjector:
    """Sends keypad keystrokes and shortcut chords through ``keybd_event``.

    Failures are logged and reported as ``False``; nothing is retried.
    """

    def __init__(
        self,
        *,
        win32api_module: Optional[object] = None,
        win32con_module: Optional[object] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._win32api = win32api_module
        self._win32con = win32con_module
        self._logger = logger or logging.getLogger("virtualnumpad.injector")

    def _load_win32_modules(self) -> None:
        if self._win32api is not None and self._win32con is not None:
            return
        if sys.platform != "win32":
            raise InjectionError("Key injection is only supported on Windows")
        try:
            import win32api  # type: ignore
            import win32con  # type: ignore
        except ImportError as exc:
            raise InjectionError("pywin32 is required for key injection") from exc

        self._win32api = self._win32api or win32api
        self._win32con = self._win32con or win32con

    def _send(self, vk: int, flags: int) -> None:
        assert self._win32api is not None
        map_virtual_key = getattr(self._win32api, "MapVirtualKey", None)
        try:
            scan = map_virtual_key(vk, 0) & 0xFF if map_virtual_key is not None else 0
            self._win32api.keybd_event(vk, scan, flags, 0)
        except Exception as exc:
            raise InjectionError(f"keybd_event failed for vk=0x{vk:02x}: {exc}") from exc

    def press(self, symbol: str) -> bool:
        """Tap the numeric-keypad key for *symbol* once."""

        entry = _NUMPAD_KEYS.get(symbol)
        if entry is None:
            self._logger.debug("Ignoring non-keypad symbol %r", symbol)
            return False
        name, extended = entry
        try:
            self._load_win32_modules()
            vk = _vk_constant(self._win32con, name)
            flags = KEYEVENTF_EXTENDEDKEY if extended else 0
            self._send(vk, flags)
        except InjectionError as exc:
            self._logger.error("Error simulating key press %r: %s", symbol, exc)
            return False
        try:
            self._send(vk, flags | KEYEVENTF_KEYUP)
        except InjectionError as exc:
            self._logger.error(
                "Key %r (vk=0x%02x) may be stuck down; release failed: %s", symbol, vk, exc
            )
            return False
        return True

    def send_shortcut(self, name: str) -> bool:
        """Inject the chord bound to a shortcut-mode button."""

        chord = SHORTCUT_CHORDS.get(name)
        if chord is None:
            self._logger.debug("No chord for shortcut %r", name)
            return False
        return self.send_chord(chord)

    def send_chord(self, names: Sequence[str]) -> bool:
        pressed: List[int] = []
        try:
            self._load_win32_modules()
            codes = [_vk_constant(self._win32con, name) for name in names]
            for vk in codes:
                self._send(vk, 0)
                pressed.append(vk)
        except InjectionError as exc:
            self._logger.error("Error simulating chord %s: %s", "+".join(names), exc)
            self._release(pressed)
            return False
        return self._release(pressed)

    def _release(self, pressed: List[int]) -> bool:
        ok = True
        for vk in reversed(pressed):
            try:
                self._send(vk, KEYEVENTF_KEYUP)
            except InjectionError as exc:
                self._logger.error("Error releasing vk=0x%02x: %s", vk, exc)
                ok = False
        return ok
