"""Global hotkey recognition over raw key-down/key-up events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

from app_state import (
    COMMAND_CYCLE_LANGUAGE,
    COMMAND_TOGGLE_MODE,
    COMMAND_TOGGLE_THEME,
    COMMAND_TOGGLE_TOP,
)

KEY_DOWN = "down"
KEY_UP = "up"

# A binding modifier is held when any of its tokens is pressed.
MODIFIER_TOKENS: Dict[str, FrozenSet[str]] = {
    "ctrl": frozenset({"ctrl", "lctrl", "rctrl"}),
    "alt": frozenset({"alt", "lalt", "ralt"}),
    "shift": frozenset({"shift", "lshift", "rshift"}),
    "win": frozenset({"win", "lwin", "rwin"}),
}


def held_modifiers(pressed: Iterable[str]) -> FrozenSet[str]:
    """Return the side-independent modifiers held in *pressed*."""

    keys = set(pressed)
    return frozenset(name for name, tokens in MODIFIER_TOKENS.items() if tokens & keys)


@dataclass(frozen=True)
class HotkeyBinding:
    """A trigger key plus the modifiers that must already be held."""

    command: str
    trigger: str
    modifiers: FrozenSet[str]
    display: str


@dataclass(frozen=True)
class KeyEvent:
    """Normalised key event handed over by a keyboard event source."""

    kind: str
    key: str


_ALIAS_MAP = {
    "esc": "escape",
    "return": "enter",
    "del": "delete",
    "pgup": "pageup",
    "page up": "pageup",
    "prior": "pageup",
    "pgdn": "pagedown",
    "page down": "pagedown",
    "next": "pagedown",
    "back": "backspace",
    "num lock": "numlock",
    "num_lock": "numlock",
}

_NAMED_KEYS = {
    "escape",
    "tab",
    "space",
    "enter",
    "backspace",
    "delete",
    "home",
    "end",
    "pageup",
    "pagedown",
    "left",
    "right",
    "up",
    "down",
    "numlock",
}


def _parse_key_token(token: str) -> Optional[str]:
    normalized = _ALIAS_MAP.get(token.lower(), token.lower())
    if len(normalized) == 1 and normalized.isalnum():
        return normalized
    if normalized.startswith("f") and normalized[1:].isdigit() and 1 <= int(normalized[1:]) <= 24:
        return normalized
    if normalized in _NAMED_KEYS:
        return normalized
    return None


def build_hotkey_binding(command: str, combo: str) -> HotkeyBinding:
    """Create a :class:`HotkeyBinding` from a textual representation."""

    parts = [part.strip() for part in combo.split("+") if part.strip()]
    if not parts:
        raise ValueError(f"Invalid hotkey definition: {combo!r}")

    modifiers: Set[str] = set()
    keys: List[str] = []
    trigger: Optional[str] = None

    for token in parts:
        normalized = token.lower()
        if normalized in {"ctrl", "control"}:
            modifiers.add("ctrl")
            keys.append("Ctrl")
        elif normalized == "alt":
            modifiers.add("alt")
            keys.append("Alt")
        elif normalized == "shift":
            modifiers.add("shift")
            keys.append("Shift")
        elif normalized in {"win", "windows"}:
            modifiers.add("win")
            keys.append("Win")
        else:
            key = _parse_key_token(token)
            if key is None:
                raise ValueError(f"Unknown key token: {token!r}")
            if trigger is not None:
                raise ValueError(f"Multiple non-modifier keys in hotkey: {combo!r}")
            trigger = key
            keys.append(token.upper() if len(token) == 1 else token)

    if trigger is None:
        raise ValueError(f"Hotkey combination is missing a non-modifier key: {combo!r}")

    return HotkeyBinding(
        command=command,
        trigger=trigger,
        modifiers=frozenset(modifiers),
        display="+".join(keys),
    )


DEFAULT_BINDINGS: Sequence[HotkeyBinding] = (
    build_hotkey_binding(COMMAND_TOGGLE_TOP, "Ctrl+T"),
    build_hotkey_binding(COMMAND_TOGGLE_MODE, "NumLock"),
    build_hotkey_binding(COMMAND_TOGGLE_MODE, "Alt+N"),
    build_hotkey_binding(COMMAND_CYCLE_LANGUAGE, "Ctrl+L"),
    build_hotkey_binding(COMMAND_TOGGLE_THEME, "Ctrl+D"),
)


class GlobalInputHook:
    """Tracks held keys and dispatches bound commands on key-down.

    Runs wherever :meth:`process` is called from; the application calls it
    on the Tk thread only. Every key-down that completes a chord dispatches
    once, so OS auto-repeat dispatches again while the trigger is held.
    Modifier keys are tracked per side (``lctrl``/``rctrl``); a binding's
    ``ctrl`` is satisfied while either one is down.
    """

    def __init__(
        self,
        dispatch: Callable[[str], None],
        bindings: Iterable[HotkeyBinding] = DEFAULT_BINDINGS,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._dispatch = dispatch
        self._bindings: List[HotkeyBinding] = list(bindings)
        self._pressed: Set[str] = set()
        self._logger = logger or logging.getLogger("virtualnumpad.hotkeys")

    @property
    def pressed_keys(self) -> FrozenSet[str]:
        return frozenset(self._pressed)

    def describe_bindings(self) -> Sequence[str]:
        return [f"{binding.command}: {binding.display}" for binding in self._bindings]

    def matching_bindings(self, key: str) -> List[HotkeyBinding]:
        modifiers = held_modifiers(self._pressed)
        return [
            binding
            for binding in self._bindings
            if binding.trigger == key and binding.modifiers <= modifiers
        ]

    def process(self, event: KeyEvent) -> None:
        if event.kind == KEY_DOWN:
            self.on_key_down(event.key)
        elif event.kind == KEY_UP:
            self.on_key_up(event.key)
        else:
            self._logger.debug("Ignoring key event of kind %r", event.kind)

    def on_key_down(self, key: str) -> None:
        self._pressed.add(key)
        for binding in self.matching_bindings(key):
            self._logger.info("Hotkey %s -> %s", binding.display, binding.command)
            try:
                self._dispatch(binding.command)
            except Exception as exc:
                self._logger.exception("Error while dispatching %s: %s", binding.command, exc)

    def on_key_up(self, key: str) -> None:
        self._pressed.discard(key)

    def reset(self) -> None:
        """Forget every held key, e.g. after the event source restarts."""

        if self._pressed:
            self._logger.debug("Clearing pressed keys %s", sorted(self._pressed))
        self._pressed.clear()
