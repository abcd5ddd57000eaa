"""System-wide keyboard event sources powered by pyWinhook or ``keyboard``.

Both sources only observe: they normalise each raw event into a
:class:`hotkey_manager.KeyEvent`, hand it to a callback and let the event
continue to the focused application.
"""

from __future__ import annotations

import logging
import sys
import threading
import time
from typing import Callable, Optional

from hotkey_manager import KEY_DOWN, KEY_UP, KeyEvent

try:
    import win32api  # type: ignore
    import win32con  # type: ignore
except Exception:  # pragma: no cover - optional dependency on non-Windows platforms
    win32api = None  # type: ignore
    win32con = None  # type: ignore

try:
    import pyWinhook  # type: ignore
except Exception:  # pragma: no cover - optional dependency on non-Windows platforms
    pyWinhook = None  # type: ignore

try:
    import pythoncom  # type: ignore
except Exception:  # pragma: no cover - optional dependency on non-Windows platforms
    pythoncom = None  # type: ignore


EventCallback = Callable[[KeyEvent], None]

# Modifiers keep their side so releasing one side leaves the other held.
# Unprefixed names are what ``keyboard`` reports for the left-hand key.
_KEY_NAME_MAP = {
    "ctrl": "lctrl",
    "control": "lctrl",
    "left ctrl": "lctrl",
    "lcontrol": "lctrl",
    "right ctrl": "rctrl",
    "rcontrol": "rctrl",
    "alt": "lalt",
    "menu": "lalt",
    "left alt": "lalt",
    "lmenu": "lalt",
    "right alt": "ralt",
    "alt gr": "ralt",
    "rmenu": "ralt",
    "shift": "lshift",
    "left shift": "lshift",
    "right shift": "rshift",
    "windows": "lwin",
    "left windows": "lwin",
    "cmd": "lwin",
    "right windows": "rwin",
    "num lock": "numlock",
    "return": "enter",
    "esc": "escape",
    "back": "backspace",
    "prior": "pageup",
    "next": "pagedown",
    "page up": "pageup",
    "page down": "pagedown",
}


def normalize_key_name(name: Optional[str]) -> Optional[str]:
    """Map pyWinhook and ``keyboard`` key names to one token vocabulary."""

    if not name:
        return None
    token = name.strip().lower()
    if token in _KEY_NAME_MAP:
        return _KEY_NAME_MAP[token]
    for prefix in ("left ", "right "):
        if token.startswith(prefix):
            token = token[len(prefix):]
    return _KEY_NAME_MAP.get(token, token) or None


class KeyboardModuleAdapter:
    """Event source backed by ``keyboard.hook``."""

    def __init__(
        self,
        callback: EventCallback,
        *,
        keyboard_module=None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if keyboard_module is None:
            import keyboard  # type: ignore

            keyboard_module = keyboard
        self._keyboard = keyboard_module
        self._callback = callback
        self._handle = None
        self._logger = logger or logging.getLogger("virtualnumpad.keyboard")

    def start(self) -> None:
        if self._handle is not None:
            return
        self._handle = self._keyboard.hook(self._on_event, suppress=False)
        self._logger.info("keyboard hook installed")

    def stop(self) -> None:
        if self._handle is None:
            return
        try:
            self._keyboard.unhook(self._handle)
        finally:
            self._handle = None
            self._logger.info("keyboard hook removed")

    def _on_event(self, event) -> None:
        key = normalize_key_name(getattr(event, "name", None))
        kind = getattr(event, "event_type", None)
        if key is None or kind not in (KEY_DOWN, KEY_UP):
            return
        self._callback(KeyEvent(kind, key))


class PyWinhookKeyboardAdapter:
    """Low-level Windows keyboard hook with its own message pump thread."""

    def __init__(self, callback: EventCallback, *, logger: Optional[logging.Logger] = None) -> None:
        if pyWinhook is None or pythoncom is None:  # pragma: no cover - guarded by factory
            raise RuntimeError("pyWinhook is not available")

        self._callback = callback
        self._logger = logger or logging.getLogger("virtualnumpad.keyboard")
        self._stop_event = threading.Event()
        self._ready_event = threading.Event()
        self._thread_id: Optional[int] = None
        self._hook_manager: Optional["pyWinhook.HookManager"] = None
        self._pump_thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._pump_thread is not None and self._pump_thread.is_alive():
            return
        self._stop_event.clear()
        self._ready_event.clear()
        self._pump_thread = threading.Thread(
            target=self._run_message_loop, name="PyWinhookKeyboard", daemon=True
        )
        self._pump_thread.start()

        if not self._ready_event.wait(timeout=2.0) or self._hook_manager is None:
            raise RuntimeError("pyWinhook keyboard hook failed to initialise")
        self._logger.info("pyWinhook keyboard hook installed")

    def stop(self) -> None:
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        self._wake_message_loop()
        if self._pump_thread is not None and self._pump_thread.is_alive():
            self._pump_thread.join(timeout=1.0)
        self._pump_thread = None
        self._logger.info("pyWinhook keyboard hook removed")

    # Internal helpers -------------------------------------------------

    def _run_message_loop(self) -> None:
        if pythoncom is None or pyWinhook is None:  # pragma: no cover - guarded by __init__
            return

        try:
            pythoncom.CoInitialize()
        except Exception as exc:  # pragma: no cover - COM failure on the pump thread
            self._logger.error("CoInitialize failed: %s", exc)
            self._ready_event.set()
            return

        try:
            hook_manager = pyWinhook.HookManager()
            hook_manager.KeyDown = self._on_key_down
            hook_manager.KeyUp = self._on_key_up
            hook_manager.HookKeyboard()

            self._hook_manager = hook_manager
            if win32api is not None:  # pragma: no branch - platform specific
                self._thread_id = win32api.GetCurrentThreadId()  # type: ignore[attr-defined]
            self._ready_event.set()

            while not self._stop_event.is_set():
                try:
                    pythoncom.PumpWaitingMessages()
                except pythoncom.com_error:  # pragma: no cover - pump torn down
                    break
                time.sleep(0.01)
        finally:
            if self._hook_manager is not None:
                try:
                    self._hook_manager.UnhookKeyboard()
                except Exception as exc:  # pragma: no cover - hook already gone
                    self._logger.debug("UnhookKeyboard failed: %s", exc)
            self._hook_manager = None
            self._thread_id = None
            self._ready_event.set()
            pythoncom.CoUninitialize()

    def _wake_message_loop(self) -> None:
        thread_id = self._thread_id
        if thread_id is None or win32api is None or win32con is None:  # pragma: no cover - fallback
            return
        try:
            win32api.PostThreadMessage(thread_id, win32con.WM_NULL, 0, 0)
        except Exception as exc:  # pragma: no cover - thread already exited
            self._logger.debug("PostThreadMessage failed: %s", exc)

    def _forward(self, kind: str, event: "pyWinhook.KeyboardEvent") -> bool:
        # Keys injected by this process must not show up as held modifiers.
        if getattr(event, "Injected", 0):
            return True
        key = normalize_key_name(getattr(event, "Key", ""))
        if key is not None:
            self._callback(KeyEvent(kind, key))
        return True

    def _on_key_down(self, event: "pyWinhook.KeyboardEvent") -> bool:
        return self._forward(KEY_DOWN, event)

    def _on_key_up(self, event: "pyWinhook.KeyboardEvent") -> bool:
        return self._forward(KEY_UP, event)


def create_keyboard_listener(callback: EventCallback, *, logger: Optional[logging.Logger] = None):
    """Create the best available keyboard event source for this platform."""

    if sys.platform == "win32" and pyWinhook is not None and pythoncom is not None:
        return PyWinhookKeyboardAdapter(callback, logger=logger)
    return KeyboardModuleAdapter(callback, logger=logger)
