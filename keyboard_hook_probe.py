"""Record raw keyboard events and show which numpad hotkey they would fire.

Run this on a machine where the global hotkeys misbehave to see what the
hook actually receives. Every event is printed with a timestamp, the
normalised key token, the keys currently considered held and the command a
key-down would dispatch. Nothing is dispatched for real.

Usage example::

    python keyboard_hook_probe.py --log keyboard_events.log

Press ``Ctrl+Shift+Q`` or ``Ctrl+C`` to stop the capture.
"""

from __future__ import annotations

import argparse
import datetime as _dt
import sys
import time
from pathlib import Path
from typing import List, Optional

import keyboard

from hotkey_manager import GlobalInputHook, KeyEvent
from keyboard_adapter import normalize_key_name


class HookProbe:
    """Feeds raw events through a :class:`GlobalInputHook` that only records."""

    def __init__(self) -> None:
        self.fired: List[str] = []
        self._hook = GlobalInputHook(self.fired.append)

    def observe(self, name: Optional[str], event_type: str) -> str:
        key = normalize_key_name(name)
        before = len(self.fired)
        if key is not None:
            self._hook.process(KeyEvent(event_type, key))
        commands = ",".join(self.fired[before:]) or "-"
        held = "+".join(sorted(self._hook.pressed_keys)) or "-"
        timestamp = _dt.datetime.now().isoformat(timespec="milliseconds")
        return (
            f"{timestamp} event_type={event_type:5s} name={name!r:<12} "
            f"token={key!s:<10} held={held:<16} fires={commands}"
        )


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print raw keyboard events and the numpad hotkeys they trigger."
    )
    parser.add_argument(
        "--log",
        type=Path,
        help="Optional file path to append the captured events.",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Optional maximum duration in seconds before the script exits.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    log_file = None
    if args.log is not None:
        try:
            log_file = args.log.open("a", encoding="utf-8")
        except OSError as exc:  # pragma: no cover - depends on filesystem
            print(f"Failed to open log file {args.log}: {exc}", file=sys.stderr)
            return 1

    probe = HookProbe()
    print("Recording keyboard events. Press Ctrl+Shift+Q or Ctrl+C to stop.")

    def _handler(event: "keyboard.KeyboardEvent") -> None:
        line = probe.observe(event.name, event.event_type)
        print(line, flush=True)
        if log_file is not None:
            log_file.write(line + "\n")
            log_file.flush()

    keyboard.hook(_handler)

    try:
        if args.duration is not None:
            deadline = time.time() + max(args.duration, 0)
            while time.time() < deadline:
                time.sleep(0.1)
        else:
            keyboard.wait("ctrl+shift+q")
    except KeyboardInterrupt:
        pass
    finally:
        keyboard.unhook_all()
        if log_file is not None:
            log_file.close()

    print(f"Hotkeys fired: {len(probe.fired)}")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual utility script
    raise SystemExit(main())
