import unittest
import unittest.mock as mock
from types import SimpleNamespace

from key_injector import KEYEVENTF_EXTENDEDKEY, KEYEVENTF_KEYUP, KeyInjector

FAKE_WIN32CON = SimpleNamespace(
    **{f"VK_NUMPAD{digit}": 0x60 + digit for digit in range(10)},
    VK_MULTIPLY=0x6A,
    VK_ADD=0x6B,
    VK_SUBTRACT=0x6D,
    VK_DECIMAL=0x6E,
    VK_DIVIDE=0x6F,
    VK_RETURN=0x0D,
    VK_CONTROL=0x11,
    VK_F1=0x70,
)


class FakeWin32Api:
    def __init__(self, fail_on=None, fail_release_of=None) -> None:
        self.events = []
        self._fail_on = fail_on
        self._fail_release_of = fail_release_of

    def MapVirtualKey(self, vk: int, map_type: int) -> int:
        return vk + 0x100

    def keybd_event(self, vk: int, scan: int, flags: int, extra: int) -> None:
        if self._fail_on is not None and vk == self._fail_on and not flags & KEYEVENTF_KEYUP:
            raise OSError("access denied")
        if vk == self._fail_release_of and flags & KEYEVENTF_KEYUP:
            raise OSError("release rejected")
        self.events.append((vk, flags))


class KeyInjectorTests(unittest.TestCase):
    def _create_injector(self, **kwargs):
        self.api = FakeWin32Api(**kwargs)
        return KeyInjector(win32api_module=self.api, win32con_module=FAKE_WIN32CON)

    def test_digit_uses_numeric_keypad_key(self):
        injector = self._create_injector()
        self.assertTrue(injector.press("5"))
        self.assertEqual(self.api.events, [(0x65, 0), (0x65, KEYEVENTF_KEYUP)])
        self.assertNotIn(0x35, [vk for vk, _flags in self.api.events])

    def test_equals_is_extended_keypad_enter(self):
        injector = self._create_injector()
        injector.press("=")
        self.assertEqual(
            self.api.events,
            [(0x0D, KEYEVENTF_EXTENDEDKEY), (0x0D, KEYEVENTF_EXTENDEDKEY | KEYEVENTF_KEYUP)],
        )

    def test_operators_map_to_keypad_keys(self):
        injector = self._create_injector()
        for symbol in "+-*./":
            injector.press(symbol)
        downs = [vk for vk, flags in self.api.events if not flags & KEYEVENTF_KEYUP]
        self.assertEqual(downs, [0x6B, 0x6D, 0x6A, 0x6E, 0x6F])

    def test_non_keypad_symbol_is_noop(self):
        injector = self._create_injector()
        self.assertFalse(injector.press("a"))
        self.assertEqual(self.api.events, [])

    def test_backend_failure_returns_false(self):
        injector = self._create_injector(fail_on=0x61)
        with self.assertLogs("virtualnumpad.injector", level="ERROR"):
            self.assertFalse(injector.press("1"))
        self.assertEqual(self.api.events, [])

    def test_failed_release_reports_stuck_key(self):
        injector = self._create_injector(fail_release_of=0x69)
        with self.assertLogs("virtualnumpad.injector", level="ERROR") as captured:
            self.assertFalse(injector.press("9"))
        self.assertEqual(self.api.events, [(0x69, 0)])
        self.assertIn("stuck down", captured.output[0])

    def test_shortcut_releases_in_reverse_order(self):
        injector = self._create_injector()
        self.assertTrue(injector.send_shortcut("COPY"))
        self.assertEqual(
            self.api.events,
            [(0x11, 0), (ord("C"), 0), (ord("C"), KEYEVENTF_KEYUP), (0x11, KEYEVENTF_KEYUP)],
        )

    def test_single_key_shortcut(self):
        injector = self._create_injector()
        injector.send_shortcut("HELP")
        self.assertEqual(self.api.events, [(0x70, 0), (0x70, KEYEVENTF_KEYUP)])

    def test_failed_chord_releases_pressed_modifiers(self):
        injector = self._create_injector(fail_on=ord("V"))
        with self.assertLogs("virtualnumpad.injector", level="ERROR"):
            self.assertFalse(injector.send_shortcut("PASTE"))
        self.assertEqual(self.api.events, [(0x11, 0), (0x11, KEYEVENTF_KEYUP)])

    def test_unknown_shortcut_is_noop(self):
        injector = self._create_injector()
        self.assertFalse(injector.send_shortcut("TOGGLE_TOP"))
        self.assertEqual(self.api.events, [])

    def test_non_windows_platform_is_reported_not_raised(self):
        injector = KeyInjector()
        with mock.patch("key_injector.sys.platform", "linux"):
            with self.assertLogs("virtualnumpad.injector", level="ERROR"):
                self.assertFalse(injector.press("5"))


if __name__ == "__main__":  # pragma: no cover - allows direct execution
    unittest.main()
