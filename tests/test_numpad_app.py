import tempfile
import unittest
import unittest.mock as mock
import uuid
from pathlib import Path

import numpad_app
from hotkey_manager import KEY_DOWN, KeyEvent
from numpad_app import (
    SingleInstanceError,
    SingleInstanceGuard,
    SystemTrayController,
    VirtualNumpadApp,
)
from preferences import PreferenceRecord, PreferenceStore
from view_sync import TrayMenuModel


class FakeInjector:
    def __init__(self) -> None:
        self.pressed = []
        self.shortcuts = []

    def press(self, symbol: str) -> bool:
        self.pressed.append(symbol)
        return True

    def send_shortcut(self, name: str) -> bool:
        self.shortcuts.append(name)
        return True


class FakeListener:
    def __init__(self, callback, fail: bool = False) -> None:
        self.callback = callback
        self.fail = fail
        self.started = False
        self.stopped = False

    def start(self) -> None:
        if self.fail:
            raise RuntimeError("hook denied")
        self.started = True

    def stop(self) -> None:
        self.stopped = True


class VirtualNumpadAppTestMixin:
    def _create_app(self, record=None, confirm=True, listener_fails=False):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        root = Path(self._tmp.name)
        self.language_dir = root / "languages"
        self.preference_store = PreferenceStore(root / "prefs.json")
        if record is not None:
            self.preference_store.save(record)
        self.injector = FakeInjector()
        self.notices = []
        self.confirmations = []
        self.listeners = []

        def listener_factory(callback, logger=None):
            listener = FakeListener(callback, fail=listener_fails)
            self.listeners.append(listener)
            return listener

        def confirm_callback(title, message):
            self.confirmations.append((title, message))
            return confirm

        return VirtualNumpadApp(
            preference_store=self.preference_store,
            language_dir=self.language_dir,
            injector=self.injector,
            listener_factory=listener_factory,
            confirm_callback=confirm_callback,
            notify_callback=lambda title, message: self.notices.append((title, message)),
        )


class KeypadRoutingTests(VirtualNumpadAppTestMixin, unittest.TestCase):
    def test_numeric_mode_injects_symbol(self):
        app = self._create_app()
        app.on_keypad_button("5")
        self.assertEqual(self.injector.pressed, ["5"])
        self.assertEqual(self.notices, [])

    def test_numeric_input_notification(self):
        app = self._create_app(PreferenceRecord(notifications=True))
        app.on_keypad_button("7")
        self.assertEqual(self.notices, [("Number Mode", "Input: 7")])

    def test_shortcut_mode_sends_chord(self):
        app = self._create_app(PreferenceRecord(numeric_mode=False, notifications=True))
        app.on_keypad_button("COPY")
        self.assertEqual(self.injector.shortcuts, ["COPY"])
        self.assertEqual(self.injector.pressed, [])
        self.assertEqual(self.notices, [("Virtual Numpad", "Execute: Copy")])

    def test_shortcut_mode_toggle_buttons_change_state(self):
        app = self._create_app(PreferenceRecord(numeric_mode=False))
        app.on_keypad_button("TOGGLE_TOP")
        app.on_keypad_button("TOGGLE_THEME")
        self.assertTrue(app.store.state.always_on_top)
        self.assertTrue(app.store.state.dark_theme)
        self.assertEqual(self.injector.shortcuts, [])

        app.on_keypad_button("TOGGLE_MODE")
        self.assertTrue(app.store.state.numeric_mode)

    def test_control_buttons_toggle_in_numeric_mode(self):
        app = self._create_app()
        app.on_control_button("TOGGLE_MODE")
        self.assertFalse(app.store.state.numeric_mode)
        self.assertFalse(self.preference_store.load().numeric_mode)

    def test_exit_requires_confirmation(self):
        app = self._create_app(PreferenceRecord(numeric_mode=False), confirm=False)
        app.start_listener()
        app.on_keypad_button("EXIT")
        self.assertEqual(self.confirmations, [("Exit", "Are you sure you want to exit?")])
        self.assertFalse(self.listeners[0].stopped)

    def test_confirmed_exit_stops_listener_and_saves(self):
        app = self._create_app(PreferenceRecord(numeric_mode=False, language_code="zh-cn"))
        app.start_listener()
        app.on_keypad_button("EXIT")
        self.assertEqual(self.confirmations[0][0], "退出")
        self.assertTrue(self.listeners[0].stopped)
        self.assertEqual(self.preference_store.load().language_code, "zh-cn")


class GlobalHotkeyWiringTests(VirtualNumpadAppTestMixin, unittest.TestCase):
    def test_queued_events_reach_hook(self):
        app = self._create_app()
        app.start_listener()
        enqueue = self.listeners[0].callback
        enqueue(KeyEvent(KEY_DOWN, "ctrl"))
        enqueue(KeyEvent(KEY_DOWN, "t"))

        self.assertFalse(app.store.state.always_on_top)
        self.assertEqual(app.drain_input_events(), 2)
        self.assertTrue(app.store.state.always_on_top)
        self.assertEqual(app.drain_input_events(), 0)

    def test_listener_failure_keeps_app_running(self):
        app = self._create_app(listener_fails=True)
        with self.assertLogs("virtualnumpad", level="ERROR"):
            app.start_listener()
        app.on_control_button("TOGGLE_TOP")
        self.assertTrue(app.store.state.always_on_top)

    def test_stop_listener_clears_pressed_keys(self):
        app = self._create_app()
        app.start_listener()
        app.hook.process(KeyEvent(KEY_DOWN, "ctrl"))
        app.stop_listener()
        self.assertEqual(app.hook.pressed_keys, frozenset())
        self.assertTrue(self.listeners[0].stopped)


class LanguageReloadTests(VirtualNumpadAppTestMixin, unittest.TestCase):
    def test_reload_replaces_language_set(self):
        app = self._create_app(PreferenceRecord(language_code="zh-cn", notifications=True))
        (self.language_dir / "de-de.txt").write_text(
            "window.title=Virtuelles Ziffernfeld\n", encoding="utf-8"
        )

        app.reload_languages()

        self.assertEqual(app.store.translations.codes(), ["de-de"])
        self.assertEqual(app.store.state.active_language_code, "de-de")
        self.assertEqual(
            self.notices[-1], ("Language Refresh", "Language list refreshed. Found 1 languages.")
        )

    def test_background_error_notifies(self):
        app = self._create_app(PreferenceRecord(notifications=True))
        with self.assertLogs("virtualnumpad", level="ERROR"):
            app.on_background_error("missing.png", OSError("not found"))
        self.assertEqual(self.notices, [("Skins", "Error loading background image")])


class SystemTrayControllerTests(VirtualNumpadAppTestMixin, unittest.TestCase):
    def test_menu_actions_are_scheduled(self):
        app = self._create_app()
        scheduled = []
        tray = SystemTrayController(app, scheduler=scheduled.append)

        tray._on_toggle_mode(None, None)
        tray._on_toggle_top(None, None)
        self.assertTrue(app.store.state.numeric_mode)
        self.assertEqual(len(scheduled), 2)

        for callback in scheduled:
            callback()
        self.assertFalse(app.store.state.numeric_mode)
        self.assertTrue(app.store.state.always_on_top)

    def test_labels_follow_rendered_model(self):
        app = self._create_app()
        tray = SystemTrayController(app)
        self.assertEqual(tray.label("restore"), "Restore")

        tray.render_tray_menu(TrayMenuModel(labels=(("top", "Top Off"),)))
        tray.render_tray_tooltip("虚拟数字键盘")
        self.assertEqual(tray.label("top"), "Top Off")

    def test_registered_tray_receives_english_labels(self):
        app = self._create_app(PreferenceRecord(language_code="zh-cn"))
        tray = SystemTrayController(app)
        app.broadcaster.register(tray)
        app.store.toggle_theme()
        self.assertEqual(tray.label("theme"), "Light Theme")
        self.assertEqual(tray.label("exit"), "Exit")


class LanguageDirectoryTests(unittest.TestCase):
    def test_default_is_languages_under_working_directory(self):
        if hasattr(numpad_app.sys, "_MEIPASS"):  # pragma: no cover - frozen interpreter
            self.skipTest("running from a frozen build")
        self.assertEqual(numpad_app.default_language_dir(), Path("languages"))
        self.assertFalse(numpad_app.default_language_dir().is_absolute())

    def test_frozen_build_uses_bundled_folder(self):
        with mock.patch.object(numpad_app.sys, "_MEIPASS", "/bundle", create=True):
            self.assertEqual(numpad_app.default_language_dir(), Path("/bundle") / "languages")

    def test_app_uses_default_directory_when_none_given(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "languages"
            with mock.patch.object(numpad_app, "default_language_dir", return_value=target):
                app = VirtualNumpadApp(
                    preference_store=PreferenceStore(Path(tmp) / "prefs.json"),
                    injector=FakeInjector(),
                    listener_factory=lambda callback, logger=None: FakeListener(callback),
                )
            self.assertEqual(app.language_dir, target)
            self.assertTrue(target.is_dir())


class AboutDialogTests(VirtualNumpadAppTestMixin, unittest.TestCase):
    def test_about_lists_features(self):
        app = self._create_app(PreferenceRecord(language_code="zh-cn"))
        with mock.patch.object(numpad_app.messagebox, "showinfo") as showinfo:
            app.show_about()
        title, text = showinfo.call_args[0]
        self.assertEqual(title, "关于")
        self.assertIn("功能：虚拟数字键盘", text)
        self.assertIn("快捷键", text)


class SingleInstanceGuardTests(unittest.TestCase):
    def test_second_guard_is_rejected(self):
        name = f"virtualnumpad-test-{uuid.uuid4().hex}"
        with SingleInstanceGuard(name):
            with self.assertRaises(SingleInstanceError):
                SingleInstanceGuard(name).acquire()
        with SingleInstanceGuard(name):
            pass


if __name__ == "__main__":  # pragma: no cover - allows direct execution
    unittest.main()
