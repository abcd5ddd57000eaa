import unittest

from app_state import (
    COMMAND_CYCLE_LANGUAGE,
    COMMAND_TOGGLE_TOP,
    ApplicationState,
    StateField,
    StateStore,
)
from preferences import PreferenceRecord
from translation_table import BUILTIN_LANGUAGES, TranslationTable


class FakePreferenceStore:
    def __init__(self, events=None) -> None:
        self.saved = []
        self._events = events if events is not None else []

    def save(self, record: PreferenceRecord) -> None:
        self.saved.append(record)
        self._events.append(("save", record))


class FakeBroadcaster:
    def __init__(self, events=None) -> None:
        self.calls = []
        self.on_broadcast = None
        self._events = events if events is not None else []

    def broadcast(self, field, state, translations) -> None:
        self.calls.append((field, state))
        self._events.append(("broadcast", field))
        if self.on_broadcast is not None:
            self.on_broadcast(field, state)

    def broadcast_all(self, state, translations) -> None:
        self.calls.append(("all", state))
        self._events.append(("broadcast_all", None))


class StateStoreTestMixin:
    def _create_store(self, record=None, languages=None, **kwargs):
        self.events = []
        self.preferences = FakePreferenceStore(self.events)
        self.broadcaster = FakeBroadcaster(self.events)
        self.notices = []
        store = StateStore(
            record or PreferenceRecord(),
            TranslationTable(languages if languages is not None else BUILTIN_LANGUAGES),
            self.preferences,
            self.broadcaster,
            notifier=lambda title, message: self.notices.append((title, message)),
            **kwargs,
        )
        return store


class StateStoreTests(StateStoreTestMixin, unittest.TestCase):
    def test_default_record_gives_default_state(self):
        store = self._create_store()
        self.assertEqual(store.state, ApplicationState())
        self.assertEqual(store.state.active_language_code, "en-us")

    def test_missing_saved_language_falls_back_without_saving(self):
        store = self._create_store(PreferenceRecord(language_code="fr-fr"))
        self.assertEqual(store.state.active_language_code, "en-us")
        self.assertEqual(self.preferences.saved, [])

    def test_setter_saves_before_broadcasting(self):
        store = self._create_store()
        store.toggle_always_on_top()

        self.assertTrue(store.state.always_on_top)
        self.assertEqual(self.events[0][0], "save")
        self.assertTrue(self.events[0][1].always_on_top)
        self.assertEqual(self.events[1], ("broadcast", StateField.ALWAYS_ON_TOP))

    def test_broadcast_sees_committed_state(self):
        store = self._create_store()
        store.set_mode(False)
        field, state = self.broadcaster.calls[-1]
        self.assertIs(field, StateField.MODE)
        self.assertFalse(state.numeric_mode)

    def test_unknown_language_is_noop(self):
        store = self._create_store()
        before = store.state
        store.set_language("xx-yy")
        self.assertEqual(store.state, before)
        self.assertEqual(self.preferences.saved, [])
        self.assertEqual(self.broadcaster.calls, [])

    def test_cycle_language_returns_to_start_after_full_cycle(self):
        languages = dict(BUILTIN_LANGUAGES)
        languages["de-de"] = {"window.title": "Virtuelles Ziffernfeld"}
        store = self._create_store(languages=languages)

        seen = []
        for _ in range(len(languages)):
            store.cycle_language()
            seen.append(store.state.active_language_code)

        self.assertEqual(seen, ["zh-cn", "de-de", "en-us"])
        self.assertEqual(store.state.active_language_code, "en-us")

    def test_cycle_language_with_single_language_is_noop(self):
        store = self._create_store(languages={"en-us": BUILTIN_LANGUAGES["en-us"]})
        store.cycle_language()
        self.assertEqual(store.state.active_language_code, "en-us")
        self.assertEqual(self.broadcaster.calls, [])

    def test_reentrant_update_of_same_field_is_ignored(self):
        store = self._create_store()

        def reenter(field, state):
            if field is StateField.MODE:
                store.set_mode(True)

        self.broadcaster.on_broadcast = reenter
        store.set_mode(False)

        self.assertFalse(store.state.numeric_mode)
        self.assertEqual(len(self.preferences.saved), 1)

    def test_nested_update_of_other_field_is_applied(self):
        store = self._create_store()

        def nested(field, state):
            if field is StateField.MODE:
                store.set_theme(True)

        self.broadcaster.on_broadcast = nested
        store.set_mode(False)

        self.assertTrue(store.state.dark_theme)
        self.assertFalse(store.state.numeric_mode)

    def test_notifications_only_when_enabled(self):
        store = self._create_store()
        store.toggle_mode()
        self.assertEqual(self.notices, [])

        store.set_notifications(True)
        self.assertEqual(self.notices, [])
        store.toggle_mode()
        self.assertEqual(self.notices, [("Mode", "Switched to Number Mode")])

    def test_language_change_notice_is_translated(self):
        store = self._create_store(PreferenceRecord(notifications=True))
        store.set_language("zh-cn")
        self.assertEqual(self.notices, [("语言", "语言已切换至：中文")])

    def test_background_set_and_clear(self):
        store = self._create_store()
        store.set_background("C:/images/bg.png")
        self.assertEqual(store.state.background_image_path, "C:/images/bg.png")
        store.clear_background()
        self.assertIsNone(store.state.background_image_path)
        self.assertIsNone(self.preferences.saved[-1].background_path)

    def test_execute_dispatches_known_commands(self):
        store = self._create_store()
        store.execute(COMMAND_TOGGLE_TOP)
        store.execute(COMMAND_CYCLE_LANGUAGE)
        self.assertTrue(store.state.always_on_top)
        self.assertEqual(store.state.active_language_code, "zh-cn")

    def test_execute_unknown_command_logs_warning(self):
        store = self._create_store()
        with self.assertLogs("virtualnumpad.state", level="WARNING") as captured:
            store.execute("launch_rockets")
        self.assertIn("launch_rockets", captured.output[0])
        self.assertEqual(store.state, ApplicationState())

    def test_replace_language_set_corrects_missing_language(self):
        store = self._create_store(PreferenceRecord(language_code="zh-cn"))
        store.replace_language_set(TranslationTable({"en-us": BUILTIN_LANGUAGES["en-us"]}))

        self.assertEqual(store.state.active_language_code, "en-us")
        self.assertEqual(self.preferences.saved[-1].language_code, "en-us")
        self.assertEqual(self.broadcaster.calls[-1][0], "all")

    def test_translate_uses_active_language(self):
        store = self._create_store(PreferenceRecord(language_code="zh-cn"))
        self.assertEqual(store.translate("menu.about"), "关于")
        self.assertEqual(store.translate("missing.key"), "missing.key")

    def test_record_round_trips_state(self):
        record = PreferenceRecord(
            language_code="zh-cn",
            always_on_top=True,
            numeric_mode=False,
            notifications=True,
            dark_theme=True,
            background_path="bg.jpg",
            frosted=True,
        )
        store = self._create_store(record)
        self.assertEqual(store.record(), record)


if __name__ == "__main__":  # pragma: no cover - allows direct execution
    unittest.main()
