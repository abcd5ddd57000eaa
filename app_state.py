"""The application state record and the only operations allowed to change it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Optional, Set, Tuple

from preferences import PreferenceRecord, PreferenceStore
from translation_table import TranslationTable

COMMAND_TOGGLE_TOP = "toggle_always_on_top"
COMMAND_TOGGLE_MODE = "toggle_mode"
COMMAND_CYCLE_LANGUAGE = "cycle_language"
COMMAND_TOGGLE_THEME = "toggle_theme"


class StateField(Enum):
    ALWAYS_ON_TOP = "always_on_top"
    MODE = "numeric_mode"
    THEME = "dark_theme"
    FROSTED = "frosted_buttons"
    NOTIFICATIONS = "notifications_enabled"
    BACKGROUND = "background_image_path"
    LANGUAGE = "active_language_code"


@dataclass(frozen=True)
class ApplicationState:
    always_on_top: bool = False
    numeric_mode: bool = True
    dark_theme: bool = False
    frosted_buttons: bool = False
    notifications_enabled: bool = False
    background_image_path: Optional[str] = None
    active_language_code: str = "en-us"

    @classmethod
    def from_record(cls, record: PreferenceRecord) -> "ApplicationState":
        return cls(
            always_on_top=record.always_on_top,
            numeric_mode=record.numeric_mode,
            dark_theme=record.dark_theme,
            frosted_buttons=record.frosted,
            notifications_enabled=record.notifications,
            background_image_path=record.background_path,
            active_language_code=record.language_code,
        )

    def to_record(self) -> PreferenceRecord:
        return PreferenceRecord(
            language_code=self.active_language_code,
            always_on_top=self.always_on_top,
            numeric_mode=self.numeric_mode,
            notifications=self.notifications_enabled,
            dark_theme=self.dark_theme,
            background_path=self.background_image_path,
            frosted=self.frosted_buttons,
        )


# Notifier receives already translated (title, message).
Notifier = Callable[[str, str], None]


def resolve_language(code: str, translations: TranslationTable) -> str:
    """Return *code* if loaded, otherwise the first loaded code in sorted order."""

    if code in translations:
        return code
    codes = translations.codes()
    return codes[0] if codes else code


class StateStore:
    """Owns the :class:`ApplicationState` and funnels every change.

    Each setter updates one field, writes the preference record and asks the
    broadcaster to refresh the views before returning. A setter re-entered
    for the field currently being broadcast is ignored.
    """

    def __init__(
        self,
        record: PreferenceRecord,
        translations: TranslationTable,
        preference_store: PreferenceStore,
        broadcaster,
        *,
        notifier: Optional[Notifier] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or logging.getLogger("virtualnumpad.state")
        self._translations = translations
        self._preference_store = preference_store
        self._broadcaster = broadcaster
        self._notifier = notifier
        self._in_flight: Set[StateField] = set()

        state = ApplicationState.from_record(record)
        language = resolve_language(state.active_language_code, translations)
        if language != state.active_language_code:
            self._logger.info(
                "Saved language %s not found, using %s", state.active_language_code, language
            )
            state = replace(state, active_language_code=language)
        self._state = state

    @property
    def state(self) -> ApplicationState:
        return self._state

    @property
    def translations(self) -> TranslationTable:
        return self._translations

    def set_notifier(self, notifier: Optional[Notifier]) -> None:
        self._notifier = notifier

    def translate(self, key: str) -> str:
        return self._translations.lookup(self._state.active_language_code, key)

    def record(self) -> PreferenceRecord:
        return self._state.to_record()

    def sync_views(self) -> None:
        """Push the full state to every registered view."""

        self._broadcaster.broadcast_all(self._state, self._translations)

    # Mutators ---------------------------------------------------------

    def set_always_on_top(self, value: bool) -> None:
        self._commit(StateField.ALWAYS_ON_TOP, always_on_top=bool(value))

    def set_mode(self, numeric: bool) -> None:
        self._commit(StateField.MODE, numeric_mode=bool(numeric))

    def set_theme(self, dark: bool) -> None:
        self._commit(StateField.THEME, dark_theme=bool(dark))

    def set_frosted(self, value: bool) -> None:
        self._commit(StateField.FROSTED, frosted_buttons=bool(value))

    def set_notifications(self, value: bool) -> None:
        self._commit(StateField.NOTIFICATIONS, notifications_enabled=bool(value))

    def set_background(self, path: Optional[str]) -> None:
        self._commit(StateField.BACKGROUND, background_image_path=path or None)

    def set_language(self, code: str) -> None:
        if code not in self._translations:
            self._logger.debug("Ignoring unknown language code %r", code)
            return
        self._commit(StateField.LANGUAGE, active_language_code=code)

    def toggle_always_on_top(self) -> None:
        self.set_always_on_top(not self._state.always_on_top)

    def toggle_mode(self) -> None:
        self.set_mode(not self._state.numeric_mode)

    def toggle_theme(self) -> None:
        self.set_theme(not self._state.dark_theme)

    def clear_background(self) -> None:
        self.set_background(None)

    def cycle_language(self) -> None:
        codes = self._translations.codes()
        if len(codes) < 2:
            return
        index = codes.index(self._state.active_language_code)
        self.set_language(codes[(index + 1) % len(codes)])

    def replace_language_set(self, translations: TranslationTable) -> None:
        """Install a reloaded language set and refresh every view."""

        if StateField.LANGUAGE in self._in_flight:
            self._logger.debug("Ignoring language reload during language broadcast")
            return
        self._translations = translations
        language = resolve_language(self._state.active_language_code, translations)
        if language != self._state.active_language_code:
            self._logger.info(
                "Language %s no longer available, using %s",
                self._state.active_language_code,
                language,
            )
        self._in_flight.add(StateField.LANGUAGE)
        try:
            self._state = replace(self._state, active_language_code=language)
            self._preference_store.save(self.record())
            self._broadcaster.broadcast_all(self._state, self._translations)
        finally:
            self._in_flight.discard(StateField.LANGUAGE)

    def execute(self, command: str) -> None:
        handlers: Dict[str, Callable[[], None]] = {
            COMMAND_TOGGLE_TOP: self.toggle_always_on_top,
            COMMAND_TOGGLE_MODE: self.toggle_mode,
            COMMAND_CYCLE_LANGUAGE: self.cycle_language,
            COMMAND_TOGGLE_THEME: self.toggle_theme,
        }
        handler = handlers.get(command)
        if handler is None:
            self._logger.warning("Unknown command: %s", command)
            return
        handler()

    # Internal helpers -------------------------------------------------

    def _commit(self, field: StateField, **changes: object) -> None:
        if field in self._in_flight:
            self._logger.debug("Ignoring re-entrant update of %s", field.value)
            return
        self._in_flight.add(field)
        try:
            self._state = replace(self._state, **changes)
            self._preference_store.save(self.record())
            self._broadcaster.broadcast(field, self._state, self._translations)
        finally:
            self._in_flight.discard(field)
        self._logger.debug("%s -> %r", field.value, getattr(self._state, field.value))
        self._notify(field)

    def _notice_for(self, field: StateField) -> Optional[Tuple[str, str]]:
        state = self._state
        if field is StateField.ALWAYS_ON_TOP:
            key = "message.toggle.top.on" if state.always_on_top else "message.toggle.top.off"
            return self.translate("status.label"), self.translate(key)
        if field is StateField.MODE:
            key = "message.mode.num" if state.numeric_mode else "message.mode.shortcut"
            return self.translate("mode.label"), self.translate(key)
        if field is StateField.THEME:
            key = "message.theme.dark" if state.dark_theme else "message.theme.light"
            return self.translate("menu.skins"), self.translate(key)
        if field is StateField.FROSTED:
            key = "message.frosted.on" if state.frosted_buttons else "message.frosted.off"
            return self.translate("menu.skins"), self.translate(key)
        if field is StateField.BACKGROUND:
            key = "message.background.set" if state.background_image_path else "message.background.removed"
            return self.translate("menu.skins"), self.translate(key)
        if field is StateField.LANGUAGE:
            name = self._translations.display_name(state.active_language_code, state.active_language_code)
            return self.translate("menu.language"), self.translate("message.language.changed") + name
        return None

    def _notify(self, field: StateField) -> None:
        if self._notifier is None or not self._state.notifications_enabled:
            return
        notice = self._notice_for(field)
        if notice is not None:
            self._notifier(*notice)
