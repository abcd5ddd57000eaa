"""JSON-backed persistence of the numpad toggle states."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

PREFERENCES_FILE = Path.home() / ".virtualnumpad_preferences.json"
PREFS_NODE = "com/virtualnumpad"

PREF_LANGUAGE = "language"
PREF_ALWAYS_ON_TOP = "alwaysOnTop"
PREF_NUM_LOCK_MODE = "numLockMode"
PREF_SHOW_NOTIFICATIONS = "showNotifications"
PREF_DARK_MODE = "darkMode"
PREF_BACKGROUND_IMAGE = "backgroundImage"
PREF_FROSTED_BUTTONS = "frostedButtons"

DEFAULT_LANGUAGE = "en-us"


@dataclass(frozen=True)
class PreferenceRecord:
    language_code: str = DEFAULT_LANGUAGE
    always_on_top: bool = False
    numeric_mode: bool = True
    notifications: bool = False
    dark_theme: bool = False
    background_path: Optional[str] = None
    frosted: bool = False


def _bool(data: dict, key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


class PreferenceStore:
    """Stores the :class:`PreferenceRecord` under a fixed namespace key."""

    def __init__(
        self,
        path: Path = PREFERENCES_FILE,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.path = path
        self._logger = logger or logging.getLogger("virtualnumpad.preferences")

    def _read_document(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            self._logger.warning("Ignoring unreadable preferences %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> PreferenceRecord:
        node = self._read_document().get(PREFS_NODE)
        if not isinstance(node, dict):
            return PreferenceRecord()

        defaults = PreferenceRecord()
        language = node.get(PREF_LANGUAGE)
        background = node.get(PREF_BACKGROUND_IMAGE)
        return PreferenceRecord(
            language_code=language if isinstance(language, str) and language else defaults.language_code,
            always_on_top=_bool(node, PREF_ALWAYS_ON_TOP, defaults.always_on_top),
            numeric_mode=_bool(node, PREF_NUM_LOCK_MODE, defaults.numeric_mode),
            notifications=_bool(node, PREF_SHOW_NOTIFICATIONS, defaults.notifications),
            dark_theme=_bool(node, PREF_DARK_MODE, defaults.dark_theme),
            background_path=background if isinstance(background, str) and background else None,
            frosted=_bool(node, PREF_FROSTED_BUTTONS, defaults.frosted),
        )

    def save(self, record: PreferenceRecord) -> None:
        document = self._read_document()
        node = {
            PREF_LANGUAGE: record.language_code,
            PREF_ALWAYS_ON_TOP: record.always_on_top,
            PREF_NUM_LOCK_MODE: record.numeric_mode,
            PREF_SHOW_NOTIFICATIONS: record.notifications,
            PREF_DARK_MODE: record.dark_theme,
            PREF_FROSTED_BUTTONS: record.frosted,
        }
        if record.background_path is not None:
            node[PREF_BACKGROUND_IMAGE] = record.background_path
        document[PREFS_NODE] = node
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            self._logger.error("Error saving preferences to %s: %s", self.path, exc)
