"""Fan-out of application state changes to every view surface."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Tuple

from app_state import ApplicationState, StateField
from button_style import ButtonRole, ButtonStyle, style_for
from translation_table import TranslationTable

NUM_KEYS: Tuple[Tuple[str, ...], ...] = (
    ("7", "8", "9", "/"),
    ("4", "5", "6", "*"),
    ("1", "2", "3", "-"),
    ("0", ".", "=", "+"),
)

SHORTCUT_KEYS: Tuple[Tuple[str, ...], ...] = (
    ("COPY", "PASTE", "SAVE", "CUT"),
    ("UNDO", "REDO", "NEW", "OPEN"),
    ("FIND", "REPLACE", "PRINT", "HELP"),
    ("TOGGLE_TOP", "TOGGLE_MODE", "TOGGLE_THEME", "EXIT"),
)

CONTROL_KEYS: Tuple[Tuple[str, str], ...] = (
    ("TOGGLE_TOP", "button.toggle.top"),
    ("TOGGLE_MODE", "button.toggle.mode"),
    ("TOGGLE_THEME", "button.toggle.theme"),
)

BUTTON_FIELDS: FrozenSet[StateField] = frozenset(
    {StateField.MODE, StateField.THEME, StateField.FROSTED, StateField.LANGUAGE}
)
MENU_FIELDS: FrozenSet[StateField] = frozenset(
    {StateField.LANGUAGE, StateField.FROSTED, StateField.NOTIFICATIONS}
)
ALL_FIELDS: FrozenSet[StateField] = frozenset(StateField)

TRAY_SLOTS = ("restore", "top", "mode", "theme", "background", "exit")


@dataclass(frozen=True)
class StatusView:
    title: str
    status_text: str
    mode_text: str
    author_text: str
    status_color: str
    mode_color: str
    panel_color: str
    background_path: Optional[str]
    always_on_top: bool


@dataclass(frozen=True)
class ButtonSpec:
    key: str
    label: str


@dataclass(frozen=True)
class ButtonGrid:
    rows: Tuple[Tuple[ButtonSpec, ...], ...]
    style: ButtonStyle
    controls: Tuple[ButtonSpec, ...]
    control_style: ButtonStyle


@dataclass(frozen=True)
class MenuBarView:
    language_menu: str
    language_item: str
    refresh_item: str
    skins_menu: str
    light_item: str
    dark_item: str
    background_item: str
    clear_background_item: str
    frosted_item: str
    notifications_menu: str
    notifications_item: str
    about_menu: str
    about_item: str
    frosted_checked: bool
    notifications_checked: bool
    language_codes: Tuple[str, ...]
    language_items: Tuple[str, ...]
    selected_index: int


@dataclass(frozen=True)
class TrayMenuModel:
    labels: Tuple[Tuple[str, str], ...]

    def label(self, slot: str) -> str:
        for name, text in self.labels:
            if name == slot:
                return text
        raise KeyError(slot)


class ViewSurface:
    """Base class for anything that displays application state.

    Subclasses override the stages they take part in.
    """

    def render_status(self, view: StatusView) -> None:
        pass

    def render_buttons(self, grid: ButtonGrid) -> None:
        pass

    def render_menu_bar(self, view: MenuBarView) -> None:
        pass

    def render_tray_menu(self, model: TrayMenuModel) -> None:
        pass

    def render_tray_tooltip(self, text: str) -> None:
        pass


class LocalizedPresenter:
    """Builds the main-window views in the active language."""

    def _tr(self, state: ApplicationState, translations: TranslationTable) -> Callable[[str], str]:
        code = state.active_language_code
        return lambda key: translations.lookup(code, key)

    def status(self, state: ApplicationState, translations: TranslationTable) -> StatusView:
        tr = self._tr(state, translations)
        top = tr("top.on") if state.always_on_top else tr("top.off")
        mode = tr("mode.num") if state.numeric_mode else tr("mode.shortcut")
        if state.always_on_top:
            status_color = "#ffff00" if state.dark_theme else "#ff0000"
        else:
            status_color = "#ffffff" if state.dark_theme else "#000000"
        return StatusView(
            title=tr("window.title"),
            status_text=f"{tr('status.label')}: {top}",
            mode_text=f"{tr('mode.label')}: {mode}",
            author_text=tr("author.info"),
            status_color=status_color,
            mode_color="#c0c0c0" if state.dark_theme else "#000000",
            panel_color="#404040" if state.dark_theme else "#f0f0f0",
            background_path=state.background_image_path,
            always_on_top=state.always_on_top,
        )

    def buttons(self, state: ApplicationState, translations: TranslationTable) -> ButtonGrid:
        tr = self._tr(state, translations)
        if state.numeric_mode:
            rows = tuple(tuple(ButtonSpec(key, key) for key in row) for row in NUM_KEYS)
        else:
            rows = tuple(
                tuple(ButtonSpec(key, tr("button." + key.lower())) for key in row)
                for row in SHORTCUT_KEYS
            )
        options = dict(
            numeric_mode=state.numeric_mode,
            dark_theme=state.dark_theme,
            frosted=state.frosted_buttons,
        )
        return ButtonGrid(
            rows=rows,
            style=style_for(ButtonRole.KEY, **options),
            controls=tuple(ButtonSpec(key, tr(label)) for key, label in CONTROL_KEYS),
            control_style=style_for(ButtonRole.CONTROL, **options),
        )

    def menu_bar(self, state: ApplicationState, translations: TranslationTable) -> MenuBarView:
        tr = self._tr(state, translations)
        codes = tuple(translations.codes())
        items = tuple(
            f"{translations.display_name(code, state.active_language_code)} ({code})" for code in codes
        )
        selected = codes.index(state.active_language_code) if state.active_language_code in codes else -1
        return MenuBarView(
            language_menu=tr("menu.language"),
            language_item=tr("menu.language"),
            refresh_item=tr("menu.refresh"),
            skins_menu=tr("menu.skins"),
            light_item=tr("tray.theme.light"),
            dark_item=tr("tray.theme.dark"),
            background_item=tr("button.background"),
            clear_background_item=tr("button.clear.background"),
            frosted_item=tr("button.frosted"),
            notifications_menu=tr("menu.notifications"),
            notifications_item=tr("menu.notifications.on"),
            about_menu=tr("menu.about"),
            about_item=tr("menu.about"),
            frosted_checked=state.frosted_buttons,
            notifications_checked=state.notifications_enabled,
            language_codes=codes,
            language_items=items,
            selected_index=selected,
        )

    def tooltip(self, state: ApplicationState, translations: TranslationTable) -> str:
        return translations.lookup(state.active_language_code, "window.title")


class TrayPresenter:
    """Builds the tray menu labels; always English."""

    def menu(self, state: ApplicationState) -> TrayMenuModel:
        return TrayMenuModel(
            labels=(
                ("restore", "Restore"),
                ("top", "Top Off" if state.always_on_top else "Top On"),
                ("mode", "Shortcut Mode" if state.numeric_mode else "Number Mode"),
                ("theme", "Light Theme" if state.dark_theme else "Dark Theme"),
                ("background", "Set Background"),
                ("exit", "Exit"),
            )
        )


class ViewSyncBroadcaster:
    """Pushes state to registered surfaces synchronously, in a fixed order."""

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._surfaces: List[ViewSurface] = []
        self._localized = LocalizedPresenter()
        self._tray = TrayPresenter()
        self._logger = logger or logging.getLogger("virtualnumpad.views")

    def register(self, surface: ViewSurface) -> None:
        if surface not in self._surfaces:
            self._surfaces.append(surface)

    def unregister(self, surface: ViewSurface) -> None:
        if surface in self._surfaces:
            self._surfaces.remove(surface)

    def broadcast(self, field: StateField, state: ApplicationState, translations: TranslationTable) -> None:
        self._run(frozenset({field}), state, translations)

    def broadcast_all(self, state: ApplicationState, translations: TranslationTable) -> None:
        self._run(ALL_FIELDS, state, translations)

    def _run(
        self,
        fields: FrozenSet[StateField],
        state: ApplicationState,
        translations: TranslationTable,
    ) -> None:
        surfaces = list(self._surfaces)
        self._logger.debug("Broadcasting %s to %d surfaces", sorted(f.value for f in fields), len(surfaces))

        status = self._localized.status(state, translations)
        for surface in surfaces:
            surface.render_status(status)

        if fields & BUTTON_FIELDS:
            grid = self._localized.buttons(state, translations)
            for surface in surfaces:
                surface.render_buttons(grid)

        if fields & MENU_FIELDS:
            menu_bar = self._localized.menu_bar(state, translations)
            for surface in surfaces:
                surface.render_menu_bar(menu_bar)

        tray_menu = self._tray.menu(state)
        for surface in surfaces:
            surface.render_tray_menu(tray_menu)

        tooltip = self._localized.tooltip(state, translations)
        for surface in surfaces:
            surface.render_tray_tooltip(tooltip)
