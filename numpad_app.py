"""Virtual numpad overlay: Tk window, tray icon and global hotkeys."""

from __future__ import annotations

import contextlib
import logging
import os
import queue
import sys
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, Callable, Dict, List, Optional

try:
    import tkinter as tk
    from tkinter import filedialog, messagebox, ttk, font as tkfont
except ImportError as exc:  # pragma: no cover - tkinter is part of stdlib on Windows
    raise SystemExit("tkinter is required to display the numpad window") from exc

try:  # pragma: no cover - optional dependency for system tray support
    import pystray  # type: ignore
    from pystray import MenuItem  # type: ignore
except Exception:  # pragma: no cover - pystray raises backend errors on headless systems
    pystray = None  # type: ignore
    MenuItem = None  # type: ignore

try:  # pragma: no cover - optional dependency for icons and background images
    from PIL import Image, ImageDraw, ImageTk  # type: ignore
except ImportError:  # pragma: no cover - handled where images are drawn
    Image = None  # type: ignore
    ImageDraw = None  # type: ignore
    ImageTk = None  # type: ignore

from app_state import StateStore
from button_style import ButtonStyle
from hotkey_manager import GlobalInputHook, KeyEvent
from key_injector import KeyInjector
from keyboard_adapter import create_keyboard_listener
from preferences import PREFERENCES_FILE, PreferenceStore
from translation_table import TranslationTable, ensure_language_directory, load_all
from view_sync import (
    ButtonGrid,
    MenuBarView,
    StatusView,
    TrayMenuModel,
    ViewSurface,
    ViewSyncBroadcaster,
)

APP_NAME = "virtualnumpad"
LOG_FILE_NAME = "virtualnumpad.log"
LOG_MAX_BYTES = 2_097_152
LOG_BACKUP_COUNT = 3

INPUT_POLL_MS = 15
MAX_EVENTS_PER_POLL = 256

GWL_EXSTYLE = -20
WS_EX_NOACTIVATE = 0x08000000
WS_EX_APPWINDOW = 0x00040000

IMAGE_FILE_TYPES = [
    ("Image files", "*.jpg *.jpeg *.png *.gif"),
    ("All files", "*.*"),
]

logger = logging.getLogger(APP_NAME)


def configure_logging() -> logging.Logger:
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    log_dir = PREFERENCES_FILE.parent
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        handler = None
    if handler is not None:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)
    return logger


def _resource_path(relative_path: str) -> Path:
    """Return an absolute path to a bundled resource."""

    base_path = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parent))  # type: ignore[attr-defined]
    return base_path / relative_path


LANGUAGES_DIR_NAME = "languages"


def default_language_dir() -> Path:
    """Language files live in ``languages/`` under the working directory.

    Frozen builds read the folder bundled next to the executable instead.
    """

    if hasattr(sys, "_MEIPASS"):
        return _resource_path(LANGUAGES_DIR_NAME)
    return Path(LANGUAGES_DIR_NAME)


class SingleInstanceError(RuntimeError):
    """Raised when another numpad is already running."""


class SingleInstanceGuard:
    """Filesystem lock that keeps a second numpad from starting."""

    def __init__(self, name: str) -> None:
        self._lock_path = Path(tempfile.gettempdir()) / f"{name}.lock"
        self._lock_file: Optional[IO[str]] = None

    def acquire(self) -> None:
        if self._lock_file is not None:
            return
        self._lock_file = open(self._lock_path, "a+")
        try:
            self._lock(True)
        except OSError as exc:
            self._lock_file.close()
            self._lock_file = None
            raise SingleInstanceError("Another instance is already running") from exc

    def release(self) -> None:
        if self._lock_file is None:
            return
        try:
            with contextlib.suppress(OSError):
                self._lock(False)
        finally:
            self._lock_file.close()
            self._lock_file = None
            with contextlib.suppress(OSError):
                self._lock_path.unlink()

    def _lock(self, acquire: bool) -> None:
        assert self._lock_file is not None
        if sys.platform == "win32":  # pragma: no cover - platform specific
            import msvcrt  # type: ignore

            self._lock_file.seek(0)
            mode = msvcrt.LK_NBLCK if acquire else msvcrt.LK_UNLCK
            msvcrt.locking(self._lock_file.fileno(), mode, 1)
        else:  # pragma: no cover - exercised on non-Windows platforms
            import fcntl  # type: ignore

            mode = fcntl.LOCK_EX | fcntl.LOCK_NB if acquire else fcntl.LOCK_UN
            fcntl.flock(self._lock_file.fileno(), mode)

    def __enter__(self) -> "SingleInstanceGuard":
        self.acquire()
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.release()


def _apply_no_activate(window: tk.Tk) -> None:
    """Keep clicks on the window from taking focus away from the target app."""

    if sys.platform != "win32":
        return
    try:  # pragma: no cover - Windows specific implementation
        import ctypes
    except Exception:  # pragma: no cover - if ctypes is unavailable
        return

    user32 = ctypes.windll.user32  # type: ignore[attr-defined]
    window.update_idletasks()
    hwnd = user32.GetParent(window.winfo_id()) or window.winfo_id()
    style = user32.GetWindowLongW(hwnd, GWL_EXSTYLE)
    user32.SetWindowLongW(hwnd, GWL_EXSTYLE, style | WS_EX_NOACTIVATE | WS_EX_APPWINDOW)


def _resolve_family(window: tk.Misc) -> str:
    default_font = tkfont.nametofont("TkDefaultFont")
    available = {name.lower(): name for name in tkfont.families(window)}
    for family in ("Microsoft YaHei UI", "Segoe UI", "Noto Sans CJK SC", "Noto Sans", "Arial"):
        if family.lower() in available:
            return available[family.lower()]
    return default_font.actual("family")


def _create_icon_image() -> Optional["Image.Image"]:
    if Image is None or ImageDraw is None:
        return None

    for name in ("icon.ico", "icon.png"):
        icon_path = _resource_path(name)
        if icon_path.exists():
            try:
                with Image.open(icon_path) as icon:
                    return icon.convert("RGBA")
            except OSError as exc:
                logger.warning("Error loading icon %s: %s", icon_path, exc)

    size = 64
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.rounded_rectangle((8, 8, size - 8, size - 8), radius=10, fill=(64, 64, 64, 255))
    for left in (20, 36):
        for top in (20, 36):
            draw.rectangle((left, top, left + 8, top + 8), fill=(255, 255, 255, 255))
    return image


class NumpadWindow(ViewSurface):
    """Main window: status labels, keypad, control buttons and menu bar."""

    def __init__(self, root: tk.Tk, app: "VirtualNumpadApp") -> None:
        self._root = root
        self._app = app
        self._family = _resolve_family(root)
        self._frosted_var = tk.BooleanVar(master=root, value=False)
        self._notifications_var = tk.BooleanVar(master=root, value=False)
        self._button_styles: Dict[tk.Button, ButtonStyle] = {}
        self._keypad_keys: List[List[str]] = [["" for _ in range(4)] for _ in range(4)]
        self._control_keys: List[str] = ["", "", ""]
        self._language_codes: tuple = ()
        self._background_path: Optional[str] = None
        self._background_source = None
        self._background_photo = None
        self._resize_job: Optional[str] = None

        root.geometry("520x600")
        root.minsize(360, 420)
        root.protocol("WM_DELETE_WINDOW", app.hide_window)
        root.bind("<Configure>", self._on_configure)

        self._build_menu()
        self._build_body()
        self._build_language_picker()
        _apply_no_activate(root)

    # Construction -----------------------------------------------------

    def _new_button(self, parent: tk.Widget, command: Callable[[], None]) -> tk.Button:
        button = tk.Button(parent, relief=tk.FLAT, bd=1, cursor="hand2", takefocus=0, command=command)
        button.bind("<Enter>", lambda _event: self._hover(button, True))
        button.bind("<Leave>", lambda _event: self._hover(button, False))
        return button

    def _build_menu(self) -> None:
        store = self._app.store
        menubar = tk.Menu(self._root, tearoff=0)

        self._language_menu = tk.Menu(menubar, tearoff=0)
        self._language_menu.add_command(label="", command=self._show_language_picker)
        self._language_menu.add_separator()
        self._language_menu.add_command(label="", command=self._app.reload_languages)

        self._skins_menu = tk.Menu(menubar, tearoff=0)
        self._skins_menu.add_command(label="", command=lambda: store.set_theme(False))
        self._skins_menu.add_command(label="", command=lambda: store.set_theme(True))
        self._skins_menu.add_separator()
        self._skins_menu.add_command(label="", command=self._app.choose_background)
        self._skins_menu.add_command(label="", command=store.clear_background)
        self._skins_menu.add_separator()
        self._skins_menu.add_checkbutton(
            label="",
            variable=self._frosted_var,
            command=lambda: store.set_frosted(self._frosted_var.get()),
        )

        self._notifications_menu = tk.Menu(menubar, tearoff=0)
        self._notifications_menu.add_checkbutton(
            label="",
            variable=self._notifications_var,
            command=lambda: store.set_notifications(self._notifications_var.get()),
        )

        self._about_menu = tk.Menu(menubar, tearoff=0)
        self._about_menu.add_command(label="", command=self._app.show_about)

        for menu in (self._language_menu, self._skins_menu, self._notifications_menu, self._about_menu):
            menubar.add_cascade(label="", menu=menu)
        self._root.config(menu=menubar)
        self._menubar = menubar

    def _build_body(self) -> None:
        body = tk.Frame(self._root)
        body.pack(fill=tk.BOTH, expand=True)
        self._body = body

        self._background_label = tk.Label(body, bd=0)
        self._background_label.place(relx=0, rely=0, relwidth=1, relheight=1)

        top = tk.Frame(body)
        top.pack(fill=tk.X, padx=10, pady=10)
        self._status_label = tk.Label(top, font=(self._family, 14, "bold"))
        self._mode_label = tk.Label(top, font=(self._family, 12))
        self._author_label = tk.Label(top, font=(self._family, 11, "italic"))
        for label in (self._status_label, self._mode_label, self._author_label):
            label.pack(fill=tk.X)

        keypad = tk.Frame(body)
        keypad.pack(fill=tk.BOTH, expand=True, padx=20, pady=20)
        self._keypad_buttons: List[List[tk.Button]] = []
        for row in range(4):
            keypad.rowconfigure(row, weight=1, uniform="keys")
            keypad.columnconfigure(row, weight=1, uniform="keys")
            buttons = []
            for column in range(4):
                button = self._new_button(keypad, lambda r=row, c=column: self._on_keypad(r, c))
                button.grid(row=row, column=column, sticky="nsew", padx=5, pady=5)
                buttons.append(button)
            self._keypad_buttons.append(buttons)

        controls = tk.Frame(body)
        controls.pack(pady=10)
        self._control_buttons: List[tk.Button] = []
        for index in range(3):
            button = self._new_button(controls, lambda i=index: self._on_control(i))
            button.configure(width=12)
            button.pack(side=tk.LEFT, padx=5)
            self._control_buttons.append(button)

        self._panels = (body, top, keypad, controls)

    def _build_language_picker(self) -> None:
        picker = tk.Toplevel(self._root)
        picker.withdraw()
        picker.transient(self._root)
        picker.resizable(False, False)
        picker.protocol("WM_DELETE_WINDOW", picker.withdraw)
        combo = ttk.Combobox(picker, state="readonly", width=32)
        combo.pack(padx=16, pady=16)
        combo.bind("<<ComboboxSelected>>", self._on_language_selected)
        self._language_picker = picker
        self._language_combo = combo

    # Event handlers ---------------------------------------------------

    def _on_keypad(self, row: int, column: int) -> None:
        self._app.on_keypad_button(self._keypad_keys[row][column])

    def _on_control(self, index: int) -> None:
        self._app.on_control_button(self._control_keys[index])

    def _on_language_selected(self, _event: tk.Event) -> None:
        index = self._language_combo.current()
        if 0 <= index < len(self._language_codes):
            self._app.select_language(self._language_codes[index])

    def _show_language_picker(self) -> None:
        self._language_picker.deiconify()
        self._language_picker.lift()

    def _hover(self, button: tk.Button, inside: bool) -> None:
        style = self._button_styles.get(button)
        if style is not None:
            button.configure(bg=style.hover if inside else style.fill)

    def _on_configure(self, event: tk.Event) -> None:
        if event.widget is not self._root or self._background_source is None:
            return
        if self._resize_job is not None:
            self._root.after_cancel(self._resize_job)
        self._resize_job = self._root.after(100, self._refresh_background)

    # Rendering --------------------------------------------------------

    def _render_button(self, button: tk.Button, text: str, style: ButtonStyle) -> None:
        self._button_styles[button] = style
        button.configure(
            text=text,
            bg=style.fill,
            fg=style.foreground,
            activebackground=style.pressed,
            activeforeground=style.foreground,
            highlightbackground=style.border,
            highlightcolor=style.border,
            highlightthickness=1,
            font=(self._family, style.font_size, "bold"),
        )

    def render_status(self, view: StatusView) -> None:
        self._root.title(view.title)
        for panel in self._panels:
            panel.configure(bg=view.panel_color)
        self._status_label.configure(text=view.status_text, fg=view.status_color, bg=view.panel_color)
        self._mode_label.configure(text=view.mode_text, fg=view.mode_color, bg=view.panel_color)
        self._author_label.configure(text=view.author_text, fg=view.mode_color, bg=view.panel_color)
        self._root.attributes("-topmost", view.always_on_top)
        self._show_background(view.background_path)

    def render_buttons(self, grid: ButtonGrid) -> None:
        for row, specs in enumerate(grid.rows):
            for column, spec in enumerate(specs):
                self._keypad_keys[row][column] = spec.key
                self._render_button(self._keypad_buttons[row][column], spec.label, grid.style)
        for index, spec in enumerate(grid.controls):
            self._control_keys[index] = spec.key
            self._render_button(self._control_buttons[index], spec.label, grid.control_style)

    def render_menu_bar(self, view: MenuBarView) -> None:
        for index, label in enumerate(
            (view.language_menu, view.skins_menu, view.notifications_menu, view.about_menu)
        ):
            self._menubar.entryconfigure(index, label=label)
        self._language_menu.entryconfigure(0, label=view.language_item)
        self._language_menu.entryconfigure(2, label=view.refresh_item)
        self._skins_menu.entryconfigure(0, label=view.light_item)
        self._skins_menu.entryconfigure(1, label=view.dark_item)
        self._skins_menu.entryconfigure(3, label=view.background_item)
        self._skins_menu.entryconfigure(4, label=view.clear_background_item)
        self._skins_menu.entryconfigure(6, label=view.frosted_item)
        self._notifications_menu.entryconfigure(0, label=view.notifications_item)
        self._about_menu.entryconfigure(0, label=view.about_item)
        self._frosted_var.set(view.frosted_checked)
        self._notifications_var.set(view.notifications_checked)

        self._language_picker.title(view.language_menu)
        self._language_codes = view.language_codes
        self._language_combo.configure(values=view.language_items)
        if view.selected_index >= 0:
            self._language_combo.current(view.selected_index)

    def _show_background(self, path: Optional[str]) -> None:
        if path == self._background_path:
            return
        self._background_path = path
        self._background_source = None
        self._background_photo = None
        self._background_label.configure(image="")
        if path is None or Image is None:
            return
        try:
            with Image.open(path) as image:
                self._background_source = image.convert("RGB")
        except (OSError, ValueError) as exc:
            self._app.on_background_error(path, exc)
            return
        self._refresh_background()

    def _refresh_background(self) -> None:
        self._resize_job = None
        if self._background_source is None or ImageTk is None:
            return
        width = max(self._body.winfo_width(), self._body.winfo_reqwidth(), 1)
        height = max(self._body.winfo_height(), self._body.winfo_reqheight(), 1)
        resized = self._background_source.resize((width, height))
        self._background_photo = ImageTk.PhotoImage(resized, master=self._root)
        self._background_label.configure(image=self._background_photo)
        self._background_label.lower()


class SystemTrayController(ViewSurface):
    """Tray icon whose menu labels are always English.

    pystray invokes menu actions on its own thread; every action is handed
    to ``scheduler`` so state changes happen on the Tk thread.
    """

    def __init__(
        self,
        app: "VirtualNumpadApp",
        *,
        scheduler: Optional[Callable[[Callable[[], None]], None]] = None,
    ) -> None:
        self._app = app
        self._schedule = scheduler or (lambda callback: callback())
        self._icon: Optional["pystray.Icon"] = None
        self._model: Optional[TrayMenuModel] = None
        self._tooltip = "Virtual Numpad"

    @staticmethod
    def _is_supported() -> bool:
        return pystray is not None and MenuItem is not None and Image is not None

    def label(self, slot: str) -> str:
        if self._model is None:
            return slot.title()
        return self._model.label(slot)

    def start(self) -> None:
        if not self._is_supported():
            logger.warning("System tray icon is unavailable because required dependencies are missing")
            return

        assert pystray is not None  # noqa: S101 - guarded by _is_supported
        menu = pystray.Menu(
            MenuItem(lambda _item: self.label("restore"), self._on_restore, default=True),
            pystray.Menu.SEPARATOR,
            MenuItem(lambda _item: self.label("top"), self._on_toggle_top),
            MenuItem(lambda _item: self.label("mode"), self._on_toggle_mode),
            MenuItem(lambda _item: self.label("theme"), self._on_toggle_theme),
            MenuItem(lambda _item: self.label("background"), self._on_background),
            pystray.Menu.SEPARATOR,
            MenuItem(lambda _item: self.label("exit"), self._on_exit),
        )
        try:
            self._icon = pystray.Icon(APP_NAME, _create_icon_image(), self._tooltip, menu=menu)
            self._icon.run_detached()
        except Exception as exc:
            logger.error("Failed to add tray icon: %s", exc)
            self._icon = None

    def stop(self) -> None:
        if self._icon is not None:
            self._icon.stop()
            self._icon = None

    def render_tray_menu(self, model: TrayMenuModel) -> None:
        self._model = model
        if self._icon is not None:
            self._icon.update_menu()

    def render_tray_tooltip(self, text: str) -> None:
        self._tooltip = text
        if self._icon is not None:
            self._icon.title = text

    def _on_restore(self, icon: "pystray.Icon", _: MenuItem) -> None:
        self._schedule(self._app.show_window)

    def _on_toggle_top(self, icon: "pystray.Icon", _: MenuItem) -> None:
        self._schedule(self._app.store.toggle_always_on_top)

    def _on_toggle_mode(self, icon: "pystray.Icon", _: MenuItem) -> None:
        self._schedule(self._app.store.toggle_mode)

    def _on_toggle_theme(self, icon: "pystray.Icon", _: MenuItem) -> None:
        self._schedule(self._app.store.toggle_theme)

    def _on_background(self, icon: "pystray.Icon", _: MenuItem) -> None:
        self._schedule(self._app.choose_background)

    def _on_exit(self, icon: "pystray.Icon", _: MenuItem) -> None:
        self._schedule(self._app.exit)


class VirtualNumpadApp:
    """Wires state, views, the global hook and key injection together."""

    def __init__(
        self,
        *,
        preference_store: Optional[PreferenceStore] = None,
        language_dir: Optional[Path] = None,
        injector: Optional[KeyInjector] = None,
        listener_factory: Callable = create_keyboard_listener,
        confirm_callback: Optional[Callable[[str, str], bool]] = None,
        notify_callback: Optional[Callable[[str, str], None]] = None,
    ) -> None:
        self._preference_store = preference_store or PreferenceStore()
        self._language_dir = ensure_language_directory(language_dir or default_language_dir(), logger)
        self._broadcaster = ViewSyncBroadcaster()
        self.store = StateStore(
            self._preference_store.load(),
            TranslationTable(load_all(self._language_dir)),
            self._preference_store,
            self._broadcaster,
            notifier=self._notify,
        )
        self._injector = injector or KeyInjector()
        self._input_queue: "queue.Queue[KeyEvent]" = queue.Queue()
        self._hook = GlobalInputHook(self.store.execute)
        self._listener_factory = listener_factory
        self._listener = None
        self._confirm = confirm_callback or self._ask_yes_no
        self._notify_callback = notify_callback
        self._root: Optional[tk.Tk] = None
        self._tray: Optional[SystemTrayController] = None

        logger.info("Current language: %s", self.store.state.active_language_code)
        logger.info("Available languages: %s", self.store.translations.codes())

    @property
    def broadcaster(self) -> ViewSyncBroadcaster:
        return self._broadcaster

    @property
    def language_dir(self) -> Path:
        return self._language_dir

    @property
    def hook(self) -> GlobalInputHook:
        return self._hook

    @property
    def input_queue(self) -> "queue.Queue[KeyEvent]":
        return self._input_queue

    # Lifecycle --------------------------------------------------------

    def start(self) -> int:
        """Build the UI, start the hook and run the Tk loop until exit."""

        root = tk.Tk()
        self._root = root
        icon = _create_icon_image()
        if icon is not None and ImageTk is not None:
            root.iconphoto(True, ImageTk.PhotoImage(icon, master=root))

        window = NumpadWindow(root, self)
        self._broadcaster.register(window)
        self._tray = SystemTrayController(self, scheduler=self.call_soon)
        self._broadcaster.register(self._tray)
        self.store.sync_views()
        self._tray.start()
        self.start_listener()

        root.after(INPUT_POLL_MS, self._poll_input_events)
        try:
            root.mainloop()
        finally:
            self.stop_listener()
            if self._tray is not None:
                self._tray.stop()
            self._broadcaster.unregister(window)
            with contextlib.suppress(tk.TclError):
                root.destroy()
            self._root = None
        return 0

    def exit(self) -> None:
        logger.info("Exiting")
        self._preference_store.save(self.store.record())
        if self._tray is not None:
            self._tray.stop()
            self._broadcaster.unregister(self._tray)
            self._tray = None
        self.stop_listener()
        if self._root is not None:
            self._root.quit()

    def start_listener(self) -> None:
        self._hook.reset()
        try:
            listener = self._listener_factory(self._input_queue.put_nowait, logger=logger)
            listener.start()
        except Exception as exc:
            logger.error("Failed to start keyboard hook; global hotkeys are disabled: %s", exc)
            self._listener = None
            return
        self._listener = listener
        logger.info("Global hotkeys: %s", ", ".join(self._hook.describe_bindings()))

    def stop_listener(self) -> None:
        listener, self._listener = self._listener, None
        if listener is not None:
            try:
                listener.stop()
            except Exception as exc:
                logger.error("Failed to stop keyboard hook: %s", exc)
        self._hook.reset()

    def call_soon(self, callback: Callable[[], None]) -> None:
        if self._root is None:
            callback()
        else:
            self._root.after(0, callback)

    def drain_input_events(self, limit: int = MAX_EVENTS_PER_POLL) -> int:
        handled = 0
        while handled < limit:
            try:
                event = self._input_queue.get_nowait()
            except queue.Empty:
                break
            self._hook.process(event)
            handled += 1
        return handled

    def _poll_input_events(self) -> None:
        self.drain_input_events()
        if self._root is not None:
            self._root.after(INPUT_POLL_MS, self._poll_input_events)

    # Window actions ---------------------------------------------------

    def show_window(self) -> None:
        if self._root is None:
            return
        self._root.deiconify()
        self._root.lift()
        self._root.attributes("-topmost", self.store.state.always_on_top)

    def hide_window(self) -> None:
        if self._root is not None:
            self._root.withdraw()

    def on_keypad_button(self, key: str) -> None:
        state = self.store.state
        if state.numeric_mode:
            self._injector.press(key)
            self._notify_if_enabled(
                self.store.translate("mode.num"),
                f"{self.store.translate('message.input')}: {key}",
            )
        else:
            self.run_shortcut(key)

    def on_control_button(self, key: str) -> None:
        self.run_shortcut(key)

    def run_shortcut(self, key: str) -> None:
        store = self.store
        if key == "TOGGLE_TOP":
            store.toggle_always_on_top()
        elif key == "TOGGLE_MODE":
            store.toggle_mode()
        elif key == "TOGGLE_THEME":
            store.toggle_theme()
        elif key == "EXIT":
            if self._confirm(store.translate("button.exit"), store.translate("message.exit.confirm")):
                self.exit()
        else:
            self._injector.send_shortcut(key)
            label = store.translate("button." + key.lower())
            self._notify_if_enabled(
                store.translate("window.title"),
                f"{store.translate('message.execute')}: {label}",
            )

    def select_language(self, code: str) -> None:
        self.store.set_language(code)

    def reload_languages(self) -> None:
        translations = TranslationTable(load_all(self._language_dir))
        self.store.replace_language_set(translations)
        self._notify_if_enabled(
            "Language Refresh",
            f"Language list refreshed. Found {len(translations)} languages.",
        )

    def choose_background(self) -> None:
        self.show_window()
        path = filedialog.askopenfilename(
            parent=self._root,
            title=self.store.translate("button.background"),
            filetypes=IMAGE_FILE_TYPES,
        )
        if path:
            self.store.set_background(os.path.abspath(path))

    def on_background_error(self, path: str, exc: Exception) -> None:
        logger.error("Error loading background image %s: %s", path, exc)
        self._notify_if_enabled(
            self.store.translate("menu.skins"),
            self.store.translate("message.background.error"),
        )

    def show_about(self) -> None:
        state = self.store.state
        tr = self.store.translate
        lines = [
            tr("about.title"),
            tr("about.version"),
            tr("about.features"),
            tr("author.info"),
            tr("about.shortcuts"),
            "",
            f"Notifications: {'Enabled' if state.notifications_enabled else 'Disabled'}",
            f"Theme: {'Dark' if state.dark_theme else 'Light'}",
            f"Background: {'Custom' if state.background_image_path else 'Default'}",
            f"Frosted Buttons: {'Enabled' if state.frosted_buttons else 'Disabled'}",
            f"Available Languages: {len(self.store.translations)}",
        ]
        messagebox.showinfo(tr("menu.about"), "\n".join(lines), parent=self._root)

    # Notifications ----------------------------------------------------

    def _notify_if_enabled(self, title: str, message: str) -> None:
        if self.store.state.notifications_enabled:
            self._notify(title, message)

    def _notify(self, title: str, message: str) -> None:
        logger.info("%s: %s", title, message)
        if self._notify_callback is not None:
            self._notify_callback(title, message)
        elif self._root is not None:
            root = self._root
            root.after_idle(lambda: messagebox.showinfo(title, message, parent=root))

    def _ask_yes_no(self, title: str, message: str) -> bool:
        return bool(messagebox.askyesno(title, message, parent=self._root))


def main() -> int:
    configure_logging()
    try:
        with SingleInstanceGuard(APP_NAME):
            return VirtualNumpadApp().start()
    except SingleInstanceError:
        root = tk.Tk()
        root.withdraw()
        messagebox.showinfo("Virtual Numpad", "Virtual Numpad is already running.")
        root.destroy()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
