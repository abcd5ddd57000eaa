"""Translation tables for the Virtual Numpad user interface."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

LANGUAGE_CODE_PATTERN = re.compile(r"^[a-z]{2}[-_][a-z]{2}$")
LANGUAGE_FILE_SUFFIX = ".txt"

LanguageTable = Mapping[str, str]
LanguageSet = Mapping[str, LanguageTable]


_EN_US = {
    "window.title": "Virtual Numpad",
    "status.label": "Status",
    "mode.label": "Mode",
    "top.on": "Always on Top",
    "top.off": "Not Always on Top",
    "mode.num": "Number Mode",
    "mode.shortcut": "Shortcut Mode",
    "button.toggle.top": "Toggle Top",
    "button.toggle.mode": "Toggle Mode",
    "button.toggle.theme": "Toggle Theme",
    "button.background": "Set Background",
    "button.clear.background": "Clear Background",
    "button.frosted": "Frosted Buttons",
    "button.copy": "Copy",
    "button.paste": "Paste",
    "button.save": "Save",
    "button.cut": "Cut",
    "button.undo": "Undo",
    "button.redo": "Redo",
    "button.new": "New",
    "button.open": "Open",
    "button.find": "Find",
    "button.replace": "Replace",
    "button.print": "Print",
    "button.help": "Help",
    "button.exit": "Exit",
    "button.toggle_top": "Top",
    "button.toggle_mode": "Mode",
    "button.toggle_theme": "Theme",
    "message.toggle.top.on": "Window is now always on top",
    "message.toggle.top.off": "Window is no longer always on top",
    "message.mode.num": "Switched to Number Mode",
    "message.mode.shortcut": "Switched to Shortcut Mode",
    "message.theme.light": "Switched to Light Mode",
    "message.theme.dark": "Switched to Dark Mode",
    "message.frosted.on": "Frosted effect enabled",
    "message.frosted.off": "Frosted effect disabled",
    "message.input": "Input",
    "message.execute": "Execute",
    "message.exit.confirm": "Are you sure you want to exit?",
    "message.language.changed": "Language changed to: ",
    "message.background.set": "Background image set successfully",
    "message.background.removed": "Background image removed",
    "message.background.error": "Error loading background image",
    "author.info": "Author: hacker_liao",
    "language.en.us": "English",
    "language.zh.cn": "Chinese",
    "menu.language": "Language",
    "menu.refresh": "Refresh Languages",
    "menu.about": "About",
    "menu.skins": "Skins",
    "menu.notifications": "Notifications",
    "menu.notifications.on": "Show Notifications",
    "menu.notifications.off": "Hide Notifications",
    "about.title": "About Virtual Numpad",
    "about.version": "Version 1.0",
    "about.features": "Features: Virtual Numpad, Window Top Toggle, NumLock Mode Switch, "
    "Multi-language Support, System Tray, Configurations, Theme Switching, Custom Background, "
    "Frosted Buttons",
    "about.shortcuts": "Shortcuts: Ctrl+T (Toggle Top), Alt+N/NumLock (Toggle Mode), "
    "Ctrl+L (Language), Ctrl+D (Theme)",
    "tray.theme.light": "Light Theme",
    "tray.theme.dark": "Dark Theme",
}

_ZH_CN = {
    "window.title": "虚拟数字键盘",
    "status.label": "状态",
    "mode.label": "模式",
    "top.on": "已置顶",
    "top.off": "未置顶",
    "mode.num": "数字模式",
    "mode.shortcut": "快捷键模式",
    "button.toggle.top": "切换置顶",
    "button.toggle.mode": "切换模式",
    "button.toggle.theme": "切换主题",
    "button.background": "设置背景",
    "button.clear.background": "清除背景",
    "button.frosted": "按钮雾化",
    "button.copy": "复制",
    "button.paste": "粘贴",
    "button.save": "保存",
    "button.cut": "剪切",
    "button.undo": "撤销",
    "button.redo": "重做",
    "button.new": "新建",
    "button.open": "打开",
    "button.find": "查找",
    "button.replace": "替换",
    "button.print": "打印",
    "button.help": "帮助",
    "button.exit": "退出",
    "button.toggle_top": "置顶",
    "button.toggle_mode": "模式",
    "button.toggle_theme": "主题",
    "message.toggle.top.on": "窗口已置顶",
    "message.toggle.top.off": "窗口取消置顶",
    "message.mode.num": "切换到数字模式",
    "message.mode.shortcut": "切换到快捷键模式",
    "message.theme.light": "切换到浅色模式",
    "message.theme.dark": "切换到深色模式",
    "message.frosted.on": "雾化效果已启用",
    "message.frosted.off": "雾化效果已禁用",
    "message.input": "输入",
    "message.execute": "执行",
    "message.exit.confirm": "确定要退出程序吗？",
    "message.language.changed": "语言已切换至：",
    "message.background.set": "背景图片设置成功",
    "message.background.removed": "背景图片已移除",
    "message.background.error": "背景图片加载失败",
    "author.info": "作者：hacker_liao",
    "language.en.us": "英文",
    "language.zh.cn": "中文",
    "menu.language": "语言",
    "menu.refresh": "刷新语言",
    "menu.about": "关于",
    "menu.skins": "皮肤",
    "menu.notifications": "通知",
    "menu.notifications.on": "显示通知",
    "menu.notifications.off": "隐藏通知",
    "about.title": "关于虚拟数字键盘",
    "about.version": "版本 1.0",
    "about.features": "功能：虚拟数字键盘、窗口置顶切换、NumLock模式切换、多语言支持、系统托盘、配置保存、主题切换、自定义背景、按钮雾化",
    "about.shortcuts": "快捷键：Ctrl+T (切换置顶), Alt+N/NumLock (切换模式), Ctrl+L (语言), Ctrl+D (主题)",
    "tray.theme.light": "浅色主题",
    "tray.theme.dark": "深色主题",
}

BUILTIN_LANGUAGES: Dict[str, Dict[str, str]] = {"en-us": _EN_US, "zh-cn": _ZH_CN}


def is_language_code(code: str) -> bool:
    return bool(LANGUAGE_CODE_PATTERN.match(code))


def parse_language_lines(lines: Iterable[str]) -> Dict[str, str]:
    """Parse ``key=value`` lines, skipping anything without a separator."""

    table: Dict[str, str] = {}
    for raw in lines:
        line = raw.strip()
        if not line or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        table[key] = value.strip()
    return table


def freeze_language_set(languages: Mapping[str, Mapping[str, str]]) -> LanguageSet:
    return MappingProxyType(
        {code: MappingProxyType(dict(table)) for code, table in languages.items()}
    )


def load_all(
    directory: Path,
    *,
    logger: Optional[logging.Logger] = None,
) -> LanguageSet:
    """Load every ``<code>.txt`` file in *directory*.

    Falls back to the built-in English and Chinese tables when the directory
    yields nothing usable.
    """

    logger = logger or logging.getLogger("virtualnumpad.translations")
    languages: Dict[str, Dict[str, str]] = {}

    try:
        candidates = sorted(
            path for path in directory.iterdir() if path.suffix.lower() == LANGUAGE_FILE_SUFFIX
        )
    except OSError as exc:
        logger.warning("Cannot list language directory %s: %s", directory, exc)
        candidates = []

    for path in candidates:
        code = path.stem
        if not is_language_code(code):
            logger.info("Skipping file with invalid name format: %s", path.name)
            continue
        try:
            with path.open("r", encoding="utf-8") as handle:
                table = parse_language_lines(handle)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error loading language file %s: %s", path.name, exc)
            continue
        if not table:
            logger.warning("Language file %s is empty or invalid", path.name)
            continue
        languages[code] = table
        logger.info("Loaded language %s from %s (%d translations)", code, path.name, len(table))

    if not languages:
        logger.info("No language files found in %s; using built-in languages", directory)
        languages = {code: dict(table) for code, table in BUILTIN_LANGUAGES.items()}

    return freeze_language_set(languages)


def ensure_language_directory(directory: Path, logger: Optional[logging.Logger] = None) -> Path:
    """Create *directory* if needed; fall back to the working directory."""

    logger = logger or logging.getLogger("virtualnumpad.translations")
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Cannot create language directory %s (%s); using current directory", directory, exc)
        return Path(".")
    return directory


class TranslationTable:
    """Read-only view over one loaded :data:`LanguageSet` snapshot."""

    def __init__(self, languages: LanguageSet) -> None:
        if not isinstance(languages, MappingProxyType):
            languages = freeze_language_set(languages)
        self._languages = languages

    @property
    def languages(self) -> LanguageSet:
        return self._languages

    def codes(self) -> List[str]:
        return sorted(self._languages)

    def __contains__(self, code: object) -> bool:
        return code in self._languages

    def __len__(self) -> int:
        return len(self._languages)

    def table(self, code: str) -> LanguageTable:
        return self._languages.get(code, MappingProxyType({}))

    def lookup(self, code: str, key: str) -> str:
        return self.table(code).get(key, key)

    def display_name(self, code: str, active_code: str) -> str:
        key = "language." + code.lower().replace("-", ".").replace("_", ".")
        for table in (self.table(active_code), self.table(code)):
            if key in table:
                return table[key]
        return code
