"""File type glyphs prepended to grep output lines."""

from __future__ import annotations

from pathlib import PurePath

DEFAULT_ICON = ""
_EXTENSION_ICONS = {
    ".c": "",
    ".cpp": "",
    ".css": "",
    ".go": "",
    ".h": "",
    ".html": "",
    ".java": "",
    ".js": "",
    ".json": "",
    ".lua": "",
    ".md": "",
    ".py": "",
    ".rb": "",
    ".rs": "",
    ".sh": "",
    ".toml": "",
    ".ts": "",
    ".vim": "",
    ".yaml": "",
    ".yml": "",
}
_FILENAME_ICONS = {
    "Dockerfile": "",
    "Makefile": "",
    ".gitignore": "",
}


def icon_for(path: str) -> str:
    name = PurePath(path).name
    if name in _FILENAME_ICONS:
        return _FILENAME_ICONS[name]
    return _EXTENSION_ICONS.get(PurePath(name).suffix.lower(), DEFAULT_ICON)


def prepend_grep_icon(line: str) -> str:
    """Prefix a ``path:line:column:text`` grep line with its file glyph."""

    path, sep, _ = line.partition(":")
    if not sep:
        return f"{DEFAULT_ICON} {line}"
    return f"{icon_for(path)} {line}"
