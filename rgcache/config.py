"""Global configuration management for rgcache."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".rgcache"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "rgcache_config_dir_override",
    default=None,
)
DEFAULT_GREP_CMD = "rg --column --line-number --no-heading --color=never --smart-case"
DEFAULT_PREVIEW_LIMIT = 100
DEFAULT_CACHE_THRESHOLD = 100_000
DEFAULT_PATH_TOKEN = "auto"
SUPPORTED_PATH_TOKENS: tuple[str, ...] = (DEFAULT_PATH_TOKEN, "always", "never")


@dataclass
class Config:
    grep_cmd: str = DEFAULT_GREP_CMD
    preview_limit: int = DEFAULT_PREVIEW_LIMIT
    enable_icon: bool = False
    cache_threshold: int = DEFAULT_CACHE_THRESHOLD
    cache_dir: str | None = None
    path_token: str = DEFAULT_PATH_TOKEN


def _coerce_path_token(value: object) -> str:
    token = str(value or DEFAULT_PATH_TOKEN).strip().lower()
    if token not in SUPPORTED_PATH_TOKENS:
        return DEFAULT_PATH_TOKEN
    return token


def _coerce_positive(value: object, default: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    raw = json.loads(config_file.read_text(encoding="utf-8"))
    return Config(
        grep_cmd=(raw.get("grep_cmd") or "").strip() or DEFAULT_GREP_CMD,
        preview_limit=_coerce_positive(raw.get("preview_limit"), DEFAULT_PREVIEW_LIMIT),
        enable_icon=bool(raw.get("enable_icon", False)),
        cache_threshold=_coerce_positive(
            raw.get("cache_threshold"), DEFAULT_CACHE_THRESHOLD
        ),
        cache_dir=raw.get("cache_dir") or None,
        path_token=_coerce_path_token(raw.get("path_token")),
    )


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    if config.grep_cmd:
        data["grep_cmd"] = config.grep_cmd
    data["preview_limit"] = config.preview_limit
    data["enable_icon"] = bool(config.enable_icon)
    data["cache_threshold"] = config.cache_threshold
    if config.cache_dir:
        data["cache_dir"] = config.cache_dir
    data["path_token"] = config.path_token
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def set_grep_cmd(value: str) -> None:
    config = load_config()
    config.grep_cmd = value.strip() or DEFAULT_GREP_CMD
    save_config(config)


def set_preview_limit(value: int) -> None:
    config = load_config()
    config.preview_limit = value
    save_config(config)


def set_enable_icon(value: bool) -> None:
    config = load_config()
    config.enable_icon = bool(value)
    save_config(config)


def set_cache_threshold(value: int) -> None:
    config = load_config()
    config.cache_threshold = value
    save_config(config)


def set_cache_location(value: str | None) -> None:
    config = load_config()
    clean_value = (value or "").strip()
    config.cache_dir = clean_value or None
    save_config(config)


def set_path_token(value: str) -> None:
    normalized = (value or "").strip().lower()
    if normalized not in SUPPORTED_PATH_TOKENS:
        raise ValueError(normalized)
    config = load_config()
    config.path_token = normalized
    save_config(config)
