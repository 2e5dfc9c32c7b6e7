"""Logic helpers for the `rgcache config` command."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import (
    Config,
    load_config,
    set_cache_location,
    set_cache_threshold,
    set_enable_icon,
    set_grep_cmd,
    set_path_token,
    set_preview_limit,
)


@dataclass(slots=True)
class ConfigUpdateResult:
    grep_cmd_set: bool = False
    preview_limit_set: bool = False
    enable_icon_set: bool = False
    cache_threshold_set: bool = False
    cache_dir_set: bool = False
    cache_dir_cleared: bool = False
    path_token_set: bool = False

    @property
    def changed(self) -> bool:
        return any(
            (
                self.grep_cmd_set,
                self.preview_limit_set,
                self.enable_icon_set,
                self.cache_threshold_set,
                self.cache_dir_set,
                self.cache_dir_cleared,
                self.path_token_set,
            )
        )


def apply_config_updates(
    *,
    grep_cmd: str | None = None,
    preview_limit: int | None = None,
    enable_icon: bool | None = None,
    cache_threshold: int | None = None,
    cache_dir: str | None = None,
    clear_cache_dir: bool = False,
    path_token: str | None = None,
) -> ConfigUpdateResult:
    """Apply config mutations and report which fields were updated."""

    result = ConfigUpdateResult()
    if grep_cmd is not None:
        set_grep_cmd(grep_cmd)
        result.grep_cmd_set = True
    if preview_limit is not None:
        set_preview_limit(preview_limit)
        result.preview_limit_set = True
    if enable_icon is not None:
        set_enable_icon(enable_icon)
        result.enable_icon_set = True
    if cache_threshold is not None:
        set_cache_threshold(cache_threshold)
        result.cache_threshold_set = True
    if cache_dir is not None:
        set_cache_location(cache_dir)
        result.cache_dir_set = True
    if clear_cache_dir:
        set_cache_location(None)
        result.cache_dir_cleared = True
    if path_token is not None:
        set_path_token(path_token)
        result.path_token_set = True
    return result


def get_config_snapshot() -> Config:
    """Return the current configuration dataclass."""

    return load_config()
