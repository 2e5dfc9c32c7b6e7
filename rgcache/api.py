"""Public Python API for rgcache."""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from pathlib import Path

from .cache import CacheStore, cache_dir_context, default_store, open_store, set_cache_dir
from .config import Config, config_dir_context, load_config, set_config_dir
from .errors import RgcacheError
from .search import PreviewResult
from .services.command_service import detect_platform_policy
from .services.exec_service import CommandRunner
from .services.filter_service import LineFilter
from .services.forerunner_service import ForerunnerJob, start_forerunner
from .services import search_service
from .utils import ensure_positive


@contextmanager
def _data_dir_context(
    data_dir: Path | str | None,
    *,
    config_dir: Path | str | None,
    cache_dir: Path | str | None,
):
    if data_dir is None and config_dir is None and cache_dir is None:
        yield
        return
    effective_config_dir = config_dir if config_dir is not None else data_dir
    effective_cache_dir = cache_dir if cache_dir is not None else data_dir
    with ExitStack() as stack:
        if effective_config_dir is not None:
            stack.enter_context(config_dir_context(effective_config_dir))
        if effective_cache_dir is not None:
            stack.enter_context(cache_dir_context(effective_cache_dir))
        yield


def set_data_dir(path: Path | str | None) -> None:
    """Set the base directory for config and cache data."""
    set_config_dir(path)
    set_cache_dir(path)


def _settings(config: Config | None) -> Config:
    return config if config is not None else load_config()


def _store(settings: Config, *, overridden: bool) -> CacheStore:
    # An explicit cache_dir/data_dir argument beats the configured location.
    if overridden:
        return default_store()
    return open_store(settings.cache_dir)


def _limit(number: int | None, settings: Config) -> int:
    if number is None:
        return settings.preview_limit
    try:
        return ensure_positive(number, "number")
    except ValueError as exc:
        raise RgcacheError(str(exc)) from exc


def grep(
    query: str,
    *,
    path: Path | str | None = None,
    glob: str | None = None,
    grep_cmd: str | None = None,
    number: int | None = None,
    enable_icon: bool | None = None,
    config: Config | None = None,
    data_dir: Path | str | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
    runner: CommandRunner | None = None,
) -> PreviewResult:
    """Run the search backend once for *query* and return a bounded preview."""
    with _data_dir_context(data_dir, config_dir=config_dir, cache_dir=cache_dir):
        settings = _settings(config)
        request = search_service.SearchRequest(
            query=query,
            directory=Path(path) if path is not None else None,
            limit=_limit(number, settings),
            enable_icon=settings.enable_icon if enable_icon is None else enable_icon,
            grep_cmd=grep_cmd or settings.grep_cmd,
            glob=glob,
            policy=detect_platform_policy(settings.path_token),
        )
        return search_service.grep(
            request,
            store=_store(settings, overridden=cache_dir is not None or data_dir is not None),
            runner=runner,
            cache_threshold=settings.cache_threshold,
        )


def dyn_grep(
    query: str,
    *,
    path: Path | str | None = None,
    input_file: Path | str | None = None,
    number: int | None = None,
    enable_icon: bool | None = None,
    line_filter: LineFilter | None = None,
    config: Config | None = None,
    data_dir: Path | str | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
    runner: CommandRunner | None = None,
) -> PreviewResult:
    """Filter a full scan by *query*, serving a cached result when one exists."""
    with _data_dir_context(data_dir, config_dir=config_dir, cache_dir=cache_dir):
        settings = _settings(config)
        request = search_service.SearchRequest(
            query=query,
            directory=Path(path) if path is not None else None,
            input_file=Path(input_file) if input_file is not None else None,
            limit=_limit(number, settings),
            enable_icon=settings.enable_icon if enable_icon is None else enable_icon,
            policy=detect_platform_policy(settings.path_token),
        )
        return search_service.dyn_grep(
            request,
            store=_store(settings, overridden=cache_dir is not None or data_dir is not None),
            runner=runner,
            line_filter=line_filter,
        )


def forerunner(
    path: Path | str | None = None,
    *,
    config: Config | None = None,
    data_dir: Path | str | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
    runner: CommandRunner | None = None,
) -> ForerunnerJob | None:
    """Start warming the cache for *path*; returns None outside git repositories."""
    with _data_dir_context(data_dir, config_dir=config_dir, cache_dir=cache_dir):
        settings = _settings(config)
        # The store root is fixed here, so the worker thread does not depend on
        # the override still being active.
        return start_forerunner(
            path,
            store=_store(settings, overridden=cache_dir is not None or data_dir is not None),
            runner=runner,
            policy=detect_platform_policy(settings.path_token),
            cache_threshold=settings.cache_threshold,
        )


def clear_cache(
    *,
    config: Config | None = None,
    data_dir: Path | str | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
) -> int:
    """Remove every cached result, returning the number of entries removed."""
    with _data_dir_context(data_dir, config_dir=config_dir, cache_dir=cache_dir):
        settings = _settings(config)
        return _store(
            settings, overridden=cache_dir is not None or data_dir is not None
        ).clear()
