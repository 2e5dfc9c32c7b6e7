"""Logic helpers for the `rgcache grep`, `dyn-grep` and `exec` commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from pathlib import Path
from typing import Callable, Iterable, Iterator

from ..cache import CacheStore
from ..config import DEFAULT_CACHE_THRESHOLD, DEFAULT_GREP_CMD, DEFAULT_PREVIEW_LIMIT
from ..icons import prepend_grep_icon
from ..search import PreviewResult
from .cache_service import load_cached_preview
from .command_service import (
    PlatformPolicy,
    compose_full_scan_command,
    compose_grep_command,
    compose_shell_command,
)
from .exec_service import CommandRunner, execute, iter_output
from .filter_service import LineFilter, smart_case_filter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchRequest:
    query: str
    directory: Path | None = None
    input_file: Path | None = None
    limit: int = DEFAULT_PREVIEW_LIMIT
    enable_icon: bool = False
    grep_cmd: str = DEFAULT_GREP_CMD
    glob: str | None = None
    policy: PlatformPolicy | None = None

    @property
    def decorate(self) -> Callable[[str], str] | None:
        return prepend_grep_icon if self.enable_icon else None


class SourceKind(str, Enum):
    file = "file"
    cache = "cache"
    process = "process"
    ambient_process = "ambient-process"


@dataclass(slots=True)
class SourceSelection:
    """The single data source chosen for a dyn-grep request.

    ``result`` is set for cache hits and ``lines`` for every other kind.
    """

    kind: SourceKind
    result: PreviewResult | None = None
    lines: Iterable[str] | None = None


def _iter_file(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        for line in handle:
            yield line.rstrip("\r\n")


def select_source(
    request: SearchRequest,
    *,
    store: CacheStore,
    runner: CommandRunner | None = None,
) -> SourceSelection:
    """Pick the replay file, a cached result or a live process, in that order."""

    if request.input_file is not None:
        logger.debug("Replaying captured output from %s", request.input_file)
        return SourceSelection(kind=SourceKind.file, lines=_iter_file(request.input_file))

    active_runner = runner or CommandRunner()
    command = compose_full_scan_command(request.directory, policy=request.policy)
    if request.directory is not None:
        cached = load_cached_preview(
            store,
            command,
            limit=request.limit,
            decorate=request.decorate,
        )
        if cached is not None:
            return SourceSelection(kind=SourceKind.cache, result=cached)
        process = active_runner.spawn(command)
        return SourceSelection(kind=SourceKind.process, lines=iter_output(process))

    process = active_runner.spawn(command)
    return SourceSelection(kind=SourceKind.ambient_process, lines=iter_output(process))


def dyn_grep(
    request: SearchRequest,
    *,
    store: CacheStore,
    runner: CommandRunner | None = None,
    line_filter: LineFilter | None = None,
) -> PreviewResult:
    """Filter the full-scan output by the request query, serving cache hits directly."""

    selection = select_source(request, store=store, runner=runner)
    if selection.result is not None:
        return selection.result

    matcher = line_filter or smart_case_filter
    matched = iter(matcher(request.query, selection.lines or ()))
    preview = list(islice(matched, request.limit))
    total = len(preview) + sum(1 for _ in matched)
    decorate = request.decorate
    if decorate is not None:
        preview = [decorate(line) for line in preview]
    return PreviewResult(total=total, lines=preview, using_cache=False)


def grep(
    request: SearchRequest,
    *,
    store: CacheStore,
    runner: CommandRunner | None = None,
    cache_threshold: int = DEFAULT_CACHE_THRESHOLD,
) -> PreviewResult:
    """Run a one-shot search for the literal request query."""

    command = compose_grep_command(
        request.grep_cmd,
        request.query,
        glob=request.glob,
        directory=request.directory,
        policy=request.policy,
    )
    return execute(
        command,
        store=store,
        runner=runner,
        limit=request.limit,
        decorate=request.decorate,
        cache_threshold=cache_threshold,
    )


def run_exec(
    cmd_str: str,
    directory: Path | None = None,
    *,
    store: CacheStore,
    runner: CommandRunner | None = None,
    limit: int = DEFAULT_PREVIEW_LIMIT,
    enable_icon: bool = False,
    cache_threshold: int = DEFAULT_CACHE_THRESHOLD,
) -> PreviewResult:
    """Run a literal shell command, reusing its cached output when available."""

    command = compose_shell_command(cmd_str, directory)
    decorate = prepend_grep_icon if enable_icon else None
    if directory is not None:
        cached = load_cached_preview(store, command, limit=limit, decorate=decorate)
        if cached is not None:
            return cached
    return execute(
        command,
        store=store,
        runner=runner,
        limit=limit,
        decorate=decorate,
        cache_threshold=cache_threshold,
    )
