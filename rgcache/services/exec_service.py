"""Process execution for the search backend, populating the cache on large runs."""

from __future__ import annotations

import logging
import subprocess
from typing import Callable, Iterator

from ..cache import CacheStore, cache_key
from ..config import DEFAULT_CACHE_THRESHOLD, DEFAULT_PREVIEW_LIMIT
from ..errors import RgcacheError
from ..search import PreviewResult
from ..text import Messages
from .command_service import GrepCommand

logger = logging.getLogger(__name__)


class CommandRunner:
    """Spawns backend processes; tests substitute a fake to count spawns."""

    def spawn(self, command: GrepCommand) -> subprocess.Popen:
        target: str | list[str] = command.args[0] if command.shell else list(command.args)
        cwd = str(command.cwd) if command.cwd is not None else None
        logger.debug("Spawning %r (cwd=%s)", command.args, cwd or ".")
        try:
            return subprocess.Popen(
                target,
                cwd=cwd,
                shell=command.shell,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise RgcacheError(
                Messages.ERROR_SPAWN_FAILED.format(program=command.program, reason=exc)
            ) from exc


def iter_output(process: subprocess.Popen) -> Iterator[str]:
    """Yield stdout lines of *process* lazily, reaping it at end of stream."""

    stdout = process.stdout
    if stdout is None:
        process.wait()
        return
    try:
        for line in stdout:
            yield line.rstrip("\r\n")
    finally:
        stdout.close()
        returncode = process.wait()
        # ripgrep exits 1 when nothing matched.
        if returncode not in (0, 1):
            logger.debug("%r exited with status %s", process.args, returncode)


def collect(
    process: subprocess.Popen,
    command: GrepCommand,
    *,
    store: CacheStore,
    limit: int = DEFAULT_PREVIEW_LIMIT,
    decorate: Callable[[str], str] | None = None,
    cache_threshold: int = DEFAULT_CACHE_THRESHOLD,
) -> PreviewResult:
    """Drain *process* and return its total plus a bounded preview.

    Outputs with at least *cache_threshold* lines are written to *store* under the
    command's cache key so later requests can skip the process entirely.
    """

    lines = list(iter_output(process))
    total = len(lines)
    tempfile = None
    if total >= cache_threshold:
        key = cache_key(command.args, command.cwd)
        try:
            tempfile = store.store(key, lines).path
        except OSError as exc:
            logger.warning("Failed to cache %d lines for %s: %s", total, key, exc)
    preview = lines[:limit]
    if decorate is not None:
        preview = [decorate(line) for line in preview]
    return PreviewResult(total=total, lines=preview, using_cache=False, tempfile=tempfile)


def execute(
    command: GrepCommand,
    *,
    store: CacheStore,
    runner: CommandRunner | None = None,
    limit: int = DEFAULT_PREVIEW_LIMIT,
    decorate: Callable[[str], str] | None = None,
    cache_threshold: int = DEFAULT_CACHE_THRESHOLD,
) -> PreviewResult:
    """Run *command* to completion; see :func:`collect`."""

    process = (runner or CommandRunner()).spawn(command)
    return collect(
        process,
        command,
        store=store,
        limit=limit,
        decorate=decorate,
        cache_threshold=cache_threshold,
    )
