"""Shared helpers for reading cached search results."""

from __future__ import annotations

import logging
import re
from itertools import islice
from pathlib import Path
from typing import Callable

from ..cache import CacheStore, cache_key
from ..config import DEFAULT_PREVIEW_LIMIT
from ..search import PreviewResult
from ..text import Messages
from .command_service import GrepCommand

logger = logging.getLogger(__name__)

CACHE_DELIMITER = "_"
_TOTAL_RE = re.compile(r"[0-9]+")


def encode_identifier(prefix: str, total: int) -> str:
    """Return the entry name carrying *total* after the key-derived *prefix*."""

    if total < 0:
        raise ValueError(Messages.ERROR_NEGATIVE_TOTAL.format(value=total))
    if CACHE_DELIMITER in prefix:
        raise ValueError(Messages.ERROR_PREFIX_DELIMITER.format(delimiter=CACHE_DELIMITER))
    return f"{prefix}{CACHE_DELIMITER}{total}"


def decode_total(identifier: str) -> int | None:
    """Return the total encoded in *identifier*, or None when it is malformed."""

    parts = identifier.split(CACHE_DELIMITER)
    if len(parts) != 2:
        return None
    if not _TOTAL_RE.fullmatch(parts[1]):
        return None
    return int(parts[1])


def read_first_lines(path: Path, limit: int = DEFAULT_PREVIEW_LIMIT) -> list[str]:
    """Read at most *limit* lines from the start of *path*."""

    if limit <= 0:
        return []
    with path.open("r", encoding="utf-8", errors="replace", newline=None) as handle:
        return [line.rstrip("\r\n") for line in islice(handle, limit)]


def load_cached_preview(
    store: CacheStore,
    command: GrepCommand,
    *,
    limit: int = DEFAULT_PREVIEW_LIMIT,
    decorate: Callable[[str], str] | None = None,
) -> PreviewResult | None:
    """Return the cached result for *command*, or None when it must run live."""

    key = cache_key(command.args, command.cwd)
    entry = store.resolve(key)
    if entry is None:
        logger.debug("Cache miss for %s", key)
        return None
    total = decode_total(entry.identifier)
    if total is None:
        logger.debug("Ignoring malformed cache entry %s", entry.path)
        return None
    try:
        lines = read_first_lines(entry.path, limit)
    except OSError as exc:
        logger.warning("Failed to read cached preview %s: %s", entry.path, exc)
        return PreviewResult(total=total, using_cache=True, tempfile=entry.path)
    if decorate is not None:
        lines = [decorate(line) for line in lines]
    # TODO: surface entry age so callers can decide to re-run the forerunner.
    return PreviewResult(total=total, lines=lines, using_cache=True, tempfile=entry.path)
