"""On-disk store for full search results, keyed by command and directory."""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path(os.path.expanduser("~")) / ".rgcache" / "cache"
CACHE_DIR = DEFAULT_CACHE_DIR
_CACHE_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "rgcache_cache_dir_override",
    default=None,
)
ENTRY_PREFIX_LENGTH = 12
TEMP_PREFIX = ".tmp-"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A persisted result set; *identifier* is the entry's file name."""

    identifier: str
    path: Path


def cache_key(args: Sequence[str], cwd: Path | str | None) -> str:
    """Return the stable cache hash for a command run in *cwd*."""

    directory = Path(cwd) if cwd is not None else Path.cwd()
    try:
        directory = directory.expanduser().resolve()
    except OSError:
        directory = directory.absolute()
    base = "\0".join(args) + f"|cwd={directory}"
    return hashlib.sha1(base.encode("utf-8")).hexdigest()


def _resolve_cache_dir() -> Path:
    override = _CACHE_DIR_OVERRIDE.get()
    return override if override is not None else CACHE_DIR


@contextmanager
def cache_dir_context(path: Path | str | None):
    """Temporarily override the cache directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CACHE_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CACHE_DIR_OVERRIDE.reset(token)


def set_cache_dir(path: Path | str | None) -> None:
    global CACHE_DIR
    if path is None:
        CACHE_DIR = DEFAULT_CACHE_DIR
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    CACHE_DIR = dir_path


def default_store() -> "CacheStore":
    """Return a store handle rooted at the active cache directory."""
    return CacheStore(_resolve_cache_dir())


def open_store(path: Path | str | None = None) -> "CacheStore":
    """Return a store rooted at *path*, falling back to the active cache directory."""
    if path:
        return CacheStore(Path(path).expanduser())
    return default_store()


class CacheStore:
    """Directory-backed cache storage.

    Each key owns a sub-directory holding at most one live entry file named
    ``<prefix>_<total>``. Reads never create, repair or delete anything.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def key_dir(self, key: str) -> Path:
        return self.root / key

    def resolve(self, key: str) -> CacheEntry | None:
        """Return the newest entry stored under *key*, or None on miss or I/O error."""

        key_dir = self.key_dir(key)
        try:
            candidates = [
                child
                for child in key_dir.iterdir()
                if child.is_file() and not child.name.startswith(TEMP_PREFIX)
            ]
            if not candidates:
                return None
            newest = max(candidates, key=lambda child: child.stat().st_mtime_ns)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.debug("Cache lookup failed for %s: %s", key, exc)
            return None
        return CacheEntry(identifier=newest.name, path=newest)

    def store(self, key: str, lines: Iterable[str]) -> CacheEntry:
        """Persist *lines* as the entry for *key*, replacing older entries."""

        from .services.cache_service import encode_identifier

        key_dir = self.key_dir(key)
        key_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=key_dir, prefix=TEMP_PREFIX)
        total = 0
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                for line in lines:
                    handle.write(line)
                    handle.write("\n")
                    total += 1
            identifier = encode_identifier(key[:ENTRY_PREFIX_LENGTH], total)
            target = key_dir / identifier
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        for stale in key_dir.iterdir():
            if stale == target or stale.name.startswith(TEMP_PREFIX):
                continue
            if stale.is_file():
                stale.unlink(missing_ok=True)
        logger.debug("Cached %d lines under %s", total, target)
        return CacheEntry(identifier=identifier, path=target)

    def list_entries(self) -> list[dict[str, object]]:
        """Return metadata for every cached entry currently stored."""

        from .services.cache_service import decode_total

        if not self.root.is_dir():
            return []
        entries: list[dict[str, object]] = []
        for key_dir in sorted(self.root.iterdir()):
            if not key_dir.is_dir():
                continue
            entry = self.resolve(key_dir.name)
            if entry is None:
                continue
            try:
                stat = entry.path.stat()
            except OSError:
                continue
            entries.append(
                {
                    "key": key_dir.name,
                    "identifier": entry.identifier,
                    "total": decode_total(entry.identifier),
                    "size_bytes": stat.st_size,
                    "modified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                }
            )
        return entries

    def clear(self, key: str | None = None) -> int:
        """Remove the entries for *key* (or all keys), returning how many were removed."""

        if not self.root.is_dir():
            return 0
        if key is not None:
            targets = [self.key_dir(key)]
        else:
            targets = [child for child in self.root.iterdir() if child.is_dir()]
        removed = 0
        for target in targets:
            if not target.is_dir():
                continue
            removed += sum(
                1
                for child in target.iterdir()
                if child.is_file() and not child.name.startswith(TEMP_PREFIX)
            )
            shutil.rmtree(target)
        return removed
