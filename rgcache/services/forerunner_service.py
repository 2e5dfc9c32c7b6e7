"""Speculative full scans that warm the cache before a query arrives."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from ..cache import CacheStore
from ..config import DEFAULT_CACHE_THRESHOLD
from ..utils import effective_directory, is_git_repo
from .command_service import GrepCommand, PlatformPolicy, compose_full_scan_command
from .exec_service import CommandRunner, collect

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ForerunnerJob:
    """Handle for a detached forerunner run.

    The outcome of the run is discarded; the only observable effects are whether
    the job has finished and whether a cache entry exists afterwards.
    """

    command: GrepCommand
    thread: threading.Thread | None = None
    finished: threading.Event = field(default_factory=threading.Event)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the job has finished; return False on timeout."""
        return self.finished.wait(timeout)

    @property
    def done(self) -> bool:
        return self.finished.is_set()


def start_forerunner(
    directory: Path | str | None = None,
    *,
    store: CacheStore,
    runner: CommandRunner | None = None,
    policy: PlatformPolicy | None = None,
    cache_threshold: int = DEFAULT_CACHE_THRESHOLD,
) -> ForerunnerJob | None:
    """Spawn a full scan of *directory* and drain it on a worker thread.

    Only the spawn happens on the calling thread. Returns None without spawning
    anything when *directory* is not a git repository. Spawn and execution
    failures are logged and swallowed.
    """

    target = effective_directory(directory).resolve()
    if not is_git_repo(target):
        logger.debug("Skipping forerunner for %s: not a git repository", target)
        return None

    # Pin the scan to an absolute cwd: the cache key is derived on the worker
    # thread, after the caller may have changed directory.
    command = compose_full_scan_command(target, policy=policy)
    job = ForerunnerJob(command=command)
    try:
        process = (runner or CommandRunner()).spawn(command)
    except Exception as exc:
        logger.warning("Forerunner for %s could not start: %s", target, exc)
        job.finished.set()
        return job

    def _drain() -> None:
        try:
            result = collect(
                process,
                command,
                store=store,
                limit=0,
                cache_threshold=cache_threshold,
            )
            logger.debug("Forerunner for %s produced %d lines", target, result.total)
        except Exception as exc:
            logger.warning("Forerunner for %s failed: %s", target, exc)
        finally:
            job.finished.set()

    job.thread = threading.Thread(target=_drain, name=f"rgcache-forerunner-{target.name}")
    job.thread.start()
    return job
