from __future__ import annotations

import io
from pathlib import Path

import pytest

from rgcache.cache import CacheStore
from rgcache.errors import RgcacheError


class FakeProcess:
    def __init__(self, args, lines, returncode: int = 0) -> None:
        self.args = args
        self.stdout = io.StringIO("".join(f"{line}\n" for line in lines))
        self.returncode = returncode
        self.waited = False

    def wait(self, timeout=None) -> int:
        self.waited = True
        return self.returncode


class FakeRunner:
    """Stands in for CommandRunner, recording every spawn instead of running rg."""

    def __init__(self, lines=(), *, fail: bool = False) -> None:
        self.lines = list(lines)
        self.fail = fail
        self.spawned = []
        self.processes = []

    def spawn(self, command):
        self.spawned.append(command)
        if self.fail:
            raise RgcacheError(f"Failed to start `{command.program}`: not found")
        process = FakeProcess(command.args, self.lines)
        self.processes.append(process)
        return process


@pytest.fixture
def store(tmp_path: Path) -> CacheStore:
    return CacheStore(tmp_path / "cache")


@pytest.fixture
def fake_runner_factory():
    return FakeRunner


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    monkeypatch.setattr("rgcache.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("rgcache.config.CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr("rgcache.cache.CACHE_DIR", tmp_path / "default-cache")
    return config_dir
