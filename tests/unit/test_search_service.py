from __future__ import annotations

from pathlib import Path

import pytest

from rgcache.cache import CacheStore, cache_key
from rgcache.errors import RgcacheError
from rgcache.icons import prepend_grep_icon
from rgcache.services.command_service import FULL_SCAN_ARGS, PlatformPolicy
from rgcache.services.search_service import (
    SearchRequest,
    SourceKind,
    dyn_grep,
    grep,
    run_exec,
    select_source,
)

POSIX = PlatformPolicy(require_path_token=False)


def _seed_full_scan(store: CacheStore, directory: Path, identifier: str, lines) -> Path:
    key_dir = store.key_dir(cache_key(FULL_SCAN_ARGS, directory))
    key_dir.mkdir(parents=True)
    path = key_dir / identifier
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


def test_select_source_prefers_input_file(tmp_path: Path, store: CacheStore, fake_runner_factory):
    captured = tmp_path / "captured.txt"
    captured.write_text("a.py:1:1:alpha\nb.py:2:1:beta\n", encoding="utf-8")
    _seed_full_scan(store, tmp_path, "abc123_2", ["cached"])
    runner = fake_runner_factory(["live"])
    request = SearchRequest(query="", directory=tmp_path, input_file=captured, policy=POSIX)

    selection = select_source(request, store=store, runner=runner)

    assert selection.kind == SourceKind.file
    assert list(selection.lines) == ["a.py:1:1:alpha", "b.py:2:1:beta"]
    assert runner.spawned == []


def test_dyn_grep_with_input_file_never_consults_cache(
    tmp_path: Path, store: CacheStore, fake_runner_factory, monkeypatch
):
    captured = tmp_path / "captured.txt"
    captured.write_text("a.py:1:1:alpha\nb.py:2:1:beta\n", encoding="utf-8")
    runner = fake_runner_factory(["live"])

    def forbidden(*_args, **_kwargs):
        raise AssertionError("cache must not be consulted")

    monkeypatch.setattr("rgcache.services.search_service.load_cached_preview", forbidden)
    request = SearchRequest(query="beta", directory=tmp_path, input_file=captured, policy=POSIX)

    result = dyn_grep(request, store=store, runner=runner)

    assert result.total == 1
    assert result.lines == ["b.py:2:1:beta"]
    assert result.using_cache is False
    assert runner.spawned == []


def test_dyn_grep_serves_cache_hit_without_spawning(
    tmp_path: Path, store: CacheStore, fake_runner_factory
):
    lines = [f"src/{i}.rs:{i}:1:needle" for i in range(542)]
    path = _seed_full_scan(store, tmp_path, "abc123_542", lines)
    runner = fake_runner_factory(["live"])
    request = SearchRequest(query="needle", directory=tmp_path, limit=100, policy=POSIX)

    result = dyn_grep(request, store=store, runner=runner)

    assert result.total == 542
    assert len(result.lines) == 100
    assert result.using_cache is True
    assert result.tempfile == path
    assert result.to_payload()["using_cache"] is True
    assert runner.spawned == []


def test_dyn_grep_malformed_entry_falls_back_to_live(
    tmp_path: Path, store: CacheStore, fake_runner_factory
):
    _seed_full_scan(store, tmp_path, "abc123", ["cached"])
    runner = fake_runner_factory(["a.py:1:1:Needle", "b.py:1:1:other", "c.py:1:1:needle"])
    request = SearchRequest(query="needle", directory=tmp_path, policy=POSIX)

    selection = select_source(request, store=store, runner=runner)
    assert selection.kind == SourceKind.process
    list(selection.lines)

    result = dyn_grep(request, store=store, runner=runner)

    assert result.using_cache is False
    assert result.total == 2
    assert result.lines == ["a.py:1:1:Needle", "c.py:1:1:needle"]
    assert len(runner.spawned) == 2
    assert all(command.cwd == tmp_path for command in runner.spawned)
    assert runner.spawned[0].args == FULL_SCAN_ARGS


def test_dyn_grep_without_directory_spawns_in_ambient_cwd(
    store: CacheStore, fake_runner_factory, monkeypatch
):
    monkeypatch.setattr(
        "rgcache.services.search_service.load_cached_preview",
        lambda *_a, **_k: pytest.fail("ambient searches skip the cache"),
    )
    runner = fake_runner_factory([f"f{i}.py:1:1:hit" for i in range(7)])
    request = SearchRequest(query="hit", limit=3, enable_icon=True, policy=POSIX)

    selection = select_source(request, store=store, runner=runner)
    assert selection.kind == SourceKind.ambient_process
    list(selection.lines)

    result = dyn_grep(request, store=store, runner=runner)

    assert result.total == 7
    assert result.lines == [prepend_grep_icon(f"f{i}.py:1:1:hit") for i in range(3)]
    assert runner.spawned[-1].cwd is None


def test_dyn_grep_accepts_custom_filter(tmp_path: Path, store: CacheStore, fake_runner_factory):
    runner = fake_runner_factory(["a", "bb", "ccc"])
    request = SearchRequest(query="ignored", directory=tmp_path, policy=POSIX)

    result = dyn_grep(
        request,
        store=store,
        runner=runner,
        line_filter=lambda query, lines: (line for line in lines if len(line) > 1),
    )

    assert result.total == 2
    assert result.lines == ["bb", "ccc"]


def test_grep_composes_literal_query(tmp_path: Path, store: CacheStore, fake_runner_factory):
    runner = fake_runner_factory(["a.py:1:1:foo bar"])
    request = SearchRequest(
        query="foo bar",
        directory=tmp_path,
        grep_cmd="rg --column --line-number",
        glob="*.py",
        policy=PlatformPolicy(require_path_token=True),
    )

    result = grep(request, store=store, runner=runner, cache_threshold=100)

    assert runner.spawned[0].args == (
        "rg",
        "--column",
        "--line-number",
        "foo bar",
        "-g",
        "*.py",
        ".",
    )
    assert runner.spawned[0].cwd == tmp_path
    assert result.total == 1
    assert result.using_cache is False


def test_run_exec_reuses_cached_output(tmp_path: Path, store: CacheStore, fake_runner_factory):
    runner = fake_runner_factory([f"file{i}" for i in range(5)])

    first = run_exec("git ls-files", tmp_path, store=store, runner=runner, cache_threshold=5)
    second = run_exec("git ls-files", tmp_path, store=store, runner=runner, limit=2)

    assert first.using_cache is False
    assert second.using_cache is True
    assert second.total == 5
    assert second.lines == ["file0", "file1"]
    assert len(runner.spawned) == 1
    assert runner.spawned[0].shell is True


@pytest.mark.parametrize("with_directory", [True, False])
def test_dyn_grep_propagates_spawn_failure(
    tmp_path: Path, store: CacheStore, fake_runner_factory, with_directory: bool
):
    runner = fake_runner_factory(fail=True)
    request = SearchRequest(
        query="x",
        directory=tmp_path if with_directory else None,
        policy=POSIX,
    )

    with pytest.raises(RgcacheError, match="Failed to start `rg`"):
        dyn_grep(request, store=store, runner=runner)
    assert len(runner.spawned) == 1
