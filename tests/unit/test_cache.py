from __future__ import annotations

from pathlib import Path

import pytest

import rgcache.cache as cache
from rgcache.cache import CacheStore, cache_key


def test_cache_key_is_deterministic(tmp_path: Path):
    args = ("rg", "--column", "")

    assert cache_key(args, tmp_path) == cache_key(list(args), tmp_path)
    assert cache_key(args, tmp_path) == cache_key(args, str(tmp_path))


def test_cache_key_distinguishes_args_and_directory(tmp_path: Path):
    other = tmp_path / "other"
    other.mkdir()

    base = cache_key(("rg", "foo"), tmp_path)
    assert base != cache_key(("rg", "foo"), other)
    assert base != cache_key(("rg", "foo", "."), tmp_path)
    # Token boundaries matter: ("a b",) must not collide with ("a", "b").
    assert cache_key(("rg", "a b"), tmp_path) != cache_key(("rg", "a", "b"), tmp_path)


def test_cache_key_uses_cwd_when_directory_missing(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert cache_key(("rg",), None) == cache_key(("rg",), tmp_path)


def test_resolve_returns_none_when_missing(store: CacheStore):
    assert store.resolve("deadbeef") is None


def test_store_then_resolve_round_trip(store: CacheStore):
    key = cache_key(("rg", ""), Path("/repo"))

    entry = store.store(key, ["a.py:1:1:x", "b.py:2:1:y", "c.py:3:1:z"])

    assert entry.identifier == f"{key[:12]}_3"
    assert entry.path.read_text(encoding="utf-8").splitlines() == [
        "a.py:1:1:x",
        "b.py:2:1:y",
        "c.py:3:1:z",
    ]
    resolved = store.resolve(key)
    assert resolved == entry


def test_store_replaces_previous_entry(store: CacheStore):
    key = "f" * 40
    first = store.store(key, ["one"])
    second = store.store(key, ["one", "two"])

    assert not first.path.exists()
    assert store.resolve(key) == second
    assert [child.name for child in store.key_dir(key).iterdir()] == [second.identifier]


def test_resolve_ignores_in_progress_temp_files(store: CacheStore):
    key = "a" * 40
    key_dir = store.key_dir(key)
    key_dir.mkdir(parents=True)
    (key_dir / f"{cache.TEMP_PREFIX}partial").write_text("x\n", encoding="utf-8")

    assert store.resolve(key) is None


def test_resolve_treats_io_errors_as_miss(store: CacheStore, monkeypatch):
    key = "b" * 40
    store.store(key, ["line"])

    def boom(self):
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "iterdir", boom)

    assert store.resolve(key) is None


def test_list_entries_and_clear(store: CacheStore):
    store.store("1" * 40, ["a", "b"])
    store.store("2" * 40, ["c"])

    entries = store.list_entries()
    assert [entry["key"] for entry in entries] == ["1" * 40, "2" * 40]
    assert [entry["total"] for entry in entries] == [2, 1]
    assert all(int(entry["size_bytes"]) > 0 for entry in entries)

    assert store.clear("1" * 40) == 1
    assert [entry["key"] for entry in store.list_entries()] == ["2" * 40]
    assert store.clear() == 1
    assert store.list_entries() == []
    assert store.clear() == 0


def test_list_entries_on_missing_root(tmp_path: Path):
    assert CacheStore(tmp_path / "nope").list_entries() == []
    assert CacheStore(tmp_path / "nope").clear() == 0


def test_cache_dir_context_and_open_store(tmp_path: Path):
    override = tmp_path / "override"

    with cache.cache_dir_context(override):
        assert cache.default_store().root == override.resolve()
    assert cache.default_store().root == cache.CACHE_DIR

    assert cache.open_store(tmp_path / "explicit").root == tmp_path / "explicit"
    assert cache.open_store(None).root == cache.CACHE_DIR


def test_set_cache_dir_rejects_files(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(cache, "CACHE_DIR", cache.DEFAULT_CACHE_DIR)
    file_path = tmp_path / "file"
    file_path.write_text("x", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        cache.set_cache_dir(file_path)

    cache.set_cache_dir(tmp_path)
    assert cache.CACHE_DIR == tmp_path.resolve()
    cache.set_cache_dir(None)
    assert cache.CACHE_DIR == cache.DEFAULT_CACHE_DIR
