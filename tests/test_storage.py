"""Tests for key-value stores."""

from __future__ import annotations

import typing as typ

from newt_wiki.storage import JsonFileStore, MemoryStore

if typ.TYPE_CHECKING:
    from pathlib import Path


def test_memory_store_round_trip() -> None:
    store = MemoryStore()
    store.set("aiwiki:history", "[]")

    assert store.get("aiwiki:history") == "[]", "expected stored value"
    store.remove("aiwiki:history")
    store.remove("aiwiki:history")
    assert store.get("aiwiki:history") is None, "expected value removed"


def test_json_file_store_persists_between_instances(tmp_path: Path) -> None:
    path = tmp_path / "state" / "history.json"
    JsonFileStore(path).set("aiwiki:history", '["Hogwarts"]')

    assert path.exists(), "expected parent directories to be created"
    assert JsonFileStore(path).get("aiwiki:history") == '["Hogwarts"]', (
        "expected the value to survive a new instance"
    )


def test_json_file_store_treats_corrupt_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)

    assert store.get("aiwiki:history") is None, "expected corrupt file to read empty"
    store.set("aiwiki:history", "[]")
    assert store.get("aiwiki:history") == "[]", "expected file to be rewritten"


def test_json_file_store_missing_file(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "missing.json")

    assert store.get("anything") is None, "expected missing file to read empty"
    store.remove("anything")
    assert not (tmp_path / "missing.json").exists(), "expected no write on no-op"
