from __future__ import annotations

import json
from pathlib import Path

import pytest

from disasterprep.store import JsonFileStore, MemoryStore


@pytest.mark.parametrize(
    "value",
    [0, 42, -7, 3.5, "home", True, None, [1, "two", {"three": 3}], {"name": "Ambulance", "phone": "108"}],
)
def test_json_file_store_round_trip(tmp_path: Path, value: object) -> None:
    store = JsonFileStore(tmp_path / "store.json")
    store.write("k", value)

    assert store.read("k", "fallback") == value
    # And again after reopening from disk.
    assert JsonFileStore(tmp_path / "store.json").read("k", "fallback") == value


def test_unknown_key_returns_default(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "missing.json")
    sentinel = {"default": True}

    assert store.read("dp.nothing", sentinel) is sentinel
    assert MemoryStore().read("dp.nothing", 7) == 7


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonFileStore(path)
    assert store.read("dp.score", 42) == 42

    # A later write replaces the corrupt document.
    store.write("dp.score", 50)
    assert json.loads(path.read_text(encoding="utf-8")) == {"dp.score": 50}


def test_non_object_document_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert JsonFileStore(path).read("dp.view", "home") == "home"


def test_write_failures_are_swallowed(tmp_path: Path) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileStore(blocker / "store.json")

    store.write("dp.score", 60)  # parent is a file: cannot be created
    store.write("dp.bad", object())  # not serializable

    assert store.read("dp.bad", "default") == "default"


def test_read_returns_independent_copies(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "store.json")
    store.write("dp.contacts", [{"name": "Fire Brigade"}])

    got = store.read("dp.contacts", [])
    got.append({"name": "Mutated"})

    assert store.read("dp.contacts", []) == [{"name": "Fire Brigade"}]


def test_memory_store_malformed_raw_value_falls_back() -> None:
    store = MemoryStore({"dp.score": "{oops"})

    assert store.read("dp.score", 42) == 42
    store.write("dp.score", 43)
    assert store.raw("dp.score") == "43"
    assert store.read("dp.score", 42) == 43
