from __future__ import annotations

import json
from pathlib import Path

import pytest

from pyexcuse.storage import JsonFileStorage, MemoryStorage


@pytest.mark.asyncio
async def test_memory_storage_get_set_remove() -> None:
    storage = MemoryStorage({"a": "1"})

    assert await storage.get("a") == "1"
    await storage.set("b", "2")
    await storage.remove("a")
    await storage.remove("missing")

    assert await storage.get("a") is None
    assert storage.snapshot() == {"b": "2"}


@pytest.mark.asyncio
async def test_json_file_storage_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    storage = JsonFileStorage(path)

    assert await storage.get("tap_count") is None
    await storage.set("tap_count", "2")
    await storage.set("purchased", "true")
    await storage.remove("purchased")

    assert json.loads(path.read_text(encoding="utf-8")) == {"tap_count": "2"}

    reopened = JsonFileStorage(path)
    assert await reopened.get("tap_count") == "2"
    assert await reopened.get("purchased") is None


@pytest.mark.asyncio
async def test_json_file_storage_treats_corrupt_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert await storage.get("tap_count") is None

    await storage.set("tap_count", "1")
    assert json.loads(path.read_text(encoding="utf-8")) == {"tap_count": "1"}


@pytest.mark.asyncio
async def test_json_file_storage_ignores_non_string_values(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"tap_count": 3, "purchased": "true"}), encoding="utf-8")
    storage = JsonFileStorage(path)

    assert await storage.get("tap_count") is None
    assert await storage.get("purchased") == "true"
