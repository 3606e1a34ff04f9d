"""Tests for library persistence."""
import json

import pytest

from bookshelf.models import Category, LibraryRecord
from bookshelf.storage import (
    LIBRARY_STORAGE_KEY, JsonFileStore, KeyValueStore, MemoryStore,
    load_library, save_library, open_store,
)


def _record(book_id="id1", category=Category.TO_READ):
    return LibraryRecord(book_id, "Dune", "Frank Herbert", "http://c/1.jpg", "Fiction", category)


def test_load_library_first_run():
    """An empty store yields an empty library."""
    assert load_library(MemoryStore()) == []


def test_save_then_load():
    store = MemoryStore()
    records = [_record("a"), _record("b", Category.COMPLETED)]
    
    save_library(store, records)
    
    assert load_library(store) == records
    stored = json.loads(store.get(LIBRARY_STORAGE_KEY))
    assert stored[1]["category"] == "completed"


def test_load_library_malformed():
    """Corrupt stored data is not silently discarded."""
    store = MemoryStore({LIBRARY_STORAGE_KEY: "{not json"})
    
    with pytest.raises(ValueError):
        load_library(store)


def test_json_file_store(tmp_path):
    path = tmp_path / "nested" / "library.json"
    store = JsonFileStore(path)
    
    assert store.get("missing") is None
    
    store.set("a", "1")
    store.set("b", "2")
    
    assert JsonFileStore(path).get("a") == "1"
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1", "b": "2"}


def test_json_file_store_library_round_trip(tmp_path):
    store = JsonFileStore(tmp_path / "library.json")
    save_library(store, [_record()])
    
    assert load_library(JsonFileStore(tmp_path / "library.json")) == [_record()]


class _Config:
    STORAGE_BACKEND = "file"
    LIBRARY_FILE = None
    DATABASE_URL = "postgresql://localhost/test"


def test_open_store_backends(tmp_path):
    config = _Config()
    config.LIBRARY_FILE = tmp_path / "library.json"
    assert isinstance(open_store(config), JsonFileStore)
    
    config.STORAGE_BACKEND = "memory"
    assert isinstance(open_store(config), MemoryStore)
    
    config.STORAGE_BACKEND = "redis"
    with pytest.raises(ValueError):
        open_store(config)


def test_store_subclass_must_implement_interface():
    class GetOnly(KeyValueStore):
        def get(self, key):
            return None
    
    with pytest.raises(TypeError):
        GetOnly()


def test_store_stats(tmp_path):
    memory = MemoryStore({"a": "1", "b": "2"})
    assert memory.get_stats() == {"stored_keys": 2}
    
    store = JsonFileStore(tmp_path / "library.json")
    save_library(store, [_record()])
    assert store.get_stats() == {"stored_keys": 1, "path": str(tmp_path / "library.json")}


@pytest.mark.parametrize("stored", [
    '[{"title": "no id", "category": "toRead"}]',
    '[{"id": "no-category"}]',
    '["not a record"]',
    '42',
])
def test_load_library_incomplete_records(stored):
    """Structurally wrong libraries raise ValueError, not KeyError."""
    store = MemoryStore({LIBRARY_STORAGE_KEY: stored})
    
    with pytest.raises(ValueError):
        load_library(store)
