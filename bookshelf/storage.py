"""Key-value persistence for the library."""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, List, Dict, Any

from bookshelf.models import LibraryRecord

logger = logging.getLogger(__name__)

LIBRARY_STORAGE_KEY = "myBookLibrary"


class KeyValueStore(ABC):
    """String-keyed get/set storage."""
    
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value under key, or None."""
    
    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
    
    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Describe the store's contents."""
    
    def close(self):
        """Release any held resources."""
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class MemoryStore(KeyValueStore):
    """Process-local store; nothing survives the process."""
    
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data = dict(initial or {})
    
    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)
    
    def set(self, key: str, value: str) -> None:
        self.data[key] = value
    
    def get_stats(self) -> Dict[str, Any]:
        return {"stored_keys": len(self.data)}


class JsonFileStore(KeyValueStore):
    """Store every key in one JSON object on disk."""
    
    def __init__(self, path):
        self.path = Path(path)
    
    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)
    
    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)
    
    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=4, ensure_ascii=False)
    
    def get_stats(self) -> Dict[str, Any]:
        return {"stored_keys": len(self._read()), "path": str(self.path)}


def load_library(store: KeyValueStore, key: str = LIBRARY_STORAGE_KEY) -> List[LibraryRecord]:
    """
    Read the saved library.
    
    Returns:
        Library records, or an empty list on first run
        
    Raises:
        ValueError: if the stored value is not a valid library
    """
    raw = store.get(key)
    if not raw:
        logger.info("No saved library found, starting empty")
        return []
    
    try:
        records = [LibraryRecord.from_dict(item) for item in json.loads(raw)]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed library under {key!r}: {e!r}") from e
    
    logger.info(f"Loaded {len(records)} books from storage")
    return records


def save_library(
    store: KeyValueStore,
    records: List[LibraryRecord],
    key: str = LIBRARY_STORAGE_KEY
) -> None:
    """Write the whole library back under a single key."""
    store.set(key, json.dumps([record.to_dict() for record in records]))


def open_store(config) -> KeyValueStore:
    """
    Create the store selected by configuration.
    
    Args:
        config: Config instance
        
    Raises:
        ValueError: for an unknown backend name
    """
    backend = config.STORAGE_BACKEND
    
    if backend == "file":
        return JsonFileStore(config.LIBRARY_FILE)
    elif backend == "memory":
        return MemoryStore()
    elif backend == "postgres":
        from bookshelf.database import Database
        db = Database(config.DATABASE_URL)
        db.init_schema()
        return db
    
    raise ValueError(f"Unknown storage backend: {backend!r}")
