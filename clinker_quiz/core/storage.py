"""Key-value storage backends and a JSON collection helper.

The platform treats storage like browser local storage: string values under
fixed keys, each collection read whole and written back whole. Backends are
injected so tests can swap the file for an in-memory dict.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any

from clinker_quiz.core.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String values addressed by string keys."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        ...


class InMemoryStore(KeyValueStore):
    """Dict-backed store used by tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore(KeyValueStore):
    """Persists every key inside one JSON object on disk.

    The file is loaded on first access and rewritten after each mutation.
    Two processes writing the same file will overwrite each other.
    """

    def __init__(self, file_path: Path) -> None:
        self._path = Path(file_path)
        self._data: dict[str, str] | None = None
        self._lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._flush(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._flush(data)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._load())

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data
        if not self._path.exists():
            self._data = {}
            return self._data
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Unable to read storage file {self._path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise StorageError(f"Storage file {self._path} must contain a JSON object.")
        self._data = {str(key): str(value) for key, value in raw.items()}
        logger.debug("Loaded %d keys from %s", len(self._data), self._path)
        return self._data

    def _flush(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Unable to write storage file {self._path}: {exc}") from exc


class CollectionStore:
    """JSON (de)serialization of whole collections over a key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def backend(self) -> KeyValueStore:
        return self._store

    def read_collection(self, name: str) -> list[dict[str, Any]]:
        value = self.read_value(name)
        if value is None:
            return []
        if not isinstance(value, list):
            raise StorageError(f"Collection '{name}' is not a list.")
        return value

    def write_collection(self, name: str, items: list[dict[str, Any]]) -> None:
        self.write_value(name, list(items))

    def read_value(self, name: str) -> Any:
        raw = self._store.get(name)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Value under '{name}' is not valid JSON.") from exc

    def write_value(self, name: str, value: Any) -> None:
        self._store.set(name, json.dumps(value, ensure_ascii=False))

    def read_text(self, name: str) -> str | None:
        return self._store.get(name)

    def write_text(self, name: str, value: str) -> None:
        self._store.set(name, value)

    def remove(self, name: str) -> None:
        self._store.delete(name)
