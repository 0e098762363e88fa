"""Session-scoped key/value storage for checkout snapshots.

Storage is scoped per browsing session: ``scoped(session_key)`` returns a
view whose keys cannot collide with another session's. Nothing is shared
across devices.
"""

import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from checkout.config import get_settings
from checkout.errors import PersistenceError


class SessionStorage(ABC):
    """String values stored under string keys."""

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None: ...

    def scoped(self, session_key: str) -> "ScopedStorage":
        return ScopedStorage(self, session_key)


class ScopedStorage(SessionStorage):
    def __init__(self, backend: SessionStorage, session_key: str) -> None:
        self.backend = backend
        self.session_key = session_key

    def _key(self, key: str) -> str:
        return f"{self.session_key}:{key}"

    def get(self, key: str) -> str | None:
        return self.backend.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self.backend.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self.backend.remove(self._key(key))


class MemorySessionStorage(SessionStorage):
    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


class FileSessionStorage(SessionStorage):
    """One file per key under ``directory``.

    Values are written to a temporary file in the same directory and renamed
    into place, so readers see either the old snapshot or the new one.
    """

    def __init__(self, directory: str | os.PathLike) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise PersistenceError(f"Stored value for {key!r} is not UTF-8 text") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


_current_storage: SessionStorage | None = None


def get_storage() -> SessionStorage:
    """Return the active storage backend, file-backed when a directory is configured."""
    global _current_storage
    if _current_storage is None:
        settings = get_settings()
        _current_storage = FileSessionStorage(settings.storage_dir) if settings.storage_dir else MemorySessionStorage()
    return _current_storage


def set_storage(storage: SessionStorage) -> None:
    global _current_storage
    _current_storage = storage


def reset_storage() -> None:
    global _current_storage
    _current_storage = None
