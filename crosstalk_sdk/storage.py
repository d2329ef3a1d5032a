"""
Key-value storage backends for contract state.

Keys and values are raw bytes. Iteration is always in ascending key order.
"""
import base64
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import portalocker

from .exceptions import ReadOnlyStorageError

logger = logging.getLogger(__name__)


def _in_range(key: bytes, start: Optional[bytes], end: Optional[bytes]) -> bool:
    if start is not None and key < start:
        return False
    if end is not None and key >= end:
        return False
    return True


class Storage(ABC):
    """
    Abstract key-value store.

    All implementations must iterate in ascending key order so that maps
    built on top of them range deterministically.
    """

    @abstractmethod
    def get(self, key: bytes) -> Optional[bytes]:
        """Return the value stored under ``key`` or None."""
        pass

    @abstractmethod
    def set(self, key: bytes, value: bytes) -> None:
        pass

    @abstractmethod
    def remove(self, key: bytes) -> None:
        pass

    @abstractmethod
    def range(
        self,
        start: Optional[bytes] = None,
        end: Optional[bytes] = None
    ) -> Iterator[Tuple[bytes, bytes]]:
        """
        Iterate over entries with ``start <= key < end``.

        Args:
            start: Inclusive lower bound, unbounded when None
            end: Exclusive upper bound, unbounded when None
        """
        pass

    def apply(self, changes: Mapping[bytes, Optional[bytes]]) -> None:
        """
        Apply a batch of writes, where a None value removes the key.

        Backends that persist outside the process override this so the
        whole batch lands at once.
        """
        for key, value in changes.items():
            if value is None:
                self.remove(key)
            else:
                self.set(key, value)


class MemoryStorage(Storage):
    """In-memory store, used by tests and short-lived hosts."""

    def __init__(self):
        self._data: Dict[bytes, bytes] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        self._data[bytes(key)] = bytes(value)

    def remove(self, key: bytes) -> None:
        self._data.pop(key, None)

    def range(
        self,
        start: Optional[bytes] = None,
        end: Optional[bytes] = None
    ) -> Iterator[Tuple[bytes, bytes]]:
        for key in sorted(self._data):
            if _in_range(key, start, end):
                yield key, self._data[key]


class JsonFileStorage(Storage):
    """Process-safe store persisted as a JSON file"""

    def __init__(self, store_path: Optional[str] = None):
        """
        Initialize the file store.

        Args:
            store_path: Optional custom path for the state file
        """
        # Use CROSSTALK_STATE_PATH env var or default to ~/.crosstalk/state.json
        if store_path:
            self.store_path = Path(store_path)
        else:
            default_path = os.environ.get(
                "CROSSTALK_STATE_PATH",
                os.path.expanduser("~/.crosstalk/state.json")
            )
            self.store_path = Path(default_path)

        self._ensure_file()

    def _ensure_file(self):
        """Ensure the state file and its directory exist"""
        directory = self.store_path.parent
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)

        if not self.store_path.exists():
            with open(self.store_path, 'w') as f:
                json.dump({"entries": {}}, f)

    def _get_lock_path(self) -> str:
        """Get path for the lock file"""
        return str(self.store_path) + '.lock'

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.store_path, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, FileNotFoundError):
            # Treat an empty or missing file as an empty store
            return {"entries": {}}

    def _dump(self, data: Dict[str, Any]) -> None:
        # Replace the file in one step so a failed write leaves the old state
        tmp_path = str(self.store_path) + '.tmp'
        with open(tmp_path, 'w') as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.store_path)

    def get(self, key: bytes) -> Optional[bytes]:
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            value = self._load()["entries"].get(key.hex())
        return base64.b64decode(value) if value is not None else None

    def set(self, key: bytes, value: bytes) -> None:
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            data = self._load()
            data["entries"][key.hex()] = base64.b64encode(value).decode("ascii")
            self._dump(data)

    def remove(self, key: bytes) -> None:
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            data = self._load()
            if data["entries"].pop(key.hex(), None) is not None:
                self._dump(data)

    def apply(self, changes: Mapping[bytes, Optional[bytes]]) -> None:
        """Apply every change under one lock with a single file write."""
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            data = self._load()
            entries = data["entries"]
            for key, value in changes.items():
                if value is None:
                    entries.pop(key.hex(), None)
                else:
                    entries[key.hex()] = base64.b64encode(value).decode("ascii")
            self._dump(data)

    def range(
        self,
        start: Optional[bytes] = None,
        end: Optional[bytes] = None
    ) -> Iterator[Tuple[bytes, bytes]]:
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            entries = self._load()["entries"]
        items = sorted((bytes.fromhex(k), v) for k, v in entries.items())
        for key, value in items:
            if _in_range(key, start, end):
                yield key, base64.b64decode(value)


class StorageTransaction(Storage):
    """
    Write overlay over another store.

    Writes stay in the overlay until ``commit``. Used as a context manager it
    commits when the block finishes and discards everything when it raises.
    """

    def __init__(self, backing: Storage):
        self.backing = backing
        # None marks a pending delete
        self._pending: Dict[bytes, Optional[bytes]] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        if key in self._pending:
            return self._pending[key]
        return self.backing.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        self._pending[bytes(key)] = bytes(value)

    def remove(self, key: bytes) -> None:
        self._pending[bytes(key)] = None

    def range(
        self,
        start: Optional[bytes] = None,
        end: Optional[bytes] = None
    ) -> Iterator[Tuple[bytes, bytes]]:
        merged = dict(self.backing.range(start, end))
        for key, value in self._pending.items():
            if not _in_range(key, start, end):
                continue
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
        for key in sorted(merged):
            yield key, merged[key]

    def commit(self) -> None:
        self.backing.apply(self._pending)
        logger.debug(f"Committed {len(self._pending)} storage writes")
        self._pending.clear()

    def discard(self) -> None:
        if self._pending:
            logger.debug(f"Discarding {len(self._pending)} storage writes")
        self._pending.clear()

    def __enter__(self) -> "StorageTransaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.discard()


class ReadOnlyStorage(Storage):
    """View of another store that rejects writes."""

    def __init__(self, backing: Storage):
        self.backing = backing

    def get(self, key: bytes) -> Optional[bytes]:
        return self.backing.get(key)

    def set(self, key: bytes, value: bytes) -> None:
        raise ReadOnlyStorageError("Cannot write to storage during a query")

    def remove(self, key: bytes) -> None:
        raise ReadOnlyStorageError("Cannot write to storage during a query")

    def range(
        self,
        start: Optional[bytes] = None,
        end: Optional[bytes] = None
    ) -> Iterator[Tuple[bytes, bytes]]:
        return self.backing.range(start, end)
