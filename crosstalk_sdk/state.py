"""
Typed state records on top of a raw key-value store.
"""
import logging
from typing import Generic, Iterator, Optional, Tuple, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from .exceptions import NotFoundError, StorageError
from .models import Config, NameRecord, PendingRequests
from .storage import Storage

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Defaults reported by the state dump for slots that were never written
EMPTY_SNAPSHOT = b"empty"
DEFAULT_NONCE = 1_000_000_000_000_000_000


def _prefix_end(prefix: bytes) -> Optional[bytes]:
    """Smallest key greater than every key starting with ``prefix``."""
    stripped = prefix.rstrip(b"\xff")
    if not stripped:
        return None
    return stripped[:-1] + bytes([stripped[-1] + 1])


class _Codec(Generic[T]):
    """Serializes values as JSON, except raw bytes which are stored as-is."""

    def __init__(self, value_type: Type[T]):
        self.value_type = value_type
        self._adapter = None if value_type is bytes else TypeAdapter(value_type)

    def dumps(self, value: T) -> bytes:
        if self._adapter is None:
            return bytes(value)
        return self._adapter.dump_json(value)

    def loads(self, raw: bytes, key: str) -> T:
        if self._adapter is None:
            return raw
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Corrupt value under {key}: {e}") from e


class Item(Generic[T]):
    """A singleton record stored under a fixed key."""

    def __init__(self, storage: Storage, key: str, value_type: Type[T]):
        self.storage = storage
        self.key = key
        self._codec = _Codec(value_type)

    def may_load(self) -> Optional[T]:
        raw = self.storage.get(self.key.encode("utf-8"))
        if raw is None:
            return None
        return self._codec.loads(raw, self.key)

    def load(self) -> T:
        """
        Load the record.

        Raises:
            NotFoundError: If the record was never saved
            StorageError: If the stored value is corrupt
        """
        value = self.may_load()
        if value is None:
            raise NotFoundError(self.key)
        return value

    def save(self, value: T) -> None:
        self.storage.set(self.key.encode("utf-8"), self._codec.dumps(value))

    def remove(self) -> None:
        self.storage.remove(self.key.encode("utf-8"))


class Map(Generic[T]):
    """
    Records keyed by bytes under a namespace.

    Keys are prefixed with the 2-byte big-endian namespace length and the
    namespace itself, so namespaces never collide with each other or with
    singleton keys.
    """

    def __init__(self, storage: Storage, namespace: str, value_type: Type[T]):
        self.storage = storage
        self.namespace = namespace
        ns = namespace.encode("utf-8")
        self._prefix = len(ns).to_bytes(2, "big") + ns
        self._codec = _Codec(value_type)

    def _full_key(self, key: bytes) -> bytes:
        return self._prefix + key

    def may_load(self, key: bytes) -> Optional[T]:
        raw = self.storage.get(self._full_key(key))
        if raw is None:
            return None
        return self._codec.loads(raw, f"{self.namespace}/{key!r}")

    def load(self, key: bytes) -> T:
        value = self.may_load(key)
        if value is None:
            raise NotFoundError(f"{self.namespace}/{key!r}")
        return value

    def has(self, key: bytes) -> bool:
        return self.storage.get(self._full_key(key)) is not None

    def save(self, key: bytes, value: T) -> None:
        self.storage.set(self._full_key(key), self._codec.dumps(value))

    def remove(self, key: bytes) -> None:
        self.storage.remove(self._full_key(key))

    def range_raw(self) -> Iterator[Tuple[bytes, bytes]]:
        """Iterate over (key, raw value) pairs in ascending key order."""
        for full_key, raw in self.storage.range(self._prefix, _prefix_end(self._prefix)):
            yield full_key[len(self._prefix):], raw

    def decode(self, key: bytes, raw: bytes) -> T:
        return self._codec.loads(raw, f"{self.namespace}/{key!r}")

    def range(self) -> Iterator[Tuple[bytes, T]]:
        """
        Iterate over decoded (key, value) pairs in ascending key order.

        Raises:
            StorageError: On the first corrupt value
        """
        for key, raw in self.range_raw():
            yield key, self.decode(key, raw)


class ContractState:
    """
    Every state slot of the contract, bound to one store.

    An instance is built per invocation over the invocation's storage view
    and passed to each entry point.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self.config: Item[Config] = Item(storage, "config", Config)
        self.name_resolver: Map[NameRecord] = Map(storage, "name_resolver", NameRecord)
        # last request / last result audit snapshots
        self.request: Item[bytes] = Item(storage, "request", bytes)
        self.result: Item[bytes] = Item(storage, "result", bytes)
        self.nonce: Item[int] = Item(storage, "nonce", int)
        self.pending: Item[PendingRequests] = Item(storage, "pending", PendingRequests)

    def load_pending(self) -> PendingRequests:
        """Load the pending ledger, empty when nothing was accepted yet."""
        return self.pending.may_load() or PendingRequests()

    def append_pending(self, request_identifier: int) -> PendingRequests:
        ledger = self.load_pending()
        updated = PendingRequests(requests=ledger.requests + [request_identifier])
        self.pending.save(updated)
        return updated
