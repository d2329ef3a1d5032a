"""
Tests for typed state records.
"""
import pytest

from crosstalk_sdk.exceptions import NotFoundError, StorageError
from crosstalk_sdk.models import Config, NameRecord
from crosstalk_sdk.state import ContractState, Item, Map, _prefix_end


class TestItem:

    def test_missing(self, storage):
        item = Item(storage, "config", Config)
        assert item.may_load() is None
        with pytest.raises(NotFoundError):
            item.load()

    def test_save_and_load(self, storage):
        item = Item(storage, "nonce", int)
        item.save(7)
        assert item.load() == 7

    def test_bytes_are_stored_raw(self, storage):
        item = Item(storage, "request", bytes)
        item.save(b"\x00\xff")
        assert storage.get(b"request") == b"\x00\xff"
        assert item.load() == b"\x00\xff"

    def test_corrupt_value(self, storage):
        storage.set(b"config", b"not json")
        with pytest.raises(StorageError):
            Item(storage, "config", Config).load()


class TestMap:
    """Tests for namespaced records."""

    def test_keys_are_namespaced(self, storage):
        records = Map(storage, "name_resolver", NameRecord)
        records.save(b"alice", NameRecord(owner="router1alice"))
        assert storage.get(b"\x00\x0dname_resolveralice") is not None

    def test_has_and_remove(self, storage):
        records = Map(storage, "names", NameRecord)
        assert not records.has(b"alice")
        records.save(b"alice", NameRecord(owner="o"))
        assert records.has(b"alice")
        records.remove(b"alice")
        assert records.may_load(b"alice") is None

    def test_load_missing(self, storage):
        with pytest.raises(NotFoundError):
            Map(storage, "names", NameRecord).load(b"nobody")

    def test_range_stays_inside_namespace(self, storage):
        names = Map(storage, "names", NameRecord)
        other = Map(storage, "namesx", NameRecord)
        names.save(b"bob", NameRecord(owner="2"))
        names.save(b"alice", NameRecord(owner="1"))
        other.save(b"carol", NameRecord(owner="3"))
        storage.set(b"names", b"singleton")

        assert [(k, v.owner) for k, v in names.range()] == [(b"alice", "1"), (b"bob", "2")]
        assert [k for k, _ in other.range()] == [b"carol"]

    def test_range_raises_on_corrupt_value(self, storage):
        names = Map(storage, "names", NameRecord)
        names.save(b"alice", NameRecord(owner="1"))
        storage.set(b"\x00\x05namesbob", b"{broken")
        with pytest.raises(StorageError):
            list(names.range())


class TestPrefixEnd:

    def test_increments_last_byte(self):
        assert _prefix_end(b"ab") == b"ac"

    def test_carries_over_ff(self):
        assert _prefix_end(b"a\xff") == b"b"

    def test_all_ff_is_unbounded(self):
        assert _prefix_end(b"\xff\xff") is None


class TestContractState:

    def test_pending_starts_empty(self, storage):
        assert ContractState(storage).load_pending().requests == []

    def test_append_pending_keeps_order(self, storage):
        state = ContractState(storage)
        state.append_pending(5)
        state.append_pending(2)
        state.append_pending(9)
        assert ContractState(storage).load_pending().requests == [5, 2, 9]

    def test_config_round_trip(self, state):
        assert state.config.load() == Config()
