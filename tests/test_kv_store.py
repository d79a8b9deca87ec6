# tests/test_kv_store.py
import pytest
from sqlalchemy.exc import OperationalError

from classvote.database.kv_store import KeyValueStore
from classvote.errors import StorageError


def test_get_missing_returns_none(store):
    assert store.get("voter:nobody") is None


def test_set_then_get(store):
    store.set("voter:abc", {"full_name": "Alice", "has_voted": False})
    assert store.get("voter:abc") == {"full_name": "Alice", "has_voted": False}


def test_set_overwrites(store):
    store.set("voter:abc", {"has_voted": False})
    store.set("voter:abc", {"has_voted": True})
    assert store.get("voter:abc") == {"has_voted": True}


def test_mutating_a_read_value_then_writing_it_persists(store):
    store.set("voter:abc", {"has_voted": False})
    voter = store.get("voter:abc")
    voter["has_voted"] = True
    # Nothing written yet
    assert store.get("voter:abc") == {"has_voted": False}
    store.set("voter:abc", voter)
    assert store.get("voter:abc") == {"has_voted": True}


def test_delete_is_idempotent(store):
    store.set("vote:1", {"x": 1})
    store.delete("vote:1")
    store.delete("vote:1")
    assert store.get("vote:1") is None


def test_scan_by_prefix_only_matches_prefix(store):
    store.set("vote:1", {"n": 1})
    store.set("vote:2", {"n": 2})
    store.set("voter:1", {"n": 3})
    store.set("candidate:1", {"n": 4})
    assert sorted(v["n"] for v in store.scan_by_prefix("vote:")) == [1, 2]
    assert sorted(k for k, _ in store.scan_items_by_prefix("voter:")) == ["voter:1"]


def test_scan_by_prefix_escapes_wildcards(store):
    store.set("a_b:1", {"n": 1})
    store.set("axb:1", {"n": 2})
    assert store.scan_by_prefix("a_b:") == [{"n": 1}]


class BrokenSession:
    """Session stand-in whose every query fails"""
    def __init__(self):
        self.rolled_back = 0

    def get(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    def query(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    def rollback(self):
        self.rolled_back += 1


def test_backend_failure_raises_storage_error():
    session = BrokenSession()
    broken = KeyValueStore(session=session)
    with pytest.raises(StorageError):
        broken.get("voter:abc")
    with pytest.raises(StorageError):
        broken.set("voter:abc", {})
    with pytest.raises(StorageError):
        broken.scan_by_prefix("vote:")
    assert session.rolled_back == 3
