"""
Unit tests for TTLStore.

Run: pytest tests/unit/test_ttl_store.py -v
"""

from datetime import datetime, timedelta
from unittest.mock import patch

from services.ttl_store import TTLStore


class TestTTLStore:
    """Tests for TTLStore"""

    def test_put_generates_key(self):
        store = TTLStore(ttl_minutes=5)

        key = store.put({"a": 1})

        assert store.get(key) == {"a": 1}
        assert len(store) == 1

    def test_put_with_explicit_key(self):
        store = TTLStore(ttl_minutes=5)

        assert store.put("value", key="k1") == "k1"
        assert store.get("k1") == "value"

    def test_unknown_key_is_none(self):
        assert TTLStore(ttl_minutes=5).get("missing") is None

    def test_expired_entry_is_gone(self):
        store = TTLStore(ttl_minutes=5)
        key = store.put("value")
        later = datetime.now() + timedelta(minutes=6)

        with patch("services.ttl_store.datetime") as mock_datetime:
            mock_datetime.now.return_value = later
            assert store.get(key) is None

        assert len(store) == 0

    def test_expires_at(self):
        store = TTLStore(ttl_minutes=10)
        before = datetime.now()

        key = store.put("value")

        expires_at = store.expires_at(key)
        assert before + timedelta(minutes=10) <= expires_at
        assert store.expires_at("missing") is None

    def test_delete_and_clear(self):
        store = TTLStore(ttl_minutes=5)
        first = store.put(1)
        store.put(2)

        store.delete(first)
        store.delete("missing")

        assert store.values() == [2]
        store.clear()
        assert len(store) == 0
