"""
Tests for expiration policies

These tests verify the expiration rule and lazy eviction:
- DurationMinutes(n) entries expire once more than n * 60 seconds pass
- FOREVER entries never expire
- Expired entries are removed by the read that finds them
- increment/decrement restart the entry's lifetime

Time is driven by a fake clock, so nothing here sleeps.

Run with: python -m pytest tests/test_ttl.py -v
"""

from datetime import timedelta

import pytest

from heap_cache import FOREVER
from heap_cache.cache.policy import DurationMinutes, Forever, policy_for
from heap_cache.cache.store import HeapStore


class TestPolicy:
    """Test the policy objects directly."""

    def test_policy_for_minutes(self):
        """Test numbers become DurationMinutes."""
        assert policy_for(5) == DurationMinutes(5)
        assert policy_for(0.5) == DurationMinutes(0.5)

    def test_policy_for_timedelta(self):
        """Test timedeltas are converted to minutes."""
        assert policy_for(timedelta(minutes=2, seconds=30)) == DurationMinutes(2.5)

    def test_policy_for_forever(self):
        """Test the FOREVER sentinel is passed through."""
        assert policy_for(FOREVER) is FOREVER
        assert isinstance(FOREVER, Forever)

    def test_duration_boundary(self):
        """Test expiry is strictly after n * 60 seconds."""
        policy = DurationMinutes(1)

        assert policy.is_expired(created_at=0, now=60) is False
        assert policy.is_expired(created_at=0, now=60.001) is True

    def test_huge_integer_minutes(self, store: HeapStore, clock):
        """Test whole-minute ttls too large for a float are accepted."""
        store.put("key", "value", 10 ** 400)
        clock.advance(minutes=10 ** 6)

        assert store.get("key") == "value"
        assert DurationMinutes(10 ** 400).is_expired(created_at=0, now=10 ** 12) is False

    def test_forever_never_expires(self):
        """Test Forever ignores elapsed time."""
        assert Forever().is_expired(created_at=0, now=10 ** 12) is False


class TestTTLExpiry:
    """Test keys expire after their ttl."""

    def test_key_accessible_before_expiry(self, store: HeapStore, clock):
        """Test key is readable right up to the boundary."""
        store.put("key", "value", 1)

        clock.advance(seconds=60)

        assert store.get("key") == "value"
        assert store.has("key") is True

    def test_key_expires_after_ttl(self, store: HeapStore, clock):
        """Test get returns the default once the ttl has elapsed."""
        store.put("key", "value", 1)

        clock.advance(seconds=61)

        assert store.get("key") is None
        assert store.get("key", "default") == "default"

    def test_fractional_minutes_expire(self, store: HeapStore, clock):
        """Test float durations expire like whole-minute ones."""
        store.put("key", "value", 0.5)

        clock.advance(seconds=29)
        assert store.get("key") == "value"

        clock.advance(seconds=2)
        assert store.get("key") is None

    def test_timedelta_ttl_expires(self, store: HeapStore, clock):
        """Test a timedelta ttl expires after its duration."""
        store.put("key", "value", timedelta(seconds=90))

        clock.advance(seconds=91)

        assert store.has("key") is False

    def test_zero_ttl_expires_once_time_passes(self, store: HeapStore, clock):
        """Test ttl=0 is readable at the same instant only."""
        store.put("key", "value", 0)
        assert store.get("key") == "value"

        clock.advance(seconds=0.001)
        assert store.get("key") is None

    def test_forever_never_expires(self, store: HeapStore, clock):
        """Test forever entries survive any amount of time."""
        store.forever("key", "value")

        clock.advance(minutes=60 * 24 * 365 * 100)

        assert store.get("key") == "value"
        assert store.has("key") is True

    def test_put_resets_created_at(self, store: HeapStore, clock):
        """Test overwriting a key restarts its lifetime."""
        store.put("key", "value1", 1)
        clock.advance(seconds=50)
        store.put("key", "value2", 1)
        clock.advance(seconds=50)

        assert store.get("key") == "value2"

    def test_put_can_switch_to_forever(self, store: HeapStore, clock):
        """Test overwriting with FOREVER removes expiration."""
        store.put("key", "value1", 1)
        store.put("key", "value2", FOREVER)

        clock.advance(minutes=10)

        assert store.get("key") == "value2"

    def test_different_ttls(self, store: HeapStore, clock):
        """Test multiple keys with different ttls."""
        store.put("key1", "value1", 1)
        store.put("key2", "value2", 3)
        store.forever("key3", "value3")

        clock.advance(minutes=2)

        assert store.get("key1") is None
        assert store.get("key2") == "value2"
        assert store.get("key3") == "value3"

        clock.advance(minutes=2)

        assert store.get("key2") is None
        assert store.get("key3") == "value3"


class TestTTLLazyCleanup:
    """Test lazy eviction of expired entries."""

    def test_expired_entry_stays_until_read(self, store: HeapStore, clock):
        """Test nothing is removed without an access."""
        store.put("key", "value", 1)
        clock.advance(minutes=2)

        assert store.size() == 1

    def test_get_removes_expired_key(self, store: HeapStore, clock):
        """Test get() removes the expired entry from internal storage."""
        store.put("key", "value", 1)
        clock.advance(minutes=2)

        assert store.get("key") is None
        assert "key" not in store._store

    def test_has_removes_expired_key(self, store: HeapStore, clock):
        """Test has() treats expired entries as absent and removes them."""
        store.put("key", "value", 1)
        clock.advance(minutes=2)

        assert store.has("key") is False
        assert "key" not in store._store

    def test_pull_expired_returns_default(self, store: HeapStore, clock):
        """Test pull() on an expired key returns the default."""
        store.put("key", "value", 1)
        clock.advance(minutes=2)

        assert store.pull("key", "default") == "default"
        assert store.size() == 0

    def test_add_replaces_expired_key(self, store: HeapStore, clock):
        """Test add() writes over an expired entry."""
        store.put("key", "stale", 1)
        clock.advance(minutes=2)

        assert store.add("key", "fresh", 1) is True
        assert store.get("key") == "fresh"

    def test_many_evicts_expired(self, store: HeapStore, clock):
        """Test many() reports expired keys with the default."""
        store.put("short", 1, 1)
        store.put("long", 2, 10)
        clock.advance(minutes=5)

        assert store.many(["short", "long"]) == {"short": None, "long": 2}
        assert store.size() == 1


class TestTTLActiveCleanup:
    """Test explicit cleanup and stats."""

    def test_cleanup_expired_removes_keys(self, store: HeapStore, clock):
        """Test cleanup_expired() removes all expired keys."""
        store.put("key1", "value1", 1)
        store.put("key2", "value2", 1)
        store.forever("key3", "value3")

        clock.advance(minutes=2)

        assert store.cleanup_expired() == 2
        assert store.size() == 1
        assert store.get("key3") == "value3"

    def test_cleanup_expired_empty_store(self, store: HeapStore):
        """Test cleanup on empty store."""
        assert store.cleanup_expired() == 0

    def test_get_stats_shows_expired(self, store: HeapStore, clock):
        """Test get_stats counts expired but not yet evicted entries."""
        store.put("key1", "value1", 1)
        store.forever("key2", "value2")

        clock.advance(minutes=2)

        stats = store.get_stats()

        assert stats["total_keys"] == 2
        assert stats["expired_keys"] == 1
        assert stats["active_keys"] == 1
        assert stats["in_flight"] == 0


class TestTTLCounters:
    """Test how increment/decrement interact with expiration."""

    def test_increment_restarts_lifetime(self, store: HeapStore, clock):
        """Test incrementing re-bases the same ttl from the increment time."""
        store.put("hits", 10, 10)
        clock.advance(minutes=8)

        assert store.increment("hits") == 11

        # Ten minutes after the original write the key is still alive
        clock.advance(minutes=8)
        assert store.get("hits") == 11

        # ...but ten minutes after the increment it is gone
        clock.advance(minutes=2, seconds=1)
        assert store.get("hits") is None

    def test_increment_keeps_forever(self, store: HeapStore, clock):
        """Test a forever counter stays forever after incrementing."""
        store.forever("hits", 1)
        store.increment("hits")

        clock.advance(minutes=10 ** 6)

        assert store.get("hits") == 2

    def test_increment_expired_key(self, store: HeapStore, clock):
        """Test incrementing an expired key fails and writes nothing."""
        store.put("hits", 10, 1)
        clock.advance(minutes=2)

        assert store.increment("hits") is False
        assert store.size() == 0

    @pytest.mark.parametrize("ttl", [1, 1.5, timedelta(minutes=3)])
    def test_decrement_keeps_policy(self, store: HeapStore, clock, ttl):
        """Test decrement re-stores the entry with the same policy object."""
        store.put("stock", 5, ttl)
        store.decrement("stock")

        assert store._store["stock"].policy == policy_for(ttl)
