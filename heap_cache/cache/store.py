"""
Heap Store Module

This module implements the in-process key-value cache.

Each entry keeps its value, its expiration policy and the time it was
written. Expired entries are removed lazily: only a read that finds an
expired entry deletes it, and no background task ever sweeps the table.
"""

import copy
import logging
import numbers
import operator
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from ..config.settings import Settings, settings as default_settings
from .policy import FOREVER, Policy, policy_for

logger = logging.getLogger(__name__)

_MISSING = object()


class NonNumericValueError(TypeError):
    """Raised when increment/decrement hits a value that is not a number."""


@dataclass
class _Entry:
    value: Any
    policy: Policy
    created_at: float


class _InFlight:
    """Marker for a remember() computation that is still running."""

    def __init__(self):
        self.owner = threading.get_ident()
        self.done = threading.Event()
        self.value: Any = None
        self.error: Optional[BaseException] = None


class HeapStore:
    """
    In-memory key-value cache with per-entry expiration policies.

    All operations are synchronous and serialized by a single lock guarding
    the whole table. remember() runs the caller's computation outside that
    lock, but at most once per key: concurrent callers racing on the same
    missing key wait for the running computation and share its result.

    Internal Storage:
        key -> _Entry(value, policy, created_at)
        created_at comes from the store's clock (epoch seconds)

    Usage:
        store = HeapStore()
        store.put("user:1", {"name": "alice"}, ttl=10)   # 10 minutes
        store.forever("config", {...})
        report = store.remember("report", 5, build_report)

    Attributes:
        settings: Settings the advisory prefix is read from
    """

    def __init__(self, settings: Settings = None, clock: Callable[[], float] = None):
        """
        Initialize an empty store.

        Args:
            settings: Configuration source (default: module-level settings)
            clock: Callable returning the current time in seconds (default: time.time)
        """
        self.settings = settings if settings is not None else default_settings
        self._clock = clock if clock is not None else time.time

        self._store: Dict[str, _Entry] = {}
        self._in_flight: Dict[str, _InFlight] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Internal helpers (caller must hold self._lock)
    # ------------------------------------------------------------------

    def _live_entry(self, key: str) -> Optional[_Entry]:
        """Return the entry for key, evicting and returning None if expired."""
        entry = self._store.get(key)
        if entry is None:
            return None

        if entry.policy.is_expired(entry.created_at, self._clock()):
            # Lazy expiration
            del self._store[key]
            logger.debug(f"Evicted expired key '{key}'")
            return None

        return entry

    def _write(self, key: str, value: Any, policy: Policy) -> None:
        self._store[key] = _Entry(value=value, policy=policy, created_at=self._clock())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def has(self, key: str) -> bool:
        """
        Check whether key holds a value that has not expired.

        An expired entry is removed and reported as absent.
        """
        with self._lock:
            return self._live_entry(key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve the value stored under key.

        Args:
            key: The key to look up
            default: Returned when the key is missing or expired

        Returns:
            The stored value, or default
        """
        with self._lock:
            entry = self._live_entry(key)
            return default if entry is None else entry.value

    def pull(self, key: str, default: Any = None) -> Any:
        """Retrieve the value stored under key and delete the key."""
        with self._lock:
            entry = self._live_entry(key)
            self._store.pop(key, None)
            return default if entry is None else entry.value

    def many(self, keys: Iterable[str], default: Any = None) -> Dict[str, Any]:
        """
        Retrieve several keys at once.

        Every requested key appears in the result; missing or expired keys
        map to default.
        """
        return {key: self.get(key, default) for key in keys}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(self, key: str, value: Any, ttl) -> None:
        """
        Insert or overwrite a key.

        Args:
            key: The key to store
            value: Any value
            ttl: Lifetime in minutes, a timedelta, or FOREVER

        Raises:
            ValueError: If ttl is negative, non-finite or not a duration
        """
        policy = policy_for(ttl)
        with self._lock:
            self._write(key, value, policy)

    def put_many(self, values: Mapping[str, Any], ttl) -> None:
        """Store every (key, value) pair of values with the same ttl."""
        policy = policy_for(ttl)
        for key, value in values.items():
            self.put(key, value, policy)

    def add(self, key: str, value: Any, ttl) -> bool:
        """
        Store a key only if it is not already present.

        Expired entries count as absent and are replaced.

        Returns:
            True if the value was stored, False if the key already existed
        """
        policy = policy_for(ttl)
        with self._lock:
            if self._live_entry(key) is not None:
                return False
            self._write(key, value, policy)
            return True

    def forever(self, key: str, value: Any) -> None:
        """Store a key that never expires."""
        self.put(key, value, FOREVER)

    def increment(self, key: str, delta=1):
        """
        Add delta to a numeric value.

        The entry keeps its policy, but its clock restarts: a 10 minute entry
        incremented after 8 minutes is valid for another 10 minutes.

        Returns:
            The new value, or False if the key is missing or expired

        Raises:
            NonNumericValueError: If the stored value is not a number
        """
        return self._adjust(key, delta, operator.add)

    def decrement(self, key: str, delta=1):
        """Subtract delta from a numeric value. See increment()."""
        return self._adjust(key, delta, operator.sub)

    def _adjust(self, key: str, delta, op):
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return False

            current = entry.value
            if isinstance(current, bool) or not isinstance(current, numbers.Number):
                raise NonNumericValueError(
                    f"value stored under '{key}' is {type(current).__name__}, not a number"
                )

            new_value = op(current, delta)
            self._write(key, new_value, entry.policy)
            return new_value

    # ------------------------------------------------------------------
    # Compute-and-cache
    # ------------------------------------------------------------------

    def remember(self, key: str, ttl, compute: Callable[[], Any]) -> Any:
        """
        Return the cached value for key, computing and storing it if missing.

        compute() runs at most once per key at a time. Threads that ask for
        the same key while it is being computed wait and receive the same
        value, or the same exception if the computation fails. Failures are
        never cached.

        Args:
            key: The key to look up
            ttl: Lifetime for a freshly computed value
            compute: Zero-argument callable producing the value

        Returns:
            The cached or freshly computed value

        Raises:
            RuntimeError: If compute() itself calls remember() for the same key
        """
        policy = policy_for(ttl)

        with self._lock:
            entry = self._live_entry(key)
            if entry is not None:
                return entry.value

            flight = self._in_flight.get(key)
            owner = flight is None
            if owner:
                flight = _InFlight()
                self._in_flight[key] = flight
            elif flight.owner == threading.get_ident():
                # Waiting here would block on our own computation forever
                raise RuntimeError(f"recursive computation for key '{key}'")

        if not owner:
            flight.done.wait()
            if flight.error is not None:
                # Each waiter gets its own copy so tracebacks are not shared
                error = copy.copy(flight.error).with_traceback(None)
                raise error from flight.error
            return flight.value

        logger.debug(f"Computing value for key '{key}'")
        try:
            value = compute()
        except BaseException as exc:
            flight.error = exc
            logger.warning(f"Computation for key '{key}' failed: {exc!r}")
            raise
        else:
            with self._lock:
                self._write(key, value, policy)
            flight.value = value
            return value
        finally:
            with self._lock:
                self._in_flight.pop(key, None)
            flight.done.set()

    def remember_forever(self, key: str, compute: Callable[[], Any]) -> Any:
        """Same as remember(), storing the computed value forever."""
        return self.remember(key, FOREVER, compute)

    def sear(self, key: str, compute: Callable[[], Any]) -> Any:
        """Alias for remember_forever()."""
        return self.remember_forever(key, compute)

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def forget(self, key: str) -> bool:
        """Remove a key. Always returns True, even if the key was absent."""
        with self._lock:
            self._store.pop(key, None)
        return True

    def flush(self) -> bool:
        """Remove all keys. Always returns True."""
        with self._lock:
            count = len(self._store)
            self._store.clear()
        logger.debug(f"Flushed {count} keys")
        return True

    # ------------------------------------------------------------------
    # Configuration and inspection
    # ------------------------------------------------------------------

    def get_prefix(self) -> str:
        """Return the advisory ``cache.prefix`` configuration value."""
        return self.settings.get("cache.prefix", "")

    def size(self) -> int:
        """
        Get the number of stored entries.

        Note: This may include expired entries that no read has evicted yet.
        """
        with self._lock:
            return len(self._store)

    def cleanup_expired(self) -> int:
        """
        Remove every expired entry right now.

        Nothing calls this automatically; it is for owners that want to
        reclaim memory on their own schedule.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            to_delete = [
                k for k, e in self._store.items() if e.policy.is_expired(e.created_at, now)
            ]
            for key in to_delete:
                del self._store[key]
        return len(to_delete)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Entries currently held
            - expired_keys: Entries expired but not yet evicted
            - active_keys: Entries still valid
            - in_flight: remember() computations currently running
        """
        with self._lock:
            now = self._clock()
            total = len(self._store)
            expired = sum(
                1 for e in self._store.values() if e.policy.is_expired(e.created_at, now)
            )
            in_flight = len(self._in_flight)

        return {
            "total_keys": total,
            "expired_keys": expired,
            "active_keys": total - expired,
            "in_flight": in_flight,
        }
