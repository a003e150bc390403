"""
Heap-Cache: In-Process Key-Value Cache

A thread-safe, in-memory key-value cache with per-entry expiration
policies, compute-and-cache helpers and a small service container glue.
"""

from .cache.policy import FOREVER
from .cache.store import HeapStore, NonNumericValueError

__version__ = "1.0.0"

__all__ = ["FOREVER", "HeapStore", "NonNumericValueError"]
