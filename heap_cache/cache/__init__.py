"""Cache module for Heap-Cache."""

from .policy import FOREVER, DurationMinutes, Forever, policy_for
from .store import HeapStore, NonNumericValueError

__all__ = [
    "FOREVER",
    "DurationMinutes",
    "Forever",
    "HeapStore",
    "NonNumericValueError",
    "policy_for",
]
