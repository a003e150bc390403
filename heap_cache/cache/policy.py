"""
Expiration Policy Module

Every cache entry carries one of two policies:

- Forever: the entry never expires
- DurationMinutes(n): the entry expires n minutes after it was written

An entry with DurationMinutes(n) is expired once more than n * 60 seconds
have elapsed since it was created. Integer and fractional minute counts
behave the same way; only Forever is exempt from expiration.
"""

import math
import numbers
from dataclasses import dataclass
from datetime import timedelta
from typing import Union


@dataclass(frozen=True)
class Forever:
    """Policy for entries that never expire."""

    def is_expired(self, created_at: float, now: float) -> bool:
        return False


@dataclass(frozen=True)
class DurationMinutes:
    """
    Policy for entries that expire a fixed number of minutes after creation.

    Attributes:
        minutes: Lifetime in minutes (finite, non-negative)
    """

    minutes: float

    def __post_init__(self):
        """Reject durations that can never be compared sensibly."""
        if isinstance(self.minutes, bool) or not isinstance(self.minutes, numbers.Real):
            raise ValueError(f"ttl minutes must be a number, got {self.minutes!r}")
        # Integral minutes are always finite, and may be too large for float
        finite = isinstance(self.minutes, numbers.Integral) or math.isfinite(self.minutes)
        if not finite or self.minutes < 0:
            raise ValueError(f"ttl minutes must be finite and non-negative, got {self.minutes!r}")

    @property
    def seconds(self) -> float:
        return self.minutes * 60

    def is_expired(self, created_at: float, now: float) -> bool:
        return now - created_at > self.seconds


Policy = Union[Forever, DurationMinutes]

# Sentinel accepted wherever a ttl is expected
FOREVER = Forever()


def policy_for(ttl) -> Policy:
    """
    Normalise a caller-supplied ttl into a policy.

    Args:
        ttl: Minutes (int or float), a timedelta, FOREVER, or an existing policy

    Returns:
        The matching Forever or DurationMinutes policy

    Raises:
        ValueError: If ttl is negative, non-finite or of an unsupported type
    """
    if isinstance(ttl, (Forever, DurationMinutes)):
        return ttl
    if isinstance(ttl, timedelta):
        return DurationMinutes(ttl.total_seconds() / 60)
    return DurationMinutes(ttl)
