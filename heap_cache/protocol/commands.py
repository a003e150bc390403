"""
Shell Command and Response Definitions

This module defines the data structures for shell commands and responses.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional


class CommandType(Enum):
    """Enumeration of supported command types."""
    PUT = auto()
    ADD = auto()
    FOREVER = auto()
    GET = auto()
    PULL = auto()
    HAS = auto()
    INCR = auto()
    DECR = auto()
    FORGET = auto()
    FLUSH = auto()
    PREFIX = auto()
    STATS = auto()
    QUIT = auto()
    UNKNOWN = auto()


# Commands that operate on a single key
KEYED_COMMANDS = frozenset({
    CommandType.PUT,
    CommandType.ADD,
    CommandType.FOREVER,
    CommandType.GET,
    CommandType.PULL,
    CommandType.HAS,
    CommandType.INCR,
    CommandType.DECR,
    CommandType.FORGET,
})


class ResponseStatus(Enum):
    """Enumeration of response statuses."""
    OK = "OK"
    ERROR = "ERROR"


@dataclass
class Command:
    """
    Represents a parsed shell command.

    Attributes:
        type: The type of command
        key: The key for the operation (empty for FLUSH, PREFIX, STATS, QUIT)
        value: The value for PUT/ADD/FOREVER, or the delta for INCR/DECR
        ttl: Minutes, FOREVER, or None to use the configured default
        raw: The original raw command string
    """
    type: CommandType
    key: str = ""
    value: Any = None
    ttl: Any = None
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the command is valid for its type."""
        if self.type == CommandType.UNKNOWN:
            return False
        if self.type in KEYED_COMMANDS:
            return bool(self.key)
        return True


@dataclass
class Response:
    """
    Represents a shell response.

    Attributes:
        status: OK or ERROR
        message: Response message or error description
        value: The value returned (for GET/PULL/INCR/DECR)
    """
    status: ResponseStatus
    message: str = ""
    value: Optional[Any] = None

    @classmethod
    def ok(cls, message: str = "", value: Optional[Any] = None) -> "Response":
        """Create a successful response."""
        return cls(status=ResponseStatus.OK, message=message, value=value)

    @classmethod
    def error(cls, message: str) -> "Response":
        """Create an error response."""
        return cls(status=ResponseStatus.ERROR, message=message)

    @classmethod
    def stored(cls) -> "Response":
        return cls.ok(message="stored")

    @classmethod
    def key_not_found(cls) -> "Response":
        return cls.error(message="key not found")

    @classmethod
    def has_response(cls, present: bool) -> "Response":
        return cls.ok(message="1" if present else "0")

    @classmethod
    def value_response(cls, value: Any) -> "Response":
        return cls.ok(value=value)
