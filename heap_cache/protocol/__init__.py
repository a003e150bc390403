"""Shell command module for Heap-Cache."""

from .commands import Command, CommandType, Response, ResponseStatus
from .parser import ProtocolParser

__all__ = ["Command", "CommandType", "Response", "ResponseStatus", "ProtocolParser"]
