"""
Shell Parser Module

This module handles parsing of shell command lines and formatting of responses.
"""

import math
import re
from typing import Optional

from .commands import Command, CommandType, Response
from ..cache.policy import FOREVER
from ..config.settings import settings

# No underscores, no non-ASCII digits, no inf/nan spellings
_INT_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)


class ProtocolParser:
    """
    Parser for the Heap-Cache shell language.

    Format:
        Request:  <COMMAND> [ARGS...]\n
        Response: <STATUS> [DATA]\n

    Commands:
        PUT <key> <value> [ttl|forever]  -> OK stored
        ADD <key> <value> [ttl|forever]  -> OK stored | OK exists
        FOREVER <key> <value>            -> OK stored
        GET <key>                        -> OK <value> | ERROR key not found
        PULL <key>                       -> OK <value> | ERROR key not found
        HAS <key>                        -> OK 1 | OK 0
        INCR <key> [delta]               -> OK <value> | ERROR key not found
        DECR <key> [delta]               -> OK <value> | ERROR key not found
        FORGET <key>                     -> OK forgotten
        FLUSH                            -> OK flushed
        PREFIX                           -> OK <prefix>
        STATS                            -> OK total=<n> active=<n> expired=<n>
        QUIT                             -> (session ends)

    Constraints:
        - Keys and values: max 256 characters, no whitespace
        - TTL: non-negative number of minutes, or "forever"
        - Values that look like numbers are stored as int or float
    """

    def __init__(self):
        """Initialize the parser with constraints from settings."""
        self.max_key_length = settings.MAX_KEY_LENGTH
        self.max_value_length = settings.MAX_VALUE_LENGTH

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw command line into a Command object.

        Returns:
            Command object representing the parsed request.
            Returns Command with type=UNKNOWN for invalid/malformed requests.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("PUT hits 10 5")
            >>> cmd.type == CommandType.PUT
            True
            >>> cmd.value
            10
            >>> cmd.ttl
            5
        """
        raw = data.strip()
        if not raw:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        parts = raw.split()
        command_name = parts[0].upper()

        if command_name in ("PUT", "ADD"):
            return self._parse_store(CommandType[command_name], parts, raw)
        if command_name == "FOREVER":
            if len(parts) != 3:
                return Command(type=CommandType.UNKNOWN, raw=raw)
            return self._parse_store(CommandType.FOREVER, parts + ["forever"], raw)
        if command_name in ("GET", "PULL", "HAS", "FORGET"):
            return self._parse_key_only(CommandType[command_name], parts, raw)
        if command_name in ("INCR", "DECR"):
            return self._parse_adjust(CommandType[command_name], parts, raw)
        if command_name in ("FLUSH", "PREFIX", "STATS", "QUIT"):
            # These take no args
            if len(parts) == 1:
                return Command(type=CommandType[command_name], raw=raw)
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=CommandType.UNKNOWN, raw=raw)

    def _parse_store(self, command_type: CommandType, parts: list, raw: str) -> Command:
        """
        Parse PUT, ADD and FOREVER.

        Format: <CMD> <key> <value> [ttl]
        """
        if len(parts) < 3 or len(parts) > 4:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key, value = parts[1], parts[2]
        if len(key) > self.max_key_length or len(value) > self.max_value_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        ttl = None
        if len(parts) == 4:
            ttl = self._parse_ttl(parts[3])
            if ttl is None:
                return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(
            type=command_type,
            key=key,
            value=self._coerce(value),
            ttl=ttl,
            raw=raw,
        )

    def _parse_key_only(self, command_type: CommandType, parts: list, raw: str) -> Command:
        """
        Parse GET, PULL, HAS and FORGET.

        Format: <CMD> <key>
        """
        if len(parts) != 2:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key = parts[1]
        if len(key) > self.max_key_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=command_type, key=key, raw=raw)

    def _parse_adjust(self, command_type: CommandType, parts: list, raw: str) -> Command:
        """
        Parse INCR and DECR.

        Format: <CMD> <key> [delta]
        """
        if len(parts) < 2 or len(parts) > 3:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key = parts[1]
        if len(key) > self.max_key_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        delta = 1
        if len(parts) == 3:
            delta = self._coerce(parts[2])
            if isinstance(delta, str):
                return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=command_type, key=key, value=delta, raw=raw)

    @staticmethod
    def _parse_ttl(token: str) -> Optional[object]:
        """Return minutes or FOREVER, or None if token is not a valid ttl."""
        if token.lower() == "forever":
            return FOREVER
        ttl = ProtocolParser._coerce(token)
        if isinstance(ttl, str) or ttl < 0:
            return None
        return ttl

    @staticmethod
    def _coerce(token: str):
        """Turn plain ASCII decimal tokens into int or float."""
        if _INT_PATTERN.fullmatch(token):
            return int(token)
        if not _FLOAT_PATTERN.fullmatch(token):
            return token
        number = float(token)
        return number if math.isfinite(number) else token

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into a shell output line.

        Returns:
            Formatted response string WITH trailing newline.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.stored())
            'OK stored\\n'
            >>> parser.format_response(Response.value_response(15))
            'OK 15\\n'
            >>> parser.format_response(Response.error("key not found"))
            'ERROR key not found\\n'
        """
        prefix = response.status.value

        # If value is provided (GET), prefer it; otherwise use message
        if response.value is not None:
            body = str(response.value)
        else:
            body = response.message

        if body:
            return f"{prefix} {body}\n"
        return f"{prefix}\n"
