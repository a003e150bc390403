#!/usr/bin/env python3
"""
Heap-Cache Interactive Shell

Reads commands line by line from stdin and runs them against a local
HeapStore. Useful for poking at expiration and counter behaviour by hand.

Usage:
    python -m heap_cache.shell                  # Default settings
    python -m heap_cache.shell --prefix app_    # Custom advisory prefix
    python -m heap_cache.shell --debug          # Enable debug logging

Environment Variables:
    HEAP_CACHE_PREFIX       - Advisory key prefix
    HEAP_CACHE_DEFAULT_TTL  - Minutes used when PUT/ADD omit a ttl
    HEAP_CACHE_DEBUG        - Enable debug mode (true/false)
    HEAP_CACHE_LOG_LEVEL    - Log level when not in debug mode
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import TextIO

from .cache.store import HeapStore, NonNumericValueError
from .config.settings import settings
from .protocol.commands import Command, CommandType, Response
from .protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)


class CacheShell:
    """
    Line-oriented command loop over a HeapStore.

    Attributes:
        store: The HeapStore commands run against
        parser: The ProtocolParser for parsing commands
    """

    def __init__(self, store: HeapStore = None):
        self.store = store if store is not None else HeapStore()
        self.parser = ProtocolParser()
        self._total_requests = 0

    def run(self, reader: TextIO, writer: TextIO) -> int:
        """
        Process commands until QUIT or end of input.

        Returns:
            Number of valid commands executed
        """
        for line in reader:
            if not line.strip():
                continue

            command = self.parser.parse_request(line)

            if command.type == CommandType.QUIT:
                logger.debug("Quit requested")
                break

            if not command.is_valid:
                response = Response.error("invalid command")
            else:
                self._total_requests += 1
                try:
                    response = self.execute(command)
                except Exception as exc:  # Log unexpected errors but keep the shell alive
                    logger.exception(f"Error executing '{command.raw}': {exc}")
                    response = Response.error("internal error")

            writer.write(self.parser.format_response(response))
            writer.flush()

        return self._total_requests

    def execute(self, command: Command) -> Response:
        """
        Execute a parsed command on the store.

        Args:
            command: The Command object to execute

        Returns:
            Response object with the result
        """
        store = self.store
        ttl = command.ttl if command.ttl is not None else store.settings.DEFAULT_TTL

        if command.type in (CommandType.PUT, CommandType.FOREVER):
            store.put(command.key, command.value, ttl)
            return Response.stored()

        if command.type == CommandType.ADD:
            added = store.add(command.key, command.value, ttl)
            return Response.stored() if added else Response.ok(message="exists")

        if command.type in (CommandType.GET, CommandType.PULL):
            lookup = store.get if command.type == CommandType.GET else store.pull
            value = lookup(command.key)
            return Response.value_response(value) if value is not None else Response.key_not_found()

        if command.type == CommandType.HAS:
            return Response.has_response(store.has(command.key))

        if command.type in (CommandType.INCR, CommandType.DECR):
            adjust = store.increment if command.type == CommandType.INCR else store.decrement
            try:
                value = adjust(command.key, command.value)
            except NonNumericValueError:
                return Response.error("value is not numeric")
            if value is False:
                return Response.key_not_found()
            return Response.value_response(value)

        if command.type == CommandType.FORGET:
            store.forget(command.key)
            return Response.ok(message="forgotten")

        if command.type == CommandType.FLUSH:
            store.flush()
            return Response.ok(message="flushed")

        if command.type == CommandType.PREFIX:
            return Response.ok(message=store.get_prefix())

        if command.type == CommandType.STATS:
            stats = store.get_stats()
            return Response.ok(
                message=(
                    f"total={stats['total_keys']} "
                    f"active={stats['active_keys']} "
                    f"expired={stats['expired_keys']}"
                )
            )

        return Response.error("invalid command")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Heap-Cache: interactive shell over an in-process cache",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--prefix",
        type=str,
        default=settings.PREFIX,
        help="Advisory cache key prefix",
    )

    parser.add_argument(
        "--default-ttl",
        type=int,
        default=settings.DEFAULT_TTL,
        help="Minutes used when PUT/ADD omit a ttl",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def main(argv=None) -> None:
    """Main entry point for the shell."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    store = HeapStore(settings=replace(settings, PREFIX=args.prefix, DEFAULT_TTL=args.default_ttl))
    shell = CacheShell(store)

    logger.info("Starting Heap-Cache shell")
    logger.info(f"  Prefix: {args.prefix!r}")
    logger.info(f"  Default TTL: {args.default_ttl} minutes")

    try:
        count = shell.run(sys.stdin, sys.stdout)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    else:
        logger.info(f"Shell finished after {count} commands")


if __name__ == "__main__":
    main()
