"""
Heap-Cache Configuration Settings

This module contains all configuration values for Heap-Cache.
Values are read from the environment once, when the module is imported.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Cache configuration settings."""

    # Advisory key prefix exposed as ``cache.prefix``
    PREFIX: str = os.environ.get("HEAP_CACHE_PREFIX", "")

    # TTL settings (minutes)
    DEFAULT_TTL: int = int(os.environ.get("HEAP_CACHE_DEFAULT_TTL", "60"))

    # Shell input limits
    MAX_KEY_LENGTH: int = 256
    MAX_VALUE_LENGTH: int = 256

    # Logging settings
    DEBUG: bool = os.environ.get("HEAP_CACHE_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("HEAP_CACHE_LOG_LEVEL", "INFO")

    def get(self, name: str, default=None):
        """
        Look up a dotted configuration name such as ``cache.prefix``.

        Only the ``cache.`` namespace is known; anything else returns
        ``default``.
        """
        namespace, _, field = name.partition(".")
        if namespace != "cache" or not field:
            return default
        return getattr(self, field.upper(), default)


# Global settings instance
settings = Settings()
