"""Configuration module for Heap-Cache."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
