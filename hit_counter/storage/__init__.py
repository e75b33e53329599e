"""
Hit storage module.

This module implements the Strategy Pattern for pluggable hit storage,
with a factory that selects one backend per process at startup.
"""

from .strategies import (
    HitStorageStrategy,
    InMemoryHitStorage,
    DocumentHitStorage,
    RelationalHitStorage,
)
from .factory import HitStorageFactory, HitStorageBackend
from .windows import StatsWindows

__all__ = [
    "HitStorageStrategy",
    "InMemoryHitStorage",
    "DocumentHitStorage",
    "RelationalHitStorage",
    "HitStorageFactory",
    "HitStorageBackend",
    "StatsWindows",
]
