"""
Storage Layer.

This package handles all data persistence: the key-value stores, the snapshot
adapter that keeps them in sync with live state, and the configuration file.
"""

from .config_manager import ConfigManager
from .kv_store import JsonFileStore, KeyValueStore, MemoryStore
from .persistence import PersistenceSync

__all__ = [
    "ConfigManager",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PersistenceSync",
]
