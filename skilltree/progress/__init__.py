"""
Progress persistence: snapshot model, blob backends and the store.
"""

from .backends import BlobBackend, JsonFileBackend, MemoryBackend, SqliteBackend, create_backend
from .snapshot import MasteryRecord, ProgressSnapshot
from .store import DEFAULT_PROGRESS_KEY, ProgressStore

__all__ = [
    "BlobBackend",
    "DEFAULT_PROGRESS_KEY",
    "JsonFileBackend",
    "MasteryRecord",
    "MemoryBackend",
    "ProgressSnapshot",
    "ProgressStore",
    "SqliteBackend",
    "create_backend",
]
