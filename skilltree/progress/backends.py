"""
Blob backends for progress persistence.

A backend is a string-keyed slot holding one serialized snapshot. Writes
replace the whole blob or leave the previous one in place.

- JsonFileBackend: one file per key, written via temp file + os.replace
- SqliteBackend: key/value table in ~/.skilltree/progress.db
- MemoryBackend: dict, for tests and throwaway sessions
"""

from __future__ import annotations

import os
import sqlite3
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Protocol

from loguru import logger

DEFAULT_PROGRESS_DIR = Path.home() / ".skilltree"


class BlobBackend(Protocol):
    """Protocol for progress blob storage."""

    def read(self, key: str) -> str | None:
        """Return the stored blob, or None if the key is absent."""
        ...

    def write(self, key: str, blob: str) -> None:
        """Atomically replace the blob stored under key."""
        ...

    def delete(self, key: str) -> bool:
        """Remove the blob. Returns True if something was deleted."""
        ...

    def close(self) -> None:
        """Release any open handles."""
        ...


class MemoryBackend:
    """In-process backend."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.blobs: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self.blobs[key] = blob

    def delete(self, key: str) -> bool:
        return self.blobs.pop(key, None) is not None

    def close(self) -> None:
        pass


class JsonFileBackend:
    """
    Stores each key as {directory}/{key}.json.

    Writes go to a temp file in the same directory which is then renamed
    over the target, so readers see either the old or the new blob.
    """

    def __init__(self, directory: Path | None = None):
        self.directory = directory or DEFAULT_PROGRESS_DIR
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, blob: str) -> None:
        target = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def close(self) -> None:
        # Files are opened per call
        pass


class SqliteBackend:
    """Key/value table in a local SQLite database."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or DEFAULT_PROGRESS_DIR / "progress.db"
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = None
        self._init_schema()
        logger.debug(f"SqliteBackend initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        with self.conn:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS progress_blobs (
                    key TEXT PRIMARY KEY,
                    blob TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    def read(self, key: str) -> str | None:
        row = self.conn.execute(
            "SELECT blob FROM progress_blobs WHERE key = ?", (key,)
        ).fetchone()
        return None if row is None else str(row["blob"])

    def write(self, key: str, blob: str) -> None:
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO progress_blobs (key, blob, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    blob = excluded.blob,
                    updated_at = excluded.updated_at
                """,
                (key, blob, datetime.now().isoformat()),
            )

    def delete(self, key: str) -> bool:
        with self.conn:
            cursor = self.conn.execute("DELETE FROM progress_blobs WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def create_backend(kind: str, directory: Path | None = None) -> BlobBackend:
    """
    Build a backend by name.

    Args:
        kind: 'json', 'sqlite' or 'memory'
        directory: Storage directory for the on-disk backends
    """
    kind = kind.lower()
    if kind == "json":
        return JsonFileBackend(directory)
    if kind == "sqlite":
        return SqliteBackend((directory or DEFAULT_PROGRESS_DIR) / "progress.db")
    if kind == "memory":
        return MemoryBackend()
    raise ValueError(f"Unknown progress backend: {kind}")
