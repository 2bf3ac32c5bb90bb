"""
Progress store: loads and saves the learner's snapshot through a blob backend.

Handles:
- Default snapshot on first run
- Migration of legacy blobs without exercisePerformance
- Recovery from corrupt blobs (reset to default, never fatal)
"""

from __future__ import annotations

import json

from loguru import logger
from pydantic import ValidationError

from skilltree.errors import CorruptProgressError

from .backends import BlobBackend
from .snapshot import ProgressSnapshot

DEFAULT_PROGRESS_KEY = "hardwareGameProgress"


class ProgressStore:
    """Owns the persisted ProgressSnapshot for one catalog."""

    def __init__(
        self,
        backend: BlobBackend,
        first_skill_id: str,
        key: str = DEFAULT_PROGRESS_KEY,
    ):
        """
        Initialize the store.

        Args:
            backend: Where blobs are kept
            first_skill_id: Catalog's first skill, always unlocked
            key: Slot name inside the backend
        """
        self.backend = backend
        self.first_skill_id = first_skill_id
        self.key = key

    def default_snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot.default(self.first_skill_id)

    def read(self) -> ProgressSnapshot | None:
        """
        Read the stored snapshot without recovery.

        Returns:
            The snapshot, or None when nothing has been saved yet

        Raises:
            CorruptProgressError: If the blob exists but cannot be parsed
        """
        try:
            blob = self.backend.read(self.key)
        except UnicodeDecodeError as e:
            raise CorruptProgressError(self.key, "blob is not valid UTF-8") from e
        if blob is None:
            return None

        try:
            data = json.loads(blob)
        except json.JSONDecodeError as e:
            raise CorruptProgressError(self.key, f"invalid JSON at line {e.lineno}") from e

        if not isinstance(data, dict):
            raise CorruptProgressError(self.key, "snapshot is not an object")

        if data.get("exercisePerformance") is None:
            logger.info("Migrating legacy progress snapshot: adding empty exercisePerformance")
            data["exercisePerformance"] = {}

        try:
            snapshot = ProgressSnapshot.model_validate(data)
        except ValidationError as e:
            raise CorruptProgressError(self.key, f"{e.error_count()} validation errors") from e

        if self.first_skill_id not in snapshot.unlocked_skill_ids:
            logger.info(f"Progress snapshot was missing first skill '{self.first_skill_id}', unlocking it")
            snapshot.unlocked_skill_ids.add(self.first_skill_id)

        return snapshot

    def load(self) -> ProgressSnapshot:
        """Load the snapshot, falling back to the default when absent or corrupt."""
        try:
            snapshot = self.read()
        except CorruptProgressError as e:
            logger.warning(f"{e}; starting from fresh progress")
            return self.default_snapshot()

        if snapshot is None:
            logger.debug("No saved progress found, using default snapshot")
            return self.default_snapshot()
        return snapshot

    def save(self, snapshot: ProgressSnapshot) -> None:
        """Serialize and atomically replace the stored snapshot."""
        self.backend.write(self.key, snapshot.to_json())
        logger.debug(
            f"Progress saved: {len(snapshot.unlocked_skill_ids)} skills unlocked, "
            f"{len(snapshot.completed_lesson_ids)} lessons completed"
        )

    def close(self) -> None:
        """Release the backend's resources."""
        self.backend.close()

    def reset(self) -> bool:
        """Delete the stored snapshot. Returns True if one existed."""
        removed = self.backend.delete(self.key)
        if removed:
            logger.info(f"Progress '{self.key}' reset")
        return removed
