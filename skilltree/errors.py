"""
Exception hierarchy for the skill tree player.

- CatalogLoadError: content could not be fetched or parsed (fatal)
- CorruptProgressError: stored progress blob is unreadable (recoverable)
- InvalidTransitionError: an intent was issued in a state that does not accept it
"""

from __future__ import annotations


class SkillTreeError(Exception):
    """Base class for all skill tree errors."""


class CatalogLoadError(SkillTreeError):
    """Raised when the lesson catalog cannot be loaded."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load catalog from {source}: {reason}")


class CorruptProgressError(SkillTreeError):
    """Raised when a stored progress snapshot exists but cannot be parsed."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Progress blob '{key}' is corrupt: {reason}")


class InvalidTransitionError(SkillTreeError):
    """Raised when an intent is not valid in the current player state."""

    def __init__(self, intent: str, state: str, detail: str | None = None):
        self.intent = intent
        self.state = state
        message = f"'{intent}' is not allowed in state {state}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
