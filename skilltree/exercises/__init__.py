"""
Exercise type handlers for the lesson player.

Each exercise variant (multiple choice, fill in the blank) has its own module with:
- validate(): Check the exercise carries what the variant needs
- render(): Build the view the presentation layer draws
- check(): Grade the learner's input

New variants are added by defining an ExerciseType member and registering a handler.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import ExerciseHandler


class ExerciseType(str, Enum):
    """Supported exercise variants."""
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_IN_THE_BLANK = "fill-in-the-blank"


# Handler registry - populated by @register decorator
HANDLERS: dict[ExerciseType, "ExerciseHandler"] = {}


def register(exercise_type: ExerciseType):
    """Decorator to register an exercise handler."""
    def decorator(cls):
        HANDLERS[exercise_type] = cls()
        return cls
    return decorator


def get_handler(exercise_type: str | ExerciseType) -> "ExerciseHandler | None":
    """Get the handler for an exercise type."""
    if isinstance(exercise_type, str) and not isinstance(exercise_type, ExerciseType):
        try:
            exercise_type = ExerciseType(exercise_type.lower())
        except ValueError:
            return None
    return HANDLERS.get(exercise_type)


# Import handlers to trigger registration
from . import multiple_choice
from . import fill_in_blank

__all__ = [
    "ExerciseType",
    "HANDLERS",
    "get_handler",
    "register",
]
