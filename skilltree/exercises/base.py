"""
Base protocol and types for exercise handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from skilltree.catalog.models import Exercise


CORRECT_MESSAGE = "Correct! Well done."
INCORRECT_MESSAGE = "Not quite. The correct answer is: {answer}"


@dataclass
class AnswerResult:
    """Result of checking an answer."""
    correct: bool
    feedback: str
    user_answer: str
    correct_answer: str


@dataclass
class ExerciseView:
    """What the presentation layer needs to draw one exercise."""
    exercise_id: str
    exercise_type: str
    question: str
    options: list[str] = field(default_factory=list)
    # Question text around the blank, for fill-in-the-blank inputs
    before_blank: str | None = None
    after_blank: str | None = None
    requires_selection: bool = False


def feedback_for(correct: bool, correct_answer: str) -> str:
    """Feedback line shown after an answer is checked."""
    if correct:
        return CORRECT_MESSAGE
    return INCORRECT_MESSAGE.format(answer=correct_answer)


class ExerciseHandler(Protocol):
    """Protocol for exercise type handlers."""

    requires_selection: bool

    def validate(self, exercise: Exercise) -> bool:
        """Check if the exercise has the fields this type needs. Returns True if valid."""
        ...

    def render(self, exercise: Exercise) -> ExerciseView:
        """Build the view model for the exercise."""
        ...

    def check(self, exercise: Exercise, answer: str) -> AnswerResult:
        """Grade the answer and return the result."""
        ...
