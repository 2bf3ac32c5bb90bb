"""
Fill-in-the-blank exercise handler.

The question contains a ___ marker where the learner types the answer.
Grading ignores case and surrounding whitespace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import ExerciseType, register
from .base import AnswerResult, ExerciseView, feedback_for

if TYPE_CHECKING:
    from skilltree.catalog.models import Exercise

BLANK_MARKER = "___"


@register(ExerciseType.FILL_IN_THE_BLANK)
class FillInTheBlankHandler:
    """Handler for fill-in-the-blank exercises."""

    requires_selection = False

    def validate(self, exercise: Exercise) -> bool:
        """Needs a non-empty answer."""
        return bool(exercise.answer.strip())

    def render(self, exercise: Exercise) -> ExerciseView:
        """Split the question around the first blank marker."""
        before, marker, after = exercise.question.partition(BLANK_MARKER)
        if not marker:
            # No marker: the input goes after the question
            before, after = exercise.question, ""
        return ExerciseView(
            exercise_id=exercise.id,
            exercise_type=ExerciseType.FILL_IN_THE_BLANK.value,
            question=exercise.question,
            before_blank=before,
            after_blank=after,
        )

    def check(self, exercise: Exercise, answer: str) -> AnswerResult:
        """Case-insensitive match after trimming the input."""
        is_correct = self._grade(answer, exercise.answer)
        return AnswerResult(
            correct=is_correct,
            feedback=feedback_for(is_correct, exercise.answer),
            user_answer=answer.strip(),
            correct_answer=exercise.answer,
        )

    def _grade(self, user_answer: str, correct: str) -> bool:
        return user_answer.strip().lower() == correct.lower()
