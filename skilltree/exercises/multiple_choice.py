"""
Multiple choice exercise handler.

- Presents a question with a fixed list of options.
- The learner selects exactly one option before checking.
- Graded by exact text match against the answer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import ExerciseType, register
from .base import AnswerResult, ExerciseView, feedback_for

if TYPE_CHECKING:
    from skilltree.catalog.models import Exercise


@register(ExerciseType.MULTIPLE_CHOICE)
class MultipleChoiceHandler:
    """Handler for multiple choice exercises."""

    requires_selection = True

    def validate(self, exercise: Exercise) -> bool:
        """The answer must be one of at least two distinct options."""
        options = list(exercise.options)
        if len(options) < 2 or len(set(options)) != len(options):
            return False
        return exercise.answer in options

    def render(self, exercise: Exercise) -> ExerciseView:
        """Options are shown in catalog order."""
        return ExerciseView(
            exercise_id=exercise.id,
            exercise_type=ExerciseType.MULTIPLE_CHOICE.value,
            question=exercise.question,
            options=list(exercise.options),
            requires_selection=True,
        )

    def check(self, exercise: Exercise, answer: str) -> AnswerResult:
        """Exact match on the selected option text."""
        is_correct = answer == exercise.answer
        return AnswerResult(
            correct=is_correct,
            feedback=feedback_for(is_correct, exercise.answer),
            user_answer=answer,
            correct_answer=exercise.answer,
        )
