"""
Practice selector: builds review sessions from the learner's weakest exercises.
"""

from __future__ import annotations

from loguru import logger

from skilltree.catalog.models import Catalog, Exercise, Lesson, Skill
from skilltree.progress.snapshot import ProgressSnapshot

from .mastery import weak_count, weak_ids

PRACTICE_LESSON_ID = "practice-session"
PRACTICE_LESSON_TITLE = "Practice Session"
PRACTICE_SKILL_ID = "practice"
PRACTICE_SKILL_TITLE = "Practice"

DEFAULT_PRACTICE_LIMIT = 5
MIN_WEAK_FOR_PRACTICE = 3


def select_practice_set(
    snapshot: ProgressSnapshot,
    catalog: Catalog,
    limit: int = DEFAULT_PRACTICE_LIMIT,
) -> list[Exercise]:
    """
    Pick the weakest exercises for a practice session.

    Weak records are ordered by score (lowest first), ties by catalog order.
    Ids no longer present in the catalog are dropped before truncating.

    Args:
        snapshot: Learner progress
        catalog: Current catalog
        limit: Maximum number of exercises

    Returns:
        Up to `limit` exercises; empty when nothing is weak
    """
    candidates = sorted(
        weak_ids(snapshot),
        key=lambda exercise_id: (snapshot.score_for(exercise_id), catalog.exercise_position(exercise_id)),
    )

    selected: list[Exercise] = []
    for exercise_id in candidates:
        exercise = catalog.get_exercise(exercise_id)
        if exercise is None:
            logger.debug(f"Skipping weak exercise '{exercise_id}': not in catalog")
            continue
        selected.append(exercise)

    return selected[:max(limit, 0)]


def is_practice_eligible(snapshot: ProgressSnapshot, minimum: int = MIN_WEAK_FOR_PRACTICE) -> bool:
    """Practice opens once at least `minimum` exercises are weak."""
    return weak_count(snapshot) >= minimum


def build_practice_lesson(exercises: list[Exercise]) -> tuple[Skill, Lesson]:
    """Wrap exercises in the synthetic practice skill and lesson."""
    lesson = Lesson(id=PRACTICE_LESSON_ID, title=PRACTICE_LESSON_TITLE, exercises=tuple(exercises))
    skill = Skill(id=PRACTICE_SKILL_ID, title=PRACTICE_SKILL_TITLE, lessons=(lesson,))
    return skill, lesson


def is_practice_lesson(lesson: Lesson) -> bool:
    return lesson.id == PRACTICE_LESSON_ID
