"""
Render models: everything a presentation layer needs to draw the player.

The terminal player and the HTTP API both consume these; neither looks at
the state machine directly.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from skilltree.catalog.models import Catalog
from skilltree.exercises.base import ExerciseView
from skilltree.progress.snapshot import ProgressSnapshot


class PlayerState(str, Enum):
    """Top-level player states."""
    AT_SKILL_MAP = "at_skill_map"
    IN_LESSON = "in_lesson"
    LESSON_COMPLETE = "lesson_complete"
    GAME_OVER = "game_over"


class LessonPhase(str, Enum):
    """Sub-state of IN_LESSON: the two halves of the check/continue protocol."""
    AWAITING_ANSWER = "awaiting_answer"
    ANSWERED = "answered"


class SkillStatus(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMPLETED = "completed"


class SkillNode(BaseModel):
    """One node on the skill map."""

    id: str
    title: str
    status: SkillStatus
    lessons_completed: int = 0
    lessons_total: int = 0


class Feedback(BaseModel):
    """Result shown after an answer is checked."""

    is_correct: bool
    correct_answer_text: str
    message: str


class RenderModel(BaseModel):
    """Snapshot of the player for one frame."""

    state: PlayerState
    phase: LessonPhase | None = None
    skills: list[SkillNode] = Field(default_factory=list)

    skill_id: str | None = None
    lesson_id: str | None = None
    lesson_title: str | None = None
    is_practice: bool = False

    exercise: ExerciseView | None = None
    exercise_index: int | None = None
    exercise_count: int | None = None
    selected_option: str | None = None
    can_submit: bool = False
    feedback: Feedback | None = None

    score: int = 0
    lives: int = 0
    practice_available: bool = False

    # End screens (lesson complete / game over)
    heading: str | None = None
    message: str | None = None
    unlocked_skill_id: str | None = None


def build_skill_map(catalog: Catalog, snapshot: ProgressSnapshot) -> list[SkillNode]:
    """Skill nodes with locked / unlocked / completed badges."""
    nodes = []
    for skill in catalog.skills:
        completed = sum(1 for lesson_id in skill.lesson_ids if lesson_id in snapshot.completed_lesson_ids)
        if skill.id not in snapshot.unlocked_skill_ids:
            status = SkillStatus.LOCKED
        elif skill.is_completed(snapshot.completed_lesson_ids):
            status = SkillStatus.COMPLETED
        else:
            status = SkillStatus.UNLOCKED
        nodes.append(
            SkillNode(
                id=skill.id,
                title=skill.title,
                status=status,
                lessons_completed=completed,
                lessons_total=len(skill.lessons),
            )
        )
    return nodes
