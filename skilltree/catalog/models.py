"""
Catalog models: skills -> lessons -> exercises.

The catalog is loaded once and never mutated, so every model is frozen and
collections are tuples.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from skilltree.exercises import ExerciseType


class Exercise(BaseModel):
    """A single exercise. `type` selects the handler that grades it."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: ExerciseType
    question: str
    answer: str
    options: tuple[str, ...] = ()


class Lesson(BaseModel):
    """Ordered list of exercises."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    exercises: tuple[Exercise, ...] = ()


class Skill(BaseModel):
    """Node of the skill tree; unlocks in catalog order."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    lessons: tuple[Lesson, ...] = ()

    @property
    def lesson_ids(self) -> list[str]:
        return [lesson.id for lesson in self.lessons]

    def is_completed(self, completed_lesson_ids: Iterable[str]) -> bool:
        """True when the skill has lessons and every one of them is completed."""
        completed = set(completed_lesson_ids)
        return bool(self.lessons) and all(lesson.id in completed for lesson in self.lessons)


class CatalogDocument(BaseModel):
    """Raw catalog document as served by the content source."""

    skills: list[Skill] = Field(default_factory=list)


class Catalog:
    """
    Read-only, indexed view over the skill tree.

    Exercise ids are indexed across all skills; the practice selector and
    mastery records rely on them being globally unique.
    """

    def __init__(self, skills: Sequence[Skill]):
        if not skills:
            raise ValueError("Catalog has no skills.")

        self.skills: tuple[Skill, ...] = tuple(skills)
        self._skills: dict[str, Skill] = {}
        self._skill_index: dict[str, int] = {}
        self._lessons: dict[str, tuple[Skill, Lesson]] = {}
        self._exercises: dict[str, Exercise] = {}
        self._exercise_order: dict[str, int] = {}

        for position, skill in enumerate(self.skills):
            if skill.id in self._skills:
                raise ValueError(f"Duplicate skill id: {skill.id}")
            self._skills[skill.id] = skill
            self._skill_index[skill.id] = position

            for lesson in skill.lessons:
                if lesson.id in self._lessons:
                    previous = self._lessons[lesson.id][0].id
                    raise ValueError(f"Duplicate lesson id: {lesson.id} (in {previous} and {skill.id})")
                if not lesson.exercises:
                    raise ValueError(f"Lesson {lesson.id} has no exercises")
                self._lessons[lesson.id] = (skill, lesson)

                for exercise in lesson.exercises:
                    if exercise.id in self._exercises:
                        raise ValueError(f"Duplicate exercise id: {exercise.id}")
                    self._exercises[exercise.id] = exercise
                    self._exercise_order[exercise.id] = len(self._exercise_order)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Catalog:
        """Validate a raw catalog document and index it."""
        document = CatalogDocument.model_validate(data)
        return cls(document.skills)

    @property
    def first_skill_id(self) -> str:
        return self.skills[0].id

    def get_skill(self, skill_id: str) -> Skill | None:
        return self._skills.get(skill_id)

    def get_lesson(self, skill_id: str, lesson_id: str) -> Lesson | None:
        """Lesson by id, only if it belongs to the given skill."""
        entry = self._lessons.get(lesson_id)
        if entry is None or entry[0].id != skill_id:
            return None
        return entry[1]

    def skill_for_lesson(self, lesson_id: str) -> Skill | None:
        entry = self._lessons.get(lesson_id)
        return entry[0] if entry else None

    def get_exercise(self, exercise_id: str) -> Exercise | None:
        return self._exercises.get(exercise_id)

    def exercise_position(self, exercise_id: str) -> int:
        """Position in catalog order; unknown ids sort last."""
        return self._exercise_order.get(exercise_id, len(self._exercise_order))

    def next_skill(self, skill_id: str) -> Skill | None:
        """The skill after `skill_id` in catalog order, if any."""
        position = self._skill_index.get(skill_id)
        if position is None or position + 1 >= len(self.skills):
            return None
        return self.skills[position + 1]

    def iter_exercises(self) -> Iterator[Exercise]:
        for skill in self.skills:
            for lesson in skill.lessons:
                yield from lesson.exercises

    def __len__(self) -> int:
        return len(self.skills)
