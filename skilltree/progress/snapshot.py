"""
Persisted progress snapshot.

Serialized with the same JSON keys the browser version wrote to
localStorage, so old blobs load unchanged:

    {"unlockedSkills": [...], "completedLessons": [...],
     "exercisePerformance": {"ex-1": {"score": -2}}}
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class MasteryRecord(BaseModel):
    """Mastery score for one exercise. A missing record means score 0."""

    score: int = 0


class ProgressSnapshot(BaseModel):
    """Everything about the learner that outlives a session."""

    model_config = ConfigDict(populate_by_name=True)

    unlocked_skill_ids: set[str] = Field(default_factory=set, alias="unlockedSkills")
    completed_lesson_ids: set[str] = Field(default_factory=set, alias="completedLessons")
    exercise_performance: dict[str, MasteryRecord] = Field(
        default_factory=dict, alias="exercisePerformance"
    )

    @field_serializer("unlocked_skill_ids", "completed_lesson_ids")
    def _serialize_ids(self, value: set[str]) -> list[str]:
        return sorted(value)

    @classmethod
    def default(cls, first_skill_id: str) -> ProgressSnapshot:
        """Fresh progress: only the first skill is unlocked."""
        return cls(unlocked_skill_ids={first_skill_id})

    def score_for(self, exercise_id: str) -> int:
        record = self.exercise_performance.get(exercise_id)
        return record.score if record else 0

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
