"""
Mastery model: per-exercise score updates and weak classification.

Scoring is asymmetric: +1 for a correct answer, -2 for an incorrect one.
After one miss an exercise has to be answered correctly three times before
it leaves the weak set.
"""

from __future__ import annotations

from skilltree.progress.snapshot import MasteryRecord, ProgressSnapshot

CORRECT_DELTA = 1
INCORRECT_DELTA = -2
WEAK_THRESHOLD = 1


def record_outcome(record: MasteryRecord | None, is_correct: bool) -> MasteryRecord:
    """Return the record after one answer. `None` counts as a score of 0."""
    previous = record.score if record is not None else 0
    delta = CORRECT_DELTA if is_correct else INCORRECT_DELTA
    return MasteryRecord(score=previous + delta)


def is_weak(score: int) -> bool:
    """Any score below 1 is weak."""
    return score < WEAK_THRESHOLD


def apply_outcome(snapshot: ProgressSnapshot, exercise_id: str, is_correct: bool) -> MasteryRecord:
    """Update the snapshot's record for one exercise and return the new record."""
    updated = record_outcome(snapshot.exercise_performance.get(exercise_id), is_correct)
    snapshot.exercise_performance[exercise_id] = updated
    return updated


def weak_ids(snapshot: ProgressSnapshot) -> list[str]:
    """Ids of weak exercises, in record order."""
    return [
        exercise_id
        for exercise_id, record in snapshot.exercise_performance.items()
        if is_weak(record.score)
    ]


def weak_count(snapshot: ProgressSnapshot) -> int:
    return len(weak_ids(snapshot))
