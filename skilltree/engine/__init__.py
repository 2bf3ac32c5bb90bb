"""
Progress and adaptive-practice engine.

Components:
- mastery: score updates and weak classification
- practice: weak-exercise selection for practice sessions
- render: render models consumed by presentation layers
- session: LessonPlayer state machine
"""

from .mastery import apply_outcome, is_weak, record_outcome
from .practice import build_practice_lesson, is_practice_eligible, select_practice_set
from .render import Feedback, LessonPhase, PlayerState, RenderModel, SkillNode, SkillStatus
from .session import LessonPlayer, PlayerConfig, SessionCursor

__all__ = [
    "Feedback",
    "LessonPhase",
    "LessonPlayer",
    "PlayerConfig",
    "PlayerState",
    "RenderModel",
    "SessionCursor",
    "SkillNode",
    "SkillStatus",
    "apply_outcome",
    "build_practice_lesson",
    "is_practice_eligible",
    "is_weak",
    "record_outcome",
    "select_practice_set",
]
