"""
Lesson player: the session state machine.

Intent -> transition -> render model. Each public intent validates the
current state, mutates the cursor and snapshot, persists when progress
changed, and returns a RenderModel.

States:
    AT_SKILL_MAP --start_lesson/open_skill/start_practice--> IN_LESSON(0)
    IN_LESSON(i, AWAITING_ANSWER) --submit_answer--> IN_LESSON(i, ANSWERED) | GAME_OVER
    IN_LESSON(i, ANSWERED) --continue_--> IN_LESSON(i+1) | LESSON_COMPLETE
    LESSON_COMPLETE --return_to_map--> AT_SKILL_MAP
    GAME_OVER --return_to_map--> AT_SKILL_MAP
    GAME_OVER --retry--> IN_LESSON(0)
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from skilltree.catalog.models import Catalog, Exercise, Lesson, Skill
from skilltree.errors import InvalidTransitionError
from skilltree.exercises import get_handler
from skilltree.exercises.base import ExerciseHandler
from skilltree.progress.snapshot import ProgressSnapshot
from skilltree.progress.store import ProgressStore

from .mastery import apply_outcome
from .practice import (
    DEFAULT_PRACTICE_LIMIT,
    MIN_WEAK_FOR_PRACTICE,
    build_practice_lesson,
    is_practice_eligible,
    is_practice_lesson,
    select_practice_set,
)
from .render import Feedback, LessonPhase, PlayerState, RenderModel, build_skill_map

STARTING_LIVES = 5
POINTS_PER_CORRECT = 10


@dataclass
class PlayerConfig:
    """Gameplay tunables."""

    starting_lives: int = STARTING_LIVES
    points_per_correct: int = POINTS_PER_CORRECT
    practice_limit: int = DEFAULT_PRACTICE_LIMIT
    practice_min_weak: int = MIN_WEAK_FOR_PRACTICE


@dataclass
class SessionCursor:
    """Ephemeral position inside a running lesson. Never persisted."""

    skill: Skill
    lesson: Lesson
    lives: int
    score: int = 0
    exercise_index: int = 0
    phase: LessonPhase = LessonPhase.AWAITING_ANSWER
    selected_option: str | None = None
    feedback: Feedback | None = None
    unlocked_skill_id: str | None = None

    @property
    def exercise(self) -> Exercise:
        return self.lesson.exercises[self.exercise_index]

    @property
    def is_practice(self) -> bool:
        return is_practice_lesson(self.lesson)


class LessonPlayer:
    """
    Run-time controller for one learner.

    Owns the progress snapshot and the session cursor; the presentation layer
    only sends intents and draws the returned render models.
    """

    def __init__(
        self,
        catalog: Catalog,
        store: ProgressStore,
        config: PlayerConfig | None = None,
        snapshot: ProgressSnapshot | None = None,
    ):
        self.catalog = catalog
        self.store = store
        self.config = config or PlayerConfig()
        self.snapshot = snapshot if snapshot is not None else store.load()
        self.state = PlayerState.AT_SKILL_MAP
        self.cursor: SessionCursor | None = None

    # =========================================================================
    # Intents
    # =========================================================================

    def start_lesson(self, skill_id: str, lesson_id: str) -> RenderModel:
        """Start a catalog lesson. Lock state is the caller's responsibility."""
        self._require_state("start_lesson", PlayerState.AT_SKILL_MAP)

        skill = self.catalog.get_skill(skill_id)
        lesson = self.catalog.get_lesson(skill_id, lesson_id)
        if skill is None or lesson is None:
            raise InvalidTransitionError(
                "start_lesson", self.state.value, f"unknown lesson {skill_id}/{lesson_id}"
            )

        self._enter_lesson(skill, lesson, score=0)
        return self.render()

    def open_skill(self, skill_id: str) -> RenderModel:
        """
        Start the first uncompleted lesson of an unlocked skill.

        When every lesson is already completed the first lesson is replayed.
        """
        self._require_state("open_skill", PlayerState.AT_SKILL_MAP)

        skill = self.catalog.get_skill(skill_id)
        if skill is None or not skill.lessons:
            raise InvalidTransitionError("open_skill", self.state.value, f"unknown skill {skill_id}")
        if skill_id not in self.snapshot.unlocked_skill_ids:
            raise InvalidTransitionError("open_skill", self.state.value, f"skill {skill_id} is locked")

        lesson = next(
            (item for item in skill.lessons if item.id not in self.snapshot.completed_lesson_ids),
            skill.lessons[0],
        )
        return self.start_lesson(skill_id, lesson.id)

    def start_practice(self) -> RenderModel:
        """Start a practice session of the weakest exercises. No-op when not eligible."""
        self._require_state("start_practice", PlayerState.AT_SKILL_MAP)

        if not is_practice_eligible(self.snapshot, self.config.practice_min_weak):
            logger.info("Practice not available: not enough weak exercises")
            return self.render()

        exercises = select_practice_set(self.snapshot, self.catalog, self.config.practice_limit)
        if not exercises:
            logger.info("No weak exercises to practice!")
            return self.render()

        skill, lesson = build_practice_lesson(exercises)
        self._enter_lesson(skill, lesson, score=0)
        return self.render()

    def select_option(self, option_text: str) -> RenderModel:
        """Highlight a multiple choice option. UI state only; nothing is graded."""
        cursor = self._require_phase("select_option", LessonPhase.AWAITING_ANSWER)
        exercise = cursor.exercise
        if not self._handler_for(exercise).requires_selection:
            raise InvalidTransitionError(
                "select_option", self.state.value, f"{exercise.type.value} has no options"
            )
        if option_text not in exercise.options:
            raise InvalidTransitionError(
                "select_option", self.state.value, f"'{option_text}' is not an option"
            )

        cursor.selected_option = option_text
        return self.render()

    def submit_answer(self, user_input: str | None = None) -> RenderModel:
        """
        Grade the current exercise.

        Falls back to the selected option when no input is given. Real lessons
        update mastery and persist; practice sessions never touch mastery.
        Running out of lives ends the lesson immediately.
        """
        cursor = self._require_phase("submit_answer", LessonPhase.AWAITING_ANSWER)
        exercise = cursor.exercise

        answer = user_input if user_input is not None else cursor.selected_option
        if answer is None:
            raise InvalidTransitionError("submit_answer", self.state.value, "no answer provided")

        result = self._handler_for(exercise).check(exercise, answer)

        cursor.feedback = Feedback(
            is_correct=result.correct,
            correct_answer_text=result.correct_answer,
            message=result.feedback,
        )
        cursor.phase = LessonPhase.ANSWERED

        if result.correct:
            cursor.score += self.config.points_per_correct
        else:
            cursor.lives -= 1
            if cursor.lives <= 0:
                logger.info(f"Game over in lesson {cursor.lesson.id} at exercise {cursor.exercise_index}")
                self.state = PlayerState.GAME_OVER

        # Applied after the answered transition: a failed save cannot be resubmitted
        if not cursor.is_practice:
            record = apply_outcome(self.snapshot, exercise.id, result.correct)
            logger.debug(f"Mastery for {exercise.id} is now {record.score}")
            self._save()

        return self.render()

    def continue_(self) -> RenderModel:
        """Advance past an answered exercise; finish the lesson after the last one."""
        cursor = self._require_phase("continue", LessonPhase.ANSWERED)

        cursor.exercise_index += 1
        cursor.phase = LessonPhase.AWAITING_ANSWER
        cursor.selected_option = None
        cursor.feedback = None

        if cursor.exercise_index < len(cursor.lesson.exercises):
            return self.render()

        if cursor.is_practice:
            # Mastery is untouched by practice; saved anyway, same as a real lesson end
            self._save()
            logger.info("Practice session complete")
        else:
            cursor.unlocked_skill_id = self._complete_lesson(cursor.skill, cursor.lesson)
            self._save()
            logger.info(f"Lesson {cursor.lesson.id} complete")

        self.state = PlayerState.LESSON_COMPLETE
        return self.render()

    def return_to_map(self) -> RenderModel:
        """Leave an end screen and drop the cursor."""
        self._require_state("return_to_map", PlayerState.LESSON_COMPLETE, PlayerState.GAME_OVER)
        self.cursor = None
        self.state = PlayerState.AT_SKILL_MAP
        return self.render()

    def retry(self) -> RenderModel:
        """Restart the same lesson after game over. Lives reset, score is kept."""
        self._require_state("retry", PlayerState.GAME_OVER)
        assert self.cursor is not None
        self._enter_lesson(self.cursor.skill, self.cursor.lesson, score=self.cursor.score)
        return self.render()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def practice_available(self) -> bool:
        return is_practice_eligible(self.snapshot, self.config.practice_min_weak)

    def render(self) -> RenderModel:
        """Build the render model for the current state."""
        model = RenderModel(
            state=self.state,
            skills=build_skill_map(self.catalog, self.snapshot),
            practice_available=self.practice_available,
        )

        cursor = self.cursor
        if cursor is None:
            return model

        model.skill_id = cursor.skill.id
        model.lesson_id = cursor.lesson.id
        model.lesson_title = cursor.lesson.title
        model.is_practice = cursor.is_practice
        model.score = cursor.score
        model.lives = cursor.lives
        model.exercise_count = len(cursor.lesson.exercises)

        if self.state == PlayerState.IN_LESSON:
            handler = self._handler_for(cursor.exercise)
            model.phase = cursor.phase
            model.exercise = handler.render(cursor.exercise)
            model.exercise_index = cursor.exercise_index
            model.selected_option = cursor.selected_option
            model.feedback = cursor.feedback
            model.can_submit = cursor.phase == LessonPhase.AWAITING_ANSWER and (
                not handler.requires_selection or cursor.selected_option is not None
            )
        elif self.state == PlayerState.GAME_OVER:
            model.feedback = cursor.feedback
            model.heading = "Game Over"
            model.message = "You've run out of lives!"
        elif self.state == PlayerState.LESSON_COMPLETE:
            if cursor.is_practice:
                model.heading = "Practice Complete!"
                model.message = "Great job reviewing!"
            else:
                model.heading = "Lesson Complete!"
                model.message = f'You finished "{cursor.lesson.title}"!'
                model.unlocked_skill_id = cursor.unlocked_skill_id

        return model

    # =========================================================================
    # Internals
    # =========================================================================

    def _enter_lesson(self, skill: Skill, lesson: Lesson, score: int) -> None:
        self.cursor = SessionCursor(
            skill=skill,
            lesson=lesson,
            lives=self.config.starting_lives,
            score=score,
        )
        self.state = PlayerState.IN_LESSON
        logger.debug(f"Entered lesson {lesson.id} ({len(lesson.exercises)} exercises)")

    def _complete_lesson(self, skill: Skill, lesson: Lesson) -> str | None:
        """
        Mark a catalog lesson completed and propagate unlocks.

        Returns:
            Id of the skill unlocked by this completion, if any
        """
        self.snapshot.completed_lesson_ids.add(lesson.id)

        if not skill.is_completed(self.snapshot.completed_lesson_ids):
            return None

        next_skill = self.catalog.next_skill(skill.id)
        if next_skill is None or next_skill.id in self.snapshot.unlocked_skill_ids:
            return None

        self.snapshot.unlocked_skill_ids.add(next_skill.id)
        logger.info(f"Skill {next_skill.id} unlocked")
        return next_skill.id

    def _save(self) -> None:
        self.store.save(self.snapshot)

    def _handler_for(self, exercise: Exercise) -> ExerciseHandler:
        handler = get_handler(exercise.type)
        if handler is None:
            raise InvalidTransitionError(
                "render", self.state.value, f"unsupported exercise type: {exercise.type}"
            )
        return handler

    def _require_state(self, intent: str, *allowed: PlayerState) -> None:
        if self.state not in allowed:
            raise InvalidTransitionError(intent, self.state.value)

    def _require_phase(self, intent: str, phase: LessonPhase) -> SessionCursor:
        self._require_state(intent, PlayerState.IN_LESSON)
        assert self.cursor is not None
        if self.cursor.phase != phase:
            raise InvalidTransitionError(intent, f"{self.state.value}/{self.cursor.phase.value}")
        return self.cursor
