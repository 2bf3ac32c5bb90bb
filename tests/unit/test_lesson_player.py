"""
Unit tests for the LessonPlayer state machine.

Covers lesson flow, scoring and lives, unlock propagation, practice
sessions and rejection of out-of-state intents.
"""

import json

import pytest

from skilltree.engine.practice import PRACTICE_LESSON_ID
from skilltree.engine.render import LessonPhase, PlayerState, SkillStatus
from skilltree.engine.session import LessonPlayer, PlayerConfig
from skilltree.errors import InvalidTransitionError
from skilltree.progress.backends import MemoryBackend
from skilltree.progress.snapshot import MasteryRecord, ProgressSnapshot
from skilltree.progress.store import DEFAULT_PROGRESS_KEY, ProgressStore


def answer_correctly(player: LessonPlayer):
    return player.submit_answer(player.cursor.exercise.answer)


def answer_wrongly(player: LessonPlayer):
    return player.submit_answer("definitely wrong")


def play_through(player: LessonPlayer, skill_id: str, lesson_id: str):
    """Answer every exercise of a lesson correctly."""
    player.start_lesson(skill_id, lesson_id)
    model = None
    while player.state == PlayerState.IN_LESSON:
        answer_correctly(player)
        model = player.continue_()
    return model


def saved_blob(backend) -> dict:
    return json.loads(backend.read(DEFAULT_PROGRESS_KEY))


class TestStartLesson:
    def test_starts_at_first_exercise(self, player):
        model = player.start_lesson("skill-1", "lesson-1")

        assert model.state == PlayerState.IN_LESSON
        assert model.phase == LessonPhase.AWAITING_ANSWER
        assert model.exercise_index == 0
        assert model.exercise_count == 2
        assert model.lives == 5
        assert model.score == 0
        assert model.exercise.exercise_id == "ex-1"

    def test_unknown_lesson_is_rejected(self, player):
        with pytest.raises(InvalidTransitionError):
            player.start_lesson("skill-1", "lesson-3")
        assert player.state == PlayerState.AT_SKILL_MAP

    def test_cannot_start_while_in_lesson(self, player):
        player.start_lesson("skill-1", "lesson-1")

        with pytest.raises(InvalidTransitionError) as exc_info:
            player.start_lesson("skill-1", "lesson-2")
        assert exc_info.value.intent == "start_lesson"
        assert exc_info.value.state == "in_lesson"


class TestOpenSkill:
    def test_opens_first_uncompleted_lesson(self, player):
        player.snapshot.completed_lesson_ids.add("lesson-1")

        model = player.open_skill("skill-1")

        assert model.lesson_id == "lesson-2"

    def test_replays_first_lesson_when_all_completed(self, player):
        player.snapshot.completed_lesson_ids.update({"lesson-1", "lesson-2"})

        assert player.open_skill("skill-1").lesson_id == "lesson-1"

    def test_locked_skill_is_rejected(self, player):
        with pytest.raises(InvalidTransitionError, match="locked"):
            player.open_skill("skill-2")

    def test_unknown_skill_is_rejected(self, player):
        with pytest.raises(InvalidTransitionError, match="unknown skill"):
            player.open_skill("skill-99")


class TestAnswering:
    """The check/continue protocol, score and lives."""

    def test_correct_answer(self, player, backend):
        player.start_lesson("skill-1", "lesson-1")
        model = answer_correctly(player)

        assert model.phase == LessonPhase.ANSWERED
        assert model.feedback.is_correct is True
        assert model.feedback.message == "Correct! Well done."
        assert model.score == 10
        assert model.lives == 5
        assert saved_blob(backend)["exercisePerformance"] == {"ex-1": {"score": 1}}

    def test_wrong_answer(self, player, backend):
        player.start_lesson("skill-1", "lesson-1")
        model = answer_wrongly(player)

        assert model.feedback.is_correct is False
        assert model.feedback.correct_answer_text == "B"
        assert model.feedback.message == "Not quite. The correct answer is: B"
        assert model.score == 0
        assert model.lives == 4
        assert saved_blob(backend)["exercisePerformance"] == {"ex-1": {"score": -2}}

    def test_fill_in_blank_is_lenient(self, player):
        player.start_lesson("skill-1", "lesson-1")
        answer_correctly(player)
        player.continue_()

        model = player.submit_answer("  VOLT ")

        assert model.feedback.is_correct is True

    def test_failed_save_does_not_double_count(self, catalog):
        class BrokenWrites(MemoryBackend):
            def write(self, key, blob):
                raise OSError("disk full")

        player = LessonPlayer(catalog, ProgressStore(BrokenWrites(), catalog.first_skill_id))
        player.start_lesson("skill-1", "lesson-1")

        with pytest.raises(OSError):
            answer_wrongly(player)

        assert player.cursor.phase == LessonPhase.ANSWERED
        assert player.cursor.lives == 4
        with pytest.raises(InvalidTransitionError):
            answer_wrongly(player)
        assert player.snapshot.score_for("ex-1") == -2

    def test_cannot_answer_twice(self, player):
        player.start_lesson("skill-1", "lesson-1")
        answer_correctly(player)

        with pytest.raises(InvalidTransitionError):
            answer_correctly(player)

    def test_cannot_continue_before_answering(self, player):
        player.start_lesson("skill-1", "lesson-1")

        with pytest.raises(InvalidTransitionError):
            player.continue_()

    def test_continue_advances_and_clears_feedback(self, player):
        player.start_lesson("skill-1", "lesson-1")
        answer_correctly(player)
        model = player.continue_()

        assert model.exercise_index == 1
        assert model.phase == LessonPhase.AWAITING_ANSWER
        assert model.feedback is None
        assert model.score == 10


class TestSelectOption:
    def test_select_enables_submit(self, player):
        model = player.start_lesson("skill-1", "lesson-1")
        assert model.can_submit is False

        model = player.select_option("B")

        assert model.selected_option == "B"
        assert model.can_submit is True

    def test_submit_uses_selected_option(self, player):
        player.start_lesson("skill-1", "lesson-1")
        player.select_option("A")
        player.select_option("B")

        assert player.submit_answer().feedback.is_correct is True

    def test_submit_without_selection_is_rejected(self, player):
        player.start_lesson("skill-1", "lesson-1")

        with pytest.raises(InvalidTransitionError, match="no answer"):
            player.submit_answer()
        assert player.cursor.phase == LessonPhase.AWAITING_ANSWER

    def test_option_must_exist(self, player):
        player.start_lesson("skill-1", "lesson-1")

        with pytest.raises(InvalidTransitionError):
            player.select_option("Z")

    def test_fill_in_blank_has_no_options(self, player):
        player.start_lesson("skill-1", "lesson-1")
        answer_correctly(player)
        model = player.continue_()
        assert model.can_submit is True

        with pytest.raises(InvalidTransitionError):
            player.select_option("A")


class TestLessonCompletion:
    def test_completing_lesson_records_it(self, player, backend):
        model = play_through(player, "skill-1", "lesson-1")

        assert model.state == PlayerState.LESSON_COMPLETE
        assert model.heading == "Lesson Complete!"
        assert model.message == 'You finished "First"!'
        assert model.unlocked_skill_id is None
        assert "lesson-1" in saved_blob(backend)["completedLessons"]

    def test_finishing_skill_unlocks_next(self, player, backend):
        play_through(player, "skill-1", "lesson-1")
        player.return_to_map()
        model = play_through(player, "skill-1", "lesson-2")

        assert model.unlocked_skill_id == "skill-2"
        assert saved_blob(backend)["unlockedSkills"] == ["skill-1", "skill-2"]

        model = player.return_to_map()
        statuses = {node.id: node.status for node in model.skills}
        assert statuses == {
            "skill-1": SkillStatus.COMPLETED,
            "skill-2": SkillStatus.UNLOCKED,
            "skill-3": SkillStatus.LOCKED,
        }

    def test_replaying_completed_skill_unlocks_nothing_new(self, player):
        for lesson_id in ("lesson-1", "lesson-2"):
            play_through(player, "skill-1", lesson_id)
            player.return_to_map()
        unlocked = set(player.snapshot.unlocked_skill_ids)

        model = play_through(player, "skill-1", "lesson-1")

        assert model.unlocked_skill_id is None
        assert player.snapshot.unlocked_skill_ids == unlocked

    def test_last_skill_unlocks_nothing(self, player):
        player.snapshot.unlocked_skill_ids.update({"skill-2", "skill-3"})

        model = play_through(player, "skill-3", "lesson-4")

        assert model.unlocked_skill_id is None
        assert player.snapshot.unlocked_skill_ids == {"skill-1", "skill-2", "skill-3"}

    def test_return_to_map_drops_cursor(self, player):
        play_through(player, "skill-1", "lesson-1")
        model = player.return_to_map()

        assert model.state == PlayerState.AT_SKILL_MAP
        assert model.lesson_id is None
        assert player.cursor is None


class TestGameOver:
    def _unlock_long_lesson(self, player):
        player.snapshot.unlocked_skill_ids.add("skill-2")

    def test_five_misses_end_the_lesson(self, player):
        self._unlock_long_lesson(player)
        player.start_lesson("skill-2", "lesson-3")
        for _ in range(4):
            answer_wrongly(player)
            player.continue_()

        model = answer_wrongly(player)

        assert model.state == PlayerState.GAME_OVER
        assert model.lives == 0
        assert model.heading == "Game Over"
        assert model.message == "You've run out of lives!"
        assert "lesson-3" not in player.snapshot.completed_lesson_ids

    def test_game_over_on_last_exercise_beats_completion(self, player):
        player.config = PlayerConfig(starting_lives=1)
        player.start_lesson("skill-1", "lesson-2")

        model = answer_wrongly(player)

        assert model.state == PlayerState.GAME_OVER
        assert "lesson-2" not in player.snapshot.completed_lesson_ids

    def test_retry_keeps_score_and_resets_lives(self, player):
        self._unlock_long_lesson(player)
        player.start_lesson("skill-2", "lesson-3")
        answer_correctly(player)
        player.continue_()
        for _ in range(5):
            answer_wrongly(player)
            if player.state == PlayerState.IN_LESSON:
                player.continue_()
        assert player.state == PlayerState.GAME_OVER

        model = player.retry()

        assert model.state == PlayerState.IN_LESSON
        assert model.lesson_id == "lesson-3"
        assert model.exercise_index == 0
        assert model.lives == 5
        assert model.score == 10

    def test_mastery_is_kept_after_game_over(self, player):
        player.config = PlayerConfig(starting_lives=1)
        player.start_lesson("skill-1", "lesson-1")
        answer_wrongly(player)

        assert player.snapshot.score_for("ex-1") == -2

    def test_return_to_map_from_game_over(self, player):
        player.config = PlayerConfig(starting_lives=1)
        player.start_lesson("skill-1", "lesson-1")
        answer_wrongly(player)

        model = player.return_to_map()

        assert model.state == PlayerState.AT_SKILL_MAP

    def test_retry_only_from_game_over(self, player):
        with pytest.raises(InvalidTransitionError):
            player.retry()
        play_through(player, "skill-1", "lesson-1")
        with pytest.raises(InvalidTransitionError):
            player.retry()


class TestPractice:
    def _make_weak(self, player, *exercise_ids):
        for exercise_id in exercise_ids:
            player.snapshot.exercise_performance[exercise_id] = MasteryRecord(score=-2)

    def test_not_available_with_two_weak(self, player):
        self._make_weak(player, "ex-1", "ex-2")

        model = player.start_practice()

        assert model.practice_available is False
        assert model.state == PlayerState.AT_SKILL_MAP

    def test_practice_uses_weakest_exercises(self, player):
        self._make_weak(player, "ex-1", "ex-2", "ex-3")
        player.snapshot.exercise_performance["ex-2"] = MasteryRecord(score=-6)

        model = player.start_practice()

        assert model.state == PlayerState.IN_LESSON
        assert model.is_practice is True
        assert model.lesson_id == PRACTICE_LESSON_ID
        assert model.exercise_count == 3
        assert model.exercise.exercise_id == "ex-2"

    def test_practice_answers_do_not_touch_mastery(self, player, backend):
        self._make_weak(player, "ex-1", "ex-2", "ex-3")
        before = player.snapshot.model_copy(deep=True)

        player.start_practice()
        answer_wrongly(player)
        player.continue_()
        answer_correctly(player)

        assert player.snapshot == before
        assert backend.read(DEFAULT_PROGRESS_KEY) is None

    def test_practice_completion(self, player, backend):
        self._make_weak(player, "ex-1", "ex-2", "ex-3", "ex-4", "ex-5", "ex-6")
        before = player.snapshot.model_copy(deep=True)

        model = player.start_practice()
        assert model.exercise_count == 5
        while player.state == PlayerState.IN_LESSON:
            answer_correctly(player)
            model = player.continue_()

        assert model.state == PlayerState.LESSON_COMPLETE
        assert model.heading == "Practice Complete!"
        assert model.message == "Great job reviewing!"
        assert model.score == 50
        assert player.snapshot == before
        assert all(record.score == -2 for record in player.snapshot.exercise_performance.values())
        assert PRACTICE_LESSON_ID not in player.snapshot.completed_lesson_ids
        assert ProgressSnapshot.model_validate_json(backend.read(DEFAULT_PROGRESS_KEY)) == before

    def test_practice_retry_after_game_over(self, player):
        player.config = PlayerConfig(starting_lives=1)
        self._make_weak(player, "ex-1", "ex-2", "ex-3")
        player.start_practice()
        answer_wrongly(player)

        model = player.retry()

        assert model.is_practice is True
        assert model.exercise_index == 0


class TestScenarios:
    """End-to-end sequences through one player."""

    def test_weak_exercises_unlock_practice(self, player):
        player.snapshot.unlocked_skill_ids.add("skill-2")
        player.start_lesson("skill-2", "lesson-3")
        for _ in range(2):
            answer_wrongly(player)
            player.continue_()
        assert player.practice_available is False

        answer_wrongly(player)
        player.continue_()
        assert player.practice_available is True
        assert player.snapshot.score_for("ex-4") == -2

        for _ in range(4):
            answer_correctly(player)
            player.continue_()
        player.return_to_map()

        assert player.snapshot.completed_lesson_ids == {"lesson-3"}
        assert sorted(
            exercise_id for exercise_id, record in player.snapshot.exercise_performance.items() if record.score < 1
        ) == ["ex-4", "ex-5", "ex-6"]
        assert player.render().practice_available is True

    def test_replaying_lesson_is_idempotent_for_progress(self, player):
        play_through(player, "skill-1", "lesson-1")
        player.return_to_map()
        completed = set(player.snapshot.completed_lesson_ids)

        play_through(player, "skill-1", "lesson-1")

        assert player.snapshot.completed_lesson_ids == completed
        assert player.snapshot.score_for("ex-1") == 2

    def test_player_resumes_from_saved_progress(self, player, catalog, store):
        play_through(player, "skill-1", "lesson-1")
        player.return_to_map()

        resumed = LessonPlayer(catalog, store)

        assert resumed.snapshot.completed_lesson_ids == {"lesson-1"}
        assert resumed.open_skill("skill-1").lesson_id == "lesson-2"

    def test_explicit_snapshot_overrides_store(self, catalog, store):
        snapshot = ProgressSnapshot(unlocked_skill_ids={"skill-1", "skill-2"})

        player = LessonPlayer(catalog, store, snapshot=snapshot)

        assert player.open_skill("skill-2").lesson_id == "lesson-3"
