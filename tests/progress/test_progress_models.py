"""Tests for the progress data model.

Tests cover:
- Completion threshold helpers
- LessonProgress resume position and merge
- PlaybackSession reset, generations and state transitions
"""

import pytest

from lesson_tracker.client.schemas import Lesson, LessonProgressRecord
from lesson_tracker.progress.models import (
    COMPLETION_THRESHOLD,
    LessonProgress,
    LessonState,
    PlaybackSession,
    can_transition,
    completion_ratio,
    is_completion_reached,
)


class TestCompletionHelpers:
    """Tests for the completion threshold helpers."""

    def test_threshold_value(self):
        assert COMPLETION_THRESHOLD == 0.9

    @pytest.mark.parametrize(
        ("position", "duration", "expected"),
        [
            (89, 100, False),
            (90, 100, True),
            (100, 100, True),
            (50, 0, False),
        ],
    )
    def test_is_completion_reached(self, position, duration, expected):
        assert is_completion_reached(position, duration) is expected

    def test_ratio_unknown_duration(self):
        assert completion_ratio(10, 0) == 0.0


class TestLessonProgress:
    """Tests for LessonProgress."""

    def test_resume_position(self):
        progress = LessonProgress("l1", watched_seconds=40, last_watched_position=38)
        assert progress.resume_position == 38

    def test_completed_lesson_resumes_from_start(self):
        progress = LessonProgress("l1", last_watched_position=95, is_completed=True)
        assert progress.resume_position == 0

    def test_negative_values_clamped(self):
        progress = LessonProgress("l1", watched_seconds=-5, last_watched_position=-1)
        assert progress.watched_seconds == 0
        assert progress.resume_position == 0

    def test_percent_watched(self):
        assert LessonProgress("l1", watched_seconds=25, total_seconds=100).percent_watched == 25
        assert LessonProgress("l1", watched_seconds=150, total_seconds=100).percent_watched == 100
        assert LessonProgress("l1", watched_seconds=25).percent_watched == 0

    def test_merge_keeps_completion(self):
        old = LessonProgress("l1", watched_seconds=95, total_seconds=100, is_completed=True)
        newer = LessonProgress("l1", watched_seconds=10, is_completed=False)

        merged = old.merge(newer)

        assert merged.is_completed is True
        assert merged.watched_seconds == 10
        assert merged.total_seconds == 100

    def test_from_record(self):
        record = LessonProgressRecord(
            lesson_id="l1", watched_seconds=40, total_seconds=100, last_watched_position=40
        )
        progress = LessonProgress.from_record(record)
        assert progress.lesson_id == "l1"
        assert progress.resume_position == 40

    def test_from_record_lesson_id_override(self):
        progress = LessonProgress.from_record(LessonProgressRecord(), lesson_id="l9")
        assert progress.lesson_id == "l9"


class TestLessonStateTransitions:
    """Tests for the lesson state machine."""

    def test_happy_path(self):
        assert can_transition(LessonState.IDLE, LessonState.LOADING)
        assert can_transition(LessonState.LOADING, LessonState.READY)
        assert can_transition(LessonState.READY, LessonState.PLAYING)
        assert can_transition(LessonState.PLAYING, LessonState.PAUSED)
        assert can_transition(LessonState.PAUSED, LessonState.COMPLETED)
        assert can_transition(LessonState.COMPLETED, LessonState.ENDED)

    def test_any_state_back_to_idle(self):
        for state in LessonState:
            if state != LessonState.IDLE:
                assert can_transition(state, LessonState.IDLE)

    def test_invalid(self):
        assert not can_transition(LessonState.IDLE, LessonState.PLAYING)
        assert not can_transition(LessonState.COMPLETED, LessonState.PLAYING)
        assert not can_transition(LessonState.ENDED, LessonState.PLAYING)


class TestPlaybackSession:
    """Tests for PlaybackSession."""

    def test_reset_for_lesson(self):
        session = PlaybackSession()
        session.current_time_seconds = 50
        session.last_persisted_seconds = 45
        session.has_applied_resume = True
        session.completion_triggered = True
        session.state = LessonState.PLAYING

        generation = session.reset_for_lesson(1, Lesson(id="l2", is_completed=True))

        assert generation == 1
        assert session.lesson_id == "l2"
        assert session.current_lesson_index == 1
        assert session.current_time_seconds == 0
        assert session.last_persisted_seconds == 0
        assert session.has_applied_resume is False
        assert session.completion_triggered is False
        assert session.is_completed is True
        assert session.state == LessonState.IDLE

    def test_generation_guard(self):
        session = PlaybackSession()
        generation = session.reset_for_lesson(0, Lesson(id="l1"))

        assert session.is_current(generation)
        session.reset_for_lesson(1, Lesson(id="l2"))
        assert not session.is_current(generation)

    def test_dead_session_is_never_current(self):
        session = PlaybackSession()
        generation = session.reset_for_lesson(0, Lesson(id="l1"))
        session.alive = False
        assert not session.is_current(generation)

    def test_transition(self):
        session = PlaybackSession()
        assert session.transition(LessonState.LOADING) is True
        assert session.transition(LessonState.LOADING) is False
        assert session.transition(LessonState.COMPLETED) is False
        assert session.state == LessonState.LOADING

    def test_no_lesson(self):
        assert PlaybackSession().lesson_id is None
