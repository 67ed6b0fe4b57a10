"""Tests for the resume resolver."""

import asyncio

import pytest

from lesson_tracker.client.http import ApiError
from lesson_tracker.client.schemas import LessonProgressRecord
from lesson_tracker.progress.events import TrackerEventName
from lesson_tracker.progress.models import LessonState
from lesson_tracker.progress.resume import ResumeResolver


@pytest.fixture
def resolver(session, mock_service, cache, player, settings, tasks, events):
    return ResumeResolver(session, mock_service, cache, player, settings, tasks, events)


def record(**kwargs) -> LessonProgressRecord:
    return LessonProgressRecord(**kwargs)


class TestResumeLoad:
    """Tests for fetching the resume target."""

    @pytest.mark.asyncio
    async def test_no_prior_progress(self, resolver, session, mock_service, player, tasks):
        mock_service.get_lesson_progress.return_value = None

        assert await resolver.load("lesson-1") == 0

        session.state = LessonState.READY
        resolver.on_ready()
        await tasks.join()

        assert player.seeks == []
        assert session.resume_target_seconds == 0

    @pytest.mark.asyncio
    async def test_saved_position_seeks_once(
        self, resolver, session, mock_service, player, tasks, events
    ):
        received = []
        events.subscribe(lambda name, payload: received.append((name, payload)))
        mock_service.get_lesson_progress.return_value = record(
            last_watched_position=42, total_seconds=300, is_completed=False
        )

        assert await resolver.load("lesson-1") == 42

        session.state = LessonState.READY
        resolver.on_ready()
        resolver.on_ready()
        await tasks.join()
        resolver.on_ready()
        await tasks.join()

        assert player.seeks == [42]
        assert session.has_applied_resume is True
        assert session.current_time_seconds == 42
        assert received == [
            (TrackerEventName.RESUME_APPLIED, {"lesson_id": "lesson-1", "position": 42})
        ]

    @pytest.mark.asyncio
    async def test_ready_before_fetch_returns(self, resolver, session, mock_service, player, tasks):
        mock_service.get_lesson_progress.return_value = record(last_watched_position=42)
        session.state = LessonState.READY

        await resolver.load("lesson-1")
        await tasks.join()

        assert player.seeks == [42]

    @pytest.mark.asyncio
    async def test_completed_lesson_starts_over(
        self, resolver, session, mock_service, player, cache, tasks
    ):
        mock_service.get_lesson_progress.return_value = record(
            last_watched_position=95, is_completed=True
        )

        assert await resolver.load("lesson-1") == 0

        assert session.is_completed is True
        assert cache.is_completed("lesson-1")

    @pytest.mark.asyncio
    async def test_fetch_failure_starts_at_zero(self, resolver, session, mock_service):
        mock_service.get_lesson_progress.side_effect = ApiError("down", status=0)

        assert await resolver.load("lesson-1") == 0
        assert session.resume_target_seconds == 0

    @pytest.mark.asyncio
    async def test_stale_fetch_ignored(self, resolver, session, mock_service, lessons):
        release = asyncio.Event()

        async def slow_fetch(lesson_id):
            await release.wait()
            return record(last_watched_position=42)

        mock_service.get_lesson_progress.side_effect = slow_fetch

        pending = asyncio.create_task(resolver.load("lesson-1"))
        await asyncio.sleep(0)
        session.reset_for_lesson(1, lessons[1])
        release.set()

        assert await pending == 0
        assert session.resume_target_seconds == 0


class TestResumeApply:
    """Tests for applying the seek."""

    @pytest.mark.asyncio
    async def test_seek_failure_left_unapplied(
        self, resolver, session, mock_service, player, tasks
    ):
        mock_service.get_lesson_progress.return_value = record(last_watched_position=42)
        await resolver.load("lesson-1")

        player.released = True
        session.state = LessonState.READY
        resolver.on_ready()
        await tasks.join()

        assert session.has_applied_resume is False

        player.released = False
        resolver.on_ready()
        await tasks.join()

        assert player.seeks == [42]
        assert session.has_applied_resume is True

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_seek(
        self, resolver, session, mock_service, player, settings, tasks
    ):
        mock_service.get_lesson_progress.return_value = record(last_watched_position=42)
        await resolver.load("lesson-1")

        session.state = LessonState.READY
        resolver.on_ready()
        resolver.cancel()
        await tasks.join()

        assert player.seeks == []

    @pytest.mark.asyncio
    async def test_seek_for_previous_lesson_dropped(
        self, resolver, session, mock_service, player, lessons, tasks
    ):
        mock_service.get_lesson_progress.return_value = record(last_watched_position=42)
        await resolver.load("lesson-1")

        session.state = LessonState.READY
        resolver.on_ready()
        session.reset_for_lesson(1, lessons[1])
        await tasks.join()

        assert player.seeks == []
