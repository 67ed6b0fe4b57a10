"""Shared fixtures: a scriptable media player, test settings and a mocked service."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from lesson_tracker.client.schemas import CompletionAck, Lesson
from lesson_tracker.client.service import LessonProgressService
from lesson_tracker.config.settings import Settings
from lesson_tracker.core.tasks import BackgroundTasks
from lesson_tracker.player.protocols import PlayerEvent, PlayerStatus
from lesson_tracker.progress.cache import ProgressCache
from lesson_tracker.progress.events import TrackerEvents
from lesson_tracker.progress.models import LessonState, PlaybackSession


class FakePlayer:
    """In-memory MediaPlayer. Tests drive it like the native player would."""

    def __init__(self, duration: float = 100.0):
        self._current_time = 0.0
        self.duration = duration
        self.playing = False
        self.status = PlayerStatus.IDLE
        self.playback_rate = 1.0
        self.sources: list[str] = []
        self.seeks: list[float] = []
        self.released = False
        self._subscribers: dict[PlayerEvent, list[Callable[[Any], None]]] = {}

    def _check(self) -> None:
        if self.released:
            raise RuntimeError("player released")

    @property
    def current_time(self) -> float:
        self._check()
        return self._current_time

    @current_time.setter
    def current_time(self, value: float) -> None:
        self._current_time = value

    def play(self) -> None:
        self._check()
        if not self.playing:
            self.playing = True
            self.emit(PlayerEvent.PLAYING_CHANGE, True)

    def pause(self) -> None:
        self._check()
        if self.playing:
            self.playing = False
            self.emit(PlayerEvent.PLAYING_CHANGE, False)

    def seek_to(self, seconds: float) -> None:
        self._check()
        self.seeks.append(seconds)
        self._current_time = seconds

    def seek_by(self, delta: float) -> None:
        self.seek_to(max(0.0, min(self._current_time + delta, self.duration)))

    def replace(self, source_url: str) -> None:
        self._check()
        self.sources.append(source_url)
        self._current_time = 0.0
        self.status = PlayerStatus.LOADING

    def subscribe(
        self, event: PlayerEvent, callback: Callable[[Any], None]
    ) -> Callable[[], None]:
        self._subscribers.setdefault(event, []).append(callback)

        def unsubscribe() -> None:
            self._subscribers[event].remove(callback)

        return unsubscribe

    def emit(self, event: PlayerEvent, value: Any) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(value)

    def set_status(self, status: PlayerStatus) -> None:
        self.status = status
        self.emit(PlayerEvent.STATUS_CHANGE, status)

    def subscriber_count(self, event: PlayerEvent) -> int:
        return len(self._subscribers.get(event, []))


@pytest.fixture
def settings() -> Settings:
    """Settings with zero delays and timers too slow to fire on their own."""
    return Settings(
        environment="testing",
        sample_interval=60.0,
        progress_save_interval=60.0,
        controls_hide_delay=60.0,
        resume_seek_delay=0.0,
        auto_advance_delay=0.0,
    )


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer(duration=100.0)


@pytest.fixture
def lessons() -> list[Lesson]:
    return [
        Lesson(id="lesson-1", title="Intro", video_url="https://cdn.example.com/l1.mp4"),
        Lesson(id="lesson-2", title="Basics", video_url="https://cdn.example.com/l2.mp4"),
        Lesson(id="lesson-3", title="Wrap-up", video_url="https://cdn.example.com/l3.mp4"),
    ]


@pytest.fixture
def mock_service() -> MagicMock:
    """LessonProgressService with every remote call mocked."""
    service = MagicMock(spec=LessonProgressService)
    service.get_lesson_progress = AsyncMock(return_value=None)
    service.save_lesson_progress = AsyncMock(return_value=None)
    service.get_course_lessons_progress = AsyncMock(return_value=[])
    service.mark_lesson_complete = AsyncMock(
        side_effect=lambda lesson_id: CompletionAck(lesson_id=lesson_id)
    )
    service.get_lesson_stream_url = AsyncMock(return_value=None)
    return service


@pytest.fixture
def session(lessons) -> PlaybackSession:
    """Session with the first lesson handed to the player."""
    session = PlaybackSession(lessons=list(lessons), course_id="course-1")
    session.reset_for_lesson(0, lessons[0])
    session.transition(LessonState.LOADING)
    return session


@pytest.fixture
def cache() -> ProgressCache:
    return ProgressCache()


@pytest.fixture
def events() -> TrackerEvents:
    return TrackerEvents()


@pytest.fixture
def tasks() -> BackgroundTasks:
    return BackgroundTasks()
