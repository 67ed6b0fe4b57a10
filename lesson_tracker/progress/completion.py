"""Completion detector.

Watches every playback sample for the completion threshold. The first
crossing for a lesson sends the authoritative mark-complete signal and,
after a short delay, advances to the next lesson or reports the course as
finished.
"""

from typing import TYPE_CHECKING

import structlog

from lesson_tracker.client.http import ApiError
from lesson_tracker.core.tasks import BackgroundTasks, OneShotTimer

from .cache import ProgressCache
from .events import TrackerEventName, TrackerEvents
from .models import LessonState, PlaybackSession, is_completion_reached


if TYPE_CHECKING:
    from lesson_tracker.client.service import LessonProgressService
    from lesson_tracker.config.settings import Settings
    from lesson_tracker.player.observer import PlaybackSample
    from lesson_tracker.player.sequencer import LessonSequencer

logger = structlog.get_logger(__name__)


class CompletionDetector:
    """Fires mark-complete once per lesson and drives auto-advance."""

    def __init__(
        self,
        session: PlaybackSession,
        service: "LessonProgressService",
        cache: ProgressCache,
        sequencer: "LessonSequencer",
        settings: "Settings",
        tasks: BackgroundTasks,
        events: TrackerEvents,
    ):
        self.session = session
        self.service = service
        self.cache = cache
        self.sequencer = sequencer
        self.events = events
        self.threshold = settings.completion_threshold
        self._tasks = tasks
        self._advance_timer = OneShotTimer(
            settings.auto_advance_delay,
            self._advance,
            name="auto_advance",
            tasks=tasks,
        )
        self._advance_generation: int | None = None

    def check(self, sample: "PlaybackSample") -> bool:
        """Inspect one sample; returns True if it triggered completion."""
        session = self.session
        lesson_id = session.lesson_id
        if not lesson_id or session.is_completed or session.completion_triggered:
            return False
        if not is_completion_reached(sample.current_time, sample.duration, self.threshold):
            return False

        # Guard first: every later tick above the threshold is a no-op
        session.completion_triggered = True
        logger.info(
            "lesson_completion_reached",
            lesson_id=lesson_id,
            position=sample.current_time,
            duration=sample.duration,
        )
        self._tasks.spawn(
            self._complete(lesson_id, session.generation),
            name="mark_lesson_complete",
        )
        return True

    async def _complete(self, lesson_id: str, generation: int) -> None:
        try:
            await self.service.mark_lesson_complete(lesson_id)
        except ApiError as e:
            logger.warning(
                "mark_complete_failed",
                lesson_id=lesson_id,
                status=e.status,
                error=e.message,
            )
            return
        except Exception:
            logger.exception("mark_complete_error", lesson_id=lesson_id)
            return

        self.cache.mark_completed(lesson_id)

        session = self.session
        if not session.is_current(generation):
            return

        session.is_completed = True
        session.transition(LessonState.COMPLETED)
        self.events.emit(TrackerEventName.LESSON_COMPLETED, lesson_id=lesson_id)

        self._advance_generation = generation
        self._advance_timer.start()

    async def _advance(self) -> None:
        session = self.session
        if self._advance_generation is None or not session.is_current(
            self._advance_generation
        ):
            return
        self._advance_generation = None

        if self.sequencer.has_next:
            logger.info("auto_advance", from_index=session.current_lesson_index)
            await self.sequencer.next()
            return

        session.transition(LessonState.ENDED)
        logger.info("course_completed", course_id=session.course_id)
        self.events.emit(TrackerEventName.COURSE_COMPLETED, course_id=session.course_id)

    def cancel(self) -> None:
        """Drop a pending auto-advance (lesson switch, unmount)."""
        self._advance_timer.cancel()
        self._advance_generation = None
