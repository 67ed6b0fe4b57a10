"""Progress persistence scheduler.

Decides when to push the observed playback position to the server:
- Periodic, non-forced saves while playing
- Forced saves on pause, lesson switch, backgrounding and screen exit

Non-forced saves are debounced against the last confirmed position. A failed
save is logged and dropped; ``last_persisted_seconds`` keeps its old value so
the next trigger retries naturally.
"""

import math
from typing import TYPE_CHECKING

import structlog

from lesson_tracker.client.http import ApiError
from lesson_tracker.client.schemas import SaveLessonProgressRequest
from lesson_tracker.core.tasks import BackgroundTasks, RepeatingTimer

from .cache import ProgressCache
from .models import PlaybackSession, is_completion_reached


if TYPE_CHECKING:
    from lesson_tracker.client.service import LessonProgressService
    from lesson_tracker.config.settings import Settings

logger = structlog.get_logger(__name__)


class SaveReason:
    """Labels for what triggered a save (logging only)."""

    PERIODIC = "periodic"
    PAUSE = "pause"
    LESSON_SWITCH = "lesson_switch"
    EXIT = "exit"
    BACKGROUND = "background"
    BLUR = "blur"


class ProgressScheduler:
    """Pushes session progress to the server when a trigger fires."""

    def __init__(
        self,
        session: PlaybackSession,
        service: "LessonProgressService",
        cache: ProgressCache,
        settings: "Settings",
        tasks: BackgroundTasks,
    ):
        self.session = session
        self.service = service
        self.cache = cache
        self.threshold = settings.completion_threshold
        self.min_delta = settings.save_min_delta_seconds
        self._tasks = tasks
        self._periodic = RepeatingTimer(
            settings.progress_save_interval,
            self._on_periodic_tick,
            name="progress_periodic_timer",
        )

    def build_request(self) -> SaveLessonProgressRequest:
        """Compute the save payload from the current session."""
        position = math.floor(self.session.current_time_seconds)
        duration = math.floor(self.session.duration_seconds)
        is_completed = self.session.is_completed or is_completion_reached(
            position, duration, self.threshold
        )
        return SaveLessonProgressRequest(
            watched_seconds=max(0, position),
            last_position=max(0, position),
            is_completed=is_completed,
        )

    async def save(self, force: bool = False, reason: str = SaveReason.PERIODIC) -> bool:
        """Persist the current position if policy allows.

        Args:
            force: Bypass the debounce threshold.
            reason: Trigger label for logs.

        Returns:
            True if a save call was made and succeeded.
        """
        session = self.session
        lesson_id = session.lesson_id
        if not lesson_id:
            return False

        position = math.floor(session.current_time_seconds)
        if position <= 0:
            return False

        if not force and abs(position - session.last_persisted_seconds) < self.min_delta:
            return False

        request = self.build_request()
        duration = math.floor(session.duration_seconds)
        generation = session.generation

        try:
            await self.service.save_lesson_progress(lesson_id, request)
        except ApiError as e:
            logger.warning(
                "progress_save_failed",
                lesson_id=lesson_id,
                reason=reason,
                position=position,
                status=e.status,
                error=e.message,
            )
            return False
        except Exception:
            logger.exception("progress_save_error", lesson_id=lesson_id, reason=reason)
            return False

        # The cache outlives the screen; the session only while on this lesson
        self.cache.record_save(lesson_id, position, duration, request.is_completed)
        if session.is_current(generation):
            session.last_persisted_seconds = position

        logger.debug(
            "progress_saved",
            lesson_id=lesson_id,
            reason=reason,
            position=position,
            forced=force,
        )
        return True

    async def save_periodic(self) -> bool:
        return await self.save(force=False, reason=SaveReason.PERIODIC)

    async def save_forced(self, reason: str) -> bool:
        return await self.save(force=True, reason=reason)

    def _on_periodic_tick(self) -> None:
        # Stopping the timer must not cancel a save already on the wire
        self._tasks.spawn(self.save_periodic(), name="progress_periodic_save")

    def start_periodic(self) -> None:
        """Start periodic saves (while playing)."""
        self._periodic.start()

    def stop_periodic(self) -> None:
        self._periodic.cancel()

    @property
    def is_periodic_running(self) -> bool:
        return self._periodic.is_running
