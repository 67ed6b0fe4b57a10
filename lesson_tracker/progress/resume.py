"""Resume resolver.

On lesson load, fetches the saved position and seeks the player to it once
the media is ready. The seek is delayed slightly so it does not race the
player's own initial seek/autoplay, and it is applied at most once per
lesson load no matter how many ready notifications arrive.
"""

from typing import TYPE_CHECKING

import structlog

from lesson_tracker.client.http import ApiError
from lesson_tracker.core.tasks import BackgroundTasks, OneShotTimer

from .cache import ProgressCache
from .events import TrackerEventName, TrackerEvents
from .models import LessonProgress, LessonState, PlaybackSession


if TYPE_CHECKING:
    from lesson_tracker.client.service import LessonProgressService
    from lesson_tracker.config.settings import Settings
    from lesson_tracker.player.protocols import MediaPlayer

logger = structlog.get_logger(__name__)

# States in which the player has reported readyToPlay for the current source
_MEDIA_READY_STATES = frozenset(
    {LessonState.READY, LessonState.PLAYING, LessonState.PAUSED}
)


class ResumeResolver:
    """Fetches and applies the resume target of the current lesson."""

    def __init__(
        self,
        session: PlaybackSession,
        service: "LessonProgressService",
        cache: ProgressCache,
        player: "MediaPlayer",
        settings: "Settings",
        tasks: BackgroundTasks,
        events: TrackerEvents,
    ):
        self.session = session
        self.service = service
        self.cache = cache
        self.player = player
        self.events = events
        self._seek_timer = OneShotTimer(
            settings.resume_seek_delay,
            self._apply,
            name="resume_seek",
            tasks=tasks,
        )
        self._seek_generation: int | None = None

    async def load(self, lesson_id: str) -> int:
        """Resolve the resume target for a freshly loaded lesson.

        Returns:
            The pending resume position, 0 when playback starts from the top.
        """
        session = self.session
        generation = session.generation

        self.cancel()
        session.has_applied_resume = False
        session.resume_target_seconds = 0

        try:
            record = await self.service.get_lesson_progress(lesson_id)
        except ApiError as e:
            logger.info(
                "resume_fetch_failed",
                lesson_id=lesson_id,
                status=e.status,
                error=e.message,
            )
            return 0
        except Exception:
            logger.exception("resume_fetch_error", lesson_id=lesson_id)
            return 0

        if not session.is_current(generation):
            logger.debug("resume_fetch_stale", lesson_id=lesson_id)
            return 0

        if record is None:
            logger.debug("resume_no_saved_progress", lesson_id=lesson_id)
            return 0

        progress = self.cache.merge(LessonProgress.from_record(record, lesson_id))
        if progress.is_completed:
            session.is_completed = True

        target = progress.resume_position
        if target <= 0:
            return 0

        session.resume_target_seconds = target
        logger.debug("resume_target_set", lesson_id=lesson_id, position=target)

        # Player got ready before the fetch returned
        if session.state in _MEDIA_READY_STATES:
            self.on_ready()

        return target

    def on_ready(self) -> None:
        """Schedule the resume seek after the player reports readyToPlay."""
        session = self.session
        if (
            session.resume_target_seconds <= 0
            or session.has_applied_resume
            or self._seek_timer.is_pending
        ):
            return
        self._seek_generation = session.generation
        self._seek_timer.start()

    def _apply(self) -> None:
        session = self.session
        if (
            self._seek_generation is None
            or not session.is_current(self._seek_generation)
            or session.has_applied_resume
        ):
            return

        target = session.resume_target_seconds
        try:
            self.player.seek_to(target)
        except Exception as e:
            # Left unapplied, the next ready notification tries again
            logger.warning(
                "resume_seek_failed",
                lesson_id=session.lesson_id,
                position=target,
                error=str(e),
            )
            return

        session.has_applied_resume = True
        session.current_time_seconds = float(target)
        logger.info("resume_applied", lesson_id=session.lesson_id, position=target)
        self.events.emit(
            TrackerEventName.RESUME_APPLIED,
            lesson_id=session.lesson_id,
            position=target,
        )

    def cancel(self) -> None:
        """Drop a scheduled seek (lesson switch, unmount)."""
        self._seek_timer.cancel()
        self._seek_generation = None
