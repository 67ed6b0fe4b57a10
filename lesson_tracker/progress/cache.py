"""Advisory local cache of lesson progress.

Feeds lesson lists (completion ticks, watched percentage) without waiting
for a refetch. The server stays authoritative; entries are replaced on
every fetch or successful save, except that completion never regresses.
"""

from typing import TYPE_CHECKING

import structlog

from lesson_tracker.client.http import ApiError

from .models import LessonProgress


if TYPE_CHECKING:
    from lesson_tracker.client.service import LessonProgressService

logger = structlog.get_logger(__name__)


class ProgressCache:
    """Lesson id to LessonProgress map with monotonic completion."""

    def __init__(self) -> None:
        self._entries: dict[str, LessonProgress] = {}

    def get(self, lesson_id: str) -> LessonProgress | None:
        return self._entries.get(lesson_id)

    def merge(self, progress: LessonProgress) -> LessonProgress:
        """Store ``progress``, keeping an earlier completion flag."""
        existing = self._entries.get(progress.lesson_id)
        merged = existing.merge(progress) if existing else progress
        if existing and existing.is_completed and not progress.is_completed:
            logger.debug("completion_regression_ignored", lesson_id=progress.lesson_id)
        self._entries[progress.lesson_id] = merged
        return merged

    def record_save(
        self,
        lesson_id: str,
        position: int,
        duration: int,
        is_completed: bool,
    ) -> LessonProgress:
        """Optimistically reflect a successful save."""
        return self.merge(
            LessonProgress(
                lesson_id=lesson_id,
                watched_seconds=position,
                total_seconds=duration,
                is_completed=is_completed,
                last_watched_position=position,
            )
        )

    def mark_completed(self, lesson_id: str) -> LessonProgress:
        """Flag a lesson as completed, creating the entry if needed."""
        entry = self._entries.get(lesson_id)
        if entry is None:
            entry = LessonProgress(lesson_id=lesson_id, is_completed=True)
            self._entries[lesson_id] = entry
        else:
            entry.is_completed = True
        return entry

    def is_completed(self, lesson_id: str) -> bool:
        entry = self._entries.get(lesson_id)
        return bool(entry and entry.is_completed)

    def percent_watched(self, lesson_id: str) -> int:
        entry = self._entries.get(lesson_id)
        return entry.percent_watched if entry else 0

    async def load_course(
        self, service: "LessonProgressService", course_id: str
    ) -> bool:
        """Fill the cache with every lesson's progress for a course.

        Returns:
            True if the fetch succeeded. Failures leave the cache untouched.
        """
        try:
            records = await service.get_course_lessons_progress(course_id)
        except ApiError as e:
            logger.warning(
                "course_progress_load_failed",
                course_id=course_id,
                status=e.status,
                error=e.message,
            )
            return False

        for record in records:
            if record.lesson_id:
                self.merge(LessonProgress.from_record(record))

        logger.debug("course_progress_loaded", course_id=course_id, lessons=len(records))
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, lesson_id: object) -> bool:
        return lesson_id in self._entries
