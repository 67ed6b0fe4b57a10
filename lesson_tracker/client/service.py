"""Remote lesson progress operations.

Wraps the REST endpoints the tracker consumes:
- Read a lesson's saved progress
- Save progress for a lesson
- Read progress for every lesson of a course
- Authoritatively mark a lesson complete
- Resolve a lesson's stream URL
"""

from typing import Any

import structlog

from .http import ApiClient, ApiError
from .schemas import (
    CompletionAck,
    LessonProgressRecord,
    SaveLessonProgressRequest,
    StreamUrlResponse,
)


logger = structlog.get_logger(__name__)


# ==============================================================================
# Endpoints
# ==============================================================================


def lesson_progress_path(lesson_id: str) -> str:
    return f"/lessons/{lesson_id}/progress"


def course_lessons_progress_path(course_id: str) -> str:
    return f"/lessons/course/{course_id}/progress"


def lesson_complete_path(lesson_id: str) -> str:
    return f"/lessons/{lesson_id}/complete"


def lesson_stream_url_path(lesson_id: str) -> str:
    return f"/lessons/{lesson_id}/stream-url"


# ==============================================================================
# Service
# ==============================================================================


class LessonProgressService:
    """Remote progress operations for one authenticated user."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_lesson_progress(self, lesson_id: str) -> LessonProgressRecord | None:
        """Fetch saved progress for a lesson.

        Returns:
            The progress record, or None when the lesson has never been
            watched (404 or empty data).

        Raises:
            ApiError: On any other failure.
        """
        try:
            data = await self.client.get(lesson_progress_path(lesson_id))
        except ApiError as e:
            if e.is_not_found:
                return None
            raise

        if not data:
            return None

        record = LessonProgressRecord.model_validate(data)
        if record.lesson_id is None:
            record.lesson_id = lesson_id
        return record

    async def save_lesson_progress(
        self,
        lesson_id: str,
        progress: SaveLessonProgressRequest,
    ) -> LessonProgressRecord | None:
        """Save progress for a lesson and return the updated record, if sent back."""
        data = await self.client.post(
            lesson_progress_path(lesson_id), json=progress.to_payload()
        )

        logger.debug(
            "lesson_progress_saved",
            lesson_id=lesson_id,
            watched_seconds=progress.watched_seconds,
            is_completed=progress.is_completed,
        )

        if not isinstance(data, dict):
            return None
        record = LessonProgressRecord.model_validate(data)
        if record.lesson_id is None:
            record.lesson_id = lesson_id
        return record

    async def get_course_lessons_progress(
        self, course_id: str
    ) -> list[LessonProgressRecord]:
        """Fetch progress records for every lesson of a course."""
        data = await self.client.get(course_lessons_progress_path(course_id))
        items: list[Any]
        if isinstance(data, list):
            items = data
        elif isinstance(data, dict):
            items = data.get("items") or []
        else:
            items = []
        return [LessonProgressRecord.model_validate(item) for item in items]

    async def mark_lesson_complete(self, lesson_id: str) -> CompletionAck:
        """Send the authoritative completion signal for a lesson."""
        data = await self.client.post(lesson_complete_path(lesson_id))

        logger.info("lesson_marked_complete", lesson_id=lesson_id)

        if isinstance(data, dict):
            ack = CompletionAck.model_validate(data)
            if ack.lesson_id is None:
                ack.lesson_id = lesson_id
            return ack
        return CompletionAck(lesson_id=lesson_id)

    async def get_lesson_stream_url(self, lesson_id: str) -> str | None:
        """Resolve the stream URL for a lesson without a direct video URL."""
        data = await self.client.get(lesson_stream_url_path(lesson_id))
        if isinstance(data, str):
            return data or None
        if isinstance(data, dict):
            return StreamUrlResponse.model_validate(data).resolved_url
        return None
