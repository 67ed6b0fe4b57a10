"""Pydantic schemas for the learning platform REST API.

Wire models for:
- Lessons as listed for a course
- Lesson progress records (read and save)
- Lesson completion acknowledgement
- Stream URL lookup

The backend speaks camelCase JSON; fields are snake_case in Python and
serialized by alias.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model for camelCase API payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ==============================================================================
# Lesson Schemas
# ==============================================================================


class Lesson(ApiModel):
    """A lesson of the course being played."""

    id: str = Field(..., description="Lesson identifier")
    title: str = ""
    description: str | None = None
    video_url: str | None = Field(None, description="Direct media URL, if any")
    duration_seconds: int | None = None
    is_free: bool = False
    is_completed: bool = Field(
        False, description="Completion flag as known when the lesson list was loaded"
    )


class StreamUrlResponse(ApiModel):
    """Stream URL lookup result."""

    url: str | None = None
    stream_url: str | None = None
    expires_at: str | None = None

    @property
    def resolved_url(self) -> str | None:
        """Return whichever URL field the backend filled."""
        return self.stream_url or self.url


# ==============================================================================
# Progress Schemas
# ==============================================================================


class LessonProgressRecord(ApiModel):
    """Server-held progress for one lesson."""

    lesson_id: str | None = None
    watched_seconds: int = Field(0, ge=0)
    total_seconds: int = Field(0, ge=0)
    last_watched_position: int = Field(0, ge=0)
    is_completed: bool = False


class SaveLessonProgressRequest(ApiModel):
    """Payload sent on every progress save."""

    watched_seconds: int = Field(..., ge=0)
    last_position: int = Field(..., ge=0)
    is_completed: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON body."""
        return self.model_dump(by_alias=True)


class CompletionAck(ApiModel):
    """Acknowledgement of an authoritative lesson completion."""

    lesson_id: str | None = None
    is_completed: bool = True
    completed_at: str | None = None
