"""Learning platform REST client.

Provides:
- Async HTTP client with bearer auth and envelope unwrapping
- Wire schemas for lessons and progress records
- Remote lesson progress operations
"""

from .http import ApiClient, ApiError, TokenProvider, unwrap_envelope
from .schemas import (
    CompletionAck,
    Lesson,
    LessonProgressRecord,
    SaveLessonProgressRequest,
    StreamUrlResponse,
)
from .service import LessonProgressService


__all__ = [
    "ApiClient",
    "ApiError",
    "CompletionAck",
    "Lesson",
    "LessonProgressRecord",
    "LessonProgressService",
    "SaveLessonProgressRequest",
    "StreamUrlResponse",
    "TokenProvider",
    "unwrap_envelope",
]
