# Core infrastructure
from lesson_tracker.core.context import (
    PlaybackContext,
    clear_context,
    get_context,
    get_course_id,
    get_session_id,
    get_user_id,
    set_course_id,
    set_session_id,
    set_user_id,
)
from lesson_tracker.core.logging import configure_structlog, get_logger


__all__ = [
    "PlaybackContext",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_course_id",
    "get_logger",
    "get_session_id",
    "get_user_id",
    "set_course_id",
    "set_session_id",
    "set_user_id",
]
