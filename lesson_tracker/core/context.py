"""Playback context management using contextvars.

Each playback session gets a unique ID plus optional user/course information
that is attached to every log event emitted while the session runs. asyncio
tasks copy the context at creation, so timers and background saves spawned
inside a session keep logging with its identifiers.
"""

from contextvars import ContextVar
from typing import Any
from uuid import UUID, uuid4


# Context variables for session tracking
session_id_var: ContextVar[str] = ContextVar("session_id", default="")
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)
course_id_var: ContextVar[str | None] = ContextVar("course_id", default=None)


def generate_session_id() -> str:
    """Generate a new unique session ID."""
    return str(uuid4())


def get_session_id() -> str:
    """Get the current session ID."""
    return session_id_var.get()


def set_session_id(session_id: str | None = None) -> str:
    """Set the session ID for the current context.

    Args:
        session_id: Optional session ID. If not provided, generates a new one.

    Returns:
        The session ID that was set.
    """
    sid = session_id or generate_session_id()
    session_id_var.set(sid)
    return sid


def get_user_id() -> str | None:
    """Get the current user ID."""
    return user_id_var.get()


def set_user_id(user_id: str | UUID | None) -> None:
    """Set the user ID for the current context."""
    if user_id is not None:
        user_id_var.set(str(user_id))
    else:
        user_id_var.set(None)


def get_course_id() -> str | None:
    """Get the current course ID."""
    return course_id_var.get()


def set_course_id(course_id: str | UUID | None) -> None:
    """Set the course ID for the current context."""
    if course_id is not None:
        course_id_var.set(str(course_id))
    else:
        course_id_var.set(None)


def get_context() -> dict[str, Any]:
    """Get all context variables as a dictionary.

    Returns:
        Dictionary with session_id, user_id and course_id when set.
    """
    context: dict[str, Any] = {}

    session_id = get_session_id()
    if session_id:
        context["session_id"] = session_id

    user_id = get_user_id()
    if user_id:
        context["user_id"] = user_id

    course_id = get_course_id()
    if course_id:
        context["course_id"] = course_id

    return context


def clear_context() -> None:
    """Clear all context variables."""
    session_id_var.set("")
    user_id_var.set(None)
    course_id_var.set(None)


class PlaybackContext:
    """Context manager for a playback session scope.

    Usage:
        with PlaybackContext(course_id="..."):
            tracker = LessonProgressTracker(...)
            await tracker.mount()
    """

    def __init__(
        self,
        session_id: str | None = None,
        user_id: str | UUID | None = None,
        course_id: str | UUID | None = None,
    ) -> None:
        self.session_id = session_id
        self.user_id = user_id
        self.course_id = course_id
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "PlaybackContext":
        """Enter context and set variables."""
        self._tokens["session_id"] = session_id_var.set(
            self.session_id or generate_session_id()
        )

        if self.user_id is not None:
            self._tokens["user_id"] = user_id_var.set(str(self.user_id))

        if self.course_id is not None:
            self._tokens["course_id"] = course_id_var.set(str(self.course_id))

        return self

    def __exit__(self, *_: object) -> None:
        """Exit context and restore previous values."""
        for var_name, token in self._tokens.items():
            if var_name == "session_id":
                session_id_var.reset(token)
            elif var_name == "user_id":
                user_id_var.reset(token)
            elif var_name == "course_id":
                course_id_var.reset(token)
