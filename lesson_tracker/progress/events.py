"""Tracker events for the host UI (toasts, list refresh, error banners)."""

from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog


logger = structlog.get_logger(__name__)


class TrackerEventName(str, Enum):
    """Events the tracker reports to its host."""

    RESUME_APPLIED = "resume_applied"  # position
    LESSON_COMPLETED = "lesson_completed"  # lesson_id
    COURSE_COMPLETED = "course_completed"  # course_id
    LESSON_CHANGED = "lesson_changed"  # lesson_id, index
    MEDIA_ERROR = "media_error"  # lesson_id, error


EventListener = Callable[[TrackerEventName, dict[str, Any]], None]


class TrackerEvents:
    """Synchronous fan-out to registered listeners.

    A failing listener is logged and skipped; it never breaks playback.
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register ``listener`` and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, name: TrackerEventName, **payload: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(name, payload)
            except Exception:
                logger.exception("tracker_listener_error", tracker_event=name.value)
