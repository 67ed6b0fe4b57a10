"""Lesson progress tracking.

Provides:
- Progress data model and the shared playback session
- Advisory local progress cache
- Persistence scheduling with debounce and forced saves
- Resume on lesson load
- Completion detection with auto-advance
"""

from .cache import ProgressCache
from .completion import CompletionDetector
from .events import TrackerEventName, TrackerEvents
from .models import (
    COMPLETION_THRESHOLD,
    LessonProgress,
    LessonState,
    PlaybackSession,
    can_transition,
    completion_ratio,
    is_completion_reached,
)
from .resume import ResumeResolver
from .scheduler import ProgressScheduler, SaveReason


__all__ = [
    "COMPLETION_THRESHOLD",
    "CompletionDetector",
    "LessonProgress",
    "LessonState",
    "PlaybackSession",
    "ProgressCache",
    "ProgressScheduler",
    "ResumeResolver",
    "SaveReason",
    "TrackerEventName",
    "TrackerEvents",
    "can_transition",
    "completion_ratio",
    "is_completion_reached",
]
