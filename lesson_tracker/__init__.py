"""Lesson progress tracking for a video course player."""

from lesson_tracker.client import ApiClient, ApiError, Lesson, LessonProgressService
from lesson_tracker.config import Settings, get_settings
from lesson_tracker.player import AppState, LessonProgressTracker, MediaPlayer
from lesson_tracker.progress import LessonState, TrackerEventName


__version__ = "0.1.0"

__all__ = [
    "ApiClient",
    "ApiError",
    "AppState",
    "Lesson",
    "LessonProgressService",
    "LessonProgressTracker",
    "LessonState",
    "MediaPlayer",
    "Settings",
    "TrackerEventName",
    "get_settings",
]
