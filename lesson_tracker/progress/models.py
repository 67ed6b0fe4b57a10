"""Data model for lesson progress tracking.

Two kinds of state live here:
- LessonProgress: a cached, eventually-consistent view of the server-held
  progress record of one lesson
- PlaybackSession: the transient state of one player screen, shared by
  reference among every component so timers and callbacks always read the
  latest values
"""

from dataclasses import dataclass, field
from enum import Enum

from lesson_tracker.client.schemas import Lesson, LessonProgressRecord


# Completion threshold: 90% watched = complete
COMPLETION_THRESHOLD = 0.9


class LessonState(str, Enum):
    """Playback state of the lesson slot."""

    IDLE = "idle"  # No source loaded
    LOADING = "loading"  # Source swapped, waiting for the player
    READY = "ready"  # Media loaded, not started
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"  # Crossed the completion threshold
    ENDED = "ended"  # Last lesson of the course completed
    ERROR = "error"  # Media failed to load


_TRANSITIONS: dict[LessonState, frozenset[LessonState]] = {
    LessonState.IDLE: frozenset(
        {LessonState.LOADING, LessonState.READY, LessonState.ERROR}
    ),
    LessonState.LOADING: frozenset({LessonState.READY, LessonState.ERROR}),
    LessonState.READY: frozenset(
        {
            LessonState.PLAYING,
            LessonState.PAUSED,
            LessonState.LOADING,
            LessonState.ERROR,
        }
    ),
    LessonState.PLAYING: frozenset(
        {
            LessonState.PAUSED,
            LessonState.COMPLETED,
            LessonState.LOADING,
            LessonState.ERROR,
        }
    ),
    LessonState.PAUSED: frozenset(
        {
            LessonState.PLAYING,
            LessonState.COMPLETED,
            LessonState.LOADING,
            LessonState.ERROR,
        }
    ),
    LessonState.COMPLETED: frozenset(
        {LessonState.ENDED, LessonState.LOADING, LessonState.ERROR}
    ),
    LessonState.ENDED: frozenset({LessonState.LOADING}),
    LessonState.ERROR: frozenset({LessonState.LOADING, LessonState.READY}),
}


def can_transition(current: LessonState, target: LessonState) -> bool:
    """Check whether the lesson slot may move from ``current`` to ``target``.

    Any state may drop back to IDLE when the source is swapped.
    """
    if target == LessonState.IDLE:
        return current != LessonState.IDLE
    return target in _TRANSITIONS[current]


def completion_ratio(position: float, duration: float) -> float:
    """Fraction of the media watched, 0 when the duration is unknown."""
    if duration <= 0:
        return 0.0
    return position / duration


def is_completion_reached(
    position: float,
    duration: float,
    threshold: float = COMPLETION_THRESHOLD,
) -> bool:
    """Check if ``position`` crosses the completion threshold."""
    return duration > 0 and completion_ratio(position, duration) >= threshold


# ==============================================================================
# Entity Classes
# ==============================================================================


class LessonProgress:
    """Progress of one lesson as known locally.

    Attributes:
        lesson_id: Lesson identifier
        watched_seconds: Most recent playback position observed
        total_seconds: Media duration (0 if unknown)
        is_completed: Completion flag (monotonic once true)
        last_watched_position: Resume point at last explicit save
    """

    def __init__(
        self,
        lesson_id: str,
        watched_seconds: int = 0,
        total_seconds: int = 0,
        is_completed: bool = False,
        last_watched_position: int = 0,
    ):
        self.lesson_id = lesson_id
        self.watched_seconds = max(0, watched_seconds)
        self.total_seconds = max(0, total_seconds)
        self.is_completed = is_completed
        self.last_watched_position = max(0, last_watched_position)

    @property
    def percent_watched(self) -> int:
        """Whole-number percentage watched, for lesson lists."""
        if self.total_seconds <= 0:
            return 0
        return min(100, round(self.watched_seconds / self.total_seconds * 100))

    @property
    def resume_position(self) -> int:
        """Position to resume from, 0 when the lesson is finished or unwatched."""
        if self.is_completed:
            return 0
        return self.last_watched_position

    def merge(self, newer: "LessonProgress") -> "LessonProgress":
        """Combine with a newer view of the same lesson.

        Positions come from ``newer``; completion is OR-ed so a regressed
        server flag never un-completes a lesson.
        """
        return LessonProgress(
            lesson_id=self.lesson_id,
            watched_seconds=newer.watched_seconds,
            total_seconds=newer.total_seconds or self.total_seconds,
            is_completed=self.is_completed or newer.is_completed,
            last_watched_position=newer.last_watched_position,
        )

    @classmethod
    def from_record(
        cls, record: LessonProgressRecord, lesson_id: str | None = None
    ) -> "LessonProgress":
        """Create from a REST progress record."""
        return cls(
            lesson_id=lesson_id or record.lesson_id or "",
            watched_seconds=record.watched_seconds,
            total_seconds=record.total_seconds,
            is_completed=record.is_completed,
            last_watched_position=record.last_watched_position,
        )

    def __repr__(self) -> str:
        return (
            f"LessonProgress(lesson_id={self.lesson_id!r}, "
            f"watched_seconds={self.watched_seconds}, "
            f"total_seconds={self.total_seconds}, "
            f"is_completed={self.is_completed})"
        )


@dataclass
class PlaybackSession:
    """Transient state of one player screen.

    Created when a lesson is opened, mutated by the observer and the
    sequencer, discarded on unmount. ``generation`` increases on every
    lesson load; async results tagged with an older generation are stale.
    """

    lessons: list[Lesson] = field(default_factory=list)
    course_id: str | None = None
    current_lesson_index: int = 0
    current_lesson: Lesson | None = None

    # Mirror of player state
    current_time_seconds: float = 0.0
    duration_seconds: float = 0.0
    is_playing: bool = False

    # Persistence
    last_persisted_seconds: int = 0

    # Resume
    resume_target_seconds: int = 0
    has_applied_resume: bool = False

    # Completion
    is_completed: bool = False
    completion_triggered: bool = False

    state: LessonState = LessonState.IDLE
    error: str | None = None
    generation: int = 0
    alive: bool = True

    @property
    def lesson_id(self) -> str | None:
        """ID of the lesson currently loaded."""
        return self.current_lesson.id if self.current_lesson else None

    def reset_for_lesson(self, index: int, lesson: Lesson) -> int:
        """Reset every transient field for a newly loaded lesson.

        The slot drops to IDLE until the new source is handed to the player;
        player readings taken meanwhile still belong to the previous media.

        Returns:
            The new generation number.
        """
        self.current_lesson_index = index
        self.current_lesson = lesson
        self.current_time_seconds = 0.0
        self.duration_seconds = 0.0
        self.last_persisted_seconds = 0
        self.resume_target_seconds = 0
        self.has_applied_resume = False
        self.is_completed = lesson.is_completed
        self.completion_triggered = False
        self.error = None
        self.transition(LessonState.IDLE)
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        """Check that the session is alive and still on ``generation``."""
        return self.alive and self.generation == generation

    def transition(self, target: LessonState) -> bool:
        """Move to ``target`` if allowed.

        Returns:
            True if the state changed.
        """
        if self.state == target or not can_transition(self.state, target):
            return False
        self.state = target
        return True
