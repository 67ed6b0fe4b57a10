"""Lesson sequencer.

Owns the ordered lessons of the course and the index currently loaded.
Every switch force-saves the outgoing lesson, resets the transient session
state, then hands the new lesson to the load handler (source swap + resume).
"""

from collections.abc import Awaitable, Callable

import structlog

from lesson_tracker.client.schemas import Lesson
from lesson_tracker.core.exceptions import TrackerError
from lesson_tracker.progress.models import PlaybackSession
from lesson_tracker.progress.scheduler import ProgressScheduler, SaveReason


logger = structlog.get_logger(__name__)

LoadHandler = Callable[[int, Lesson], Awaitable[None]]


class LessonIndexError(TrackerError):
    """Lesson index outside the course sequence."""

    def __init__(self, index: int, total: int):
        super().__init__(
            f"Lesson index {index} out of range (0..{total - 1})",
            "lesson_index_out_of_range",
        )
        self.index = index
        self.total = total


class LessonSequencer:
    """Next/previous/jump navigation over a linear lesson list."""

    def __init__(
        self,
        session: PlaybackSession,
        scheduler: ProgressScheduler,
        lessons: list[Lesson],
    ):
        self.session = session
        self.scheduler = scheduler
        session.lessons = list(lessons)
        self._load_handler: LoadHandler | None = None
        self._switching = False

    def bind(self, handler: LoadHandler) -> None:
        """Set the coroutine that loads a lesson into the player."""
        self._load_handler = handler

    @property
    def lessons(self) -> list[Lesson]:
        return self.session.lessons

    @property
    def index(self) -> int:
        return self.session.current_lesson_index

    @property
    def current(self) -> Lesson | None:
        return self.session.current_lesson

    @property
    def total(self) -> int:
        return len(self.session.lessons)

    @property
    def has_next(self) -> bool:
        return self.index < self.total - 1

    @property
    def has_previous(self) -> bool:
        return self.index > 0

    def index_of(self, lesson_id: str) -> int | None:
        for index, lesson in enumerate(self.lessons):
            if lesson.id == lesson_id:
                return index
        return None

    def resolve_start_index(self, lesson_id: str | None) -> int:
        """Index of the lesson the screen was opened with (first lesson if unknown)."""
        if lesson_id is None:
            return 0
        index = self.index_of(lesson_id)
        if index is None:
            logger.warning("start_lesson_not_in_sequence", lesson_id=lesson_id)
            return 0
        return index

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.total:
            raise LessonIndexError(index, self.total)

    async def open(self, index: int) -> None:
        """Load the first lesson of the screen (nothing outgoing to save)."""
        self._check_index(index)
        await self._load(index)

    async def next(self) -> bool:
        """Advance one lesson; no-op on the last one."""
        if not self.has_next:
            return False
        return await self._switch_to(self.index + 1)

    async def previous(self) -> bool:
        """Go back one lesson; no-op on the first one."""
        if not self.has_previous:
            return False
        return await self._switch_to(self.index - 1)

    async def select(self, index: int) -> bool:
        """Jump to an arbitrary lesson.

        Raises:
            LessonIndexError: If ``index`` is outside the sequence.
        """
        self._check_index(index)
        return await self._switch_to(index)

    async def _switch_to(self, index: int) -> bool:
        if self._switching:
            logger.debug("lesson_switch_ignored", target_index=index)
            return False

        self._switching = True
        try:
            await self.scheduler.save_forced(SaveReason.LESSON_SWITCH)
            if not self.session.alive:
                return False
            logger.info(
                "lesson_switch",
                from_index=self.index,
                to_index=index,
                lesson_id=self.lessons[index].id,
            )
            await self._load(index)
        finally:
            self._switching = False
        return True

    async def _load(self, index: int) -> None:
        lesson = self.lessons[index]
        self.session.reset_for_lesson(index, lesson)
        if self._load_handler is not None:
            await self._load_handler(index, lesson)
