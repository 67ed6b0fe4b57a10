"""Lesson progress tracker for a video lesson player surface.

Composes the playback observer, persistence scheduler, resume resolver,
completion detector and lesson sequencer around one shared session, and
translates player notifications and screen lifecycle transitions into
their actions:

- readyToPlay: apply the resume seek
- playing: periodic saves + controls auto-hide
- paused: forced save
- lesson switch: forced save of the outgoing lesson, then source swap
- background/blur: forced save
- close (navigation away/unmount): forced save awaited before returning
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog

from lesson_tracker.client.http import ApiError
from lesson_tracker.client.schemas import Lesson
from lesson_tracker.client.service import LessonProgressService
from lesson_tracker.config.settings import Settings, get_settings
from lesson_tracker.core.tasks import BackgroundTasks
from lesson_tracker.progress.cache import ProgressCache
from lesson_tracker.progress.completion import CompletionDetector
from lesson_tracker.progress.events import (
    EventListener,
    TrackerEventName,
    TrackerEvents,
)
from lesson_tracker.progress.models import LessonState, PlaybackSession
from lesson_tracker.progress.resume import ResumeResolver
from lesson_tracker.progress.scheduler import ProgressScheduler, SaveReason

from .controls import ControlsVisibility
from .observer import PlaybackObserver
from .protocols import MediaPlayer, PlayerEvent, PlayerStatus
from .sequencer import LessonSequencer
from .sources import is_playable_url, resolve_video_url


logger = structlog.get_logger(__name__)


class AppState(str, Enum):
    """Host application lifecycle state."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    BACKGROUND = "background"


class LessonProgressTracker:
    """Progress tracking for one player screen.

    Usage:
        tracker = LessonProgressTracker(player, service, lessons, course_id=cid)
        await tracker.mount(lesson_id=opened_lesson_id)
        ...
        await tracker.close()  # before navigating away
    """

    def __init__(
        self,
        player: MediaPlayer,
        service: LessonProgressService,
        lessons: list[Lesson],
        *,
        course_id: str | None = None,
        settings: Settings | None = None,
        cache: ProgressCache | None = None,
    ):
        self.settings = settings or get_settings()
        self.player = player
        self.service = service
        self.cache = cache if cache is not None else ProgressCache()
        self.session = PlaybackSession(course_id=course_id)
        self.tasks = BackgroundTasks()
        self.events = TrackerEvents()

        self.scheduler = ProgressScheduler(
            self.session, service, self.cache, self.settings, self.tasks
        )
        self.sequencer = LessonSequencer(self.session, self.scheduler, lessons)
        self.resume = ResumeResolver(
            self.session,
            service,
            self.cache,
            player,
            self.settings,
            self.tasks,
            self.events,
        )
        self.completion = CompletionDetector(
            self.session,
            service,
            self.cache,
            self.sequencer,
            self.settings,
            self.tasks,
            self.events,
        )
        self.observer = PlaybackObserver(player, self.session, self.settings)
        self.controls = ControlsVisibility(self.session, self.settings)

        self.observer.add_listener(self.completion.check)
        self.sequencer.bind(self._load_lesson)

        self._unsubscribers: list[Callable[[], None]] = []
        self._mounted = False
        self._closed = False

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def mount(self, lesson_id: str | None = None) -> None:
        """Start tracking: subscribe to the player and load the opening lesson."""
        if self._mounted:
            return
        self._mounted = True

        self._subscribe(PlayerEvent.STATUS_CHANGE, self.handle_status_change)
        self._subscribe(PlayerEvent.PLAYING_CHANGE, self.handle_playing_change)
        self.observer.start()

        logger.info(
            "tracker_mounted",
            course_id=self.session.course_id,
            lessons=self.sequencer.total,
            lesson_id=lesson_id,
        )

        if self.session.course_id:
            await self.cache.load_course(self.service, self.session.course_id)

        if self.sequencer.total:
            await self.sequencer.open(self.sequencer.resolve_start_index(lesson_id))

    async def close(self) -> None:
        """Leave the screen: final forced save, then tear everything down.

        Idempotent. Saves still in flight may complete afterwards; they no
        longer touch the session.
        """
        if self._closed:
            return
        self._closed = True

        for unsubscribe in self._unsubscribers:
            try:
                unsubscribe()
            except Exception as e:
                logger.debug("player_unsubscribe_failed", error=str(e))
        self._unsubscribers.clear()

        self.observer.stop()
        self.scheduler.stop_periodic()
        self.controls.cancel()
        self.resume.cancel()
        self.completion.cancel()

        self.observer.sample()
        self._call_player("pause", self.player.pause)

        await self.scheduler.save_forced(SaveReason.EXIT)
        self.session.alive = False
        logger.info("tracker_closed", lesson_id=self.session.lesson_id)

    async def join_pending(self) -> None:
        """Wait for background work (saves, completion, resume seek) to finish."""
        await self.tasks.join()

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register a listener for tracker events."""
        return self.events.subscribe(listener)

    def _subscribe(self, event: PlayerEvent, callback: Callable[[Any], None]) -> None:
        try:
            self._unsubscribers.append(self.player.subscribe(event, callback))
        except Exception as e:
            logger.warning("player_subscribe_failed", player_event=event.value, error=str(e))

    # ==========================================================================
    # Player notifications
    # ==========================================================================

    def handle_status_change(self, status: PlayerStatus | str) -> None:
        """React to the player's load status."""
        if not self.session.alive:
            return
        try:
            status = PlayerStatus(status)
        except ValueError:
            logger.debug("unknown_player_status", status=status)
            return

        session = self.session
        if status == PlayerStatus.LOADING:
            session.transition(LessonState.LOADING)
        elif status == PlayerStatus.READY_TO_PLAY:
            session.error = None
            session.transition(LessonState.READY)
            if session.is_playing:
                session.transition(LessonState.PLAYING)
            self.observer.sample()
            self.resume.on_ready()
        elif status == PlayerStatus.ERROR:
            session.transition(LessonState.ERROR)
            session.error = "Video could not be loaded"
            logger.warning("media_load_failed", lesson_id=session.lesson_id)
            self.events.emit(
                TrackerEventName.MEDIA_ERROR,
                lesson_id=session.lesson_id,
                error=session.error,
            )

    def handle_playing_change(self, is_playing: bool) -> None:
        """React to play/pause transitions."""
        session = self.session
        if not session.alive:
            return

        was_playing = session.is_playing
        session.is_playing = bool(is_playing)

        if session.is_playing:
            session.transition(LessonState.PLAYING)
            if not self.scheduler.is_periodic_running:
                self.scheduler.start_periodic()
            self.controls.on_playing()
            return

        if not was_playing:
            return

        session.transition(LessonState.PAUSED)
        self.scheduler.stop_periodic()
        self.controls.on_paused()
        self.observer.sample()
        self.tasks.spawn(
            self.scheduler.save_forced(SaveReason.PAUSE), name="progress_pause_save"
        )

    def handle_app_state_change(self, state: AppState | str) -> None:
        """Save when the app leaves the foreground."""
        if not self.session.alive:
            return
        try:
            state = AppState(state)
        except ValueError:
            logger.debug("unknown_app_state", state=state)
            return
        if state == AppState.ACTIVE:
            return
        self.observer.sample()
        self.tasks.spawn(
            self.scheduler.save_forced(SaveReason.BACKGROUND),
            name="progress_background_save",
        )

    def handle_blur(self) -> None:
        """Save when the screen loses focus (another screen pushed on top)."""
        if not self.session.alive:
            return
        self.observer.sample()
        self.tasks.spawn(
            self.scheduler.save_forced(SaveReason.BLUR), name="progress_blur_save"
        )

    # ==========================================================================
    # Lesson loading
    # ==========================================================================

    async def _resolve_source(self, lesson: Lesson) -> str:
        if is_playable_url(lesson.video_url):
            return resolve_video_url(lesson.video_url, self.settings.default_video_url)

        stream_url: str | None = None
        try:
            stream_url = await self.service.get_lesson_stream_url(lesson.id)
        except ApiError as e:
            logger.info(
                "stream_url_unavailable",
                lesson_id=lesson.id,
                status=e.status,
                error=e.message,
            )
        return resolve_video_url(stream_url, self.settings.default_video_url)

    async def _load_lesson(self, index: int, lesson: Lesson) -> None:
        session = self.session
        generation = session.generation

        # Session is IDLE since reset_for_lesson: no samples until replace()
        self.resume.cancel()
        self.completion.cancel()
        if self.cache.is_completed(lesson.id):
            session.is_completed = True

        source_url = await self._resolve_source(lesson)
        if not session.is_current(generation):
            return

        session.transition(LessonState.LOADING)
        self._call_player("replace", lambda: self.player.replace(source_url))
        self.events.emit(
            TrackerEventName.LESSON_CHANGED, lesson_id=lesson.id, index=index
        )

        await self.resume.load(lesson.id)

    # ==========================================================================
    # Player controls
    # ==========================================================================

    def _call_player(self, action: str, call: Callable[[], Any]) -> bool:
        try:
            call()
        except Exception as e:
            logger.warning("player_call_failed", action=action, error=str(e))
            return False
        return True

    def toggle_play(self) -> bool:
        if self.session.is_playing:
            return self._call_player("pause", self.player.pause)
        return self._call_player("play", self.player.play)

    def seek_forward(self) -> bool:
        step = self.settings.seek_step_seconds
        return self._call_player("seek_forward", lambda: self.player.seek_by(step))

    def seek_backward(self) -> bool:
        step = self.settings.seek_step_seconds
        return self._call_player("seek_backward", lambda: self.player.seek_by(-step))

    def seek_to_fraction(self, fraction: float) -> bool:
        """Seek to a point of the progress bar (0.0 - 1.0)."""
        duration = self.session.duration_seconds
        if duration <= 0:
            return False
        target = min(max(fraction, 0.0), 1.0) * duration
        return self._call_player("seek", lambda: self.player.seek_to(target))

    def set_playback_rate(self, rate: float) -> bool:
        def apply() -> None:
            self.player.playback_rate = rate

        return self._call_player("set_playback_rate", apply)

    def toggle_controls(self) -> bool:
        return self.controls.toggle()

    # ==========================================================================
    # Navigation
    # ==========================================================================

    # The outgoing lesson is saved at the position read right before the switch

    async def next_lesson(self) -> bool:
        self.observer.sample()
        return await self.sequencer.next()

    async def previous_lesson(self) -> bool:
        self.observer.sample()
        return await self.sequencer.previous()

    async def select_lesson(self, index: int) -> bool:
        self.observer.sample()
        return await self.sequencer.select(index)

    # ==========================================================================
    # Read-only views
    # ==========================================================================

    @property
    def current_lesson(self) -> Lesson | None:
        return self.session.current_lesson

    @property
    def state(self) -> LessonState:
        return self.session.state

    @property
    def progress_percent(self) -> float:
        """Playback position of the current lesson, 0-100."""
        duration = self.session.duration_seconds
        if duration <= 0:
            return 0.0
        return min(100.0, self.session.current_time_seconds / duration * 100)

    def lesson_percent(self, lesson_id: str) -> int:
        """Watched percentage for the lesson list."""
        return self.cache.percent_watched(lesson_id)

    def is_lesson_completed(self, lesson_id: str) -> bool:
        if lesson_id == self.session.lesson_id and self.session.is_completed:
            return True
        return self.cache.is_completed(lesson_id)
