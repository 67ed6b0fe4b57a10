"""Playback observer.

Samples the player's position and duration at a fixed cadence, independent
of how often the native player emits events, and mirrors them into the
shared session. A player that fails to answer (released during teardown)
simply yields no sample.
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from lesson_tracker.core.tasks import RepeatingTimer
from lesson_tracker.progress.models import LessonState, PlaybackSession


if TYPE_CHECKING:
    from lesson_tracker.config.settings import Settings

    from .protocols import MediaPlayer

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PlaybackSample:
    """One reading of the player."""

    current_time: float
    duration: float
    is_playing: bool

    @property
    def ratio(self) -> float:
        if self.duration <= 0:
            return 0.0
        return self.current_time / self.duration


SampleListener = Callable[[PlaybackSample], object]


def _as_seconds(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return 0.0
    return seconds if math.isfinite(seconds) and seconds > 0 else 0.0


class PlaybackObserver:
    """Periodic sampler of the media player."""

    def __init__(
        self,
        player: "MediaPlayer",
        session: PlaybackSession,
        settings: "Settings",
    ):
        self.player = player
        self.session = session
        self.latest: PlaybackSample | None = None
        self._listeners: list[SampleListener] = []
        self._timer = RepeatingTimer(
            settings.sample_interval,
            self.sample,
            name="playback_sampler",
        )

    def add_listener(self, listener: SampleListener) -> None:
        self._listeners.append(listener)

    def sample(self) -> PlaybackSample | None:
        """Read the player once and publish the result.

        Returns:
            The sample, or None when the player could not be read or still
            holds the previous lesson's media.
        """
        if not self.session.alive or self.session.state == LessonState.IDLE:
            return None

        try:
            current_time = self.player.current_time
            duration = self.player.duration
            is_playing = bool(self.player.playing)
        except Exception as e:
            logger.debug("playback_sample_skipped", error=str(e))
            return None

        if current_time is None:
            return None

        sample = PlaybackSample(
            current_time=_as_seconds(current_time),
            duration=_as_seconds(duration),
            is_playing=is_playing,
        )

        self.session.current_time_seconds = sample.current_time
        if sample.duration > 0:
            self.session.duration_seconds = sample.duration
        self.latest = sample

        for listener in list(self._listeners):
            try:
                listener(sample)
            except Exception:
                logger.exception("sample_listener_error")

        return sample

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.cancel()

    @property
    def is_running(self) -> bool:
        return self._timer.is_running
