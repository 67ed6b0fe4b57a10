"""Auto-hiding player controls."""

from typing import TYPE_CHECKING

from lesson_tracker.core.tasks import OneShotTimer
from lesson_tracker.progress.models import PlaybackSession


if TYPE_CHECKING:
    from lesson_tracker.config.settings import Settings


class ControlsVisibility:
    """Controls overlay state: hidden a few seconds into playback, shown on pause."""

    def __init__(self, session: PlaybackSession, settings: "Settings"):
        self.session = session
        self.visible = True
        self._hide_timer = OneShotTimer(
            settings.controls_hide_delay,
            self._hide,
            name="controls_auto_hide",
        )

    def _reschedule(self) -> None:
        self._hide_timer.cancel()
        if self.visible and self.session.is_playing:
            self._hide_timer.start()

    def _hide(self) -> None:
        if self.session.alive and self.session.is_playing:
            self.visible = False

    def toggle(self) -> bool:
        """Flip visibility (tap on the video surface)."""
        self.visible = not self.visible
        self._reschedule()
        return self.visible

    def show(self) -> None:
        self.visible = True
        self._reschedule()

    def on_playing(self) -> None:
        self._reschedule()

    def on_paused(self) -> None:
        self._hide_timer.cancel()
        self.visible = True

    def cancel(self) -> None:
        self._hide_timer.cancel()

    @property
    def is_hide_pending(self) -> bool:
        return self._hide_timer.is_pending
