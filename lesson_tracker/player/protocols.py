"""Media player contract consumed by the tracker.

The host UI adapts its native player to this protocol. Calls may raise at
any time (e.g. a player released during teardown); the tracker guards every
one of them.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol


class PlayerStatus(str, Enum):
    """Load status reported by the player."""

    IDLE = "idle"
    LOADING = "loading"
    READY_TO_PLAY = "readyToPlay"
    ERROR = "error"


class PlayerEvent(str, Enum):
    """Notifications the player emits."""

    STATUS_CHANGE = "statusChange"  # callback(PlayerStatus)
    PLAYING_CHANGE = "playingChange"  # callback(bool)


class MediaPlayer(Protocol):
    """Protocol for the underlying media player."""

    current_time: float
    duration: float
    playing: bool
    status: PlayerStatus
    playback_rate: float

    def play(self) -> None:
        """Start or resume playback."""
        ...

    def pause(self) -> None:
        """Pause playback."""
        ...

    def seek_to(self, seconds: float) -> None:
        """Jump to an absolute position."""
        ...

    def seek_by(self, delta: float) -> None:
        """Jump relative to the current position."""
        ...

    def replace(self, source_url: str) -> None:
        """Swap the media source."""
        ...

    def subscribe(
        self, event: PlayerEvent, callback: Callable[[Any], None]
    ) -> Callable[[], None]:
        """Register for a notification; returns an unsubscribe function."""
        ...
