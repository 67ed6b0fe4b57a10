"""Player-side tracking.

Provides:
- Media player protocol the host adapts its native player to
- Playback sampling, controls auto-hide and video source resolution
- Lesson sequencing and the composed LessonProgressTracker
"""

from .controls import ControlsVisibility
from .observer import PlaybackObserver, PlaybackSample
from .protocols import MediaPlayer, PlayerEvent, PlayerStatus
from .sequencer import LessonIndexError, LessonSequencer
from .sources import is_playable_url, resolve_video_url
from .tracker import AppState, LessonProgressTracker


__all__ = [
    "AppState",
    "ControlsVisibility",
    "LessonIndexError",
    "LessonProgressTracker",
    "LessonSequencer",
    "MediaPlayer",
    "PlaybackObserver",
    "PlaybackSample",
    "PlayerEvent",
    "PlayerStatus",
    "is_playable_url",
    "resolve_video_url",
]
