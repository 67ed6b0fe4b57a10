"""Tests for the playback observer."""

import asyncio
import math

import pytest

from lesson_tracker.player.observer import PlaybackObserver, PlaybackSample


@pytest.fixture
def observer(player, session, settings):
    return PlaybackObserver(player, session, settings)


class TestPlaybackSample:
    """Tests for PlaybackSample."""

    def test_ratio(self):
        assert PlaybackSample(45, 90, True).ratio == 0.5
        assert PlaybackSample(45, 0, True).ratio == 0.0


class TestPlaybackObserver:
    """Tests for sampling."""

    def test_sample_mirrors_player(self, observer, player, session):
        player.current_time = 12.5
        player.playing = True

        sample = observer.sample()

        assert sample == PlaybackSample(current_time=12.5, duration=100.0, is_playing=True)
        assert session.current_time_seconds == 12.5
        assert session.duration_seconds == 100.0
        assert observer.latest is sample

    def test_listeners_notified(self, observer, player):
        seen = []
        observer.add_listener(seen.append)
        player.current_time = 3

        observer.sample()

        assert [s.current_time for s in seen] == [3]

    def test_failing_listener_does_not_stop_others(self, observer):
        seen = []

        def broken(sample):
            raise RuntimeError("listener bug")

        observer.add_listener(broken)
        observer.add_listener(seen.append)

        assert observer.sample() is not None
        assert len(seen) == 1

    def test_released_player_yields_nothing(self, observer, player, session):
        session.current_time_seconds = 40
        player.released = True

        assert observer.sample() is None
        assert session.current_time_seconds == 40

    def test_unknown_duration_keeps_previous(self, observer, player, session):
        session.duration_seconds = 100
        player.duration = math.nan

        sample = observer.sample()

        assert sample.duration == 0.0
        assert session.duration_seconds == 100

    def test_dead_session(self, observer, session):
        session.alive = False
        assert observer.sample() is None

    def test_no_samples_before_new_source(self, observer, player, session, lessons):
        seen = []
        observer.add_listener(seen.append)
        player.current_time = 95

        session.reset_for_lesson(1, lessons[1])

        assert observer.sample() is None
        assert session.current_time_seconds == 0
        assert seen == []

    @pytest.mark.asyncio
    async def test_periodic_sampling(self, player, session, settings):
        settings.sample_interval = 0.01
        observer = PlaybackObserver(player, session, settings)
        seen = []
        observer.add_listener(seen.append)

        observer.start()
        assert observer.is_running
        player.current_time = 7
        await asyncio.sleep(0.035)
        observer.stop()

        assert len(seen) >= 2
        assert session.current_time_seconds == 7
        assert observer.is_running is False
