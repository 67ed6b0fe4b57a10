"""Tests for video source resolution."""

import pytest

from lesson_tracker.player.sources import is_playable_url, resolve_video_url


DEFAULT = "https://cdn.example.com/default.mp4"


class TestSources:
    """Tests for is_playable_url and resolve_video_url."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://cdn.example.com/a.mp4", True),
            ("HTTP://cdn.example.com/a.mp4", True),
            ("ftp://cdn.example.com/a.mp4", False),
            ("/videos/a.mp4", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_playable_url(self, url, expected):
        assert is_playable_url(url) is expected

    def test_resolve_keeps_valid(self):
        assert resolve_video_url(" https://cdn.example.com/a.mp4 ", DEFAULT) == (
            "https://cdn.example.com/a.mp4"
        )

    def test_resolve_falls_back(self):
        assert resolve_video_url(None, DEFAULT) == DEFAULT
        assert resolve_video_url("not a url", DEFAULT) == DEFAULT
