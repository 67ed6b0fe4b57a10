"""Tests for tracker settings."""

import pytest
from pydantic import ValidationError

from lesson_tracker.config.settings import Settings


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self):
        settings = Settings()

        assert settings.sample_interval == 0.5
        assert settings.progress_save_interval == 10.0
        assert settings.controls_hide_delay == 3.0
        assert settings.resume_seek_delay == 0.5
        assert settings.auto_advance_delay == 2.0
        assert settings.completion_threshold == 0.9
        assert settings.save_min_delta_seconds == 5

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("API_BASE_URL", "https://learn.example.com/api")
        monkeypatch.setenv("PROGRESS_SAVE_INTERVAL", "15")

        settings = Settings()

        assert settings.api_base_url == "https://learn.example.com/api"
        assert settings.progress_save_interval == 15.0

    def test_threshold_bounds(self):
        with pytest.raises(ValidationError):
            Settings(completion_threshold=1.5)

    def test_environment_flags(self):
        assert Settings(environment="testing").is_testing
        assert Settings(environment="development").is_development
