"""Tests for controls auto-hide."""

import asyncio

import pytest

from lesson_tracker.player.controls import ControlsVisibility


@pytest.fixture
def controls(session, settings):
    settings.controls_hide_delay = 0.01
    return ControlsVisibility(session, settings)


class TestControlsVisibility:
    """Tests for ControlsVisibility."""

    @pytest.mark.asyncio
    async def test_hides_while_playing(self, controls, session):
        session.is_playing = True
        controls.on_playing()
        assert controls.is_hide_pending

        await asyncio.sleep(0.03)

        assert controls.visible is False

    @pytest.mark.asyncio
    async def test_pause_shows_and_cancels(self, controls, session):
        session.is_playing = True
        controls.on_playing()
        session.is_playing = False
        controls.on_paused()

        await asyncio.sleep(0.03)

        assert controls.visible is True
        assert controls.is_hide_pending is False

    @pytest.mark.asyncio
    async def test_toggle(self, controls, session):
        session.is_playing = True
        controls.visible = False

        assert controls.toggle() is True
        assert controls.is_hide_pending
        assert controls.toggle() is False
        assert controls.is_hide_pending is False

    @pytest.mark.asyncio
    async def test_no_hide_when_paused(self, controls, session):
        session.is_playing = False
        controls.show()

        assert controls.is_hide_pending is False
        assert controls.visible is True
