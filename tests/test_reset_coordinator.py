"""Tests for ResetCoordinator."""

import pytest

from promptsync.realtime.control_state import (
    Axis,
    ControlState,
    ControlStateTracker,
    MovementKey,
    ViewKey,
)
from promptsync.realtime.dispatch import MessageDispatcher
from promptsync.realtime.progress_tracker import ProgressTracker
from promptsync.realtime.prompt_scheduler import PromptScheduler
from promptsync.realtime.reset_coordinator import ResetCoordinator


@pytest.fixture
def parts(sent):
    control = ControlStateTracker(sent)
    progress = ProgressTracker()
    scheduler = PromptScheduler(progress=progress, send=sent)
    return control, progress, scheduler


def dirty(parts, sent):
    """Put every component into a non-initial state."""
    control, progress, scheduler = parts
    control.press(Axis.MOVEMENT, MovementKey.FORWARD)
    control.press(Axis.VIEW, ViewKey.LEFT)
    scheduler.submit("a")
    progress.on_progress(90)
    sent.clear()


class TestReset:
    @pytest.mark.parametrize("explicit", [True, False])
    def test_clears_all_state(self, parts, sent, explicit):
        control, progress, scheduler = parts
        coordinator = ResetCoordinator(control, progress, scheduler, send=sent)
        dirty(parts, sent)

        coordinator.reset(explicit=explicit)

        assert control.state == ControlState()
        assert progress.current_frame() == 0
        assert scheduler.started is False
        assert scheduler.active_prompt is None

    def test_explicit_reset_sends_reset_only(self, parts, sent):
        coordinator = ResetCoordinator(*parts, send=sent)
        dirty(parts, sent)

        coordinator.reset(explicit=True)

        assert sent == [{"type": "reset"}]

    def test_disconnect_reset_sends_nothing(self, parts, sent):
        coordinator = ResetCoordinator(*parts, send=sent)
        dirty(parts, sent)

        coordinator.reset(explicit=False)

        assert sent == []

    def test_neutral_control_after_reset_when_enabled(self, parts, sent):
        coordinator = ResetCoordinator(*parts, send=sent, emit_neutral_on_reset=True)
        dirty(parts, sent)

        coordinator.reset(explicit=True)

        assert sent == [
            {"type": "reset"},
            {"type": "control", "data": {"mouse_key": "U", "keyboard_key": "Q"}},
        ]

    def test_no_neutral_control_when_already_neutral(self, parts, sent):
        coordinator = ResetCoordinator(*parts, send=sent, emit_neutral_on_reset=True)

        coordinator.reset(explicit=True)

        assert sent == [{"type": "reset"}]

    def test_state_cleared_when_reset_send_fails(self, parts):
        control, progress, scheduler = parts

        def failing_send(message):
            raise RuntimeError("transport down")

        coordinator = ResetCoordinator(
            control, progress, scheduler, send=MessageDispatcher(failing_send)
        )
        progress.on_progress(10)

        coordinator.reset(explicit=True)

        assert progress.current_frame() == 0
        assert coordinator.reset_count == 1

    def test_start_at_most_once_between_resets(self, parts, sent):
        control, progress, scheduler = parts
        coordinator = ResetCoordinator(control, progress, scheduler, send=sent)

        for _ in range(3):
            scheduler.submit("x")
        coordinator.reset(explicit=True)
        for _ in range(3):
            scheduler.submit("y")

        assert sent.types().count("start") == 2
