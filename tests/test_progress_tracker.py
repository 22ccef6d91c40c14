"""Tests for ProgressTracker."""

from promptsync.realtime.progress_tracker import ProgressTracker


def test_defaults_to_zero():
    assert ProgressTracker().current_frame() == 0


def test_takes_latest_value():
    tracker = ProgressTracker()
    tracker.on_progress(12)
    tracker.on_progress(15)
    assert tracker.current_frame() == 15


def test_accepts_backwards_jumps():
    """Engine-side loops and seeks are reported as-is."""
    tracker = ProgressTracker()
    tracker.on_progress(300)
    tracker.on_progress(4)
    assert tracker.current_frame() == 4


def test_reset_zeroes_frame():
    tracker = ProgressTracker()
    tracker.on_progress(42)
    tracker.reset()
    assert tracker.current_frame() == 0
