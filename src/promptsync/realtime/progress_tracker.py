"""Tracks the generation frame position reported by the backend."""

import logging

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Latest ``current_start_frame`` from inbound progress notifications.

    No monotonicity is enforced: the backend may loop or seek, and whatever
    it reports is taken as the current position.
    """

    def __init__(self):
        self._frame = 0

    def on_progress(self, frame: int):
        if frame < self._frame:
            logger.debug(f"Frame position moved back from {self._frame} to {frame}")
        self._frame = frame

    def current_frame(self) -> int:
        return self._frame

    def reset(self):
        self._frame = 0
