"""Prompt scheduling against the backend's frame position.

A submitted prompt becomes a ``schedule_prompt`` message targeted at a frame:
- Frame 0 (nothing generated yet): target frame 0
- Otherwise: current frame + SCHEDULE_OFFSET, so the prompt lands just ahead
  of the frame already in flight

The first submission of a session at frame 0 also emits ``start``. The
``started`` flag keeps ``start`` one-shot until the next reset, even if the
reported frame reads 0 again mid-session.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional

from promptsync.realtime.messages import StartMessage, schedule_prompt_message
from promptsync.realtime.progress_tracker import ProgressTracker

logger = logging.getLogger(__name__)

# Lead time (in frames) ahead of the frame currently being generated
SCHEDULE_OFFSET = 3


@dataclass(frozen=True)
class PromptScheduleRequest:
    """A prompt pinned to the frame it should take effect at."""

    prompt_text: str
    target_frame: int
    started_session: bool = False

    def to_wire(self) -> dict:
        return schedule_prompt_message(self.prompt_text, self.target_frame).to_wire()


def target_frame_for(current_frame: int) -> int:
    """Frame a prompt submitted at ``current_frame`` should be scheduled for."""
    if current_frame == 0:
        return 0
    return current_frame + SCHEDULE_OFFSET


@dataclass
class PromptScheduler:
    """Turns prompt submissions into ``schedule_prompt`` (and ``start``) messages."""

    progress: ProgressTracker
    send: Callable[[dict], object] = lambda _: None

    started: bool = False
    active_prompt: Optional[str] = None

    # Recent requests for debugging (oldest first)
    history: deque[PromptScheduleRequest] = field(
        default_factory=lambda: deque(maxlen=100)
    )

    def submit(self, prompt_text: str) -> Optional[PromptScheduleRequest]:
        """Schedule ``prompt_text``.

        Returns:
            The request that was sent, or None if the text was blank.
        """
        text = (prompt_text or "").strip()
        if not text:
            logger.debug("Ignoring empty prompt submission")
            return None

        current_frame = self.progress.current_frame()
        should_start = current_frame == 0 and not self.started

        request = PromptScheduleRequest(
            prompt_text=text,
            target_frame=target_frame_for(current_frame),
            started_session=should_start,
        )

        self.send(request.to_wire())

        if should_start:
            self.send(StartMessage().to_wire())
            self.started = True
            logger.info("Session start requested")

        self.active_prompt = text
        self.history.append(request)
        logger.info(
            f"Scheduled prompt at frame {request.target_frame} "
            f"(current frame {current_frame}): {text[:60]!r}"
        )
        return request

    def reset(self):
        self.started = False
        self.active_prompt = None
        self.history.clear()
