"""Session reset: clear local state and optionally ask the backend to restart.

Local state is always cleared first and never waits on the backend; there
is no acknowledgement for ``reset``.
"""

import logging
from typing import Callable

from promptsync.realtime.control_state import ControlStateTracker
from promptsync.realtime.messages import ResetMessage
from promptsync.realtime.progress_tracker import ProgressTracker
from promptsync.realtime.prompt_scheduler import PromptScheduler

logger = logging.getLogger(__name__)


class ResetCoordinator:
    """Resets control, progress and scheduling state together.

    Args:
        control: Control tracker to return to Neutral/Neutral
        progress: Progress tracker to zero
        scheduler: Scheduler whose active prompt and started flag are cleared
        send: Outbound message callable
        emit_neutral_on_reset: Also send a Neutral/Neutral control message after
            an explicit reset when the axes were not already neutral
    """

    def __init__(
        self,
        control: ControlStateTracker,
        progress: ProgressTracker,
        scheduler: PromptScheduler,
        send: Callable[[dict], object] = lambda _: None,
        emit_neutral_on_reset: bool = False,
    ):
        self.control = control
        self.progress = progress
        self.scheduler = scheduler
        self.send = send
        self.emit_neutral_on_reset = emit_neutral_on_reset
        self.reset_count = 0

    def reset(self, explicit: bool):
        """Clear all session state.

        Args:
            explicit: True for a user-requested reset, which also sends
                ``reset`` to the backend. Disconnect-triggered resets are
                local only.
        """
        was_neutral = self.control.state.is_neutral

        self.control.reset()
        self.progress.reset()
        self.scheduler.reset()
        self.reset_count += 1

        logger.info(f"Session state reset ({'explicit' if explicit else 'disconnect'})")

        if not explicit:
            return

        self.send(ResetMessage().to_wire())

        if self.emit_neutral_on_reset and not was_neutral:
            self.send(self.control.state.to_wire())
