"""ControlSession - one connected lifetime of the control and prompt core.

The session wires together:
- ControlStateTracker: edge-triggered directional control
- ProgressTracker: frame position from inbound progress messages
- PromptScheduler: prompt scheduling and one-shot session start
- ResetCoordinator: explicit and disconnect-triggered resets

All outbound messages go through a single MessageDispatcher so they are
handed to the transport in the order their transitions were detected.
Everything runs on one event loop thread; nothing here blocks or awaits.
"""

import json
import logging
import re
import time
from enum import Enum
from typing import Optional, Union

from pydantic import ValidationError

from promptsync.realtime.control_state import (
    Axis,
    AxisSymbol,
    ControlState,
    ControlStateTracker,
)
from promptsync.realtime.dispatch import MessageDispatcher, SendFn, as_dispatcher
from promptsync.realtime.input_map import KeyInput
from promptsync.realtime.messages import (
    DenoisingStepListData,
    ProgressMessage,
    PromptData,
    SetDenoisingStepListMessage,
    SetPromptMessage,
    SetStartingImageMessage,
    StartMessage,
    StartingImageData,
)
from promptsync.realtime.progress_tracker import ProgressTracker
from promptsync.realtime.prompt_scheduler import PromptScheduler, PromptScheduleRequest
from promptsync.realtime.reset_coordinator import ResetCoordinator

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:[^,]*;base64,", re.IGNORECASE)


class SessionPhase(Enum):
    """Connection lifecycle as reported by the transport."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    WAITING = "waiting"
    READY = "ready"


class ControlSession:
    """Per-session control, progress and prompt state.

    Args:
        send: Transport send callable (or a MessageDispatcher). May return an
            awaitable; it is never awaited here.
        emit_neutral_on_reset: Send a Neutral/Neutral control message after an
            explicit reset when the axes were held
        auto_start_prompt: When set, entering READY before anything has been
            started sends ``set_prompt`` with this text followed by ``start``
    """

    def __init__(
        self,
        send: Optional[Union[SendFn, MessageDispatcher]] = None,
        emit_neutral_on_reset: bool = False,
        auto_start_prompt: Optional[str] = None,
    ):
        self.dispatcher = as_dispatcher(send)
        self.control = ControlStateTracker(self.dispatcher)
        self.keys = KeyInput(self.control)
        self.progress = ProgressTracker()
        self.scheduler = PromptScheduler(progress=self.progress, send=self.dispatcher)
        self.resetter = ResetCoordinator(
            self.control,
            self.progress,
            self.scheduler,
            send=self.dispatcher,
            emit_neutral_on_reset=emit_neutral_on_reset,
        )
        self.auto_start_prompt = (auto_start_prompt or "").strip() or None
        self.phase = SessionPhase.DISCONNECTED

    # --- Control ---

    def press(self, axis: Axis, symbol: AxisSymbol) -> bool:
        return self.control.press(axis, symbol)

    def release(self, axis: Axis, symbol: Optional[AxisSymbol] = None) -> bool:
        return self.control.release(axis, symbol)

    def key_down(self, key: str) -> bool:
        return self.keys.key_down(key)

    def key_up(self, key: str) -> bool:
        return self.keys.key_up(key)

    @property
    def control_state(self) -> ControlState:
        return self.control.state

    # --- Prompts and progress ---

    def submit(self, prompt_text: str) -> Optional[PromptScheduleRequest]:
        return self.scheduler.submit(prompt_text)

    def on_progress(self, frame: int):
        self.progress.on_progress(frame)

    def current_frame(self) -> int:
        return self.progress.current_frame()

    @property
    def active_prompt(self) -> Optional[str]:
        return self.scheduler.active_prompt

    @property
    def started(self) -> bool:
        return self.scheduler.started

    # --- Lifecycle ---

    def reset(self, explicit: bool = True):
        self.resetter.reset(explicit)

    def on_phase_change(self, phase: SessionPhase):
        """React to a lifecycle transition reported by the transport."""
        previous = self.phase
        self.phase = phase
        if phase == previous:
            return

        logger.info(f"Session phase: {previous.value} -> {phase.value}")
        if phase == SessionPhase.DISCONNECTED:
            self.reset(explicit=False)
        elif phase == SessionPhase.READY:
            self._auto_start()

    def _auto_start(self):
        if self.auto_start_prompt is None or self.started:
            return
        logger.info(f"Auto-starting with prompt: {self.auto_start_prompt!r}")
        self.set_prompt(self.auto_start_prompt)
        self.dispatcher(StartMessage().to_wire())
        self.scheduler.started = True

    def handle_message(self, message: Union[str, bytes, dict]):
        """Consume one inbound channel message.

        Only ``progress`` is handled. Undecodable, malformed and unknown
        messages are ignored.
        """
        if isinstance(message, (str, bytes)):
            try:
                message = json.loads(message)
            except ValueError as e:
                # JSONDecodeError and UnicodeDecodeError
                logger.debug(f"Ignoring undecodable inbound message: {e}")
                return

        if not isinstance(message, dict) or message.get("type") != "progress":
            return

        try:
            progress = ProgressMessage.model_validate(message)
        except ValidationError as e:
            logger.debug(f"Ignoring malformed progress message: {e.errors()}")
            return

        self.on_progress(progress.data.current_start_frame)

    # --- Extensions ---

    def set_starting_image(
        self, base64_image: str, image_id: Optional[str] = None
    ) -> bool:
        """Send a starting image. A ``data:...;base64,`` prefix is stripped.

        Without an ``image_id`` one is generated as ``upload_<epoch ms>``.
        """
        payload = _DATA_URL_PREFIX.sub("", base64_image.strip())
        if not image_id:
            image_id = f"upload_{int(time.time() * 1000)}"
        message = SetStartingImageMessage(
            data=StartingImageData(base64_image=payload, image_id=image_id)
        )
        return self.dispatcher(message.to_wire())

    def set_denoising_step_list(self, steps: list[int]) -> bool:
        """Send a denoising step list.

        Raises:
            ValidationError: More than 5 steps, or a step outside [0, 1000]
        """
        message = SetDenoisingStepListMessage(
            data=DenoisingStepListData(denoising_step_list=steps)
        )
        return self.dispatcher(message.to_wire())

    def set_prompt(self, prompt: str) -> bool:
        """Send an immediate (unscheduled) prompt. Blank text is a no-op."""
        text = (prompt or "").strip()
        if not text:
            return False
        return self.dispatcher(SetPromptMessage(data=PromptData(prompt=text)).to_wire())

    def send_extension(self, message: dict) -> bool:
        """Pass an arbitrary domain message through unmodified."""
        return self.dispatcher(message)

    def snapshot(self) -> dict:
        state = self.control.state
        return {
            "phase": self.phase.value,
            "control": {
                "movement": state.movement.name.lower(),
                "view": state.view.name.lower(),
                "keyboard_key": state.movement.value,
                "mouse_key": state.view.value,
            },
            "current_frame": self.current_frame(),
            "started": self.started,
            "active_prompt": self.active_prompt,
            "dispatch": self.dispatcher.stats(),
        }
