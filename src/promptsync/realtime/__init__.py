"""Realtime control and prompt synchronization core.

Translates local user intent into the outbound messages of a frame-streaming
generative session, and tracks the backend's progress notifications.

Key components:
- ControlStateTracker: Edge-triggered movement/view control state
- ProgressTracker: Frame position reported by the backend
- PromptScheduler: Frame-targeted prompt scheduling and one-shot start
- ResetCoordinator: Explicit and disconnect-triggered resets
- ControlSession: Composes the above for one session
"""

from promptsync.realtime.control_state import (
    Axis,
    ControlState,
    ControlStateTracker,
    MovementKey,
    ViewKey,
)
from promptsync.realtime.dispatch import MessageDispatcher
from promptsync.realtime.input_map import KEYBOARD_MAP, KeyInput, map_key, parse_symbol
from promptsync.realtime.progress_tracker import ProgressTracker
from promptsync.realtime.prompt_scheduler import (
    SCHEDULE_OFFSET,
    PromptScheduler,
    PromptScheduleRequest,
    target_frame_for,
)
from promptsync.realtime.reset_coordinator import ResetCoordinator
from promptsync.realtime.session import ControlSession, SessionPhase
from promptsync.realtime.stories import (
    Story,
    StoryBook,
    StoryPrompt,
    default_story_book,
)

__all__ = [
    # control_state
    "Axis",
    "ControlState",
    "ControlStateTracker",
    "MovementKey",
    "ViewKey",
    # dispatch
    "MessageDispatcher",
    # input_map
    "KEYBOARD_MAP",
    "KeyInput",
    "map_key",
    "parse_symbol",
    # progress_tracker
    "ProgressTracker",
    # prompt_scheduler
    "SCHEDULE_OFFSET",
    "PromptScheduler",
    "PromptScheduleRequest",
    "target_frame_for",
    # reset_coordinator
    "ResetCoordinator",
    # session
    "ControlSession",
    "SessionPhase",
    # stories
    "Story",
    "StoryBook",
    "StoryPrompt",
    "default_story_book",
]
