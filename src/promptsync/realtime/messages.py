"""Pydantic models for messages exchanged over the session channel.

Outbound messages serialise to the exact dicts the backend expects via
``to_wire()``. ``start`` and ``reset`` carry no ``data`` key.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Bounds enforced on denoising step lists before they reach the backend
MAX_DENOISING_STEPS = 5
MAX_DENOISING_TIMESTEP = 1000


class WireMessage(BaseModel):
    """Base class for outbound messages."""

    model_config = ConfigDict(frozen=True)

    type: str

    def to_wire(self) -> dict:
        """Dict ready for the transport."""
        return self.model_dump(exclude_none=True)


class ControlData(BaseModel):
    """Complete snapshot of both control axes."""

    model_config = ConfigDict(frozen=True)

    mouse_key: Literal["U", "I", "J", "K", "L"]
    keyboard_key: Literal["Q", "W", "A", "S", "D"]


class ControlMessage(WireMessage):
    type: Literal["control"] = "control"
    data: ControlData


class SchedulePromptData(BaseModel):
    model_config = ConfigDict(frozen=True)

    new_prompt: str = Field(..., min_length=1)
    timestamp: int = Field(..., ge=0, description="Target frame for the prompt")


class SchedulePromptMessage(WireMessage):
    type: Literal["schedule_prompt"] = "schedule_prompt"
    data: SchedulePromptData


class StartMessage(WireMessage):
    type: Literal["start"] = "start"


class ResetMessage(WireMessage):
    type: Literal["reset"] = "reset"


# Domain-specific extensions. These pass through the core without touching
# control, progress or scheduling state.


class StartingImageData(BaseModel):
    model_config = ConfigDict(frozen=True)

    base64_image: str = Field(..., min_length=1)
    image_id: str = Field(..., min_length=1)


class SetStartingImageMessage(WireMessage):
    type: Literal["set_starting_image"] = "set_starting_image"
    data: StartingImageData


class DenoisingStepListData(BaseModel):
    model_config = ConfigDict(frozen=True)

    denoising_step_list: list[int] = Field(..., max_length=MAX_DENOISING_STEPS)

    @field_validator("denoising_step_list")
    @classmethod
    def _check_range(cls, steps: list[int]) -> list[int]:
        for step in steps:
            if step < 0 or step > MAX_DENOISING_TIMESTEP:
                raise ValueError(
                    f"Value {step} must be between 0 and {MAX_DENOISING_TIMESTEP}"
                )
        return steps


class SetDenoisingStepListMessage(WireMessage):
    type: Literal["set_denoising_step_list"] = "set_denoising_step_list"
    data: DenoisingStepListData


class PromptData(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., min_length=1)


class SetPromptMessage(WireMessage):
    type: Literal["set_prompt"] = "set_prompt"
    data: PromptData


# Inbound


class ProgressData(BaseModel):
    current_start_frame: int = Field(..., ge=0, strict=True)


class ProgressMessage(BaseModel):
    """Progress notification reporting the frame currently being generated."""

    type: Literal["progress"]
    data: ProgressData


def control_message(mouse_key: str, keyboard_key: str) -> ControlMessage:
    return ControlMessage(
        data=ControlData(mouse_key=mouse_key, keyboard_key=keyboard_key)
    )


def schedule_prompt_message(prompt: str, timestamp: int) -> SchedulePromptMessage:
    return SchedulePromptMessage(
        data=SchedulePromptData(new_prompt=prompt, timestamp=timestamp)
    )
