"""Pydantic schemas for the local control API."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(default="healthy")
    timestamp: str


class ControlRequest(BaseModel):
    """Press or release one symbol on an axis."""

    axis: Literal["movement", "view"]
    symbol: str | None = Field(
        default=None,
        description=(
            "Symbol name (e.g. 'forward', 'up') or wire letter "
            "(e.g. 'W', 'I'). Optional on release."
        ),
    )


class KeyRequest(BaseModel):
    """Raw key event, mapped through the keyboard map."""

    key: str = Field(..., min_length=1, description="Physical key (WASD / IJKL)")
    pressed: bool = Field(
        default=True, description="True for key down, False for key up"
    )


class ControlResponse(BaseModel):
    emitted: bool = Field(..., description="Whether a control message was sent")
    keyboard_key: str
    mouse_key: str


class PromptRequest(BaseModel):
    prompt: str


class PromptResponse(BaseModel):
    scheduled: bool
    prompt: str | None = None
    target_frame: int | None = None
    started_session: bool = False


class ProgressRequest(BaseModel):
    frame: int = Field(..., ge=0)


class DenoisingStepsRequest(BaseModel):
    denoising_step_list: list[int]


class StartingImageRequest(BaseModel):
    base64_image: str = Field(..., min_length=1)
    image_id: str | None = Field(
        default=None, description="Client image id; generated when omitted"
    )


class SetPromptRequest(BaseModel):
    prompt: str


class SentResponse(BaseModel):
    sent: bool


class ControlSnapshot(BaseModel):
    movement: str
    view: str
    keyboard_key: str
    mouse_key: str


class DispatchStats(BaseModel):
    sent: int
    failed: int
    in_flight: int


class SessionStateResponse(BaseModel):
    phase: Literal["disconnected", "connecting", "waiting", "ready"]
    control: ControlSnapshot
    current_frame: int
    started: bool
    active_prompt: str | None = None
    dispatch: DispatchStats


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
