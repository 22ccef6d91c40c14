"""Local HTTP control surface for a ControlSession.

Mirrors the user intents of the session (control keys, prompt submission,
reset and the extension messages) as REST endpoints so scripts and the CLI
can drive a live session.
"""

import logging
from collections import deque
from datetime import datetime

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from promptsync import __version__
from promptsync.realtime.control_state import AXIS_SYMBOLS
from promptsync.realtime.input_map import map_key, parse_axis, parse_symbol
from promptsync.realtime.session import ControlSession
from promptsync.realtime.stories import StoryBook, default_story_book

from .schema import (
    ControlRequest,
    ControlResponse,
    DenoisingStepsRequest,
    HealthResponse,
    KeyRequest,
    ProgressRequest,
    PromptRequest,
    PromptResponse,
    SentResponse,
    SessionStateResponse,
    SetPromptRequest,
    StartingImageRequest,
)

logger = logging.getLogger(__name__)

# Outbound messages kept for GET /api/v1/messages
RECENT_MESSAGES_LIMIT = 200


def _control_response(session: ControlSession, emitted: bool) -> ControlResponse:
    state = session.control_state
    return ControlResponse(
        emitted=emitted,
        keyboard_key=state.movement.value,
        mouse_key=state.view.value,
    )


def _is_neutral(axis, value: str) -> bool:
    neutral = AXIS_SYMBOLS[axis].NEUTRAL
    return value.strip().upper() in (neutral.name, neutral.value)


def _resolve_control(request: ControlRequest, release: bool = False):
    axis = parse_axis(request.axis)
    if request.symbol is None and release:
        return axis, None
    symbol = parse_symbol(axis, request.symbol or "")
    if symbol is None and release and _is_neutral(axis, request.symbol):
        return axis, None
    if symbol is None:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown {request.axis} symbol: {request.symbol!r}",
        )
    return axis, symbol


def create_api_app(
    session: ControlSession,
    stories: StoryBook | None = None,
) -> FastAPI:
    """Create the control API bound to ``session``."""
    app = FastAPI(
        title="promptsync API",
        description=(
            "Control and prompt synchronization for a streaming generative session"
        ),
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    story_book = stories if stories is not None else default_story_book()
    recent_messages: deque[dict] = deque(maxlen=RECENT_MESSAGES_LIMIT)
    session.dispatcher.add_listener(recent_messages.append)

    app.state.session = session
    app.state.stories = story_book

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="healthy", timestamp=datetime.now().isoformat())

    @app.get("/api/v1/session", response_model=SessionStateResponse)
    async def get_session_state():
        return session.snapshot()

    @app.get("/api/v1/messages")
    async def get_recent_messages(limit: int = 50):
        """Most recent outbound messages, oldest first."""
        messages = list(recent_messages)
        return {"messages": messages[-limit:] if limit > 0 else []}

    @app.post("/api/v1/control/press", response_model=ControlResponse)
    async def press_control(request: ControlRequest):
        axis, symbol = _resolve_control(request)
        return _control_response(session, session.press(axis, symbol))

    @app.post("/api/v1/control/release", response_model=ControlResponse)
    async def release_control(request: ControlRequest):
        axis, symbol = _resolve_control(request, release=True)
        return _control_response(session, session.release(axis, symbol))

    @app.post("/api/v1/control/key", response_model=ControlResponse)
    async def key_event(request: KeyRequest):
        if map_key(request.key) is None:
            raise HTTPException(
                status_code=422, detail=f"Unmapped key: {request.key!r}"
            )
        if request.pressed:
            emitted = session.key_down(request.key)
        else:
            emitted = session.key_up(request.key)
        return _control_response(session, emitted)

    @app.post("/api/v1/prompt", response_model=PromptResponse)
    async def submit_prompt(request: PromptRequest):
        scheduled = session.submit(request.prompt)
        if scheduled is None:
            return PromptResponse(scheduled=False)
        return PromptResponse(
            scheduled=True,
            prompt=scheduled.prompt_text,
            target_frame=scheduled.target_frame,
            started_session=scheduled.started_session,
        )

    @app.post("/api/v1/progress", response_model=SessionStateResponse)
    async def report_progress(request: ProgressRequest):
        """Inject a progress notification (local testing without a backend)."""
        session.on_progress(request.frame)
        return session.snapshot()

    @app.post("/api/v1/reset", response_model=SessionStateResponse)
    async def reset_session():
        session.reset(explicit=True)
        return session.snapshot()

    @app.post("/api/v1/extension/denoising-steps", response_model=SentResponse)
    async def set_denoising_steps(request: DenoisingStepsRequest):
        try:
            sent = session.set_denoising_step_list(request.denoising_step_list)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors()[0]["msg"]) from e
        return SentResponse(sent=sent)

    @app.post("/api/v1/extension/starting-image", response_model=SentResponse)
    async def set_starting_image(request: StartingImageRequest):
        try:
            sent = session.set_starting_image(
                request.base64_image, image_id=request.image_id
            )
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors()[0]["msg"]) from e
        return SentResponse(sent=sent)

    @app.post("/api/v1/extension/prompt", response_model=SentResponse)
    async def set_prompt(request: SetPromptRequest):
        return SentResponse(sent=session.set_prompt(request.prompt))

    @app.get("/api/v1/stories")
    async def list_stories():
        return {"stories": [story.to_dict() for story in story_book]}

    @app.get("/api/v1/stories/{story_id}")
    async def get_story(story_id: str):
        try:
            return story_book.get(story_id).to_dict()
        except KeyError as e:
            raise HTTPException(
                status_code=404, detail=f"Unknown story: {story_id}"
            ) from e

    return app
