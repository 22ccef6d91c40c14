"""Session transports - adapters between a ControlSession and its channel.

The session only needs ``send(message)``, an inbound message stream and
lifecycle phase notifications. Connection negotiation happens elsewhere;
the transports here wrap a channel that already exists.

    pc = RTCPeerConnection(...)
    channel = pc.createDataChannel("session", ordered=True)
    ...negotiate...
    transport = DataChannelTransport(pc, channel)
    session = ControlSession(transport.send)
    transport.bind(session)
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Callable, Protocol

from aiortc import RTCDataChannel, RTCPeerConnection

from promptsync.realtime.session import SessionPhase

if TYPE_CHECKING:
    from promptsync.realtime.session import ControlSession

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Any], None]
PhaseListener = Callable[[SessionPhase], None]

_CLOSED_PC_STATES = ("disconnected", "failed", "closed")


class SessionTransport(Protocol):
    """What a ControlSession needs from its channel."""

    def send(self, message: dict) -> Any: ...


class BaseTransport:
    """Listener bookkeeping shared by the transports."""

    def __init__(self):
        self._message_handlers: list[MessageHandler] = []
        self._phase_listeners: list[PhaseListener] = []
        self._phase = SessionPhase.DISCONNECTED

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    def add_message_handler(self, handler: MessageHandler):
        self._message_handlers.append(handler)

    def add_phase_listener(self, listener: PhaseListener):
        self._phase_listeners.append(listener)

    def bind(self, session: ControlSession):
        """Route inbound messages and phase changes into ``session``."""
        self.add_message_handler(session.handle_message)
        self.add_phase_listener(session.on_phase_change)
        session.on_phase_change(self._phase)

    def _deliver(self, message: Any):
        for handler in self._message_handlers:
            try:
                handler(message)
            except Exception as e:
                logger.error(f"Error in message handler: {e}")

    def _set_phase(self, phase: SessionPhase):
        if phase == self._phase:
            return
        self._phase = phase
        for listener in self._phase_listeners:
            try:
                listener(phase)
            except Exception as e:
                logger.error(f"Error in phase listener: {e}")


class DataChannelTransport(BaseTransport):
    """Session transport over an ordered aiortc data channel."""

    def __init__(self, pc: RTCPeerConnection, channel: RTCDataChannel):
        super().__init__()
        self.pc = pc
        self.channel = channel

        if not channel.ordered:
            logger.warning(
                f"Data channel {channel.label!r} is unordered; "
                "outbound message order is not guaranteed"
            )

        @channel.on("open")
        def on_channel_open():
            logger.info(f"Data channel {channel.label!r} opened")
            self._refresh_phase()

        @channel.on("close")
        def on_channel_close():
            logger.info(f"Data channel {channel.label!r} closed")
            self._refresh_phase()

        @channel.on("message")
        def on_channel_message(message):
            logger.debug(f"Data channel message: {message}")
            self._deliver(message)

        @pc.on("connectionstatechange")
        def on_connection_state_change():
            logger.info(f"Connection state: {pc.connectionState}")
            self._refresh_phase()

        self._phase = self._compute_phase()

    def _compute_phase(self) -> SessionPhase:
        state = self.pc.connectionState
        if state in _CLOSED_PC_STATES or self.channel.readyState == "closed":
            return SessionPhase.DISCONNECTED
        if state == "connected":
            if self.channel.readyState == "open":
                return SessionPhase.READY
            return SessionPhase.WAITING
        return SessionPhase.CONNECTING

    def _refresh_phase(self):
        self._set_phase(self._compute_phase())

    def send(self, message: dict):
        """Send a message if the channel is open; otherwise drop it.

        Raises whatever the channel raises on send. Callers going through a
        MessageDispatcher get that logged and swallowed.
        """
        if self.channel.readyState != "open":
            logger.warning(
                f"Data channel not open ({self.channel.readyState}), "
                f"dropping {message.get('type')} message"
            )
            return
        self.channel.send(json.dumps(message))

    async def close(self):
        """Close the peer connection. Phase listeners see DISCONNECTED."""
        if self.pc.connectionState != "closed":
            await self.pc.close()
        self._refresh_phase()


class RecordingTransport(BaseTransport):
    """In-memory transport that records every outbound message.

    Used for dry runs and tests. Phases and inbound messages are injected
    with ``set_phase`` and ``receive``.
    """

    def __init__(self, phase: SessionPhase = SessionPhase.READY):
        super().__init__()
        self._phase = phase
        self.messages: list[dict] = []

    def send(self, message: dict):
        self.messages.append(json.loads(json.dumps(message)))

    def receive(self, message: Any):
        self._deliver(message)

    def set_phase(self, phase: SessionPhase):
        self._set_phase(phase)

    def types(self) -> list[str]:
        return [m.get("type") for m in self.messages]

    def clear(self):
        self.messages.clear()
