"""Outbound message dispatch for the session channel.

Sending is fire-and-forget: the dispatcher hands each message to the
transport and never waits for delivery. Transport failures are logged and
swallowed so local state changes are never rolled back.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

SendResult = Union[None, Awaitable[Any]]
SendFn = Callable[[dict], SendResult]


class MessageDispatcher:
    """Hands outbound messages to the transport in detection order."""

    def __init__(self, send: SendFn):
        self._send = send
        self._listeners: list[Callable[[dict], None]] = []
        self._pending: set[asyncio.Future] = set()
        self.sent = 0
        self.failed = 0

    def add_listener(self, listener: Callable[[dict], None]):
        """Register a callback invoked with every dispatched message."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[dict], None]):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def __call__(self, message: dict) -> bool:
        """Dispatch one message.

        Returns:
            False if the transport raised synchronously or an async send had
            no running loop, True otherwise.
            True does not mean the message was delivered.
        """
        for listener in self._listeners:
            try:
                listener(message)
            except Exception as e:
                logger.error(f"Error in dispatch listener: {e}")

        try:
            result = self._send(message)
        except Exception as e:
            self.failed += 1
            logger.error(f"Failed to send {message.get('type')} message: {e}")
            return False

        if inspect.isawaitable(result) and not self._schedule(result, message):
            return False

        self.sent += 1
        logger.debug(f"Dispatched message: {message}")
        return True

    def _schedule(self, awaitable: Awaitable[Any], message: dict) -> bool:
        """Run an async send on the running loop without awaiting it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            # No running loop to carry the send
            self.failed += 1
            logger.error(f"Failed to schedule {message.get('type')} message: {e}")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return False

        future = asyncio.ensure_future(awaitable, loop=loop)
        self._pending.add(future)

        def _on_done(fut: asyncio.Future):
            self._pending.discard(fut)
            if fut.cancelled():
                return
            exc = fut.exception()
            if exc is not None:
                self.failed += 1
                logger.error(f"Failed to send {message.get('type')} message: {exc}")

        future.add_done_callback(_on_done)
        return True

    @property
    def in_flight(self) -> int:
        """Number of async sends not yet completed."""
        return len(self._pending)

    def stats(self) -> dict:
        return {"sent": self.sent, "failed": self.failed, "in_flight": self.in_flight}


def as_dispatcher(
    send: Optional[Union[SendFn, MessageDispatcher]],
) -> MessageDispatcher:
    """Wrap a bare send callable, passing existing dispatchers through."""
    if isinstance(send, MessageDispatcher):
        return send
    if send is None:
        return MessageDispatcher(lambda _: None)
    return MessageDispatcher(send)
