"""Shared pytest fixtures."""

import pytest

from promptsync.realtime.session import ControlSession, SessionPhase
from promptsync.server.transport import RecordingTransport


class SentMessages(list):
    """Outbound messages captured in send order."""

    def __call__(self, message: dict):
        self.append(message)

    def types(self) -> list[str]:
        return [m["type"] for m in self]


@pytest.fixture
def sent():
    return SentMessages()


@pytest.fixture
def transport():
    return RecordingTransport(phase=SessionPhase.READY)


@pytest.fixture
def session(transport):
    """Session bound to a recording transport in the READY phase."""
    session = ControlSession(transport.send)
    transport.bind(session)
    return session
