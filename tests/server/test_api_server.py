"""Tests for the local control API."""

import pytest
from fastapi.testclient import TestClient

from promptsync.realtime.stories import StoryBook
from promptsync.server.api_server import create_api_app


@pytest.fixture
def client(session):
    return TestClient(create_api_app(session))


class TestState:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_initial_session_state(self, client):
        data = client.get("/api/v1/session").json()

        assert data["phase"] == "ready"
        assert data["current_frame"] == 0
        assert data["started"] is False
        assert data["control"]["keyboard_key"] == "Q"
        assert data["control"]["mouse_key"] == "U"


class TestControl:
    def test_press_by_name(self, client, transport):
        response = client.post(
            "/api/v1/control/press", json={"axis": "movement", "symbol": "forward"}
        )

        assert response.json() == {
            "emitted": True,
            "keyboard_key": "W",
            "mouse_key": "U",
        }
        assert transport.types() == ["control"]

    def test_repeat_press_not_emitted(self, client, transport):
        body = {"axis": "view", "symbol": "I"}
        client.post("/api/v1/control/press", json=body)

        response = client.post("/api/v1/control/press", json=body)

        assert response.json()["emitted"] is False
        assert len(transport.messages) == 1

    def test_unknown_symbol_rejected(self, client, transport):
        response = client.post(
            "/api/v1/control/press", json={"axis": "movement", "symbol": "up"}
        )

        assert response.status_code == 422
        assert transport.messages == []

    def test_release_without_symbol(self, client, transport):
        client.post("/api/v1/control/press", json={"axis": "view", "symbol": "left"})

        response = client.post("/api/v1/control/release", json={"axis": "view"})

        assert response.json() == {
            "emitted": True,
            "keyboard_key": "Q",
            "mouse_key": "U",
        }

    def test_release_accepts_neutral_name(self, client):
        response = client.post(
            "/api/v1/control/release", json={"axis": "movement", "symbol": "neutral"}
        )

        assert response.status_code == 200
        assert response.json()["emitted"] is False

    def test_key_events(self, client, transport):
        client.post("/api/v1/control/key", json={"key": "d"})
        client.post("/api/v1/control/key", json={"key": "d", "pressed": False})

        assert [m["data"]["keyboard_key"] for m in transport.messages] == ["D", "Q"]

    def test_unmapped_key(self, client, transport):
        response = client.post("/api/v1/control/key", json={"key": "z"})

        assert response.status_code == 422
        assert transport.messages == []


class TestPrompt:
    def test_first_prompt_starts(self, client, transport):
        response = client.post("/api/v1/prompt", json={"prompt": "a"})

        assert response.json() == {
            "scheduled": True,
            "prompt": "a",
            "target_frame": 0,
            "started_session": True,
        }
        assert transport.types() == ["schedule_prompt", "start"]

    def test_prompt_after_progress(self, client):
        client.post("/api/v1/progress", json={"frame": 50})

        response = client.post("/api/v1/prompt", json={"prompt": "b"})

        assert response.json()["target_frame"] == 53
        assert response.json()["started_session"] is False

    def test_blank_prompt(self, client, transport):
        response = client.post("/api/v1/prompt", json={"prompt": "  "})

        assert response.json()["scheduled"] is False
        assert transport.messages == []

    def test_reset(self, client, transport):
        client.post("/api/v1/prompt", json={"prompt": "a"})
        client.post("/api/v1/progress", json={"frame": 9})

        data = client.post("/api/v1/reset").json()

        assert data["current_frame"] == 0
        assert data["started"] is False
        assert transport.messages[-1] == {"type": "reset"}

    def test_recent_messages(self, client):
        client.post("/api/v1/prompt", json={"prompt": "a"})

        data = client.get("/api/v1/messages", params={"limit": 1}).json()

        assert data["messages"] == [{"type": "start"}]


class TestExtensions:
    def test_denoising_steps(self, client, transport):
        response = client.post(
            "/api/v1/extension/denoising-steps",
            json={"denoising_step_list": [700, 500, 200]},
        )

        assert response.json() == {"sent": True}
        assert transport.types() == ["set_denoising_step_list"]

    def test_invalid_denoising_steps(self, client, transport):
        response = client.post(
            "/api/v1/extension/denoising-steps",
            json={"denoising_step_list": [1, 2, 3, 4, 5, 6]},
        )

        assert response.status_code == 422
        assert transport.messages == []

    def test_starting_image(self, client, transport):
        client.post(
            "/api/v1/extension/starting-image",
            json={"base64_image": "data:image/jpeg;base64,/9j/4AAQ", "image_id": "a1"},
        )

        assert transport.messages == [
            {
                "type": "set_starting_image",
                "data": {"base64_image": "/9j/4AAQ", "image_id": "a1"},
            }
        ]

    def test_starting_image_generates_id(self, client, transport):
        client.post("/api/v1/extension/starting-image", json={"base64_image": "/9j/"})

        assert transport.messages[0]["data"]["image_id"].startswith("upload_")

    def test_set_prompt(self, client, transport):
        response = client.post("/api/v1/extension/prompt", json={"prompt": "fog"})

        assert response.json() == {"sent": True}
        assert transport.messages == [{"type": "set_prompt", "data": {"prompt": "fog"}}]


class TestStories:
    def test_list_default_stories(self, client):
        stories = client.get("/api/v1/stories").json()["stories"]

        assert len(stories) >= 1
        assert "start_prompt" in stories[0]

    def test_custom_book(self, session):
        book = StoryBook.from_list(
            [
                {
                    "id": "s",
                    "title": "S",
                    "startPrompt": {"id": "s1", "title": "", "prompt": "p"},
                }
            ]
        )
        client = TestClient(create_api_app(session, stories=book))

        assert client.get("/api/v1/stories/s").json()["start_prompt"]["prompt"] == "p"
        assert client.get("/api/v1/stories/missing").status_code == 404
