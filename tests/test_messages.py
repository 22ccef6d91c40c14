"""Tests for the wire message models."""

import pytest
from pydantic import ValidationError

from promptsync.realtime.messages import (
    DenoisingStepListData,
    ProgressMessage,
    ResetMessage,
    StartMessage,
    control_message,
    schedule_prompt_message,
)


class TestOutbound:
    def test_control_shape(self):
        assert control_message("I", "W").to_wire() == {
            "type": "control",
            "data": {"mouse_key": "I", "keyboard_key": "W"},
        }

    def test_control_rejects_unknown_letters(self):
        with pytest.raises(ValidationError):
            control_message("W", "I")

    def test_schedule_prompt_shape(self):
        assert schedule_prompt_message("forest", 53).to_wire() == {
            "type": "schedule_prompt",
            "data": {"new_prompt": "forest", "timestamp": 53},
        }

    def test_schedule_prompt_rejects_negative_timestamp(self):
        with pytest.raises(ValidationError):
            schedule_prompt_message("forest", -1)

    def test_start_and_reset_have_no_data(self):
        assert StartMessage().to_wire() == {"type": "start"}
        assert ResetMessage().to_wire() == {"type": "reset"}


class TestDenoisingSteps:
    def test_accepts_up_to_five_in_range(self):
        data = DenoisingStepListData(denoising_step_list=[1000, 750, 500, 250, 0])
        assert data.denoising_step_list == [1000, 750, 500, 250, 0]

    def test_rejects_more_than_five(self):
        with pytest.raises(ValidationError):
            DenoisingStepListData(denoising_step_list=[1, 2, 3, 4, 5, 6])

    @pytest.mark.parametrize("step", [-1, 1001])
    def test_rejects_out_of_range(self, step):
        with pytest.raises(ValidationError, match="must be between 0 and 1000"):
            DenoisingStepListData(denoising_step_list=[700, step])


class TestProgress:
    def test_valid(self):
        message = ProgressMessage.model_validate(
            {"type": "progress", "data": {"current_start_frame": 12}}
        )
        assert message.data.current_start_frame == 12

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"current_start_frame": None},
            {"current_start_frame": -3},
            {"current_start_frame": "12"},
            {"current_start_frame": True},
        ],
    )
    def test_malformed(self, data):
        with pytest.raises(ValidationError):
            ProgressMessage.model_validate({"type": "progress", "data": data})
