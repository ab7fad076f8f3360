import math

import pytest

from marker_controls.core.feedback import FeedbackEvent, FeedbackEventType
from marker_controls.core.transforms import Quaternion, Vector3, quaternion_from_rpy


def test_quaternion_from_rpy_single_axes() -> None:
    half = math.sqrt(0.5)

    assert quaternion_from_rpy(0.0, 0.0, 0.0).is_identity()
    assert quaternion_from_rpy(math.pi / 2, 0.0, 0.0).to_list() == pytest.approx([half, 0.0, 0.0, half])
    assert quaternion_from_rpy(0.0, math.pi / 2, 0.0).to_list() == pytest.approx([0.0, half, 0.0, half])
    assert quaternion_from_rpy(0.0, 0.0, math.pi / 2).to_list() == pytest.approx([0.0, 0.0, half, half])


def test_normalized_quaternion() -> None:
    q = Quaternion(0.0, 0.0, 2.0, 2.0).normalized()

    assert q.to_list() == pytest.approx([0.0, 0.0, math.sqrt(0.5), math.sqrt(0.5)])
    assert Quaternion(0.0, 0.0, 0.0, 0.0).normalized().is_identity()


def test_vector_parse_forms() -> None:
    assert Vector3.parse([1, 2, 3]) == Vector3(1.0, 2.0, 3.0)
    assert Vector3.parse({"x": 1, "z": 3}) == Vector3(1.0, 0.0, 3.0)
    with pytest.raises(ValueError):
        Vector3.parse([1.0, 2.0])


def test_feedback_event_type_parsing() -> None:
    assert FeedbackEventType.parse(3) == FeedbackEventType.BUTTON_CLICK
    assert FeedbackEventType.parse("mouse_up") == FeedbackEventType.MOUSE_UP
    with pytest.raises(ValueError):
        FeedbackEventType.parse(42)


def test_feedback_event_from_dict_with_nested_pose() -> None:
    event = FeedbackEvent.from_dict({
        "event_type": "BUTTON_CLICK",
        "marker_name": "m",
        "pose": {"position": {"x": 1.0, "y": 2.0, "z": 0.5}},
    })

    assert event.pose.position == Vector3(1.0, 2.0, 0.5)
    assert event.pose.orientation.is_identity()
