import logging

import pytest

from marker_controls.broadcaster import FrameBroadcaster
from marker_controls.config import ControllerConfig
from marker_controls.controller import MarkerController
from marker_controls.core.builder import marker_name
from marker_controls.core.feedback import FeedbackEvent, FeedbackEventType, FeedbackState
from marker_controls.core.marker import InteractionMode
from marker_controls.core.registry import MarkerRegistry
from marker_controls.core.transforms import Pose, Vector3
from marker_controls.errors import InvalidInputError, UninitializedCollaboratorError


class RecordingPublisher:
    def __init__(self) -> None:
        self.records = []

    def send_transform(self, record) -> None:
        self.records.append(record)


class CountingRegistry(MarkerRegistry):
    def __init__(self) -> None:
        super().__init__()
        self.commits = 0
        self.inserts = 0

    def insert(self, marker) -> None:
        self.inserts += 1
        super().insert(marker)

    def commit(self) -> int:
        self.commits += 1
        return super().commit()


def build_controller(registry=None, publisher=None):
    registry = registry if registry is not None else MarkerRegistry()
    publisher = publisher if publisher is not None else RecordingPublisher()
    broadcaster = FrameBroadcaster(publisher=publisher, clock=lambda: 42.0)
    return MarkerController(registry, broadcaster, ControllerConfig()), registry, publisher


def click(name: str, position=(0.0, 0.0, 0.0), event_type=FeedbackEventType.BUTTON_CLICK):
    return FeedbackEvent(event_type=event_type, marker_name=name,
                         pose=Pose(position=Vector3(*position)))


# --- Grid ---

def test_spawn_grid_places_six_axis_marker_per_cell() -> None:
    controller, registry, _ = build_controller()

    names = controller.spawn_grid()

    assert len(names) == 25
    assert len(registry) == 25
    for i in range(5):
        for j in range(5):
            marker = registry.get(marker_name((i * 2.0, j * 2.0, 0.0)))
            assert marker is not None
            assert marker.position == Vector3(i * 2.0, j * 2.0, 0.0)
            assert len(marker.axis_controls()) == 6
            assert len(marker.controls) == 7


def test_spawn_grid_commits_once() -> None:
    registry = CountingRegistry()
    controller, _, _ = build_controller(registry=registry)

    controller.spawn_grid(rows=3, cols=4, spacing=1.0)

    assert registry.inserts == 12
    assert registry.commits == 1
    assert registry.revision == 1


def test_spawn_grid_twice_overwrites_instead_of_duplicating() -> None:
    controller, registry, _ = build_controller()

    controller.spawn_grid()
    controller.spawn_grid()

    assert len(registry) == 25


def test_spawn_grid_without_registry_fails_closed(caplog) -> None:
    controller = MarkerController(None, None)
    caplog.set_level(logging.ERROR, logger="marker_controls.controller")

    with pytest.raises(UninitializedCollaboratorError):
        controller.spawn_grid()

    assert "not initialized" in caplog.text


def test_spawn_grid_rejects_negative_size() -> None:
    registry = CountingRegistry()
    controller, _, _ = build_controller(registry=registry)

    with pytest.raises(InvalidInputError):
        controller.spawn_grid(rows=-1)

    assert registry.inserts == 0
    assert len(registry) == 0


def test_spawn_grid_uses_configured_defaults() -> None:
    config = ControllerConfig.from_dict({"grid": {"rows": 2, "cols": 3, "spacing": 0.5}})
    registry = MarkerRegistry()
    controller = MarkerController(registry, None, config)

    controller.spawn_grid()

    assert len(registry) == 6
    assert registry.get(marker_name((0.5, 1.0, 0.0))) is not None


# --- Feedback ---

def test_click_on_missing_marker_changes_nothing(caplog) -> None:
    registry = CountingRegistry()
    controller, _, _ = build_controller(registry=registry)
    controller.spawn_grid(rows=1, cols=1)
    before = registry.to_dict()
    inserts = registry.inserts
    caplog.set_level(logging.WARNING, logger="marker_controls.controller")

    result = controller.process_feedback(click("X"))

    assert result.state == FeedbackState.REJECTED
    assert result.code == "MARKER_NOT_FOUND"
    assert registry.to_dict() == before
    assert registry.inserts == inserts
    assert any(r.levelno == logging.WARNING and "'X' not found" in r.getMessage()
               for r in caplog.records)


def test_click_replaces_marker_with_move_3d_marker() -> None:
    controller, registry, _ = build_controller()
    controller.spawn_grid(rows=1, cols=1)
    old_name = marker_name((0.0, 0.0, 0.0))

    result = controller.process_feedback(click(old_name, position=(1.5, -2.0, 0.25)))

    assert result.state == FeedbackState.REPLACED
    assert registry.get(old_name) is None
    assert len(registry) == 1
    new_marker = registry.get(result.marker_name)
    assert new_marker.position == Vector3(1.5, -2.0, 0.25)
    assert new_marker.controls[0].interaction_mode == InteractionMode.MOVE_3D
    assert len(new_marker.controls) == 2


def test_click_at_own_position_replaces_marker_under_same_name() -> None:
    controller, registry, _ = build_controller()
    controller.spawn_grid(rows=1, cols=1)
    name = marker_name((0.0, 0.0, 0.0))
    assert len(registry.get(name).controls) == 7

    result = controller.process_feedback(click(name, position=(0.0, 0.0, 0.0)))

    assert result.state == FeedbackState.REPLACED
    assert result.marker_name == name
    assert len(registry) == 1
    replacement = registry.get(name)
    assert replacement.controls[0].interaction_mode == InteractionMode.MOVE_3D
    assert len(replacement.controls) == 2


def test_non_click_event_is_ignored(caplog) -> None:
    controller, registry, _ = build_controller()
    controller.spawn_grid(rows=1, cols=1)
    name = marker_name((0.0, 0.0, 0.0))
    caplog.set_level(logging.WARNING, logger="marker_controls.controller")

    result = controller.process_feedback(
        click(name, position=(3.0, 3.0, 0.0), event_type=FeedbackEventType.POSE_UPDATE))

    assert result.state == FeedbackState.REJECTED
    assert result.code == "UNEXPECTED_EVENT_KIND"
    assert registry.get(name) is not None
    assert "Unexpected event type" in caplog.text


def test_click_without_registry_is_rejected() -> None:
    controller = MarkerController(None, None)

    result = controller.process_feedback(click("anything"))

    assert result.state == FeedbackState.REJECTED
    assert result.code == "UNINITIALIZED_COLLABORATOR"


# --- Frames ---

def test_publish_frame_sends_identity_transform_once() -> None:
    controller, _, publisher = build_controller()

    record = controller.publish_frame("child", "base")

    assert publisher.records == [record]
    assert record.child_frame_id == "child"
    assert record.parent_frame_id == "base"
    assert record.translation == Vector3(0.0, 0.0, 0.0)
    assert record.rotation.is_identity()
    assert record.stamp == 42.0


@pytest.mark.parametrize("frame_id, parent", [("", "base"), ("child", ""), (None, "base")])
def test_publish_frame_rejects_empty_names(frame_id, parent) -> None:
    controller, _, publisher = build_controller()

    with pytest.raises(InvalidInputError):
        controller.publish_frame(frame_id, parent)

    assert publisher.records == []


def test_publish_frame_without_broadcaster() -> None:
    controller = MarkerController(MarkerRegistry(), None)

    with pytest.raises(UninitializedCollaboratorError):
        controller.publish_frame("child", "base")
