"""
Feedback events delivered by the visualization front end.

Event type values follow the interactive marker feedback protocol so raw
integer codes from the wire map directly.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Union

from marker_controls.core.transforms import Pose


class FeedbackEventType(IntEnum):
    """Kinds of operator feedback."""
    KEEP_ALIVE = 0
    POSE_UPDATE = 1
    MENU_SELECT = 2
    BUTTON_CLICK = 3
    MOUSE_DOWN = 4
    MOUSE_UP = 5

    @classmethod
    def parse(cls, value: Union["FeedbackEventType", int, str]) -> "FeedbackEventType":
        """Accept an enum member, its integer code, or its name (any case)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown feedback event type: {value!r}")
        return cls(int(value))


@dataclass(frozen=True)
class FeedbackEvent:
    """A single feedback message referencing a marker by name."""
    event_type: FeedbackEventType
    marker_name: str
    pose: Pose = field(default_factory=Pose)
    control_name: str = ""
    client_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "FeedbackEvent":
        pose_data = data.get('pose')
        if pose_data is None:
            pose_data = {k: data[k] for k in ('position', 'orientation') if k in data}
        return cls(
            event_type=FeedbackEventType.parse(data['event_type']),
            marker_name=data['marker_name'],
            pose=Pose.from_dict(pose_data),
            control_name=data.get('control_name', ""),
            client_id=data.get('client_id', ""),
        )


class FeedbackState(Enum):
    """Stages a feedback event passes through."""
    RECEIVED = "received"
    VALIDATED = "validated"
    REPLACED = "replaced"
    REJECTED = "rejected"


@dataclass(frozen=True)
class FeedbackResult:
    """Outcome of handling one feedback event."""
    state: FeedbackState
    source_name: str
    marker_name: Optional[str] = None  # Name of the replacement marker
    code: Optional[str] = None  # Error code when rejected
    message: str = ""

    @property
    def replaced(self) -> bool:
        return self.state == FeedbackState.REPLACED

    def to_response(self) -> dict:
        """Convert to a command response."""
        if self.replaced:
            return {
                "status": "success",
                "state": self.state.value,
                "erased": self.source_name,
                "name": self.marker_name,
            }
        return {
            "status": "error",
            "state": self.state.value,
            "message": self.message,
            "code": self.code,
        }
