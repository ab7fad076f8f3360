"""Core components for marker controls."""

from marker_controls.core.transforms import (
    Vector3,
    Quaternion,
    Pose,
    TransformRecord,
    quaternion_from_rpy,
)
from marker_controls.core.marker import (
    InteractionMode,
    VisualPrimitive,
    VisualPrimitiveType,
    ControlSpec,
    MarkerSpec,
)
from marker_controls.core.builder import build_marker, make_box, marker_name
from marker_controls.core.registry import MarkerRegistry
from marker_controls.core.feedback import (
    FeedbackEvent,
    FeedbackEventType,
    FeedbackResult,
    FeedbackState,
)

__all__ = [
    "Vector3",
    "Quaternion",
    "Pose",
    "TransformRecord",
    "quaternion_from_rpy",
    "InteractionMode",
    "VisualPrimitive",
    "VisualPrimitiveType",
    "ControlSpec",
    "MarkerSpec",
    "build_marker",
    "make_box",
    "marker_name",
    "MarkerRegistry",
    "FeedbackEvent",
    "FeedbackEventType",
    "FeedbackResult",
    "FeedbackState",
]
