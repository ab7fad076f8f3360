"""
Marker Controls - interactive marker grid and animated frame broadcaster.

This package provides:
- A builder for interactive markers (six-axis, free move, free rotate)
- A marker registry with batched, atomic commits
- A controller that spawns marker grids and replaces clicked markers
- A fixed-rate broadcaster for a moving and a rotating frame
- A JSON/TCP command server and client for operator actions
"""

from marker_controls.core.builder import build_marker
from marker_controls.core.marker import InteractionMode, MarkerSpec, ControlSpec
from marker_controls.core.registry import MarkerRegistry
from marker_controls.core.feedback import FeedbackEvent, FeedbackEventType
from marker_controls.broadcaster import FrameBroadcaster, WallTimer
from marker_controls.publisher import TransformBuffer
from marker_controls.controller import MarkerController
from marker_controls.client import MarkerClient

__version__ = "1.0.0"
__all__ = [
    "build_marker",
    "InteractionMode",
    "MarkerSpec",
    "ControlSpec",
    "MarkerRegistry",
    "FeedbackEvent",
    "FeedbackEventType",
    "FrameBroadcaster",
    "WallTimer",
    "TransformBuffer",
    "MarkerController",
    "MarkerClient",
]
