"""
Marker and frame controller.

Applies operator actions to the marker registry and the transform channel:
- spawn a grid of six-axis markers (one commit per grid)
- replace a clicked marker with a free-move marker at the reported pose
- publish an ad-hoc static frame between two named frames

The controller holds no locks; the registry and the transform channel are
responsible for their own thread safety.
"""

import logging
from typing import List, Optional, Union

from marker_controls.broadcaster import FrameBroadcaster
from marker_controls.config import ControllerConfig
from marker_controls.core.builder import build_marker
from marker_controls.core.feedback import (
    FeedbackEvent,
    FeedbackEventType,
    FeedbackResult,
    FeedbackState,
)
from marker_controls.core.marker import InteractionMode, MarkerSpec
from marker_controls.core.registry import MarkerRegistry
from marker_controls.core.transforms import Quaternion, TransformRecord, Vector3, VectorInput
from marker_controls.errors import (
    InvalidInputError,
    MarkerNotFoundError,
    UnexpectedEventKindError,
    UninitializedCollaboratorError,
)

logger = logging.getLogger(__name__)


class MarkerController:
    """
    Owns the policy of which markers exist; the registry owns their storage.

    Markers are never edited in place. An update erases the old marker and
    inserts a new one, so a marker's name may change across interactions.
    """

    def __init__(self, registry: Optional[MarkerRegistry],
                 broadcaster: Optional[FrameBroadcaster],
                 config: Optional[ControllerConfig] = None):
        self.registry = registry
        self.broadcaster = broadcaster
        self.config = config or ControllerConfig()

    def _require_registry(self) -> MarkerRegistry:
        if self.registry is None:
            logger.error("Interactive marker registry is not initialized.")
            raise UninitializedCollaboratorError("Interactive marker registry is not initialized")
        return self.registry

    def _require_broadcaster(self) -> FrameBroadcaster:
        if self.broadcaster is None:
            logger.error("Transform broadcaster is not initialized.")
            raise UninitializedCollaboratorError("Transform broadcaster is not initialized")
        return self.broadcaster

    def _build(self, mode: InteractionMode, position: VectorInput) -> MarkerSpec:
        return build_marker(mode, position,
                            frame_id=self.config.markers.frame_id,
                            scale=self.config.markers.scale)

    # --- Markers ---

    def add_marker(self, position: VectorInput,
                   interaction_mode: Union[InteractionMode, str] = InteractionMode.FULL_6DOF) -> MarkerSpec:
        """Build, insert and commit a single marker."""
        registry = self._require_registry()
        marker = self._build(interaction_mode, position)
        registry.insert(marker)
        registry.commit()
        logger.info(f"Marker '{marker.name}' created and added to registry.")
        return marker

    def spawn_grid(self, rows: Optional[int] = None, cols: Optional[int] = None,
                   spacing: Optional[float] = None) -> List[str]:
        """
        Spawn a rows x cols grid of six-axis markers on the z=0 plane.

        Marker (i, j) sits at (i * spacing, j * spacing, 0). All insertions are
        committed together. Names derive from position, so spawning the same
        grid twice overwrites the first one.

        Args:
            rows: Number of rows (default from config)
            cols: Number of columns (default from config)
            spacing: Distance between neighbours (default from config)

        Returns:
            Names of the inserted markers, in insertion order

        Raises:
            UninitializedCollaboratorError: If there is no registry
                (nothing is inserted)
            InvalidInputError: On negative dimensions
        """
        registry = self._require_registry()

        grid = self.config.grid
        rows = grid.rows if rows is None else int(rows)
        cols = grid.cols if cols is None else int(cols)
        spacing = grid.spacing if spacing is None else float(spacing)
        if rows < 0 or cols < 0:
            logger.warning(f"Rejected grid with negative size {rows}x{cols}")
            raise InvalidInputError(f"Grid size must be non-negative, got {rows}x{cols}")

        logger.info(f"Creating {rows}x{cols} grid of markers (spacing {spacing})")
        names = []
        for i in range(rows):
            for j in range(cols):
                marker = self._build(InteractionMode.FULL_6DOF,
                                     Vector3(i * spacing, j * spacing, 0.0))
                registry.insert(marker)
                names.append(marker.name)

        registry.commit()
        logger.info(f"{len(names)} markers applied to registry.")
        return names

    def process_feedback(self, event: FeedbackEvent) -> FeedbackResult:
        """
        Handle an operator feedback event.

        Only BUTTON_CLICK events act: the clicked marker is erased and a
        free-move marker is inserted at the reported pose. Other events, and
        clicks on unknown markers, are logged and dropped.
        """
        if event.event_type != FeedbackEventType.BUTTON_CLICK:
            err = UnexpectedEventKindError(
                f"Unexpected event type: {event.event_type.name} ({int(event.event_type)})")
            logger.warning(str(err))
            return self._rejected(event, err)

        logger.info(f"Marker clicked: {event.marker_name}")

        try:
            registry = self._require_registry()
        except UninitializedCollaboratorError as err:
            return self._rejected(event, err)

        if registry.get(event.marker_name) is None:
            err = MarkerNotFoundError(f"Marker '{event.marker_name}' not found!")
            logger.warning(str(err))
            return self._rejected(event, err)

        # Validated: replace the marker
        registry.erase(event.marker_name)
        position = event.pose.position
        marker = self._build(InteractionMode.MOVE_3D, position)
        registry.insert(marker)
        registry.commit()

        logger.info(f"Move-3D marker created at position: "
                    f"[{position.x:f}, {position.y:f}, {position.z:f}]")
        return FeedbackResult(
            state=FeedbackState.REPLACED,
            source_name=event.marker_name,
            marker_name=marker.name,
        )

    @staticmethod
    def _rejected(event: FeedbackEvent, err) -> FeedbackResult:
        return FeedbackResult(
            state=FeedbackState.REJECTED,
            source_name=event.marker_name,
            code=err.code,
            message=str(err),
        )

    # --- Frames ---

    def publish_frame(self, frame_id: str, parent_frame_id: str) -> TransformRecord:
        """
        Publish an identity transform from parent_frame_id to frame_id.

        Raises:
            InvalidInputError: If either name is empty (nothing published)
            UninitializedCollaboratorError: If there is no broadcaster
        """
        if not frame_id or not parent_frame_id:
            logger.warning("Frame names are empty.")
            raise InvalidInputError("Frame name and parent frame name must both be non-empty")

        broadcaster = self._require_broadcaster()
        record = TransformRecord(
            child_frame_id=frame_id,
            parent_frame_id=parent_frame_id,
            stamp=broadcaster.now(),
            translation=Vector3(0.0, 0.0, 0.0),
            rotation=Quaternion.identity(),
        )
        broadcaster.publish(record)
        logger.info(f"Publishing transformation between '{frame_id}' and '{parent_frame_id}'.")
        return record
