"""
Marker construction.

Pure functions that turn an interaction mode and a position into a fully
described MarkerSpec. Nothing here touches the registry.
"""

import time
from typing import List, Optional, Union

from marker_controls.core.marker import (
    ControlSpec,
    DEFAULT_DESCRIPTION,
    DEFAULT_FRAME_ID,
    DEFAULT_MARKER_SCALE,
    InteractionMode,
    MarkerSpec,
    VisualPrimitive,
    VisualPrimitiveType,
)
from marker_controls.core.transforms import Pose, Quaternion, Vector3, VectorInput


# Cube edge relative to marker scale
BOX_SCALE_FACTOR = 0.45
BOX_COLOR = (0.5, 0.5, 0.5, 1.0)

MARKER_NAME_PREFIX = "6dof_marker_"

# Axis-aligned control orientations, normalized from (x, y, z, w) = axis + w=1
_AXIS_ORIENTATIONS = (
    ("x", Quaternion(1.0, 0.0, 0.0, 1.0).normalized()),
    ("y", Quaternion(0.0, 1.0, 0.0, 1.0).normalized()),
    ("z", Quaternion(0.0, 0.0, 1.0, 1.0).normalized()),
)


def marker_name(position: VectorInput) -> str:
    """
    Derive a marker name from its position.

    Only x and y take part, formatted with six decimals, so two markers at the
    same planar position share a name.
    """
    pos = Vector3.parse(position)
    return f"{MARKER_NAME_PREFIX}{pos.x:f}_{pos.y:f}"


def make_box(marker_scale: float = DEFAULT_MARKER_SCALE) -> VisualPrimitive:
    """Grey opaque cube sized relative to the marker scale."""
    edge = marker_scale * BOX_SCALE_FACTOR
    return VisualPrimitive(
        type=VisualPrimitiveType.CUBE,
        scale=Vector3(edge, edge, edge),
        color=BOX_COLOR,
    )


def make_axis_controls() -> List[ControlSpec]:
    """Rotate and move handles for each of the x, y and z axes."""
    controls = []
    for axis, orientation in _AXIS_ORIENTATIONS:
        controls.append(ControlSpec(name=f"rotate_{axis}",
                                    interaction_mode=InteractionMode.ROTATE_AXIS,
                                    orientation=orientation))
        controls.append(ControlSpec(name=f"move_{axis}",
                                    interaction_mode=InteractionMode.MOVE_AXIS,
                                    orientation=orientation))
    return controls


def _coerce_mode(interaction_mode: Union[InteractionMode, str, None]) -> Optional[InteractionMode]:
    if isinstance(interaction_mode, InteractionMode):
        return interaction_mode
    try:
        return InteractionMode(interaction_mode)
    except ValueError:
        return None


def build_marker(interaction_mode: Union[InteractionMode, str, None],
                 position: VectorInput,
                 frame_id: str = DEFAULT_FRAME_ID,
                 scale: float = DEFAULT_MARKER_SCALE,
                 stamp: Optional[float] = None,
                 description: str = DEFAULT_DESCRIPTION) -> MarkerSpec:
    """
    Build an interactive marker at a position.

    Args:
        interaction_mode: MOVE_3D or ROTATE_3D give a single control of that
            mode. Anything else (FULL_6DOF, unknown values, None) gives six
            axis controls.
        position: Marker position in frame_id
        frame_id: Frame the pose is expressed in
        scale: Uniform marker scale
        stamp: Creation time in seconds (default: now)
        description: Human readable description

    Returns:
        MarkerSpec whose last control is a MOVE_3D control carrying the cube.
    """
    pos = Vector3.parse(position)
    mode = _coerce_mode(interaction_mode)

    if mode == InteractionMode.MOVE_3D:
        controls = [ControlSpec(name="move_3d", interaction_mode=InteractionMode.MOVE_3D)]
    elif mode == InteractionMode.ROTATE_3D:
        controls = [ControlSpec(name="rotate_3d", interaction_mode=InteractionMode.ROTATE_3D)]
    else:
        controls = make_axis_controls()

    # The cube rides on its own MOVE_3D control so it stays draggable
    controls.append(ControlSpec(name="cube_control",
                                interaction_mode=InteractionMode.MOVE_3D,
                                markers=[make_box(scale)]))

    return MarkerSpec(
        name=marker_name(pos),
        pose=Pose(position=pos),
        frame_id=frame_id,
        stamp=time.time() if stamp is None else stamp,
        scale=scale,
        description=description,
        controls=controls,
    )
