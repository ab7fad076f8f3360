"""
Interactive marker and control definitions.

MarkerSpec is the unit the registry stores: a named, posed object with an
ordered list of manipulation handles (ControlSpec). All types are data-only
and JSON/YAML serializable.
"""

from typing import List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum

from marker_controls.core.transforms import Pose, Quaternion, Vector3


DEFAULT_FRAME_ID = "base_link"
DEFAULT_DESCRIPTION = "6-DOF Control Marker"
DEFAULT_MARKER_SCALE = 1.0


class InteractionMode(Enum):
    """Manipulation modes.

    FULL_6DOF only selects the builder's six-axis layout; a control never
    carries it.
    """
    MOVE_AXIS = "move_axis"
    ROTATE_AXIS = "rotate_axis"
    MOVE_3D = "move_3d"
    ROTATE_3D = "rotate_3d"
    FULL_6DOF = "full_6dof"


class VisualPrimitiveType(Enum):
    """Shapes a control can carry."""
    CUBE = "cube"


Color = Tuple[float, float, float, float]  # RGBA, 0.0-1.0


@dataclass
class VisualPrimitive:
    """A rendered shape embedded in a control."""
    type: VisualPrimitiveType = VisualPrimitiveType.CUBE
    scale: Vector3 = field(default_factory=lambda: Vector3(1.0, 1.0, 1.0))
    color: Color = (0.5, 0.5, 0.5, 1.0)

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'scale': self.scale.to_list(),
            'color': list(self.color),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VisualPrimitive":
        color = tuple(float(c) for c in data.get('color', [0.5, 0.5, 0.5, 1.0]))
        if len(color) == 3:
            color = color + (1.0,)
        return cls(
            type=VisualPrimitiveType(data.get('type', 'cube')),
            scale=Vector3.parse(data.get('scale', [1.0, 1.0, 1.0])),
            color=color[:4],
        )


@dataclass
class ControlSpec:
    """A single manipulation handle on a marker."""
    name: str
    interaction_mode: InteractionMode
    orientation: Quaternion = field(default_factory=Quaternion.identity)
    markers: List[VisualPrimitive] = field(default_factory=list)

    @property
    def carries_visual(self) -> bool:
        return bool(self.markers)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'interaction_mode': self.interaction_mode.value,
            'orientation': self.orientation.to_list(),
            'markers': [m.to_dict() for m in self.markers],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ControlSpec":
        return cls(
            name=data['name'],
            interaction_mode=InteractionMode(data['interaction_mode']),
            orientation=Quaternion.parse(data.get('orientation', [0.0, 0.0, 0.0, 1.0])),
            markers=[VisualPrimitive.from_dict(m) for m in data.get('markers', [])],
        )


@dataclass
class MarkerSpec:
    """
    Description of an interactive marker.

    Identity is the name. The registry owns committed instances; callers
    replace a marker rather than editing one in place.
    """
    name: str
    pose: Pose = field(default_factory=Pose)
    frame_id: str = DEFAULT_FRAME_ID
    stamp: float = 0.0
    scale: float = DEFAULT_MARKER_SCALE
    description: str = DEFAULT_DESCRIPTION
    controls: List[ControlSpec] = field(default_factory=list)

    @property
    def position(self) -> Vector3:
        return self.pose.position

    def get_control(self, name: str) -> Optional[ControlSpec]:
        """Get a control by name."""
        for control in self.controls:
            if control.name == name:
                return control
        return None

    def axis_controls(self) -> List[ControlSpec]:
        """Controls constrained to a single axis."""
        return [c for c in self.controls
                if c.interaction_mode in (InteractionMode.MOVE_AXIS, InteractionMode.ROTATE_AXIS)]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'name': self.name,
            'frame_id': self.frame_id,
            'stamp': self.stamp,
            'pose': self.pose.to_dict(),
            'scale': self.scale,
            'description': self.description,
            'controls': [c.to_dict() for c in self.controls],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MarkerSpec":
        """Create from dictionary."""
        return cls(
            name=data['name'],
            pose=Pose.from_dict(data.get('pose', {})),
            frame_id=data.get('frame_id', DEFAULT_FRAME_ID),
            stamp=data.get('stamp', 0.0),
            scale=data.get('scale', DEFAULT_MARKER_SCALE),
            description=data.get('description', DEFAULT_DESCRIPTION),
            controls=[ControlSpec.from_dict(c) for c in data.get('controls', [])],
        )
