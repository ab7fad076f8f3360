"""
Spatial primitives and transform records.

Vectors and quaternions are small immutable dataclasses; numpy is used for the
arithmetic. Quaternions are stored in (x, y, z, w) order, matching the
visualization protocol.
"""

import math
from dataclasses import dataclass, field
from typing import Sequence, Union

import numpy as np


VectorInput = Union["Vector3", Sequence[float], dict]
QuaternionInput = Union["Quaternion", Sequence[float], dict]


@dataclass(frozen=True)
class Vector3:
    """3-component real vector (position or translation)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_list(self) -> list:
        return [self.x, self.y, self.z]

    @classmethod
    def from_array(cls, values) -> "Vector3":
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
        if arr.shape != (3,):
            raise ValueError(f"Vector3 needs 3 components, got {arr.shape[0]}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def parse(cls, value: VectorInput) -> "Vector3":
        """Accept a Vector3, an [x, y, z] sequence or an {x, y, z} dict."""
        if isinstance(value, Vector3):
            return value
        if isinstance(value, dict):
            return cls(float(value.get('x', 0.0)),
                       float(value.get('y', 0.0)),
                       float(value.get('z', 0.0)))
        return cls.from_array(value)


@dataclass(frozen=True)
class Quaternion:
    """Rotation quaternion in (x, y, z, w) order."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls(0.0, 0.0, 0.0, 1.0)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float64)

    def to_list(self) -> list:
        return [self.x, self.y, self.z, self.w]

    def normalized(self) -> "Quaternion":
        """Return the unit quaternion. A zero quaternion becomes identity."""
        arr = self.as_array()
        norm = np.linalg.norm(arr)
        if norm == 0.0:
            return Quaternion.identity()
        arr = arr / norm
        return Quaternion(float(arr[0]), float(arr[1]), float(arr[2]), float(arr[3]))

    def is_identity(self, tol: float = 1e-12) -> bool:
        return bool(np.allclose(self.as_array(), [0.0, 0.0, 0.0, 1.0], atol=tol))

    @classmethod
    def parse(cls, value: QuaternionInput) -> "Quaternion":
        """Accept a Quaternion, an [x, y, z, w] sequence or an {x, y, z, w} dict."""
        if isinstance(value, Quaternion):
            return value
        if isinstance(value, dict):
            return cls(float(value.get('x', 0.0)),
                       float(value.get('y', 0.0)),
                       float(value.get('z', 0.0)),
                       float(value.get('w', 1.0)))
        arr = np.asarray(value, dtype=np.float64).reshape(-1)
        if arr.shape != (4,):
            raise ValueError(f"Quaternion needs 4 components, got {arr.shape[0]}")
        return cls(float(arr[0]), float(arr[1]), float(arr[2]), float(arr[3]))


def quaternion_from_rpy(roll: float, pitch: float, yaw: float) -> Quaternion:
    """
    Build a quaternion from fixed-axis roll, pitch, yaw (radians).

    Equivalent to rotating about Z by yaw, then Y by pitch, then X by roll.
    """
    cr, sr = math.cos(roll * 0.5), math.sin(roll * 0.5)
    cp, sp = math.cos(pitch * 0.5), math.sin(pitch * 0.5)
    cy, sy = math.cos(yaw * 0.5), math.sin(yaw * 0.5)

    return Quaternion(
        x=sr * cp * cy - cr * sp * sy,
        y=cr * sp * cy + sr * cp * sy,
        z=cr * cp * sy - sr * sp * cy,
        w=cr * cp * cy + sr * sp * sy,
    )


@dataclass(frozen=True)
class Pose:
    """Position plus orientation."""
    position: Vector3 = field(default_factory=Vector3)
    orientation: Quaternion = field(default_factory=Quaternion.identity)

    def to_dict(self) -> dict:
        return {
            'position': self.position.to_list(),
            'orientation': self.orientation.to_list(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Pose":
        return cls(
            position=Vector3.parse(data.get('position', [0.0, 0.0, 0.0])),
            orientation=Quaternion.parse(data.get('orientation', [0.0, 0.0, 0.0, 1.0])),
        )


@dataclass(frozen=True)
class TransformRecord:
    """
    A stamped relation between a child frame and its parent frame.

    Ephemeral: recomputed and republished, never stored by the controller.
    """
    child_frame_id: str
    parent_frame_id: str
    stamp: float
    translation: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion.identity)

    def to_dict(self) -> dict:
        return {
            'child_frame_id': self.child_frame_id,
            'parent_frame_id': self.parent_frame_id,
            'stamp': self.stamp,
            'translation': self.translation.to_list(),
            'rotation': self.rotation.to_list(),
        }
