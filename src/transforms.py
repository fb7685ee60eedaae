# transforms.py
"""
Coordinate maps used by the occupancy grid builder.

world  --transform_to_grid-->  sensor relative (meters)
grid   --transform_to_pixel--> pixel space, (0, 0) is a grid corner and the
                               sensor projects to the geometric center
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from config import GridConfigError


@dataclass(frozen=True)
class Pose:
    """
    Sensor pose in the world frame.

    position : (x, y, z) in meters
    orientation : quaternion (x, y, z, w), scalar last like ROS messages
    """
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    orientation: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    _rotation: Rotation = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        position = tuple(float(v) for v in self.position)
        orientation = tuple(float(v) for v in self.orientation)
        if len(position) != 3 or not np.all(np.isfinite(position)):
            raise GridConfigError(f"pose position must be 3 finite values, got {self.position!r}")
        if len(orientation) != 4 or not np.all(np.isfinite(orientation)):
            raise GridConfigError(
                f"pose orientation must be 4 finite values, got {self.orientation!r}"
            )
        if np.linalg.norm(orientation) == 0.0:
            raise GridConfigError("pose orientation must be a non-zero quaternion")
        object.__setattr__(self, "position", position)
        object.__setattr__(self, "orientation", orientation)
        object.__setattr__(self, "_rotation", Rotation.from_quat(orientation))

    @classmethod
    def identity(cls) -> "Pose":
        return cls()

    @classmethod
    def from_xy_yaw(cls, x: float, y: float, yaw: float = 0.0, z: float = 0.0) -> "Pose":
        quat = Rotation.from_euler("z", yaw).as_quat()
        return cls(position=(x, y, z), orientation=tuple(quat))

    @property
    def rotation(self) -> Rotation:
        return self._rotation

    @property
    def yaw(self) -> float:
        return float(self._rotation.as_euler("zyx")[0])


def _as_points3(points) -> np.ndarray:
    pts = np.asarray(points, dtype=float)
    if pts.ndim == 1:
        pts = pts.reshape(1, -1)
    if pts.shape[1] == 2:
        pts = np.hstack([pts, np.zeros((pts.shape[0], 1))])
    if pts.shape[1] != 3:
        raise ValueError(f"points must have shape (N, 2) or (N, 3), got {pts.shape}")
    return pts


def transform_to_grid(origin: Pose, points) -> np.ndarray:
    """
    Map world points into the sensor relative grid frame.

    The points are rotated by the conjugate of the origin orientation and the
    origin position is then subtracted as is (it is not rotated first).

    Returns an (N, 3) array; 2D input is treated as z = 0.
    """
    pts = _as_points3(points)
    return origin.rotation.inv().apply(pts) - np.asarray(origin.position)


def transform_to_pixel(points, width: int, height: int, resolution: float) -> np.ndarray:
    """
    Map sensor relative (x, y) coordinates into pixel space.

    pixel = (point + (width, height) * resolution / 2) / resolution

    Returns an (N, 2) float array; cell (col, row) is (floor(x), floor(y)).
    """
    pts = np.asarray(points, dtype=float)
    if pts.ndim == 1:
        pts = pts.reshape(1, -1)
    half = np.array([width, height], dtype=float) * resolution / 2.0
    return (pts[:, :2] + half) / resolution
