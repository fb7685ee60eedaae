# primitives.py
"""
Obstacle footprints handed to the occupancy grid builder.

Two kinds of primitive are supported:
- Box       : an oriented bounding box (entity dimensions + pose)
- Footprint : an arbitrary set of world-frame vertices

Both expose get_2d_convex_hull() -> (N, 2) counter-clockwise hull in the
world frame, which is all the builder needs.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from scipy.spatial import ConvexHull

from config import GeometryError
from transforms import Pose


def convex_hull_2d(points) -> np.ndarray:
    """
    Counter-clockwise convex hull of the (x, y) part of points.

    Degenerate inputs are kept instead of rejected:
    - a single distinct point returns that point
    - collinear points return the two extreme points
    """
    pts = np.asarray(points, dtype=float)
    if pts.ndim != 2 or pts.shape[0] == 0:
        return np.zeros((0, 2), dtype=float)
    if not np.all(np.isfinite(pts[:, :2])):
        raise GeometryError("convex hull input has non-finite coordinates")
    xy = np.unique(pts[:, :2], axis=0)  # lexicographically sorted

    if xy.shape[0] < 3 or np.linalg.matrix_rank(xy - xy.mean(axis=0)) < 2:
        if xy.shape[0] == 1:
            return xy
        return xy[[0, -1]]

    hull = ConvexHull(xy)
    return xy[hull.vertices]


@dataclass(frozen=True)
class Box:
    """
    Oriented box.

    dimensions : (length, width, height) in meters, along the box x, y, z axes
    pose : center pose of the box in the world frame
    center : offset of the geometric center in the box frame
    """
    dimensions: Tuple[float, float, float]
    pose: Pose = field(default_factory=Pose)
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def vertices(self) -> np.ndarray:
        """The 8 corners in the world frame, shape (8, 3)."""
        half = np.asarray(self.dimensions, dtype=float) / 2.0
        signs = np.array(
            [[sx, sy, sz] for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)],
            dtype=float,
        )
        local = signs * half + np.asarray(self.center, dtype=float)
        return self.pose.rotation.apply(local) + np.asarray(self.pose.position)

    def get_2d_convex_hull(self) -> np.ndarray:
        return convex_hull_2d(self.vertices())


@dataclass(frozen=True)
class Footprint:
    """Arbitrary obstacle outline given directly as world-frame vertices."""
    points: Tuple[Tuple[float, ...], ...]

    def vertices(self) -> np.ndarray:
        return np.asarray(self.points, dtype=float).reshape(len(self.points), -1)

    def get_2d_convex_hull(self) -> np.ndarray:
        if len(self.points) == 0:
            return np.zeros((0, 2), dtype=float)
        return convex_hull_2d(self.vertices())
