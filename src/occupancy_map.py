# occupancy_map.py
"""
Occupancy grid builder for the simulated range sensor.
- Center-aligned map: the sensor pose projects exactly to the middle of the grid
- Cells are occupied, invisible (occluded behind an obstacle) or free
- Row-major flat output, cell (0, 0) is the bottom-left corner

Per tick:
    builder.reset(sensor_pose)
    for primitive in obstacles:
        builder.add(primitive)
    builder.build()
    costs = builder.get()

Each primitive is rasterized twice, its footprint into the occupied
accumulator and its shadow into the invisible accumulator. Both are
difference arrays (imos method), so build() only needs a running sum per row.
"""

import numpy as np
from loguru import logger

from config import (
    GeometryError,
    GridConfig,
    GridConfigError,
    MAX_PRIMITIVES,
    validate_cost,
    validate_geometry,
    validate_max_primitives,
)
from rasterizer import add_polygon
from transforms import Pose, transform_to_grid, transform_to_pixel
from visibility import make_invisible_area


class GridCapacityError(RuntimeError):
    """Raised when a tick adds more primitives than the grid can count."""


class OccupancyGridBuilder:
    def __init__(
        self,
        resolution: float,
        height: int,
        width: int,
        occupied_cost: int,
        invisible_cost: int,
        max_primitives: int = MAX_PRIMITIVES,
    ):
        validate_geometry(resolution, height, width)
        validate_cost("occupied_cost", occupied_cost)
        validate_cost("invisible_cost", invisible_cost)
        validate_max_primitives(max_primitives)

        self.resolution = float(resolution)
        self.height = int(height)
        self.width = int(width)
        self.occupied_cost = int(occupied_cost)
        self.invisible_cost = int(invisible_cost)
        self.max_primitives = int(max_primitives)

        n = self.height * self.width
        self._occupied_diff = np.zeros(n, dtype=np.int32)
        self._invisible_diff = np.zeros(n, dtype=np.int32)
        self._values = np.zeros(n, dtype=np.int8)

        self._origin = Pose.identity()
        self._primitive_count = 0

    @classmethod
    def from_config(cls, config: GridConfig) -> "OccupancyGridBuilder":
        config.validate()
        return cls(
            config.resolution,
            config.height,
            config.width,
            config.occupied_cost,
            config.invisible_cost,
            max_primitives=config.max_primitives,
        )

    # ------------------------------------------------------------------ state
    @property
    def origin(self) -> Pose:
        return self._origin

    @property
    def primitive_count(self) -> int:
        return self._primitive_count

    @property
    def occupied_diff(self) -> np.ndarray:
        return self._readonly(self._occupied_diff)

    @property
    def invisible_diff(self) -> np.ndarray:
        return self._readonly(self._invisible_diff)

    @staticmethod
    def _readonly(arr):
        view = arr.view()
        view.flags.writeable = False
        return view

    # ------------------------------------------------------------ transforms
    def transform_to_grid(self, points) -> np.ndarray:
        return transform_to_grid(self._origin, points)

    def transform_to_pixel(self, points) -> np.ndarray:
        return transform_to_pixel(points, self.width, self.height, self.resolution)

    def make_occupied_area(self, primitive) -> np.ndarray:
        """Convex hull of primitive moved into the grid frame, shape (N, 2)."""
        hull = np.asarray(primitive.get_2d_convex_hull(), dtype=float)
        if hull.ndim != 2 or hull.shape[0] == 0:
            raise GeometryError("primitive produced an empty convex hull")
        if not np.all(np.isfinite(hull)):
            raise GeometryError("primitive convex hull has non-finite coordinates")
        return self.transform_to_grid(hull)[:, :2]

    def make_invisible_area(self, occupied_polygon) -> np.ndarray:
        return make_invisible_area(occupied_polygon, self.width, self.height, self.resolution)

    # ------------------------------------------------------------- lifecycle
    def reset(self, origin: Pose):
        """
        Start a new tick at sensor pose origin.

        The accumulators are zeroed in place; values keeps the previous
        composite until the next build().
        """
        if not isinstance(origin, Pose):
            raise GridConfigError(f"origin must be a Pose, got {type(origin).__name__}")
        self._origin = origin
        self._primitive_count = 0
        self._occupied_diff.fill(0)
        self._invisible_diff.fill(0)

    def add(self, primitive):
        """
        Rasterize one obstacle footprint and its shadow.

        Raises GridCapacityError once max_primitives have been added in this
        tick and GeometryError for unusable hulls. A failing call leaves the
        accumulators and the counter untouched.
        """
        if self._primitive_count >= self.max_primitives:
            logger.warning(
                "occupancy grid rejected primitive #{}: limit {} reached",
                self._primitive_count + 1,
                self.max_primitives,
            )
            raise GridCapacityError(
                f"Grid cannot hold more than {self.max_primitives} primitives"
            )

        occupied_area = self.make_occupied_area(primitive)
        invisible_area = self.make_invisible_area(occupied_area)

        self._primitive_count += 1
        add_polygon(self._invisible_diff, invisible_area, self.width, self.height, self.resolution)
        add_polygon(self._occupied_diff, occupied_area, self.width, self.height, self.resolution)

    def build(self):
        """
        Turn the accumulated spans into per-cell costs.

        Occupied beats invisible, invisible beats free. The accumulators are
        left as they are, so build() may be called again in the same tick.
        """
        shape = (self.height, self.width)
        occupied = np.cumsum(self._occupied_diff.reshape(shape), axis=1).ravel()
        invisible = np.cumsum(self._invisible_diff.reshape(shape), axis=1).ravel()

        self._values[:] = np.where(
            occupied > 0,
            self.occupied_cost,
            np.where(invisible > 0, self.invisible_cost, 0),
        )
        logger.debug(
            "occupancy grid built: {} primitives, {} occupied, {} invisible cells",
            self._primitive_count,
            int(np.count_nonzero(occupied > 0)),
            int(np.count_nonzero((occupied <= 0) & (invisible > 0))),
        )

    def get(self) -> np.ndarray:
        """
        Read-only view of the flat int8 cost array (length height * width).

        Only meaningful right after build(): before the first build() of a
        tick it still holds the previous tick's grid (zeros before any build).
        The view tracks later builds; copy it to keep a snapshot.
        """
        return self._readonly(self._values)

    def as_grid(self) -> np.ndarray:
        """get() reshaped to (height, width), row 0 at the bottom."""
        return self.get().reshape(self.height, self.width)
