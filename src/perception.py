# perception.py
"""
Simulated occupancy grid sensor for the ego vehicle.

OccupancyGridSensor.update(current_time, sensor_pose, entities) -> message
runs one builder pass per update period:
  reset(sensor pose) -> add(bounding box of each detected entity) -> build()
and packs the cost array into an OccupancyGridMessage (row-major, int8,
resolution in meters per cell, origin at the pose of cell (0, 0)).
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
from loguru import logger

from config import GridConfig, GridConfigError
from occupancy_map import OccupancyGridBuilder
from primitives import Box
from transforms import Pose

DEFAULT_RANGE = 300.0            # meters
DEFAULT_UPDATE_DURATION = 0.1    # seconds
DEFAULT_FRAME_ID = "base_link"

# Simulation clocks drift by a few ms; a tick this close to the period still publishes
UPDATE_TOLERANCE = 0.002


@dataclass
class OccupancyGridMessage:
    stamp: float
    frame_id: str
    resolution: float
    width: int
    height: int
    origin: Pose
    data: np.ndarray = field(repr=False)

    def as_grid(self) -> np.ndarray:
        """(height, width) view of data, row 0 at the bottom."""
        return self.data.reshape(self.height, self.width)


@dataclass
class SensorConfig:
    grid: GridConfig = field(default_factory=GridConfig)
    range: float = DEFAULT_RANGE
    update_duration: float = DEFAULT_UPDATE_DURATION
    frame_id: str = DEFAULT_FRAME_ID
    filter_by_range: bool = True

    @classmethod
    def from_dict(cls, params):
        cfg = cls(
            grid=GridConfig.from_dict(params),
            range=float(params.get("range", DEFAULT_RANGE)),
            update_duration=float(params.get("update_duration", DEFAULT_UPDATE_DURATION)),
            frame_id=str(params.get("frame_id", DEFAULT_FRAME_ID)),
            filter_by_range=bool(params.get("filter_by_range", True)),
        )
        if not cfg.range > 0.0:
            raise GridConfigError(f"range must be positive, got {cfg.range!r}")
        if cfg.update_duration < 0.0:
            raise GridConfigError(
                f"update_duration must not be negative, got {cfg.update_duration!r}"
            )
        return cfg


def entity_box(entity) -> Box:
    """Footprint primitive of an entity (name, pose, dimensions)."""
    return Box(dimensions=tuple(entity.dimensions), pose=entity.pose)


def grid_origin_pose(sensor_pose: Pose, width: int, height: int, resolution: float) -> Pose:
    """
    World pose of the grid's (0, 0) corner.

    The builder maps a world point p to R^-1 p - o, so the grid point g sits
    at R (g + o) in the world.
    """
    corner = np.array([-width * resolution / 2.0, -height * resolution / 2.0, 0.0])
    position = sensor_pose.rotation.apply(corner + np.asarray(sensor_pose.position))
    return Pose(position=tuple(position), orientation=sensor_pose.orientation)


class OccupancyGridSensor:
    def __init__(self, config: Optional[SensorConfig] = None):
        self.config = config if config is not None else SensorConfig()
        self.builder = OccupancyGridBuilder.from_config(self.config.grid)
        self._last_update = None

    @classmethod
    def from_dict(cls, params) -> "OccupancyGridSensor":
        return cls(SensorConfig.from_dict(params))

    def detect_entities(self, sensor_pose: Pose, entities: Sequence, ego_name=None):
        """Entities other than the ego, and within range when filtering is on."""
        sx, sy = sensor_pose.position[0], sensor_pose.position[1]
        detected = []
        for entity in entities:
            if ego_name is not None and entity.name == ego_name:
                continue
            if self.config.filter_by_range:
                ex, ey = entity.pose.position[0], entity.pose.position[1]
                if np.hypot(ex - sx, ey - sy) > self.config.range:
                    continue
            detected.append(entity)
        return detected

    def is_due(self, current_time: float) -> bool:
        if self._last_update is None:
            return True
        elapsed = current_time - self._last_update
        return elapsed - self.config.update_duration >= -UPDATE_TOLERANCE

    def update(
        self,
        current_time: float,
        sensor_pose: Pose,
        entities: Sequence,
        ego_name: Optional[str] = None,
    ) -> Optional[OccupancyGridMessage]:
        """
        Produce a grid for this tick, or None when the update period has not
        elapsed yet. GridCapacityError from the builder propagates and the
        tick is dropped.
        """
        if not self.is_due(current_time):
            return None

        detected = self.detect_entities(sensor_pose, entities, ego_name=ego_name)

        builder = self.builder
        builder.reset(sensor_pose)
        for entity in detected:
            builder.add(entity_box(entity))
        builder.build()
        self._last_update = current_time

        logger.debug(
            "occupancy grid @ {:.3f}s: {} of {} entities detected",
            current_time,
            len(detected),
            len(entities),
        )
        grid = self.config.grid
        return OccupancyGridMessage(
            stamp=float(current_time),
            frame_id=self.config.frame_id,
            resolution=builder.resolution,
            width=builder.width,
            height=builder.height,
            origin=grid_origin_pose(sensor_pose, grid.width, grid.height, grid.resolution),
            data=builder.get().copy(),
        )
