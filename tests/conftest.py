import numpy as np
import pytest

from occupancy_map import OccupancyGridBuilder
from primitives import Box, Footprint
from transforms import Pose


def square(cx, cy, size):
    """Axis-aligned square footprint centered on (cx, cy)."""
    h = size / 2.0
    return Footprint([(cx - h, cy - h), (cx + h, cy - h), (cx + h, cy + h), (cx - h, cy + h)])


def cells_with(grid_2d, value):
    """Set of (row, col) cells of a (height, width) grid holding value."""
    rows, cols = np.nonzero(grid_2d == value)
    return set(zip(rows.tolist(), cols.tolist()))


@pytest.fixture
def builder():
    """10 x 10 cells, 1 m per cell, sensor at the grid center."""
    b = OccupancyGridBuilder(resolution=1.0, height=10, width=10, occupied_cost=100, invisible_cost=50)
    b.reset(Pose.identity())
    return b


@pytest.fixture
def fine_builder():
    """20 x 20 cells at 0.5 m per cell."""
    b = OccupancyGridBuilder(resolution=0.5, height=20, width=20, occupied_cost=100, invisible_cost=-1)
    b.reset(Pose.identity())
    return b


@pytest.fixture
def box_ahead():
    """2 x 2 m box centered 3 m ahead of the sensor."""
    return Box(dimensions=(2.0, 2.0, 1.0), pose=Pose.from_xy_yaw(3.0, 0.0))
