# config.py
"""
Grid defaults and configuration for the occupancy grid sensor.

- Center-aligned grid: the sensor sits in the middle of the image
- Row-major flat layout, cell (0, 0) is the bottom-left corner
- Costs follow the usual occupancy grid convention (signed 8 bit)
"""

import math
from dataclasses import dataclass, asdict

DEFAULT_RES = 0.5          # meters per cell
DEFAULT_WIDTH = 200        # cells along x
DEFAULT_HEIGHT = 200       # cells along y
DEFAULT_OCCUPIED_COST = 100
DEFAULT_INVISIBLE_COST = 50

# Largest number of primitives a single tick may add. Every primitive adds at
# most +1 to a cell of an accumulator, so this is also the largest coverage
# count, which is what an int16 accumulator can hold.
MAX_PRIMITIVES = 32767

INT8_MIN, INT8_MAX = -128, 127


class GridConfigError(ValueError):
    """Raised when grid geometry, costs or a sensor pose are unusable."""


class GeometryError(ValueError):
    """Raised for obstacle outlines the builder cannot rasterize (empty, non-finite, ...)."""


@dataclass
class GridConfig:
    resolution: float = DEFAULT_RES
    height: int = DEFAULT_HEIGHT
    width: int = DEFAULT_WIDTH
    occupied_cost: int = DEFAULT_OCCUPIED_COST
    invisible_cost: int = DEFAULT_INVISIBLE_COST
    max_primitives: int = MAX_PRIMITIVES

    @classmethod
    def from_dict(cls, params):
        """Build a config from a plain dict, missing keys fall back to defaults."""
        cfg = cls(
            resolution=params.get("resolution", DEFAULT_RES),
            height=params.get("height", DEFAULT_HEIGHT),
            width=params.get("width", DEFAULT_WIDTH),
            occupied_cost=params.get("occupied_cost", DEFAULT_OCCUPIED_COST),
            invisible_cost=params.get("invisible_cost", DEFAULT_INVISIBLE_COST),
            max_primitives=params.get("max_primitives", MAX_PRIMITIVES),
        )
        cfg.validate()
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)

    def validate(self):
        validate_geometry(self.resolution, self.height, self.width)
        validate_cost("occupied_cost", self.occupied_cost)
        validate_cost("invisible_cost", self.invisible_cost)
        validate_max_primitives(self.max_primitives)
        return self

    @property
    def real_width(self) -> float:
        """Grid extent along x in meters."""
        return self.width * self.resolution

    @property
    def real_height(self) -> float:
        """Grid extent along y in meters."""
        return self.height * self.resolution


def _is_int(value) -> bool:
    # bool is an int subclass but never a valid size
    if isinstance(value, bool):
        return False
    try:
        return int(value) == value
    except (TypeError, ValueError):
        return False


def validate_geometry(resolution, height, width):
    """Check grid dimensions and resolution, raising GridConfigError."""
    for name, value in (("height", height), ("width", width)):
        if not _is_int(value) or value <= 0:
            raise GridConfigError(f"{name} must be a positive integer, got {value!r}")
    try:
        res = float(resolution)
    except (TypeError, ValueError):
        raise GridConfigError(f"resolution must be a number, got {resolution!r}") from None
    if not math.isfinite(res) or res <= 0.0:
        raise GridConfigError(f"resolution must be positive and finite, got {resolution!r}")


def validate_cost(name, value):
    if not _is_int(value) or not (INT8_MIN <= value <= INT8_MAX):
        raise GridConfigError(
            f"{name} must be an integer in [{INT8_MIN}, {INT8_MAX}], got {value!r}"
        )


def validate_max_primitives(value):
    if not _is_int(value) or value <= 0:
        raise GridConfigError(f"max_primitives must be a positive integer, got {value!r}")
