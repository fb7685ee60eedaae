# simulation.py
"""
Scenario generator for occupancy grid sensor runs.

Scenario format:
{
  "ego": Entity,                       # sensor carrier, world frame
  "obstacles": [Entity, ...],          # vehicles / pedestrians around the ego
  "grid": {...},                       # sensor params, see SensorConfig.from_dict
  "meta": {...}
}
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np

from transforms import Pose

DEFAULT_GRID = {
    "resolution": 0.5,
    "width": 100,
    "height": 100,
    "occupied_cost": 100,
    "invisible_cost": 50,
    "range": 40.0,
    "update_duration": 0.1,
}

VEHICLE_DIMENSIONS = (4.5, 1.9, 1.5)      # length, width, height (m)
PEDESTRIAN_DIMENSIONS = (0.6, 0.6, 1.8)


@dataclass
class Entity:
    name: str
    pose: Pose = field(default_factory=Pose)
    dimensions: Tuple[float, float, float] = VEHICLE_DIMENSIONS


def _rng(seed: Optional[Union[int, np.random.Generator]] = None) -> np.random.Generator:
    """Return a numpy Generator. Accepts int seed or an existing Generator."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def _random_obstacles(rng, n, dist_range, lat_range, behind=False, prefix="npc"):
    obstacles = []
    for i in range(n):
        dist = float(rng.uniform(*dist_range))
        lat = float(rng.uniform(*lat_range))
        x = -dist if behind else dist
        yaw = float(rng.normal(scale=0.2))
        if rng.random() < 0.2:
            dims = PEDESTRIAN_DIMENSIONS
            name = f"{prefix}_pedestrian_{i}"
        else:
            dims = VEHICLE_DIMENSIONS
            name = f"{prefix}_vehicle_{i}"
        obstacles.append(Entity(name=name, pose=Pose.from_xy_yaw(x, lat, yaw), dimensions=dims))
    return obstacles


def example_scenario(
    preset: str = "baseline",
    n_obstacles_range: Tuple[int, int] = (2, 5),
    obstacle_dist_range: Tuple[float, float] = (6.0, 20.0),
    obstacle_lat_range: Tuple[float, float] = (-8.0, 8.0),
    ego_yaw: float = 0.0,
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> dict:
    """
Create a single randomized scene around the ego.

Presets:
- 'baseline' : obstacles ahead of the ego
- 'dense' : more obstacles, wider lateral spread
- 'sparse' : one or two obstacles
- 'behind' : obstacles behind the ego, right on the +-pi bearing seam

The ego sits at the world origin with heading ego_yaw, obstacle positions are
given relative to that heading.
"""
    rng = _rng(seed)
    behind = False

    # ---- presets ----
    if preset == "dense":
        n_obstacles_range = (5, 10)
        obstacle_lat_range = (-12.0, 12.0)
    elif preset == "sparse":
        n_obstacles_range = (1, 2)
    elif preset == "behind":
        behind = True
        obstacle_lat_range = (-1.0, 1.0)
    elif preset != "baseline":
        raise ValueError(f"unknown preset {preset!r}")

    ego = Entity(name="ego", pose=Pose.from_xy_yaw(0.0, 0.0, ego_yaw))

    n_obs = int(rng.integers(n_obstacles_range[0], n_obstacles_range[1] + 1))
    local = _random_obstacles(rng, n_obs, obstacle_dist_range, obstacle_lat_range, behind=behind)

    # rotate the ego-relative layout into the world frame
    c, s = np.cos(ego_yaw), np.sin(ego_yaw)
    obstacles = []
    for ent in local:
        x, y, z = ent.pose.position
        pose = Pose.from_xy_yaw(c * x - s * y, s * x + c * y, ent.pose.yaw + ego_yaw, z)
        obstacles.append(Entity(name=ent.name, pose=pose, dimensions=ent.dimensions))

    return {
        "ego": ego,
        "obstacles": obstacles,
        "grid": dict(DEFAULT_GRID),
        "meta": {
            "preset": preset,
            "seed": None if isinstance(seed, np.random.Generator) else seed,
            "n_obstacles": n_obs,
        },
    }


def generate_scenarios(
    n: int = 10,
    preset: str = "baseline",
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> List[dict]:
    """
    Generate a list of n scenarios with derived seeds (reproducible but different).
    """
    base_rng = _rng(seed)
    scenarios = []
    for i in range(n):
        s = int(base_rng.integers(0, 2**31 - 1))
        scen = example_scenario(preset=preset, seed=s)
        scen["meta"]["index"] = i
        scenarios.append(scen)
    return scenarios


if __name__ == "__main__":
    sc = example_scenario(preset="baseline", seed=1234)
    print("Example scenario:")
    print(" ego:", sc["ego"])
    print(" grid:", sc["grid"])
    print(" obstacles (N={}):".format(len(sc["obstacles"])))
    for ob in sc["obstacles"]:
        print("  ", ob.name, ob.pose.position[:2], ob.dimensions)
