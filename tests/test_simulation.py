import numpy as np
import pytest

from perception import OccupancyGridSensor
from simulation import example_scenario, generate_scenarios


def _positions(scenario):
    return [ob.pose.position for ob in scenario["obstacles"]]


def test_scenario_is_reproducible():
    a = example_scenario(seed=11)
    b = example_scenario(seed=11)
    assert _positions(a) == _positions(b)
    assert a["meta"]["n_obstacles"] == len(a["obstacles"])


@pytest.mark.parametrize(
    "preset, bounds",
    [("baseline", (2, 5)), ("dense", (5, 10)), ("sparse", (1, 2)), ("behind", (2, 5))],
)
def test_preset_obstacle_counts(preset, bounds):
    sc = example_scenario(preset=preset, seed=3)
    assert bounds[0] <= len(sc["obstacles"]) <= bounds[1]
    assert sc["meta"]["preset"] == preset


def test_unknown_preset():
    with pytest.raises(ValueError):
        example_scenario(preset="crowded")


def test_generate_scenarios_indexes():
    scenarios = generate_scenarios(n=4, seed=5)
    assert [s["meta"]["index"] for s in scenarios] == [0, 1, 2, 3]
    assert len({tuple(_positions(s)[0]) for s in scenarios}) == 4


def test_obstacles_behind_only_shadow_the_rear_half():
    sc = example_scenario(preset="behind", seed=21)
    assert all(x < 0.0 for x, _, _ in _positions(sc))

    sensor = OccupancyGridSensor.from_dict(sc["grid"])
    ego = sc["ego"]
    msg = sensor.update(0.0, ego.pose, [ego] + sc["obstacles"], ego_name=ego.name)
    grid = msg.as_grid()
    assert grid[:, : msg.width // 2].any()
    assert not grid[:, msg.width // 2:].any()


def test_ego_heading_rotates_scene():
    sc = example_scenario(preset="sparse", ego_yaw=np.pi / 2, seed=8)
    # obstacles ahead of a north-facing ego lie at positive world y
    assert all(y > 0.0 for _, y, _ in _positions(sc))

    sensor = OccupancyGridSensor.from_dict(sc["grid"])
    ego = sc["ego"]
    grid = sensor.update(0.0, ego.pose, [ego] + sc["obstacles"], ego_name=ego.name).as_grid()
    # in the sensor frame they are ahead, i.e. in the right half of the grid
    half = grid.shape[1] // 2
    assert grid[:, half:].any()
    assert not grid[:, :half].any()
