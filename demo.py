# demo.py
# === Occupancy grid sensor demo: one tick, plotted ===
import os, sys
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap, BoundaryNorm

# ensure src is visible when running from project root
sys.path.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))

from simulation import example_scenario
from perception import OccupancyGridSensor


def single_run(params, plot=True):
    """
    Run one sensor tick on a generated scenario.
    params: dict with keys (example defaults below)
        - preset, seed, ego_yaw
        - any SensorConfig key (resolution, width, height, range, ...)
    """
    scenario = example_scenario(
        preset=params.get("preset", "baseline"),
        ego_yaw=params.get("ego_yaw", 0.0),
        seed=params.get("seed", None),
    )
    grid_params = dict(scenario["grid"])
    grid_params.update({k: v for k, v in params.items() if k in grid_params})

    sensor = OccupancyGridSensor.from_dict(grid_params)
    ego = scenario["ego"]
    entities = [ego] + scenario["obstacles"]

    msg = sensor.update(0.0, ego.pose, entities, ego_name=ego.name)
    grid = msg.as_grid()

    occupied_cost = sensor.config.grid.occupied_cost
    invisible_cost = sensor.config.grid.invisible_cost
    n_occ = int((grid == occupied_cost).sum())
    n_inv = int((grid == invisible_cost).sum())
    print(
        f"preset={scenario['meta']['preset']}, n_obstacles={len(scenario['obstacles'])}, "
        f"occupied={n_occ}, invisible={n_inv}, free={grid.size - n_occ - n_inv}"
    )

    if plot:
        res = msg.resolution
        extent = (-msg.width * res / 2, msg.width * res / 2, -msg.height * res / 2, msg.height * res / 2)
        colors = {0: "white", invisible_cost: "lightgray", occupied_cost: "black"}
        levels = sorted(colors)
        cmap = ListedColormap([colors[level] for level in levels])
        norm = BoundaryNorm(levels + [levels[-1] + 1], cmap.N)

        fig, ax = plt.subplots(figsize=(6, 6))
        ax.imshow(grid, origin="lower", extent=extent, cmap=cmap, norm=norm)
        ax.plot(0.0, 0.0, "r^", label="sensor")
        ax.set_title(f"Occupancy grid ({scenario['meta']['preset']})")
        ax.set_xlabel("x [m]")
        ax.set_ylabel("y [m]")
        ax.legend(loc="upper right")
        plt.tight_layout()
        plt.show()

    return {"occupied": n_occ, "invisible": n_inv, "message": msg}


def run_quick_tests(plot=True):
    """
    Run each preset once to compare the shadows they produce.
    """
    results = {}
    for preset in ("baseline", "dense", "sparse", "behind"):
        print("\n--- Running preset:", preset)
        results[preset] = single_run({"preset": preset, "seed": 2025}, plot=plot)
    return results


if __name__ == "__main__":
    params = {
        "preset": "dense",
        "seed": 7,
        "ego_yaw": 0.3,
        "resolution": 0.5,
    }
    single_run(params, plot=True)

    # optionally, run every preset (uncomment to run)
    # results = run_quick_tests(plot=True)
