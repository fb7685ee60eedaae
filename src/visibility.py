# visibility.py
"""
Shadow ("invisible") polygon behind an obstacle, seen from the sensor.

The sensor sits at the origin of the grid frame. The shadow of a convex
obstacle is the wedge between its smallest and largest bearing vertices,
pushed out radially to the rectangular grid border:

    minp -> proj(minp) -> border corners... -> proj(maxp) -> maxp

Rectangle corners and edges share one index (i % 4):
    0: bottom-left  corner / left edge
    1: bottom-right corner / bottom edge
    2: top-right    corner / right edge
    3: top-left     corner / top edge
Edge i is the border segment that ends at corner i going counter-clockwise.
"""

import math

import numpy as np

from config import GeometryError


def _corner(i, realw, realh):
    return [
        (-realw, -realh),
        (realw, -realh),
        (realw, realh),
        (-realw, realh),
    ][i % 4]


def _project(p, i, realw, realh):
    """Push p radially (from the origin) onto border edge i % 4."""
    x, y = p
    edge = i % 4
    if edge == 0:
        return (-realw, y * -realw / x)
    if edge == 1:
        return (x * -realh / y, -realh)
    if edge == 2:
        return (realw, y * realw / x)
    return (x * realh / y, realh)


def bearing_span(polygon):
    """
    Indices of the smallest and largest bearing vertices of polygon.

    When the plain atan2 span is wider than pi the obstacle straddles the
    +-pi seam (it is behind the sensor), so bearings are compared in
    [0, 2pi) instead.
    """
    thetas = np.arctan2(polygon[:, 1], polygon[:, 0])
    imin, imax = int(np.argmin(thetas)), int(np.argmax(thetas))
    if thetas[imax] - thetas[imin] > math.pi:
        wrapped = np.where(thetas < 0.0, thetas + 2.0 * math.pi, thetas)
        imin, imax = int(np.argmin(wrapped)), int(np.argmax(wrapped))
    return imin, imax


def make_invisible_area(occupied_polygon, width, height, resolution) -> np.ndarray:
    """
    Build the occluded polygon for an occupied polygon in the grid frame.

    Parameters
    ----------
    occupied_polygon : (N, 2) array
        Convex hull of the obstacle, sensor relative, meters.
    width, height : int
        Grid size in cells.
    resolution : float
        Meters per cell.

    Returns
    -------
    (M, 2) float array, open polygon (the closing edge is implicit).
    """
    poly = np.asarray(occupied_polygon, dtype=float)[:, :2]
    if poly.shape[0] == 0:
        raise GeometryError("cannot build a shadow for an empty polygon")
    if np.any(np.all(poly == 0.0, axis=1)):
        raise GeometryError("obstacle vertex coincides with the sensor origin")

    realw = width * resolution / 2.0
    realh = height * resolution / 2.0

    imin, imax = bearing_span(poly)
    minp = (float(poly[imin, 0]), float(poly[imin, 1]))
    maxp = (float(poly[imax, 0]), float(poly[imax, 1]))

    minang = math.atan2(minp[1], minp[0])
    maxang = math.atan2(maxp[1], maxp[0])
    if minang > maxang:
        maxang += 2.0 * math.pi

    def corner_bearing(i):
        cx, cy = _corner(i, realw, realh)
        return math.atan2(cy, cx) + 2.0 * math.pi * (i // 4)

    i = 0
    while corner_bearing(i) < minang:
        i += 1

    res = [minp, _project(minp, i, realw, realh)]
    while corner_bearing(i) < maxang:
        res.append(_corner(i, realw, realh))
        i += 1
    res.append(_project(maxp, i, realw, realh))
    res.append(maxp)
    return np.asarray(res, dtype=float)
