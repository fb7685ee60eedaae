# rasterizer.py
"""
Polygon rasterization into a row-wise difference array (imos method).

A polygon adds +1 at the first covered column of every row it touches and
-1 just after the last one. A left-to-right running sum over a row then
gives the number of polygons covering each cell.
"""

import math

import numpy as np

from transforms import transform_to_pixel


def grid_traversal(x0, y0, x1, y1):
    """
    Yield the (col, row) cells crossed by the segment (x0, y0) -> (x1, y1).

    Cells are unit squares in pixel space, cell (c, r) = [c, c+1) x [r, r+1).
    The walk starts at the cell holding the start point, ends at the cell
    holding the end point, and visits |dcol| + |drow| + 1 cells, moving one
    column or one row at a time. When the segment passes exactly through a
    cell corner the column step is taken first.
    """
    col, row = math.floor(x0), math.floor(y0)
    end_col, end_row = math.floor(x1), math.floor(y1)
    dx, dy = x1 - x0, y1 - y0

    step_col = 1 if dx > 0 else -1
    step_row = 1 if dy > 0 else -1

    if dx != 0:
        t_delta_x = 1.0 / abs(dx)
        t_max_x = ((col + 1 - x0) if dx > 0 else (x0 - col)) * t_delta_x
    else:
        t_delta_x = t_max_x = math.inf
    if dy != 0:
        t_delta_y = 1.0 / abs(dy)
        t_max_y = ((row + 1 - y0) if dy > 0 else (y0 - row)) * t_delta_y
    else:
        t_delta_y = t_max_y = math.inf

    yield col, row
    for _ in range(abs(end_col - col) + abs(end_row - row)):
        # the end cell bounds the walk, float drift in t_max never overshoots it
        if row == end_row or (col != end_col and t_max_x <= t_max_y):
            col += step_col
            t_max_x += t_delta_x
        else:
            row += step_row
            t_max_y += t_delta_y
        yield col, row


def row_spans(polygon, width, height, resolution):
    """
    Per-row min and max crossed column of a grid-frame polygon outline.

    Returns (mincols, maxcols), int arrays of length height. Untouched rows
    keep the sentinels width and -1.
    """
    mincols = [width] * height
    maxcols = [-1] * height

    pix = transform_to_pixel(polygon, width, height, resolution)
    n = pix.shape[0]
    for i in range(n):
        px, py = pix[i]
        qx, qy = pix[(i + 1) % n]
        for col, row in grid_traversal(px, py, qx, qy):
            if 0 <= row < height:
                if col < mincols[row]:
                    mincols[row] = col
                if col > maxcols[row]:
                    maxcols[row] = col
    return np.asarray(mincols, dtype=np.int64), np.asarray(maxcols, dtype=np.int64)


def add_polygon(diff, polygon, width, height, resolution):
    """
    Fold one polygon into the flat difference array diff (length height*width).

    Spans are clipped to the grid: a span starting left of column 0 is opened
    at column 0, a span ending at or past the last column is never closed
    (the running sum simply reaches the row end). Rows and spans entirely
    outside the grid contribute nothing, so each row's updates sum to zero
    or leave a span running to the row end.
    """
    if len(polygon) == 0:
        return
    mincols, maxcols = row_spans(polygon, width, height, resolution)

    visible = (maxcols >= 0) & (mincols < width)
    rows = np.nonzero(visible)[0]
    if rows.size == 0:
        return
    starts = np.maximum(mincols[rows], 0)
    diff[rows * width + starts] += 1

    ends = maxcols[rows] + 1
    closed = ends < width
    diff[rows[closed] * width + ends[closed]] -= 1
