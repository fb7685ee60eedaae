import math

import numpy as np
import pytest

from rasterizer import add_polygon, grid_traversal, row_spans


def test_traversal_horizontal():
    assert list(grid_traversal(0.5, 0.5, 3.5, 0.5)) == [(0, 0), (1, 0), (2, 0), (3, 0)]


def test_traversal_reverse_direction():
    assert list(grid_traversal(3.5, 0.5, 0.5, 0.5)) == [(3, 0), (2, 0), (1, 0), (0, 0)]


def test_traversal_vertical_down_from_cell_border():
    assert list(grid_traversal(7.0, 6.0, 7.0, 4.0)) == [(7, 6), (7, 5), (7, 4)]


def test_traversal_diagonal_steps_column_first_on_corner():
    cells = list(grid_traversal(0.5, 0.5, 2.5, 2.5))
    assert cells == [(0, 0), (1, 0), (1, 1), (2, 1), (2, 2)]


def test_traversal_single_cell():
    assert list(grid_traversal(1.2, 3.7, 1.9, 3.1)) == [(1, 3)]


def test_traversal_cell_count_and_connectivity():
    rng = np.random.default_rng(0)
    for _ in range(200):
        x0, y0, x1, y1 = rng.uniform(-5.0, 15.0, size=4)
        cells = list(grid_traversal(x0, y0, x1, y1))
        dcol = abs(math.floor(x1) - math.floor(x0))
        drow = abs(math.floor(y1) - math.floor(y0))
        assert len(cells) == dcol + drow + 1
        assert cells[0] == (math.floor(x0), math.floor(y0))
        assert cells[-1] == (math.floor(x1), math.floor(y1))
        for (c0, r0), (c1, r1) in zip(cells, cells[1:]):
            assert abs(c1 - c0) + abs(r1 - r0) == 1


def test_row_spans_sentinels_for_untouched_rows():
    poly = np.array([(-1.0, -1.0), (1.0, -1.0), (1.0, 1.0), (-1.0, 1.0)])
    mincols, maxcols = row_spans(poly, 10, 10, 1.0)
    assert mincols.tolist() == [10, 10, 10, 10, 4, 4, 4, 10, 10, 10]
    assert maxcols.tolist() == [-1, -1, -1, -1, 6, 6, 6, -1, -1, -1]


def test_spans_inside_grid_close_on_every_row():
    diff = np.zeros(100, dtype=np.int32)
    poly = np.array([(-3.2, -2.1), (1.7, -3.4), (2.9, 2.2), (-1.4, 3.3)])
    add_polygon(diff, poly, 10, 10, 1.0)
    rows = diff.reshape(10, 10)
    assert np.count_nonzero(rows) > 0
    assert np.all(rows.sum(axis=1) == 0)
    assert np.all(np.cumsum(rows, axis=1) >= 0)


@pytest.mark.parametrize(
    "center",
    [(-12.0, 0.0), (12.0, 0.0), (0.0, -12.0), (0.0, 12.0), (-20.0, 20.0)],
)
def test_polygon_outside_grid_contributes_nothing(center):
    cx, cy = center
    poly = np.array([(cx - 1, cy - 1), (cx + 1, cy - 1), (cx + 1, cy + 1), (cx - 1, cy + 1)])
    diff = np.zeros(100, dtype=np.int32)
    add_polygon(diff, poly, 10, 10, 1.0)
    assert not diff.any()


def test_span_clipped_at_left_border_is_opened_at_column_zero():
    # pixel x from -3 to 3, rows 4..6
    poly = np.array([(-8.0, -1.0), (-2.0, -1.0), (-2.0, 1.0), (-8.0, 1.0)])
    diff = np.zeros(100, dtype=np.int32)
    add_polygon(diff, poly, 10, 10, 1.0)
    rows = diff.reshape(10, 10)
    for r in (4, 5, 6):
        assert rows[r, 0] == 1
        assert rows[r, 4] == -1
    assert np.all(rows.sum(axis=1) == 0)
    assert np.all(np.cumsum(rows, axis=1) >= 0)


def test_span_reaching_right_border_runs_to_row_end():
    # pixel x from 7 to 13, rows 4..6
    poly = np.array([(2.0, -1.0), (8.0, -1.0), (8.0, 1.0), (2.0, 1.0)])
    diff = np.zeros(100, dtype=np.int32)
    add_polygon(diff, poly, 10, 10, 1.0)
    coverage = np.cumsum(diff.reshape(10, 10), axis=1)
    for r in (4, 5, 6):
        assert coverage[r].tolist() == [0] * 7 + [1, 1, 1]
    assert not coverage[:4].any() and not coverage[7:].any()


def test_polygons_accumulate():
    diff = np.zeros(100, dtype=np.int32)
    poly = np.array([(-1.5, -1.5), (1.5, -1.5), (1.5, 1.5), (-1.5, 1.5)])
    add_polygon(diff, poly, 10, 10, 1.0)
    add_polygon(diff, poly, 10, 10, 1.0)
    coverage = np.cumsum(diff.reshape(10, 10), axis=1)
    assert coverage.max() == 2
    assert coverage[5, 5] == 2
