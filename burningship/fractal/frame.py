from __future__ import annotations

import numpy as np
from numba import njit

from burningship.fractal.geometry import Range, box_dimensions, step_size, zoomed_ranges
from burningship.fractal.iterator import escape_time


@njit(cache=True)
def _fill_grid(img_width, img_height, step_x, step_y, floor_x, floor_y):
    grid = np.empty((img_height, img_width), dtype=np.uint8)
    for y in range(img_height):
        for x in range(img_width):
            grid[y, x] = escape_time(x, y, step_x, step_y, floor_x, floor_y)
    return grid


def build_frame(
    img_width: int,
    img_height: int,
    base_range_x: Range,
    base_range_y: Range,
    frame_index: int,
    zoom_rate: float,
) -> np.ndarray:
    """
    Escape-time grid of shape (img_height, img_width) for one frame.

    box_dimensions -> zoomed_ranges -> step_size -> per-pixel escape_time.
    Row index follows the imaginary axis, column index the real axis, and
    pixel (0, 0) sits on the window's floor corner.
    """
    base_width, base_height = box_dimensions(base_range_x, base_range_y)
    range_x, range_y = zoomed_ranges(
        base_width, base_height, base_range_x, base_range_y, frame_index, zoom_rate
    )
    step_x, step_y = step_size(img_width, img_height, range_x, range_y)

    grid = _fill_grid(img_width, img_height, step_x, step_y, range_x[0], range_y[0])
    grid.flags.writeable = False
    return grid
