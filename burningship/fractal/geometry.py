from __future__ import annotations

import math
from typing import Tuple

Range = Tuple[float, float]


def box_dimensions(range_x: Range, range_y: Range) -> Tuple[float, float]:
    x_floor, x_ceil = range_x
    y_floor, y_ceil = range_y
    return abs(x_ceil - x_floor), abs(y_ceil - y_floor)


def zoomed_ranges(
    base_width: float,
    base_height: float,
    base_range_x: Range,
    base_range_y: Range,
    frame_index: int,
    zoom_rate: float,
) -> Tuple[Range, Range]:
    """
    Plane ranges for a frame, shrunk symmetrically about the base window's
    centre by zoom_rate**frame_index. Rates >= 1 widen the window instead.
    """
    x_floor, x_ceil = base_range_x
    y_floor, y_ceil = base_range_y

    try:
        scale = zoom_rate ** frame_index
    except OverflowError:
        # deep zoom-outs saturate; the window becomes (-inf, inf)
        scale = math.inf
    curr_width = scale * base_width
    curr_height = scale * base_height

    focus_x = (base_width - curr_width) / 2.0
    focus_y = (base_height - curr_height) / 2.0

    range_x = (x_floor + focus_x, x_ceil - focus_x)
    range_y = (y_floor + focus_y, y_ceil - focus_y)
    return range_x, range_y


def step_size(img_width: int, img_height: int, range_x: Range, range_y: Range) -> Tuple[float, float]:
    plane_width, plane_height = box_dimensions(range_x, range_y)
    return plane_width / img_width, plane_height / img_height


def frame_window(base_range_x: Range, base_range_y: Range, frame_index: int, zoom_rate: float) -> Tuple[Range, Range]:
    base_width, base_height = box_dimensions(base_range_x, base_range_y)
    return zoomed_ranges(base_width, base_height, base_range_x, base_range_y, frame_index, zoom_rate)
