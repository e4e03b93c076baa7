import math

import pytest

from burningship.fractal.geometry import box_dimensions, frame_window, step_size, zoomed_ranges

X_RANGE = (-3.45, 0.05)
Y_RANGE = (-0.99, 0.99)


def _mid(r):
    return (r[0] + r[1]) / 2.0


def test_box_dimensions_is_absolute():
    w, h = box_dimensions(X_RANGE, Y_RANGE)
    assert w == pytest.approx(3.5)
    assert h == pytest.approx(1.98)
    assert box_dimensions((0.05, -3.45), (0.99, -0.99)) == (w, h)


def test_frame_zero_is_base_window():
    w, h = box_dimensions(X_RANGE, Y_RANGE)
    assert zoomed_ranges(w, h, X_RANGE, Y_RANGE, 0, 0.96) == (X_RANGE, Y_RANGE)


def test_zoom_shrinks_and_stays_centred():
    w, h = box_dimensions(X_RANGE, Y_RANGE)
    prev_w, prev_h = w, h
    for frame in range(1, 60):
        rx, ry = zoomed_ranges(w, h, X_RANGE, Y_RANGE, frame, 0.96)
        cur_w, cur_h = box_dimensions(rx, ry)
        assert cur_w < prev_w
        assert cur_h < prev_h
        assert cur_w == pytest.approx(w * 0.96 ** frame)
        assert _mid(rx) == pytest.approx(_mid(X_RANGE), abs=1e-12)
        assert _mid(ry) == pytest.approx(_mid(Y_RANGE), abs=1e-12)
        prev_w, prev_h = cur_w, cur_h


def test_zoom_rate_above_one_widens():
    w, h = box_dimensions(X_RANGE, Y_RANGE)
    rx, ry = zoomed_ranges(w, h, X_RANGE, Y_RANGE, 3, 1.1)
    assert rx[0] < X_RANGE[0] and rx[1] > X_RANGE[1]
    assert ry[0] < Y_RANGE[0] and ry[1] > Y_RANGE[1]
    assert box_dimensions(rx, ry)[0] == pytest.approx(w * 1.1 ** 3)


def test_step_size():
    sx, sy = step_size(4000, 2300, X_RANGE, Y_RANGE)
    assert sx == pytest.approx(3.5 / 4000)
    assert sy == pytest.approx(1.98 / 2300)


def test_frame_window_composes():
    w, h = box_dimensions(X_RANGE, Y_RANGE)
    assert frame_window(X_RANGE, Y_RANGE, 12, 0.96) == zoomed_ranges(w, h, X_RANGE, Y_RANGE, 12, 0.96)


def test_zoom_out_overflow_saturates():
    w, h = box_dimensions(X_RANGE, Y_RANGE)
    rx, ry = zoomed_ranges(w, h, X_RANGE, Y_RANGE, 1100, 2.0)
    assert rx == (-math.inf, math.inf)
    assert ry == (-math.inf, math.inf)
    assert frame_window(X_RANGE, Y_RANGE, 1100, 2.0) == (rx, ry)
