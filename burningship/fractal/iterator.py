"""
Escape-time iteration for the Burning Ship fractal.

    Z[n+1] = (|Re(Z[n])| + |Im(Z[n])|i)^2 + C

The map is not holomorphic (the absolute values break Cauchy-Riemann), so
complex arithmetic is avoided and the real/imaginary parts are carried as
plain float64 pairs.
"""
from __future__ import annotations

import math
from typing import Tuple

from numba import njit

MAX_ITERATIONS = 100
ESCAPE_RADIUS_SQ = 4.0


@njit(cache=True)
def next_z(c_re: float, c_im: float, z_re: float, z_im: float) -> Tuple[float, float]:
    sq_re = z_re * z_re
    sq_im = z_im * z_im

    # inf - inf would give nan, so pin the orbit at infinity instead
    if math.isinf(sq_re) or math.isinf(sq_im):
        return math.inf, math.inf

    new_re = sq_re - sq_im + c_re
    new_im = abs(2.0 * z_re * z_im) + c_im
    return new_re, new_im


@njit(cache=True)
def orbit_contained(z_re: float, z_im: float) -> bool:
    if not (math.isfinite(z_re) and math.isfinite(z_im)):
        return False
    return z_re * z_re + z_im * z_im < ESCAPE_RADIUS_SQ


@njit(cache=True)
def escape_time(x: int, y: int, step_x: float, step_y: float, floor_x: float, floor_y: float) -> int:
    """
    Iteration count in [0, MAX_ITERATIONS] for pixel (x, y).

    The pixel's constant is C = (floor_x + x*step_x, floor_y + y*step_y) and
    the orbit starts at Z0 = C.
    """
    c_re = floor_x + x * step_x
    c_im = floor_y + y * step_y
    z_re = c_re
    z_im = c_im

    n = 0
    while n < MAX_ITERATIONS and orbit_contained(z_re, z_im):
        z_re, z_im = next_z(c_re, c_im, z_re, z_im)
        n += 1
    return n
