from __future__ import annotations

import math
from typing import Tuple

Vector2 = Tuple[float, float]


def norm(v: Vector2) -> float:
    return math.hypot(v[0], v[1])


def is_finite_vec(v: Vector2) -> bool:
    return math.isfinite(v[0]) and math.isfinite(v[1])


def tangential_unit(r: Vector2) -> Vector2:
    """
    Unit vector perpendicular to the radius vector, counterclockwise.
    Undefined at the origin.
    """
    r_mag = norm(r)
    if r_mag == 0:
        raise ValueError("Zero radius vector has no tangential direction.")
    return (-r[1] / r_mag, r[0] / r_mag)
