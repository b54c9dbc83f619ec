"""Ray / axis-aligned box intersection (slab method)."""

import numpy as np
from typing import NamedTuple

from .bounds import Ray


class BoxHit(NamedTuple):
    """Result of a ray-box test.

    Attributes:
        hit: Whether the ray enters the box at some t >= 0
        t_min: Parametric entry distance (negative if the origin is inside)
        t_max: Parametric exit distance
    """
    hit: bool
    t_min: float
    t_max: float


_MISS = BoxHit(False, float("inf"), float("-inf"))


def hits_box(ray: Ray, box_min, box_max) -> BoxHit:
    """Intersect a ray with an axis-aligned box.

    Args:
        ray: Ray to test
        box_min: Minimum corner of the box (3,)
        box_max: Maximum corner of the box (3,)

    Returns:
        BoxHit with entry/exit distances along ray.direction. A miss is
        reported when the slabs do not overlap or the box is entirely
        behind the origin.
    """
    box_min = np.asarray(box_min, dtype=np.float64)
    box_max = np.asarray(box_max, dtype=np.float64)

    t_near = float("-inf")
    t_far = float("inf")

    for axis in range(3):
        o = float(ray.position[axis])
        d = float(ray.direction[axis])
        lo = float(box_min[axis])
        hi = float(box_max[axis])

        # Parallel to this slab: either always inside it or never
        if d == 0.0:
            if o < lo or o > hi:
                return _MISS
            continue

        t0 = (lo - o) / d
        t1 = (hi - o) / d
        if t0 > t1:
            t0, t1 = t1, t0

        t_near = max(t_near, t0)
        t_far = min(t_far, t1)
        if t_near > t_far:
            return _MISS

    if t_far < 0.0:
        return _MISS

    return BoxHit(True, t_near, t_far)
