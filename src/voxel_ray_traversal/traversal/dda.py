"""3D DDA stepping state shared by the grid and octree steppers.

Implements the setup and recurrence of Amanatides & Woo, "A Fast Voxel
Traversal Algorithm for Ray Tracing" (1987). All distances are parametric
distances along ray.direction measured from the ray origin; the ray itself
is never modified.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from ..geometry.bounds import Ray
from ..geometry.intersection import hits_box
from ..utils.config import GridConfig


@dataclass(eq=False)
class TraversalState:
    """Mutable state of a single ray traversal.

    Attributes:
        cell: Current integer cell coordinate (3,)
        t_max: Distance at which the ray leaves the current cell on each axis
        t_delta: Distance needed to cross one full cell on each axis
        step: Sign of the ray direction per axis (+1, 0, -1)
        entry_point: World-space point where the ray enters the grid box
        t_entry: Distance of the entry point
        t_exit: Distance at which the ray leaves the grid box
        t: Distance at which the ray entered the current cell
    """

    cell: np.ndarray
    t_max: np.ndarray
    t_delta: np.ndarray
    step: np.ndarray
    entry_point: np.ndarray
    t_entry: float
    t_exit: float
    t: float

    def next_axis(self) -> int:
        """Axis whose cell boundary the ray reaches first.

        Ties resolve X before Y before Z. An axis the ray is parallel to has
        an infinite t_max and is never chosen.
        """
        tx, ty, tz = self.t_max
        if tx <= ty and tx <= tz:
            return 0
        if ty <= tz:
            return 1
        return 2

    def next_crossing(self) -> float:
        """Distance at which the ray leaves the current cell."""
        return min(float(self.t_max[self.next_axis()]), self.t_exit)

    def advance(self) -> int:
        """Step into the next cell along the ray.

        Returns:
            The axis (0, 1 or 2) that was advanced
        """
        axis = self.next_axis()
        self.t = float(self.t_max[axis])
        self.cell[axis] += self.step[axis]
        self.t_max[axis] += self.t_delta[axis]
        return axis

    def inside(self, cell_count: np.ndarray) -> bool:
        """Check whether the current cell lies within [0, cell_count)."""
        return bool(np.all(self.cell >= 0) and np.all(self.cell < cell_count))


def begin_traversal(ray: Ray, grid: GridConfig) -> Optional[TraversalState]:
    """Clip a ray to the grid and compute the initial DDA state.

    Args:
        ray: Ray to trace. Expected to have a unit direction.
        grid: Grid the ray is traced through

    Returns:
        Initial TraversalState, or None if the ray misses the grid box
    """
    box = grid.bounding_box
    hit = hits_box(ray, box.min, box.max)
    if not hit.hit:
        return None

    # Entry at t_min even when negative: an origin inside the box still
    # starts from the box surface behind it.
    t_entry = hit.t_min
    entry_point = ray.at(t_entry)
    direction = ray.direction

    cell = grid.cell_of(entry_point)
    lower, upper = grid.cell_bounds(cell)

    step = np.sign(direction).astype(np.int64)
    parallel = step == 0

    with np.errstate(divide="ignore", invalid="ignore"):
        t_lower = (lower - entry_point) / direction
        t_upper = (upper - entry_point) / direction
        t_delta = np.abs(grid.leaf_size / direction)

    t_max = np.where(direction < 0, t_lower, t_upper) + t_entry
    t_max = np.where(parallel, np.inf, t_max)
    t_delta = np.where(parallel, np.inf, t_delta)

    return TraversalState(
        cell=cell,
        t_max=t_max.astype(np.float64),
        t_delta=t_delta.astype(np.float64),
        step=step,
        entry_point=entry_point,
        t_entry=t_entry,
        t_exit=hit.t_max,
        t=t_entry,
    )
