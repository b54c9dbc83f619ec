"""Uniform grid traversal.

Walks the cells of a uniform grid pierced by a ray, in ray order, from the
point where the ray enters the grid's bounding box to where it leaves it.
Traversal is lazy: cells are produced one at a time as the consumer pulls
them, so first-hit queries stop paying as soon as they stop iterating.

Example:
    >>> from voxel_ray_traversal import Ray, BoundingBox, GridConfig, GridStepper
    >>> grid = GridConfig(BoundingBox([0, 0, 0], [4, 4, 4]), leaf_size=1.0)
    >>> stepper = GridStepper(grid)
    >>> list(stepper.cells(Ray([-1, 2.5, 2.5], [1, 0, 0])))
    [(0, 2, 2), (1, 2, 2), (2, 2, 2), (3, 2, 2)]
"""

import numpy as np
from typing import Iterator, NamedTuple, Optional, Tuple

from ..geometry.bounds import BoundingBox, Ray
from ..utils.config import GridConfig
from .dda import begin_traversal
from .kernels import walk_cells


class CellVisit(NamedTuple):
    """A grid cell crossed by a ray.

    Attributes:
        cell: Integer cell coordinate
        anchor: World-space minimum corner of the cell
        t_enter: Distance along the ray where it enters the cell
        t_exit: Distance along the ray where it leaves the cell
    """
    cell: Tuple[int, int, int]
    anchor: np.ndarray
    t_enter: float
    t_exit: float


class GridStepper:
    """Step a ray through a uniform grid one cell at a time."""

    def __init__(self, grid: GridConfig):
        """Initialize the stepper.

        Args:
            grid: Grid to traverse
        """
        self.grid = grid

    def visits(self, ray: Ray) -> Iterator[CellVisit]:
        """Lazily yield every cell the ray crosses, in ray order.

        Yields nothing if the ray misses the grid's bounding box.
        """
        state = begin_traversal(ray, self.grid)
        if state is None:
            return

        cell_count = self.grid.cell_count
        while state.inside(cell_count):
            cell = tuple(int(c) for c in state.cell)
            yield CellVisit(
                cell=cell,
                anchor=self.grid.cell_anchor(cell),
                t_enter=state.t,
                t_exit=state.next_crossing(),
            )
            state.advance()

    def cells(self, ray: Ray) -> Iterator[Tuple[int, int, int]]:
        """Lazily yield integer cell coordinates crossed by the ray."""
        for visit in self.visits(ray):
            yield visit.cell

    def traverse(self, ray: Ray) -> Iterator[np.ndarray]:
        """Lazily yield the world-space anchor (minimum corner) of each crossed cell."""
        for visit in self.visits(ray):
            yield visit.anchor

    def first_hit(self, ray: Ray, occupancy: np.ndarray) -> Optional[CellVisit]:
        """Find the first occupied cell along the ray.

        Args:
            ray: Ray to trace
            occupancy: Array indexed as occupancy[x, y, z] with the grid's
                shape; non-zero entries count as occupied

        Returns:
            The first occupied CellVisit, or None if the ray hits nothing
        """
        occupancy = np.asarray(occupancy)
        if occupancy.shape != self.grid.shape:
            raise ValueError(
                f"occupancy shape {occupancy.shape} does not match grid shape {self.grid.shape}"
            )

        for visit in self.visits(ray):
            if occupancy[visit.cell]:
                return visit
        return None

    def path_array(self, ray: Ray) -> np.ndarray:
        """Compute the whole cell path eagerly with the compiled kernel.

        Returns:
            (N, 3) int64 array of cells in ray order, empty if the ray misses
        """
        state = begin_traversal(ray, self.grid)
        if state is None:
            return np.empty((0, 3), dtype=np.int64)

        cells, _ = walk_cells(state, self.grid.cell_count)
        return cells


def traverse_grid(
    ray: Ray,
    bounding_box: BoundingBox,
    leaf_size,
    cell_count=None
) -> Iterator[np.ndarray]:
    """Lazily yield world-space cell anchors crossed by a ray.

    Args:
        ray: Ray to trace
        bounding_box: Extent of the grid
        leaf_size: Cell size (scalar or 3-vector)
        cell_count: Optional per-axis cell count, checked against the box

    Returns:
        Iterator over cell anchors in ray order; empty if the ray misses
    """
    grid = GridConfig(bounding_box, leaf_size, cell_count)
    return GridStepper(grid).traverse(ray)
