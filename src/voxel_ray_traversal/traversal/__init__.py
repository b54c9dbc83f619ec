"""Grid and octree ray traversal."""

from .dda import TraversalState, begin_traversal
from .grid_stepper import GridStepper, CellVisit, traverse_grid
from .octree_stepper import OctreeStepper, traverse_octree
from .kernels import walk_cells

__all__ = [
    "TraversalState",
    "begin_traversal",
    "GridStepper",
    "CellVisit",
    "traverse_grid",
    "OctreeStepper",
    "traverse_octree",
    "walk_cells",
]
