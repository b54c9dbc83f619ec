"""Voxel grid and octree ray traversal."""

from .geometry import Ray, BoundingBox, GridDirection, hits_box
from .octree import OctreeNode, MalformedOctreeError
from .traversal import (
    GridStepper,
    OctreeStepper,
    CellVisit,
    traverse_grid,
    traverse_octree,
)
from .utils.config import GridConfig, TraceConfig

__version__ = "0.1.0"
__all__ = [
    "Ray",
    "BoundingBox",
    "GridDirection",
    "hits_box",
    "OctreeNode",
    "MalformedOctreeError",
    "GridStepper",
    "OctreeStepper",
    "CellVisit",
    "traverse_grid",
    "traverse_octree",
    "GridConfig",
    "TraceConfig",
]
