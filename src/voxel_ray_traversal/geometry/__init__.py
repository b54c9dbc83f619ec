"""Ray, bounding box and face direction primitives."""

from .bounds import Ray, BoundingBox
from .intersection import BoxHit, hits_box
from .directions import GridDirection, DIRECTION_VECTORS

__all__ = [
    "Ray",
    "BoundingBox",
    "BoxHit",
    "hits_box",
    "GridDirection",
    "DIRECTION_VECTORS",
]
