"""Axis-aligned face directions used to index octree neighbor links."""

import numpy as np
from enum import Enum


# Signed unit vectors, indexed by GridDirection.value
DIRECTION_VECTORS = np.array([
    [+1, 0, 0],   # EAST
    [-1, 0, 0],   # WEST
    [0, +1, 0],   # UP
    [0, -1, 0],   # DOWN
    [0, 0, -1],   # NORTH
    [0, 0, +1],   # SOUTH
], dtype=np.int64)

# (positive face, negative face) per axis
_AXIS_DIRECTIONS = (
    (0, 1),  # X: EAST, WEST
    (2, 3),  # Y: UP, DOWN
    (5, 4),  # Z: SOUTH, NORTH
)


class GridDirection(Enum):
    """Face direction of a grid cell or octree node.

    East/West lie on X, Up/Down on Y and North/South on Z, with North
    pointing toward -Z.
    """
    EAST = 0
    WEST = 1
    UP = 2
    DOWN = 3
    NORTH = 4
    SOUTH = 5

    @property
    def vector(self) -> np.ndarray:
        """Signed unit vector for this direction."""
        return DIRECTION_VECTORS[self.value].copy()

    @property
    def axis(self) -> int:
        return int(np.flatnonzero(DIRECTION_VECTORS[self.value])[0])

    @property
    def sign(self) -> int:
        return int(DIRECTION_VECTORS[self.value][self.axis])

    @property
    def opposite(self) -> "GridDirection":
        return GridDirection.from_step(self.axis, -self.sign)

    @classmethod
    def from_step(cls, axis: int, step: int) -> "GridDirection":
        """Direction of the face crossed when stepping along an axis.

        A negative step maps to the negative face; zero and positive steps
        map to the positive face.
        """
        if axis not in (0, 1, 2):
            raise ValueError(f"axis must be 0, 1 or 2, got {axis}")
        positive, negative = _AXIS_DIRECTIONS[axis]
        return cls(negative if step < 0 else positive)
