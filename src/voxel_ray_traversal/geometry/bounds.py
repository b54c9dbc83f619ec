"""Ray and axis-aligned bounding box value types."""

import numpy as np
from dataclasses import dataclass


def _as_vec3(value, name: str) -> np.ndarray:
    """Convert array-like input to a float64 3-vector."""
    vec = np.asarray(value, dtype=np.float64)
    if vec.shape == ():
        vec = np.full(3, float(vec), dtype=np.float64)
    if vec.shape != (3,):
        raise ValueError(f"{name} must be a 3-vector, got shape {vec.shape}")
    return vec


@dataclass(frozen=True, eq=False)
class BoundingBox:
    """Axis-aligned box given by its minimum and maximum corners.

    Attributes:
        min: Minimum corner (3,)
        max: Maximum corner (3,)
    """

    min: np.ndarray
    max: np.ndarray

    def __post_init__(self):
        """Validate corners."""
        box_min = _as_vec3(self.min, "min")
        box_max = _as_vec3(self.max, "max")
        if np.any(box_max < box_min):
            raise ValueError(f"max {box_max} must be >= min {box_min} on every axis")

        object.__setattr__(self, "min", box_min)
        object.__setattr__(self, "max", box_max)

    @property
    def extent(self) -> np.ndarray:
        """Per-axis size of the box."""
        return self.max - self.min

    @property
    def center(self) -> np.ndarray:
        return (self.min + self.max) * 0.5

    def contains(self, point) -> bool:
        """Check whether a point lies inside the half-open box [min, max)."""
        p = np.asarray(point, dtype=np.float64)
        return bool(np.all(p >= self.min) and np.all(p < self.max))

    def __repr__(self) -> str:
        return f"BoundingBox(min={self.min.tolist()}, max={self.max.tolist()})"


@dataclass(frozen=True, eq=False)
class Ray:
    """A ray with a world-space origin and a direction.

    The direction is expected to be unit length. This is not enforced, the
    traversal only requires it to be non-zero.

    Attributes:
        position: Origin of the ray (3,)
        direction: Direction of the ray (3,)
    """

    position: np.ndarray
    direction: np.ndarray

    def __post_init__(self):
        """Validate the ray."""
        position = _as_vec3(self.position, "position")
        direction = _as_vec3(self.direction, "direction")
        if not np.any(direction):
            raise ValueError("direction must be non-zero")

        object.__setattr__(self, "position", position)
        object.__setattr__(self, "direction", direction)

    def at(self, t: float) -> np.ndarray:
        """Point along the ray at parametric distance t."""
        return self.position + t * self.direction

    def normalized(self) -> "Ray":
        """Copy of this ray with a unit-length direction."""
        return Ray(self.position, self.direction / np.linalg.norm(self.direction))

    def __repr__(self) -> str:
        return f"Ray(position={self.position.tolist()}, direction={self.direction.tolist()})"
