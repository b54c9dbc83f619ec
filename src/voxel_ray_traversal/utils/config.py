"""Configuration for grid traversal and batch ray tracing."""

import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..geometry.bounds import BoundingBox


@dataclass(eq=False)
class GridConfig:
    """Uniform grid laid over a bounding box.

    Attributes:
        bounding_box: World-space extent of the grid
        leaf_size: Per-axis cell size (scalar or 3-vector, strictly positive)
        cell_count: Per-axis number of cells. Derived as
            ceil(extent / leaf_size) when not given; an explicit value must
            agree with the derived one.
    """

    bounding_box: BoundingBox
    leaf_size: np.ndarray
    cell_count: Optional[np.ndarray] = None

    def __post_init__(self):
        """Validate configuration and compute derived values."""
        leaf_size = np.asarray(self.leaf_size, dtype=np.float64)
        if leaf_size.shape == ():
            leaf_size = np.full(3, float(leaf_size), dtype=np.float64)
        if leaf_size.shape != (3,):
            raise ValueError(f"leaf_size must be a scalar or 3-vector, got shape {leaf_size.shape}")
        if np.any(leaf_size <= 0):
            raise ValueError(f"leaf_size must be strictly positive, got {leaf_size}")

        extent = self.bounding_box.extent
        if np.any(extent <= 0):
            raise ValueError(f"bounding box must have positive extent, got {extent}")

        expected = self._derive_cell_count(extent, leaf_size)

        if self.cell_count is not None:
            cell_count = np.asarray(self.cell_count, dtype=np.int64)
            if cell_count.shape == ():
                cell_count = np.full(3, int(cell_count), dtype=np.int64)
            if not np.array_equal(cell_count, expected):
                raise ValueError(
                    f"cell_count {cell_count.tolist()} does not match "
                    f"ceil(extent / leaf_size) = {expected.tolist()}"
                )

        self.leaf_size = leaf_size
        self.cell_count = expected

    @staticmethod
    def _derive_cell_count(extent: np.ndarray, leaf_size: np.ndarray) -> np.ndarray:
        """ceil(extent / leaf_size), treating near-integer ratios as exact."""
        ratio = extent / leaf_size
        rounded = np.round(ratio)
        counts = np.where(np.isclose(ratio, rounded, rtol=1e-9, atol=1e-9), rounded, np.ceil(ratio))
        return counts.astype(np.int64)

    @property
    def num_cells(self) -> int:
        """Total number of cells in the grid."""
        return int(np.prod(self.cell_count))

    @property
    def shape(self) -> Tuple[int, int, int]:
        return tuple(int(c) for c in self.cell_count)

    def cell_of(self, point) -> np.ndarray:
        """Integer cell containing a world-space point.

        Truncates toward zero and clamps to [0, cell_count - 1], so points
        on or slightly outside the box surface map to a boundary cell.
        """
        rel = (np.asarray(point, dtype=np.float64) - self.bounding_box.min) / self.leaf_size
        cell = np.trunc(rel).astype(np.int64)
        return np.clip(cell, 0, self.cell_count - 1)

    def cell_anchor(self, cell) -> np.ndarray:
        """Minimum corner of a cell in world space."""
        return self.bounding_box.min + np.asarray(cell, dtype=np.float64) * self.leaf_size

    def cell_center(self, cell) -> np.ndarray:
        return self.bounding_box.min + (np.asarray(cell, dtype=np.float64) + 0.5) * self.leaf_size

    def cell_bounds(self, cell) -> Tuple[np.ndarray, np.ndarray]:
        """(min, max) corners of a cell in world space."""
        lower = self.cell_anchor(cell)
        return lower, lower + self.leaf_size

    def contains_cell(self, cell) -> bool:
        """Check 0 <= cell < cell_count on every axis."""
        c = np.asarray(cell)
        return bool(np.all(c >= 0) and np.all(c < self.cell_count))

    @classmethod
    def from_shape(cls, shape, leaf_size=1.0, origin=(0.0, 0.0, 0.0)) -> "GridConfig":
        """Build a grid with the given number of cells per axis.

        Args:
            shape: Cell count per axis, e.g. voxels.shape
            leaf_size: Cell size (scalar or 3-vector)
            origin: World position of the grid's minimum corner
        """
        leaf = np.broadcast_to(np.asarray(leaf_size, dtype=np.float64), (3,))
        box_min = np.asarray(origin, dtype=np.float64)
        box_max = box_min + np.asarray(shape, dtype=np.float64) * leaf
        return cls(BoundingBox(box_min, box_max), leaf.copy(), np.asarray(shape, dtype=np.int64))


@dataclass
class TraceConfig:
    """Configuration for batch tracing of rays through an occupancy grid.

    Attributes:
        leaf_size: Cell size in world units
        origin: World position of the grid's minimum corner
        output_dir: Directory for hit arrays and summary metadata
        normalize_directions: If True, rescale non-unit ray directions
            (with a warning) before tracing
        show_progress: Show a progress bar while tracing
    """

    leaf_size: float = 1.0
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    output_dir: Path = Path("traces")
    normalize_directions: bool = True
    show_progress: bool = True

    def __post_init__(self):
        """Validate configuration and prepare the output directory."""
        leaf = np.asarray(self.leaf_size, dtype=np.float64)
        if np.any(leaf <= 0):
            raise ValueError(f"leaf_size must be strictly positive, got {self.leaf_size}")

        if len(self.origin) != 3:
            raise ValueError(f"origin must have 3 components, got {self.origin}")
        self.origin = tuple(float(v) for v in self.origin)

        self.output_dir = Path(self.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def grid_for(self, shape) -> GridConfig:
        """Grid configuration matching an occupancy array shape."""
        return GridConfig.from_shape(shape, leaf_size=self.leaf_size, origin=self.origin)

    def get_hits_path(self) -> Path:
        return self.output_dir / "hits.npz"

    def get_summary_path(self) -> Path:
        """Get path to the trace summary file."""
        return self.output_dir / "summary.json"
