"""Batch tracing of rays through voxel occupancy grids."""

import warnings
import numpy as np
from pathlib import Path
from typing import Dict, Optional
from tqdm import tqdm

from .geometry.bounds import Ray
from .traversal.grid_stepper import GridStepper
from .utils.config import TraceConfig
from .utils.metadata import TraceSummaryWriter


def load_voxels(path: Path) -> np.ndarray:
    """Load an occupancy grid from .npy or .npz (under the 'voxels' key)."""
    path = Path(path)
    if path.suffix == ".npz":
        with np.load(path) as data:
            if "voxels" not in data.files:
                raise KeyError(f"{path} has no 'voxels' array (found {data.files})")
            voxels = data["voxels"]
    else:
        voxels = np.load(path)

    if voxels.ndim != 3:
        raise ValueError(f"Voxel grid must be 3D, got shape {voxels.shape}")
    return voxels


def load_rays(path: Path):
    """Load rays stored as an (N, 6) array of [origin, direction] rows.

    Returns:
        Tuple of (origins, directions), each (N, 3)
    """
    rays = np.load(Path(path))
    if rays.ndim != 2 or rays.shape[1] != 6:
        raise ValueError(f"Rays must have shape (N, 6), got {rays.shape}")
    return rays[:, :3].astype(np.float64), rays[:, 3:].astype(np.float64)


class RayBatchTracer:
    """Trace rays one after another through an occupancy grid.

    Each ray reports the first occupied cell along it and the distance at
    which it enters that cell.
    """

    def __init__(self, occupancy: np.ndarray, config: Optional[TraceConfig] = None):
        """Initialize the tracer.

        Args:
            occupancy: Voxel grid indexed as occupancy[x, y, z]
            config: Trace configuration (uses defaults if not provided)
        """
        self.config = config or TraceConfig()
        self.occupancy = np.asarray(occupancy)
        self.grid = self.config.grid_for(self.occupancy.shape)
        self.stepper = GridStepper(self.grid)

    def _prepare_directions(self, directions: np.ndarray) -> np.ndarray:
        """Validate ray directions, normalizing them if configured to."""
        norms = np.linalg.norm(directions, axis=1)
        if np.any(norms == 0):
            raise ValueError(f"{int(np.count_nonzero(norms == 0))} rays have zero-length directions")

        non_unit = ~np.isclose(norms, 1.0, rtol=1e-6)
        if np.any(non_unit) and self.config.normalize_directions:
            warnings.warn(
                f"{int(np.count_nonzero(non_unit))} ray directions are not unit length; normalizing"
            )
            directions = directions / norms[:, None]
        return directions

    def trace(self, origins: np.ndarray, directions: np.ndarray) -> Dict[str, np.ndarray]:
        """Trace a batch of rays.

        Args:
            origins: Ray origins (N, 3)
            directions: Ray directions (N, 3)

        Returns:
            Dictionary with:
                'hit': (N,) bool
                'cells': (N, 3) int64, -1 where the ray hit nothing
                't_hit': (N,) float64 entry distance, NaN where missed
        """
        origins = np.asarray(origins, dtype=np.float64)
        directions = np.asarray(directions, dtype=np.float64)
        if origins.shape != directions.shape or origins.ndim != 2 or origins.shape[1] != 3:
            raise ValueError(
                f"origins and directions must both be (N, 3), got {origins.shape} and {directions.shape}"
            )

        directions = self._prepare_directions(directions)

        num_rays = origins.shape[0]
        hit = np.zeros(num_rays, dtype=bool)
        cells = np.full((num_rays, 3), -1, dtype=np.int64)
        t_hit = np.full(num_rays, np.nan, dtype=np.float64)

        iterator = range(num_rays)
        if self.config.show_progress:
            iterator = tqdm(iterator, total=num_rays, desc="Tracing rays")

        for i in iterator:
            visit = self.stepper.first_hit(Ray(origins[i], directions[i]), self.occupancy)
            if visit is not None:
                hit[i] = True
                cells[i] = visit.cell
                t_hit[i] = visit.t_enter

        return {"hit": hit, "cells": cells, "t_hit": t_hit}

    def save(self, result: Dict[str, np.ndarray]) -> Dict:
        """Write hit arrays and the JSON summary to the output directory.

        Returns:
            The summary dictionary that was written
        """
        np.savez_compressed(self.config.get_hits_path(), **result)

        summary = TraceSummaryWriter.build_summary(
            grid_shape=self.grid.shape,
            leaf_size=self.grid.leaf_size,
            origin=self.config.origin,
            hit=result["hit"],
        )
        TraceSummaryWriter.write_summary(self.config.get_summary_path(), summary)
        return summary


def trace_occupancy(
    occupancy: np.ndarray,
    origins: np.ndarray,
    directions: np.ndarray,
    config: Optional[TraceConfig] = None
) -> Dict[str, np.ndarray]:
    """Trace rays through an occupancy grid. See RayBatchTracer.trace."""
    return RayBatchTracer(occupancy, config).trace(origins, directions)


def main(argv=None):
    """Command line entry point for batch ray tracing."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Trace rays through a voxel occupancy grid and record first hits"
    )
    parser.add_argument(
        "voxels",
        type=Path,
        help="Occupancy grid (.npy, or .npz with a 'voxels' array)"
    )
    parser.add_argument(
        "rays",
        type=Path,
        help="Rays as an (N, 6) .npy array of origin and direction"
    )
    parser.add_argument(
        "--leaf-size",
        type=float,
        default=1.0,
        help="Voxel size in world units"
    )
    parser.add_argument(
        "--origin",
        type=float,
        nargs=3,
        default=(0.0, 0.0, 0.0),
        help="World position of the grid's minimum corner"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("traces"),
        help="Output directory"
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar"
    )

    args = parser.parse_args(argv)

    config = TraceConfig(
        leaf_size=args.leaf_size,
        origin=tuple(args.origin),
        output_dir=args.output_dir,
        show_progress=not args.no_progress
    )

    voxels = load_voxels(args.voxels)
    origins, directions = load_rays(args.rays)

    tracer = RayBatchTracer(voxels, config)
    result = tracer.trace(origins, directions)
    summary = tracer.save(result)

    print(f"\nTraced {summary['num_rays']} rays through a {summary['grid_shape']} grid")
    print(f"Hits: {summary['num_hits']} ({summary['hit_ratio']:.2%})")
    print(f"Results written to {config.output_dir}")


if __name__ == "__main__":
    main()
