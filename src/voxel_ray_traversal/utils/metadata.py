"""Trace summary metadata."""

import json
import numpy as np
from pathlib import Path
from typing import Dict, Any
from datetime import datetime


class TraceSummaryWriter:
    """Handles creation and loading of trace summary files."""

    @staticmethod
    def build_summary(
        grid_shape,
        leaf_size,
        origin,
        hit: np.ndarray
    ) -> Dict[str, Any]:
        """Assemble summary statistics for a batch of traced rays.

        Args:
            grid_shape: Cell count per axis of the occupancy grid
            leaf_size: Cell size in world units
            origin: World position of the grid's minimum corner
            hit: Boolean array, one entry per ray

        Returns:
            Summary dictionary
        """
        num_rays = int(hit.shape[0])
        num_hits = int(np.count_nonzero(hit))

        return {
            "created_at": datetime.now().isoformat(),
            "grid_shape": [int(s) for s in grid_shape],
            "leaf_size": np.asarray(leaf_size, dtype=float).tolist(),
            "origin": [float(v) for v in origin],
            "num_rays": num_rays,
            "num_hits": num_hits,
            "hit_ratio": num_hits / num_rays if num_rays > 0 else 0.0,
        }

    @staticmethod
    def write_summary(output_path: Path, summary: Dict[str, Any]):
        """Write a trace summary to JSON.

        Args:
            output_path: Path to summary.json
            summary: Dictionary from build_summary
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(summary, f, indent=2)

    @staticmethod
    def load_summary(path: Path) -> Dict[str, Any]:
        with open(path, "r") as f:
            return json.load(f)
