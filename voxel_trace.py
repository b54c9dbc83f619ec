#!/usr/bin/env python
"""CLI entry point for batch voxel ray tracing."""

from voxel_ray_traversal.pipeline import main

if __name__ == "__main__":
    main()
