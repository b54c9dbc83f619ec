"""Basic usage example for grid and octree ray traversal."""

import numpy as np
from voxel_ray_traversal import (
    BoundingBox,
    GridConfig,
    GridDirection,
    GridStepper,
    OctreeNode,
    OctreeStepper,
    Ray,
)


def example_grid_traversal():
    """Walk a ray through a uniform grid."""
    grid = GridConfig(BoundingBox([0, 0, 0], [4, 4, 4]), leaf_size=1.0)
    stepper = GridStepper(grid)

    direction = np.array([1.0, 0.4, 0.2])
    ray = Ray([-1, 0.5, 0.5], direction / np.linalg.norm(direction))

    for visit in stepper.visits(ray):
        print(f"cell {visit.cell}  t=[{visit.t_enter:.3f}, {visit.t_exit:.3f}]")


def example_first_hit():
    """Find the first occupied voxel along a ray."""
    occupancy = np.zeros((8, 8, 8), dtype=bool)
    occupancy[5, 3, 3] = True

    grid = GridConfig.from_shape(occupancy.shape, leaf_size=0.25)
    visit = GridStepper(grid).first_hit(Ray([-1, 0.9, 0.9], [1, 0, 0]), occupancy)

    if visit is not None:
        print(f"Hit cell {visit.cell} at distance {visit.t_enter:.3f}")
    else:
        print("No hit")


def example_octree_traversal():
    """Walk a ray through a two-leaf octree row linked by neighbor pointers."""
    root = OctreeNode(BoundingBox([0, 0, 0], [2, 2, 2]))
    west = OctreeNode(BoundingBox([0, 0, 0], [1, 1, 1]), leaf=True, data="stone")
    east = OctreeNode(BoundingBox([1, 0, 0], [2, 1, 1]), leaf=True, data="glass")
    root.set_child(0, west)
    root.set_child(4, east)

    # Empty octants are covered by the root, so it is the coarser neighbor
    for leaf in (west, east):
        for direction in GridDirection:
            probe = leaf.bounding_box.center + direction.vector
            leaf.set_neighbor(direction, root if root.contains(probe) else None)
    west.set_neighbor(GridDirection.EAST, east)
    east.set_neighbor(GridDirection.WEST, west)

    stepper = OctreeStepper(root, leaf_size=1.0)
    for leaf in stepper.traverse(Ray([-1, 0.5, 0.5], [1, 0, 0])):
        print(f"leaf {leaf.bounding_box.min.tolist()} -> {leaf.data}")


if __name__ == "__main__":
    print("=== Grid traversal ===")
    example_grid_traversal()

    print("\n=== First hit ===")
    example_first_hit()

    print("\n=== Octree traversal ===")
    example_octree_traversal()
