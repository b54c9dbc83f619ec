"""Shared fixtures for traversal tests.

Octree construction is not part of the package, so the tests build their
own trees here: a power-of-two occupancy grid is subdivided into octants
and every node is then linked to its same-or-coarser neighbor across each
face.
"""

import numpy as np
import pytest

from voxel_ray_traversal import BoundingBox, GridDirection, OctreeNode


def _build_node(occupancy, offset, size, origin, leaf_size, sparse):
    """Recursively build the subtree covering size^3 cells at offset."""
    box = BoundingBox(origin + offset * leaf_size, origin + (offset + size) * leaf_size)

    if size == 1:
        value = bool(occupancy[tuple(offset)])
        if sparse and not value:
            return None
        return OctreeNode(box, leaf=True, data=value)

    node = OctreeNode(box)
    half = size // 2

    # Extract 8 octants in consistent order
    octant_idx = 0
    for i in [0, half]:
        for j in [0, half]:
            for k in [0, half]:
                child = _build_node(
                    occupancy, offset + np.array([i, j, k]), half, origin, leaf_size, sparse
                )
                if child is not None:
                    node.set_child(octant_idx, child)
                octant_idx += 1

    if sparse and not any(True for _ in node.iter_children()):
        return None
    return node


def _iter_nodes(root):
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(node.iter_children())


def _find_neighbor(root, node, direction, leaf_size):
    """Deepest node at least as large as node across the given face."""
    box = node.bounding_box
    probe = box.center + direction.vector * (box.extent / 2 + leaf_size / 2)
    if not root.contains(probe):
        return None

    current = root
    while not current.leaf:
        child = next((c for c in current.iter_children() if c.contains(probe)), None)
        if child is None or np.any(child.bounding_box.extent < box.extent - 1e-9):
            break
        current = child
    return current


def link_neighbors(root, leaf_size):
    """Fill in neighbor links for every node of the tree."""
    for node in _iter_nodes(root):
        for direction in GridDirection:
            node.set_neighbor(direction, _find_neighbor(root, node, direction, leaf_size))
    return root


def build_linked_octree(occupancy, leaf_size=1.0, origin=(0.0, 0.0, 0.0), sparse=True):
    """Build an octree over a cubic power-of-two occupancy grid.

    Args:
        occupancy: (n, n, n) array indexed [x, y, z]
        leaf_size: World size of one cell
        origin: World position of the grid's minimum corner
        sparse: If True, omit empty leaves (and subtrees with no leaves)

    Returns:
        Root node with neighbor links
    """
    occupancy = np.asarray(occupancy)
    size = occupancy.shape[0]
    if occupancy.shape != (size, size, size) or size & (size - 1):
        raise ValueError(f"Occupancy grid must be cubic with power-of-2 size, got {occupancy.shape}")

    origin = np.asarray(origin, dtype=np.float64)
    root = _build_node(occupancy, np.zeros(3, dtype=np.int64), size, origin, leaf_size, sparse)
    if root is None:
        root = OctreeNode(BoundingBox(origin, origin + size * leaf_size))
    return link_neighbors(root, leaf_size)


@pytest.fixture
def octree_builder():
    """Callable building a neighbor-linked octree from an occupancy grid."""
    return build_linked_octree


@pytest.fixture
def full_octree():
    """Fully populated 4x4x4 octree of unit leaves over [0, 4]^3."""
    return build_linked_octree(np.ones((4, 4, 4), dtype=bool), sparse=False)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


def random_rays(rng, box_min, box_max, count):
    """Rays from outside a box aimed at random points inside it."""
    box_min = np.asarray(box_min, dtype=np.float64)
    box_max = np.asarray(box_max, dtype=np.float64)
    center = (box_min + box_max) / 2
    radius = np.linalg.norm(box_max - box_min)

    rays = []
    for _ in range(count):
        outward = rng.normal(size=3)
        outward /= np.linalg.norm(outward)
        origin = center + outward * radius
        target = box_min + rng.random(3) * (box_max - box_min)
        direction = target - origin
        rays.append((origin, direction / np.linalg.norm(direction)))
    return rays


@pytest.fixture
def ray_sampler(rng):
    """Callable returning random (origin, direction) pairs that hit a box."""
    def sample(box_min, box_max, count=50):
        return random_rays(rng, box_min, box_max, count)
    return sample
