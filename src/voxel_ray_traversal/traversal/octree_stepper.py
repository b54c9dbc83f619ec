"""Octree traversal using neighbor links.

The ray is stepped through the octree's finest grid with the same DDA as
GridStepper. Instead of descending from the root for every cell, the
stepper stays at the current node while the cell remains inside it and
follows the node's neighbor link when the cell leaves it, descending again
only when the neighbor is an internal (coarser) node.

Rope-based octree ray casting is discussed at
https://stackoverflow.com/questions/6281415.
"""

import numpy as np
from typing import Callable, Iterator, Optional, Union

from ..geometry.bounds import Ray
from ..geometry.directions import GridDirection
from ..octree.node import MalformedOctreeError, OctreeNode
from ..utils.config import GridConfig
from .dda import begin_traversal


def _has_data(leaf: OctreeNode) -> bool:
    return bool(leaf.data)


class OctreeStepper:
    """Enumerate the leaves of an octree pierced by a ray, in ray order.

    The octree's leaves must each cover exactly one grid cell of size
    leaf_size, and every node must carry neighbor links to the adjacent
    node of the same or a coarser level across each face.
    """

    def __init__(self, root: OctreeNode, leaf_size, cell_count=None):
        """Initialize the stepper.

        Args:
            root: Root node; its bounding box defines the grid extent
            leaf_size: Size of a leaf (scalar or 3-vector)
            cell_count: Optional per-axis cell count, checked against the root box
        """
        self.root = root
        self.grid = GridConfig(root.bounding_box, leaf_size, cell_count)

        covered = self.grid.cell_count * self.grid.leaf_size
        if not np.allclose(covered, root.bounding_box.extent):
            raise ValueError(
                f"root extent {root.bounding_box.extent.tolist()} is not a whole number "
                f"of leaves of size {self.grid.leaf_size.tolist()}"
            )

    @staticmethod
    def _descend(node: OctreeNode, point) -> OctreeNode:
        """Walk down from node to the deepest present child containing point."""
        while not node.leaf:
            for child in node.iter_children():
                if child.contains(point):
                    node = child
                    break
            else:
                # Empty octant: the point is in unoccupied space of node
                return node
        return node

    def traverse(self, ray: Ray) -> Iterator[OctreeNode]:
        """Lazily yield the leaves crossed by the ray, in ray order.

        Yields nothing if the ray misses the root. Raises
        MalformedOctreeError if the tree's leaves or neighbor links are
        inconsistent with the grid.
        """
        state = begin_traversal(ray, self.grid)
        if state is None:
            return

        # Face crossed when stepping along each axis
        neighbor_directions = [
            GridDirection.from_step(axis, int(state.step[axis])) for axis in range(3)
        ]

        node = self.root
        while node is not None:
            if not node.leaf:
                node = self._descend(node, self.grid.cell_center(state.cell))
            if node.leaf:
                yield node

            axis = state.advance()
            center = self.grid.cell_center(state.cell)

            if node.contains(center):
                if node.leaf:
                    raise MalformedOctreeError(
                        f"Leaf {node!r} spans more than one cell "
                        f"(still contains cell {state.cell.tolist()} after a step)"
                    )
                continue

            direction = neighbor_directions[axis]
            neighbor = node.get_neighbor(direction)
            if neighbor is None:
                if self.grid.contains_cell(state.cell):
                    raise MalformedOctreeError(
                        f"Missing {direction.name} neighbor of {node!r} "
                        f"for cell {state.cell.tolist()} inside the grid"
                    )
                return

            if not neighbor.contains(center):
                raise MalformedOctreeError(
                    f"{direction.name} neighbor {neighbor!r} of {node!r} "
                    f"does not contain cell {state.cell.tolist()}"
                )
            node = neighbor

    def first_leaf(self, ray: Ray) -> Optional[OctreeNode]:
        """Return the first leaf crossed by the ray, or None."""
        return next(self.traverse(ray), None)

    def first_hit(
        self,
        ray: Ray,
        predicate: Optional[Callable[[OctreeNode], bool]] = None
    ) -> Optional[OctreeNode]:
        """Return the first crossed leaf accepted by predicate.

        Args:
            ray: Ray to trace
            predicate: Leaf filter; defaults to leaves with truthy data

        Returns:
            The first matching leaf, or None
        """
        if predicate is None:
            predicate = _has_data

        for leaf in self.traverse(ray):
            if predicate(leaf):
                return leaf
        return None


def traverse_octree(
    ray: Ray,
    root: OctreeNode,
    leaf_size,
    cell_count=None,
    stop_at_first_leaf: bool = False
) -> Union[Iterator[OctreeNode], Optional[OctreeNode]]:
    """Trace a ray through an octree.

    Args:
        ray: Ray to trace
        root: Octree root with neighbor links
        leaf_size: Size of a leaf (scalar or 3-vector)
        cell_count: Optional per-axis cell count, checked against the root box
        stop_at_first_leaf: Return only the first leaf instead of an iterator

    Returns:
        The first leaf (or None) if stop_at_first_leaf, otherwise a lazy
        iterator over all crossed leaves
    """
    stepper = OctreeStepper(root, leaf_size, cell_count)
    if stop_at_first_leaf:
        return stepper.first_leaf(ray)
    return stepper.traverse(ray)
