"""Octree nodes with per-face neighbor links ("ropes").

Construction and neighbor linking are done by the caller; the traversal
only reads bounding boxes, children, the leaf flag and neighbor links.
"""

from typing import Any, Iterator, List, Optional

from ..geometry.bounds import BoundingBox
from ..geometry.directions import GridDirection

CHILD_COUNT = 8


class MalformedOctreeError(RuntimeError):
    """Raised when a traversal finds an octree that breaks its invariants.

    Distinct from ordinary termination: a ray that misses or exits the
    octree simply ends the traversal.
    """


class OctreeNode:
    """A node of a sparse octree.

    Children are stored in eight slots (None where absent). Neighbor links
    reference the adjacent node at the same or a coarser level across each
    face, or None on the outer boundary. Links are not owned by the node.
    """

    __slots__ = ("bounding_box", "leaf", "data", "children", "neighbors")

    def __init__(self, bounding_box: BoundingBox, leaf: bool = False, data: Any = None):
        """Initialize the node.

        Args:
            bounding_box: World-space extent of the node
            leaf: Whether this is a terminal node
            data: Optional payload, e.g. the voxel value of a leaf
        """
        self.bounding_box = bounding_box
        self.leaf = leaf
        self.data = data
        self.children: List[Optional["OctreeNode"]] = [None] * CHILD_COUNT
        self.neighbors: List[Optional["OctreeNode"]] = [None] * len(GridDirection)

    def set_child(self, index: int, child: Optional["OctreeNode"]):
        """Place a child in one of the eight octant slots."""
        if self.leaf:
            raise ValueError("A leaf node cannot have children")
        if not 0 <= index < CHILD_COUNT:
            raise ValueError(f"Child index must be in [0, {CHILD_COUNT}), got {index}")
        self.children[index] = child

    def get_neighbor(self, direction: GridDirection) -> Optional["OctreeNode"]:
        return self.neighbors[direction.value]

    def set_neighbor(self, direction: GridDirection, node: Optional["OctreeNode"]):
        self.neighbors[direction.value] = node

    def contains(self, point) -> bool:
        """Check whether a world-space point lies in this node's box."""
        return self.bounding_box.contains(point)

    def iter_children(self) -> Iterator["OctreeNode"]:
        """Iterate over the children that are present."""
        return (child for child in self.children if child is not None)

    def iter_leaves(self) -> Iterator["OctreeNode"]:
        """Depth-first iteration over all leaves below (and including) this node."""
        stack = [self]
        while stack:
            node = stack.pop()
            if node.leaf:
                yield node
            else:
                stack.extend(reversed(list(node.iter_children())))

    def __repr__(self) -> str:
        kind = "leaf" if self.leaf else "node"
        return (
            f"OctreeNode({kind}, min={self.bounding_box.min.tolist()}, "
            f"max={self.bounding_box.max.tolist()})"
        )
