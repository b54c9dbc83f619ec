"""Octree node type with precomputed neighbor links."""

from .node import OctreeNode, MalformedOctreeError, CHILD_COUNT

__all__ = ["OctreeNode", "MalformedOctreeError", "CHILD_COUNT"]
