"""Tests for octree traversal with neighbor links."""

import numpy as np
import pytest

from voxel_ray_traversal import (
    BoundingBox,
    GridConfig,
    GridDirection,
    GridStepper,
    MalformedOctreeError,
    OctreeNode,
    OctreeStepper,
    Ray,
    traverse_octree,
)


def _leaf_anchors(leaves):
    return [tuple(leaf.bounding_box.min.tolist()) for leaf in leaves]


def _find_leaf(root, anchor):
    for leaf in root.iter_leaves():
        if np.array_equal(leaf.bounding_box.min, anchor):
            return leaf
    raise LookupError(anchor)


class TestOctreeNode:
    """Tests for OctreeNode bookkeeping."""

    def test_leaf_cannot_have_children(self):
        leaf = OctreeNode(BoundingBox([0, 0, 0], [1, 1, 1]), leaf=True)
        with pytest.raises(ValueError):
            leaf.set_child(0, OctreeNode(BoundingBox([0, 0, 0], [0.5, 0.5, 0.5])))

    def test_child_index_range(self):
        node = OctreeNode(BoundingBox([0, 0, 0], [1, 1, 1]))
        with pytest.raises(ValueError):
            node.set_child(8, None)

    def test_neighbors(self):
        a = OctreeNode(BoundingBox([0, 0, 0], [1, 1, 1]), leaf=True)
        b = OctreeNode(BoundingBox([1, 0, 0], [2, 1, 1]), leaf=True)
        a.set_neighbor(GridDirection.EAST, b)
        assert a.get_neighbor(GridDirection.EAST) is b
        assert a.get_neighbor(GridDirection.WEST) is None

    def test_iter_leaves(self, full_octree):
        leaves = list(full_octree.iter_leaves())
        assert len(leaves) == 64
        assert all(leaf.leaf for leaf in leaves)

    def test_sparse_tree_leaf_count(self, octree_builder):
        occupancy = np.zeros((4, 4, 4), dtype=bool)
        occupancy[0, 0, 0] = occupancy[3, 1, 2] = True
        root = octree_builder(occupancy)
        assert len(list(root.iter_leaves())) == 2


class TestOctreeStepperBasics:
    """Known paths through a full 4x4x4 octree."""

    def test_axis_aligned_ray(self, full_octree):
        leaves = list(OctreeStepper(full_octree, 1.0).traverse(Ray([-1, 2, 2], [1, 0, 0])))
        assert _leaf_anchors(leaves) == [(0, 2, 2), (1, 2, 2), (2, 2, 2), (3, 2, 2)]

    def test_first_leaf(self, full_octree):
        leaf = OctreeStepper(full_octree, 1.0).first_leaf(Ray([-1, 2, 2], [1, 0, 0]))
        assert leaf.leaf
        assert np.array_equal(leaf.bounding_box.min, [0, 2, 2])

    def test_miss(self, full_octree):
        stepper = OctreeStepper(full_octree, 1.0)
        ray = Ray([-1, 6, 2], [1, 0, 0])
        assert list(stepper.traverse(ray)) == []
        assert stepper.first_leaf(ray) is None

    def test_diagonal_ray(self, full_octree):
        direction = np.ones(3) / np.sqrt(3)
        anchors = _leaf_anchors(OctreeStepper(full_octree, 1.0).traverse(Ray([-1, -1, -1], direction)))
        assert [a for a in anchors if a[0] == a[1] == a[2]] == [
            (0, 0, 0), (1, 1, 1), (2, 2, 2), (3, 3, 3)
        ]
        assert len(anchors) == 10

    def test_each_exit_face_terminates_cleanly(self, full_octree):
        """Leaving through any face of the root ends the traversal without error."""
        stepper = OctreeStepper(full_octree, 1.0)
        for direction in GridDirection:
            vec = direction.vector.astype(float)
            origin = np.full(3, 2.5) - vec * 5
            leaves = list(stepper.traverse(Ray(origin, vec)))
            assert len(leaves) == 4

    def test_root_box_must_be_whole_leaves(self):
        root = OctreeNode(BoundingBox([0, 0, 0], [2.5, 2.5, 2.5]))
        with pytest.raises(ValueError):
            OctreeStepper(root, 1.0)


class TestEntryPoint:
    """Origin inside versus outside the octree."""

    def test_origin_inside_starts_at_box_entry(self, full_octree):
        leaves = list(OctreeStepper(full_octree, 1.0).traverse(Ray([2.5, 2.5, 2.5], [1, 0, 0])))
        assert _leaf_anchors(leaves) == [(0, 2, 2), (1, 2, 2), (2, 2, 2), (3, 2, 2)]

    def test_origin_inside_negative_direction(self, full_octree):
        leaves = list(OctreeStepper(full_octree, 1.0).traverse(Ray([0.5, 1.5, 3.5], [0, 0, -1])))
        assert _leaf_anchors(leaves) == [(0, 1, 3), (0, 1, 2), (0, 1, 1), (0, 1, 0)]

    def test_origin_outside(self, full_octree):
        leaves = list(OctreeStepper(full_octree, 1.0).traverse(Ray([0.5, 1.5, 9], [0, 0, -1])))
        assert _leaf_anchors(leaves) == [(0, 1, 3), (0, 1, 2), (0, 1, 1), (0, 1, 0)]


class TestAgreementWithGrid:
    """Octree leaves must line up with grid cells, cell for cell."""

    @pytest.mark.parametrize("leaf_size,origin", [(1.0, (0, 0, 0)), (0.5, (-1, 2, -3))])
    def test_full_tree_matches_grid(self, octree_builder, ray_sampler, leaf_size, origin):
        root = octree_builder(np.ones((8, 8, 8), dtype=bool), leaf_size=leaf_size,
                              origin=origin, sparse=False)
        octree = OctreeStepper(root, leaf_size)
        grid = GridStepper(GridConfig(root.bounding_box, leaf_size))

        for ray_origin, direction in ray_sampler(root.bounding_box.min, root.bounding_box.max):
            ray = Ray(ray_origin, direction)
            leaves = list(octree.traverse(ray))
            anchors = list(grid.traverse(ray))
            assert len(leaves) == len(anchors)
            for leaf, anchor in zip(leaves, anchors):
                assert np.array_equal(leaf.bounding_box.min, anchor)

    def test_sparse_tree_yields_occupied_cells_in_order(self, octree_builder, ray_sampler, rng):
        occupancy = rng.random((8, 8, 8)) > 0.6
        root = octree_builder(occupancy)
        octree = OctreeStepper(root, 1.0)
        grid = GridStepper(GridConfig(root.bounding_box, 1.0))

        for ray_origin, direction in ray_sampler([0, 0, 0], [8, 8, 8]):
            ray = Ray(ray_origin, direction)
            leaves = list(octree.traverse(ray))
            expected = [cell for cell in grid.cells(ray) if occupancy[cell]]
            assert [tuple(int(v) for v in leaf.bounding_box.min) for leaf in leaves] == expected

    def test_empty_tree(self, octree_builder):
        root = octree_builder(np.zeros((4, 4, 4), dtype=bool))
        assert list(OctreeStepper(root, 1.0).traverse(Ray([-1, 2, 2], [1, 0, 0]))) == []


class TestFirstHit:
    """Tests for first-hit queries on leaf data."""

    def test_first_hit_by_data(self, octree_builder):
        occupancy = np.zeros((4, 4, 4), dtype=np.uint8)
        occupancy[2, 2, 2] = 7
        root = octree_builder(occupancy, sparse=False)
        leaf = OctreeStepper(root, 1.0).first_hit(Ray([-1, 2.5, 2.5], [1, 0, 0]))
        assert np.array_equal(leaf.bounding_box.min, [2, 2, 2])

    def test_first_hit_predicate(self, full_octree):
        leaf = OctreeStepper(full_octree, 1.0).first_hit(
            Ray([-1, 2.5, 2.5], [1, 0, 0]),
            predicate=lambda node: node.bounding_box.min[0] >= 3,
        )
        assert np.array_equal(leaf.bounding_box.min, [3, 2, 2])

    def test_first_hit_none(self, full_octree):
        leaf = OctreeStepper(full_octree, 1.0).first_hit(
            Ray([-1, 2.5, 2.5], [1, 0, 0]), predicate=lambda node: False
        )
        assert leaf is None


class TestTraverseOctree:
    """Tests for the functional interface."""

    def test_stop_at_first_leaf(self, full_octree):
        leaf = traverse_octree(Ray([-1, 2, 2], [1, 0, 0]), full_octree, 1.0, stop_at_first_leaf=True)
        assert np.array_equal(leaf.bounding_box.min, [0, 2, 2])

    def test_stop_at_first_leaf_miss(self, full_octree):
        assert traverse_octree(Ray([-1, 9, 2], [1, 0, 0]), full_octree, 1.0,
                               stop_at_first_leaf=True) is None

    def test_sequence(self, full_octree):
        leaves = traverse_octree(Ray([-1, 2, 2], [1, 0, 0]), full_octree, 1.0, cell_count=(4, 4, 4))
        assert len(list(leaves)) == 4


class TestMalformedOctree:
    """Structural defects are reported distinctly from ordinary exits."""

    def test_leaf_spanning_several_cells(self):
        root = OctreeNode(BoundingBox([0, 0, 0], [2, 2, 2]), leaf=True)
        stepper = OctreeStepper(root, 1.0)
        traversal = stepper.traverse(Ray([-1, 0.5, 0.5], [1, 0, 0]))
        assert next(traversal) is root
        with pytest.raises(MalformedOctreeError):
            next(traversal)

    def test_single_cell_leaf_root(self):
        root = OctreeNode(BoundingBox([0, 0, 0], [1, 1, 1]), leaf=True)
        assert list(OctreeStepper(root, 1.0).traverse(Ray([-1, 0.5, 0.5], [1, 0, 0]))) == [root]

    def test_missing_neighbor_inside_grid(self, full_octree):
        leaf = _find_leaf(full_octree, [1, 2, 2])
        leaf.set_neighbor(GridDirection.EAST, None)
        with pytest.raises(MalformedOctreeError):
            list(OctreeStepper(full_octree, 1.0).traverse(Ray([-1, 2.5, 2.5], [1, 0, 0])))

    def test_neighbor_not_containing_cell(self, full_octree):
        leaf = _find_leaf(full_octree, [1, 2, 2])
        leaf.set_neighbor(GridDirection.EAST, _find_leaf(full_octree, [3, 0, 0]))
        with pytest.raises(MalformedOctreeError):
            list(OctreeStepper(full_octree, 1.0).traverse(Ray([-1, 2.5, 2.5], [1, 0, 0])))

    def test_error_is_not_raised_before_defect(self, full_octree):
        """Leaves before the broken link are still produced lazily."""
        leaf = _find_leaf(full_octree, [1, 2, 2])
        leaf.set_neighbor(GridDirection.EAST, None)
        traversal = OctreeStepper(full_octree, 1.0).traverse(Ray([-1, 2.5, 2.5], [1, 0, 0]))
        assert next(traversal).bounding_box.min.tolist() == [0, 2, 2]
        assert next(traversal) is leaf
        with pytest.raises(MalformedOctreeError):
            next(traversal)
