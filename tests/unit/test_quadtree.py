"""
Tests for the Barnes-Hut quadtree.
"""

import math
import random
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from vaultgraph_core.services.quadtree import QuadTree


def no_jiggle():
    return 0.0


def brute_force(xs, ys, strengths, index, alpha=1.0, min_distance2=1.0):
    dvx = dvy = 0.0
    for j in range(len(xs)):
        if j == index:
            continue
        dx = xs[j] - xs[index]
        dy = ys[j] - ys[index]
        l = dx * dx + dy * dy
        if l < min_distance2:
            l = math.sqrt(min_distance2 * l)
        dvx += dx * strengths[j] * alpha / l
        dvy += dy * strengths[j] * alpha / l
    return dvx, dvy


class TestQuadTree:

    def test_empty(self):
        tree = QuadTree([], [], [])
        assert tree.root is None
        assert tree.force_on(0, 1.0, no_jiggle) == (0.0, 0.0)

    def test_two_points_repel(self):
        tree = QuadTree([0.0, 10.0], [0.0, 0.0], [-30.0, -30.0])

        dvx, dvy = tree.force_on(0, 1.0, no_jiggle)
        assert dvx == pytest.approx(-3.0)
        assert dvy == pytest.approx(0.0)

        dvx, _ = tree.force_on(1, 1.0, no_jiggle)
        assert dvx == pytest.approx(3.0)

    def test_alpha_scales_force(self):
        tree = QuadTree([0.0, 10.0], [0.0, 0.0], [-30.0, -30.0])
        dvx, _ = tree.force_on(0, 0.5, no_jiggle)
        assert dvx == pytest.approx(-1.5)

    def test_tiny_theta_is_exact(self):
        rng = random.Random(7)
        xs = [rng.uniform(0, 100) for _ in range(40)]
        ys = [rng.uniform(0, 100) for _ in range(40)]
        strengths = [-30.0] * 40
        tree = QuadTree(xs, ys, strengths)

        for i in (0, 13, 39):
            expected = brute_force(xs, ys, strengths, i)
            actual = tree.force_on(i, 1.0, no_jiggle, theta=1e-9)
            assert actual[0] == pytest.approx(expected[0])
            assert actual[1] == pytest.approx(expected[1])

    def test_far_cluster_approximated(self):
        xs = [0.0, 999.0, 1001.0, 999.0, 1001.0, 0.0]
        ys = [0.0, -1.0, -1.0, 1.0, 1.0, 1000.0]
        strengths = [-30.0] * 6
        tree = QuadTree(xs, ys, strengths)

        expected = brute_force(xs, ys, strengths, 0)
        actual = tree.force_on(0, 1.0, no_jiggle)
        assert actual[0] == pytest.approx(expected[0], rel=1e-2)
        assert actual[1] == pytest.approx(expected[1], rel=1e-2)

    def test_zero_strength_exerts_nothing(self):
        tree = QuadTree([0.0, 5.0, 9.0], [0.0, 3.0, 1.0], [0.0, 0.0, 0.0])
        assert tree.force_on(0, 1.0, no_jiggle) == (0.0, 0.0)

    def test_coincident_points_share_leaf(self):
        tree = QuadTree([1.0, 1.0, 1.0], [2.0, 2.0, 2.0], [-1.0, -1.0, -1.0])
        assert tree.root.children is None
        assert tree.root.points == [0, 1, 2]
        assert tree.root.strength == -3.0

    def test_close_pairs_softened(self):
        tree = QuadTree([0.0, 0.5], [0.0, 0.0], [-30.0, -30.0])
        dvx, _ = tree.force_on(0, 1.0, no_jiggle)
        # l = 0.25 is raised to sqrt(0.25) = 0.5
        assert dvx == pytest.approx(0.5 * -30.0 / 0.5)
