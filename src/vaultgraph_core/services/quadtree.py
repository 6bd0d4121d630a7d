"""
Barnes-Hut quadtree for many-body repulsion.

Each cell stores the summed strength of its points and their centre,
weighted by |strength|. A cell that is small relative to its distance from
the node is treated as one body; leaves are always handled point by point.
"""

import math
from typing import Callable, List, Optional, Sequence, Tuple

MAX_DEPTH = 32      # Stop subdividing; remaining points share one leaf


class _Quad:
    __slots__ = ("size", "children", "points", "strength", "x", "y")

    def __init__(self, size: float):
        self.size = size
        self.children: Optional[List["_Quad"]] = None
        self.points: List[int] = []
        self.strength = 0.0
        self.x = 0.0
        self.y = 0.0


class QuadTree:
    """Quadtree over fixed point positions and per-point strengths."""

    def __init__(self, xs: Sequence[float], ys: Sequence[float], strengths: Sequence[float]):
        self.xs = xs
        self.ys = ys
        self.strengths = strengths
        self.root: Optional[_Quad] = None

        if not xs:
            return
        x0, x1 = min(xs), max(xs)
        y0, y1 = min(ys), max(ys)
        size = max(x1 - x0, y1 - y0, 1e-9)
        self.root = self._build(list(range(len(xs))), x0, y0, size, 0)

    def _build(self, indices: List[int], x0: float, y0: float, size: float, depth: int) -> _Quad:
        quad = _Quad(size)
        xs, ys = self.xs, self.ys
        first = indices[0]
        coincident = all(xs[i] == xs[first] and ys[i] == ys[first] for i in indices)

        if len(indices) == 1 or coincident or depth >= MAX_DEPTH:
            quad.points = indices
        else:
            half = size / 2
            buckets: List[List[int]] = [[], [], [], []]
            for i in indices:
                right = xs[i] >= x0 + half
                below = ys[i] >= y0 + half
                buckets[below * 2 + right].append(i)
            quad.children = [
                self._build(bucket, x0 + half * (k & 1), y0 + half * (k >> 1), half, depth + 1)
                for k, bucket in enumerate(buckets)
                if bucket
            ]

        self._accumulate(quad)
        return quad

    def _accumulate(self, quad: _Quad) -> None:
        if quad.children is not None:
            items = [(c.strength, c.x, c.y) for c in quad.children]
        else:
            items = [(self.strengths[i], self.xs[i], self.ys[i]) for i in quad.points]

        weight = sum(abs(s) for s, _, _ in items)
        quad.strength = sum(s for s, _, _ in items)
        if weight > 0:
            quad.x = sum(abs(s) * x for s, x, _ in items) / weight
            quad.y = sum(abs(s) * y for s, _, y in items) / weight
        else:
            quad.x = sum(x for _, x, _ in items) / len(items)
            quad.y = sum(y for _, _, y in items) / len(items)

    def force_on(
        self,
        index: int,
        alpha: float,
        jiggle: Callable[[], float],
        theta: float = 0.9,
        min_distance2: float = 1.0,
    ) -> Tuple[float, float]:
        """
        Velocity change on point `index` from every other point.

        Positive strengths attract and negative strengths repel. Distances
        below sqrt(min_distance2) are softened so close pairs do not explode.
        """
        if self.root is None:
            return 0.0, 0.0

        theta2 = theta * theta
        x, y = self.xs[index], self.ys[index]
        dvx = dvy = 0.0
        stack = [self.root]

        while stack:
            quad = stack.pop()
            if not quad.strength:
                continue

            dx = quad.x - x
            dy = quad.y - y
            l = dx * dx + dy * dy

            # Far enough: treat the whole cell as one body
            if quad.size * quad.size / theta2 < l:
                if dx == 0:
                    dx = jiggle()
                    l += dx * dx
                if dy == 0:
                    dy = jiggle()
                    l += dy * dy
                if l < min_distance2:
                    l = math.sqrt(min_distance2 * l)
                dvx += dx * quad.strength * alpha / l
                dvy += dy * quad.strength * alpha / l
                continue

            if quad.children is not None:
                stack.extend(quad.children)
                continue

            for j in quad.points:
                if j == index:
                    continue
                dx = self.xs[j] - x
                dy = self.ys[j] - y
                if dx == 0:
                    dx = jiggle()
                if dy == 0:
                    dy = jiggle()
                l = dx * dx + dy * dy
                if l < min_distance2:
                    l = math.sqrt(min_distance2 * l)
                w = self.strengths[j] * alpha / l
                dvx += dx * w
                dvy += dy * w

        return dvx, dvy
