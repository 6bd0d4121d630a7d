"""
Depth-relative visual weighting.

Nodes farther (in nesting levels) from the focal node are drawn smaller,
fainter and with muted color. With no focal node the distance is the
absolute depth from the root.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from ..domain.models import Graph, Node
from ..domain.enums import NodeScaleMode

# Floors: nothing ever fades out completely
MIN_RADIUS_SCALE = 0.6
MIN_OPACITY = 0.4
MIN_LABEL_SIZE = 8
MIN_LABEL_OPACITY = 0.6
MIN_LIGHTNESS = 0.2
MIN_SATURATION = 0.3

# Base radius ranges in pixels
SIZE_RADIUS_RANGE = (4.0, 30.0)
DEGREE_RADIUS_RANGE = (4.0, 25.0)


def relative_depth(node: Node, focal: Optional[Node] = None) -> int:
    """Nesting distance between node and focal (absolute depth if no focal)."""
    if focal is None:
        return max(0, node.depth)
    return abs(node.depth - focal.depth)


def radius_scale(rel_depth: int) -> float:
    return max(MIN_RADIUS_SCALE, 1 - 0.15 * rel_depth)


def opacity(rel_depth: int) -> float:
    return max(MIN_OPACITY, 1 - 0.15 * rel_depth)


def label_size(rel_depth: int, base_label_size: float = 10) -> float:
    return max(MIN_LABEL_SIZE, base_label_size - rel_depth)


def label_opacity(rel_depth: int) -> float:
    return max(MIN_LABEL_OPACITY, 1 - 0.1 * rel_depth)


def mute_hsl(hue: float, saturation: float, lightness: float, rel_depth: int) -> Tuple[float, float, float]:
    """
    Darken and desaturate an HSL color (components in 0..1) by 0.1 per level.

    Lightness is floored at 0.2 and saturation at 0.3, so a muted color never
    fades to gray. Relative depth 0 returns the color unchanged.
    """
    if rel_depth <= 0:
        return hue, saturation, lightness
    offset = 0.1 * rel_depth
    muted_s = max(MIN_SATURATION, saturation - offset)
    muted_l = max(MIN_LIGHTNESS, lightness - offset)
    return hue, muted_s, muted_l


@dataclass(frozen=True)
class NodeWeights:
    """Per-node rendering scalars."""
    relative_depth: int
    radius_scale: float
    opacity: float
    label_size: float
    label_opacity: float
    is_focal: bool = False


def node_weights(node: Node, focal: Optional[Node] = None, base_label_size: float = 10) -> NodeWeights:
    """All weighting scalars for one node. The focal node is always full weight."""
    if focal is not None and node.id == focal.id:
        return NodeWeights(0, 1.0, 1.0, max(MIN_LABEL_SIZE, base_label_size), 1.0, is_focal=True)
    rd = relative_depth(node, focal)
    return NodeWeights(
        relative_depth=rd,
        radius_scale=radius_scale(rd),
        opacity=opacity(rd),
        label_size=label_size(rd, base_label_size),
        label_opacity=label_opacity(rd),
    )


class SqrtScale:
    """
    Square-root scale from a value domain onto a pixel range.

    Inputs outside the domain are clamped. A degenerate domain (min == max)
    maps everything to the middle of the range.
    """

    def __init__(self, domain: Tuple[float, float], output_range: Tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(output_range[0]), float(output_range[1]))
        self._lo = math.sqrt(max(0.0, self.domain[0]))
        self._hi = math.sqrt(max(0.0, self.domain[1]))

    def __call__(self, value: float) -> float:
        r0, r1 = self.range
        span = self._hi - self._lo
        if span <= 0:
            return (r0 + r1) / 2
        t = (math.sqrt(max(0.0, value)) - self._lo) / span
        t = min(1.0, max(0.0, t))
        return r0 + t * (r1 - r0)


def size_scale(graph: Graph) -> SqrtScale:
    """Scale over the positive node sizes of a graph."""
    sizes = [n.size for n in graph.nodes if n.size > 0]
    domain = (min(sizes), max(sizes)) if sizes else (0, 1)
    return SqrtScale(domain, SIZE_RADIUS_RANGE)


def degree_scale(degrees: Iterable[int]) -> SqrtScale:
    values = list(degrees)
    domain = (min(values), max(values)) if values else (0, 1)
    return SqrtScale(domain, DEGREE_RADIUS_RANGE)


def radius_function(
    graph: Graph,
    mode: NodeScaleMode = NodeScaleMode.SIZE,
    focal_id: Optional[str] = None,
    degrees: Optional[Dict[str, int]] = None,
) -> Callable[[Node], float]:
    """
    Build radius(node) = base radius x depth multiplier.

    The base radius comes from the size scale, or from the degree scale when
    mode is CONNECTIONS (degrees must then be given, or all count as 0).
    """
    focal = graph.get(focal_id) if focal_id else None

    if mode == NodeScaleMode.CONNECTIONS:
        degrees = degrees or {}
        scale = degree_scale(degrees.get(n.id, 0) for n in graph.nodes)

        def base(node: Node) -> float:
            return scale(degrees.get(node.id, 0))
    else:
        scale = size_scale(graph)

        def base(node: Node) -> float:
            return scale(node.size or 1)

    def radius(node: Node) -> float:
        return base(node) * node_weights(node, focal).radius_scale

    return radius
