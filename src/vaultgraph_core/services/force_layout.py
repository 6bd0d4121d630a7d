"""
Force Layout Engine.

Iterative relaxation over a Graph: link springs, many-body repulsion,
centering and collision, with a global energy term (alpha) that decays
every tick until the layout settles.

The engine owns all transient layout state (positions, velocities, pins)
in a side table keyed by node id; the Graph itself is never touched.
tick() is a plain step function: whoever drives it (a QTimer, a test, a
CLI loop) decides when to call it.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..domain.models import Graph, Link, Node, SimulationParams, VisibilityOptions
from ..domain.enums import LayoutPhase, LinkKind
from .graph_queries import compute_degrees
from .quadtree import QuadTree
from .weighting import radius_function

logger = logging.getLogger(__name__)

# Simulation constants
ALPHA_MIN = 0.001                             # Settled below this
ALPHA_DECAY = 1 - ALPHA_MIN ** (1 / 300)      # ~300 ticks from 1 to ALPHA_MIN
VELOCITY_DECAY = 0.4                          # Fraction of velocity lost per tick
DRAG_ALPHA_TARGET = 0.3
COLLIDE_PADDING = 5.0
THETA = 0.9                                   # Barnes-Hut accuracy
MIN_DISTANCE2 = 1.0

# Phyllotaxis placement for the initial layout
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


@dataclass
class NodeState:
    """Transient layout state of one node."""
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None     # Pinned position while dragged
    fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None


@dataclass
class _LinkSpring:
    source: int
    target: int
    distance: float
    strength: float
    bias: float


class ForceLayoutEngine:
    """
    Computes 2D positions for a Graph.

    Phases: IDLE (not started or stopped), RUNNING (alpha above ALPHA_MIN),
    SETTLED (alpha decayed below ALPHA_MIN). An empty graph stays IDLE and
    every tick is a no-op.
    """

    def __init__(
        self,
        graph: Graph,
        params: Optional[SimulationParams] = None,
        visibility: Optional[VisibilityOptions] = None,
        radius_fn: Optional[Callable[[Node], float]] = None,
        center: Tuple[float, float] = (0.0, 0.0),
        seed: Optional[int] = None,
    ):
        self.graph = graph
        self._params = params or SimulationParams()
        self._visibility = visibility or VisibilityOptions()
        self._center = center
        self._random = random.Random(seed)

        self._nodes: List[Node] = list(graph.nodes)
        self._index: Dict[str, int] = {node.id: i for i, node in enumerate(self._nodes)}
        self._states: List[NodeState] = []
        for i in range(len(self._nodes)):
            r = INITIAL_RADIUS * math.sqrt(0.5 + i)
            angle = i * INITIAL_ANGLE
            self._states.append(NodeState(
                x=center[0] + r * math.cos(angle),
                y=center[1] + r * math.sin(angle),
            ))

        if radius_fn is None:
            radius_fn = radius_function(
                graph, self._visibility.node_scale_mode, degrees=compute_degrees(graph),
            )
        self._radius_fn = radius_fn

        self._alpha = 1.0
        self._alpha_target = 0.0
        self._ticks = 0
        self._phase = LayoutPhase.RUNNING if self._nodes else LayoutPhase.IDLE

        self._visible_links: List[Link] = []
        self._springs: List[_LinkSpring] = []
        self._charges: List[float] = []
        self._radii: List[float] = []
        self._rebuild_links()
        self._rebuild_charges()
        self._rebuild_radii()

        logger.debug(
            "Layout engine created: %d nodes, %d visible links",
            len(self._nodes), len(self._visible_links),
        )

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> LayoutPhase:
        return self._phase

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def alpha_target(self) -> float:
        return self._alpha_target

    @property
    def ticks(self) -> int:
        """Ticks run since construction."""
        return self._ticks

    @property
    def is_running(self) -> bool:
        return self._phase == LayoutPhase.RUNNING

    @property
    def params(self) -> SimulationParams:
        return self._params

    @property
    def visibility(self) -> VisibilityOptions:
        return self._visibility

    @property
    def visible_links(self) -> List[Link]:
        """Links currently exerting force (and drawn)."""
        return list(self._visible_links)

    def position(self, node_id: str) -> Tuple[float, float]:
        state = self._state(node_id)
        return state.x, state.y

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {node.id: (s.x, s.y) for node, s in zip(self._nodes, self._states)}

    def node_state(self, node_id: str) -> NodeState:
        """Copy of a node's layout state."""
        s = self._state(node_id)
        return NodeState(s.x, s.y, s.vx, s.vy, s.fx, s.fy)

    def radius(self, node_id: str) -> float:
        """Weighted radius, without collision padding."""
        return self._radii[self._index_of(node_id)] - COLLIDE_PADDING

    def link_parameters(self, link: Link) -> Tuple[float, float]:
        """
        Rest distance and strength of a link's spring.

        Parent-child springs get shorter and stiffer with the child's depth;
        reference springs use the plain parameters.
        """
        params = self._params
        if link.kind == LinkKind.PARENT_CHILD:
            depth = self._nodes[self._index_of(link.target)].depth
            distance = max(20.0, params.link_distance / 2 - 5 * depth)
            strength = min(1.5, params.parent_child_link_strength + 0.1 * depth)
            return distance, strength
        return params.link_distance, params.reference_link_strength

    def charge_for(self, node: Node) -> float:
        """Repulsion strength of a node; shallow nodes push harder."""
        return self._params.charge_strength * max(0.3, 1 - 0.2 * node.depth)

    # -------------------------------------------------------------------------
    # Control
    # -------------------------------------------------------------------------

    def restart(self):
        """Reset energy to the maximum and run again."""
        if not self._nodes:
            return
        self._alpha = 1.0
        self._phase = LayoutPhase.RUNNING

    def stop(self):
        """Stop ticking; positions are kept."""
        self._phase = LayoutPhase.IDLE

    def set_params(self, params: SimulationParams):
        self._params = params
        self._rebuild_links()
        self._rebuild_charges()
        self.restart()

    def set_visibility(self, visibility: VisibilityOptions):
        self._visibility = visibility
        self._rebuild_links()
        self.restart()

    def set_radius_function(self, radius_fn: Callable[[Node], float]):
        """Swap radii (focal node or scale mode changed)."""
        self._radius_fn = radius_fn
        self._rebuild_radii()
        self.restart()

    def set_center(self, center: Tuple[float, float]):
        self._center = center

    def drag_start(self, node_id: str):
        """Pin a node where it is and keep the simulation warm."""
        state = self._state(node_id)
        state.fx, state.fy = state.x, state.y
        self._alpha_target = DRAG_ALPHA_TARGET
        self._phase = LayoutPhase.RUNNING

    def drag_to(self, node_id: str, x: float, y: float):
        state = self._state(node_id)
        state.fx, state.fy = x, y
        self._phase = LayoutPhase.RUNNING

    def drag_end(self, node_id: str):
        """Release the pin and let the layout settle again."""
        state = self._state(node_id)
        state.fx = state.fy = None
        self._alpha_target = 0.0
        self._alpha = max(self._alpha, DRAG_ALPHA_TARGET)
        self._phase = LayoutPhase.RUNNING

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Advance one step.

        Returns:
            True while the engine is still running after this step.
        """
        if self._phase != LayoutPhase.RUNNING or not self._nodes:
            return False

        self._alpha += (self._alpha_target - self._alpha) * ALPHA_DECAY

        self._apply_links()
        self._apply_charge()
        self._apply_center()
        self._apply_collide()

        keep = 1 - VELOCITY_DECAY
        for s in self._states:
            if s.fx is None:
                s.vx *= keep
                s.x += s.vx
            else:
                s.x = s.fx
                s.vx = 0.0
            if s.fy is None:
                s.vy *= keep
                s.y += s.vy
            else:
                s.y = s.fy
                s.vy = 0.0

        self._ticks += 1
        if self._alpha < ALPHA_MIN:
            self._phase = LayoutPhase.SETTLED
            logger.debug("Layout settled after %d ticks", self._ticks)
            return False
        return True

    def run(self, max_ticks: int = 1000) -> int:
        """Tick until settled or max_ticks; returns the number of ticks run."""
        start = self._ticks
        while self._ticks - start < max_ticks and self.tick():
            pass
        return self._ticks - start

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _index_of(self, node_id: str) -> int:
        try:
            return self._index[node_id]
        except KeyError:
            raise KeyError(f"Unknown node id: {node_id!r}") from None

    def _state(self, node_id: str) -> NodeState:
        return self._states[self._index_of(node_id)]

    def _jiggle(self) -> float:
        return (self._random.random() - 0.5) * 1e-6

    def _rebuild_links(self):
        self._visible_links = [
            link for link in self.graph.links
            if self._visibility.is_link_visible(link)
            and link.source in self._index and link.target in self._index
        ]

        count = [0] * len(self._nodes)
        for link in self._visible_links:
            count[self._index[link.source]] += 1
            count[self._index[link.target]] += 1

        springs = []
        for link in self._visible_links:
            s = self._index[link.source]
            t = self._index[link.target]
            distance, strength = self.link_parameters(link)
            springs.append(_LinkSpring(s, t, distance, strength, count[s] / (count[s] + count[t])))
        self._springs = springs

    def _rebuild_charges(self):
        self._charges = [self.charge_for(node) for node in self._nodes]

    def _rebuild_radii(self):
        self._radii = [self._radius_fn(node) + COLLIDE_PADDING for node in self._nodes]

    def _apply_links(self):
        states = self._states
        alpha = self._alpha
        for spring in self._springs:
            source = states[spring.source]
            target = states[spring.target]
            x = target.x + target.vx - source.x - source.vx or self._jiggle()
            y = target.y + target.vy - source.y - source.vy or self._jiggle()
            l = math.sqrt(x * x + y * y)
            l = (l - spring.distance) / l * alpha * spring.strength
            x *= l
            y *= l
            b = spring.bias
            target.vx -= x * b
            target.vy -= y * b
            source.vx += x * (1 - b)
            source.vy += y * (1 - b)

    def _apply_charge(self):
        states = self._states
        tree = QuadTree([s.x for s in states], [s.y for s in states], self._charges)
        alpha = self._alpha
        for i, s in enumerate(states):
            dvx, dvy = tree.force_on(i, alpha, self._jiggle, THETA, MIN_DISTANCE2)
            s.vx += dvx
            s.vy += dvy

    def _apply_center(self):
        strength = self._params.center_force
        if not strength:
            return
        n = len(self._states)
        cx, cy = self._center
        sx = (sum(s.x for s in self._states) / n - cx) * strength
        sy = (sum(s.y for s in self._states) / n - cy) * strength
        for s in self._states:
            s.x -= sx
            s.y -= sy

    def _apply_collide(self):
        strength = self._params.collide_strength
        if not strength:
            return
        states = self._states
        radii = self._radii
        cell = 2 * max(radii)

        # Bucket nodes by predicted position
        grid: Dict[Tuple[int, int], List[int]] = {}
        keys = []
        for i, s in enumerate(states):
            key = (math.floor((s.x + s.vx) / cell), math.floor((s.y + s.vy) / cell))
            keys.append(key)
            grid.setdefault(key, []).append(i)

        for i, node in enumerate(states):
            ri = radii[i]
            ri2 = ri * ri
            xi = node.x + node.vx
            yi = node.y + node.vy
            gx, gy = keys[i]
            for ox in (-1, 0, 1):
                for oy in (-1, 0, 1):
                    for j in grid.get((gx + ox, gy + oy), ()):
                        if j <= i:
                            continue
                        other = states[j]
                        rj = radii[j]
                        r = ri + rj
                        x = xi - other.x - other.vx
                        y = yi - other.y - other.vy
                        l = x * x + y * y
                        if l >= r * r:
                            continue
                        if x == 0:
                            x = self._jiggle()
                            l += x * x
                        if y == 0:
                            y = self._jiggle()
                            l += y * y
                        l = math.sqrt(l)
                        l = (r - l) / l * strength
                        x *= l
                        y *= l
                        share = rj * rj / (ri2 + rj * rj)
                        node.vx += x * share
                        node.vy += y * share
                        other.vx -= x * (1 - share)
                        other.vy -= y * (1 - share)
