"""
Tests for the force layout engine.
"""

import math
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from vaultgraph_core.adapters import demo_vault
from vaultgraph_core.domain import (
    Graph,
    LayoutPhase,
    Link,
    LinkKind,
    Node,
    NodeKind,
    SimulationParams,
    VisibilityOptions,
)
from vaultgraph_core.services.force_layout import (
    ALPHA_DECAY,
    ALPHA_MIN,
    DRAG_ALPHA_TARGET,
    ForceLayoutEngine,
)
from vaultgraph_core.services.graph_builder import GraphBuilder
from vaultgraph_core.services.graph_queries import backlinks, compute_degrees


@pytest.fixture(scope="module")
def demo_graph():
    fs, root, label = demo_vault()
    return GraphBuilder(fs).build(root, label).graph


def two_nodes() -> Graph:
    return Graph(nodes=[
        Node("/", "root", NodeKind.FOLDER, "/", 100, 0),
        Node("/a.md", "a.md", NodeKind.FILE, "/a.md", 10, 0),
    ])


class TestPhases:

    def test_empty_graph_is_idle(self):
        engine = ForceLayoutEngine(Graph())
        assert engine.phase == LayoutPhase.IDLE
        assert engine.tick() is False
        assert engine.ticks == 0
        assert engine.positions() == {}

    def test_starts_running(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        assert engine.phase == LayoutPhase.RUNNING
        assert engine.alpha == 1.0

    def test_alpha_decays_each_tick(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        assert engine.tick() is True
        assert engine.alpha == pytest.approx(1 - ALPHA_DECAY)

    def test_settles_in_about_300_ticks(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        ticks = engine.run()

        assert 295 <= ticks <= 305
        assert engine.phase == LayoutPhase.SETTLED
        assert engine.alpha < ALPHA_MIN

    def test_settled_tick_is_noop(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        engine.run()
        before = engine.positions()
        ticks = engine.ticks

        assert engine.tick() is False
        assert engine.ticks == ticks
        assert engine.positions() == before

    def test_run_respects_max_ticks(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        assert engine.run(max_ticks=10) == 10
        assert engine.is_running

    def test_stop_and_restart(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        engine.run(max_ticks=5)
        engine.stop()
        assert engine.phase == LayoutPhase.IDLE
        assert engine.tick() is False

        engine.restart()
        assert engine.phase == LayoutPhase.RUNNING
        assert engine.alpha == 1.0

    def test_restart_on_empty_graph_stays_idle(self):
        engine = ForceLayoutEngine(Graph())
        engine.restart()
        assert engine.phase == LayoutPhase.IDLE


class TestReheat:

    @pytest.fixture
    def settled(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        engine.run()
        return engine

    def test_set_params(self, settled):
        settled.set_params(SimulationParams(charge_strength=-300))
        assert settled.phase == LayoutPhase.RUNNING
        assert settled.alpha == 1.0
        assert settled.params.charge_strength == -300

    def test_set_visibility(self, settled):
        assert len(settled.visible_links) == 27
        settled.set_visibility(VisibilityOptions(show_reference_links=False))
        assert settled.phase == LayoutPhase.RUNNING
        assert len(settled.visible_links) == 18

    def test_set_radius_function(self, settled):
        settled.set_radius_function(lambda node: 12.0)
        assert settled.phase == LayoutPhase.RUNNING
        assert settled.radius("/README.md") == pytest.approx(12.0)

    def test_set_center_does_not_reheat(self, settled):
        settled.set_center((50.0, 50.0))
        assert settled.phase == LayoutPhase.SETTLED


class TestDrag:

    def test_pinned_node_follows_pointer(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        engine.drag_start("/notes/todo.md")
        engine.drag_to("/notes/todo.md", 500.0, -200.0)
        engine.tick()

        assert engine.position("/notes/todo.md") == (500.0, -200.0)
        state = engine.node_state("/notes/todo.md")
        assert state.pinned
        assert (state.vx, state.vy) == (0.0, 0.0)

    def test_pinned_node_still_repels(self):
        def distance_after_tick(charge):
            engine = ForceLayoutEngine(
                two_nodes(),
                params=SimulationParams(charge_strength=charge),
                radius_fn=lambda node: 1.0,
            )
            engine.drag_start("/")
            before = engine.position("/a.md")
            engine.tick()
            (px, py), (x, y) = engine.position("/"), engine.position("/a.md")
            return before, (x, y), math.hypot(x - px, y - py)

        before, after, charged = distance_after_tick(-200.0)
        _, _, uncharged = distance_after_tick(0.0)

        assert after != before
        assert charged > uncharged

    def test_drag_keeps_simulation_warm(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        engine.drag_start("/README.md")
        assert engine.alpha_target == DRAG_ALPHA_TARGET

        assert engine.run(max_ticks=2000) == 2000
        assert engine.is_running
        assert engine.alpha == pytest.approx(DRAG_ALPHA_TARGET, abs=1e-3)
        assert engine.node_state("/README.md").pinned

    def test_drag_end_releases_and_settles(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        engine.drag_start("/README.md")
        engine.run(max_ticks=50)
        engine.drag_end("/README.md")

        assert not engine.node_state("/README.md").pinned
        assert engine.alpha_target == 0.0
        assert engine.alpha >= DRAG_ALPHA_TARGET
        engine.run()
        assert engine.phase == LayoutPhase.SETTLED

    def test_drag_end_rewarms_settled_layout(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        engine.run()
        engine.drag_start("/d3.md")
        engine.drag_end("/d3.md")

        assert engine.phase == LayoutPhase.RUNNING
        assert engine.alpha == pytest.approx(DRAG_ALPHA_TARGET)

    def test_unknown_node(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)
        with pytest.raises(KeyError):
            engine.drag_start("/nope.md")
        with pytest.raises(KeyError):
            engine.position("/nope.md")


class TestForces:

    def test_link_parameters(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, seed=1)

        shallow = Link("/", "/README.md", LinkKind.PARENT_CHILD)
        deep = Link("/src/components", "/src/components/Graph.tsx", LinkKind.PARENT_CHILD)
        reference = Link("/README.md", "/d3.md", LinkKind.REFERENCE)

        assert engine.link_parameters(shallow) == pytest.approx((30.0, 0.8))
        assert engine.link_parameters(deep) == pytest.approx((20.0, 1.0))
        assert engine.link_parameters(reference) == pytest.approx((60.0, 0.1))

    def test_charge_by_depth(self):
        engine = ForceLayoutEngine(Graph())

        def at_depth(depth):
            return Node("/x", "x", NodeKind.FILE, "/x", 1, depth)

        assert engine.charge_for(at_depth(0)) == pytest.approx(-200)
        assert engine.charge_for(at_depth(2)) == pytest.approx(-120)
        assert engine.charge_for(at_depth(5)) == pytest.approx(-60)

    def test_collision_separates_overlapping_nodes(self):
        engine = ForceLayoutEngine(
            two_nodes(),
            params=SimulationParams(charge_strength=0.0),
            radius_fn=lambda node: 10.0,
        )
        (x0, y0), (x1, y1) = engine.positions().values()
        start = math.hypot(x1 - x0, y1 - y0)
        assert start < 30.0

        engine.run()
        (x0, y0), (x1, y1) = engine.positions().values()
        assert math.hypot(x1 - x0, y1 - y0) >= 29.0

    def test_layout_centered(self, demo_graph):
        engine = ForceLayoutEngine(demo_graph, center=(100.0, 50.0), seed=1)
        engine.run()

        xs, ys = zip(*engine.positions().values())
        assert sum(xs) / len(xs) == pytest.approx(100.0, abs=2.0)
        assert sum(ys) / len(ys) == pytest.approx(50.0, abs=2.0)

    def test_same_seed_same_layout(self, demo_graph):
        first = ForceLayoutEngine(demo_graph, seed=3)
        second = ForceLayoutEngine(demo_graph, seed=3)
        first.run(max_ticks=60)
        second.run(max_ticks=60)
        assert first.positions() == second.positions()

    def test_hiding_references_changes_layout_not_graph(self, demo_graph):
        degrees_before = compute_degrees(demo_graph)
        backlinks_before = backlinks(demo_graph, "/notes/layout.md")

        shown = ForceLayoutEngine(demo_graph, seed=5)
        hidden = ForceLayoutEngine(
            demo_graph, visibility=VisibilityOptions(show_reference_links=False), seed=5,
        )
        assert shown.positions() == hidden.positions()

        shown.tick()
        hidden.tick()
        assert shown.position("/README.md") != hidden.position("/README.md")

        assert compute_degrees(demo_graph) == degrees_before
        assert backlinks(demo_graph, "/notes/layout.md") == backlinks_before
