"""
Layout ViewModel driving the force simulation.

Owns one ForceLayoutEngine per loaded graph and a QTimer that ticks it on
the UI thread. The timer runs only while the engine is RUNNING: it stops
when the layout settles and starts again on any reheat (parameter,
visibility or focal change, restart, drag).
"""

import dataclasses
import logging
from typing import Dict, Optional, Tuple

from PyQt6.QtCore import QTimer, pyqtSignal

from .base import BaseViewModel
from vaultgraph_core.domain import (
    Graph,
    LayoutPhase,
    SimulationParams,
    VisibilityOptions,
)
from vaultgraph_core.services.force_layout import ForceLayoutEngine
from vaultgraph_core.services.weighting import NodeWeights, node_weights, radius_function

logger = logging.getLogger(__name__)


class LayoutVM(BaseViewModel):
    """
    ViewModel for the force layout.

    Signals:
        frame_ready: Emitted after every tick (positions changed)
        phase_changed(str): Emitted when the engine phase changes
        params_changed: Emitted when simulation parameters change

    State:
        engine: Current ForceLayoutEngine (None before a graph is loaded)
        params: SimulationParams in effect
        focal_id: Focal node for depth weighting, or None
    """

    TICK_INTERVAL_MS = 16  # ~60 Hz

    # Signals
    frame_ready = pyqtSignal()
    phase_changed = pyqtSignal(str)
    params_changed = pyqtSignal()

    def __init__(self, seed: Optional[int] = None, parent=None):
        """
        Initialize the ViewModel.

        Args:
            seed: Seed for the engine's jitter (None = nondeterministic)
            parent: Optional parent QObject
        """
        super().__init__(parent)

        self._seed = seed
        self._engine: Optional[ForceLayoutEngine] = None
        self._graph: Optional[Graph] = None
        self._degrees: Dict[str, int] = {}
        self._params = SimulationParams()
        self._visibility = VisibilityOptions()
        self._focal_id: Optional[str] = None
        self._center: Tuple[float, float] = (0.0, 0.0)
        self._last_phase = LayoutPhase.IDLE

        self._timer = QTimer(self)
        self._timer.setInterval(self.TICK_INTERVAL_MS)
        self._timer.timeout.connect(self.step)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def engine(self) -> Optional[ForceLayoutEngine]:
        return self._engine

    @property
    def params(self) -> SimulationParams:
        return self._params

    @property
    def visibility(self) -> VisibilityOptions:
        return self._visibility

    @property
    def focal_id(self) -> Optional[str]:
        return self._focal_id

    @property
    def phase(self) -> LayoutPhase:
        return self._engine.phase if self._engine else LayoutPhase.IDLE

    @property
    def timer_active(self) -> bool:
        return self._timer.isActive()

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return self._engine.positions() if self._engine else {}

    def weights(self, node_id: str) -> NodeWeights:
        """Rendering scalars for one node relative to the focal node."""
        if self._graph is None or node_id not in self._graph:
            raise KeyError(f"Unknown node id: {node_id!r}")
        focal = self._graph.get(self._focal_id) if self._focal_id else None
        weights = node_weights(self._graph.get(node_id), focal, self._visibility.label_size)
        # Hidden nodes and labels stay in the simulation, only their opacity drops
        if not self._visibility.show_nodes:
            weights = dataclasses.replace(weights, opacity=0.0)
        if not self._visibility.show_labels:
            weights = dataclasses.replace(weights, label_opacity=0.0)
        return weights

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def load_graph(
        self,
        graph: Graph,
        visibility: Optional[VisibilityOptions] = None,
        degrees: Optional[Dict[str, int]] = None,
        focal_id: Optional[str] = None,
    ) -> None:
        """Replace the simulation with a fresh one for a new graph."""
        # Stop the old engine before the new one exists
        self._timer.stop()
        if self._engine is not None:
            self._engine.stop()

        self._graph = graph
        self._degrees = dict(degrees or {})
        if visibility is not None:
            self._visibility = visibility
        self._focal_id = focal_id if focal_id in graph else None

        self._engine = ForceLayoutEngine(
            graph,
            params=self._params,
            visibility=self._visibility,
            radius_fn=self._radius_fn(),
            center=self._center,
            seed=self._seed,
        )
        logger.info("Layout started for %d nodes", len(graph))
        self._sync()

    def step(self) -> bool:
        """Advance the simulation one tick (the timer calls this)."""
        if self._engine is None:
            self._timer.stop()
            return False
        running = self._engine.tick()
        self.frame_ready.emit()
        self._sync()
        return running

    def set_params(self, params: SimulationParams) -> None:
        self._params = params
        if self._engine is not None:
            self._engine.set_params(params)
        self.params_changed.emit()
        self._sync()

    def update_params(self, **changes) -> None:
        """Change individual parameters, e.g. update_params(charge_strength=-300)."""
        self.set_params(dataclasses.replace(self._params, **changes))

    def reset_params(self) -> None:
        """Restore the default simulation parameters."""
        self.set_params(SimulationParams())

    def set_visibility(self, visibility: VisibilityOptions) -> None:
        scale_changed = visibility.node_scale_mode != self._visibility.node_scale_mode
        self._visibility = visibility
        if self._engine is not None:
            if scale_changed:
                self._engine.set_radius_function(self._radius_fn())
            self._engine.set_visibility(visibility)
        self._sync()

    def set_focal(self, node_id: Optional[str]) -> None:
        """Change the focal node; radii are recomputed and the layout reheats."""
        node_id = node_id or None
        if node_id == self._focal_id:
            return
        self._focal_id = node_id
        if self._engine is not None:
            self._engine.set_radius_function(self._radius_fn())
        self._sync()

    def set_center(self, x: float, y: float) -> None:
        self._center = (x, y)
        if self._engine is not None:
            self._engine.set_center(self._center)

    def restart(self) -> None:
        if self._engine is not None:
            self._engine.restart()
        self._sync()

    def stop(self) -> None:
        if self._engine is not None:
            self._engine.stop()
        self._sync()

    def drag_start(self, node_id: str) -> None:
        self._require_engine().drag_start(node_id)
        self._sync()

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        self._require_engine().drag_to(node_id, x, y)
        self._sync()

    def drag_end(self, node_id: str) -> None:
        self._require_engine().drag_end(node_id)
        self._sync()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _require_engine(self) -> ForceLayoutEngine:
        if self._engine is None:
            raise KeyError("No graph loaded")
        return self._engine

    def _radius_fn(self):
        return radius_function(
            self._graph,
            self._visibility.node_scale_mode,
            focal_id=self._focal_id,
            degrees=self._degrees,
        )

    def _sync(self) -> None:
        """Start or stop the timer to match the engine phase."""
        phase = self.phase
        if phase == LayoutPhase.RUNNING:
            if not self._timer.isActive():
                self._timer.start()
        elif self._timer.isActive():
            self._timer.stop()

        if phase != self._last_phase:
            self._last_phase = phase
            self.phase_changed.emit(phase.value)
