"""
App Coordinator for cross-ViewModel communication.

Handles:
- New graph -> fresh layout session
- Selection -> focal node of the layout
- Visibility changes -> layout forces and radii
- Scan outcome -> status messages
"""

from PyQt6.QtCore import QObject, pyqtSignal

from .graph_vm import GraphVM
from .layout_vm import LayoutVM


class AppCoordinator(QObject):
    """
    Coordinates communication between ViewModels.

    This allows ViewModels to remain decoupled while still responding
    to changes in other ViewModels.
    """

    # Signal emitted when status bar should update
    status_message = pyqtSignal(str, int)  # message, timeout_ms

    def __init__(self, graph_vm: GraphVM, layout_vm: LayoutVM):
        """
        Initialize the coordinator.

        Args:
            graph_vm: Graph ViewModel
            layout_vm: Layout ViewModel
        """
        super().__init__()

        self._graph_vm = graph_vm
        self._layout_vm = layout_vm

        # Wire up cross-VM connections
        self._connect_signals()

    def _connect_signals(self) -> None:
        """Connect cross-ViewModel signals."""
        self._graph_vm.scan_started.connect(self._on_scan_started)
        self._graph_vm.scan_finished.connect(self._on_scan_finished)
        self._graph_vm.graph_changed.connect(self._on_graph_changed)
        self._graph_vm.selection_changed.connect(self._on_selection_changed)
        self._graph_vm.visibility_changed.connect(self._on_visibility_changed)

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _on_scan_started(self, root_path: str) -> None:
        self.status_message.emit(f"Scanning {root_path}...", 0)

    def _on_scan_finished(self, success: bool, message: str) -> None:
        self.status_message.emit(message, 5000 if success else 0)

    def _on_graph_changed(self) -> None:
        """Start a new layout session for the new snapshot."""
        graph = self._graph_vm.graph
        if graph is None:
            return
        self._layout_vm.load_graph(
            graph,
            visibility=self._graph_vm.visibility,
            degrees=self._graph_vm.degrees,
            focal_id=self._graph_vm.selected_id,
        )

    def _on_selection_changed(self, node_id: str) -> None:
        self._layout_vm.set_focal(node_id or None)

    def _on_visibility_changed(self) -> None:
        self._layout_vm.set_visibility(self._graph_vm.visibility)
