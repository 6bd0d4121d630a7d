"""
Graph ViewModel for the vault graph.

Manages:
- Scanning (background worker, superseding of stale scans)
- The current Graph snapshot and its derived views (degree, stats)
- Selection (the focal node for depth weighting)
- Visibility options
- Search results and on-demand file content

The layout and rendering side receives state from this ViewModel and never
touches the file source directly.
"""

import dataclasses
import logging
from pathlib import PurePath
from typing import Dict, List, Optional, Union

from PyQt6.QtCore import pyqtSignal

from .base import BaseViewModel
from vaultgraph_core.adapters import ReadOnlyFS, demo_vault
from vaultgraph_core.domain import (
    BuildResult,
    Graph,
    GraphStats,
    Node,
    ScanIssue,
    ScanStatus,
    VisibilityOptions,
)
from vaultgraph_core.ports.fs_port import FSPort
from vaultgraph_core.services.graph_builder import GraphBuilder
from vaultgraph_core.services.graph_queries import (
    backlinks,
    compute_degrees,
    file_extensions,
    graph_stats,
    outgoing_references,
    search_nodes,
)

logger = logging.getLogger(__name__)


class GraphVM(BaseViewModel):
    """
    ViewModel for the graph.

    Signals:
        scan_started(str): Emitted when a scan starts (root path)
        scan_progress(int, int, str): Emitted during a scan (dirs, files, current path)
        scan_finished(bool, str): Emitted when a scan completes (success, message)
        graph_changed: Emitted when a new graph snapshot is installed
        selection_changed(str): Emitted when the selected node changes (id or "")
        visibility_changed: Emitted when visibility options change
        search_changed: Emitted when search results change

    State:
        graph: Current Graph snapshot (None before the first scan)
        root_name: Display name of the scanned root
        selected_id: Selected node id, or None
        visibility: VisibilityOptions
        search_results: Nodes matching the current search term
        last_error: Message of the last failed scan
        issues: Issues reported by the last installed scan
    """

    # Signals
    scan_started = pyqtSignal(str)
    scan_progress = pyqtSignal(int, int, str)  # dirs, files, current_path
    scan_finished = pyqtSignal(bool, str)  # success, message
    graph_changed = pyqtSignal()
    selection_changed = pyqtSignal(str)  # node id or ""
    visibility_changed = pyqtSignal()
    search_changed = pyqtSignal()

    def __init__(
        self,
        markdown_extension: str = ".md",
        ignore_hidden: bool = False,
    ):
        """
        Initialize the ViewModel.

        Args:
            markdown_extension: Extension of files scanned for [[name]] markers
            ignore_hidden: Skip dot-entries while scanning
        """
        super().__init__()

        self._markdown_extension = markdown_extension
        self._ignore_hidden = ignore_hidden

        # Scan state
        self._generation = 0
        self._builder: Optional[GraphBuilder] = None
        self._workers: Dict[int, object] = {}   # generation -> ScanWorker, kept until it finishes
        self._pending_fs: Optional[FSPort] = None
        self._pending_root: Optional[PurePath] = None
        self._fs: Optional[FSPort] = None
        self._root_path: Optional[PurePath] = None

        # Graph state
        self._graph: Optional[Graph] = None
        self._root_name: str = ""
        self._degrees: Dict[str, int] = {}
        self._issues: List[ScanIssue] = []
        self._last_error: str = ""
        self._status_message: str = "Choose a directory or load the demo"

        # Interaction state
        self._selected_id: Optional[str] = None
        self._visibility = VisibilityOptions()
        self._search_term: str = ""
        self._search_results: List[Node] = []
        self._content_cache: Dict[str, str] = {}

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def graph(self) -> Optional[Graph]:
        return self._graph

    @property
    def root_name(self) -> str:
        return self._root_name

    @property
    def generation(self) -> int:
        """Number of the most recently started scan."""
        return self._generation

    @property
    def is_scanning(self) -> bool:
        return self._builder is not None

    @property
    def issues(self) -> List[ScanIssue]:
        return list(self._issues)

    @property
    def last_error(self) -> str:
        return self._last_error

    @property
    def status_message(self) -> str:
        return self._status_message

    @property
    def degrees(self) -> Dict[str, int]:
        """Degree per node id over all links, hidden ones included."""
        return self._degrees

    @property
    def stats(self) -> GraphStats:
        return graph_stats(self._graph)

    @property
    def extensions(self) -> List[str]:
        return file_extensions(self._graph) if self._graph else []

    @property
    def visibility(self) -> VisibilityOptions:
        return self._visibility

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_node(self) -> Optional[Node]:
        if self._graph is None or self._selected_id is None:
            return None
        return self._graph.get(self._selected_id)

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def search_results(self) -> List[Node]:
        return list(self._search_results)

    # -------------------------------------------------------------------------
    # Commands: scanning
    # -------------------------------------------------------------------------

    def load_directory(self, path: Union[str, PurePath], background: bool = True) -> int:
        """
        Scan a directory on disk.

        Returns:
            Generation number of the new scan
        """
        return self.start_scan(ReadOnlyFS(), PurePath(path), background=background)

    def load_demo(self, background: bool = False) -> int:
        """Load the bundled sample project."""
        fs, root, label = demo_vault()
        return self.start_scan(fs, root, label=label, background=background)

    def start_scan(
        self,
        fs: FSPort,
        root_path: PurePath,
        label: Optional[str] = None,
        background: bool = True,
    ) -> int:
        """
        Start a scan, superseding any scan still in flight.

        With background=False the scan runs on the calling thread and its
        result is installed before this returns.
        """
        self.cancel_scan()

        self._generation += 1
        generation = self._generation
        builder = GraphBuilder(
            fs,
            markdown_extension=self._markdown_extension,
            ignore_hidden=self._ignore_hidden,
        )
        self._builder = builder
        self._pending_fs = fs
        self._pending_root = root_path

        self._status_message = f"Scanning {root_path}..."
        self.scan_started.emit(str(root_path))
        logger.info("Scan %d started: %s", generation, root_path)

        if not background:
            self._on_scan_finished(builder.build(root_path, label), generation)
            return generation

        from ..workers import ScanWorker

        worker = ScanWorker(builder, root_path, generation, label)
        worker.progress.connect(self._on_scan_progress)
        worker.finished.connect(self._on_scan_finished)
        self._workers[generation] = worker
        worker.start()
        return generation

    def cancel_scan(self) -> None:
        """Cancel the scan in flight, if any. Its result will be dropped."""
        if self._builder is not None:
            self._builder.cancel()
            self._builder = None

    # -------------------------------------------------------------------------
    # Commands: interaction
    # -------------------------------------------------------------------------

    def select_node(self, node_id: Optional[str]) -> None:
        """
        Select a node (it becomes the focal node), or clear with None.

        Raises:
            KeyError: If node_id is not in the current graph
        """
        if node_id is not None and (self._graph is None or node_id not in self._graph):
            raise KeyError(f"Unknown node id: {node_id!r}")
        if node_id != self._selected_id:
            self._selected_id = node_id
            self.selection_changed.emit(node_id or "")

    def set_visibility(self, **changes) -> None:
        """Update visibility options, e.g. set_visibility(show_reference_links=False)."""
        updated = dataclasses.replace(self._visibility, **changes)
        if updated != self._visibility:
            self._visibility = updated
            self.visibility_changed.emit()

    def search(self, term: str, include_content: bool = False) -> List[Node]:
        """Search node names (and optionally file contents)."""
        self._search_term = term
        if self._graph is None:
            self._search_results = []
        else:
            lookup = self._cached_content if include_content else None
            self._search_results = search_nodes(self._graph, term, lookup)
        self.search_changed.emit()
        return self.search_results

    def clear_search(self) -> None:
        self.search("")

    def backlinks(self, node_id: Optional[str] = None) -> List[Node]:
        """Nodes referencing node_id (default: the selected node)."""
        target = node_id or self._selected_id
        if self._graph is None or target is None:
            return []
        return backlinks(self._graph, target)

    def outgoing(self, node_id: Optional[str] = None) -> List[Node]:
        """Nodes referenced by node_id (default: the selected node)."""
        source = node_id or self._selected_id
        if self._graph is None or source is None:
            return []
        return outgoing_references(self._graph, source)

    def content(self, node_id: str) -> str:
        """Text content of a file node; "" for folders or unreadable files."""
        if self._graph is None:
            return ""
        node = self._graph.get(node_id)
        if node is None:
            raise KeyError(f"Unknown node id: {node_id!r}")
        return self._cached_content(node)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _cached_content(self, node: Node) -> str:
        if node.id not in self._content_cache:
            if self._fs is None or self._root_path is None:
                return ""
            reader = GraphBuilder(self._fs, markdown_extension=self._markdown_extension)
            self._content_cache[node.id] = reader.read_content(node, self._root_path)
        return self._content_cache[node.id]

    def _on_scan_progress(self, dirs: int, files: int, current: str):
        self._status_message = f"Scanning: {current}"
        self.scan_progress.emit(dirs, files, current)

    def _on_scan_finished(self, result: BuildResult, generation: int):
        """Install a scan result unless a newer scan has started since."""
        worker = self._workers.pop(generation, None)
        if worker is not None:
            worker.wait()   # run() has emitted its result; let the thread exit
        if generation != self._generation:
            logger.debug("Dropping result of superseded scan %d", generation)
            return

        self._builder = None
        message = result.summary()
        self._status_message = message

        if not result.ok:
            if result.status == ScanStatus.FAILED:
                self._last_error = message
            self.scan_finished.emit(False, message)
            return

        self._fs = self._pending_fs
        self._root_path = self._pending_root
        self._graph = result.graph
        self._root_name = result.root_name
        self._issues = list(result.issues)
        self._degrees = compute_degrees(result.graph)
        self._content_cache = {}
        self._selected_id = None
        self._search_results = []
        self._last_error = ""

        self.graph_changed.emit()
        self.selection_changed.emit("")
        if self._search_term:
            self.search(self._search_term)
        self.scan_finished.emit(True, message)
