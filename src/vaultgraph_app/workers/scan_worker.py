"""
Scan worker thread.

Runs a graph build in the background without blocking the UI.
"""

import logging
from pathlib import PurePath
from typing import Optional, Union

from PyQt6.QtCore import QThread, pyqtSignal

from vaultgraph_core.domain import BuildResult, ScanIssue, ScanIssueKind, ScanStatus, IssueCause
from vaultgraph_core.services.graph_builder import GraphBuilder

logger = logging.getLogger(__name__)


class ScanWorker(QThread):
    """
    Background thread for building a graph.

    Signals:
        progress(int, int, str): Emitted during the scan with (dirs_scanned, files_found, current_path)
        finished(object, int): Emitted when the scan ends with (BuildResult, generation)
    """

    progress = pyqtSignal(int, int, str)  # dirs, files, current_path
    finished = pyqtSignal(object, int)  # BuildResult, generation

    def __init__(
        self,
        builder: GraphBuilder,
        root_path: Union[str, PurePath],
        generation: int,
        label: Optional[str] = None,
    ):
        """
        Initialize the worker.

        Args:
            builder: Builder for this scan only
            root_path: Directory to scan
            generation: Scan number, echoed back so stale results can be dropped
            label: Display name for the root node
        """
        super().__init__()
        self.builder = builder
        self.root_path = root_path
        self.generation = generation
        self.label = label

    def run(self):
        """Run the scan."""
        try:
            def on_progress(p):
                self.progress.emit(p.dirs_scanned, p.files_found, p.current_path)

            result = self.builder.build(self.root_path, self.label, progress_callback=on_progress)
        except Exception as e:
            logger.exception("Scan of %s crashed", self.root_path)
            result = BuildResult(
                status=ScanStatus.FAILED,
                issues=[ScanIssue(
                    kind=ScanIssueKind.SOURCE_UNREADABLE,
                    path=str(self.root_path),
                    cause=IssueCause.IO_ERROR,
                    message=str(e),
                )],
            )
        self.finished.emit(result, self.generation)
