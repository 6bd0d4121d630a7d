"""
Background worker threads for vaultgraph.

These QThread subclasses run long operations without blocking the UI.
"""

from .scan_worker import ScanWorker

__all__ = [
    "ScanWorker",
]
