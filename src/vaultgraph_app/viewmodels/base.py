"""
Base ViewModel class for vaultgraph.

ViewModels hold graph and layout state for whatever draws it. They expose
read-only properties, command methods and Qt signals, and never reference
widgets, so the same objects drive a canvas, a test or the headless CLI.
"""

from typing import Optional
from PyQt6.QtCore import QObject


class BaseViewModel(QObject):
    """
    Base class for all ViewModels.

    State changes are announced through class-level pyqtSignals. All state
    is owned by the UI thread; background workers hand results back through
    queued signals rather than touching it.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
