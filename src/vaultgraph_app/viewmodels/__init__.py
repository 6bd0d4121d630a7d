"""
ViewModels for vaultgraph.

MVVM architecture separating state from presentation:
- ViewModels handle state and commands
- Views (Qt widgets or other renderers) handle drawing and input
- Core services handle scanning, weighting and layout
"""

from .base import BaseViewModel
from .graph_vm import GraphVM
from .layout_vm import LayoutVM
from .coordinator import AppCoordinator

__all__ = [
    "BaseViewModel",
    "GraphVM",
    "LayoutVM",
    "AppCoordinator",
]
