"""
Domain models for vaultgraph.

Contains DTOs, enums, and data structures used throughout the application.
"""

from .models import (
    ROOT_ID,
    NOMINAL_FOLDER_SIZE,
    Node,
    Link,
    Graph,
    ScanIssue,
    BuildResult,
    SimulationParams,
    VisibilityOptions,
    GraphStats,
    depth_from_path,
    join_path,
    parent_of,
)
from .enums import (
    NodeKind,
    LinkKind,
    ScanStatus,
    ScanIssueKind,
    IssueCause,
    LayoutPhase,
    NodeScaleMode,
)

__all__ = [
    # Constants
    "ROOT_ID",
    "NOMINAL_FOLDER_SIZE",
    # Models
    "Node",
    "Link",
    "Graph",
    "ScanIssue",
    "BuildResult",
    "SimulationParams",
    "VisibilityOptions",
    "GraphStats",
    # Path helpers
    "depth_from_path",
    "join_path",
    "parent_of",
    # Enums
    "NodeKind",
    "LinkKind",
    "ScanStatus",
    "ScanIssueKind",
    "IssueCause",
    "LayoutPhase",
    "NodeScaleMode",
]
