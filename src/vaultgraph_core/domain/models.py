"""
Domain models (DTOs) for vaultgraph.

These are pure data classes with no filesystem or UI dependencies.
A Graph is an immutable snapshot: rebuilding produces a new one.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .enums import (
    IssueCause,
    LinkKind,
    NodeKind,
    NodeScaleMode,
    ScanIssueKind,
    ScanStatus,
)

ROOT_ID = "/"                  # Reserved path of the root folder
NOMINAL_FOLDER_SIZE = 100      # Size given to folders whose contents sum to 0


def depth_from_path(path: str) -> int:
    """
    Nesting level derived purely from a slash-delimited path.

    The root is 0; otherwise the count of non-empty segments minus one,
    so top-level entries share depth 0 with the root.
    """
    if path == ROOT_ID:
        return 0
    segments = [part for part in path.split("/") if part]
    return max(0, len(segments) - 1)


def join_path(parent_path: str, name: str) -> str:
    """Child path under a parent path."""
    if parent_path == ROOT_ID:
        return ROOT_ID + name
    return f"{parent_path}/{name}"


def parent_of(path: str) -> Optional[str]:
    """Parent path, or None for the root."""
    if path == ROOT_ID:
        return None
    head = path.rsplit("/", 1)[0]
    return head or ROOT_ID


@dataclass(frozen=True)
class Node:
    """A file or folder."""
    id: str                      # Same as path; unique within a graph
    name: str                    # Display label, extension included
    kind: NodeKind
    path: str                    # Slash-delimited path from the root
    size: int                    # Bytes, or aggregated size for folders
    depth: int

    @property
    def is_folder(self) -> bool:
        return self.kind == NodeKind.FOLDER

    @property
    def is_root(self) -> bool:
        return self.path == ROOT_ID

    @property
    def stem(self) -> str:
        """Name without its last extension."""
        if "." in self.name.lstrip("."):
            return self.name.rsplit(".", 1)[0]
        return self.name

    @property
    def extension(self) -> str:
        """Lowercase extension without the dot, or 'other'."""
        parts = self.name.split(".")
        if len(parts) > 1 and parts[-1]:
            return parts[-1].lower()
        return "other"


@dataclass(frozen=True)
class Link:
    """A directed relationship between two node ids."""
    source: str
    target: str
    kind: LinkKind

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.source, self.target, self.kind.value)


@dataclass
class Graph:
    """Nodes with unique ids plus an ordered sequence of links."""

    nodes: Tuple[Node, ...] = ()
    links: Tuple[Link, ...] = ()

    # Lookup table built after construction
    _by_id: Dict[str, Node] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self.nodes = tuple(self.nodes)
        self.links = tuple(self.links)
        self._by_id = {node.id: node for node in self.nodes}

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def get(self, node_id: str) -> Optional[Node]:
        """Get node by id."""
        return self._by_id.get(node_id)

    @property
    def root(self) -> Optional[Node]:
        return self._by_id.get(ROOT_ID)

    def links_of_kind(self, kind: LinkKind) -> List[Link]:
        return [link for link in self.links if link.kind == kind]

    def children(self, node_id: str) -> List[Node]:
        """Direct children through PARENT_CHILD links, in link order."""
        return [
            self._by_id[link.target]
            for link in self.links
            if link.kind == LinkKind.PARENT_CHILD and link.source == node_id
        ]


@dataclass
class ScanIssue:
    """A non-fatal (or the single fatal) problem met during a scan."""
    kind: ScanIssueKind
    path: str
    cause: IssueCause
    message: str = ""


@dataclass
class BuildResult:
    """Outcome of GraphBuilder.build()."""
    status: ScanStatus
    graph: Optional[Graph] = None
    issues: List[ScanIssue] = field(default_factory=list)
    root_name: str = ""

    @property
    def ok(self) -> bool:
        """True when a graph is available (complete or partial)."""
        return self.graph is not None and self.status in (
            ScanStatus.COMPLETE, ScanStatus.PARTIAL,
        )

    @property
    def skipped_entries(self) -> List[ScanIssue]:
        return [i for i in self.issues if i.kind == ScanIssueKind.ENTRY_UNREADABLE]

    def summary(self) -> str:
        """One-line human readable summary."""
        if self.status == ScanStatus.FAILED:
            fatal = self.issues[0] if self.issues else None
            reason = fatal.message if fatal else "unknown error"
            return f"Failed to load graph data: {reason}"
        if self.status == ScanStatus.CANCELLED:
            return "Scan cancelled"
        graph = self.graph
        text = f"Loaded {len(graph.nodes):,} nodes and {len(graph.links):,} links"
        if self.status == ScanStatus.PARTIAL:
            text += f" ({len(self.skipped_entries)} entries skipped)"
        return text


@dataclass
class SimulationParams:
    """Tunable force parameters."""
    charge_strength: float = -200.0
    link_distance: float = 60.0
    center_force: float = 0.1
    parent_child_link_strength: float = 0.8
    reference_link_strength: float = 0.1
    collide_strength: float = 0.5

    def __post_init__(self):
        if self.link_distance < 0:
            raise ValueError(f"link_distance must be >= 0, got {self.link_distance}")
        if self.collide_strength < 0:
            raise ValueError(f"collide_strength must be >= 0, got {self.collide_strength}")


@dataclass
class VisibilityOptions:
    """What is shown and how nodes are scaled."""
    show_nodes: bool = True
    show_labels: bool = True
    show_parent_child_links: bool = True
    show_reference_links: bool = True
    show_backlinks: bool = True
    node_scale_mode: NodeScaleMode = NodeScaleMode.SIZE
    label_size: int = 10

    def is_link_visible(self, link: Link) -> bool:
        if link.kind == LinkKind.REFERENCE:
            return self.show_reference_links
        return self.show_parent_child_links


@dataclass
class GraphStats:
    """Counts shown in the statistics panel."""
    nodes: int = 0
    links: int = 0
    files: int = 0
    folders: int = 0
    references: int = 0
    total_size: int = 0      # Sum of file bytes

    @property
    def total_size_kb(self) -> float:
        return self.total_size / 1024
