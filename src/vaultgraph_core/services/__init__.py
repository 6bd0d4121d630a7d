"""
Services for vaultgraph.

Graph building, derived queries, visual weighting and force layout.
"""

from .graph_builder import GraphBuilder, BuildProgress, aggregate_sizes
from .references import ReferenceIndex, extract_markers
from .graph_queries import (
    compute_degrees,
    backlinks,
    outgoing_references,
    graph_stats,
    search_nodes,
    file_extensions,
    check_invariants,
)
from .weighting import NodeWeights, node_weights, relative_depth, radius_function
from .force_layout import ForceLayoutEngine, NodeState

__all__ = [
    "GraphBuilder",
    "BuildProgress",
    "aggregate_sizes",
    "ReferenceIndex",
    "extract_markers",
    "compute_degrees",
    "backlinks",
    "outgoing_references",
    "graph_stats",
    "search_nodes",
    "file_extensions",
    "check_invariants",
    "NodeWeights",
    "node_weights",
    "relative_depth",
    "radius_function",
    "ForceLayoutEngine",
    "NodeState",
]
