"""
Derived views over a Graph snapshot.

None of these are stored on the Graph: degree, backlinks, statistics and
search are recomputed by whoever needs them. Link visibility never affects
them; hidden links still count.
"""

from collections import Counter
from typing import Callable, Dict, List, Optional

from ..domain.models import (
    ROOT_ID,
    Graph,
    GraphStats,
    Node,
    depth_from_path,
)
from ..domain.enums import LinkKind, NodeKind


def compute_degrees(graph: Graph) -> Dict[str, int]:
    """Count link endpoints per node id. Every node gets an entry."""
    degrees = Counter({node.id: 0 for node in graph.nodes})
    for link in graph.links:
        degrees[link.source] += 1
        degrees[link.target] += 1
    return dict(degrees)


def _distinct(graph: Graph, ids) -> List[Node]:
    seen = set(ids)
    return [node for node in graph.nodes if node.id in seen]


def backlinks(graph: Graph, node_id: str) -> List[Node]:
    """Distinct nodes with a REFERENCE link into node_id, in graph order."""
    return _distinct(graph, (
        link.source for link in graph.links
        if link.kind == LinkKind.REFERENCE
        and link.target == node_id
        and link.source != node_id
    ))


def outgoing_references(graph: Graph, node_id: str) -> List[Node]:
    """Distinct nodes that node_id references, in graph order."""
    return _distinct(graph, (
        link.target for link in graph.links
        if link.kind == LinkKind.REFERENCE
        and link.source == node_id
        and link.target != node_id
    ))


def graph_stats(graph: Optional[Graph]) -> GraphStats:
    if graph is None:
        return GraphStats()
    files = [n for n in graph.nodes if n.kind == NodeKind.FILE]
    return GraphStats(
        nodes=len(graph.nodes),
        links=len(graph.links),
        files=len(files),
        folders=len(graph.nodes) - len(files),
        references=sum(1 for link in graph.links if link.kind == LinkKind.REFERENCE),
        total_size=sum(n.size for n in files),
    )


def search_nodes(
    graph: Graph,
    term: str,
    content_lookup: Optional[Callable[[Node], str]] = None,
) -> List[Node]:
    """
    Case-insensitive substring search.

    Matches node names; when content_lookup is given, file contents are
    searched too. An empty term matches nothing.
    """
    needle = term.strip().lower()
    if not needle:
        return []

    results = []
    for node in graph.nodes:
        if needle in node.name.lower():
            results.append(node)
        elif content_lookup is not None and not node.is_folder:
            if needle in content_lookup(node).lower():
                results.append(node)
    return results


def file_extensions(graph: Graph) -> List[str]:
    """Sorted distinct file extensions ('other' for none)."""
    return sorted({n.extension for n in graph.nodes if n.kind == NodeKind.FILE})


def check_invariants(graph: Graph, nominal_folder_size: Optional[int] = None) -> List[str]:
    """
    Structural problems with a graph, as human readable strings.

    An empty list means: referential integrity holds, there is exactly one
    root at depth 0, PARENT_CHILD links form a single tree, every depth
    matches its path and, if nominal_folder_size is given, every folder
    size is the sum of its children (or the nominal size when that is 0).
    """
    problems = []
    ids = {node.id for node in graph.nodes}
    if len(ids) != len(graph.nodes):
        problems.append("duplicate node ids")

    for link in graph.links:
        if link.source not in ids or link.target not in ids:
            problems.append(f"dangling link {link.source} -> {link.target}")

    roots = [n for n in graph.nodes if n.path == ROOT_ID]
    if len(roots) != 1:
        problems.append(f"expected one root, found {len(roots)}")
    elif roots[0].depth != 0:
        problems.append("root depth is not 0")

    parent: Dict[str, str] = {}
    for link in graph.links_of_kind(LinkKind.PARENT_CHILD):
        if link.target in parent:
            problems.append(f"{link.target} has more than one parent")
        parent[link.target] = link.source

    for node in graph.nodes:
        if node.path != ROOT_ID and node.id not in parent:
            problems.append(f"orphan node {node.id}")
        if depth_from_path(node.path) != node.depth:
            problems.append(f"depth of {node.id} does not match its path")

    # Walking up from any node must reach the root without revisiting
    for node_id in parent:
        seen = {node_id}
        current = parent.get(node_id)
        while current is not None and current != ROOT_ID:
            if current in seen:
                problems.append(f"cycle through {node_id}")
                break
            seen.add(current)
            current = parent.get(current)

    if nominal_folder_size is not None:
        sums: Dict[str, int] = {}
        for child_id, parent_id in parent.items():
            child = graph.get(child_id)
            if child is not None:
                sums[parent_id] = sums.get(parent_id, 0) + child.size
        for node in graph.nodes:
            if not node.is_folder:
                continue
            expected = sums.get(node.id, 0) or nominal_folder_size
            if node.size != expected:
                problems.append(f"size of {node.id} is {node.size}, expected {expected}")

    return problems
