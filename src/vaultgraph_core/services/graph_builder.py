"""
Graph Builder Service.

Walks a hierarchical file source and produces a Graph snapshot:
folders and files become nodes, containment becomes PARENT_CHILD links,
and [[name]] markers inside markdown files become REFERENCE links.

I/O problems never raise out of build(). Only an unreadable root fails
the build; everything else degrades and is listed in the result's issues.
"""

import dataclasses
import logging
from pathlib import PurePath
from typing import Callable, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field

from ..ports.fs_port import FSPort, DirEntry, ReadBudget
from ..domain.models import (
    ROOT_ID,
    NOMINAL_FOLDER_SIZE,
    BuildResult,
    Graph,
    Link,
    Node,
    ScanIssue,
    depth_from_path,
    join_path,
)
from ..domain.enums import IssueCause, LinkKind, NodeKind, ScanIssueKind, ScanStatus
from .references import (
    DEFAULT_MARKDOWN_EXTENSION,
    ReferenceIndex,
    extract_markers,
    is_markdown,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_MARKDOWN_BYTES = 5 * 1024 * 1024


@dataclass
class BuildProgress:
    """Progress information for a scan."""
    dirs_scanned: int = 0
    files_found: int = 0
    errors: int = 0
    current_path: str = ""
    is_complete: bool = False


@dataclass
class _ScanState:
    """Mutable bookkeeping for one build() call."""
    nodes: Dict[str, Node] = field(default_factory=dict)        # Insertion = traversal order
    links: List[Link] = field(default_factory=list)
    children: Dict[str, List[str]] = field(default_factory=dict)
    markdown: List[Tuple[str, str]] = field(default_factory=list)  # (node id, source path)
    issues: List[ScanIssue] = field(default_factory=list)
    progress: BuildProgress = field(default_factory=BuildProgress)


def aggregate_sizes(
    nodes: Dict[str, Node],
    children: Dict[str, List[str]],
    root_id: str = ROOT_ID,
) -> Dict[str, int]:
    """
    Resolve folder sizes bottom-up in a single memoized pass.

    A folder's size is the sum of its direct children's resolved sizes, or
    NOMINAL_FOLDER_SIZE when that sum is zero. Uses an explicit stack so
    very deep trees cannot hit the recursion limit.
    """
    sizes: Dict[str, int] = {}
    stack: List[Tuple[str, bool]] = [(root_id, False)]

    while stack:
        node_id, expanded = stack.pop()
        if node_id in sizes:
            continue
        node = nodes[node_id]
        if not node.is_folder:
            sizes[node_id] = node.size
            continue
        kids = children.get(node_id, [])
        if not expanded:
            stack.append((node_id, True))
            stack.extend((kid, False) for kid in kids if kid not in sizes)
            continue
        total = sum(sizes[kid] for kid in kids)
        sizes[node_id] = total if total > 0 else NOMINAL_FOLDER_SIZE

    return sizes


class GraphBuilder:
    """
    Service for turning a directory tree into a Graph.

    One builder serves one scan: cancel() is sticky, so a superseded scan
    stays cancelled even if its worker has not started yet.
    """

    def __init__(
        self,
        fs: FSPort,
        markdown_extension: str = DEFAULT_MARKDOWN_EXTENSION,
        ignore_hidden: bool = False,
        max_markdown_bytes: Optional[int] = DEFAULT_MAX_MARKDOWN_BYTES,
    ):
        """
        Initialize the builder.

        Args:
            fs: File source (must be read-only)
            markdown_extension: Files with this extension are scanned for markers
            ignore_hidden: Skip entries whose name starts with a dot
            max_markdown_bytes: Read budget per markdown file (None = unlimited)
        """
        self.fs = fs
        self.markdown_extension = markdown_extension
        self.ignore_hidden = ignore_hidden
        self.max_markdown_bytes = max_markdown_bytes
        self._cancelled = False
        self._root_path: Optional[PurePath] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        """Cancel an in-progress scan."""
        self._cancelled = True

    def build(
        self,
        root_path: Union[str, PurePath],
        label: Optional[str] = None,
        progress_callback: Optional[Callable[[BuildProgress], None]] = None,
    ) -> BuildResult:
        """
        Scan a directory and build its graph.

        Args:
            root_path: Directory to scan
            label: Display name of the root (defaults to the folder name)
            progress_callback: Called periodically with progress updates

        Returns:
            BuildResult; FAILED only if the root itself cannot be read
        """
        root = PurePath(root_path)
        self._root_path = root

        try:
            root_entry = self.fs.stat(root)
            if not root_entry.is_dir:
                raise NotADirectoryError(f"Not a directory: {root}")
            root_listing = list(self.fs.scandir(root))
        except OSError as e:
            return self._failed(root, e, label)

        display_name = label or root_entry.name or str(root)
        state = _ScanState()
        state.progress.current_path = str(root)
        state.nodes[ROOT_ID] = Node(
            id=ROOT_ID,
            name=display_name,
            kind=NodeKind.FOLDER,
            path=ROOT_ID,
            size=0,
            depth=0,
        )

        self._visit(root_listing, ROOT_ID, state, progress_callback)
        if not self._cancelled:
            self._add_references(state)

        if self._cancelled:
            logger.info("Scan of %s cancelled", root)
            return BuildResult(
                status=ScanStatus.CANCELLED, issues=state.issues, root_name=display_name,
            )

        graph = self._assemble(state)
        skipped = any(i.kind == ScanIssueKind.ENTRY_UNREADABLE for i in state.issues)
        status = ScanStatus.PARTIAL if skipped else ScanStatus.COMPLETE

        state.progress.is_complete = True
        if progress_callback:
            progress_callback(state.progress)

        logger.info(
            "Scanned %s: %d nodes, %d links, %d issues (%s)",
            root, len(graph.nodes), len(graph.links), len(state.issues), status.value,
        )
        return BuildResult(
            status=status, graph=graph, issues=state.issues, root_name=display_name,
        )

    def read_content(self, node: Node, root_path: Union[str, PurePath, None] = None) -> str:
        """
        Fetch a file's text on demand.

        Returns "" for folders and for files that cannot be read.
        """
        root = PurePath(root_path) if root_path is not None else self._root_path
        if root is None or node.is_folder:
            return ""
        try:
            return self.fs.read_text(self._source_path(root, node.path), ReadBudget(max_bytes=None))
        except OSError as e:
            logger.warning("Failed to read content for %s: %s", node.path, e)
            return ""

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @staticmethod
    def _source_path(root: PurePath, node_path: str) -> PurePath:
        rel = node_path.lstrip("/")
        return root / rel if rel else root

    def _failed(self, root: PurePath, exc: OSError, label: Optional[str]) -> BuildResult:
        issue = ScanIssue(
            kind=ScanIssueKind.SOURCE_UNREADABLE,
            path=str(root),
            cause=IssueCause.from_exception(exc),
            message=str(exc),
        )
        logger.error("Cannot read source %s: %s", root, exc)
        return BuildResult(
            status=ScanStatus.FAILED, issues=[issue], root_name=label or root.name,
        )

    def _record(self, state: _ScanState, kind: ScanIssueKind, path: str,
                cause: IssueCause, message: str) -> None:
        state.issues.append(ScanIssue(kind=kind, path=path, cause=cause, message=message))
        state.progress.errors += 1
        logger.warning("%s: %s (%s)", kind.value, path, message)

    def _add_node(self, state: _ScanState, parent_id: str, entry: DirEntry, kind: NodeKind) -> Node:
        node_path = join_path(parent_id, entry.name)
        node = Node(
            id=node_path,
            name=entry.name,
            kind=kind,
            path=node_path,
            size=entry.size_bytes if kind == NodeKind.FILE else 0,
            depth=depth_from_path(node_path),
        )
        state.nodes[node.id] = node
        state.links.append(Link(source=parent_id, target=node.id, kind=LinkKind.PARENT_CHILD))
        state.children.setdefault(parent_id, []).append(node.id)
        return node

    def _visit(
        self,
        entries: List[DirEntry],
        parent_id: str,
        state: _ScanState,
        progress_callback: Optional[Callable[[BuildProgress], None]],
    ):
        """Emit nodes for one directory listing, then recurse into subdirectories."""
        if self._cancelled:
            return

        progress = state.progress
        progress.dirs_scanned += 1

        # Report progress periodically
        if progress_callback and progress.dirs_scanned % 10 == 0:
            progress_callback(progress)

        subdirs: List[Tuple[Node, DirEntry]] = []

        for entry in entries:
            if self._cancelled:
                return
            if self.ignore_hidden and entry.name.startswith("."):
                continue

            if not entry.readable:
                self._record(
                    state, ScanIssueKind.ENTRY_UNREADABLE,
                    join_path(parent_id, entry.name),
                    entry.cause or IssueCause.from_error_text(entry.error),
                    entry.error or "",
                )
                continue

            if entry.is_dir:
                folder = self._add_node(state, parent_id, entry, NodeKind.FOLDER)
                subdirs.append((folder, entry))
            elif entry.is_file:
                node = self._add_node(state, parent_id, entry, NodeKind.FILE)
                progress.files_found += 1
                if is_markdown(entry.name, self.markdown_extension):
                    state.markdown.append((node.id, entry.path))
            else:
                logger.debug("Skipping special entry %s", entry.path)

        # Recurse into subdirectories
        for folder, entry in subdirs:
            if self._cancelled:
                return
            progress.current_path = entry.path
            try:
                listing = list(self.fs.scandir(PurePath(entry.path)))
            except OSError as e:
                # Keep the folder node, skip its contents
                self._record(
                    state, ScanIssueKind.ENTRY_UNREADABLE, folder.path,
                    IssueCause.from_exception(e), str(e),
                )
                continue
            self._visit(listing, folder.id, state, progress_callback)

    def _add_references(self, state: _ScanState):
        """Resolve [[name]] markers in every markdown file."""
        index = ReferenceIndex(self.markdown_extension)
        for node in state.nodes.values():
            index.add(node)

        budget = ReadBudget(max_bytes=self.max_markdown_bytes)
        for node_id, source_path in state.markdown:
            if self._cancelled:
                return
            try:
                text = self.fs.read_text(PurePath(source_path), budget)
            except OSError as e:
                self._record(
                    state, ScanIssueKind.CONTENT_UNAVAILABLE, node_id,
                    IssueCause.from_exception(e), str(e),
                )
                continue

            for marker in extract_markers(text):
                target = index.resolve(marker, node_id)
                if target is None:
                    logger.debug("Unresolved reference [[%s]] in %s", marker, node_id)
                    continue
                if target == node_id:
                    continue  # self references are not kept
                state.links.append(Link(source=node_id, target=target, kind=LinkKind.REFERENCE))

    def _assemble(self, state: _ScanState) -> Graph:
        sizes = aggregate_sizes(state.nodes, state.children)
        nodes = [
            dataclasses.replace(node, size=sizes[node.id]) if node.is_folder else node
            for node in state.nodes.values()
        ]
        return Graph(nodes=tuple(nodes), links=tuple(state.links))
