"""
Reference marker parsing and resolution.

Markers look like [[name]], [[name|display]] or [[name#heading]]. The name
may carry a path and may or may not carry the markdown extension.
"""

import re
from typing import Dict, List, Optional

from ..domain.models import Node, parent_of

DEFAULT_MARKDOWN_EXTENSION = ".md"

# Match [[target]], [[target|display]], [[target#section]]
MARKER_PATTERN = re.compile(r"\[\[([^\[\]]+?)\]\]")


def is_markdown(name: str, extension: str = DEFAULT_MARKDOWN_EXTENSION) -> bool:
    return name.lower().endswith(extension.lower())


def extract_markers(content: str) -> List[str]:
    """
    Extract reference targets from content.

    Display text and heading anchors are dropped. Order and duplicates are
    preserved: each occurrence becomes its own reference.
    """
    result = []
    for raw in MARKER_PATTERN.findall(content):
        name = raw.split("|", 1)[0].split("#", 1)[0].strip()
        if name:
            result.append(name)
    return result


def _clean(marker: str) -> str:
    return marker.strip().replace("\\", "/").strip("/")


class ReferenceIndex:
    """
    Lookup from marker text to node ids, built once per scan.

    Two tables:
    - exact relative path -> id, for any file ("src/App.tsx")
    - extension-stripped path suffix -> markdown ids in traversal order
      ("notes/layout" and "layout" both point at /notes/layout.md)
    """

    def __init__(self, markdown_extension: str = DEFAULT_MARKDOWN_EXTENSION):
        self.markdown_extension = markdown_extension
        self._by_path: Dict[str, str] = {}
        self._by_suffix: Dict[str, List[str]] = {}

    def __len__(self) -> int:
        return len(self._by_path)

    def _strip_extension(self, text: str) -> str:
        if is_markdown(text, self.markdown_extension):
            return text[:-len(self.markdown_extension)]
        return text

    def add(self, node: Node) -> None:
        """Register a file node as a reference candidate."""
        if node.is_folder:
            return
        rel = node.path.lstrip("/")
        self._by_path.setdefault(rel, node.id)

        if not is_markdown(node.name, self.markdown_extension):
            return
        parts = self._strip_extension(rel).split("/")
        for i in range(len(parts)):
            key = "/".join(parts[i:])
            self._by_suffix.setdefault(key, []).append(node.id)

    def candidates(self, marker: str) -> List[str]:
        """All markdown ids a marker could mean, in traversal order."""
        return list(self._by_suffix.get(self._strip_extension(_clean(marker)), []))

    def resolve(self, marker: str, source_id: Optional[str] = None) -> Optional[str]:
        """
        Resolve a marker to a node id, or None if nothing matches.

        Policy: exact path first; then among suffix matches prefer one in
        the referencing file's own directory; else the first in traversal
        order.
        """
        cleaned = _clean(marker)
        if not cleaned:
            return None
        if cleaned in self._by_path:
            return self._by_path[cleaned]

        candidates = self._by_suffix.get(self._strip_extension(cleaned))
        if not candidates:
            return None
        if len(candidates) == 1 or source_id is None:
            return candidates[0]

        source_dir = parent_of(source_id)
        for candidate in candidates:
            if parent_of(candidate) == source_dir:
                return candidate
        return candidates[0]
