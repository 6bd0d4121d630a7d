"""
Tests for [[name]] marker extraction and resolution.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from vaultgraph_core.domain import Node, NodeKind, depth_from_path
from vaultgraph_core.services.references import (
    ReferenceIndex,
    extract_markers,
    is_markdown,
)


def file_node(path: str, size: int = 1) -> Node:
    return Node(
        id=path,
        name=path.rsplit("/", 1)[-1],
        kind=NodeKind.FILE,
        path=path,
        size=size,
        depth=depth_from_path(path),
    )


class TestExtractMarkers:
    """Marker parsing from document text."""

    def test_plain_markers_in_order(self):
        assert extract_markers("See [[alpha]] then [[beta]].") == ["alpha", "beta"]

    def test_duplicates_kept(self):
        assert extract_markers("[[a]] and again [[a]]") == ["a", "a"]

    def test_alias_and_heading_dropped(self):
        text = "[[layout|the layout]] [[notes/layout#Forces]] [[x#h|alias]]"
        assert extract_markers(text) == ["layout", "notes/layout", "x"]

    def test_empty_and_unclosed_ignored(self):
        assert extract_markers("[[]] [[ ]] [[open and [single]") == []

    def test_no_markers(self):
        assert extract_markers("nothing to see") == []


class TestIsMarkdown:

    def test_case_insensitive(self):
        assert is_markdown("README.md")
        assert is_markdown("Notes.MD")
        assert not is_markdown("app.tsx")

    def test_custom_extension(self):
        assert is_markdown("page.markdown", ".markdown")
        assert not is_markdown("page.md", ".markdown")


class TestReferenceIndex:
    """Indexed lookup of markers."""

    @pytest.fixture
    def index(self):
        index = ReferenceIndex()
        for path in [
            "/README.md",
            "/a/note.md",
            "/b/note.md",
            "/b/ref.md",
            "/src/App.tsx",
            "/data.csv",
        ]:
            index.add(file_node(path))
        return index

    def test_bare_name(self, index):
        assert index.resolve("README") == "/README.md"

    def test_name_with_extension(self, index):
        assert index.resolve("README.md") == "/README.md"

    def test_path_suffix(self, index):
        assert index.resolve("b/note") == "/b/note.md"
        assert index.resolve("a/note.md") == "/a/note.md"

    def test_exact_path_to_non_markdown(self, index):
        assert index.resolve("src/App.tsx") == "/src/App.tsx"

    def test_bare_name_only_matches_markdown(self, index):
        assert index.resolve("data") is None
        assert index.resolve("App") is None

    def test_unresolved(self, index):
        assert index.resolve("missing") is None
        assert index.resolve("") is None

    def test_leading_slash_tolerated(self, index):
        assert index.resolve("/b/note") == "/b/note.md"

    def test_ambiguous_prefers_same_directory(self, index):
        assert index.resolve("note", source_id="/b/ref.md") == "/b/note.md"

    def test_ambiguous_falls_back_to_first_added(self, index):
        assert index.candidates("note") == ["/a/note.md", "/b/note.md"]
        assert index.resolve("note", source_id="/README.md") == "/a/note.md"
        assert index.resolve("note") == "/a/note.md"

    def test_folders_not_indexed(self):
        index = ReferenceIndex()
        index.add(Node("/docs", "docs", NodeKind.FOLDER, "/docs", 100, 0))
        assert len(index) == 0
        assert index.resolve("docs") is None
