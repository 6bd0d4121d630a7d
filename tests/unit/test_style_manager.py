"""
Tests for graph colors and pens.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from PyQt6.QtCore import Qt

from vaultgraph_core.domain import Link, LinkKind, Node, NodeKind
from vaultgraph_core.services.weighting import node_weights
from vaultgraph_app.views.style_manager import (
    CATEGORY_PALETTE,
    FOLDER_COLOR,
    PALETTES,
    StyleManager,
    Theme,
)


def file_node(path: str, depth: int = 0) -> Node:
    return Node(path, path.rsplit("/", 1)[-1], NodeKind.FILE, path, 10, depth)


@pytest.fixture
def style():
    return StyleManager(Theme.DARK, ["md", "css", "tsx"])


class TestColors:

    def test_extension_colors_sorted(self, style):
        assert style.extension_color("css") == CATEGORY_PALETTE[0]
        assert style.extension_color("md") == CATEGORY_PALETTE[1]
        assert style.extension_color("tsx") == CATEGORY_PALETTE[2]

    def test_unknown_extension(self, style):
        assert style.extension_color("zip") == PALETTES[Theme.DARK].node_stroke

    def test_folder_color(self, style):
        folder = Node("/src", "src", NodeKind.FOLDER, "/src", 100, 0)
        assert style.base_color(folder) == FOLDER_COLOR

    def test_palette_cycles(self):
        style = StyleManager(extensions=[f"e{i:02d}" for i in range(12)])
        assert style.extension_color("e10") == CATEGORY_PALETTE[0]

    def test_full_weight_unchanged(self, style):
        node = file_node("/a.md")
        color = style.node_color(node, node_weights(node, node))
        base = style.base_color(node)
        assert (color.red(), color.green(), color.blue()) == (base.red(), base.green(), base.blue())
        assert color.alphaF() == pytest.approx(1.0)

    def test_deep_node_muted(self, style):
        node = file_node("/a/b/c.md", depth=2)
        color = style.node_color(node, node_weights(node))
        base = style.base_color(node)
        assert color.lightnessF() < base.lightnessF()
        assert color.alphaF() == pytest.approx(0.7, abs=0.01)

    def test_label_color_alpha(self, style):
        weights = node_weights(file_node("/a/b/c/d.md", depth=3))
        assert style.label_color(weights).alphaF() == pytest.approx(0.7, abs=0.01)


class TestLinks:

    def test_backlink_highlight(self, style):
        link = Link("/a.md", "/b.md", LinkKind.REFERENCE)
        palette = style.palette
        assert style.link_color(link, selected_id="/b.md") == palette.backlink
        assert style.link_color(link, selected_id="/b.md", show_backlinks=False) == palette.reference
        assert style.link_color(link) == palette.reference

    def test_parent_child_color(self, style):
        link = Link("/", "/a.md", LinkKind.PARENT_CHILD)
        assert style.link_color(link) == style.palette.link

    def test_reference_pen_dashed(self, style):
        pen = style.link_pen(Link("/a.md", "/b.md", LinkKind.REFERENCE))
        assert pen.style() == Qt.PenStyle.DashLine
        solid = style.link_pen(Link("/", "/a.md", LinkKind.PARENT_CHILD))
        assert solid.style() == Qt.PenStyle.SolidLine

    def test_theme_switch(self, style):
        style.theme = Theme.LIGHT
        assert style.palette is PALETTES[Theme.LIGHT]
        assert style.node_pen(selected=True).color() == PALETTES[Theme.LIGHT].selected_stroke
