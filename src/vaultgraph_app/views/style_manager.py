"""
Style manager for the vault graph.

Centralizes colors and the mapping from depth weights to pens and brushes.
Folder nodes share one color; files are colored by extension from a
categorical palette; everything is muted by relative depth.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QBrush, QColor, QPen

from vaultgraph_core.domain import Link, LinkKind, Node
from vaultgraph_core.services.weighting import NodeWeights, mute_hsl


class Theme(Enum):
    """Color themes."""
    LIGHT = "light"
    DARK = "dark"


@dataclass
class ThemePalette:
    """All theme-dependent colors."""
    background: QColor
    link: QColor                  # Parent-child links
    reference: QColor             # Reference links
    backlink: QColor              # Links into the selected node
    node_stroke: QColor
    text: QColor
    selected_stroke: QColor
    highlight: QColor = field(default_factory=lambda: QColor(255, 215, 0))  # Search hits


PALETTES: Dict[Theme, ThemePalette] = {
    Theme.LIGHT: ThemePalette(
        background=QColor("#f9fafb"),
        link=QColor("#cbd5e1"),
        reference=QColor("#38bdf8"),
        backlink=QColor("#ec4899"),
        node_stroke=QColor("#64748b"),
        text=QColor("#1e293b"),
        selected_stroke=QColor("#22d3ee"),
    ),
    Theme.DARK: ThemePalette(
        background=QColor("#020617"),
        link=QColor("#475569"),
        reference=QColor("#0ea5e9"),
        backlink=QColor("#f472b6"),
        node_stroke=QColor("#94a3b8"),
        text=QColor("#cbd5e1"),
        selected_stroke=QColor("#67e8f9"),
    ),
}

FOLDER_COLOR = QColor("#f59e0b")

# Ten-color categorical palette for file extensions
CATEGORY_PALETTE = [
    QColor("#4e79a7"),
    QColor("#f28e2c"),
    QColor("#e15759"),
    QColor("#76b7b2"),
    QColor("#59a14f"),
    QColor("#edc949"),
    QColor("#af7aa1"),
    QColor("#ff9da7"),
    QColor("#9c755f"),
    QColor("#bab0ab"),
]


class StyleManager:
    """Manages all styling for the graph."""

    def __init__(self, theme: Theme = Theme.DARK, extensions: Iterable[str] = ()):
        self._theme = theme
        self._extension_colors: Dict[str, QColor] = {}
        self.set_extensions(extensions)

    @property
    def theme(self) -> Theme:
        return self._theme

    @theme.setter
    def theme(self, theme: Theme):
        self._theme = theme

    @property
    def palette(self) -> ThemePalette:
        return PALETTES[self._theme]

    def set_extensions(self, extensions: Iterable[str]) -> None:
        """Assign palette colors to extensions in sorted order (cycling after ten)."""
        self._extension_colors = {
            ext: CATEGORY_PALETTE[i % len(CATEGORY_PALETTE)]
            for i, ext in enumerate(sorted(set(extensions)))
        }

    # -------------------------------------------------------------------------
    # Color Methods
    # -------------------------------------------------------------------------

    def extension_color(self, extension: str) -> QColor:
        color = self._extension_colors.get(extension)
        if color is None:
            return QColor(self.palette.node_stroke)
        return QColor(color)

    def base_color(self, node: Node) -> QColor:
        """Unmuted fill color for a node."""
        if node.is_folder:
            return QColor(FOLDER_COLOR)
        return self.extension_color(node.extension)

    def node_color(self, node: Node, weights: NodeWeights) -> QColor:
        """Fill color muted by relative depth, with the weighted opacity as alpha."""
        color = self.base_color(node)
        if not weights.is_focal and weights.relative_depth > 0:
            h, s, l, _ = color.getHslF()
            h, s, l = mute_hsl(max(h, 0.0), s, l, weights.relative_depth)
            color = QColor.fromHslF(h, s, l)
        color.setAlphaF(weights.opacity)
        return color

    def link_color(self, link: Link, selected_id: Optional[str] = None, show_backlinks: bool = True) -> QColor:
        """Links into the selected node are drawn in the backlink color."""
        if show_backlinks and selected_id is not None and link.target == selected_id:
            return QColor(self.palette.backlink)
        if link.kind == LinkKind.REFERENCE:
            return QColor(self.palette.reference)
        return QColor(self.palette.link)

    def label_color(self, weights: NodeWeights) -> QColor:
        color = QColor(self.palette.text)
        color.setAlphaF(weights.label_opacity)
        return color

    # -------------------------------------------------------------------------
    # Pen/Brush Helpers
    # -------------------------------------------------------------------------

    def node_brush(self, node: Node, weights: NodeWeights) -> QBrush:
        return QBrush(self.node_color(node, weights))

    def node_pen(self, selected: bool = False, highlighted: bool = False) -> QPen:
        """Outline for a node."""
        if selected:
            return QPen(self.palette.selected_stroke, 3)
        if highlighted:
            return QPen(self.palette.highlight, 2)
        return QPen(self.palette.node_stroke, 1.5)

    def link_pen(self, link: Link, selected_id: Optional[str] = None, show_backlinks: bool = True) -> QPen:
        color = self.link_color(link, selected_id, show_backlinks)
        if link.kind == LinkKind.REFERENCE:
            pen = QPen(color, 1.5)
            pen.setStyle(Qt.PenStyle.DashLine)
            return pen
        return QPen(color, 1.0)
