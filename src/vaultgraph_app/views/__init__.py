"""
Presentation helpers for vaultgraph.
"""

from .style_manager import StyleManager, Theme, ThemePalette

__all__ = ["StyleManager", "Theme", "ThemePalette"]
