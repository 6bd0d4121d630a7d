"""
Adapters for vaultgraph.

Implementations of the port interfaces.
"""

from .readonly_fs import ReadOnlyFS
from .memory_fs import MemoryFS, demo_vault

__all__ = ["ReadOnlyFS", "MemoryFS", "demo_vault"]
