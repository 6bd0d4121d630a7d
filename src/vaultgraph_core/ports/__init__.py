"""
Ports (interfaces) for vaultgraph.

These define the contracts that adapters must implement.
This enables dependency injection and testing with in-memory sources.
"""

from .fs_port import FSPort, DirEntry, ReadBudget

__all__ = ["FSPort", "DirEntry", "ReadBudget"]
