"""
vaultgraph core - headless library for file-vault graphs.

Turns a directory tree plus [[name]] references inside markdown files into
a typed graph, and lays that graph out with a force simulation. It has no
UI dependencies and can be embedded in other applications.

Safety: All file operations are READ-ONLY by design.
"""

__version__ = "0.1.0"

# Lazy imports to avoid loading everything at once
def __getattr__(name):
    if name == "ReadOnlyFS":
        from .adapters.readonly_fs import ReadOnlyFS
        return ReadOnlyFS
    elif name == "MemoryFS":
        from .adapters.memory_fs import MemoryFS
        return MemoryFS
    elif name == "GraphBuilder":
        from .services.graph_builder import GraphBuilder
        return GraphBuilder
    elif name == "ForceLayoutEngine":
        from .services.force_layout import ForceLayoutEngine
        return ForceLayoutEngine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "__version__",
    "ReadOnlyFS",
    "MemoryFS",
    "GraphBuilder",
    "ForceLayoutEngine",
]
