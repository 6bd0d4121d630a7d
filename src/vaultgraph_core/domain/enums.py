"""
Enumerations for the vaultgraph domain.
"""

from enum import Enum


class NodeKind(str, Enum):
    """What a graph node represents."""
    FILE = "file"
    FOLDER = "folder"


class LinkKind(str, Enum):
    """Types of relationships between nodes."""
    PARENT_CHILD = "parent_child"   # Folder -> direct child
    REFERENCE = "reference"         # [[name]] marker inside a markdown file


class ScanStatus(str, Enum):
    """Overall outcome of a graph build."""
    COMPLETE = "complete"     # Every entry was read
    PARTIAL = "partial"       # Some entries were skipped
    FAILED = "failed"         # Root could not be read, no graph
    CANCELLED = "cancelled"   # Superseded or stopped before finishing


class ScanIssueKind(str, Enum):
    """Problems met while scanning a source."""
    SOURCE_UNREADABLE = "source_unreadable"       # Fatal
    ENTRY_UNREADABLE = "entry_unreadable"         # Entry skipped
    CONTENT_UNAVAILABLE = "content_unavailable"   # No references extracted


class IssueCause(str, Enum):
    """Underlying reason reported by the file source."""
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    IO_ERROR = "io_error"

    @classmethod
    def from_exception(cls, exc: BaseException) -> "IssueCause":
        """Classify a filesystem exception."""
        if isinstance(exc, PermissionError):
            return cls.PERMISSION_DENIED
        if isinstance(exc, FileNotFoundError):
            return cls.NOT_FOUND
        if isinstance(exc, NotADirectoryError):
            return cls.NOT_A_DIRECTORY
        return cls.IO_ERROR

    @classmethod
    def from_error_text(cls, text: str) -> "IssueCause":
        """Classify an "ExceptionName: message" string as written by the adapters."""
        name = (text or "").split(":", 1)[0].strip()
        if name == "PermissionError":
            return cls.PERMISSION_DENIED
        if name == "FileNotFoundError":
            return cls.NOT_FOUND
        if name == "NotADirectoryError":
            return cls.NOT_A_DIRECTORY
        return cls.IO_ERROR


class LayoutPhase(str, Enum):
    """State of the force layout engine."""
    IDLE = "idle"         # Nothing to simulate, or stopped
    RUNNING = "running"   # Energy above threshold
    SETTLED = "settled"   # Energy decayed to ~0


class NodeScaleMode(str, Enum):
    """What drives a node's base radius."""
    SIZE = "size"
    CONNECTIONS = "connections"
