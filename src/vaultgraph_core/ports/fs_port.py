"""
Filesystem port interface.

Defines the contract for reading a hierarchical file source.
All implementations MUST be read-only.

Failures are signalled with the built-in exception hierarchy so callers
can tell "permission denied" (PermissionError) apart from "not found"
(FileNotFoundError).
"""

from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import Iterator, Optional
from dataclasses import dataclass

from ..domain.enums import IssueCause


@dataclass
class DirEntry:
    """A directory entry from scandir."""
    name: str
    path: str
    is_dir: bool
    is_file: bool
    size_bytes: int
    error: Optional[str] = None    # Set when the entry's metadata could not be read
    cause: Optional[IssueCause] = None   # Why, when error is set

    @property
    def readable(self) -> bool:
        return self.error is None


@dataclass
class ReadBudget:
    """Limits for read operations."""
    max_bytes: Optional[int] = 10_000   # None = whole file


class FSPort(ABC):
    """
    Abstract interface for file source operations.

    IMPORTANT: All implementations MUST be read-only.
    """

    @abstractmethod
    def scandir(self, path: PurePath) -> Iterator[DirEntry]:
        """
        Iterate over the immediate entries of a directory.

        Args:
            path: Directory to scan

        Yields:
            DirEntry for each item, in the order the source provides

        Raises:
            PermissionError: directory cannot be opened
            FileNotFoundError: directory does not exist
            NotADirectoryError: path is not a directory
        """

    @abstractmethod
    def exists(self, path: PurePath) -> bool:
        """Check if a path exists."""

    @abstractmethod
    def is_dir(self, path: PurePath) -> bool:
        """Check if path is a directory."""

    @abstractmethod
    def stat(self, path: PurePath) -> DirEntry:
        """Get file/directory metadata."""

    @abstractmethod
    def read_bytes(self, path: PurePath, budget: Optional[ReadBudget] = None) -> bytes:
        """
        Read file contents as bytes.

        Args:
            path: File to read
            budget: Optional limits on how much to read

        Returns:
            File contents (possibly truncated per budget)
        """

    def read_text(self, path: PurePath, budget: Optional[ReadBudget] = None,
                  encoding: str = "utf-8") -> str:
        """Read file contents as text, replacing undecodable bytes."""
        return self.read_bytes(path, budget).decode(encoding, errors="replace")
