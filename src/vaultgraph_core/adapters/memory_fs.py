"""
In-memory filesystem adapter.

Holds a small directory tree in dictionaries. Used for the bundled demo
vault and for exercising failure paths (denied directories, unreadable
entries) that are awkward to reproduce on a real disk.
"""

import posixpath
from dataclasses import dataclass, field
from pathlib import PurePath, PurePosixPath
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from ..domain.enums import IssueCause
from ..ports.fs_port import FSPort, DirEntry, ReadBudget


@dataclass
class _MemEntry:
    is_dir: bool
    data: bytes = b""
    children: List[str] = field(default_factory=list)   # Names, insertion order


class MemoryFS(FSPort):
    """
    Read-only view over an in-memory tree.

    The tree is populated with add_dir()/add_file() before use; the FSPort
    methods never modify it.
    """

    def __init__(self, root: str = "/vault"):
        self.root = PurePosixPath(self._norm(root))
        self._entries: Dict[str, _MemEntry] = {}
        self._denied: Set[str] = set()         # scandir/read raise PermissionError
        self._broken: Dict[str, type] = {}     # path -> OSError subclass raised by its lstat
        self._add_dir_chain(str(self.root))

    @staticmethod
    def _norm(path: Union[str, PurePath]) -> str:
        return posixpath.normpath("/" + str(path).replace("\\", "/").lstrip("/"))

    def _add_dir_chain(self, path: str) -> None:
        if path in self._entries:
            if not self._entries[path].is_dir:
                raise NotADirectoryError(f"Not a directory: {path}")
            return
        parent, name = posixpath.split(path)
        if name:
            self._add_dir_chain(parent)
            self._entries[parent].children.append(name)
        self._entries[path] = _MemEntry(is_dir=True)

    def _resolve(self, path: Union[str, PurePath]) -> str:
        """Absolute key for a path; relative paths are taken from the root."""
        text = str(path)
        if not text.startswith("/"):
            text = posixpath.join(str(self.root), text)
        return self._norm(text)

    # -------------------------------------------------------------------------
    # Population
    # -------------------------------------------------------------------------

    def add_dir(self, path: Union[str, PurePath]) -> PurePosixPath:
        """Create a directory (and any missing parents)."""
        key = self._resolve(path)
        self._add_dir_chain(key)
        return PurePosixPath(key)

    def add_file(self, path: Union[str, PurePath], content: Union[str, bytes] = b"") -> PurePosixPath:
        """Create a file, creating parent directories as needed."""
        key = self._resolve(path)
        parent, name = posixpath.split(key)
        self._add_dir_chain(parent)
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        if key not in self._entries:
            self._entries[parent].children.append(name)
        self._entries[key] = _MemEntry(is_dir=False, data=data)
        return PurePosixPath(key)

    def deny(self, path: Union[str, PurePath]) -> None:
        """Make scandir/read on this path raise PermissionError."""
        self._denied.add(self._resolve(path))

    def break_entry(self, path: Union[str, PurePath], error: type = PermissionError) -> None:
        """Make this entry's metadata unreadable (raising `error`) when its parent is listed."""
        self._broken[self._resolve(path)] = error

    # -------------------------------------------------------------------------
    # FSPort
    # -------------------------------------------------------------------------

    def _lookup(self, key: str) -> _MemEntry:
        entry = self._entries.get(key)
        if entry is None:
            raise FileNotFoundError(f"No such file or directory: {key}")
        return entry

    def scandir(self, path: PurePath) -> Iterator[DirEntry]:
        key = self._resolve(path)
        entry = self._lookup(key)
        if not entry.is_dir:
            raise NotADirectoryError(f"Not a directory: {key}")
        if key in self._denied:
            raise PermissionError(f"Permission denied: {key}")

        for name in list(entry.children):
            child_key = posixpath.join(key, name)
            if child_key in self._broken:
                exc = self._broken[child_key](f"cannot stat {child_key}")
                yield DirEntry(
                    name=name, path=child_key, is_dir=False, is_file=False,
                    size_bytes=0, error=f"{type(exc).__name__}: {exc}",
                    cause=IssueCause.from_exception(exc),
                )
                continue
            child = self._entries[child_key]
            yield DirEntry(
                name=name,
                path=child_key,
                is_dir=child.is_dir,
                is_file=not child.is_dir,
                size_bytes=0 if child.is_dir else len(child.data),
            )

    def exists(self, path: PurePath) -> bool:
        return self._resolve(path) in self._entries

    def is_dir(self, path: PurePath) -> bool:
        entry = self._entries.get(self._resolve(path))
        return bool(entry and entry.is_dir)

    def stat(self, path: PurePath) -> DirEntry:
        key = self._resolve(path)
        entry = self._lookup(key)
        return DirEntry(
            name=posixpath.basename(key) or key,
            path=key,
            is_dir=entry.is_dir,
            is_file=not entry.is_dir,
            size_bytes=0 if entry.is_dir else len(entry.data),
        )

    def read_bytes(self, path: PurePath, budget: Optional[ReadBudget] = None) -> bytes:
        key = self._resolve(path)
        entry = self._lookup(key)
        if entry.is_dir:
            raise FileNotFoundError(f"Not a file: {key}")
        if key in self._denied:
            raise PermissionError(f"Permission denied: {key}")
        budget = budget or ReadBudget()
        if budget.max_bytes is None:
            return entry.data
        return entry.data[:budget.max_bytes]


# Sample project shown when no directory has been chosen
DEMO_LABEL = "Mock Project (Dev)"

_DEMO_FILES: Tuple[Tuple[str, Union[str, bytes]], ...] = (
    ("README.md",
     "# Project Mock\n"
     "This project visualizes file structures. See [[src/App.tsx]] for the main "
     "component. It uses hooks from [[src/hooks/useGraphData.ts]].\n"
     "Layout notes live in [[layout]], rendering notes in [[d3]].\n"),
    ("package.json", '{ "name": "foam-clone", "version": "0.17.0" }'),
    ("d3.md", "This is a note about D3. The simulation is described in [[layout]].\n"),
    ("notes/layout.md",
     "# Layout\nForces: charge, link, center, collide. Drawn with [[d3]].\n"
     "Back to [[README]].\n"),
    ("notes/todo.md",
     "- [ ] tune [[layout|the layout]]\n"
     "- [ ] write [[missing-note]]\n"
     "- [ ] review [[notes/layout#Forces]]\n"),
    ("src/App.tsx", 'import {Graph} from "./components/Graph.tsx";\n\n// Main app component\n'),
    ("src/styles.css", "body { margin: 0; }\n"),
    ("src/components/Graph.tsx", "// D3 graph component.\nimport * as d3 from \"d3\";\n"),
    ("src/components/Sidebar.tsx", "// Sidebar component.\nexport const Sidebar = () => null;\n"),
    ("src/hooks/useGraphData.ts", "// Custom hook for fetching graph data.\n"),
    ("assets/logo.svg", b"<svg/>" + b" " * 2094),
    ("assets/icon.png", b"\x89PNG" + b"\x00" * 5396),
)


def demo_vault() -> Tuple[MemoryFS, PurePosixPath, str]:
    """
    Build the in-memory demo project.

    Returns:
        (filesystem, root path, display label)
    """
    fs = MemoryFS(root="/demo")
    for rel_path, content in _DEMO_FILES:
        fs.add_file(rel_path, content)
    fs.add_dir("archive")
    return fs, fs.root, DEMO_LABEL
