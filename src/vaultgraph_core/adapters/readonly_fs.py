"""
Read-Only Filesystem Adapter.

The local-disk implementation of FSPort. Listings come straight from
os.scandir, metadata from lstat (children) or stat (explicit paths), and
reads are capped by a ReadBudget. Nothing here writes to the disk.
"""

import os
import stat
from pathlib import Path, PurePath
from typing import Iterator, List, Optional

from ..domain.enums import IssueCause
from ..ports.fs_port import FSPort, DirEntry, ReadBudget


def _entry_from_stat(name: str, path: str, info: os.stat_result) -> DirEntry:
    mode = info.st_mode
    return DirEntry(
        name=name,
        path=path,
        is_dir=stat.S_ISDIR(mode),
        is_file=stat.S_ISREG(mode),
        size_bytes=info.st_size if stat.S_ISREG(mode) else 0,
    )


class ReadOnlyFS(FSPort):
    """
    Local vault source.

    - Never writes; the mutating names exist only to refuse loudly
    - Child symlinks are listed as special entries and never followed
    - With allowed_roots set, anything outside them is a PermissionError
    """

    def __init__(self, allowed_roots: Optional[List[str]] = None):
        self.allowed_roots = [Path(r).resolve() for r in (allowed_roots or [])]
        self._read_count = 0
        self._bytes_read = 0

    def _confine(self, path: PurePath) -> Path:
        """Absolute form of path, refused if it leaves the allowed roots."""
        resolved = Path(path).resolve()
        if self.allowed_roots and not any(
            resolved == root or root in resolved.parents for root in self.allowed_roots
        ):
            raise PermissionError(
                f"Path {resolved} is not under any allowed root "
                f"({', '.join(str(r) for r in self.allowed_roots)})"
            )
        return resolved

    # -------------------------------------------------------------------------
    # FSPort
    # -------------------------------------------------------------------------

    def scandir(self, path: PurePath) -> Iterator[DirEntry]:
        # os.scandir raises FileNotFoundError / NotADirectoryError / PermissionError itself
        with os.scandir(self._confine(path)) as listing:
            for item in listing:
                try:
                    info = item.stat(follow_symlinks=False)
                except OSError as e:
                    yield DirEntry(
                        name=item.name, path=item.path, is_dir=False, is_file=False,
                        size_bytes=0, error=f"{type(e).__name__}: {e}",
                        cause=IssueCause.from_exception(e),
                    )
                    continue
                yield _entry_from_stat(item.name, item.path, info)

    def exists(self, path: PurePath) -> bool:
        try:
            return self._confine(path).exists()
        except PermissionError:
            return False

    def is_dir(self, path: PurePath) -> bool:
        return self._confine(path).is_dir()

    def stat(self, path: PurePath) -> DirEntry:
        resolved = self._confine(path)
        return _entry_from_stat(resolved.name, str(resolved), os.stat(resolved))

    def read_bytes(self, path: PurePath, budget: Optional[ReadBudget] = None) -> bytes:
        resolved = self._confine(path)
        if not stat.S_ISREG(os.stat(resolved).st_mode):
            raise FileNotFoundError(f"Not a regular file: {resolved}")

        limit = (budget or ReadBudget()).max_bytes
        with open(resolved, "rb") as f:
            data = f.read() if limit is None else f.read(limit)

        self._read_count += 1
        self._bytes_read += len(data)
        return data

    @property
    def stats(self) -> dict:
        """Number of reads and bytes read so far."""
        return {"read_count": self._read_count, "bytes_read": self._bytes_read}

    # -------------------------------------------------------------------------
    # Refused operations
    # -------------------------------------------------------------------------

    def _refuse(self, operation: str):
        raise NotImplementedError(
            f"'{operation}' is not available: ReadOnlyFS never modifies the source."
        )

    def write(self, *args, **kwargs):
        self._refuse("write")

    def delete(self, *args, **kwargs):
        self._refuse("delete")

    def rename(self, *args, **kwargs):
        self._refuse("rename")

    def mkdir(self, *args, **kwargs):
        self._refuse("mkdir")
