"""Domain datatypes for filesystem-backed tree nodes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FileStat:
    """Filesystem metadata snapshot used by display columns."""

    size: int | None = None
    mtime_ns: int | None = None
    ctime_ns: int | None = None
    mode: int = 0


@dataclass(frozen=True)
class DirectoryChild:
    """One listed directory entry with permissions and metadata."""

    name: str
    path: str
    is_dir: bool
    readable: bool
    writable: bool
    executable: bool
    stat: FileStat
    symlink: bool = False


@dataclass(eq=False)
class FileNode:
    """One file or directory stored in a ``TreeModel`` arena.

    ``parent`` and ``children`` are arena keys (full paths), never node
    references. ``children is None`` means the directory was never loaded;
    an empty list means it was loaded and is empty.
    """

    uid: str
    name: str
    fullpath: str
    level: int
    directory: bool
    hidden: bool = False
    readable: bool = True
    writable: bool = True
    executable: bool = False
    symlink: bool = False
    stat: FileStat = field(default_factory=FileStat)
    parent: str | None = None
    children: list[str] | None = None
    is_first_in_level: bool = False
    is_last_in_level: bool = False

    @property
    def readonly(self) -> bool:
        return self.readable and not self.writable

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def loaded(self) -> bool:
        return self.children is not None

    def __repr__(self) -> str:
        kind = "dir" if self.directory else "file"
        return f"FileNode({kind} {self.fullpath!r})"


__all__ = [
    "FileStat",
    "DirectoryChild",
    "FileNode",
]
