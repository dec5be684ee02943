"""Domain model for filesystem file/directory trees.

This package contains non-UI tree primitives:
- node datatypes stored in a path-keyed arena
- the filesystem collaborator and its local implementation
- the process-wide expand/collapse store
- the lazily loading ``TreeModel``
"""

from __future__ import annotations

from .expand_store import ExpandStore, JsonExpandStore
from .fs import FileSystem, ListingResult, LocalFileSystem, describe_path, list_directory_children
from .model import TreeModel, is_under, node_sort_key, normalize_path, sort_nodes
from .types import DirectoryChild, FileNode, FileStat

__all__ = [
    "DirectoryChild",
    "FileNode",
    "FileStat",
    "ExpandStore",
    "JsonExpandStore",
    "FileSystem",
    "ListingResult",
    "LocalFileSystem",
    "describe_path",
    "list_directory_children",
    "TreeModel",
    "is_under",
    "node_sort_key",
    "normalize_path",
    "sort_nodes",
]
