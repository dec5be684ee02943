"""Lazily loaded file tree stored in a flat, path-keyed arena.

Nodes reference their parent and children by full path, so reloading a
directory updates existing nodes in place and node identity (and ``uid``)
survives reloads. Structural changes to one directory are applied in a single
synchronous step after all of its I/O has completed, so a render never sees a
half-updated child list.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from collections.abc import Iterable

from ..errors import ExplorerError
from .expand_store import ExpandStore
from .fs import FileSystem
from .types import DirectoryChild, FileNode

logger = logging.getLogger(__name__)


def normalize_path(path: str | os.PathLike[str]) -> str:
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def is_under(path: str, directory: str) -> bool:
    """Return whether ``path`` is strictly inside ``directory``."""
    prefix = directory if directory.endswith(os.sep) else directory + os.sep
    return path.startswith(prefix)


def node_sort_key(node: FileNode) -> tuple[bool, str, str]:
    """Directories first, then case-folded name, then raw name."""
    return (not node.directory, node.name.casefold(), node.name)


def sort_nodes(nodes: Iterable[FileNode]) -> list[FileNode]:
    return sorted(nodes, key=node_sort_key)


class TreeModel:
    """Node hierarchy for one root directory."""

    def __init__(
        self,
        root: str | os.PathLike[str],
        fs: FileSystem,
        expand_store: ExpandStore,
        *,
        source_name: str = "file",
        auto_expand_single_directory: bool = False,
    ) -> None:
        self.fs = fs
        self.expand_store = expand_store
        self.source_name = source_name
        self.auto_expand_single_directory = auto_expand_single_directory
        self.nodes: dict[str, FileNode] = {}
        self.root = normalize_path(root)
        self._reset_arena()

    def _reset_arena(self) -> None:
        self.nodes.clear()
        self.nodes[self.root] = FileNode(
            uid=self.uid_for(self.root),
            name=os.path.basename(self.root) or self.root,
            fullpath=self.root,
            level=0,
            directory=True,
        )

    def uid_for(self, path: str) -> str:
        return f"{self.source_name}:{path}"

    @property
    def root_node(self) -> FileNode:
        return self.nodes[self.root]

    def node(self, path: str | os.PathLike[str]) -> FileNode | None:
        return self.nodes.get(normalize_path(path))

    def parent_of(self, node: FileNode) -> FileNode | None:
        if node.parent is None:
            return None
        return self.nodes.get(node.parent)

    def children_of(self, node: FileNode) -> list[FileNode] | None:
        if node.children is None:
            return None
        return [self.nodes[key] for key in node.children if key in self.nodes]

    def ancestors(self, node: FileNode) -> list[FileNode]:
        """Return ancestors nearest first, ending with the root."""
        out: list[FileNode] = []
        current = self.parent_of(node)
        while current is not None:
            out.append(current)
            current = self.parent_of(current)
        return out

    def cd(self, path: str | os.PathLike[str]) -> FileNode:
        """Re-root the model; expand state is kept by the store."""
        self.root = normalize_path(path)
        self._reset_arena()
        return self.root_node

    def put_target_node(self, node: FileNode | None) -> FileNode:
        """Directory that receives pasted or newly created entries."""
        if node is None:
            return self.root_node
        if node.directory and self.expand_store.is_expanded(node.fullpath):
            return node
        parent = self.parent_of(node)
        if parent is not None:
            return parent
        return self.root_node

    async def load(self, node: FileNode | None = None, *, force: bool = False) -> list[FileNode]:
        """Load ``node`` (the root when ``None``) and its expanded descendants.

        A collapsed directory yields ``[]`` without touching the filesystem
        unless ``force`` is set, as done for an explicitly targeted expand.
        """
        target = node if node is not None else self.root_node
        if not target.directory:
            return []
        if target.is_root:
            await self._refresh_root_metadata()
        if not force and not self.expand_store.is_expanded(target.fullpath):
            return []

        queue: deque[FileNode] = deque([target])
        while queue:
            directory = queue.popleft()
            for child in await self._list_children(directory):
                if child.directory and self.expand_store.is_expanded(child.fullpath):
                    queue.append(child)
        return self.children_of(target) or []

    async def load_children(self, node: FileNode) -> list[FileNode]:
        """Memoized child listing: fetch only when never loaded."""
        if not node.directory:
            return []
        if node.children is None:
            await self._list_children(node)
        return self.children_of(node) or []

    async def expand(self, node: FileNode) -> list[FileNode]:
        """Mark ``node`` expanded, loading it (and single-directory chains)."""
        expanded: list[FileNode] = []
        current: FileNode | None = node
        while current is not None and current.directory:
            self.expand_store.expand(current.fullpath)
            expanded.append(current)
            children = await self.load_children(current)
            if (
                self.auto_expand_single_directory
                and len(children) == 1
                and children[0].directory
            ):
                current = children[0]
            else:
                current = None
        return expanded

    async def expand_recursive(self, nodes: Iterable[FileNode], *, show_hidden: bool = True) -> None:
        """Expand directories and all descendants, loading on demand.

        Symlinked directories below the starting nodes are expanded but not
        descended into, which keeps link cycles finite.
        """
        queue: deque[FileNode] = deque(node for node in nodes if node.directory)
        while queue:
            directory = queue.popleft()
            self.expand_store.expand(directory.fullpath)
            for child in await self.load_children(directory):
                if not child.directory:
                    continue
                if child.hidden and not show_hidden:
                    continue
                if child.symlink:
                    self.expand_store.expand(child.fullpath)
                    await self.load_children(child)
                    continue
                queue.append(child)

    async def shrink_recursive(self, nodes: Iterable[FileNode], *, show_hidden: bool = True) -> None:
        """Collapse directories and every descendant with remembered state.

        Loaded subtrees are walked directly; descendants that are not loaded
        are collapsed through their recorded store entries without I/O.
        """
        queue: deque[FileNode] = deque(node for node in nodes if node.directory)
        while queue:
            directory = queue.popleft()
            self.expand_store.shrink(directory.fullpath)
            for path in [path for path in self.expand_store if is_under(path, directory.fullpath)]:
                self.expand_store.shrink(path)
            for child in self.children_of(directory) or []:
                if child.directory and (show_hidden or not child.hidden):
                    queue.append(child)

    async def reveal(self, path: str | os.PathLike[str], start: FileNode | None = None) -> FileNode | None:
        """Expand ancestors of ``path`` below ``start`` and return its node.

        Returns ``None`` when no node matches. A directory whose cached
        listing misses the next path segment is re-listed once.
        """
        target = normalize_path(path)
        current = start if start is not None else self.root_node
        if target == current.fullpath:
            return current
        if not is_under(target, current.fullpath):
            return None

        while True:
            self.expand_store.expand(current.fullpath)
            next_node = self._child_toward(current, target, await self.load_children(current))
            if next_node is None:
                await self._list_children(current)
                next_node = self._child_toward(current, target, self.children_of(current) or [])
            if next_node is None:
                logger.debug("reveal: %s not found under %s", target, current.fullpath)
                return None
            if next_node.fullpath == target:
                return next_node
            current = next_node

    @staticmethod
    def _child_toward(directory: FileNode, target: str, children: list[FileNode]) -> FileNode | None:
        for child in children:
            if child.fullpath == target:
                return child
            if child.directory and is_under(target, child.fullpath):
                return child
        return None

    async def _refresh_root_metadata(self) -> None:
        root = self.root_node
        try:
            described = await self.fs.stat_node(root.fullpath)
        except ExplorerError as exc:
            logger.warning("Cannot stat root %s: %s", root.fullpath, exc)
            return
        self._apply_metadata(root, described)

    async def _list_children(self, directory: FileNode) -> list[FileNode]:
        listing, scan_error, entry_errors = await self.fs.list_directory(directory.fullpath)
        for entry_error in entry_errors:
            logger.warning("Skipping entry %s: %s", ", ".join(entry_error.paths), entry_error.detail)
        if scan_error is not None:
            logger.warning("Cannot list %s: %s", directory.fullpath, scan_error)
            listing = []

        # Everything below is synchronous: the directory switches from its old
        # children to the new ones in one step.
        keys: list[str] = []
        for child in listing:
            keys.append(self._upsert_child(directory, child).fullpath)
        for stale in set(directory.children or ()) - set(keys):
            self._evict(stale)
        directory.children = [node.fullpath for node in sort_nodes(self.nodes[key] for key in keys)]
        return self.children_of(directory) or []

    def _upsert_child(self, directory: FileNode, child: DirectoryChild) -> FileNode:
        path = os.path.normpath(child.path)
        existing = self.nodes.get(path)
        if existing is not None and existing.directory != child.is_dir:
            self._evict(path)
            existing = None
        if existing is None:
            existing = FileNode(
                uid=self.uid_for(path),
                name=child.name,
                fullpath=path,
                level=directory.level + 1,
                directory=child.is_dir,
                parent=directory.fullpath,
            )
            self.nodes[path] = existing
        self._apply_metadata(existing, child)
        return existing

    @staticmethod
    def _apply_metadata(node: FileNode, child: DirectoryChild) -> None:
        node.hidden = child.name.startswith(".")
        node.readable = child.readable
        node.writable = child.writable
        node.executable = child.executable
        node.symlink = child.symlink
        node.stat = child.stat

    def _evict(self, path: str) -> None:
        stack = [path]
        while stack:
            node = self.nodes.pop(stack.pop(), None)
            if node is not None and node.children:
                stack.extend(node.children)


__all__ = [
    "TreeModel",
    "is_under",
    "node_sort_key",
    "normalize_path",
    "sort_nodes",
]
