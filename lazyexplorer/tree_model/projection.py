"""Flatten the expanded part of a ``TreeModel`` into line-addressable rows.

The flattened sequence is always recomputed from scratch; first/last-in-level
flags are assigned during the same pass over the visible siblings only.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

from ..file_tree_model import ExpandStore, FileNode, TreeModel

NodeFilter = Callable[[FileNode], bool]


@dataclass
class SourceView:
    """One source's flattened rows and its ``[start, end)`` surface range."""

    name: str
    flattened_nodes: list[FileNode] = field(default_factory=list)
    start_line_index: int = 0
    _index_by_uid: dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.update(self.flattened_nodes)

    @property
    def end_line_index(self) -> int:
        return self.start_line_index + len(self.flattened_nodes)

    def update(self, nodes: list[FileNode]) -> None:
        self.flattened_nodes = nodes
        self._index_by_uid = {node.uid: idx for idx, node in enumerate(nodes)}

    def contains_line(self, line_index: int) -> bool:
        return self.start_line_index <= line_index < self.end_line_index

    def node_at(self, index: int) -> FileNode | None:
        if 0 <= index < len(self.flattened_nodes):
            return self.flattened_nodes[index]
        return None

    def index_of(self, node: FileNode) -> int | None:
        return self._index_by_uid.get(node.uid)

    def index_of_uid(self, uid: str) -> int | None:
        return self._index_by_uid.get(uid)


def visible_children(
    model: TreeModel,
    node: FileNode,
    *,
    show_hidden: bool,
    node_filter: NodeFilter | None = None,
) -> list[FileNode]:
    """Return filtered children and set their first/last-in-level flags."""
    children = model.children_of(node) or []
    for child in children:
        child.is_first_in_level = False
        child.is_last_in_level = False
    visible = [
        child
        for child in children
        if (show_hidden or not child.hidden) and (node_filter is None or node_filter(child))
    ]
    if visible:
        visible[0].is_first_in_level = True
        visible[-1].is_last_in_level = True
    return visible


def flatten_tree(
    model: TreeModel,
    expand_store: ExpandStore | None = None,
    *,
    show_hidden: bool,
    node_filter: NodeFilter | None = None,
) -> list[FileNode]:
    """Pre-order rows: the root, then expanded and loaded subtrees."""
    store = expand_store if expand_store is not None else model.expand_store
    root = model.root_node
    root.is_first_in_level = True
    root.is_last_in_level = True
    rows: list[FileNode] = [root]

    def opened(node: FileNode) -> bool:
        return node.directory and node.children is not None and store.is_expanded(node.fullpath)

    if not opened(root):
        return rows

    stack: list[Iterator[FileNode]] = [
        iter(visible_children(model, root, show_hidden=show_hidden, node_filter=node_filter))
    ]
    while stack:
        node = next(stack[-1], None)
        if node is None:
            stack.pop()
            continue
        rows.append(node)
        if opened(node):
            stack.append(iter(visible_children(model, node, show_hidden=show_hidden, node_filter=node_filter)))
    return rows


def assign_line_ranges(views: Sequence[SourceView], offset: int = 0) -> int:
    """Lay sources out back to back from ``offset``; return the end line."""
    line = offset
    for view in views:
        view.start_line_index = line
        line = view.end_line_index
    return line


__all__ = [
    "NodeFilter",
    "SourceView",
    "assign_line_ranges",
    "flatten_tree",
    "visible_children",
]
