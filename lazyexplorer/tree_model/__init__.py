"""Tree projection into rows and row formatting.

Defines ``SourceView`` and the flatten pass for expanded tree subsets.
Also formats rows with clipboard marks and git status badges.
"""

from __future__ import annotations

from .projection import NodeFilter, SourceView, assign_line_ranges, flatten_tree, visible_children
from .rendering import (
    RowContext,
    file_type_label,
    format_node_row,
    format_root_row,
    format_size,
    format_timestamp,
    tree_prefix,
)

__all__ = [
    "NodeFilter",
    "SourceView",
    "assign_line_ranges",
    "flatten_tree",
    "visible_children",
    "RowContext",
    "file_type_label",
    "format_node_row",
    "format_root_row",
    "format_size",
    "format_timestamp",
    "tree_prefix",
]
