"""Formatting helpers for root and node rows.

Connector glyphs come from the ``is_last_in_level`` flags set by the most
recent flatten pass, so rows must be formatted after flattening.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from ..file_tree_model import ExpandStore, FileNode, TreeModel
from ..git_status import format_git_status_badges
from ..ui_theme import DEFAULT_THEME, UITheme

EXPANDED_MARKER = "▾ "
COLLAPSED_MARKER = "▸ "
FILE_MARKER = "  "
CONNECTOR_PIPE = "│ "
CONNECTOR_BLANK = "  "
CONNECTOR_TEE = "├ "
CONNECTOR_ELBOW = "└ "
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


@dataclass(frozen=True)
class RowContext:
    """Per-render inputs shared by every node row of one source."""

    expand_store: ExpandStore
    columns: tuple[str, ...] = ()
    theme: UITheme = DEFAULT_THEME
    selected: Collection[str] = frozenset()
    copied: Collection[str] = frozenset()
    cut: Collection[str] = frozenset()
    git_status_overlay: Mapping[str, int] = field(default_factory=dict)
    buffer_modified: Callable[[FileNode], bool] | None = None


def format_size(size: int | None) -> str:
    """Compact human-readable byte count (``512B``, ``1.5K``, ``12M``)."""
    if size is None:
        return ""
    value = float(size)
    for unit in ("B", "K", "M", "G", "T"):
        if value < 1024 or unit == "T":
            if unit == "B":
                return f"{int(value)}B"
            return f"{value:.1f}{unit}" if value < 10 else f"{int(value)}{unit}"
        value /= 1024
    return ""


def format_timestamp(ns: int | None) -> str:
    if ns is None:
        return ""
    return datetime.fromtimestamp(ns / 1_000_000_000).strftime(TIMESTAMP_FORMAT)


@lru_cache(maxsize=512)
def file_type_label(name: str) -> str | None:
    """Return the pygments lexer name for ``name`` or ``None`` if unknown."""
    try:
        return get_lexer_for_filename(name).name
    except ClassNotFound:
        return None


def tree_prefix(model: TreeModel, node: FileNode) -> str:
    """Connector glyphs for ``node`` from its own and ancestors' last flags."""
    if node.level <= 0:
        return ""
    parts = [CONNECTOR_ELBOW if node.is_last_in_level else CONNECTOR_TEE]
    for ancestor in model.ancestors(node):
        if ancestor.level <= 0:
            break
        parts.append(CONNECTOR_BLANK if ancestor.is_last_in_level else CONNECTOR_PIPE)
    return "".join(reversed(parts))


def format_root_row(
    node: FileNode,
    *,
    expanded: bool,
    show_hidden: bool,
    theme: UITheme | None = None,
    title: str = "FILE",
) -> str:
    """Header row: marker, ``[FILE]`` title, root name, and full path."""
    active_theme = theme or DEFAULT_THEME
    reset = active_theme.reset
    marker = EXPANDED_MARKER if expanded else COLLAPSED_MARKER
    flags = " I" if show_hidden else ""
    return (
        f"{active_theme.tree_marker}{marker}{reset}"
        f"{active_theme.root_title}[{title}{flags}]:{reset} "
        f"{node.name} "
        f"{active_theme.root_path}{node.fullpath}{reset}"
    )


def _name_color(node: FileNode, theme: UITheme) -> str:
    if node.directory:
        return theme.tree_dir
    if node.hidden:
        return theme.tree_hidden
    if node.readonly:
        return theme.tree_readonly
    if node.executable:
        return theme.tree_file_executable
    return theme.tree_file_default


def format_node_row(model: TreeModel, node: FileNode, ctx: RowContext) -> str:
    """Render one node row with marks, connectors, name, and columns."""
    theme = ctx.theme
    reset = theme.reset
    columns = ctx.columns
    out: list[str] = []

    if "selection" in columns:
        out.append(f"{theme.selection}+{reset}" if node.uid in ctx.selected else " ")
    if "clip" in columns:
        if node.uid in ctx.copied:
            out.append(f"{theme.clip_copied}*{reset}")
        elif node.uid in ctx.cut:
            out.append(f"{theme.clip_cut}x{reset}")
        else:
            out.append(" ")

    out.append(f"{theme.tree_connector}{tree_prefix(model, node)}{reset}")
    if node.directory:
        marker = EXPANDED_MARKER if ctx.expand_store.is_expanded(node.fullpath) else COLLAPSED_MARKER
        out.append(f"{theme.tree_marker}{marker}{reset}")
        out.append(f"{theme.tree_dir}{node.name}/{reset}")
    else:
        out.append(FILE_MARKER)
        out.append(f"{_name_color(node, theme)}{node.name}{reset}")

    extras: list[str] = []
    for column in columns:
        if column == "git":
            badges = format_git_status_badges(ctx.git_status_overlay.get(node.fullpath, 0), theme)
            if badges:
                extras.append(badges)
        elif column == "modified_buffer":
            if ctx.buffer_modified is not None and ctx.buffer_modified(node):
                extras.append(f"{theme.buffer_modified}+{reset}")
        elif column == "size":
            if not node.directory and node.stat.size is not None:
                extras.append(f"{theme.tree_size}{format_size(node.stat.size)}{reset}")
        elif column == "modified":
            if node.stat.mtime_ns is not None:
                extras.append(f"{theme.tree_timestamp}{format_timestamp(node.stat.mtime_ns)}{reset}")
        elif column == "created":
            if node.stat.ctime_ns is not None:
                extras.append(f"{theme.tree_timestamp}{format_timestamp(node.stat.ctime_ns)}{reset}")
        elif column == "filetype":
            label = None if node.directory else file_type_label(os.path.basename(node.fullpath))
            if label:
                extras.append(f"{theme.tree_filetype}{label}{reset}")

    row = "".join(out)
    if extras:
        row = f"{row} {' '.join(extras)}"
    return row


__all__ = [
    "RowContext",
    "file_type_label",
    "format_node_row",
    "format_root_row",
    "format_size",
    "format_timestamp",
    "tree_prefix",
]
