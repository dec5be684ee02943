"""Map surface cursor rows to sources and nodes, and nodes back to rows.

Source ranges are sorted and disjoint by construction, so a binary search
over range starts finds the source for a row.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence

from ..file_tree_model import FileNode
from ..tree_model import SourceView
from .surface import TextSurface


class Locator:
    """Cursor/row translation over an ordered list of source views."""

    def __init__(self, views: Sequence[SourceView], surface: TextSurface) -> None:
        self.views = views
        self.surface = surface

    def view_index_at(self, line_index: int) -> int | None:
        """Index of the view whose ``[start, end)`` range holds ``line_index``."""
        starts = [view.start_line_index for view in self.views]
        idx = bisect_right(starts, line_index) - 1
        if idx < 0:
            return None
        if not self.views[idx].contains_line(line_index):
            return None
        return idx

    def view_at(self, cursor_line: int) -> SourceView | None:
        idx = self.view_index_at(cursor_line - 1)
        return None if idx is None else self.views[idx]

    def node_at(self, cursor_line: int) -> FileNode | None:
        """Node under a 1-indexed cursor row, or ``None`` outside any source."""
        line_index = cursor_line - 1
        idx = self.view_index_at(line_index)
        if idx is None:
            return None
        view = self.views[idx]
        return view.node_at(line_index - view.start_line_index)

    def line_of(self, view: SourceView, node: FileNode) -> int | None:
        """1-indexed row of a visible ``node``; ``None`` when not flattened."""
        index = view.index_of(node)
        if index is None:
            return None
        return view.start_line_index + index + 1

    def line_of_uid(self, view: SourceView, uid: str) -> int | None:
        index = view.index_of_uid(uid)
        if index is None:
            return None
        return view.start_line_index + index + 1

    async def current_line(self) -> int:
        line, _col = await self.surface.get_cursor()
        return line

    async def current_node(self) -> FileNode | None:
        return self.node_at(await self.current_line())

    async def goto_node(self, view: SourceView, node: FileNode, col: int | None = None) -> bool:
        """Move the cursor onto ``node``; never expands ancestors."""
        line = self.line_of(view, node)
        if line is None:
            return False
        await self._goto_line(line, col)
        return True

    async def goto_uid(self, view: SourceView, uid: str, col: int | None = None) -> bool:
        line = self.line_of_uid(view, uid)
        if line is None:
            return False
        await self._goto_line(line, col)
        return True

    async def _goto_line(self, line: int, col: int | None) -> None:
        if col is None:
            _line, col = await self.surface.get_cursor()
        await self.surface.set_cursor(line, col)


__all__ = ["Locator"]
