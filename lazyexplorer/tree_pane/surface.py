"""Line-addressed text surface that sources render into."""

from __future__ import annotations

from typing import Protocol


class TextSurface(Protocol):
    """Cursor and line primitives; lines are 1-indexed for the cursor only."""

    async def get_cursor(self) -> tuple[int, int]: ...

    async def set_cursor(self, line: int, col: int = 0) -> None: ...

    async def write_lines(self, start: int, end: int | None, lines: list[str]) -> None: ...

    async def line_count(self) -> int: ...

    async def redraw(self) -> None: ...


class MemorySurface:
    """In-process surface: a list of lines plus a clamped cursor."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.cursor: tuple[int, int] = (1, 0)
        self.redraw_count = 0

    async def get_cursor(self) -> tuple[int, int]:
        return self.cursor

    async def set_cursor(self, line: int, col: int = 0) -> None:
        last = max(1, len(self.lines))
        self.cursor = (max(1, min(line, last)), max(0, col))

    async def write_lines(self, start: int, end: int | None, lines: list[str]) -> None:
        """Replace ``lines[start:end]``; ``end=None`` replaces to the end."""
        stop = len(self.lines) if end is None else end
        self.lines[start:stop] = lines
        line, col = self.cursor
        if line > max(1, len(self.lines)):
            self.cursor = (max(1, len(self.lines)), col)

    async def line_count(self) -> int:
        return len(self.lines)

    async def redraw(self) -> None:
        self.redraw_count += 1

    def text(self) -> str:
        return "\n".join(self.lines)


__all__ = ["MemorySurface", "TextSurface"]
