"""Explorer session: sources laid out on one text surface.

The explorer owns every piece of shared state (expand store, buffers,
prompter, notifications) so nothing process-wide lives in module globals.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence

from .actions.prompts import AutoPrompter, Prompter
from .buffers import BufferRegistry
from .errors import ExplorerError, Severity, format_error
from .file_tree_model import ExpandStore, FileSystem, LocalFileSystem
from .runtime.config import ExplorerSettings
from .runtime.system_clipboard import copy_text_to_clipboard
from .runtime.throttle import Scheduler
from .sources.file_source import FileSource
from .tree_model import SourceView, assign_line_ranges
from .tree_pane import Locator, MemorySurface, TextSurface
from .ui_theme import DEFAULT_THEME, UITheme

logger = logging.getLogger(__name__)

Notifier = Callable[[str, Severity], None]


class Explorer:
    """Multi-source tree view session."""

    def __init__(
        self,
        *,
        surface: TextSurface | None = None,
        fs: FileSystem | None = None,
        expand_store: ExpandStore | None = None,
        settings: ExplorerSettings | None = None,
        prompter: Prompter | None = None,
        buffers: BufferRegistry | None = None,
        theme: UITheme | None = None,
        clipboard_writer: Callable[[str], bool] = copy_text_to_clipboard,
        notifier: Notifier | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.surface: TextSurface = surface if surface is not None else MemorySurface()
        self.fs: FileSystem = fs if fs is not None else LocalFileSystem()
        self.expand_store = expand_store if expand_store is not None else ExpandStore()
        self.settings = settings if settings is not None else ExplorerSettings()
        self.prompter: Prompter = prompter if prompter is not None else AutoPrompter(assume_yes=False)
        self.buffers = buffers if buffers is not None else BufferRegistry()
        self.theme = theme if theme is not None else DEFAULT_THEME
        self.clipboard_writer = clipboard_writer
        self.notifier = notifier
        self.scheduler = scheduler
        self.sources: list[FileSource] = []
        self.messages: list[tuple[str, Severity]] = []
        self.locator = Locator(self.views, self.surface)

    @property
    def views(self) -> list[SourceView]:
        return [source.view for source in self.sources]

    def add_file_source(self, root: str | os.PathLike[str], *, name: str | None = None) -> FileSource:
        """Append a file source; names are made unique with a numeric suffix."""
        base = name or "file"
        taken = {source.name for source in self.sources}
        unique = base
        index = 2
        while unique in taken:
            unique = f"{base}{index}"
            index += 1
        source = FileSource(self, root, name=unique, settings=self.settings, scheduler=self.scheduler)
        self.sources.append(source)
        self.locator = Locator(self.views, self.surface)
        return source

    async def start(self) -> None:
        for source in self.sources:
            await source.start()
        await self.render()

    def close(self) -> None:
        for source in self.sources:
            source.close()

    def notify(self, message: str, severity: Severity = "information") -> None:
        self.messages.append((message, severity))
        if severity == "information":
            logger.debug("notify: %s", message)
        else:
            logger.info("notify[%s]: %s", severity, message)
        if self.notifier is not None:
            self.notifier(message, severity)

    async def render(self) -> None:
        """Flatten every source, lay them out in order, and rewrite the surface."""
        lines: list[str] = []
        for source in self.sources:
            source.flatten()
        assign_line_ranges(self.views)
        for source in self.sources:
            lines.extend(source.rows())
        await self.surface.write_lines(0, None, lines)
        await self.surface.redraw()

    async def render_source(self, source: FileSource) -> None:
        """Rewrite one source's range; a changed row count re-lays out everything."""
        if source not in self.sources:
            return
        view = source.view
        old_length = len(view.flattened_nodes)
        start = view.start_line_index
        source.flatten()
        if len(view.flattened_nodes) != old_length:
            await self.render()
            return
        await self.surface.write_lines(start, start + old_length, source.rows())
        await self.surface.redraw()

    def source_at(self, cursor_line: int) -> FileSource | None:
        index = self.locator.view_index_at(cursor_line - 1)
        return None if index is None else self.sources[index]

    async def do_action(
        self,
        name: str,
        args: Sequence[str] = (),
        *,
        line: int | None = None,
    ) -> bool:
        """Run ``name`` against the node under the cursor.

        ``line`` moves the cursor first. Failures are reported through
        ``notify``; the return value tells whether the action completed.
        """
        if line is not None:
            await self.surface.set_cursor(line)
        line, _col = await self.surface.get_cursor()
        source = self.source_at(line)
        cursor = self.locator.node_at(line)
        if source is None:
            if not self.sources:
                self.notify("No source to run the action on", "error")
                return False
            source = self.sources[0]
            cursor = None
        try:
            await source.do_action(name, args, cursor=cursor)
        except ExplorerError as exc:
            text, severity = format_error(exc)
            self.notify(text, severity)
            return False
        return True


__all__ = ["Explorer", "Notifier"]
