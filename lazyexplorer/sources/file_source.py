"""File source: one root directory projected into a contiguous row range.

The source owns its tree model, view, clipboard marks, and selection. Actions
run one at a time under ``action_lock``; read-after-mutate sequences (reload
then reveal, for instance) run inside the source's ``SyncScope``.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Coroutine, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from ..actions.file_actions import load_file_actions
from ..actions.prompts import Prompter
from ..actions.registry import ActionOutcome, ActionRegistry, ActionTarget
from ..buffers import BufferRegistry
from ..clipboard import ClipboardState
from ..errors import ActionError, ExplorerError, Severity, format_error
from ..file_tree_model import ExpandStore, FileNode, FileSystem, TreeModel
from ..file_tree_model.model import is_under, normalize_path
from ..git_status import collect_git_status_overlay
from ..runtime.config import ExplorerSettings
from ..runtime.sync import SyncScope
from ..runtime.throttle import Debouncer, Scheduler, Throttler, debounce, throttle
from ..tree_model import (
    NodeFilter,
    RowContext,
    SourceView,
    flatten_tree,
    format_node_row,
    format_root_row,
)

if TYPE_CHECKING:
    from ..actions.guard import GuardReport
    from ..explorer import Explorer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncHandle:
    """Operations available inside a sync scope body.

    The handle deliberately has no way back to the scope, so a body cannot
    open a nested scope on the same source.
    """

    def __init__(self, source: FileSource) -> None:
        self._source = source

    async def reload(self, node: FileNode | None = None, *, force: bool = False) -> None:
        await self._source.reload(node, force=force)

    async def reveal(self, path: str, start: FileNode | None = None) -> FileNode | None:
        return await self._source.model.reveal(path, start)

    async def render(self) -> None:
        await self._source.render()

    async def goto(self, node: FileNode) -> bool:
        return await self._source.goto_node(node)


class FileSource:
    """Tree of one root directory plus its marks and actions."""

    def __init__(
        self,
        explorer: Explorer,
        root: str | os.PathLike[str],
        *,
        name: str = "file",
        settings: ExplorerSettings | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.explorer = explorer
        self.name = name
        self.settings = settings if settings is not None else explorer.settings
        self.model = TreeModel(
            root,
            explorer.fs,
            explorer.expand_store,
            source_name=name,
            auto_expand_single_directory=self.settings.auto_expand_single_directory,
        )
        self.view = SourceView(name)
        self.clipboard = ClipboardState()
        self.selection: dict[str, FileNode] = {}
        self.show_hidden = self.settings.show_hidden
        self.show_only_git_change = False
        self.git_status_overlay: dict[str, int] = {}
        self.action_lock = asyncio.Lock()
        self.scope: SyncScope[SyncHandle] = SyncScope(SyncHandle(self))
        self.registry: ActionRegistry[FileSource] = ActionRegistry()
        load_file_actions(self.registry)
        self._buffer_render: Debouncer[None] = debounce(
            self.settings.buffer_debounce,
            self.render,
            scheduler=scheduler,
        )
        self._focus_reveal: Throttler[FileNode | None] = throttle(
            self.settings.reveal_throttle,
            self.reveal_focused,
            tail=True,
            scheduler=scheduler,
        )
        self._tasks: set[asyncio.Future[object]] = set()
        self._dispose_buffer_listener = explorer.buffers.on_change(self._on_buffer_change)
        self._dispose_enter_listener = explorer.buffers.on_enter(self._on_buffer_enter)

    @property
    def root(self) -> str:
        return self.model.root

    @property
    def fs(self) -> FileSystem:
        return self.explorer.fs

    @property
    def expand_store(self) -> ExpandStore:
        return self.explorer.expand_store

    @property
    def buffers(self) -> BufferRegistry:
        return self.explorer.buffers

    @property
    def prompter(self) -> Prompter:
        return self.explorer.prompter

    async def start(self) -> None:
        if self.settings.root_expanded:
            self.expand_store.expand(self.root)
        await self.reload()

    def close(self) -> None:
        self._dispose_buffer_listener()
        self._buffer_render.cancel()
        self._dispose_enter_listener()
        self._focus_reveal.cancel()

    async def reload(self, node: FileNode | None = None, *, force: bool = False) -> None:
        """Reload ``node`` (default: root) and its expanded descendants."""
        await self.model.load(node, force=force)
        await self.refresh_git_status()
        self._prune_marks()

    async def refresh_git_status(self) -> None:
        if not (self.settings.show_git_status or self.show_only_git_change):
            self.git_status_overlay = {}
            return
        self.git_status_overlay = await asyncio.to_thread(collect_git_status_overlay, self.root)

    def _prune_marks(self) -> None:
        nodes = self.model.nodes
        for uid in [uid for uid, node in self.selection.items() if nodes.get(node.fullpath) is not node]:
            del self.selection[uid]

    async def prune_missing_marks(self) -> list[str]:
        """Drop copy and cut marks whose paths are gone from disk.

        Marks are kept by path across reloads and root changes, so paste
        checks the disk instead of the current tree.
        """
        dropped: list[str] = []
        for marks in (self.clipboard.copied, self.clipboard.cutted):
            for uid, node in list(marks.items()):
                if not await self.fs.exists(node.fullpath):
                    del marks[uid]
                    dropped.append(node.fullpath)
        if dropped:
            logger.info("Dropped clipboard marks for missing paths: %s", ", ".join(dropped))
        return dropped

    async def change_root(self, path: str | os.PathLike[str]) -> FileNode:
        """Re-root the tree at ``path``, expand it, and load it."""
        root = self.model.cd(path)
        self.selection.clear()
        self.expand_store.expand(root.fullpath)
        await self.reload()
        return self.model.root_node

    def node_filter(self) -> NodeFilter | None:
        if not self.show_only_git_change:
            return None
        overlay = self.git_status_overlay
        return lambda node: bool(overlay.get(node.fullpath))

    def flatten(self) -> list[FileNode]:
        nodes = flatten_tree(
            self.model,
            self.expand_store,
            show_hidden=self.show_hidden,
            node_filter=self.node_filter(),
        )
        self.view.update(nodes)
        return nodes

    def row_context(self) -> RowContext:
        return RowContext(
            expand_store=self.expand_store,
            columns=self.settings.columns,
            theme=self.explorer.theme,
            selected=frozenset(self.selection),
            copied=frozenset(self.clipboard.copied),
            cut=frozenset(self.clipboard.cutted),
            git_status_overlay=self.git_status_overlay,
            buffer_modified=lambda node: self.buffers.is_modified(node.fullpath, directory=node.directory),
        )

    def rows(self) -> list[str]:
        ctx = self.row_context()
        rows: list[str] = []
        for node in self.view.flattened_nodes:
            if node.is_root:
                rows.append(
                    format_root_row(
                        node,
                        expanded=self.expand_store.is_expanded(node.fullpath),
                        show_hidden=self.show_hidden,
                        theme=self.explorer.theme,
                    )
                )
            else:
                rows.append(format_node_row(self.model, node, ctx))
        return rows

    async def render(self) -> None:
        await self.explorer.render_source(self)

    async def sync(self, body: Callable[[SyncHandle], Awaitable[T]]) -> T:
        return await self.scope.run(body)

    async def goto_node(self, node: FileNode) -> bool:
        return await self.explorer.locator.goto_node(self.view, node)

    async def goto_uid(self, uid: str) -> bool:
        return await self.explorer.locator.goto_uid(self.view, uid)

    def action_target(self, cursor: FileNode | None) -> ActionTarget:
        return ActionTarget(
            root=self.model.root_node,
            cursor=cursor,
            selection=tuple(self.selection.values()),
        )

    async def do_action(
        self,
        name: str,
        args: Sequence[str] = (),
        *,
        cursor: FileNode | None = None,
    ) -> ActionOutcome:
        """Dispatch ``name`` after any action already running on this source."""
        async with self.action_lock:
            outcome = await self.registry.dispatch(self, name, args, self.action_target(cursor))
            if outcome.action.multi_select and self.selection:
                self.selection.clear()
                await self.render()
            return outcome

    def require_not_root(self, nodes: Sequence[FileNode], operation: str) -> None:
        for node in nodes:
            if node.is_root:
                raise ActionError(message=f"Cannot {operation} the root directory", paths=(node.fullpath,))

    def resolve_user_path(self, path: str, base: str | None = None) -> str:
        """Expand ``~`` and resolve relative paths against ``base`` (default root)."""
        expanded = os.path.expanduser(path.strip())
        if not os.path.isabs(expanded):
            expanded = os.path.join(base or self.root, expanded)
        return normalize_path(expanded)

    def contains_path(self, path: str) -> bool:
        return path == self.root or is_under(path, self.root)

    def notify(self, message: str, severity: Severity = "information") -> None:
        self.explorer.notify(message, severity)

    def notify_error(self, error: ExplorerError) -> None:
        text, severity = format_error(error)
        self.explorer.notify(text, severity)

    def notify_report(self, operation: str, report: GuardReport) -> None:
        for _pair, error in report.failed:
            self.notify_error(error)
        if report.aborted:
            self.notify(f"{operation.capitalize()} aborted", "warning")

    def copy_to_clipboard(self, text: str, label: str) -> None:
        if self.explorer.clipboard_writer(text):
            self.notify(f"Copy {label} to clipboard")
        else:
            self.notify(f"Could not copy {label} to clipboard", "warning")

    async def reveal_focused(self, path: str) -> FileNode | None:
        """Reload, reveal ``path``, render, and put the cursor on it."""

        async def body(handle: SyncHandle) -> FileNode | None:
            await handle.reload()
            node = await handle.reveal(path)
            if node is None:
                return None
            await handle.render()
            await handle.goto(node)
            return node

        try:
            return await self.sync(body)
        except ExplorerError as exc:
            self.notify_error(exc)
            return None

    def _spawn(self, start: Callable[[], Coroutine[Any, Any, object]], path: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop for buffer event on %s", path)
            return
        task = loop.create_task(start())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_buffer_change(self, path: str) -> None:
        if self.contains_path(path):
            self._spawn(self._buffer_render, path)

    def _on_buffer_enter(self, path: str) -> None:
        if self.settings.auto_reveal and self.contains_path(path):
            self._spawn(lambda: self._focus_reveal(path), path)


__all__ = ["FileSource", "SyncHandle"]
