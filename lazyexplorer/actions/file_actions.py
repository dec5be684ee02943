"""Action table of the file source.

Handlers receive an ``ActionContext`` whose ``source`` is the ``FileSource``
they run against. Handlers that move the cursor render first themselves;
everything else relies on the ``reload``/``render`` options.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ..clipboard import parse_copy_or_cut_mode, parse_paste_mode
from ..errors import ActionError, ExplorerError
from ..file_tree_model import FileNode
from ..file_tree_model.model import normalize_path
from ..git_status import stage_paths, unstage_paths
from ..runtime.logging import log_event
from .guard import ApplyFn, PlannedPair, overwrite_prompt, reject_existing_targets
from .registry import ActionArg, ActionContext, ActionKind, ActionOptions, ActionRegistry

if TYPE_CHECKING:
    from ..sources.file_source import FileSource, SyncHandle

logger = logging.getLogger(__name__)

Ctx = ActionContext["FileSource"]

COPY_OR_CUT_OPTIONS = ActionOptions(
    render=True,
    args=(ActionArg("type", "toggle | append | replace, default: toggle"),),
    menus={
        "toggle": "toggle mark",
        "append": "append mark",
        "replace": "remove all mark then add one mark",
    },
)
PASTE_OPTIONS = ActionOptions(
    reload=True,
    args=(ActionArg("type", "clear | keepCopy, default: clear"),),
    menus={
        "keepCopy": "keep copy mark",
        "clear": "clear copy and cut mark",
    },
)
PATH_ARG = (ActionArg("path", "path string"),)


# Display and navigation.


async def toggle_hidden(ctx: Ctx) -> None:
    ctx.source.show_hidden = not ctx.source.show_hidden


async def toggle_only_git_change(ctx: Ctx) -> None:
    source = ctx.source
    source.show_only_git_change = not source.show_only_git_change

    async def body(handle: SyncHandle) -> None:
        await handle.reload(force=True)

    await source.sync(body)


async def refresh(ctx: Ctx) -> None:
    await ctx.source.reload(force=True)


async def goto_parent(ctx: Ctx) -> None:
    source = ctx.source
    parent = os.path.dirname(source.root)
    if not parent or parent == source.root:
        return
    cursor = await source.explorer.locator.current_node()
    uid = cursor.uid if cursor is not None else source.model.root_node.uid
    await source.change_root(parent)
    await source.render()
    await source.goto_uid(uid)


async def expand_all(ctx: Ctx, root: FileNode) -> None:
    await ctx.source.model.expand_recursive([root], show_hidden=ctx.source.show_hidden)


async def collapse_all(ctx: Ctx, root: FileNode) -> None:
    model = ctx.source.model
    await model.shrink_recursive(model.children_of(root) or [], show_hidden=True)
    model.expand_store.expand(root.fullpath)


async def cd(ctx: Ctx, node: FileNode) -> None:
    source = ctx.source
    path = ctx.arg(0)
    if path is not None:
        target = source.resolve_user_path(path)
        described = await source.fs.stat_node(target)
        if not described.is_dir:
            raise ActionError(message=f"{target} is not a directory", paths=(target,))
    elif node.directory:
        target = node.fullpath
    else:
        return
    await source.change_root(target)
    await source.render()
    await source.goto_node(source.model.root_node)


async def open_node(ctx: Ctx, node: FileNode) -> None:
    if node.directory:
        await ctx.invoke("cd", node)
        return
    buffers = ctx.source.buffers
    if node.fullpath not in buffers:
        buffers.open(node.fullpath)
    ctx.source.notify(f"Opened {node.fullpath}")


async def drop(ctx: Ctx, node: FileNode) -> None:
    if node.directory:
        return
    buffers = ctx.source.buffers
    if node.fullpath in buffers:
        ctx.source.notify(f"Switched to {node.fullpath}")
        return
    buffers.open(node.fullpath)
    ctx.source.notify(f"Opened {node.fullpath}")


# Expand and shrink.


async def expand(ctx: Ctx, node: FileNode) -> None:
    if node.directory:
        await ctx.source.model.expand(node)


async def shrink(ctx: Ctx, node: FileNode) -> None:
    source = ctx.source
    store = source.expand_store
    if node.directory and store.is_expanded(node.fullpath):
        store.shrink(node.fullpath)
        await source.render()
        return
    parent = source.model.parent_of(node)
    if parent is None or parent.is_root:
        return
    store.shrink(parent.fullpath)
    await source.render()
    await source.goto_node(parent)


async def expand_or_shrink(ctx: Ctx, node: FileNode) -> None:
    if not node.directory:
        return
    if ctx.source.expand_store.is_expanded(node.fullpath):
        await ctx.invoke("shrink", node)
    else:
        await ctx.invoke("expand", node)


async def expand_recursive(ctx: Ctx, nodes: list[FileNode]) -> None:
    await ctx.source.model.expand_recursive(nodes, show_hidden=ctx.source.show_hidden)


async def shrink_recursive(ctx: Ctx, nodes: list[FileNode]) -> None:
    await ctx.source.model.shrink_recursive(nodes)


# Selection and reveal.


async def select(ctx: Ctx, node: FileNode) -> None:
    ctx.source.selection[node.uid] = node


async def unselect(ctx: Ctx, node: FileNode) -> None:
    ctx.source.selection.pop(node.uid, None)


async def toggle_selection(ctx: Ctx, node: FileNode) -> None:
    selection = ctx.source.selection
    if node.uid in selection:
        del selection[node.uid]
    else:
        selection[node.uid] = node


async def reveal(ctx: Ctx, node: FileNode) -> FileNode | None:
    """Expand down to a path and put the cursor on it."""
    source = ctx.source
    path = ctx.arg(0)
    if path is None:
        path = await source.prompter.input_text("Input a reveal path:", node.fullpath)
    if not path:
        return None
    target = source.resolve_user_path(path)
    if not source.contains_path(target):
        await source.change_root(os.path.dirname(target))

    async def body(handle: SyncHandle) -> FileNode | None:
        await handle.reload()
        found = await handle.reveal(target)
        await handle.render()
        if found is not None:
            await handle.goto(found)
        return found

    found = await source.sync(body)
    if found is None:
        source.notify(f"{target} not found", "warning")
    return found


# Clipboard.


async def copy_filepath(ctx: Ctx, nodes: list[FileNode]) -> None:
    ctx.source.copy_to_clipboard("\n".join(node.fullpath for node in nodes), "filepath")


async def copy_relative_filepath(ctx: Ctx, nodes: list[FileNode]) -> None:
    root = ctx.source.root
    ctx.source.copy_to_clipboard(
        "\n".join(os.path.relpath(node.fullpath, root) for node in nodes),
        "relative filepath",
    )


async def copy_filename(ctx: Ctx, nodes: list[FileNode]) -> None:
    ctx.source.copy_to_clipboard("\n".join(node.name for node in nodes), "filename")


async def copy_file(ctx: Ctx, nodes: list[FileNode]) -> None:
    ctx.source.clipboard.copy(nodes, parse_copy_or_cut_mode(ctx.arg(0)))


async def cut_file(ctx: Ctx, nodes: list[FileNode]) -> None:
    ctx.source.require_not_root(nodes, "cut")
    ctx.source.clipboard.cut(nodes, parse_copy_or_cut_mode(ctx.arg(0)))


async def paste_file(ctx: Ctx, node: FileNode) -> None:
    """Copy the copied set and move the cut set into the target directory."""
    source = ctx.source
    clipboard = source.clipboard
    mode = parse_paste_mode(ctx.arg(0))
    await source.prune_missing_marks()
    if clipboard.empty:
        source.notify("Copied files or cut files is empty", "error")
        return
    target_dir = source.model.put_target_node(node).fullpath
    copied_count = moved_count = 0

    if clipboard.copied:
        copied = list(clipboard.copied.values())
        report = await overwrite_prompt(
            "paste",
            [PlannedPair(item.fullpath, os.path.join(target_dir, item.name)) for item in copied],
            _transfer(source.fs.copy),
            fs=source.fs,
            prompter=source.prompter,
        )
        copied_count = len(report.applied)
        source.notify_report("paste", report)
        if mode == "clear":
            clipboard.copied.clear()

    if clipboard.cutted:
        cutted = list(clipboard.cutted.values())
        report = await overwrite_prompt(
            "paste",
            [PlannedPair(item.fullpath, os.path.join(target_dir, item.name)) for item in cutted],
            _transfer(source.fs.move),
            fs=source.fs,
            prompter=source.prompter,
        )
        for pair in report.applied:
            if pair.source is not None:
                source.buffers.rename(pair.source, pair.target)
        moved_count = len(report.applied)
        source.notify_report("paste", report)
        clipboard.cutted.clear()
    log_event(logger, "paste", target=target_dir, copied=copied_count, moved=moved_count)


# Mutation.


def _transfer(operation: Callable[[str, str], Awaitable[None]]) -> ApplyFn:
    async def apply(source: str | None, target: str) -> None:
        if source is None:
            raise ActionError(message=f"Nothing to transfer to {target}", paths=(target,))
        await operation(source, target)

    return apply


async def _confirm_discard_buffers(ctx: Ctx, nodes: list[FileNode]) -> bool:
    buffers = ctx.source.buffers
    if not any(buffers.is_modified(node.fullpath, directory=node.directory) for node in nodes):
        return True
    return await ctx.source.prompter.confirm("Buffer is being modified, discard it?")


async def _delete_nodes(ctx: Ctx, nodes: list[FileNode], *, permanently: bool) -> None:
    source = ctx.source
    source.require_not_root(nodes, "delete")
    if not await _confirm_discard_buffers(ctx, nodes):
        return
    listing = "\n".join(node.fullpath for node in nodes)
    question = (
        f"Delete these files or directories permanently?\n{listing}"
        if permanently
        else f"Move these files or directories to trash?\n{listing}"
    )
    if not await source.prompter.confirm(question):
        return
    removed = 0
    for node in nodes:
        try:
            if permanently:
                await source.fs.delete_permanently(node.fullpath)
            else:
                await source.fs.trash([node.fullpath])
        except ExplorerError as exc:
            source.notify_error(exc)
            continue
        source.buffers.remove([node.fullpath], directory=node.directory)
        removed += 1
    log_event(logger, "delete", permanently=permanently, removed=removed, requested=len(nodes))


async def delete(ctx: Ctx, nodes: list[FileNode]) -> None:
    await _delete_nodes(ctx, nodes, permanently=False)


async def delete_forever(ctx: Ctx, nodes: list[FileNode]) -> None:
    await _delete_nodes(ctx, nodes, permanently=True)


async def _reveal_created(ctx: Ctx, put_target: FileNode, target: str) -> None:
    async def body(handle: SyncHandle) -> None:
        await handle.reload(put_target, force=True)
        found = await handle.reveal(target, put_target)
        await handle.render()
        if found is not None:
            await handle.goto(found)

    await ctx.source.sync(body)


async def add_file(ctx: Ctx, node: FileNode) -> None:
    source = ctx.source
    filename = ctx.arg(0)
    if filename is None:
        filename = await source.prompter.input_text("Input a new filename:")
    filename = (filename or "").strip()
    if not filename:
        return
    if filename.endswith(("/", os.sep)):
        await ctx.invoke("addDirectory", node, [filename])
        return
    put_target = source.model.put_target_node(node)
    target = normalize_path(os.path.join(put_target.fullpath, filename))
    await reject_existing_targets([target], source.fs)
    await source.fs.create_file(target)
    await _reveal_created(ctx, put_target, target)


async def add_directory(ctx: Ctx, node: FileNode) -> None:
    source = ctx.source
    name = ctx.arg(0)
    if name is None:
        name = await source.prompter.input_text("Input a new directory name:")
    name = (name or "").strip().rstrip("/" + os.sep)
    if not name:
        return
    put_target = source.model.put_target_node(node)
    target = normalize_path(os.path.join(put_target.fullpath, name))
    await reject_existing_targets([target], source.fs)
    await source.fs.create_directory(target)
    await _reveal_created(ctx, put_target, target)


async def rename(ctx: Ctx, node: FileNode) -> None:
    source = ctx.source
    source.require_not_root([node], "rename")
    if not await _confirm_discard_buffers(ctx, [node]):
        return
    answer = ctx.arg(0)
    if answer is None:
        answer = await source.prompter.input_text(f"Rename: {node.fullpath} ->", node.fullpath)
    answer = (answer or "").strip()
    if not answer:
        return
    target = source.resolve_user_path(answer, os.path.dirname(node.fullpath))
    if target == node.fullpath:
        return
    report = await overwrite_prompt(
        "rename",
        [PlannedPair(node.fullpath, target)],
        _transfer(source.fs.move),
        fs=source.fs,
        prompter=source.prompter,
    )
    source.notify_report("rename", report)
    for pair in report.applied:
        if pair.source is not None:
            source.buffers.rename(pair.source, pair.target)
        await _reveal_created(ctx, source.model.root_node, pair.target)


# System and git.


async def system_execute(ctx: Ctx, nodes: list[FileNode]) -> None:
    for node in nodes:
        try:
            await ctx.source.fs.open_with_system_application(node.fullpath)
        except ExplorerError as exc:
            ctx.source.notify_error(exc)


async def git_stage(ctx: Ctx, nodes: list[FileNode]) -> None:
    await asyncio.to_thread(stage_paths, [node.fullpath for node in nodes])


async def git_unstage(ctx: Ctx, nodes: list[FileNode]) -> None:
    await asyncio.to_thread(unstage_paths, [node.fullpath for node in nodes])


def load_file_actions(registry: ActionRegistry[FileSource]) -> ActionRegistry[FileSource]:
    """Register every file-source action on ``registry``."""
    none, root, node, nodes = ActionKind.NONE, ActionKind.ROOT, ActionKind.NODE, ActionKind.NODES
    render = ActionOptions(render=True)
    reload = ActionOptions(reload=True)
    path_arg = ActionOptions(args=PATH_ARG)

    registry.register("toggleHidden", none, toggle_hidden, "toggle visibility of hidden node", render)
    registry.register(
        "toggleOnlyGitChange", none, toggle_only_git_change, "toggle visibility of git change node", render
    )
    registry.register("refresh", none, refresh, "reload the tree from disk", render)
    registry.register("gotoParent", none, goto_parent, "change directory to parent directory")
    registry.register("expandAll", root, expand_all, "expand all nodes", render)
    registry.register("collapseAll", root, collapse_all, "collapse all nodes", render)
    registry.register("cd", node, cd, "change directory to current node", path_arg)
    registry.register("open", node, open_node, "open file or change directory")
    registry.register("drop", node, drop, "open file by drop command")

    registry.register("expand", node, expand, "expand directory", render)
    registry.register("shrink", node, shrink, "shrink directory")
    registry.register("expandOrShrink", node, expand_or_shrink, "expand or shrink directory")
    registry.register("expandRecursive", nodes, expand_recursive, "expand directory recursively", render)
    registry.register("shrinkRecursive", nodes, shrink_recursive, "shrink directory recursively", render)

    registry.register("select", node, select, "select node", render)
    registry.register("unselect", node, unselect, "unselect node", render)
    registry.register("toggleSelection", node, toggle_selection, "toggle node selection", render)
    registry.register("reveal", node, reveal, "reveal path in explorer", path_arg)

    registry.register("copyFilepath", nodes, copy_filepath, "copy full filepath to clipboard")
    registry.register("copyRelativeFilepath", nodes, copy_relative_filepath, "copy relative filepath to clipboard")
    registry.register("copyFilename", nodes, copy_filename, "copy filename to clipboard")
    registry.register("copyFile", nodes, copy_file, "copy file for paste", COPY_OR_CUT_OPTIONS)
    registry.register("cutFile", nodes, cut_file, "cut file for paste", COPY_OR_CUT_OPTIONS)
    registry.register("pasteFile", node, paste_file, "paste files to here", PASTE_OPTIONS)

    registry.register("delete", nodes, delete, "move file or directory to trash", reload)
    registry.register("deleteForever", nodes, delete_forever, "delete file or directory permanently", reload)
    registry.register(
        "addFile",
        node,
        add_file,
        "add a new file",
        ActionOptions(args=(ActionArg("name", "file name; a trailing / adds a directory"),)),
    )
    registry.register(
        "addDirectory",
        node,
        add_directory,
        "add a new directory",
        ActionOptions(args=(ActionArg("name", "directory name"),)),
    )
    registry.register(
        "rename",
        node,
        rename,
        "rename a file or directory",
        ActionOptions(args=(ActionArg("path", "new path, relative to the node's directory"),)),
    )

    registry.register("systemExecute", nodes, system_execute, "use system application open file or directory")
    registry.register("gitStage", nodes, git_stage, "add file to git index", reload)
    registry.register("gitUnstage", nodes, git_unstage, "reset file from git index", reload)
    return registry


__all__ = ["load_file_actions"]
