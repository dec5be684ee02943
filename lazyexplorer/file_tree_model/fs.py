"""Filesystem collaborator used by the tree model and file actions.

Listing reports per-entry failures as ``ListEntryError`` values so one bad
entry never aborts its siblings. Mutations raise ``FileOperationError``.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import stat as stat_module
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from send2trash import send2trash

from ..errors import ListEntryError, wrap_error
from .types import DirectoryChild, FileStat

ListingResult = tuple[list[DirectoryChild], OSError | None, list[ListEntryError]]


class FileSystem(Protocol):
    """Async filesystem boundary consumed by ``TreeModel`` and actions."""

    async def list_directory(self, directory: str) -> ListingResult: ...

    async def stat_node(self, path: str) -> DirectoryChild: ...

    async def exists(self, path: str) -> bool: ...

    async def copy(self, source: str, target: str) -> None: ...

    async def move(self, source: str, target: str) -> None: ...

    async def trash(self, paths: Sequence[str]) -> None: ...

    async def delete_permanently(self, path: str) -> None: ...

    async def create_file(self, path: str) -> None: ...

    async def create_directory(self, path: str) -> None: ...

    async def open_with_system_application(self, path: str) -> None: ...


def _file_stat(st: os.stat_result) -> FileStat:
    is_dir = stat_module.S_ISDIR(st.st_mode)
    return FileStat(
        size=None if is_dir else int(st.st_size),
        mtime_ns=int(st.st_mtime_ns),
        ctime_ns=int(st.st_ctime_ns),
        mode=int(st.st_mode),
    )


def describe_path(path: str) -> DirectoryChild:
    """Stat ``path`` (following symlinks) and probe its permissions."""
    st = os.stat(path)
    return DirectoryChild(
        name=os.path.basename(path.rstrip(os.sep)) or path,
        path=path,
        is_dir=stat_module.S_ISDIR(st.st_mode),
        readable=os.access(path, os.R_OK),
        writable=os.access(path, os.W_OK),
        executable=os.access(path, os.X_OK),
        stat=_file_stat(st),
        symlink=os.path.islink(path),
    )


def list_directory_children(directory: str) -> ListingResult:
    """List ``directory`` entries with metadata, unsorted.

    Returns ``(children, scan_error, entry_errors)``. ``scan_error`` is set
    when the directory itself cannot be scanned.
    """
    children: list[DirectoryChild] = []
    entry_errors: list[ListEntryError] = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    children.append(describe_path(entry.path))
                except OSError as exc:
                    entry_errors.append(
                        ListEntryError(
                            message=f"Cannot read {entry.path}",
                            paths=(entry.path,),
                            detail=exc.strerror or str(exc),
                            severity="warning",
                        )
                    )
    except OSError as exc:
        return [], exc, []
    return children, None, entry_errors


def _remove_path(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.unlink(path)


def _copy_path(source: str, target: str) -> None:
    Path(target).parent.mkdir(parents=True, exist_ok=True)
    if os.path.isdir(source) and not os.path.islink(source):
        shutil.copytree(source, target, symlinks=True)
    else:
        shutil.copy2(source, target, follow_symlinks=False)


def _move_path(source: str, target: str) -> None:
    Path(target).parent.mkdir(parents=True, exist_ok=True)
    shutil.move(source, target)


def _create_file(path: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.touch()


def _open_with_default_app(path: str) -> None:
    if sys.platform == "darwin":
        subprocess.run(["open", path], check=True)
    elif sys.platform == "win32":
        os.startfile(path)  # type: ignore[attr-defined]
    else:
        subprocess.run(["xdg-open", path], check=True)


class LocalFileSystem:
    """``FileSystem`` over the local disk; blocking work runs in threads."""

    async def list_directory(self, directory: str) -> ListingResult:
        return await asyncio.to_thread(list_directory_children, directory)

    async def stat_node(self, path: str) -> DirectoryChild:
        try:
            return await asyncio.to_thread(describe_path, path)
        except OSError as exc:
            raise wrap_error(exc, message=f"Cannot stat {path}", paths=(path,)) from exc

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(os.path.lexists, path)

    async def copy(self, source: str, target: str) -> None:
        try:
            await asyncio.to_thread(_copy_path, source, target)
        except (OSError, shutil.Error) as exc:
            raise wrap_error(exc, message=f"Copy {source} to {target} failed", paths=(source, target)) from exc

    async def move(self, source: str, target: str) -> None:
        try:
            await asyncio.to_thread(_move_path, source, target)
        except (OSError, shutil.Error) as exc:
            raise wrap_error(exc, message=f"Move {source} to {target} failed", paths=(source, target)) from exc

    async def trash(self, paths: Sequence[str]) -> None:
        try:
            await asyncio.to_thread(send2trash, list(paths))
        except OSError as exc:
            raise wrap_error(exc, message="Move to trash failed", paths=tuple(paths)) from exc

    async def delete_permanently(self, path: str) -> None:
        try:
            await asyncio.to_thread(_remove_path, path)
        except OSError as exc:
            raise wrap_error(exc, message=f"Delete {path} failed", paths=(path,)) from exc

    async def create_file(self, path: str) -> None:
        try:
            await asyncio.to_thread(_create_file, path)
        except OSError as exc:
            raise wrap_error(exc, message=f"Create file {path} failed", paths=(path,)) from exc

    async def create_directory(self, path: str) -> None:
        try:
            await asyncio.to_thread(os.makedirs, path, exist_ok=True)
        except OSError as exc:
            raise wrap_error(exc, message=f"Create directory {path} failed", paths=(path,)) from exc

    async def open_with_system_application(self, path: str) -> None:
        try:
            await asyncio.to_thread(_open_with_default_app, path)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise wrap_error(exc, message=f"Open {path} failed", paths=(path,)) from exc


__all__ = [
    "FileSystem",
    "ListingResult",
    "LocalFileSystem",
    "describe_path",
    "list_directory_children",
]
