"""Open-buffer bookkeeping consulted before destructive file actions.

The registry only knows paths and a modified flag. Listeners are notified on
every change; sources debounce those notifications into one render. Focus
changes go to separate ``on_enter`` listeners.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable

from .file_tree_model.model import is_under, normalize_path

logger = logging.getLogger(__name__)

BufferListener = Callable[[str], object]


class BufferRegistry:
    """``path -> modified`` for buffers the user has open."""

    def __init__(self) -> None:
        self._buffers: dict[str, bool] = {}
        self._listeners: list[BufferListener] = []
        self._enter_listeners: list[BufferListener] = []

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return normalize_path(path) in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)

    def on_change(self, listener: BufferListener) -> Callable[[], None]:
        """Register ``listener(path)``; return a function that unregisters it."""
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def on_enter(self, listener: BufferListener) -> Callable[[], None]:
        """Register ``listener(path)`` for focus changes; return its disposer."""
        self._enter_listeners.append(listener)

        def dispose() -> None:
            if listener in self._enter_listeners:
                self._enter_listeners.remove(listener)

        return dispose

    def enter(self, path: str | os.PathLike[str]) -> None:
        """Record that the buffer at ``path`` gained focus, opening it if needed."""
        key = normalize_path(path)
        if key not in self._buffers:
            self.open(key)
        for listener in list(self._enter_listeners):
            listener(key)

    def _notify(self, path: str) -> None:
        for listener in list(self._listeners):
            listener(path)

    def open(self, path: str | os.PathLike[str], *, modified: bool = False) -> None:
        key = normalize_path(path)
        self._buffers[key] = modified
        self._notify(key)

    def set_modified(self, path: str | os.PathLike[str], modified: bool = True) -> None:
        key = normalize_path(path)
        if self._buffers.get(key) == modified:
            return
        self._buffers[key] = modified
        self._notify(key)

    def modified_paths(self, path: str | os.PathLike[str], *, directory: bool = False) -> list[str]:
        """Modified buffers at ``path`` or, for a directory, anywhere under it."""
        key = normalize_path(path)
        return [
            buffer_path
            for buffer_path, modified in self._buffers.items()
            if modified and (buffer_path == key or (directory and is_under(buffer_path, key)))
        ]

    def is_modified(self, path: str | os.PathLike[str], *, directory: bool = False) -> bool:
        return bool(self.modified_paths(path, directory=directory))

    def remove(self, paths: Iterable[str], *, directory: bool = False) -> list[str]:
        """Drop buffers at ``paths`` (and below them for directories)."""
        removed: list[str] = []
        for path in paths:
            key = normalize_path(path)
            for buffer_path in list(self._buffers):
                if buffer_path == key or (directory and is_under(buffer_path, key)):
                    del self._buffers[buffer_path]
                    removed.append(buffer_path)
        for buffer_path in removed:
            logger.debug("Closed buffer %s", buffer_path)
            self._notify(buffer_path)
        return removed

    def rename(self, source: str, target: str) -> list[tuple[str, str]]:
        """Re-point buffers from ``source`` (or below it) to ``target``."""
        old_root = normalize_path(source)
        new_root = normalize_path(target)
        moved: list[tuple[str, str]] = []
        for buffer_path in list(self._buffers):
            if buffer_path == old_root:
                new_path = new_root
            elif is_under(buffer_path, old_root):
                new_path = new_root + buffer_path[len(old_root):]
            else:
                continue
            self._buffers[new_path] = self._buffers.pop(buffer_path)
            moved.append((buffer_path, new_path))
        for _old, new_path in moved:
            self._notify(new_path)
        return moved


__all__ = ["BufferListener", "BufferRegistry"]
