"""Copy/cut marks consumed by paste.

``toggle`` and ``append`` only touch the set being marked; ``replace`` clears
both sets first. Sets keep insertion order so paste runs in marking order.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal, cast

from .errors import ActionError
from .file_tree_model import FileNode

CopyOrCutMode = Literal["toggle", "append", "replace"]
PasteMode = Literal["clear", "keepCopy"]

COPY_OR_CUT_MODES: tuple[CopyOrCutMode, ...] = ("toggle", "append", "replace")
PASTE_MODES: tuple[PasteMode, ...] = ("clear", "keepCopy")


def parse_copy_or_cut_mode(value: str | None) -> CopyOrCutMode:
    mode = value or "toggle"
    if mode not in COPY_OR_CUT_MODES:
        raise ActionError(message=f"Unknown mark mode {mode!r}, expected {' | '.join(COPY_OR_CUT_MODES)}")
    return cast(CopyOrCutMode, mode)


def parse_paste_mode(value: str | None) -> PasteMode:
    mode = value or "clear"
    if mode not in PASTE_MODES:
        raise ActionError(message=f"Unknown paste mode {mode!r}, expected {' | '.join(PASTE_MODES)}")
    return cast(PasteMode, mode)


class ClipboardState:
    """Copied and cut node sets keyed by node ``uid``."""

    def __init__(self) -> None:
        self.copied: dict[str, FileNode] = {}
        self.cutted: dict[str, FileNode] = {}

    @property
    def empty(self) -> bool:
        return not self.copied and not self.cutted

    def copy(self, nodes: Iterable[FileNode], mode: CopyOrCutMode = "toggle") -> list[FileNode]:
        """Mark ``nodes`` for copy; return every node whose mark changed."""
        return self._mark(self.copied, list(nodes), mode)

    def cut(self, nodes: Iterable[FileNode], mode: CopyOrCutMode = "toggle") -> list[FileNode]:
        """Mark ``nodes`` for cut; return every node whose mark changed."""
        return self._mark(self.cutted, list(nodes), mode)

    def _mark(self, target: dict[str, FileNode], nodes: list[FileNode], mode: CopyOrCutMode) -> list[FileNode]:
        changed: list[FileNode] = []
        if mode == "replace":
            changed.extend(self.copied.values())
            changed.extend(self.cutted.values())
            self.copied.clear()
            self.cutted.clear()
            for node in nodes:
                target[node.uid] = node
        elif mode == "toggle":
            for node in nodes:
                if node.uid in target:
                    del target[node.uid]
                else:
                    target[node.uid] = node
        elif mode == "append":
            for node in nodes:
                target[node.uid] = node
        else:
            raise ActionError(message=f"Unknown mark mode {mode!r}")
        changed.extend(nodes)
        return changed

    def is_copied(self, node: FileNode) -> bool:
        return node.uid in self.copied

    def is_cut(self, node: FileNode) -> bool:
        return node.uid in self.cutted

    def clear(self) -> None:
        self.copied.clear()
        self.cutted.clear()


__all__ = [
    "COPY_OR_CUT_MODES",
    "PASTE_MODES",
    "ClipboardState",
    "CopyOrCutMode",
    "PasteMode",
    "parse_copy_or_cut_mode",
    "parse_paste_mode",
]
