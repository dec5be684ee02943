"""Pre-mutation conflict checks for create, rename, and paste.

Create operations use ``reject_existing_targets``: every target is checked
before anything is written, and the first existing one aborts the batch.
Overwriting operations use ``overwrite_prompt``, which asks per conflicting
pair and keeps going when a single item fails.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field

from ..errors import ConflictError, ExplorerError, FileOperationError, format_error
from ..file_tree_model import FileSystem
from ..file_tree_model.model import is_under, normalize_path
from .prompts import Prompter

logger = logging.getLogger(__name__)

REPLACE = "replace"
RENAME = "rename"
SKIP = "skip"
ABORT = "abort"
OVERWRITE_CHOICES = (REPLACE, RENAME, SKIP, ABORT)

ApplyFn = Callable[[str | None, str], Awaitable[None]]


@dataclass(frozen=True)
class PlannedPair:
    """One planned mutation; ``source`` is ``None`` for creates."""

    source: str | None
    target: str


@dataclass
class GuardReport:
    applied: list[PlannedPair] = field(default_factory=list)
    skipped: list[PlannedPair] = field(default_factory=list)
    failed: list[tuple[PlannedPair, ExplorerError]] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed and not self.aborted


async def reject_existing_targets(targets: Iterable[str], fs: FileSystem) -> None:
    """Raise ``ConflictError`` for the first target that already exists."""
    for target in targets:
        if await fs.exists(target):
            raise ConflictError(message=f"{target} already exists", paths=(target,))


def _into_itself(pair: PlannedPair) -> bool:
    return pair.source is not None and is_under(pair.target, pair.source)


def _into_itself_error(operation: str, pair: PlannedPair) -> FileOperationError:
    return FileOperationError(
        message=f"Cannot {operation} {pair.source} into itself",
        paths=(pair.source or pair.target,),
    )


async def _settle_conflict(
    operation: str,
    pair: PlannedPair,
    *,
    fs: FileSystem,
    prompter: Prompter,
) -> tuple[PlannedPair, bool] | str:
    """Return ``(pair, replacing)`` to apply, or ``SKIP``/``ABORT``."""
    while await fs.exists(pair.target):
        choice = await prompter.choose(f"{pair.target} already exists, {operation}:", OVERWRITE_CHOICES)
        if choice == REPLACE:
            if pair.source == pair.target:
                return SKIP
            return pair, True
        if choice == RENAME:
            renamed = await prompter.input_text(f"Rename {operation} target:", pair.target)
            if not renamed or not renamed.strip():
                return SKIP
            target = os.path.join(os.path.dirname(pair.target), os.path.expanduser(renamed.strip()))
            pair = PlannedPair(pair.source, normalize_path(target))
            continue
        if choice == SKIP:
            return SKIP
        return ABORT
    return pair, False


async def _backup_path(target: str, fs: FileSystem) -> str:
    directory, name = os.path.split(target)
    index = 0
    while True:
        suffix = f".{index}" if index else ""
        candidate = os.path.join(directory, f".{name}.replaced{suffix}")
        if not await fs.exists(candidate):
            return candidate
        index += 1


async def _apply_replacing(pair: PlannedPair, apply: ApplyFn, fs: FileSystem) -> None:
    """Apply ``pair`` over an existing target, restoring it if ``apply`` fails."""
    backup = await _backup_path(pair.target, fs)
    await fs.move(pair.target, backup)
    try:
        await apply(pair.source, pair.target)
    except ExplorerError:
        if await fs.exists(pair.target):
            await fs.delete_permanently(pair.target)
        await fs.move(backup, pair.target)
        raise
    try:
        await fs.delete_permanently(backup)
    except ExplorerError as exc:
        text, _severity = format_error(exc)
        logger.warning("Replaced %s but kept %s: %s", pair.target, backup, text)


async def overwrite_prompt(
    operation: str,
    pairs: Sequence[PlannedPair],
    apply: ApplyFn,
    *,
    fs: FileSystem,
    prompter: Prompter,
) -> GuardReport:
    """Apply ``pairs`` in order, asking what to do with existing targets.

    Choosing ``replace`` is the explicit confirmation for the overwrite: the
    existing target is moved to a hidden sibling, ``apply`` runs, and the
    sibling is deleted only after ``apply`` succeeded. A failed ``apply``
    moves the original back. ``rename`` asks for a new
    target path and checks it again. ``abort`` (or a cancelled prompt) stops
    the batch; pairs already applied stay applied.
    """
    report = GuardReport()
    for index, planned in enumerate(pairs):
        pair = PlannedPair(planned.source, normalize_path(planned.target))
        if _into_itself(pair):
            report.failed.append((pair, _into_itself_error(operation, pair)))
            continue
        try:
            settled = await _settle_conflict(operation, pair, fs=fs, prompter=prompter)
        except ExplorerError as exc:
            report.failed.append((pair, exc))
            continue
        if settled == ABORT:
            report.aborted = True
            report.skipped.extend(pairs[index:])
            logger.info("%s aborted at %s", operation, pair.target)
            return report
        if isinstance(settled, str):
            report.skipped.append(pair)
            continue
        settled_pair, replacing = settled
        if _into_itself(settled_pair):
            report.failed.append((settled_pair, _into_itself_error(operation, settled_pair)))
            continue
        try:
            if replacing:
                await _apply_replacing(settled_pair, apply, fs)
            else:
                await apply(settled_pair.source, settled_pair.target)
        except ExplorerError as exc:
            text, _severity = format_error(exc)
            logger.info("%s failed: %s", operation, text)
            report.failed.append((settled_pair, exc))
            continue
        report.applied.append(settled_pair)
    return report


__all__ = [
    "ABORT",
    "OVERWRITE_CHOICES",
    "PlannedPair",
    "GuardReport",
    "RENAME",
    "REPLACE",
    "SKIP",
    "overwrite_prompt",
    "reject_existing_targets",
]
