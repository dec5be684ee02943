"""Git status overlay and index operations for file-tree rows.

Collects changed/untracked flags for tree badges and propagates them to
ancestor directories. Stages and unstages paths for the git actions.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

from .errors import FileOperationError
from .ui_theme import DEFAULT_THEME, UITheme

logger = logging.getLogger(__name__)

GIT_STATUS_CHANGED = 1
GIT_STATUS_UNTRACKED = 2
GIT_TIMEOUT_SECONDS = 0.25
GIT_INDEX_TIMEOUT_SECONDS = 5.0


def _merge_flags(overlay: dict[str, int], target: str, flags: int) -> None:
    overlay[target] = overlay.get(target, 0) | flags


def format_git_status_badges(flags: int, theme: UITheme | None = None) -> str:
    """Render ``[M]``/``[?]`` badges for a node's status flags."""
    if flags == 0:
        return ""
    active_theme = theme or DEFAULT_THEME
    reset = active_theme.reset
    badges: list[str] = []
    if flags & GIT_STATUS_CHANGED:
        badges.append(f"{active_theme.git_badge_changed}[M]{reset}")
    if flags & GIT_STATUS_UNTRACKED:
        badges.append(f"{active_theme.git_badge_untracked}[?]{reset}")
    return "".join(badges)


def _run_git(
    cwd: Path,
    args: list[str],
    timeout_seconds: float,
) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git %s failed in %s: %s", " ".join(args), cwd, exc)
        return None


def resolve_repo_root(path: Path, timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> Path | None:
    """Return the enclosing repository root, or ``None`` outside git."""
    proc = _run_git(path, ["rev-parse", "--show-toplevel"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return None
    top = proc.stdout.strip()
    return Path(top).resolve() if top else None


def _iter_porcelain_records(output: str) -> list[tuple[str, str]]:
    records: list[tuple[str, str]] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token:
            continue
        if len(token) < 4 or token[2] != " ":
            continue

        status = token[:2]
        path_text = token[3:]
        records.append((status, path_text))

        # For renamed/copied entries, porcelain -z appends an extra token
        # containing the source path; the first path token is the destination.
        if "R" in status or "C" in status:
            index += 1

    return records


def collect_git_status_overlay(tree_root: str, timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> dict[str, int]:
    """Map changed/untracked paths under ``tree_root`` (and their ancestors) to flags."""
    root = Path(tree_root).resolve()
    repo_root = resolve_repo_root(root, timeout_seconds)
    if repo_root is None:
        return {}

    status_proc = _run_git(
        repo_root,
        ["status", "--porcelain=v1", "-z", "--untracked-files=normal"],
        timeout_seconds,
    )
    if status_proc is None or status_proc.returncode != 0:
        return {}

    # Keys use the tree's own spelling of the root so they match node paths
    # even when the root sits behind a symlink.
    display_root = os.path.normpath(os.path.abspath(tree_root))
    overlay: dict[str, int] = {}
    for status, rel_path in _iter_porcelain_records(status_proc.stdout):
        if not rel_path or status == "!!":
            continue

        flags = GIT_STATUS_UNTRACKED if status == "??" else GIT_STATUS_CHANGED
        target = (repo_root / rel_path.rstrip("/")).resolve()
        if not target.is_relative_to(root):
            continue

        current = target
        while True:
            relative = current.relative_to(root)
            key = display_root if relative == Path(".") else os.path.join(display_root, str(relative))
            _merge_flags(overlay, key, flags)
            if current == root:
                break
            current = current.parent

    return overlay


def _run_index_command(paths: Sequence[str], args: list[str], action: str) -> None:
    if not paths:
        return
    cwd = Path(paths[0]).parent
    repo_root = resolve_repo_root(cwd)
    if repo_root is None:
        raise FileOperationError(message=f"git {action}: not inside a git repository", paths=tuple(paths))
    proc = _run_git(repo_root, [*args, *paths], GIT_INDEX_TIMEOUT_SECONDS)
    if proc is None or proc.returncode != 0:
        detail = proc.stderr.strip() if proc is not None else None
        raise FileOperationError(message=f"git {action} failed", paths=tuple(paths), detail=detail or None)


def stage_paths(paths: Sequence[str]) -> None:
    """``git add`` the given paths."""
    _run_index_command(paths, ["add", "--"], "stage")


def unstage_paths(paths: Sequence[str]) -> None:
    """Remove the given paths from the index, keeping working-tree content."""
    _run_index_command(paths, ["reset", "-q", "HEAD", "--"], "unstage")


__all__ = [
    "GIT_STATUS_CHANGED",
    "GIT_STATUS_UNTRACKED",
    "collect_git_status_overlay",
    "format_git_status_badges",
    "resolve_repo_root",
    "stage_paths",
    "unstage_paths",
]
