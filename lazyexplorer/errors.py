"""Error taxonomy shared by the tree model, guards, and actions.

Listing failures are recovered locally and only logged. Conflicts and
filesystem failures are surfaced to the user through ``format_error``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal

Severity = Literal["error", "warning", "information"]

DEFAULT_SEVERITY_BY_CODE: dict[str, Severity] = {
    "list_entry": "warning",
}


@dataclass
class ExplorerError(Exception):
    """Base error carrying a short message plus the offending paths."""

    message: str
    paths: tuple[str, ...] = ()
    detail: str | None = None
    severity: Severity = "error"

    code: ClassVar[str] = "explorer"

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class ListEntryError(ExplorerError):
    """One directory entry could not be inspected; the entry is skipped."""

    code = "list_entry"


class ConflictError(ExplorerError):
    """Target path already exists."""

    code = "conflict"


class FileOperationError(ExplorerError):
    """Copy/move/delete/create failed at the filesystem boundary."""

    code = "io"


class ActionError(ExplorerError):
    """Unknown action, invalid registration, or unusable action target."""

    code = "action"


def format_error(error: BaseException) -> tuple[str, Severity]:
    """Return user-facing text and severity for ``error``."""
    if isinstance(error, ExplorerError):
        text = f"[{error.code}] {error}"
        if error.paths and not any(path in error.message for path in error.paths):
            text = f"{text}: {', '.join(error.paths)}"
        severity = DEFAULT_SEVERITY_BY_CODE.get(error.code, error.severity)
        return text, severity
    return f"{error}", "error"


def wrap_error(
    error: BaseException,
    *,
    message: str,
    paths: tuple[str, ...] = (),
    severity: Severity = "error",
) -> ExplorerError:
    """Convert ``error`` into a ``FileOperationError`` unless already typed."""
    if isinstance(error, ExplorerError):
        return error
    detail = getattr(error, "strerror", None) or str(error)
    return FileOperationError(message=message, paths=paths, detail=detail, severity=severity)


__all__ = [
    "Severity",
    "ExplorerError",
    "ListEntryError",
    "ConflictError",
    "FileOperationError",
    "ActionError",
    "format_error",
    "wrap_error",
]
