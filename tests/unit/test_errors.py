"""User-facing error text and OSError wrapping."""

from __future__ import annotations

import errno
import unittest

from lazyexplorer.errors import (
    ActionError,
    ConflictError,
    ExplorerError,
    FileOperationError,
    ListEntryError,
    format_error,
    wrap_error,
)


class FormatErrorTests(unittest.TestCase):
    def test_paths_are_appended_when_message_does_not_name_them(self) -> None:
        error = FileOperationError(message="Move to trash failed", paths=("/a", "/b"), detail="Permission denied")
        text, severity = format_error(error)
        self.assertEqual(text, "[io] Move to trash failed (Permission denied): /a, /b")
        self.assertEqual(severity, "error")

    def test_paths_already_in_message_are_not_repeated(self) -> None:
        text, _severity = format_error(ConflictError(message="/tmp/x.txt already exists", paths=("/tmp/x.txt",)))
        self.assertEqual(text, "[conflict] /tmp/x.txt already exists")

    def test_list_entry_errors_default_to_warning(self) -> None:
        _text, severity = format_error(ListEntryError(message="Cannot read /x"))
        self.assertEqual(severity, "warning")

    def test_plain_exception_is_reported_as_error(self) -> None:
        self.assertEqual(format_error(ValueError("bad")), ("bad", "error"))

    def test_codes_distinguish_subclasses(self) -> None:
        self.assertEqual(
            [cls.code for cls in (ExplorerError, ListEntryError, ConflictError, FileOperationError, ActionError)],
            ["explorer", "list_entry", "conflict", "io", "action"],
        )


class WrapErrorTests(unittest.TestCase):
    def test_os_error_becomes_file_operation_error_with_strerror(self) -> None:
        wrapped = wrap_error(
            PermissionError(errno.EACCES, "Permission denied"),
            message="Delete /x failed",
            paths=("/x",),
        )
        self.assertIsInstance(wrapped, FileOperationError)
        self.assertEqual(wrapped.detail, "Permission denied")
        self.assertEqual(wrapped.paths, ("/x",))

    def test_explorer_error_passes_through(self) -> None:
        original = ConflictError(message="exists")
        self.assertIs(wrap_error(original, message="ignored"), original)


if __name__ == "__main__":
    unittest.main()
