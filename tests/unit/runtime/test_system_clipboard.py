"""Clipboard command selection and fallbacks."""

from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from lazyexplorer.runtime import system_clipboard


class CopyTextToClipboardTests(unittest.TestCase):
    def test_empty_text_is_not_copied(self) -> None:
        with mock.patch("lazyexplorer.runtime.system_clipboard.subprocess.run") as run:
            self.assertFalse(system_clipboard.copy_text_to_clipboard(""))
        run.assert_not_called()

    def test_first_available_command_wins(self) -> None:
        commands = [["missing-tool"], ["present-tool", "--in"]]
        with (
            mock.patch.object(system_clipboard, "clipboard_commands", return_value=commands),
            mock.patch.object(system_clipboard.shutil, "which", side_effect=lambda name: None if name == "missing-tool" else name),
            mock.patch.object(system_clipboard.subprocess, "run", return_value=subprocess.CompletedProcess([], 0)) as run,
        ):
            self.assertTrue(system_clipboard.copy_text_to_clipboard("/r/a.txt"))

        run.assert_called_once()
        self.assertEqual(run.call_args.args[0], ["present-tool", "--in"])
        self.assertEqual(run.call_args.kwargs["input"], "/r/a.txt")

    def test_failures_fall_through_to_false(self) -> None:
        commands = [["broken"], ["nonzero"]]

        def fake_run(command, **_kwargs):
            if command[0] == "broken":
                raise subprocess.TimeoutExpired(command, 2.0)
            return subprocess.CompletedProcess(command, 1)

        with (
            mock.patch.object(system_clipboard, "clipboard_commands", return_value=commands),
            mock.patch.object(system_clipboard.shutil, "which", return_value="/usr/bin/tool"),
            mock.patch.object(system_clipboard.subprocess, "run", side_effect=fake_run),
        ):
            self.assertFalse(system_clipboard.copy_text_to_clipboard("text"))


if __name__ == "__main__":
    unittest.main()
