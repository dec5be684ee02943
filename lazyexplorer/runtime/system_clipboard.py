"""System clipboard access through the platform's copy command."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys


def clipboard_commands() -> list[list[str]]:
    if sys.platform == "darwin":
        return [["pbcopy"]]
    if os.name == "nt":
        return [["clip"]]
    return [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ]


def copy_text_to_clipboard(text: str) -> bool:
    """Best-effort copy; ``False`` when no clipboard tool accepted the text."""
    if not text:
        return False
    for command in clipboard_commands():
        if shutil.which(command[0]) is None:
            continue
        try:
            proc = subprocess.run(command, input=text, text=True, check=False, timeout=2.0)
        except (OSError, subprocess.SubprocessError):
            continue
        if proc.returncode == 0:
            return True
    return False


__all__ = ["clipboard_commands", "copy_text_to_clipboard"]
