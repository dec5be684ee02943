"""User prompt collaborators for confirmations, text input, and choices."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence
from typing import Protocol, TextIO


class Prompter(Protocol):
    async def confirm(self, message: str) -> bool: ...

    async def input_text(self, label: str, default: str = "") -> str | None: ...

    async def choose(self, message: str, choices: Sequence[str]) -> str | None: ...


class ConsolePrompter:
    """Line-based prompts on a text stream pair.

    EOF on input counts as "no" for confirmations and as cancel otherwise.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def _ask(self, text: str) -> str | None:
        self.stdout.write(text)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    async def confirm(self, message: str) -> bool:
        answer = await asyncio.to_thread(self._ask, f"{message} [y/N] ")
        return (answer or "").strip().lower() in {"y", "yes"}

    async def input_text(self, label: str, default: str = "") -> str | None:
        suffix = f" [{default}]" if default else ""
        answer = await asyncio.to_thread(self._ask, f"{label}{suffix} ")
        if answer is None:
            return None
        return answer or default

    async def choose(self, message: str, choices: Sequence[str]) -> str | None:
        listing = "/".join(choices)
        while True:
            answer = await asyncio.to_thread(self._ask, f"{message} ({listing}) ")
            if answer is None:
                return None
            answer = answer.strip()
            if answer in choices:
                return answer
            # Accept a unique prefix such as "s" for "skip".
            matches = [choice for choice in choices if answer and choice.startswith(answer)]
            if len(matches) == 1:
                return matches[0]


class AutoPrompter:
    """Non-interactive prompter: answers every question the same way."""

    def __init__(self, *, assume_yes: bool = True, choice: str | None = None) -> None:
        self.assume_yes = assume_yes
        self.choice = choice

    async def confirm(self, message: str) -> bool:
        return self.assume_yes

    async def input_text(self, label: str, default: str = "") -> str | None:
        return default or None

    async def choose(self, message: str, choices: Sequence[str]) -> str | None:
        if self.choice is not None and self.choice in choices:
            return self.choice
        return choices[0] if self.assume_yes and choices else None


__all__ = ["AutoPrompter", "ConsolePrompter", "Prompter"]
