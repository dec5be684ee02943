"""Shared fakes for async explorer tests: a hand-driven clock and prompts."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from pathlib import Path

from lazyexplorer.explorer import Explorer
from lazyexplorer.runtime.config import ExplorerSettings
from lazyexplorer.ui_theme import PLAIN_THEME


class ManualTimer:
    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose clock only moves through ``advance``."""

    def __init__(self) -> None:
        self.time = 0.0
        self.timers: list[ManualTimer] = []

    def now(self) -> float:
        return self.time

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.time + delay, callback)
        self.timers.append(timer)
        return timer

    def advance(self, delta: float) -> None:
        target = self.time + delta
        while True:
            due = [timer for timer in self.timers if not timer.cancelled and timer.when <= target]
            if not due:
                break
            timer = min(due, key=lambda item: item.when)
            self.timers.remove(timer)
            self.time = timer.when
            timer.callback()
        self.time = target


async def settle(rounds: int = 10) -> None:
    """Let scheduled tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` while worker threads finish; fail after ``timeout``."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached before timeout")
        await asyncio.sleep(0.01)


class ScriptedPrompter:
    """Prompter answering from queues; records every question asked."""

    def __init__(
        self,
        *,
        confirms: Sequence[bool] = (),
        inputs: Sequence[str | None] = (),
        choices: Sequence[str | None] = (),
    ) -> None:
        self.confirms = list(confirms)
        self.inputs = list(inputs)
        self.choices = list(choices)
        self.asked: list[str] = []

    async def confirm(self, message: str) -> bool:
        self.asked.append(message)
        return self.confirms.pop(0) if self.confirms else False

    async def input_text(self, label: str, default: str = "") -> str | None:
        self.asked.append(label)
        return self.inputs.pop(0) if self.inputs else None

    async def choose(self, message: str, choices: Sequence[str]) -> str | None:
        self.asked.append(message)
        return self.choices.pop(0) if self.choices else None


class RecordingClipboard:
    def __init__(self) -> None:
        self.texts: list[str] = []

    def __call__(self, text: str) -> bool:
        self.texts.append(text)
        return True


def plain_settings(**overrides: object) -> ExplorerSettings:
    values: dict[str, object] = {"show_git_status": False, "columns": ("selection", "clip")}
    values.update(overrides)
    return ExplorerSettings(**values)  # type: ignore[arg-type]


async def start_explorer(
    root: Path,
    *,
    prompter: ScriptedPrompter | None = None,
    settings: ExplorerSettings | None = None,
    scheduler: ManualScheduler | None = None,
    clipboard: RecordingClipboard | None = None,
) -> Explorer:
    explorer = Explorer(
        settings=settings if settings is not None else plain_settings(),
        prompter=prompter if prompter is not None else ScriptedPrompter(),
        theme=PLAIN_THEME,
        clipboard_writer=clipboard if clipboard is not None else RecordingClipboard(),
        scheduler=scheduler,
    )
    explorer.add_file_source(root)
    await explorer.start()
    return explorer


def row_names(explorer: Explorer, source_index: int = 0) -> list[str]:
    """Names of the flattened nodes after the root row."""
    view = explorer.sources[source_index].view
    return [node.name for node in view.flattened_nodes[1:]]
