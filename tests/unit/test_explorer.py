"""Multi-source layout, partial renders, action ordering, and error reporting."""

from __future__ import annotations

import asyncio
import tempfile
import unittest
from pathlib import Path

from lazyexplorer.explorer import Explorer
from lazyexplorer.ui_theme import PLAIN_THEME
from tests.support import RecordingClipboard, ScriptedPrompter, plain_settings, row_names, settle, start_explorer


class ExplorerTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        base = Path(self._tmp.name).resolve()
        self.first_root = base / "one"
        self.second_root = base / "two"
        (self.first_root / "dir").mkdir(parents=True)
        (self.first_root / "dir" / "inner.txt").write_text("", encoding="utf-8")
        (self.first_root / "x.txt").write_text("", encoding="utf-8")
        self.second_root.mkdir()
        (self.second_root / "y.txt").write_text("", encoding="utf-8")
        self.notified: list[tuple[str, str]] = []
        self.explorer = Explorer(
            settings=plain_settings(),
            prompter=ScriptedPrompter(),
            theme=PLAIN_THEME,
            clipboard_writer=RecordingClipboard(),
            notifier=lambda message, severity: self.notified.append((message, severity)),
        )
        self.first = self.explorer.add_file_source(self.first_root)
        self.second = self.explorer.add_file_source(self.second_root)
        await self.explorer.start()

    async def asyncTearDown(self) -> None:
        self.explorer.close()
        self._tmp.cleanup()

    async def test_sources_get_unique_names_and_disjoint_ranges(self) -> None:
        self.assertEqual([source.name for source in self.explorer.sources], ["file", "file2"])
        self.assertEqual((self.first.view.start_line_index, self.first.view.end_line_index), (0, 3))
        self.assertEqual((self.second.view.start_line_index, self.second.view.end_line_index), (3, 5))
        self.assertEqual(len(self.explorer.surface.lines), 5)

    async def test_source_at_and_node_at_follow_ranges(self) -> None:
        self.assertIs(self.explorer.source_at(3), self.first)
        self.assertIs(self.explorer.source_at(4), self.second)
        self.assertIsNone(self.explorer.source_at(6))
        self.assertEqual(self.explorer.locator.node_at(5).name, "y.txt")

    async def test_growing_first_source_shifts_second(self) -> None:
        self.assertTrue(await self.explorer.do_action("expand", line=2))

        self.assertEqual(self.second.view.start_line_index, 4)
        self.assertEqual(self.explorer.locator.node_at(6).name, "y.txt")
        self.assertTrue(self.explorer.surface.lines[4].startswith("▾ [FILE]:"))

    async def test_same_size_render_rewrites_only_its_range(self) -> None:
        self.explorer.surface.lines[4] = "sentinel"

        await self.explorer.do_action("select", line=3)

        self.assertTrue(self.explorer.surface.lines[2].startswith("+"))
        self.assertEqual(self.explorer.surface.lines[4], "sentinel")

    async def test_action_runs_against_source_under_cursor(self) -> None:
        self.assertTrue(await self.explorer.do_action("addFile", ["z.txt"], line=4))

        self.assertTrue((self.second_root / "z.txt").exists())
        self.assertFalse((self.first_root / "z.txt").exists())
        self.assertEqual([node.name for node in self.second.view.flattened_nodes[1:]], ["y.txt", "z.txt"])

    async def test_failed_action_notifies_and_returns_false(self) -> None:
        self.assertFalse(await self.explorer.do_action("addFile", ["x.txt"], line=1))

        message, severity = self.notified[-1]
        self.assertTrue(message.startswith("[conflict]"))
        self.assertEqual(severity, "error")
        self.assertEqual(self.explorer.messages[-1], self.notified[-1])

    async def test_notify_logs_warnings_at_info(self) -> None:
        with self.assertLogs("lazyexplorer.explorer", level="INFO") as logs:
            self.explorer.notify("careful", "warning")

        self.assertIn("careful", logs.output[0])


class GatedPrompter(ScriptedPrompter):
    """Confirmation waits on ``gate``; every prompt is logged in ``events``."""

    def __init__(self, watched: Path) -> None:
        super().__init__(inputs=["new.txt"])
        self.gate: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self.watched = watched
        self.events: list[object] = []

    async def confirm(self, message: str) -> bool:
        self.events.append("confirm")
        answer = await self.gate
        self.events.append("confirmed")
        return answer

    async def input_text(self, label: str, default: str = "") -> str | None:
        self.events.append(("input", self.watched.exists()))
        return await super().input_text(label, default)


class ActionOrderTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve() / "project"
        (self.root / "a").mkdir(parents=True)
        (self.root / "b.txt").write_text("b", encoding="utf-8")
        self.prompter = GatedPrompter(self.root / "b.txt")
        self.explorer = await start_explorer(self.root, prompter=self.prompter)

    async def asyncTearDown(self) -> None:
        self.explorer.close()
        self._tmp.cleanup()

    async def test_second_action_waits_for_first_to_finish(self) -> None:
        first = asyncio.ensure_future(self.explorer.do_action("deleteForever", line=3))
        await settle()
        second = asyncio.ensure_future(self.explorer.do_action("addFile", line=1))
        await settle()

        self.assertEqual(self.prompter.events, ["confirm"])
        self.assertFalse(first.done())
        self.assertFalse(second.done())
        self.assertFalse((self.root / "new.txt").exists())

        self.prompter.gate.set_result(True)

        self.assertTrue(await first)
        self.assertTrue(await second)
        self.assertEqual(self.prompter.events, ["confirm", "confirmed", ("input", False)])
        self.assertTrue((self.root / "new.txt").is_file())
        self.assertEqual(row_names(self.explorer), ["a", "new.txt"])


class EmptyExplorerTests(unittest.IsolatedAsyncioTestCase):
    async def test_action_without_sources_fails(self) -> None:
        explorer = Explorer(settings=plain_settings(), theme=PLAIN_THEME)

        await explorer.start()

        self.assertFalse(await explorer.do_action("refresh"))
        self.assertEqual(explorer.messages, [("No source to run the action on", "error")])


if __name__ == "__main__":
    unittest.main()
