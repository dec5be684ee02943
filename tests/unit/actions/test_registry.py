"""Action registration checks, target resolution, and dispatch effects."""

from __future__ import annotations

import unittest

from lazyexplorer.actions import (
    ActionArg,
    ActionContext,
    ActionKind,
    ActionOptions,
    ActionRegistry,
    ActionTarget,
)
from lazyexplorer.errors import ActionError
from lazyexplorer.file_tree_model import FileNode


def make_node(name: str, *, level: int = 1) -> FileNode:
    path = "/r" if level == 0 else f"/r/{name}"
    return FileNode(uid=f"file:{path}", name=name, fullpath=path, level=level, directory=level == 0)


class FakeHost:
    def __init__(self) -> None:
        self.reloads = 0
        self.renders = 0

    async def reload(self, node: FileNode | None = None) -> None:
        self.reloads += 1

    async def render(self) -> None:
        self.renders += 1


class RegistrationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry: ActionRegistry[FakeHost] = ActionRegistry()

    def test_registers_valid_handlers_for_each_kind(self) -> None:
        async def none_handler(ctx):
            return None

        async def node_handler(ctx, node):
            return node

        self.registry.register("none", ActionKind.NONE, none_handler, "no target")
        self.registry.register("root", ActionKind.ROOT, node_handler, "root target")
        self.registry.register("node", ActionKind.NODE, node_handler, "cursor target")
        self.registry.register("nodes", ActionKind.NODES, node_handler, "selection target")

        self.assertEqual(self.registry.names(), ["none", "root", "node", "nodes"])
        self.assertIn("node", self.registry)
        self.assertEqual(len(self.registry), 4)

    def test_rejects_duplicates_and_bad_names(self) -> None:
        async def handler(ctx):
            return None

        self.registry.register("refresh", ActionKind.NONE, handler, "")
        for name in ("refresh", "", " padded", "with:colon"):
            with self.subTest(name=name), self.assertRaises(ActionError):
                self.registry.register(name, ActionKind.NONE, handler, "")

    def test_rejects_plain_functions(self) -> None:
        def handler(ctx):
            return None

        with self.assertRaisesRegex(ActionError, "coroutine function"):
            self.registry.register("sync", ActionKind.NONE, handler, "")

    def test_rejects_handler_signature_mismatching_kind(self) -> None:
        async def one_arg(ctx):
            return None

        async def two_args(ctx, node):
            return None

        with self.assertRaisesRegex(ActionError, "does not match kind node"):
            self.registry.register("a", ActionKind.NODE, one_arg, "")
        with self.assertRaisesRegex(ActionError, "does not match kind none"):
            self.registry.register("b", ActionKind.NONE, two_args, "")

    def test_rejects_menus_without_arguments(self) -> None:
        async def handler(ctx):
            return None

        with self.assertRaisesRegex(ActionError, "menus without arguments"):
            self.registry.register("m", ActionKind.NONE, handler, "", ActionOptions(menus={"x": "y"}))

    def test_metadata_describes_args_and_menus(self) -> None:
        async def handler(ctx, nodes):
            return None

        options = ActionOptions(render=True, args=(ActionArg("type", "mark mode"),), menus={"append": "add"})
        self.registry.register("copyFile", ActionKind.NODES, handler, "Copy files", options)

        [entry] = self.registry.metadata()

        self.assertEqual(
            entry,
            {
                "name": "copyFile",
                "kind": "nodes",
                "description": "Copy files",
                "multi_select": True,
                "args": [{"name": "type", "description": "mark mode"}],
                "menus": {"append": "add"},
            },
        )

    def test_unknown_action(self) -> None:
        with self.assertRaisesRegex(ActionError, "Unknown action 'nope'"):
            self.registry.get("nope")


class ResolveTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry: ActionRegistry[FakeHost] = ActionRegistry()
        self.root = make_node("r", level=0)
        self.cursor = make_node("cursor")
        self.selected = (make_node("s1"), make_node("s2"))

        async def one(ctx):
            return None

        async def two(ctx, target):
            return target

        self.actions = {
            kind: self.registry.register(kind.value, kind, one if kind is ActionKind.NONE else two, "")
            for kind in ActionKind
        }

    def resolve(self, kind: ActionKind, **target) -> tuple[FileNode, ...]:
        return self.registry.resolve(self.actions[kind], ActionTarget(root=self.root, **target))

    def test_kinds(self) -> None:
        self.assertEqual(self.resolve(ActionKind.NONE, cursor=self.cursor), ())
        self.assertEqual(self.resolve(ActionKind.ROOT, cursor=self.cursor), (self.root,))
        self.assertEqual(
            self.resolve(ActionKind.NODE, cursor=self.cursor, selection=self.selected),
            (self.cursor,),
        )
        self.assertEqual(
            self.resolve(ActionKind.NODES, cursor=self.cursor, selection=self.selected),
            self.selected,
        )
        self.assertEqual(self.resolve(ActionKind.NODES, cursor=self.cursor), (self.cursor,))

    def test_node_kinds_need_a_cursor(self) -> None:
        for kind in (ActionKind.NODE, ActionKind.NODES):
            with self.subTest(kind=kind), self.assertRaisesRegex(ActionError, "needs a node under the cursor"):
                self.resolve(kind)
        self.assertEqual(self.resolve(ActionKind.ROOT), (self.root,))


class DispatchTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.registry: ActionRegistry[FakeHost] = ActionRegistry()
        self.host = FakeHost()
        self.root = make_node("r", level=0)
        self.cursor = make_node("cursor")
        self.calls: list[tuple[str, object, list[str]]] = []

    def target(self, **kwargs) -> ActionTarget:
        kwargs.setdefault("cursor", self.cursor)
        return ActionTarget(root=self.root, **kwargs)

    async def test_handler_receives_shaped_target_and_args(self) -> None:
        async def nodes_handler(ctx: ActionContext[FakeHost], nodes):
            self.calls.append(("nodes", nodes, ctx.args))
            return len(nodes)

        self.registry.register("count", ActionKind.NODES, nodes_handler, "")

        outcome = await self.registry.dispatch(self.host, "count", ["a", "b"], self.target())

        self.assertEqual(self.calls, [("nodes", [self.cursor], ["a", "b"])])
        self.assertEqual(outcome.result, 1)
        self.assertEqual(outcome.nodes, (self.cursor,))

    async def test_reload_option_reloads_and_renders(self) -> None:
        async def handler(ctx):
            return None

        self.registry.register("refresh", ActionKind.NONE, handler, "", ActionOptions(reload=True))

        outcome = await self.registry.dispatch(self.host, "refresh", [], self.target())

        self.assertEqual((self.host.reloads, self.host.renders), (1, 1))
        self.assertTrue(outcome.reloaded and outcome.rendered)

    async def test_no_options_means_no_side_effects(self) -> None:
        async def handler(ctx):
            return None

        self.registry.register("quiet", ActionKind.NONE, handler, "")

        await self.registry.dispatch(self.host, "quiet", [], self.target())

        self.assertEqual((self.host.reloads, self.host.renders), (0, 0))

    async def test_invoke_delegates_with_explicit_target_and_merges_effects(self) -> None:
        other = make_node("other")

        async def inner(ctx, node):
            self.calls.append(("inner", node, ctx.args))
            return "done"

        async def outer(ctx, node):
            return await ctx.invoke("inner", other, ["x"])

        self.registry.register("inner", ActionKind.NODE, inner, "", ActionOptions(reload=True))
        self.registry.register("outer", ActionKind.NODE, outer, "")

        outcome = await self.registry.dispatch(self.host, "outer", [], self.target())

        self.assertEqual(self.calls, [("inner", other, ["x"])])
        self.assertEqual(outcome.result, "done")
        self.assertTrue(outcome.reloaded)
        self.assertEqual(self.host.reloads, 1)

    async def test_handler_requests_render(self) -> None:
        async def handler(ctx):
            ctx.request_render()

        self.registry.register("paint", ActionKind.NONE, handler, "")

        outcome = await self.registry.dispatch(self.host, "paint", [], self.target())

        self.assertFalse(outcome.reloaded)
        self.assertTrue(outcome.rendered)
        self.assertEqual(self.host.renders, 1)

    async def test_handler_errors_propagate_without_effects(self) -> None:
        async def handler(ctx):
            raise ActionError(message="boom")

        self.registry.register("fail", ActionKind.NONE, handler, "", ActionOptions(reload=True))

        with self.assertRaisesRegex(ActionError, "boom"):
            await self.registry.dispatch(self.host, "fail", [], self.target())
        self.assertEqual(self.host.reloads, 0)

    def test_arg_defaults_for_missing_or_blank(self) -> None:
        ctx: ActionContext[FakeHost] = ActionContext(self.host, self.registry, ["", "b"])

        self.assertEqual(ctx.arg(0, "dflt"), "dflt")
        self.assertEqual(ctx.arg(1), "b")
        self.assertIsNone(ctx.arg(2))


if __name__ == "__main__":
    unittest.main()
