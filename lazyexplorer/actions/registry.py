"""Named action table with kind-specific handler signatures.

Every action belongs to one ``ActionKind``; the kind decides how the target is
resolved before the handler runs and which positional arguments it takes:

- ``NONE``: ``handler(ctx)``
- ``ROOT``: ``handler(ctx, root_node)``
- ``NODE``: ``handler(ctx, cursor_node)``; any selection is ignored
- ``NODES``: ``handler(ctx, nodes)``; the selection, else the cursor node

Registration checks the handler against its kind so a bad table fails at
startup instead of on the first key press.
"""

from __future__ import annotations

import enum
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from ..errors import ActionError
from ..file_tree_model import FileNode

logger = logging.getLogger(__name__)


class ActionHost(Protocol):
    """What the dispatcher needs from the source an action runs against."""

    async def reload(self, node: FileNode | None = None) -> None: ...

    async def render(self) -> None: ...


S = TypeVar("S", bound=ActionHost)


class ActionKind(enum.Enum):
    NONE = "none"
    ROOT = "root"
    NODE = "node"
    NODES = "nodes"

    @property
    def arity(self) -> int:
        return 1 if self is ActionKind.NONE else 2


@dataclass(frozen=True)
class ActionArg:
    name: str
    description: str = ""


@dataclass(frozen=True)
class ActionOptions:
    """Post-run effects plus descriptive argument/menu metadata.

    ``reload`` reloads the source and renders; ``render`` only renders.
    ``menus`` maps an argument value to its description for quick-pick UIs.
    """

    reload: bool = False
    render: bool = False
    args: tuple[ActionArg, ...] = ()
    menus: Mapping[str, str] = field(default_factory=dict)


Handler = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class Action:
    name: str
    kind: ActionKind
    handler: Handler
    description: str
    options: ActionOptions = field(default_factory=ActionOptions)

    @property
    def multi_select(self) -> bool:
        return self.kind is ActionKind.NODES


@dataclass(frozen=True)
class ActionTarget:
    """Cursor, selection, and root at the moment an action was requested."""

    root: FileNode
    cursor: FileNode | None = None
    selection: Sequence[FileNode] = ()


@dataclass
class ActionContext(Generic[S]):
    """Per-invocation state handed to handlers.

    Handlers flag extra effects with ``request_reload``/``request_render`` and
    delegate through ``invoke``, which calls another handler directly with an
    explicit target instead of re-resolving the cursor.
    """

    source: S
    registry: ActionRegistry[S]
    args: list[str] = field(default_factory=list)
    reload_requested: bool = False
    render_requested: bool = False

    def arg(self, index: int, default: str | None = None) -> str | None:
        if index < len(self.args) and self.args[index] != "":
            return self.args[index]
        return default

    def request_reload(self) -> None:
        self.reload_requested = True

    def request_render(self) -> None:
        self.render_requested = True

    async def invoke(
        self,
        name: str,
        target: FileNode | Sequence[FileNode] | None = None,
        args: Sequence[str] = (),
    ) -> Any:
        action = self.registry.get(name)
        child: ActionContext[S] = ActionContext(self.source, self.registry, list(args))
        logger.debug("Delegating to action %s", name)
        result = await self.registry.call(action, child, target)
        self.reload_requested = self.reload_requested or child.reload_requested or action.options.reload
        self.render_requested = self.render_requested or child.render_requested or action.options.render
        return result


@dataclass(frozen=True)
class ActionOutcome:
    action: Action
    nodes: tuple[FileNode, ...]
    reloaded: bool
    rendered: bool
    result: Any = None


class ActionRegistry(Generic[S]):
    """Name to ``Action`` table plus target resolution and dispatch."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def names(self) -> list[str]:
        return list(self._actions)

    def get(self, name: str) -> Action:
        action = self._actions.get(name)
        if action is None:
            raise ActionError(message=f"Unknown action {name!r}")
        return action

    def register(
        self,
        name: str,
        kind: ActionKind,
        handler: Handler,
        description: str,
        options: ActionOptions | None = None,
    ) -> Action:
        """Validate and add one action; duplicate names are rejected."""
        if not name or ":" in name or name.strip() != name:
            raise ActionError(message=f"Invalid action name {name!r}")
        if name in self._actions:
            raise ActionError(message=f"Action {name!r} is already registered")
        if not isinstance(kind, ActionKind):
            raise ActionError(message=f"Action {name!r} has invalid kind {kind!r}")
        if not inspect.iscoroutinefunction(handler):
            raise ActionError(message=f"Action {name!r} handler must be a coroutine function")
        try:
            inspect.signature(handler).bind(*([None] * kind.arity))
        except TypeError as exc:
            raise ActionError(
                message=f"Action {name!r} handler does not match kind {kind.value}",
                detail=str(exc),
            ) from exc
        opts = options if options is not None else ActionOptions()
        if opts.menus and not opts.args:
            raise ActionError(message=f"Action {name!r} declares menus without arguments")
        action = Action(name=name, kind=kind, handler=handler, description=description, options=opts)
        self._actions[name] = action
        return action

    def resolve(self, action: Action, target: ActionTarget) -> tuple[FileNode, ...]:
        """Nodes the action runs on; ``()`` for ``NONE`` actions."""
        if action.kind is ActionKind.NONE:
            return ()
        if action.kind is ActionKind.ROOT:
            return (target.root,)
        if action.kind is ActionKind.NODES and target.selection:
            return tuple(target.selection)
        if target.cursor is None:
            raise ActionError(message=f"Action {action.name!r} needs a node under the cursor")
        return (target.cursor,)

    async def call(
        self,
        action: Action,
        ctx: ActionContext[S],
        target: FileNode | Sequence[FileNode] | None,
    ) -> Any:
        """Run ``action.handler`` with ``target`` shaped for its kind."""
        if action.kind is ActionKind.NONE:
            return await action.handler(ctx)
        if target is None:
            raise ActionError(message=f"Action {action.name!r} needs a target node")
        if action.kind is ActionKind.NODES:
            nodes = [target] if isinstance(target, FileNode) else list(target)
            return await action.handler(ctx, nodes)
        if isinstance(target, FileNode):
            return await action.handler(ctx, target)
        nodes = list(target)
        if not nodes:
            raise ActionError(message=f"Action {action.name!r} needs a target node")
        return await action.handler(ctx, nodes[0])

    async def dispatch(
        self,
        source: S,
        name: str,
        args: Sequence[str],
        target: ActionTarget,
    ) -> ActionOutcome:
        """Resolve targets, run the handler, then apply reload/render."""
        action = self.get(name)
        nodes = self.resolve(action, target)
        logger.debug("Dispatching %s on %d node(s) args=%s", name, len(nodes), list(args))
        ctx: ActionContext[S] = ActionContext(source, self, list(args))
        if action.kind is ActionKind.NONE:
            result = await self.call(action, ctx, None)
        elif action.kind is ActionKind.NODES:
            result = await self.call(action, ctx, nodes)
        else:
            result = await self.call(action, ctx, nodes[0])

        reload = action.options.reload or ctx.reload_requested
        render = reload or action.options.render or ctx.render_requested
        if reload:
            await source.reload()
        if render:
            await source.render()
        return ActionOutcome(action=action, nodes=nodes, reloaded=reload, rendered=render, result=result)

    def metadata(self) -> list[dict[str, Any]]:
        """Descriptive listing for command layers; carries no behaviour."""
        return [
            {
                "name": action.name,
                "kind": action.kind.value,
                "description": action.description,
                "multi_select": action.multi_select,
                "args": [{"name": arg.name, "description": arg.description} for arg in action.options.args],
                "menus": dict(action.options.menus),
            }
            for action in self._actions.values()
        ]


__all__ = [
    "Action",
    "ActionArg",
    "ActionContext",
    "ActionHost",
    "ActionKind",
    "ActionOptions",
    "ActionOutcome",
    "ActionRegistry",
    "ActionTarget",
]
