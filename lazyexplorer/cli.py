"""Command-line front door for lazyexplorer.

Builds an explorer with one file source, runs the requested actions in
order, and prints the rendered tree.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from .actions.prompts import AutoPrompter, ConsolePrompter, Prompter
from .errors import Severity
from .explorer import Explorer
from .file_tree_model import ExpandStore, JsonExpandStore
from .runtime.config import DEFAULT_EXPAND_STATE_PATH, load_explorer_settings
from .runtime.logging import configure_logging
from .tree_pane import MemorySurface
from .ui_theme import available_theme_names, resolve_theme


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _action_spec(value: str) -> tuple[str, list[str]]:
    """argparse type for ``NAME[:ARG...]``."""
    name, *args = value.split(":")
    if not name:
        raise argparse.ArgumentTypeError(f"missing action name in {value!r}")
    return name, args


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyexplorer",
        description="Render a file tree and run explorer actions against it.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Root directory. Defaults to current directory.")
    parser.add_argument("--show-hidden", action="store_true", help="Show dotfiles.")
    parser.add_argument("--expand-all", action="store_true", help="Expand every directory before running actions.")
    parser.add_argument("--reveal", metavar="PATH", help="Expand down to PATH and put the cursor on it.")
    parser.add_argument("--line", type=_positive_int, default=None, help="Cursor line (1-indexed) for actions.")
    parser.add_argument(
        "--action",
        dest="actions",
        metavar="NAME[:ARG...]",
        type=_action_spec,
        action="append",
        default=[],
        help="Run an action at the cursor; repeatable, applied in order.",
    )
    parser.add_argument("--list-actions", action="store_true", help="List available actions and exit.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--yes", action="store_true", help="Answer every confirmation affirmatively.")
    parser.add_argument(
        "--remember-expanded",
        action="store_true",
        help="Load and save expanded directories across runs.",
    )
    parser.add_argument("--log-level", default="warning", help="Log level for stderr output.")
    return parser


def format_action_listing(explorer: Explorer) -> str:
    lines: list[str] = []
    if not explorer.sources:
        return ""
    for entry in explorer.sources[0].registry.metadata():
        lines.append(f"{entry['name']} [{entry['kind']}] {entry['description']}")
        for arg in entry["args"]:
            description = f": {arg['description']}" if arg["description"] else ""
            lines.append(f"    arg {arg['name']}{description}")
        for value, description in entry["menus"].items():
            lines.append(f"    menu {value}: {description}")
    return "\n".join(lines) + "\n"


async def run(
    args: argparse.Namespace,
    *,
    stdin: TextIO,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Run one CLI session; return the process exit code."""
    root = Path(args.path) if args.path else Path.cwd()
    if not root.is_dir():
        stderr.write(f"Not a directory: {root}\n")
        return 2

    settings = load_explorer_settings()
    if args.show_hidden:
        settings = dataclasses.replace(settings, show_hidden=True)
    expand_store = JsonExpandStore(DEFAULT_EXPAND_STATE_PATH) if args.remember_expanded else ExpandStore()
    prompter: Prompter = AutoPrompter(assume_yes=True) if args.yes else ConsolePrompter(stdin, stderr)
    no_color = args.no_color or not stdout.isatty()

    def notify(message: str, severity: Severity) -> None:
        stderr.write(f"{severity}: {message}\n")

    surface = MemorySurface()
    explorer = Explorer(
        surface=surface,
        expand_store=expand_store,
        settings=settings,
        prompter=prompter,
        theme=resolve_theme(args.theme, no_color=no_color),
        notifier=notify,
    )
    explorer.add_file_source(root)
    try:
        await explorer.start()
        if args.list_actions:
            stdout.write(format_action_listing(explorer))
            return 0

        failures = 0
        if args.expand_all and not await explorer.do_action("expandAll", line=1):
            failures += 1
        if args.reveal and not await explorer.do_action("reveal", [args.reveal], line=1):
            failures += 1
        if args.line is not None:
            await surface.set_cursor(args.line)
        for name, action_args in args.actions:
            if not await explorer.do_action(name, action_args):
                failures += 1

        stdout.write(surface.text() + "\n")
        if isinstance(expand_store, JsonExpandStore):
            expand_store.save()
        return 1 if failures else 0
    finally:
        explorer.close()


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and run one explorer session."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, stream=sys.stderr)
    code = asyncio.run(run(args, stdin=sys.stdin, stdout=sys.stdout, stderr=sys.stderr))
    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
