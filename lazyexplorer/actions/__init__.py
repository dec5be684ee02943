"""Action registry, conflict guard, prompts, and the file action table."""

from .file_actions import load_file_actions
from .guard import GuardReport, PlannedPair, overwrite_prompt, reject_existing_targets
from .prompts import AutoPrompter, ConsolePrompter, Prompter
from .registry import (
    Action,
    ActionArg,
    ActionContext,
    ActionHost,
    ActionKind,
    ActionOptions,
    ActionOutcome,
    ActionRegistry,
    ActionTarget,
)

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
    "AutoPrompter",
    "ConsolePrompter",
    "GuardReport",
    "PlannedPair",
    "Prompter",
    "load_file_actions",
    "overwrite_prompt",
    "reject_existing_targets",
]
