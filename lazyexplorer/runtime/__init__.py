"""Runtime plumbing: config, logging, timers, and sync scopes."""

from .sync import SyncScope
from .throttle import Debouncer, LoopScheduler, Scheduler, Skipped, Throttler, debounce, throttle

__all__ = [
    "SyncScope",
    "Debouncer",
    "Throttler",
    "LoopScheduler",
    "Scheduler",
    "Skipped",
    "debounce",
    "throttle",
]
