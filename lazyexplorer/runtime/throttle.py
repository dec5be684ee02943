"""Debounce/throttle wrappers for noisy change notifications.

Each wrapper is a small state machine: idle, or pending with a deadline, the
latest arguments, and the waiter of the latest call. Timers come from an
injected ``Scheduler`` so tests can drive time by hand.

A call that is superseded before its timer fires resolves to
``Skipped.SUPERSEDED``; a call dropped by a throttle window resolves to
``Skipped.THROTTLED``. Neither is an error: the caller's work simply did not
run.
"""

from __future__ import annotations

import asyncio
import enum
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

R = TypeVar("R")


class Skipped(enum.Enum):
    """Result of a wrapped call whose function did not run."""

    SUPERSEDED = "superseded"
    THROTTLED = "throttled"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock plus deferred-callback source."""

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopScheduler:
    """Scheduler backed by the running asyncio loop (seconds)."""

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class _Pending:
    deadline: float
    args: tuple[Any, ...]
    kwargs: dict[str, Any]
    waiter: asyncio.Future[Any]
    timer: TimerHandle


class Debouncer(Generic[R]):
    """Run ``fn`` once ``delay`` has elapsed since the most recent call."""

    def __init__(
        self,
        delay: float,
        fn: Callable[..., Awaitable[R] | R],
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.delay = delay
        self._fn = fn
        self._scheduler = scheduler if scheduler is not None else LoopScheduler()
        self._pending: _Pending | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def deadline(self) -> float | None:
        return self._pending.deadline if self._pending is not None else None

    def cancel(self) -> None:
        """Supersede the pending call, if any, without scheduling another."""
        pending = self._pending
        self._pending = None
        if pending is None:
            return
        pending.timer.cancel()
        if not pending.waiter.done():
            pending.waiter.set_result(Skipped.SUPERSEDED)

    async def __call__(self, *args: Any, **kwargs: Any) -> R | Skipped:
        self.cancel()
        waiter: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        timer = self._scheduler.call_later(self.delay, self._fire)
        self._pending = _Pending(
            deadline=self._scheduler.now() + self.delay,
            args=args,
            kwargs=kwargs,
            waiter=waiter,
            timer=timer,
        )
        return await waiter

    def _fire(self) -> None:
        pending = self._pending
        self._pending = None
        if pending is None or pending.waiter.done():
            return
        asyncio.ensure_future(self._run(pending))

    async def _run(self, pending: _Pending) -> None:
        try:
            result = await _maybe_await(self._fn(*pending.args, **pending.kwargs))
        except Exception as exc:
            if not pending.waiter.done():
                pending.waiter.set_exception(exc)
            return
        if not pending.waiter.done():
            pending.waiter.set_result(result)


class Throttler(Generic[R]):
    """Run ``fn`` at most once per ``delay`` window.

    Calls inside the window are dropped, or with ``tail=True`` deferred
    through a ``Debouncer`` so the latest one runs after the window.
    """

    def __init__(
        self,
        delay: float,
        fn: Callable[..., Awaitable[R] | R],
        *,
        tail: bool = False,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.delay = delay
        self.tail = tail
        self._fn = fn
        self._scheduler = scheduler if scheduler is not None else LoopScheduler()
        self._debouncer: Debouncer[R] = Debouncer(delay, fn, scheduler=self._scheduler)
        self._last_run: float | None = None

    def cancel(self) -> None:
        """Drop a deferred tail call, if any."""
        self._debouncer.cancel()

    async def __call__(self, *args: Any, **kwargs: Any) -> R | Skipped:
        now = self._scheduler.now()
        if self._last_run is not None and now - self._last_run < self.delay:
            if self.tail:
                return await self._debouncer(*args, **kwargs)
            return Skipped.THROTTLED
        self._debouncer.cancel()
        self._last_run = now
        return await _maybe_await(self._fn(*args, **kwargs))


def debounce(
    delay: float,
    fn: Callable[..., Awaitable[R] | R],
    *,
    scheduler: Scheduler | None = None,
) -> Debouncer[R]:
    return Debouncer(delay, fn, scheduler=scheduler)


def throttle(
    delay: float,
    fn: Callable[..., Awaitable[R] | R],
    *,
    tail: bool = False,
    scheduler: Scheduler | None = None,
) -> Throttler[R]:
    return Throttler(delay, fn, tail=tail, scheduler=scheduler)


__all__ = [
    "Skipped",
    "Scheduler",
    "TimerHandle",
    "LoopScheduler",
    "Debouncer",
    "Throttler",
    "debounce",
    "throttle",
]
