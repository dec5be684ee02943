"""Debounce and throttle state machines driven by a manual clock."""

from __future__ import annotations

import asyncio
import unittest

from lazyexplorer.runtime import Skipped, debounce, throttle
from tests.support import ManualScheduler, settle


class DebounceTests(unittest.IsolatedAsyncioTestCase):
    async def test_only_last_call_runs_and_superseded_calls_resolve_immediately(self) -> None:
        scheduler = ManualScheduler()
        calls: list[tuple[str, float]] = []

        async def record(value: str) -> str:
            calls.append((value, scheduler.now()))
            return value

        debounced = debounce(200, record, scheduler=scheduler)

        first = asyncio.ensure_future(debounced("t0"))
        await settle()
        scheduler.advance(100)
        second = asyncio.ensure_future(debounced("t100"))
        await settle()
        self.assertTrue(first.done())
        self.assertIs(first.result(), Skipped.SUPERSEDED)

        scheduler.advance(50)
        third = asyncio.ensure_future(debounced("t150"))
        await settle()
        self.assertIs(second.result(), Skipped.SUPERSEDED)
        self.assertEqual(debounced.deadline, 350)

        scheduler.advance(199)
        await settle()
        self.assertFalse(third.done())
        self.assertEqual(calls, [])

        scheduler.advance(1)
        await settle()
        self.assertEqual(third.result(), "t150")
        self.assertEqual(calls, [("t150", 350)])
        self.assertFalse(debounced.pending)

    async def test_cancel_supersedes_pending_call_without_running(self) -> None:
        scheduler = ManualScheduler()
        calls: list[int] = []
        debounced = debounce(10, calls.append, scheduler=scheduler)

        pending = asyncio.ensure_future(debounced(1))
        await settle()
        debounced.cancel()
        await settle()
        scheduler.advance(50)
        await settle()

        self.assertIs(pending.result(), Skipped.SUPERSEDED)
        self.assertEqual(calls, [])

    async def test_exception_from_wrapped_function_reaches_the_caller(self) -> None:
        scheduler = ManualScheduler()

        async def boom() -> None:
            raise ValueError("boom")

        debounced = debounce(5, boom, scheduler=scheduler)
        pending = asyncio.ensure_future(debounced())
        await settle()
        scheduler.advance(5)
        await settle()
        with self.assertRaises(ValueError):
            pending.result()


class ThrottleTests(unittest.IsolatedAsyncioTestCase):
    async def test_calls_inside_window_are_dropped_without_tail(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        throttled = throttle(100, calls.append, scheduler=scheduler)

        await throttled("a")
        scheduler.advance(40)
        self.assertIs(await throttled("b"), Skipped.THROTTLED)
        scheduler.advance(60)
        await throttled("c")

        self.assertEqual(calls, ["a", "c"])

    async def test_tail_defers_latest_call_through_debounce(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        throttled = throttle(100, calls.append, tail=True, scheduler=scheduler)

        await throttled("a")
        scheduler.advance(10)
        dropped = asyncio.ensure_future(throttled("b"))
        await settle()
        scheduler.advance(10)
        deferred = asyncio.ensure_future(throttled("c"))
        await settle()

        self.assertIs(dropped.result(), Skipped.SUPERSEDED)
        self.assertEqual(calls, ["a"])
        scheduler.advance(100)
        await settle()
        self.assertTrue(deferred.done())
        self.assertEqual(calls, ["a", "c"])

    async def test_leading_call_after_window_drops_stale_tail(self) -> None:
        scheduler = ManualScheduler()
        calls: list[str] = []
        throttled = throttle(100, calls.append, tail=True, scheduler=scheduler)

        await throttled("a")
        scheduler.advance(90)
        stale = asyncio.ensure_future(throttled("b"))
        await settle()
        scheduler.advance(10)
        await throttled("c")
        await settle()

        self.assertIs(stale.result(), Skipped.SUPERSEDED)
        scheduler.advance(200)
        await settle()
        self.assertEqual(calls, ["a", "c"])


if __name__ == "__main__":
    unittest.main()
