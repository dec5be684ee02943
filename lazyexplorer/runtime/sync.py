"""Exclusive access scope for read-after-mutate tree sequences.

A scope hands its body a handle that exposes the mutating operations but not
the scope itself, so a body cannot re-enter the scope it is running in.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

H = TypeVar("H")
T = TypeVar("T")


class SyncScope(Generic[H]):
    """Serialize bodies that must observe a stable tree for one source."""

    def __init__(self, handle: H) -> None:
        self._handle = handle
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run(self, body: Callable[[H], Awaitable[T]]) -> T:
        """Wait for earlier scopes to exit, then run ``body(handle)``."""
        async with self._lock:
            return await body(self._handle)


__all__ = ["SyncScope"]
