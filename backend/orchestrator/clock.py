"""
Tick clock.

Tasks that poll a condition once per application tick await
next_tick(); the runtime driver calls advance() once per tick.

Each waiter owns its own future, so cancelling one waiter never
affects another.
"""

from __future__ import annotations

import asyncio


class TickClock:
    def __init__(self) -> None:
        self._waiters: list[asyncio.Future[int]] = []
        self._tick: int = 0

    @property
    def tick(self) -> int:
        """Number of ticks advanced so far."""
        return self._tick

    @property
    def waiter_count(self) -> int:
        return len(self._waiters)

    async def next_tick(self) -> int:
        """Suspend until the next advance(). Returns the new tick number."""
        future: asyncio.Future[int] = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        try:
            return await future
        finally:
            if future in self._waiters:
                self._waiters.remove(future)

    def advance(self) -> int:
        """Wake every current waiter."""
        self._tick += 1
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(self._tick)
        return self._tick
