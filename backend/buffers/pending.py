"""
One-tick deferral queue for push/pop requests.

Requests submitted mid-tick are held here and handed back, in submission
order per kind, when the owner drains the queue at the next tick.

Rules:
- Pushes drain before pops
- An item appears at most once per kind
- Deterministic, synchronous behavior
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PendingBatch(Generic[T]):
    """Requests drained for one tick."""
    pushes: tuple[T, ...] = ()
    pops: tuple[T, ...] = ()

    def is_empty(self) -> bool:
        return not self.pushes and not self.pops


class PendingQueue(Generic[T]):
    """FIFO push/pop request lists consumed once per tick."""

    def __init__(self) -> None:
        self._pushes: list[T] = []
        self._pops: list[T] = []

    def request_push(self, item: T) -> bool:
        """Queue a push. Returns False if already queued."""
        if any(queued is item for queued in self._pushes):
            return False
        self._pushes.append(item)
        return True

    def request_pop(self, item: T) -> bool:
        """Queue a pop. Returns False if already queued."""
        if any(queued is item for queued in self._pops):
            return False
        self._pops.append(item)
        return True

    def discard(self, item: T) -> bool:
        """
        Drop every queued request for `item`.

        Used when the item is pushed or popped immediately, bypassing the
        queue. Returns True if anything was removed.
        """
        before = len(self._pushes) + len(self._pops)
        self._pushes = [queued for queued in self._pushes if queued is not item]
        self._pops = [queued for queued in self._pops if queued is not item]
        return len(self._pushes) + len(self._pops) != before

    def is_push_pending(self, item: T) -> bool:
        return any(queued is item for queued in self._pushes)

    def drain(self) -> PendingBatch[T]:
        """
        Atomically take all queued requests.

        After this call, the queue is empty.
        """
        if not self._pushes and not self._pops:
            return PendingBatch()
        batch = PendingBatch(pushes=tuple(self._pushes), pops=tuple(self._pops))
        self._pushes.clear()
        self._pops.clear()
        return batch

    def __len__(self) -> int:
        return len(self._pushes) + len(self._pops)
