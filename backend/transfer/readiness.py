"""
Readiness registry.

Any object exposing `is_busy` can register here to hold a pipeline in
AWAITING_READINESS until it reports ready.

Caller obligations:
- Register on activation, unregister on deactivation (no auto-expiry).
- A registered processor must eventually report not busy, otherwise the
  pipeline waits forever. There is no timeout.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ReadinessProcessor(Protocol):
    @property
    def is_busy(self) -> bool: ...


class ReadinessRegistry:
    """Dynamic set of readiness processors, in registration order."""

    def __init__(self) -> None:
        self._processors: list[ReadinessProcessor] = []

    def register(self, processor: ReadinessProcessor) -> None:
        """Add a processor. Registering the same object twice is a no-op."""
        if not any(p is processor for p in self._processors):
            self._processors.append(processor)

    def unregister(self, processor: ReadinessProcessor) -> bool:
        """Remove a processor. Returns False if it was not registered."""
        for index, registered in enumerate(self._processors):
            if registered is processor:
                del self._processors[index]
                return True
        return False

    def any_busy(self) -> bool:
        return any(p.is_busy for p in self._processors)

    def __len__(self) -> int:
        return len(self._processors)
