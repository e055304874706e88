"""
Global time-scale service.

A keyed set of (scale, priority) overrides resolved to a single value,
defaulting to 1.0. Exactly one owner wins: the highest-priority override.
"""

from __future__ import annotations

from typing import Callable, Hashable

from buffers.priority_buffer import PriorityBuffer
from constants import DEFAULT_TIME_SCALE
from observability.logger import log_event

TimeScaleListener = Callable[[float, float], None]


class TimeScale:
    """
    Priority-resolved time-scale scalar.

    Listeners receive (new, old) whenever the resolved value changes.
    """

    def __init__(self, default: float = DEFAULT_TIME_SCALE) -> None:
        self._buffer: PriorityBuffer[float] = PriorityBuffer(
            default,
            on_value_changed=self._on_value_changed,
        )
        self._listeners: list[TimeScaleListener] = []

    @property
    def value(self) -> float:
        return self._buffer.value

    def push_override(self, key: Hashable, scale: float, priority: int) -> float:
        """Insert or replace the override keyed by `key`."""
        return self._buffer.push(key, scale, priority)

    def pop_override(self, key: Hashable) -> float:
        """Remove an override (no-op if absent)."""
        return self._buffer.pop(key)

    def has_override(self, key: Hashable) -> bool:
        return key in self._buffer

    def subscribe(self, listener: TimeScaleListener) -> Callable[[], None]:
        """Register a change listener. Returns the matching unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _on_value_changed(self, new: float, old: float) -> None:
        log_event({
            "event_type": "TIME_SCALE_CHANGED",
            "level": "debug",
            "time_scale": new,
            "previous": old,
        })
        for listener in list(self._listeners):
            listener(new, old)
