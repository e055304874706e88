"""
Keyed priority buffer.

Holds (key, value, priority) entries and always exposes the value of the
entry with the highest priority, or a default value when empty.

Rules:
- Every mutation recomputes and caches the winning value (O(n) scan).
  n is expected to stay in the single digits to low tens.
- Equal priorities: the first entry found in iteration order wins.
  Callers are expected to provide unique priorities.
- Deterministic, synchronous behavior
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Iterator, TypeVar

T = TypeVar("T")

ValueChangedFn = Callable[[T, T], None]


@dataclass(frozen=True)
class BufferEntry(Generic[T]):
    """Single keyed entry."""
    key: Hashable
    value: T
    priority: int


class PriorityBuffer(Generic[T]):
    """
    Keyed multi-value buffer resolving to its highest-priority value.

    on_value_changed(new, old) fires whenever a mutation changes the
    winning value.
    """

    def __init__(
        self,
        default: T,
        *,
        on_value_changed: ValueChangedFn[T] | None = None,
    ) -> None:
        self._default: T = default
        self._value: T = default
        self._entries: dict[Hashable, BufferEntry[T]] = {}
        self.on_value_changed = on_value_changed

    # -------------------------
    # Core operations
    # -------------------------

    def push(self, key: Hashable, value: T, priority: int) -> T:
        """
        Insert or replace the entry keyed by `key`.

        A replaced entry keeps its position in iteration order.

        Returns the winning value after the mutation.
        """
        self._entries[key] = BufferEntry(key=key, value=value, priority=priority)
        return self._refresh()

    def pop(self, key: Hashable) -> T:
        """
        Remove the entry keyed by `key` (no-op if absent).

        Returns the winning value after the mutation.
        """
        self._entries.pop(key, None)
        return self._refresh()

    def reset(self) -> T:
        """Remove all entries and revert to the default value."""
        self._entries.clear()
        return self._refresh()

    # -------------------------
    # Introspection helpers
    # -------------------------

    @property
    def value(self) -> T:
        return self._value

    @property
    def default(self) -> T:
        return self._default

    def winner(self) -> BufferEntry[T] | None:
        """Entry currently providing the value, or None when empty."""
        best: BufferEntry[T] | None = None
        for entry in self._entries.values():
            if best is None or entry.priority > best.priority:
                best = entry
        return best

    def get(self, key: Hashable) -> BufferEntry[T] | None:
        return self._entries.get(key)

    def ascending(self) -> list[BufferEntry[T]]:
        """
        Entries from lowest to highest priority.

        Stable: equal priorities keep insertion order.
        """
        return sorted(self._entries.values(), key=lambda e: e.priority)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[BufferEntry[T]]:
        return iter(list(self._entries.values()))

    # -------------------------
    # Internal
    # -------------------------

    def _refresh(self) -> T:
        best = self.winner()
        new_value = self._default if best is None else best.value

        old_value = self._value
        self._value = new_value

        changed = new_value is not old_value and new_value != old_value
        if changed and self.on_value_changed is not None:
            self.on_value_changed(new_value, old_value)

        return self._value
