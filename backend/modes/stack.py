"""
Priority-resolved mode stack.

Responsibilities:
- Hold every live mode, keyed by instance, prioritized by mode.priority
- Resolve the authoritative mode (highest priority) after every mutation
- Invoke enable/disable on authority changes (disable old, then enable new)
- Fold all stacked modes into one OverrideRecord plus a time-scale scalar
- Defer push/pop requests to the next tick and apply them as one batch

Non-responsibilities:
- NO knowledge of what any particular mode does
- NO timers, NO async

Failure semantics:
- Duplicate non-multiple-instance push: warning, no-op
- Priority shared with a different concrete type: error, no-op
- Pop of an absent mode / invalid type: returns False
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from buffers.pending import PendingQueue
from buffers.priority_buffer import PriorityBuffer
from constants import MODE_STACK_TIME_SCALE_KEY
from modes.builtin import DefaultMode
from modes.enums.lifetime import Lifetime
from modes.mode import Mode
from modes.override import OverrideListener, OverrideRecord
from observability.logger import log_event

if TYPE_CHECKING:
    from modes.time_scale import TimeScale


class ModeStack:
    """
    Stack of modes with a single authoritative entry.

    Guarantees:
    - current is never None: a persistent default mode is pushed at
      construction and cannot be popped
    - At most one instance per concrete type unless multiple_instance
    - Pending requests are applied push-then-pop, followed by exactly
      one refresh
    """

    def __init__(
        self,
        *,
        default_mode: Mode | None = None,
        record: OverrideRecord | None = None,
        time_scale: TimeScale | None = None,
    ) -> None:
        self._buffer: PriorityBuffer[Mode | None] = PriorityBuffer(None)
        self._pending: PendingQueue[Mode] = PendingQueue()
        self._record: OverrideRecord = record if record is not None else OverrideRecord()
        self._time_scale = time_scale
        self._time_scale_override: tuple[float, int] | None = None
        self._listeners: list[OverrideListener] = []
        self._current: Mode | None = None

        self._default_mode: Mode = default_mode if default_mode is not None else DefaultMode()
        self.push(self._default_mode)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def current(self) -> Mode:
        """The authoritative mode."""
        assert self._current is not None, "mode stack has no default mode"
        return self._current

    @property
    def default_mode(self) -> Mode:
        return self._default_mode

    @property
    def record(self) -> OverrideRecord:
        """Last folded override record. Treat as read-only."""
        return self._record

    @property
    def time_scale_override(self) -> tuple[float, int] | None:
        """Folded (scale, priority) claim, or None if no mode claims it."""
        return self._time_scale_override

    def modes(self) -> list[Mode]:
        """Stacked modes from lowest to highest priority."""
        return [entry.value for entry in self._buffer.ascending() if entry.value is not None]

    def contains(self, mode: Mode) -> bool:
        return mode in self._buffer

    def contains_type(self, mode_type: type[Mode]) -> bool:
        """True if a mode of exactly this concrete type is on the stack."""
        return any(type(entry.value) is mode_type for entry in self._buffer)

    def pending_count(self) -> int:
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._buffer)

    # ------------------------------------------------------------------
    # Immediate operations
    # ------------------------------------------------------------------

    def push(self, mode: Mode) -> bool:
        """
        Push a mode now and refresh the authoritative mode.

        Returns False if the push was rejected.
        """
        self._pending.discard(mode)
        return self._push(mode, refresh=True)

    def pop(self, mode: Mode) -> bool:
        """
        Remove a mode now.

        A mode still waiting in the pending queue is dropped from it and
        becomes inactive without ever reaching the stack.
        """
        if mode not in self._buffer and self._pending.is_push_pending(mode):
            self._pending.discard(mode)
            mode._mark_inactive()  # pylint: disable=protected-access
            log_event({
                "event_type": "MODE_PENDING_DROPPED",
                "level": "debug",
                "mode": type(mode).__name__,
            })
            return True

        self._pending.discard(mode)
        return self._pop(mode, refresh=True)

    def pop_type(self, mode_type: type) -> bool:
        """
        Remove the first stacked mode that is an instance of `mode_type`.

        Returns False if none is present, or if `mode_type` is not a Mode
        type (logged as an error).
        """
        if not isinstance(mode_type, type) or not issubclass(mode_type, Mode):
            log_event({
                "event_type": "MODE_POP_INVALID_TYPE",
                "level": "error",
                "mode_type": getattr(mode_type, "__name__", repr(mode_type)),
            })
            return False

        for entry in self._buffer:
            if isinstance(entry.value, mode_type):
                return self.pop(entry.value)
        return False

    def pop_non_persistent(self) -> int:
        """
        Remove every non-persistent mode, then refresh once.

        Returns the number of modes removed.
        """
        removed = 0
        for mode in reversed(self.modes()):
            if not mode.persistent:
                self._pending.discard(mode)
                if self._pop(mode, refresh=False):
                    removed += 1

        self.refresh()
        return removed

    # ------------------------------------------------------------------
    # Deferred operations (applied at the next tick)
    # ------------------------------------------------------------------

    def push_deferred(self, mode: Mode) -> bool:
        """
        Queue a push for the next update().

        Modes already on the stack or already removed are rejected with a
        warning. Returns True if the push is queued.
        """
        if mode in self._buffer or mode.lifetime is Lifetime.ON_STACK:
            return self._reject(mode, "already_on_stack", deactivate=False)
        if mode.lifetime is Lifetime.INACTIVE:
            return self._reject(mode, "inactive", deactivate=False)

        if self._pending.request_push(mode):
            mode._attach(self)  # pylint: disable=protected-access
            mode._mark_pending()  # pylint: disable=protected-access
        return True

    def pop_deferred(self, mode: Mode) -> None:
        """Queue a pop for the next update()."""
        self._pending.request_pop(mode)

    def update(self) -> None:
        """
        Per-tick entry point.

        Applies every pending push, then every pending pop, refreshes once
        if anything changed, then calls on_update() on the current mode.
        """
        batch = self._pending.drain()
        if not batch.is_empty():
            for mode in batch.pushes:
                self._push(mode, refresh=False)
            for mode in batch.pops:
                self._pop(mode, refresh=False)
            self.refresh()

        self.current.on_update()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """
        Recompute the authoritative mode and fold the override record.

        On change: disable the previous mode (only if still active), then
        enable the new one. Never the reverse order.
        """
        new_current = self._buffer.value
        previous = self._current

        if new_current is not previous:
            self._current = new_current
            log_event({
                "event_type": "MODE_CHANGED",
                "mode": type(new_current).__name__,
                "previous": type(previous).__name__ if previous is not None else None,
            })

            if previous is not None and previous.is_active:
                previous.on_disable()
            if new_current is not None:
                new_current.on_enable()

        self.fold()

    def fold(self) -> OverrideRecord:
        """
        Fold every stacked mode into the shared record.

        Pass 1 (stack order, low to high): each mode mutates the freshly
        reset record; the highest priority writer wins contended fields.

        Pass 2 (explicit priority): the time-scale claim with the highest
        priority wins; ties keep the first seen.
        """
        record = self._record.reset()
        best: tuple[float, int] | None = None

        for mode in self.modes():
            mode.contribute(record)

            claim = mode.time_scale_override()
            if claim is not None and (best is None or claim[1] > best[1]):
                best = claim

        self._time_scale_override = best
        self._publish_time_scale()
        self._notify_listeners()
        return record

    # ------------------------------------------------------------------
    # Override listeners
    # ------------------------------------------------------------------

    def register_override_listener(self, listener: OverrideListener) -> None:
        """
        Register a consumer of the folded record.

        The listener is invoked immediately with the current record, then
        after every refresh.
        """
        self._listeners.append(listener)
        self._call_listener(listener)

    def unregister_override_listener(self, listener: OverrideListener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _push(self, mode: Mode, *, refresh: bool) -> bool:
        if mode in self._buffer:
            return self._reject(mode, "already_on_stack", deactivate=False)

        if mode.lifetime is Lifetime.INACTIVE:
            return self._reject(mode, "inactive", deactivate=False)

        priority = getattr(mode, "priority", None)
        if not isinstance(priority, int) or isinstance(priority, bool):
            log_event({
                "event_type": "MODE_PRIORITY_INVALID",
                "level": "error",
                "mode": type(mode).__name__,
                "priority": repr(priority),
            })
            mode._mark_inactive()  # pylint: disable=protected-access
            return False

        if not mode.multiple_instance and self.contains_type(type(mode)):
            return self._reject(mode, "duplicate_instance", deactivate=True)

        for other in self.modes():
            if other.priority == priority and type(other) is not type(mode):
                log_event({
                    "event_type": "MODE_PRIORITY_CONFLICT",
                    "level": "error",
                    "mode": type(mode).__name__,
                    "conflicts_with": type(other).__name__,
                    "priority": priority,
                })
                mode._mark_inactive()  # pylint: disable=protected-access
                return False

        mode._attach(self)  # pylint: disable=protected-access
        self._buffer.push(mode, mode, priority)

        log_event({
            "event_type": "MODE_PUSHED",
            "level": "debug",
            "mode": type(mode).__name__,
            "priority": priority,
        })

        mode._pushed_on_stack()  # pylint: disable=protected-access

        if refresh:
            self.refresh()
        return True

    def _pop(self, mode: Mode, *, refresh: bool) -> bool:
        if mode not in self._buffer:
            return False

        if mode is self._default_mode:
            log_event({
                "event_type": "MODE_POP_REJECTED",
                "level": "warning",
                "mode": type(mode).__name__,
                "reason": "default_mode",
            })
            return False

        self._buffer.pop(mode)

        log_event({
            "event_type": "MODE_POPPED",
            "level": "debug",
            "mode": type(mode).__name__,
        })

        if refresh:
            self.refresh()

        mode._removed_from_stack()  # pylint: disable=protected-access
        return True

    def _reject(self, mode: Mode, reason: str, *, deactivate: bool) -> bool:
        log_event({
            "event_type": "MODE_PUSH_REJECTED",
            "level": "warning",
            "mode": type(mode).__name__,
            "reason": reason,
        })
        if deactivate:
            mode._mark_inactive()  # pylint: disable=protected-access
        return False

    def _publish_time_scale(self) -> None:
        if self._time_scale is None:
            return
        if self._time_scale_override is None:
            self._time_scale.pop_override(MODE_STACK_TIME_SCALE_KEY)
        else:
            scale, priority = self._time_scale_override
            self._time_scale.push_override(MODE_STACK_TIME_SCALE_KEY, scale, priority)

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            self._call_listener(listener)

    def _call_listener(self, listener: OverrideListener) -> None:
        try:
            listener(self._record)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "event_type": "OVERRIDE_LISTENER_ERROR",
                "level": "error",
                "exception": type(exc).__name__,
                "message": str(exc),
            })
