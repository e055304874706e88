"""
Public transfer event definitions and the bus that fans them out.

Rules:
- Events describe facts that have occurred.
- Events carry data only (no behavior).
- Delivery is synchronous and fire-and-forget: listeners return nothing
  and a failing listener never affects the pipeline or other listeners.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from observability.logger import log_event, now_ms
from transfer.enums.direction import Direction
from transfer.enums.phase import Phase
from transfer.requests import TransferMode


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """Canonical public events emitted by the transfer pipelines."""

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    START_LOADING = "START_LOADING"
    STOP_LOADING = "STOP_LOADING"
    PRE_LOAD = "PRE_LOAD"
    POST_LOAD = "POST_LOAD"

    # ------------------------------------------------------------------
    # Unloading
    # ------------------------------------------------------------------
    START_UNLOADING = "START_UNLOADING"
    STOP_UNLOADING = "STOP_UNLOADING"
    PRE_UNLOAD = "PRE_UNLOAD"
    POST_UNLOAD = "POST_UNLOAD"

    # ------------------------------------------------------------------
    # Both directions
    # ------------------------------------------------------------------
    PHASE_CHANGED = "PHASE_CHANGED"


_START = {Direction.LOAD: EventType.START_LOADING, Direction.UNLOAD: EventType.START_UNLOADING}
_STOP = {Direction.LOAD: EventType.STOP_LOADING, Direction.UNLOAD: EventType.STOP_UNLOADING}
_PRE = {Direction.LOAD: EventType.PRE_LOAD, Direction.UNLOAD: EventType.PRE_UNLOAD}
_POST = {Direction.LOAD: EventType.POST_LOAD, Direction.UNLOAD: EventType.POST_UNLOAD}


# =============================================================================
# Events
# =============================================================================

@dataclass(frozen=True)
class Event:
    """
    Base event type.

    All events carry:
    - event_type: discriminant
    - direction: which pipeline emitted it
    - ts_ms: wall-clock timestamp at emission
    """

    event_type: EventType
    direction: Direction
    ts_ms: int


@dataclass(frozen=True)
class TransferStarted(Event):
    """A pipeline fired its Start hooks."""


@dataclass(frozen=True)
class TransferStopped(Event):
    """A pipeline returned to INACTIVE."""
    completed: bool


@dataclass(frozen=True)
class PhaseChanged(Event):
    """A pipeline entered a new phase."""
    phase: Phase
    previous: Phase


@dataclass(frozen=True)
class BundleTransfer(Event):
    """Emitted right before (PRE_*) and after (POST_*) one bundle moves."""
    bundle: str
    mode: TransferMode


# =============================================================================
# Constructors
# =============================================================================

def started(direction: Direction) -> TransferStarted:
    return TransferStarted(event_type=_START[direction], direction=direction, ts_ms=now_ms())


def stopped(direction: Direction, *, completed: bool) -> TransferStopped:
    return TransferStopped(
        event_type=_STOP[direction],
        direction=direction,
        ts_ms=now_ms(),
        completed=completed,
    )


def phase_changed(direction: Direction, phase: Phase, previous: Phase) -> PhaseChanged:
    return PhaseChanged(
        event_type=EventType.PHASE_CHANGED,
        direction=direction,
        ts_ms=now_ms(),
        phase=phase,
        previous=previous,
    )


def pre_transfer(direction: Direction, bundle: str, mode: TransferMode) -> BundleTransfer:
    return BundleTransfer(
        event_type=_PRE[direction],
        direction=direction,
        ts_ms=now_ms(),
        bundle=bundle,
        mode=mode,
    )


def post_transfer(direction: Direction, bundle: str, mode: TransferMode) -> BundleTransfer:
    return BundleTransfer(
        event_type=_POST[direction],
        direction=direction,
        ts_ms=now_ms(),
        bundle=bundle,
        mode=mode,
    )


# =============================================================================
# Bus
# =============================================================================

EventListener = Callable[[Event], None]


class EventBus:
    """Synchronous fan-out of public transfer events."""

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register a listener. Returns the matching unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: Event) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                log_event({
                    "event_type": "EVENT_LISTENER_ERROR",
                    "level": "error",
                    "transfer_event": event.event_type.value,
                    "exception": type(exc).__name__,
                    "message": str(exc),
                })
