# pylint: disable=missing-module-docstring,missing-function-docstring

from __future__ import annotations

from typing import Any, Callable

from transfer import events
from transfer.enums.direction import Direction
from transfer.enums.phase import Phase
from transfer.enums.transfer_mode import LoadMode, UnloadMode
from transfer.events import EventBus, EventType
from transfer.readiness import ReadinessProcessor, ReadinessRegistry


class Processor:
    def __init__(self, busy: bool) -> None:
        self.is_busy = busy


def test_constructors_pick_direction_specific_types():
    assert events.started(Direction.LOAD).event_type is EventType.START_LOADING
    assert events.started(Direction.UNLOAD).event_type is EventType.START_UNLOADING
    assert events.stopped(Direction.LOAD, completed=True).event_type is EventType.STOP_LOADING
    assert events.pre_transfer(Direction.UNLOAD, "a", UnloadMode.DEFAULT).event_type is EventType.PRE_UNLOAD
    assert events.post_transfer(Direction.LOAD, "a", LoadMode.ADDITIVE).event_type is EventType.POST_LOAD

    changed = events.phase_changed(Direction.LOAD, Phase.PREPARE, Phase.REQUEST)
    assert changed.event_type is EventType.PHASE_CHANGED
    assert changed.previous is Phase.REQUEST


def test_bus_delivers_in_subscription_order_and_unsubscribes():
    bus = EventBus()
    seen: list[str] = []

    bus.subscribe(lambda e: seen.append("first"))
    unsubscribe = bus.subscribe(lambda e: seen.append("second"))

    bus.emit(events.started(Direction.LOAD))
    unsubscribe()
    bus.emit(events.started(Direction.LOAD))

    assert seen == ["first", "second", "first"]


def test_failing_listener_is_isolated(log_records: Callable[[str], list[dict[str, Any]]]):
    bus = EventBus()
    seen: list[events.Event] = []

    def broken(_: events.Event) -> None:
        raise RuntimeError("listener down")

    bus.subscribe(broken)
    bus.subscribe(seen.append)
    bus.emit(events.started(Direction.UNLOAD))

    assert len(seen) == 1
    error = log_records("EVENT_LISTENER_ERROR")[0]
    assert error["level"] == "error"
    assert error["transfer_event"] == "START_UNLOADING"


def test_readiness_registry_tracks_busy_processors():
    registry = ReadinessRegistry()
    busy, idle = Processor(True), Processor(False)

    assert not registry.any_busy()

    registry.register(busy)
    registry.register(busy)
    registry.register(idle)

    assert len(registry) == 2
    assert registry.any_busy()

    busy.is_busy = False
    assert not registry.any_busy()

    assert registry.unregister(busy) is True
    assert registry.unregister(busy) is False
    assert len(registry) == 1


def test_processor_protocol_is_structural():
    assert isinstance(Processor(False), ReadinessProcessor)
