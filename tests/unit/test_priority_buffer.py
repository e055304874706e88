# pylint: disable=missing-module-docstring,missing-function-docstring

from buffers.priority_buffer import PriorityBuffer


def test_empty_buffer_exposes_default():
    buffer: PriorityBuffer[str] = PriorityBuffer("idle")

    assert buffer.value == "idle"
    assert buffer.winner() is None
    assert len(buffer) == 0


def test_highest_priority_wins_regardless_of_insertion_order():
    buffer: PriorityBuffer[str] = PriorityBuffer("idle")

    buffer.push("b", "high", 10)
    buffer.push("a", "low", 1)
    buffer.push("c", "mid", 5)

    assert buffer.value == "high"

    buffer.pop("b")
    assert buffer.value == "mid"


def test_push_replaces_entry_with_same_key():
    buffer: PriorityBuffer[int] = PriorityBuffer(0)

    buffer.push("k", 1, 1)
    buffer.push("k", 2, 1)

    assert len(buffer) == 1
    assert buffer.value == 2


def test_pop_of_absent_key_is_noop():
    buffer: PriorityBuffer[int] = PriorityBuffer(0)
    buffer.push("k", 7, 3)

    assert buffer.pop("missing") == 7
    assert len(buffer) == 1


def test_reset_reverts_to_default():
    buffer: PriorityBuffer[int] = PriorityBuffer(-1)
    buffer.push("a", 1, 1)
    buffer.push("b", 2, 2)

    assert buffer.reset() == -1
    assert len(buffer) == 0


def test_equal_priorities_resolve_to_first_found():
    buffer: PriorityBuffer[str] = PriorityBuffer("idle")

    buffer.push("first", "one", 4)
    buffer.push("second", "two", 4)

    assert buffer.value == "one"


def test_ascending_orders_by_priority():
    buffer: PriorityBuffer[str] = PriorityBuffer("idle")
    buffer.push("c", "C", 3)
    buffer.push("a", "A", -1)
    buffer.push("b", "B", 2)

    assert [e.value for e in buffer.ascending()] == ["A", "B", "C"]


def test_value_changed_callback_fires_only_on_change():
    changes: list[tuple[float, float]] = []
    buffer: PriorityBuffer[float] = PriorityBuffer(
        1.0,
        on_value_changed=lambda new, old: changes.append((new, old)),
    )

    buffer.push("pause", 0.0, 10)
    buffer.push("slow", 0.5, 1)  # lower priority, winner unchanged
    buffer.pop("pause")
    buffer.pop("slow")

    assert changes == [(0.0, 1.0), (0.5, 0.0), (1.0, 0.5)]
