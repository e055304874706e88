# pylint: disable=missing-module-docstring,missing-function-docstring

from modes.time_scale import TimeScale


def test_highest_priority_override_owns_the_scale():
    time_scale = TimeScale()

    time_scale.push_override("slow_motion", 0.5, 10)
    time_scale.push_override("transfer_load", 0.0, 999)
    assert time_scale.value == 0.0

    time_scale.pop_override("transfer_load")
    assert time_scale.value == 0.5
    assert not time_scale.has_override("transfer_load")


def test_listeners_receive_new_and_old_values():
    time_scale = TimeScale()
    changes: list[tuple[float, float]] = []
    unsubscribe = time_scale.subscribe(lambda new, old: changes.append((new, old)))

    time_scale.push_override("pause", 0.0, 1)
    time_scale.push_override("pause", 0.0, 2)
    unsubscribe()
    time_scale.pop_override("pause")

    assert changes == [(0.0, 1.0)]
    assert time_scale.value == 1.0
