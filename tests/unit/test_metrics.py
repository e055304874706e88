# pylint: disable=missing-module-docstring,missing-function-docstring

import json

import pytest

from observability import metrics


def test_timer_emits_one_metric(log_lines: list[str]) -> None:
    timer_id = metrics.start_timer("load_pipeline_run")

    duration = metrics.stop_timer(timer_id, direction="load", details={"completed": True})

    assert duration is not None and duration >= 0
    record = json.loads(log_lines[-1])
    assert record["event_type"] == "METRIC_TIMER"
    assert record["metric"] == "load_pipeline_run"
    assert record["direction"] == "load"
    assert record["details"] == {"completed": True}


def test_stopping_unknown_timer_returns_none(log_lines: list[str]) -> None:
    assert metrics.stop_timer("timer_missing") is None
    assert log_lines == []


def test_timed_stops_even_on_error(log_lines: list[str]) -> None:
    before = metrics.active_timer_count()

    with pytest.raises(RuntimeError):
        with metrics.timed("free_memory", direction="unload"):
            raise RuntimeError("boom")

    assert metrics.active_timer_count() == before
    assert json.loads(log_lines[-1])["metric"] == "free_memory"
