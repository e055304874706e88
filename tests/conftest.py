# pylint: disable=missing-module-docstring,missing-function-docstring

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import pytest

from config import AppConfig
from observability import logger


class FakeHost:
    """
    In-memory bundle host.

    - Records every call as (op, bundle, mode)
    - Bundles listed in `failing` raise RuntimeError
    - Bundles with a gate wait until the gate is set
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, Any]] = []
        self.failing: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.free_memory_calls = 0

    def gate(self, bundle: str) -> asyncio.Event:
        self.gates[bundle] = asyncio.Event()
        return self.gates[bundle]

    async def _transfer(self, op: str, bundle: str, mode: Any) -> None:
        self.calls.append((op, bundle, mode))
        gate = self.gates.get(bundle)
        if gate is not None:
            await gate.wait()
        if bundle in self.failing:
            raise RuntimeError(f"{op} failed: {bundle}")

    def load(self, bundle: str, mode: Any):
        return self._transfer("load", bundle, mode)

    def unload(self, bundle: str, mode: Any):
        return self._transfer("unload", bundle, mode)

    async def free_memory(self) -> None:
        self.free_memory_calls += 1


@pytest.fixture(autouse=True)
def log_lines(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Capture every JSONL line and reset logger settings per test."""
    captured: list[str] = []
    monkeypatch.setattr(logger, "_print", captured.append)
    logger.configure(min_level="debug", enabled=True)
    yield captured
    logger.configure(min_level="debug", enabled=True)


@pytest.fixture
def log_records(log_lines: list[str]) -> Callable[[str], list[dict[str, Any]]]:
    """Return a lookup: event_type -> decoded records."""

    def _lookup(event_type: str) -> list[dict[str, Any]]:
        decoded = [json.loads(line) for line in log_lines]
        return [r for r in decoded if r.get("event_type") == event_type]

    return _lookup


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def fast_config() -> AppConfig:
    return AppConfig(
        log_level="debug",
        tick_interval_ms=1,
        start_settle_ms=0,
        inter_transfer_ms=0,
    )


async def step_until(runtime, condition: Callable[[], bool], *, max_steps: int = 50) -> int:
    """Step the runtime until condition() holds. Returns the steps taken."""
    for steps in range(max_steps):
        if condition():
            return steps
        await runtime.step()
    assert condition(), "condition not reached"
    return max_steps
