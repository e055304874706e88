"""
Pipeline behavior strategy.

A PipelineBehavior is handed to one pipeline and receives its phase
callbacks. Gates (may_start / may_complete) are polled once per tick;
returning False holds the pipeline in its current phase.

Rules:
- Hooks are synchronous and must not block.
- Exceptions raised by a hook propagate into the pipeline task.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Sequence

from constants import PAUSED_TIME_SCALE, TRANSFER_TIME_SCALE_PRIORITY
from transfer.enums.direction import Direction
from transfer.enums.phase import Phase
from transfer.requests import TransferMode, TransferRequest

if TYPE_CHECKING:
    from modes.time_scale import TimeScale


class PipelineBehavior:
    """No-op behavior. Subclass and override the hooks you need."""

    def setup(self, requests: Sequence[TransferRequest]) -> None:
        """Called once per run with the requests queued so far."""

    def may_start(self) -> bool:
        return True

    def on_start(self) -> None:
        """Start hooks fire, right before the settle delay."""

    def on_phase(self, phase: Phase) -> None:
        """Called on every phase change, INACTIVE included."""

    def on_pre_transfer(self, bundle: str, mode: TransferMode) -> None:
        """One bundle is about to move."""

    def on_transfer(self, operation: asyncio.Future[None], index: int, total: int) -> None:
        """
        A transfer operation has begun.

        The operation is the future the pipeline awaits. Observe it with
        add_done_callback(); do not cancel it.
        """

    def on_ready(self) -> None:
        """All transfers done, memory freed, readiness reached."""

    def may_complete(self) -> bool:
        return True

    def on_cancel(self) -> None:
        """The run was stopped before completing."""

    def on_stop(self) -> None:
        """The pipeline returned to INACTIVE, completed or not."""


class DefaultPipelineBehavior(PipelineBehavior):
    """
    Freezes the global time scale while a transfer is live.

    The override is pushed when the run starts and popped when it stops,
    so a cancelled run never leaves time frozen.
    """

    def __init__(
        self,
        time_scale: TimeScale | None,
        direction: Direction,
        *,
        pause_time: bool = True,
    ) -> None:
        self._time_scale = time_scale
        self._key = f"transfer_{direction.value}"
        self._pause_time = pause_time

    @property
    def override_key(self) -> str:
        return self._key

    def on_start(self) -> None:
        if self._pause_time and self._time_scale is not None:
            self._time_scale.push_override(
                self._key,
                PAUSED_TIME_SCALE,
                TRANSFER_TIME_SCALE_PRIORITY,
            )

    def on_stop(self) -> None:
        if self._time_scale is not None:
            self._time_scale.pop_override(self._key)
