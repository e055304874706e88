"""
Built-in modes shipped with the core.

- DefaultMode: lowest priority, always on the stack
- QuitMode: application is shutting down
- PauseMode: gameplay paused, time frozen

Loading / Unloading modes live next to their pipelines (transfer.binding).
"""

from __future__ import annotations

from constants import (
    DEFAULT_MODE_PRIORITY,
    PAUSE_MODE_PRIORITY,
    PAUSED_TIME_SCALE,
    QUIT_MODE_PRIORITY,
)
from modes.mode import Mode
from modes.override import OverrideRecord


class DefaultMode(Mode):
    """Fallback mode so the authoritative mode is never undefined."""

    priority = DEFAULT_MODE_PRIORITY
    persistent = True


class QuitMode(Mode):
    """Pushed once the application starts quitting."""

    priority = QUIT_MODE_PRIORITY
    persistent = True

    def contribute(self, record: OverrideRecord) -> None:
        record.is_quitting = True
        record.has_control = False


class PauseMode(Mode):
    """
    Pauses the application.

    Claims the time scale at its own priority, so it wins over the
    transfer pause and any lower mode.
    """

    priority = PAUSE_MODE_PRIORITY
    persistent = True

    def contribute(self, record: OverrideRecord) -> None:
        record.is_paused = True

    def time_scale_override(self) -> tuple[float, int] | None:
        return (PAUSED_TIME_SCALE, self.priority)
