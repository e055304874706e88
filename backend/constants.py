"""
BEHAVIOR-AS-CONSTANTS
---------------------
Single source of truth for the fixed behavioral values of the runtime core.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Deployment-tunable values get a default here and an override in config.py.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Mode priorities
# =============================================================================
# Priorities and concrete mode types form a bijection: two different mode
# classes must never share a value.

DEFAULT_MODE_PRIORITY: Final[int] = -1
UNLOADING_MODE_PRIORITY: Final[int] = 0
LOADING_MODE_PRIORITY: Final[int] = 999
QUIT_MODE_PRIORITY: Final[int] = 10_000
PAUSE_MODE_PRIORITY: Final[int] = 2**31 - 1 - 999

# =============================================================================
# Time scale
# =============================================================================

DEFAULT_TIME_SCALE: Final[float] = 1.0
PAUSED_TIME_SCALE: Final[float] = 0.0

# Override pushed by the default pipeline behavior while a transfer is live
TRANSFER_TIME_SCALE_PRIORITY: Final[int] = 999

# Key under which the mode stack publishes its folded time-scale override
MODE_STACK_TIME_SCALE_KEY: Final[str] = "mode_stack"

# =============================================================================
# Pipeline timing
# =============================================================================

# Settle delay after the Start hooks fire, before any transfer begins
START_SETTLE_MS: Final[int] = 200

# Throttle between two consecutive bundle transfers
INTER_TRANSFER_MS: Final[int] = 50

# =============================================================================
# Tick driver
# =============================================================================

TICK_INTERVAL_MS: Final[int] = 16

# Upper bound on event-loop yields per Runtime.step() while pipeline tasks settle
STEP_MAX_YIELDS: Final[int] = 100

# =============================================================================
# Helper Functions
# =============================================================================

def ms_to_seconds(duration_ms: int) -> float:
    """
    Convert a millisecond duration to seconds for asyncio.sleep().

    Defensive behavior:
    - Non-positive input returns 0.0 (a plain yield to the event loop).
    """
    if duration_ms <= 0:
        return 0.0
    return duration_ms / 1000.0
