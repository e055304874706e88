"""
Transfer pipeline phase enumeration.

Rules:
- Phases are ordered; integer values encode that order.
- Within one run a pipeline only moves forward, one phase at a time.
- Only a stop resets a pipeline to INACTIVE.
- Transitions are enforced by transfer.phase_machine.
"""

from __future__ import annotations

from enum import IntEnum


class Phase(IntEnum):
    """
    Ordered phases of one load or unload run.

    INACTIVE:            No run.
    REQUEST:             Run accepted, behavior not yet set up.
    PREPARE:             Set up; waiting for the sibling pipeline and the
                         behavior's start gate.
    START:               Start hooks fired; settle delay.
    RUNNING:             Transferring bundles in submission order.
    FREEING_MEMORY:      Host memory reclaim.
    AWAITING_READINESS:  Waiting for every readiness processor.
    READY:               Waiting for mode authority and the complete gate.
    COMPLETE:            Owning mode told to remove itself.
    """

    INACTIVE = 0
    REQUEST = 1
    PREPARE = 2
    START = 3
    RUNNING = 4
    FREEING_MEMORY = 5
    AWAITING_READINESS = 6
    READY = 7
    COMPLETE = 8


# Phases during which a pipeline excludes its sibling from starting
EXCLUSIVE_PHASES: frozenset[Phase] = frozenset({
    Phase.START,
    Phase.RUNNING,
    Phase.FREEING_MEMORY,
    Phase.AWAITING_READINESS,
})
