"""
Mode lifetime enumeration.

Rules:
- This enum defines ONLY where a mode sits relative to the stack.
- No behavior, no helper methods, no side effects.
- Transitions are performed exclusively by ModeStack.
"""

from __future__ import annotations

from enum import Enum


class Lifetime(str, Enum):
    """
    Lifetime of a single mode instance.

    CREATED:
        Constructed, not yet submitted to a stack.

    PENDING:
        Queued for a push at the next tick.

    ON_STACK:
        Present on the stack (may or may not be authoritative).

    INACTIVE:
        Removed from the stack, or rejected. Terminal.
    """

    CREATED = "CREATED"
    PENDING = "PENDING"
    ON_STACK = "ON_STACK"
    INACTIVE = "INACTIVE"
