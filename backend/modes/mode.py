"""
Mode capability set.

A mode is a prioritized behavioral state pushed onto a ModeStack. Every
concrete mode provides the same small set of capabilities:

- priority (class-level, unique per concrete type)
- persistent / multiple_instance flags
- lifecycle hooks: on_init, on_enable, on_update, on_disable, on_terminate
- override contribution: contribute(record), time_scale_override()

Concrete modes subclass Mode directly and override only the hooks they
need. Lifetime bookkeeping is owned by ModeStack.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from modes.enums.lifetime import Lifetime
from modes.override import OverrideRecord

if TYPE_CHECKING:
    from modes.stack import ModeStack


class Mode:
    """
    Base mode.

    Identity semantics: two mode instances are never equal unless they
    are the same object, so they can key the stack buffer directly.
    """

    priority: ClassVar[int]
    persistent: ClassVar[bool] = False
    multiple_instance: ClassVar[bool] = False

    def __init__(self) -> None:
        self._lifetime: Lifetime = Lifetime.CREATED
        self._stack: ModeStack | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def lifetime(self) -> Lifetime:
        return self._lifetime

    @property
    def is_active(self) -> bool:
        """True until the mode has been removed or rejected."""
        return self._lifetime is not Lifetime.INACTIVE

    @property
    def is_current(self) -> bool:
        """True if this mode is the stack's authoritative mode."""
        return self._stack is not None and self._stack.current is self

    @property
    def stack(self) -> ModeStack | None:
        return self._stack

    def remove(self) -> bool:
        """
        Remove this mode from its stack immediately.

        No-op (returns False) if the mode is already inactive or was never
        submitted to a stack.
        """
        if self._lifetime is Lifetime.INACTIVE or self._stack is None:
            return False
        return self._stack.pop(self)

    # ------------------------------------------------------------------
    # Override contribution
    # ------------------------------------------------------------------

    def contribute(self, record: OverrideRecord) -> None:
        """Mutate the shared record. Called once per refresh, low to high."""

    def time_scale_override(self) -> tuple[float, int] | None:
        """
        Optional (scale, priority) claim on the global time scale.

        Resolved across the stack by explicit priority comparison.
        """
        return None

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def on_init(self) -> None:
        """Pushed on the stack."""

    def on_enable(self) -> None:
        """Became the authoritative mode."""

    def on_update(self) -> None:
        """Once per tick while authoritative."""

    def on_disable(self) -> None:
        """Lost authority while still active."""

    def on_terminate(self) -> None:
        """Removed from the stack."""

    # ------------------------------------------------------------------
    # Stack bookkeeping (ModeStack only)
    # ------------------------------------------------------------------

    def _attach(self, stack: ModeStack) -> None:
        self._stack = stack

    def _mark_pending(self) -> None:
        self._lifetime = Lifetime.PENDING

    def _mark_inactive(self) -> None:
        self._lifetime = Lifetime.INACTIVE

    def _pushed_on_stack(self) -> None:
        self._lifetime = Lifetime.ON_STACK
        self.on_init()

    def _removed_from_stack(self) -> None:
        self._lifetime = Lifetime.INACTIVE
        self.on_terminate()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(priority={self.priority}, lifetime={self._lifetime.value})"
