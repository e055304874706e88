"""
Phase guard for one transfer pipeline.

Only two moves exist:
- advance: the next phase in order
- halt:    back to INACTIVE from any live phase

Anything else raises statemachine.exceptions.TransitionNotAllowed, which
signals a bug in the pipeline, never a runtime condition.
"""

from __future__ import annotations

from statemachine import State, StateMachine

from transfer.enums.phase import Phase


class PhaseMachine(StateMachine):
    """Monotonic phase sequence with a reset edge."""

    inactive = State(Phase.INACTIVE.name, value=Phase.INACTIVE.name, initial=True)
    requested = State(Phase.REQUEST.name, value=Phase.REQUEST.name)
    preparing = State(Phase.PREPARE.name, value=Phase.PREPARE.name)
    starting = State(Phase.START.name, value=Phase.START.name)
    running = State(Phase.RUNNING.name, value=Phase.RUNNING.name)
    freeing_memory = State(Phase.FREEING_MEMORY.name, value=Phase.FREEING_MEMORY.name)
    awaiting_readiness = State(
        Phase.AWAITING_READINESS.name,
        value=Phase.AWAITING_READINESS.name,
    )
    ready = State(Phase.READY.name, value=Phase.READY.name)
    complete = State(Phase.COMPLETE.name, value=Phase.COMPLETE.name)

    advance = (
        inactive.to(requested)
        | requested.to(preparing)
        | preparing.to(starting)
        | starting.to(running)
        | running.to(freeing_memory)
        | freeing_memory.to(awaiting_readiness)
        | awaiting_readiness.to(ready)
        | ready.to(complete)
    )

    halt = (
        requested.to(inactive)
        | preparing.to(inactive)
        | starting.to(inactive)
        | running.to(inactive)
        | freeing_memory.to(inactive)
        | awaiting_readiness.to(inactive)
        | ready.to(inactive)
        | complete.to(inactive)
    )

    @property
    def phase(self) -> Phase:
        return Phase[self.current_state_value]
