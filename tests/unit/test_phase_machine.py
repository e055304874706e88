# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest
from statemachine.exceptions import TransitionNotAllowed

from transfer.enums.phase import EXCLUSIVE_PHASES, Phase
from transfer.phase_machine import PhaseMachine


def test_machine_starts_inactive():
    assert PhaseMachine().phase is Phase.INACTIVE


def test_advance_walks_every_phase_in_order():
    machine = PhaseMachine()
    seen = [machine.phase]

    for _ in range(len(Phase) - 1):
        machine.send("advance")
        seen.append(machine.phase)

    assert seen == sorted(Phase)
    assert seen[-1] is Phase.COMPLETE


def test_advance_past_complete_is_rejected():
    machine = PhaseMachine()
    for _ in range(len(Phase) - 1):
        machine.send("advance")

    with pytest.raises(TransitionNotAllowed):
        machine.send("advance")


@pytest.mark.parametrize("steps", range(1, len(Phase)))
def test_halt_resets_from_any_live_phase(steps: int):
    machine = PhaseMachine()
    for _ in range(steps):
        machine.send("advance")

    machine.send("halt")

    assert machine.phase is Phase.INACTIVE


def test_halt_from_inactive_is_rejected():
    with pytest.raises(TransitionNotAllowed):
        PhaseMachine().send("halt")


def test_exclusive_window_spans_start_to_awaiting_readiness():
    assert EXCLUSIVE_PHASES == {
        Phase.START,
        Phase.RUNNING,
        Phase.FREEING_MEMORY,
        Phase.AWAITING_READINESS,
    }
    assert Phase.READY not in EXCLUSIVE_PHASES
