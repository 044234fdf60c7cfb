import itertools

import pytest
from pydantic import ValidationError

from compute_capabilities.errors import UnsupportedOperationError
from compute_capabilities.models import (
    DECLARED_STATES,
    BackendCapabilityFlags,
    Operation,
    VmState,
)
from compute_capabilities.state_machine import (
    TRANSITION_RULES,
    can_alter,
    can_clone,
    can_pause,
    can_perform,
    can_reboot,
    can_resume,
    can_start,
    can_stop,
    can_suspend,
    can_terminate,
    can_unpause,
    permitted_operations,
    supports,
    supports_clone,
    supports_pause,
    supports_reboot,
    supports_start,
    supports_suspend,
    supports_terminate,
)


ALL_ON = BackendCapabilityFlags(
    supports_pause_unpause=True,
    supports_start_stop=True,
    supports_suspend_resume=True,
)
ALL_OFF = BackendCapabilityFlags()
FLAG_COMBINATIONS = [
    BackendCapabilityFlags(
        supports_pause_unpause=pause,
        supports_start_stop=start,
        supports_suspend_resume=suspend,
    )
    for pause, start, suspend in itertools.product([False, True], repeat=3)
]
NON_DECLARED_STATES = [s for s in VmState if s not in DECLARED_STATES]

R, S, P, U, T, E = (
    VmState.RUNNING,
    VmState.STOPPED,
    VmState.PAUSED,
    VmState.SUSPENDED,
    VmState.TERMINATED,
    VmState.ERROR,
)

# Legal source states per operation when every flag is on.
EXPECTED_LEGAL_FROM = {
    Operation.ALTER: {R, S},
    Operation.CLONE: set(),
    Operation.PAUSE: {R, S, T},
    Operation.UNPAUSE: {P},
    Operation.REBOOT: {R, S, T},
    Operation.RESUME: {U},
    Operation.START: {S, T},
    Operation.STOP: {R, T},
    Operation.SUSPEND: {R, S, T},
    Operation.TERMINATE: {R, S, P, U, E},
}


def test_every_operation_has_a_rule():
    assert set(TRANSITION_RULES) == set(Operation)
    assert set(EXPECTED_LEGAL_FROM) == set(Operation)


@pytest.mark.parametrize("op", list(Operation))
def test_truth_table_with_all_flags_on(op):
    for state in DECLARED_STATES:
        assert can_perform(op, state, ALL_ON) is (state in EXPECTED_LEGAL_FROM[op])


def test_decisions_are_deterministic():
    for op, state, flags in itertools.product(Operation, VmState, FLAG_COMBINATIONS):
        first = can_perform(op, state, flags)
        assert all(can_perform(op, state, flags) is first for _ in range(3))


def test_non_declared_states_fail_closed():
    for op, state in itertools.product(Operation, NON_DECLARED_STATES):
        assert not can_perform(op, state, ALL_ON)


def test_unrecognized_state_string_fails_closed():
    for op in Operation:
        assert not can_perform(op, "migrating", ALL_ON)
        assert not can_perform(op, "", ALL_ON)


def test_state_strings_are_parsed_case_insensitively():
    assert can_perform(Operation.STOP, "running", ALL_ON)
    assert not can_perform(Operation.STOP, " Stopped ", ALL_ON)


def test_static_gate_blocks_every_state():
    gated = {
        Operation.PAUSE: "supports_pause_unpause",
        Operation.UNPAUSE: "supports_pause_unpause",
        Operation.START: "supports_start_stop",
        Operation.STOP: "supports_start_stop",
        Operation.SUSPEND: "supports_suspend_resume",
        Operation.RESUME: "supports_suspend_resume",
    }
    for op, flag in gated.items():
        flags = ALL_ON.model_copy(update={flag: False})
        for state in VmState:
            assert not can_perform(op, state, flags)


def test_ungated_operations_ignore_flags():
    for state in DECLARED_STATES:
        assert can_reboot(state, ALL_OFF) is can_reboot(state, ALL_ON)
        assert can_terminate(state, ALL_OFF) is can_terminate(state, ALL_ON)
        assert can_alter(state, ALL_OFF) is can_alter(state, ALL_ON)


def test_start_and_stop_at_their_own_boundary():
    flags = BackendCapabilityFlags(supports_start_stop=True)
    assert not can_start(VmState.RUNNING, flags)
    assert not can_stop(VmState.STOPPED, flags)
    assert can_start(VmState.STOPPED, flags)
    assert can_stop(VmState.RUNNING, flags)


def test_pause_unpause_complementarity():
    flags = BackendCapabilityFlags(supports_pause_unpause=True)
    for f in FLAG_COMBINATIONS:
        assert not can_pause(VmState.PAUSED, f)
    assert can_unpause(VmState.PAUSED, flags)
    assert not can_unpause(VmState.RUNNING, flags)


def test_suspend_resume_round_trip():
    flags = BackendCapabilityFlags(supports_suspend_resume=True)
    assert can_suspend(VmState.RUNNING, flags)
    assert can_resume(VmState.SUSPENDED, flags)
    assert not can_resume(VmState.RUNNING, flags)


def test_terminate_is_terminal():
    for flags in FLAG_COMBINATIONS:
        assert not can_terminate(VmState.TERMINATED, flags)
        for state in DECLARED_STATES - {VmState.TERMINATED}:
            assert can_terminate(state, flags)


def test_clone_is_never_permitted():
    for state, flags in itertools.product(VmState, FLAG_COMBINATIONS):
        assert not can_clone(state, flags)


def test_alter_allow_list():
    for flags in FLAG_COMBINATIONS:
        assert can_alter(VmState.RUNNING, flags)
        assert can_alter(VmState.STOPPED, flags)
        assert not can_alter(VmState.PAUSED, flags)
        assert not can_alter(VmState.SUSPENDED, flags)
        assert not can_alter(VmState.ERROR, flags)


def test_stopped_vm_with_mixed_flags():
    flags = BackendCapabilityFlags(
        supports_pause_unpause=False,
        supports_start_stop=True,
        supports_suspend_resume=True,
    )
    assert can_start(VmState.STOPPED, flags)
    assert not can_stop(VmState.STOPPED, flags)
    assert not can_pause(VmState.STOPPED, flags)
    assert can_reboot(VmState.STOPPED, flags)
    assert can_terminate(VmState.STOPPED, flags)
    # Stopped is not on the suspend deny-list.
    assert can_suspend(VmState.STOPPED, flags)
    assert permitted_operations(VmState.STOPPED, flags) == {
        Operation.ALTER,
        Operation.REBOOT,
        Operation.START,
        Operation.SUSPEND,
        Operation.TERMINATE,
    }


def test_permitted_operations_empty_for_transitional_state():
    assert permitted_operations(VmState.STOPPING, ALL_ON) == frozenset()


def test_operation_names_accepted():
    assert can_perform("start", VmState.STOPPED, ALL_ON)
    assert can_perform("TERMINATE", "running", ALL_ON)


@pytest.mark.parametrize("bad_op", ["hibernate", "", 3, None, VmState.RUNNING])
def test_unsupported_operation_rejected(bad_op):
    with pytest.raises(UnsupportedOperationError):
        can_perform(bad_op, VmState.RUNNING, ALL_ON)


def test_non_string_state_rejected():
    with pytest.raises(TypeError):
        can_perform(Operation.START, 1, ALL_ON)


def test_flags_must_be_capability_flags():
    with pytest.raises(TypeError):
        can_perform(Operation.START, VmState.STOPPED, {"supports_start_stop": True})


def test_static_support_mirrors_flags():
    flags = BackendCapabilityFlags(
        supports_pause_unpause=True,
        supports_start_stop=False,
        supports_suspend_resume=True,
    )
    assert supports_pause(flags)
    assert not supports_start(flags)
    assert supports_suspend(flags)
    assert supports(Operation.UNPAUSE, flags) is supports_pause(flags)
    assert supports(Operation.STOP, flags) is supports_start(flags)
    assert supports(Operation.RESUME, flags) is supports_suspend(flags)


def test_static_support_for_ungated_operations():
    for flags in (ALL_ON, ALL_OFF):
        assert supports_reboot(flags)
        assert supports_terminate(flags)
        assert supports(Operation.ALTER, flags)
        assert not supports_clone(flags)


def test_flags_are_immutable():
    with pytest.raises(ValidationError):
        ALL_ON.supports_start_stop = False
