from dataclasses import dataclass

from compute_capabilities.errors import UnsupportedOperationError
from compute_capabilities.models import (
    DECLARED_STATES,
    BackendCapabilityFlags,
    Operation,
    VmState,
)


@dataclass(frozen=True)
class TransitionRule:
    """Legality of one operation.

    ``flag`` names the ``BackendCapabilityFlags`` field gating the operation, or
    is ``None`` when the backend always accepts it. Exactly one of
    ``allowed_from`` and ``denied_from`` is set.
    """

    flag: str | None
    allowed_from: frozenset[VmState] | None = None
    denied_from: frozenset[VmState] | None = None

    def admits(self, state: VmState) -> bool:
        if self.allowed_from is not None:
            return state in self.allowed_from
        return state not in (self.denied_from or frozenset())


TRANSITION_RULES: dict[Operation, TransitionRule] = {
    Operation.ALTER: TransitionRule(
        flag=None,
        allowed_from=frozenset({VmState.RUNNING, VmState.STOPPED}),
    ),
    Operation.CLONE: TransitionRule(flag=None, allowed_from=frozenset()),
    Operation.PAUSE: TransitionRule(
        flag="supports_pause_unpause",
        denied_from=frozenset({VmState.PAUSED, VmState.ERROR, VmState.SUSPENDED}),
    ),
    Operation.UNPAUSE: TransitionRule(
        flag="supports_pause_unpause",
        allowed_from=frozenset({VmState.PAUSED}),
    ),
    Operation.REBOOT: TransitionRule(
        flag=None,
        denied_from=frozenset({VmState.ERROR, VmState.PAUSED, VmState.SUSPENDED}),
    ),
    Operation.RESUME: TransitionRule(
        flag="supports_suspend_resume",
        allowed_from=frozenset({VmState.SUSPENDED}),
    ),
    Operation.START: TransitionRule(
        flag="supports_start_stop",
        denied_from=frozenset(
            {VmState.RUNNING, VmState.ERROR, VmState.SUSPENDED, VmState.PAUSED}
        ),
    ),
    Operation.STOP: TransitionRule(
        flag="supports_start_stop",
        denied_from=frozenset(
            {VmState.STOPPED, VmState.ERROR, VmState.SUSPENDED, VmState.PAUSED}
        ),
    ),
    Operation.SUSPEND: TransitionRule(
        flag="supports_suspend_resume",
        denied_from=frozenset({VmState.SUSPENDED, VmState.ERROR, VmState.PAUSED}),
    ),
    Operation.TERMINATE: TransitionRule(
        flag=None,
        denied_from=frozenset({VmState.TERMINATED}),
    ),
}

# Static answers for operations with no flag gate. Clone is refused here even
# though its legality row carries no flag.
UNGATED_SUPPORT: dict[Operation, bool] = {
    Operation.ALTER: True,
    Operation.CLONE: False,
    Operation.REBOOT: True,
    Operation.TERMINATE: True,
}


def _check_rules() -> None:
    missing = [op.value for op in Operation if op not in TRANSITION_RULES]
    if missing:
        raise RuntimeError(f"no transition rule for operations {missing}")
    for op, rule in TRANSITION_RULES.items():
        if (rule.allowed_from is None) == (rule.denied_from is None):
            raise RuntimeError(
                f"transition rule for {op.value} must set exactly one state list"
            )
        if rule.flag is None and op not in UNGATED_SUPPORT:
            raise RuntimeError(f"no static support entry for {op.value}")
        if rule.flag is not None and rule.flag not in BackendCapabilityFlags.model_fields:
            raise RuntimeError(f"unknown capability flag {rule.flag} for {op.value}")


_check_rules()


def coerce_operation(value: Operation | str) -> Operation:
    if isinstance(value, Operation):
        return value
    if isinstance(value, str):
        try:
            return Operation(value.strip().upper())
        except ValueError:
            raise UnsupportedOperationError(value) from None
    raise UnsupportedOperationError(value)


def coerce_state(value: VmState | str) -> VmState:
    if isinstance(value, VmState):
        return value
    if isinstance(value, str):
        return VmState.parse(value)
    raise TypeError(f"vm state must be VmState or str, got {type(value).__name__}")


def _check_flags(flags: BackendCapabilityFlags) -> None:
    if not isinstance(flags, BackendCapabilityFlags):
        raise TypeError(
            f"flags must be BackendCapabilityFlags, got {type(flags).__name__}"
        )


def supports(op: Operation | str, flags: BackendCapabilityFlags) -> bool:
    operation = coerce_operation(op)
    _check_flags(flags)
    rule = TRANSITION_RULES[operation]
    if rule.flag is None:
        return UNGATED_SUPPORT[operation]
    return bool(getattr(flags, rule.flag))


def can_perform(
    op: Operation | str, from_state: VmState | str, flags: BackendCapabilityFlags
) -> bool:
    operation = coerce_operation(op)
    state = coerce_state(from_state)
    _check_flags(flags)
    rule = TRANSITION_RULES[operation]
    if rule.flag is not None and not getattr(flags, rule.flag):
        return False
    if state not in DECLARED_STATES:
        return False
    return rule.admits(state)


def permitted_operations(
    from_state: VmState | str, flags: BackendCapabilityFlags
) -> frozenset[Operation]:
    return frozenset(op for op in Operation if can_perform(op, from_state, flags))


def can_alter(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.ALTER, from_state, flags)


def can_clone(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.CLONE, from_state, flags)


def can_pause(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.PAUSE, from_state, flags)


def can_unpause(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.UNPAUSE, from_state, flags)


def can_reboot(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.REBOOT, from_state, flags)


def can_resume(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.RESUME, from_state, flags)


def can_start(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.START, from_state, flags)


def can_stop(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.STOP, from_state, flags)


def can_suspend(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.SUSPEND, from_state, flags)


def can_terminate(from_state: VmState | str, flags: BackendCapabilityFlags) -> bool:
    return can_perform(Operation.TERMINATE, from_state, flags)


def supports_alter(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.ALTER, flags)


def supports_clone(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.CLONE, flags)


def supports_pause(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.PAUSE, flags)


def supports_unpause(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.UNPAUSE, flags)


def supports_reboot(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.REBOOT, flags)


def supports_resume(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.RESUME, flags)


def supports_start(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.START, flags)


def supports_stop(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.STOP, flags)


def supports_suspend(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.SUSPEND, flags)


def supports_terminate(flags: BackendCapabilityFlags) -> bool:
    return supports(Operation.TERMINATE, flags)
