# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Phase state machines of the MySQL Operator resources.

Every phase enum has a ``PhaseMachine`` listing the phases each phase may move
to. Phases only move forward: a status write that is not in the table is
rejected with a ``PhaseTransitionError``. Writing the current phase again is
not a transition and is always accepted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional, Type, TypeVar, Union

from .crds import BackupPhase, BackupSchedulePhase, ClusterPhase, RestorePhase
from .errors import InvalidPhaseError, PhaseTransitionError

Phase = Union[ClusterPhase, BackupPhase, BackupSchedulePhase, RestorePhase]
P = TypeVar("P", ClusterPhase, BackupPhase, BackupSchedulePhase, RestorePhase)


@dataclass(frozen=True)
class PhaseMachine:
    """Forward-only transition table of a phase enum.

    Args:
        phase_type: The phase enum the table covers.
        transitions: The phases reachable from each phase. Must list every member
            of ``phase_type``.
        terminal: Phases that accept no further transition.
        revalidation: Phases reachable from any phase once the resource spec was
            edited.
    """

    phase_type: Type[Enum]
    transitions: Mapping[Enum, FrozenSet[Enum]]
    terminal: FrozenSet[Enum] = frozenset()
    revalidation: FrozenSet[Enum] = field(default_factory=frozenset)

    def __post_init__(self):
        missing = set(self.phase_type) - set(self.transitions)
        if missing:
            raise TypeError(
                f"{self.phase_type.__name__} transition table misses: "
                + ", ".join(sorted(repr(phase.value) for phase in missing))
            )

    def can_transition(self, current: Enum, target: Enum, spec_changed: bool = False) -> bool:
        """Return True if ``current`` may move to ``target``."""
        if current == target:
            return True
        if spec_changed and target in self.revalidation:
            return True
        return target in self.transitions[current]

    def check_transition(self, current: Enum, target: Enum, spec_changed: bool = False) -> None:
        """Ensure ``current`` may move to ``target``.

        Raises:
            PhaseTransitionError: If the transition is not a forward transition.
        """
        if not self.can_transition(current, target, spec_changed):
            raise PhaseTransitionError(
                f"Illegal {self.phase_type.__name__} transition "
                f"'{current.value}' -> '{target.value}'"
            )

    def is_terminal(self, phase: Enum) -> bool:
        """Return True if no further transition is allowed from ``phase``."""
        return phase in self.terminal


CLUSTER_MACHINE = PhaseMachine(
    ClusterPhase,
    {
        # UNKNOWN is reachable from every phase
        ClusterPhase.UNKNOWN: frozenset(
            {ClusterPhase.PENDING, ClusterPhase.RUNNING, ClusterPhase.FAILED}
        ),
        ClusterPhase.PENDING: frozenset(
            {ClusterPhase.RUNNING, ClusterPhase.FAILED, ClusterPhase.UNKNOWN}
        ),
        ClusterPhase.RUNNING: frozenset(
            {ClusterPhase.SUCCEEDED, ClusterPhase.FAILED, ClusterPhase.UNKNOWN}
        ),
        ClusterPhase.SUCCEEDED: frozenset({ClusterPhase.UNKNOWN}),
        ClusterPhase.FAILED: frozenset({ClusterPhase.UNKNOWN}),
    },
    terminal=frozenset({ClusterPhase.SUCCEEDED, ClusterPhase.FAILED}),
)

BACKUP_MACHINE = PhaseMachine(
    BackupPhase,
    {
        BackupPhase.UNKNOWN: frozenset(
            {BackupPhase.NEW, BackupPhase.SCHEDULED, BackupPhase.FAILED}
        ),
        BackupPhase.NEW: frozenset({BackupPhase.SCHEDULED, BackupPhase.FAILED}),
        BackupPhase.SCHEDULED: frozenset({BackupPhase.STARTED, BackupPhase.FAILED}),
        BackupPhase.STARTED: frozenset({BackupPhase.COMPLETE, BackupPhase.FAILED}),
        BackupPhase.COMPLETE: frozenset(),
        BackupPhase.FAILED: frozenset(),
    },
    terminal=frozenset({BackupPhase.COMPLETE, BackupPhase.FAILED}),
)

RESTORE_MACHINE = PhaseMachine(
    RestorePhase,
    {
        RestorePhase.UNKNOWN: frozenset(
            {RestorePhase.NEW, RestorePhase.SCHEDULED, RestorePhase.FAILED}
        ),
        RestorePhase.NEW: frozenset({RestorePhase.SCHEDULED, RestorePhase.FAILED}),
        RestorePhase.SCHEDULED: frozenset({RestorePhase.STARTED, RestorePhase.FAILED}),
        RestorePhase.STARTED: frozenset({RestorePhase.COMPLETE, RestorePhase.FAILED}),
        RestorePhase.COMPLETE: frozenset(),
        RestorePhase.FAILED: frozenset(),
    },
    terminal=frozenset({RestorePhase.COMPLETE, RestorePhase.FAILED}),
)

BACKUP_SCHEDULE_MACHINE = PhaseMachine(
    BackupSchedulePhase,
    {
        BackupSchedulePhase.UNKNOWN: frozenset(
            {
                BackupSchedulePhase.NEW,
                BackupSchedulePhase.ENABLED,
                BackupSchedulePhase.FAILED_VALIDATION,
            }
        ),
        BackupSchedulePhase.NEW: frozenset(
            {BackupSchedulePhase.ENABLED, BackupSchedulePhase.FAILED_VALIDATION}
        ),
        BackupSchedulePhase.ENABLED: frozenset(),
        BackupSchedulePhase.FAILED_VALIDATION: frozenset(),
    },
    terminal=frozenset({BackupSchedulePhase.FAILED_VALIDATION}),
    revalidation=frozenset(
        {
            BackupSchedulePhase.NEW,
            BackupSchedulePhase.ENABLED,
            BackupSchedulePhase.FAILED_VALIDATION,
        }
    ),
)

MACHINES: Dict[Type[Enum], PhaseMachine] = {
    machine.phase_type: machine
    for machine in (CLUSTER_MACHINE, BACKUP_MACHINE, RESTORE_MACHINE, BACKUP_SCHEDULE_MACHINE)
}


def machine_for(phase_type: Type[Enum]) -> PhaseMachine:
    """Return the state machine of a phase enum.

    Raises:
        TypeError: If ``phase_type`` has no state machine.
    """
    try:
        return MACHINES[phase_type]
    except KeyError:
        raise TypeError(f"No state machine for {phase_type!r}") from None


def coerce_phase(phase_type: Type[P], value: Optional[str]) -> P:
    """Convert a stored phase string into a member of ``phase_type``.

    ``None`` maps to the ``UNKNOWN`` member. A member of another phase enum is
    refused, even when it carries the same value.

    Raises:
        InvalidPhaseError: If the value is not a member of the enum.
    """
    if isinstance(value, Enum):
        if not isinstance(value, phase_type):
            raise InvalidPhaseError(
                f"{type(value).__name__}.{value.name} is not a {phase_type.__name__}"
            )
        return value
    try:
        return phase_type(value or "")
    except ValueError as ve:
        raise InvalidPhaseError(f"'{value}' is not a valid {phase_type.__name__}") from ve


def check_transition(current: Phase, target: Phase, spec_changed: bool = False) -> None:
    """Ensure ``current`` may move to ``target``.

    Raises:
        PhaseTransitionError: If the phases belong to different enums or the
            transition is not a forward transition.
    """
    if type(current) is not type(target):
        raise PhaseTransitionError(
            f"Cannot move a {type(current).__name__} to a {type(target).__name__}"
        )
    machine_for(type(current)).check_transition(current, target, spec_changed)


def is_terminal(phase: Phase) -> bool:
    """Return True if no further transition is allowed from ``phase``."""
    return machine_for(type(phase)).is_terminal(phase)
