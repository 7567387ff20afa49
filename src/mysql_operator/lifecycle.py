# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Status updates of the MySQL Operator resources.

These helpers are the only writers of ``status.phase``: every write goes through
the phase state machine of the resource, and an illegal transition is logged and
raised instead of being silently corrected.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from .crds import (
    Backup,
    BackupOutcomeModel,
    BackupPhase,
    BackupSchedule,
    BackupSchedulePhase,
    BackupStatusModel,
    Cluster,
    ClusterPhase,
    ClusterStatusModel,
    Restore,
    RestorePhase,
    RestoreStatusModel,
    ScheduleStatusModel,
)
from .errors import PhaseTransitionError
from .phases import Phase, check_transition, coerce_phase

logger = logging.getLogger(__name__)

Resource = Union[Cluster, Backup, BackupSchedule, Restore]

STATUS_TYPES = {
    Cluster: (ClusterStatusModel, ClusterPhase),
    Backup: (BackupStatusModel, BackupPhase),
    BackupSchedule: (ScheduleStatusModel, BackupSchedulePhase),
    Restore: (RestoreStatusModel, RestorePhase),
}


def _status_types(resource: Resource):
    try:
        return STATUS_TYPES[type(resource)]
    except KeyError:
        raise TypeError(f"{type(resource).__name__} has no phase") from None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def get_phase(resource: Resource) -> Phase:
    """Return the phase of a resource as a member of its phase enum.

    Raises:
        InvalidPhaseError: If the stored phase is not a member of the enum.
    """
    _, phase_type = _status_types(resource)
    raw = resource.status.phase if resource.status else None
    return coerce_phase(phase_type, raw)


def set_phase(resource: Resource, target: Phase, spec_changed: bool = False) -> None:
    """Move a resource to the ``target`` phase.

    Args:
        resource: The resource to update in place.
        target: The new phase.
        spec_changed: The resource spec was edited since the phase was written.

    Raises:
        PhaseTransitionError: If the move is not a legal forward transition.
    """
    status_type, phase_type = _status_types(resource)
    target = coerce_phase(phase_type, target)
    current = get_phase(resource)
    try:
        check_transition(current, target, spec_changed)
    except PhaseTransitionError as pte:
        logger.error(
            "Refusing status write on %s '%s': %s",
            type(resource).__name__,
            resource.name,
            pte,
        )
        raise
    if resource.status is None:
        resource.status = status_type()
    resource.status.phase = target
    if current != target:
        logger.info(
            "%s '%s' moved from phase '%s' to '%s'",
            type(resource).__name__,
            resource.name,
            current.value,
            target.value,
        )


def advance_cluster(
    cluster: Cluster, target: ClusterPhase, errors: Optional[List[str]] = None
) -> Cluster:
    """Move a Cluster to ``target`` and record the errors observed by the reconciler."""
    set_phase(cluster, target)
    cluster.status.errors = list(errors) if errors else None
    return cluster


def advance_backup(
    backup: Backup,
    target: BackupPhase,
    location: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Backup:
    """Move a Backup to ``target``, stamping its timestamps and outcome.

    Raises:
        ValueError: If ``location`` is missing for a completed backup, or given for
            any other phase.
        PhaseTransitionError: If the move is not a legal forward transition.
    """
    target = coerce_phase(BackupPhase, target)
    if target == BackupPhase.COMPLETE and not location:
        raise ValueError("A complete backup requires an outcome location")
    if target != BackupPhase.COMPLETE and location:
        raise ValueError(f"A {target.value or 'Unknown'} backup has no outcome location")

    previous = get_phase(backup)
    set_phase(backup, target)
    if previous == target:
        return backup

    now = now or _utcnow()
    if target == BackupPhase.STARTED:
        backup.status.timeStarted = now
    elif target in (BackupPhase.COMPLETE, BackupPhase.FAILED):
        backup.status.timeCompleted = now
    if target == BackupPhase.COMPLETE:
        backup.status.outcome = BackupOutcomeModel(location=location)
    return backup


def advance_restore(
    restore: Restore, target: RestorePhase, now: Optional[datetime] = None
) -> Restore:
    """Move a Restore to ``target``, stamping its timestamps."""
    previous = get_phase(restore)
    set_phase(restore, target)
    target = get_phase(restore)
    if previous == target:
        return restore

    now = now or _utcnow()
    if target == RestorePhase.STARTED:
        restore.status.timeStarted = now
    elif target in (RestorePhase.COMPLETE, RestorePhase.FAILED):
        restore.status.timeCompleted = now
    return restore


def advance_backup_schedule(
    schedule: BackupSchedule, target: BackupSchedulePhase, spec_changed: bool = False
) -> BackupSchedule:
    """Move a BackupSchedule to ``target``.

    ``FailedValidation`` and ``Enabled`` only move again once the spec was edited.
    """
    set_phase(schedule, target, spec_changed)
    return schedule


def record_backup_run(schedule: BackupSchedule, when: Optional[datetime] = None) -> BackupSchedule:
    """Record that the schedule triggered a Backup.

    Raises:
        PhaseTransitionError: If the schedule is not enabled.
    """
    phase = get_phase(schedule)
    if phase != BackupSchedulePhase.ENABLED:
        raise PhaseTransitionError(
            f"BackupSchedule '{schedule.name}' is '{phase.value}', only enabled schedules "
            "trigger backups"
        )
    schedule.status.lastBackup = when or _utcnow()
    return schedule
