# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""MySQL Operator resource model."""

from .config import OperatorConfig, get_config
from .core import EventType, MySQLOperatorClient, ResourceClient, ResourceEvent
from .crds import (
    Backup,
    BackupPhase,
    BackupSchedule,
    BackupSchedulePhase,
    Cluster,
    ClusterPhase,
    Restore,
    RestorePhase,
)
from .defaults import ensure_defaults
from .errors import (
    ConfigError,
    ConflictError,
    InvalidPhaseError,
    MySQLOperatorError,
    NotFoundError,
    PhaseTimeoutError,
    PhaseTransitionError,
)
from .lifecycle import (
    advance_backup,
    advance_backup_schedule,
    advance_cluster,
    advance_restore,
    get_phase,
    record_backup_run,
    set_phase,
)
from .phases import check_transition, is_terminal
from .validation import AggregateError, ErrorType, FieldError, validate

__all__ = [
    "OperatorConfig",
    "get_config",
    "EventType",
    "MySQLOperatorClient",
    "ResourceClient",
    "ResourceEvent",
    "Backup",
    "BackupPhase",
    "BackupSchedule",
    "BackupSchedulePhase",
    "Cluster",
    "ClusterPhase",
    "Restore",
    "RestorePhase",
    "ensure_defaults",
    "ConfigError",
    "ConflictError",
    "InvalidPhaseError",
    "MySQLOperatorError",
    "NotFoundError",
    "PhaseTimeoutError",
    "PhaseTransitionError",
    "advance_backup",
    "advance_backup_schedule",
    "advance_cluster",
    "advance_restore",
    "get_phase",
    "record_backup_run",
    "set_phase",
    "check_transition",
    "is_terminal",
    "AggregateError",
    "ErrorType",
    "FieldError",
    "validate",
]
