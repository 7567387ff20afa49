# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""MySQL Operator CRDs module."""

from .backup import (
    Backup,
    BackupExecutorModel,
    BackupModel,
    BackupOutcomeModel,
    BackupPhase,
    BackupSpecModel,
    BackupStatusModel,
    BackupStorageProviderModel,
)
from .backup_schedule import (
    BackupSchedule,
    BackupScheduleModel,
    BackupSchedulePhase,
    BackupScheduleSpecModel,
    ScheduleStatusModel,
)
from .cluster import Cluster, ClusterModel, ClusterPhase, ClusterSpecModel, ClusterStatusModel
from .restore import Restore, RestoreModel, RestorePhase, RestoreSpecModel, RestoreStatusModel

__all__ = [
    "Cluster",
    "ClusterModel",
    "ClusterPhase",
    "ClusterSpecModel",
    "ClusterStatusModel",
    "Backup",
    "BackupExecutorModel",
    "BackupModel",
    "BackupOutcomeModel",
    "BackupPhase",
    "BackupSpecModel",
    "BackupStatusModel",
    "BackupStorageProviderModel",
    "BackupSchedule",
    "BackupScheduleModel",
    "BackupSchedulePhase",
    "BackupScheduleSpecModel",
    "ScheduleStatusModel",
    "Restore",
    "RestoreModel",
    "RestorePhase",
    "RestoreSpecModel",
    "RestoreStatusModel",
]
