# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""MySQL BackupSchedule CRD model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from lightkube.codecs import resource_registry
from lightkube.core import resource as res
from lightkube.core.schema import DictMixin, dataclass
from lightkube.models import meta_v1

from ..constants import MYSQL_API_GROUP, MYSQL_API_VERSION
from .backup import BackupSpecModel
from .meta import delegate_metadata


class BackupSchedulePhase(str, Enum):
    """Life-cycle phase of a BackupSchedule."""

    UNKNOWN = ""
    # Created but not yet processed by the backup schedule controller
    NEW = "New"
    # Validated, triggering backups according to the schedule
    ENABLED = "Enabled"
    # Failed validation, no backups are triggered
    FAILED_VALIDATION = "FailedValidation"


@dataclass
class BackupScheduleSpecModel(DictMixin):
    """BackupSchedule specification model.

    Attributes:
        schedule: Cron expression driving the backups.
        backupTemplate: Spec of the Backups created by the schedule.
    """

    schedule: Optional[str] = None
    backupTemplate: Optional[BackupSpecModel] = None


@dataclass
class ScheduleStatusModel(DictMixin):
    """BackupSchedule status model."""

    phase: Optional[BackupSchedulePhase] = None
    lastBackup: Optional[datetime] = None


@dataclass
class BackupScheduleModel(DictMixin):
    """BackupSchedule model representing the MySQL BackupSchedule CRD."""

    apiVersion: Optional[str] = None
    kind: Optional[str] = None
    metadata: Optional[meta_v1.ObjectMeta] = None
    spec: Optional[BackupScheduleSpecModel] = None
    status: Optional[ScheduleStatusModel] = None


@delegate_metadata
@resource_registry.register
class BackupSchedule(res.NamespacedResourceG, BackupScheduleModel):
    """BackupSchedule resource for the MySQL BackupSchedule CRD."""

    _api_info = res.ApiInfo(
        resource=res.ResourceDef(MYSQL_API_GROUP, MYSQL_API_VERSION, "BackupSchedule"),
        plural="mysqlbackupschedules",
        verbs=[
            "delete",
            "deletecollection",
            "get",
            "global_list",
            "global_watch",
            "list",
            "patch",
            "post",
            "put",
            "watch",
        ],
    )
