# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""MySQL Backup CRD model."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from lightkube.codecs import resource_registry
from lightkube.core import resource as res
from lightkube.core.schema import DictMixin, dataclass
from lightkube.models import meta_v1
from lightkube.models.core_v1 import LocalObjectReference

from ..constants import MYSQL_API_GROUP, MYSQL_API_VERSION
from .meta import delegate_metadata


class BackupPhase(str, Enum):
    """Life-cycle phase of a Backup."""

    # Not yet processed, same as NEW
    UNKNOWN = ""
    NEW = "New"
    # Scheduled on an appropriate replica
    SCHEDULED = "Scheduled"
    STARTED = "Started"
    COMPLETE = "Complete"
    FAILED = "Failed"


@dataclass
class BackupExecutorModel(DictMixin):
    """Tool producing the backup and the databases it backs up."""

    name: Optional[str] = None
    databases: Optional[List[str]] = None


@dataclass
class BackupStorageProviderModel(DictMixin):
    """Where and how a backup is stored.

    Attributes:
        name: Type of storage provider, e.g. ``s3``.
        secretRef: Secret holding the credentials used to upload the backup.
        config: Non-secret configuration of the storage provider.
    """

    name: Optional[str] = None
    secretRef: Optional[LocalObjectReference] = None
    config: Optional[Dict[str, str]] = None


@dataclass
class BackupSpecModel(DictMixin):
    """Backup specification model."""

    executor: Optional[BackupExecutorModel] = None
    storageProvider: Optional[BackupStorageProviderModel] = None
    cluster: Optional[LocalObjectReference] = None
    agentscheduled: Optional[str] = None


@dataclass
class BackupOutcomeModel(DictMixin):
    """Object storage location of a completed backup."""

    location: Optional[str] = None


@dataclass
class BackupStatusModel(DictMixin):
    """Backup status model."""

    phase: Optional[BackupPhase] = None
    outcome: Optional[BackupOutcomeModel] = None
    timeStarted: Optional[datetime] = None
    timeCompleted: Optional[datetime] = None


@dataclass
class BackupModel(DictMixin):
    """Backup model representing the MySQL Backup CRD."""

    apiVersion: Optional[str] = None
    kind: Optional[str] = None
    metadata: Optional[meta_v1.ObjectMeta] = None
    spec: Optional[BackupSpecModel] = None
    status: Optional[BackupStatusModel] = None


@delegate_metadata
@resource_registry.register
class Backup(res.NamespacedResourceG, BackupModel):
    """Backup resource for the MySQL Backup CRD."""

    _api_info = res.ApiInfo(
        resource=res.ResourceDef(MYSQL_API_GROUP, MYSQL_API_VERSION, "Backup"),
        plural="mysqlbackups",
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
