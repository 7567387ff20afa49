# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""MySQL Restore CRD model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from lightkube.codecs import resource_registry
from lightkube.core import resource as res
from lightkube.core.schema import DictMixin, dataclass
from lightkube.models import meta_v1
from lightkube.models.core_v1 import LocalObjectReference

from ..constants import MYSQL_API_GROUP, MYSQL_API_VERSION
from .meta import delegate_metadata


class RestorePhase(str, Enum):
    """Life-cycle phase of a Restore."""

    UNKNOWN = ""
    NEW = "New"
    SCHEDULED = "Scheduled"
    STARTED = "Started"
    COMPLETE = "Complete"
    FAILED = "Failed"


@dataclass
class RestoreSpecModel(DictMixin):
    """Restore specification model."""

    clusterRef: Optional[LocalObjectReference] = None
    backupRef: Optional[LocalObjectReference] = None
    agentscheduled: Optional[str] = None


@dataclass
class RestoreStatusModel(DictMixin):
    """Restore status model."""

    phase: Optional[RestorePhase] = None
    timeStarted: Optional[datetime] = None
    timeCompleted: Optional[datetime] = None


@dataclass
class RestoreModel(DictMixin):
    """Restore model representing the MySQL Restore CRD."""

    apiVersion: Optional[str] = None
    kind: Optional[str] = None
    metadata: Optional[meta_v1.ObjectMeta] = None
    spec: Optional[RestoreSpecModel] = None
    status: Optional[RestoreStatusModel] = None


@delegate_metadata
@resource_registry.register
class Restore(res.NamespacedResourceG, RestoreModel):
    """Restore resource for the MySQL Restore CRD."""

    _api_info = res.ApiInfo(
        resource=res.ResourceDef(MYSQL_API_GROUP, MYSQL_API_VERSION, "Restore"),
        plural="mysqlrestores",
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
