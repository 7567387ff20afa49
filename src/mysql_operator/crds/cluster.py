# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""MySQL Cluster CRD model."""

from enum import Enum
from typing import Dict, List, Optional

from lightkube.codecs import resource_registry
from lightkube.core import resource as res
from lightkube.core.schema import DictMixin, dataclass
from lightkube.models import meta_v1
from lightkube.models.core_v1 import Affinity, LocalObjectReference, PersistentVolumeClaim

from ..constants import MYSQL_API_GROUP, MYSQL_API_VERSION
from .meta import delegate_metadata


class ClusterPhase(str, Enum):
    """Life-cycle phase of a MySQL cluster."""

    # The state of the cluster could not be obtained
    UNKNOWN = ""
    # Accepted, but not all services or statefulsets are running yet
    PENDING = "Pending"
    # All components are present and at least one endpoint accepts connections
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


@dataclass
class ClusterSpecModel(DictMixin):
    """Attributes a user can specify when creating a cluster.

    Attributes:
        version: MySQL server image version.
        replicas: Number of MySQL instances in the cluster.
        baseServerId: Base of the ``server_id`` assigned to each instance. Member ``n``
            gets ``baseServerId + n``.
        multiMaster: All instances are read/write when true, otherwise a single
            primary is read/write.
        nodeSelector: Labels a node must carry to run a cluster member.
        affinity: Scheduling constraints of the cluster members.
        volumeClaimTemplate: Volume template for the MySQL data directory.
        backupVolumeClaimTemplate: Volume used to stage a backup before upload.
        secretRef: Secret holding the root password. Generated when omitted.
        configRef: ConfigMap holding a custom ``my.cnf``.
        sslSecretRef: Secret holding the CA certificate, server certificate and
            server key for group replication SSL.
    """

    version: Optional[str] = None
    replicas: Optional[int] = None
    baseServerId: Optional[int] = None
    multiMaster: Optional[bool] = None
    nodeSelector: Optional[Dict[str, str]] = None
    affinity: Optional[Affinity] = None
    volumeClaimTemplate: Optional[PersistentVolumeClaim] = None
    backupVolumeClaimTemplate: Optional[PersistentVolumeClaim] = None
    secretRef: Optional[LocalObjectReference] = None
    configRef: Optional[LocalObjectReference] = None
    sslSecretRef: Optional[LocalObjectReference] = None


@dataclass
class ClusterStatusModel(DictMixin):
    """Cluster status model."""

    phase: Optional[ClusterPhase] = None
    errors: Optional[List[str]] = None


@dataclass
class ClusterModel(DictMixin):
    """Cluster model representing the MySQL Cluster CRD."""

    apiVersion: Optional[str] = None
    kind: Optional[str] = None
    metadata: Optional[meta_v1.ObjectMeta] = None
    spec: Optional[ClusterSpecModel] = None
    status: Optional[ClusterStatusModel] = None


@delegate_metadata
@resource_registry.register
class Cluster(res.NamespacedResourceG, ClusterModel):
    """Cluster resource for the MySQL Cluster CRD."""

    _api_info = res.ApiInfo(
        resource=res.ResourceDef(MYSQL_API_GROUP, MYSQL_API_VERSION, "Cluster"),
        plural="mysqlclusters",
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

    def requires_config_mount(self) -> bool:
        """Return True if a config map was specified for configuring the cluster."""
        return self.spec is not None and self.spec.configRef is not None

    def requires_secret(self) -> bool:
        """Return True if a root password secret should be generated for the cluster."""
        return self.spec is None or self.spec.secretRef is None

    def requires_custom_ssl_setup(self) -> bool:
        """Return True if the user provided the SSL material for group replication."""
        return self.spec is not None and self.spec.sslSecretRef is not None

    def server_id(self, ordinal: int) -> int:
        """Return the MySQL ``server_id`` of the member with the given ordinal.

        Raises:
            ValueError: If the spec is not defaulted or the ordinal is not a member.
        """
        if self.spec is None or not self.spec.baseServerId or not self.spec.replicas:
            raise ValueError("Cluster spec has no baseServerId or replicas")
        if not 0 <= ordinal < self.spec.replicas:
            raise ValueError(
                f"Ordinal {ordinal} is out of range for {self.spec.replicas} replicas"
            )
        return self.spec.baseServerId + ordinal

    def server_ids(self) -> List[int]:
        """Return the ``server_id`` of every member of the cluster."""
        replicas = self.spec.replicas if self.spec and self.spec.replicas else 0
        return [self.server_id(ordinal) for ordinal in range(replicas)]
