# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Defaulting of the MySQL Operator resources.

Defaulting fills in the fields a user may omit. It runs before validation,
never fails for a MySQL Operator resource, only touches unset fields and
updates the resource in place.
"""

import logging
from typing import Dict, Optional, Union

from .config import OperatorConfig, get_config
from .constants import DEFAULT_BASE_SERVER_ID, DEFAULT_REPLICAS, OPERATOR_VERSION_LABEL
from .crds import Backup, BackupSchedule, Cluster, ClusterSpecModel, Restore

logger = logging.getLogger(__name__)

Resource = Union[Cluster, Backup, BackupSchedule, Restore]


def set_operator_version_label(labels: Dict[str, str], version: str) -> None:
    """Record the operator build version in a label map."""
    labels[OPERATOR_VERSION_LABEL] = version


def ensure_cluster_defaults(cluster: Cluster, config: Optional[OperatorConfig] = None) -> Cluster:
    """Ensure a user can omit the version, replicas and base server id of a cluster."""
    config = config or get_config()
    if cluster.spec is None:
        cluster.spec = ClusterSpecModel()

    if not cluster.spec.replicas:
        cluster.spec.replicas = DEFAULT_REPLICAS
    if not cluster.spec.baseServerId:
        cluster.spec.baseServerId = DEFAULT_BASE_SERVER_ID
    if not cluster.spec.version:
        cluster.spec.version = config.default_version
    return cluster


def _ensure_version_label(resource: Resource, config: Optional[OperatorConfig]) -> Resource:
    config = config or get_config()
    if not config.build_version:
        return resource
    if resource.labels is None:
        resource.labels = {}
    if OPERATOR_VERSION_LABEL not in resource.labels:
        set_operator_version_label(resource.labels, config.build_version)
        logger.debug(
            "Labelled %s '%s' with operator version '%s'",
            type(resource).__name__,
            resource.name,
            config.build_version,
        )
    return resource


def ensure_backup_defaults(backup: Backup, config: Optional[OperatorConfig] = None) -> Backup:
    """Stamp the operator version on a Backup."""
    return _ensure_version_label(backup, config)


def ensure_backup_schedule_defaults(
    schedule: BackupSchedule, config: Optional[OperatorConfig] = None
) -> BackupSchedule:
    """Stamp the operator version on a BackupSchedule."""
    return _ensure_version_label(schedule, config)


def ensure_restore_defaults(restore: Restore, config: Optional[OperatorConfig] = None) -> Restore:
    """Stamp the operator version on a Restore."""
    return _ensure_version_label(restore, config)


DEFAULTERS = {
    Cluster: ensure_cluster_defaults,
    Backup: ensure_backup_defaults,
    BackupSchedule: ensure_backup_schedule_defaults,
    Restore: ensure_restore_defaults,
}


def ensure_defaults(resource: Resource, config: Optional[OperatorConfig] = None) -> Resource:
    """Fill in the omitted fields of any MySQL Operator resource.

    Raises:
        TypeError: If the resource is not a MySQL Operator resource.
    """
    try:
        defaulter = DEFAULTERS[type(resource)]
    except KeyError:
        raise TypeError(f"Cannot default {type(resource).__name__}") from None
    return defaulter(resource, config)
