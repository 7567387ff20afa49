# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

import pytest
from helpers import BUILD_VERSION, NAMESPACE, backup_spec
from lightkube.models.core_v1 import LocalObjectReference
from lightkube.models.meta_v1 import ObjectMeta

from mysql_operator import OperatorConfig
from mysql_operator.crds import (
    Backup,
    BackupSchedule,
    BackupScheduleSpecModel,
    Cluster,
    ClusterSpecModel,
    Restore,
    RestoreSpecModel,
)


@pytest.fixture()
def config():
    """Return an operator configuration with a build version."""
    return OperatorConfig(build_version=BUILD_VERSION)


@pytest.fixture()
def cluster():
    """Return a defaulted, valid Cluster."""
    return Cluster(
        metadata=ObjectMeta(name="my-cluster", namespace=NAMESPACE),
        spec=ClusterSpecModel(version="8.0.11", replicas=3, baseServerId=1000),
    )


@pytest.fixture()
def backup():
    """Return a valid Backup."""
    return Backup(
        metadata=ObjectMeta(name="my-backup", namespace=NAMESPACE),
        spec=backup_spec(),
    )


@pytest.fixture()
def schedule():
    """Return a valid BackupSchedule."""
    return BackupSchedule(
        metadata=ObjectMeta(name="nightly", namespace=NAMESPACE, labels={"team": "db"}),
        spec=BackupScheduleSpecModel(schedule="0 2 * * *", backupTemplate=backup_spec()),
    )


@pytest.fixture()
def restore():
    """Return a valid Restore."""
    return Restore(
        metadata=ObjectMeta(name="my-restore", namespace=NAMESPACE),
        spec=RestoreSpecModel(
            clusterRef=LocalObjectReference(name="my-cluster"),
            backupRef=LocalObjectReference(name="my-backup"),
        ),
    )
