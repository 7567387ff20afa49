# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

import logging
from unittest.mock import MagicMock

import pytest
from helpers import NAMESPACE, api_error
from lightkube.models.core_v1 import LocalObjectReference
from lightkube.models.meta_v1 import ObjectMeta
from lightkube.types import PatchType

from mysql_operator import (
    AggregateError,
    ConflictError,
    EventType,
    MySQLOperatorClient,
    MySQLOperatorError,
    NotFoundError,
    PhaseTimeoutError,
    PhaseTransitionError,
    ResourceClient,
)
from mysql_operator.constants import OPERATOR_VERSION_LABEL
from mysql_operator.crds import (
    Backup,
    BackupPhase,
    BackupSpecModel,
    BackupStatusModel,
    Cluster,
    ClusterSpecModel,
    Restore,
    RestorePhase,
    RestoreSpecModel,
    RestoreStatusModel,
)


@pytest.fixture()
def mock_lightkube_client():
    """Mock the lightkube Client."""
    return MagicMock()


@pytest.fixture()
def backups(mock_lightkube_client, config):
    """Return a ResourceClient for Backups."""
    return ResourceClient(mock_lightkube_client, Backup, NAMESPACE, config)


@pytest.fixture()
def operator_client(mock_lightkube_client, config):
    """Return a MySQLOperatorClient."""
    return MySQLOperatorClient(mock_lightkube_client, NAMESPACE, config)


def make_restore(name, cluster, phase=None):
    restore = Restore(
        metadata=ObjectMeta(name=name, namespace=NAMESPACE),
        spec=RestoreSpecModel(
            clusterRef=LocalObjectReference(name=cluster),
            backupRef=LocalObjectReference(name="my-backup"),
        ),
    )
    if phase is not None:
        restore.status = RestoreStatusModel(phase=phase)
    return restore


def test_get(backups, mock_lightkube_client, backup):
    """Check get reads the resource from the namespace."""
    mock_lightkube_client.get.return_value = backup

    assert backups.get("my-backup") is backup
    mock_lightkube_client.get.assert_called_once_with(
        Backup, name="my-backup", namespace=NAMESPACE
    )


def test_get_not_found(backups, mock_lightkube_client, caplog):
    """Check a missing resource raises NotFoundError."""
    mock_lightkube_client.get.side_effect = api_error(404, "not found")

    with pytest.raises(NotFoundError) as e:
        backups.get("missing")

    assert str(e.value) == "Backup 'missing' not found"
    assert "Backup 'missing' not found" in caplog.text


def test_get_api_error(backups, mock_lightkube_client, caplog):
    """Check other API failures raise a MySQLOperatorError."""
    mock_lightkube_client.get.side_effect = api_error(500, "internal error")

    with pytest.raises(MySQLOperatorError) as e:
        backups.get("my-backup")

    assert not isinstance(e.value, NotFoundError)
    assert "Failed to get Backup 'my-backup': internal error" in caplog.text


def test_list(backups, mock_lightkube_client, backup):
    """Check list forwards the label selector."""
    mock_lightkube_client.list.return_value = iter([backup])

    assert backups.list(labels={"team": "db"}) == [backup]
    mock_lightkube_client.list.assert_called_once_with(
        Backup, namespace=NAMESPACE, labels={"team": "db"}
    )


def test_watch(backups, mock_lightkube_client, backup):
    """Check watch yields typed events and skips unknown ones."""
    mock_lightkube_client.watch.return_value = iter(
        [("ADDED", backup), ("BOOKMARK", backup), ("DELETED", backup)]
    )

    events = list(backups.watch(resource_version="42"))

    assert [event.type for event in events] == [EventType.ADDED, EventType.DELETED]
    assert all(event.object is backup for event in events)
    mock_lightkube_client.watch.assert_called_once_with(
        Backup, namespace=NAMESPACE, labels=None, resource_version="42"
    )


def test_create(backups, mock_lightkube_client, backup, caplog):
    """Check create defaults the resource before sending it."""
    caplog.set_level(logging.INFO)
    mock_lightkube_client.create.side_effect = lambda resource, namespace: resource

    created = backups.create(backup)

    assert created is backup
    assert backup.labels == {OPERATOR_VERSION_LABEL: "0.3.0"}
    mock_lightkube_client.create.assert_called_once_with(backup, namespace=NAMESPACE)
    assert "Created Backup 'my-backup' in 'test-namespace'" in caplog.text


def test_create_defaults_cluster(mock_lightkube_client, config):
    """Check a cluster is defaulted before it is validated and sent."""
    clusters = ResourceClient(mock_lightkube_client, Cluster, NAMESPACE, config)
    cluster = Cluster(metadata=ObjectMeta(name="minimal"), spec=ClusterSpecModel())

    clusters.create(cluster)

    sent = mock_lightkube_client.create.call_args.args[0]
    assert sent.spec.replicas == 1
    assert sent.spec.baseServerId == 1000
    assert sent.spec.version == "8.0.11"


def test_create_invalid(backups, mock_lightkube_client, backup):
    """Check an invalid resource is rejected without reaching the store."""
    backup.spec.cluster = None
    backup.spec.executor.name = "xtrabackup"

    with pytest.raises(AggregateError) as e:
        backups.create(backup)

    assert e.value.fields() == ["spec.executor.name", "spec.cluster"]
    mock_lightkube_client.create.assert_not_called()


def test_create_conflict(backups, mock_lightkube_client, backup):
    """Check creating an existing resource raises ConflictError."""
    mock_lightkube_client.create.side_effect = api_error(409, "already exists")

    with pytest.raises(ConflictError):
        backups.create(backup)


def test_update(backups, mock_lightkube_client, backup):
    """Check update replaces the stored resource."""
    backups.update(backup)
    mock_lightkube_client.replace.assert_called_once_with(backup, namespace=NAMESPACE)


def test_update_defaults_cluster(mock_lightkube_client, config):
    """Check an edited cluster is defaulted before it is validated and replaced."""
    clusters = ResourceClient(mock_lightkube_client, Cluster, NAMESPACE, config)
    cluster = Cluster(
        metadata=ObjectMeta(name="edited"), spec=ClusterSpecModel(replicas=0, version="8.0.11")
    )

    clusters.update(cluster)

    sent = mock_lightkube_client.replace.call_args.args[0]
    assert sent.spec.replicas == 1
    assert sent.spec.baseServerId == 1000
    mock_lightkube_client.replace.assert_called_once_with(cluster, namespace=NAMESPACE)


def test_update_invalid(backups, mock_lightkube_client, backup):
    """Check an invalid update is rejected without reaching the store."""
    backup.spec.storageProvider.config = {}

    with pytest.raises(AggregateError):
        backups.update(backup)

    mock_lightkube_client.replace.assert_not_called()


def test_update_conflict(backups, mock_lightkube_client, backup):
    """Check a stale update raises ConflictError."""
    mock_lightkube_client.replace.side_effect = api_error(409, "conflict")

    with pytest.raises(ConflictError):
        backups.update(backup)


def test_delete(backups, mock_lightkube_client, caplog):
    """Check delete removes the resource from the namespace."""
    caplog.set_level(logging.INFO)
    backups.delete("my-backup")

    mock_lightkube_client.delete.assert_called_once_with(
        Backup, "my-backup", namespace=NAMESPACE
    )
    assert "Deleted Backup 'my-backup' from 'test-namespace'" in caplog.text


def test_delete_not_found(backups, mock_lightkube_client):
    """Check deleting a missing resource raises NotFoundError."""
    mock_lightkube_client.delete.side_effect = api_error(404, "not found")

    with pytest.raises(NotFoundError):
        backups.delete("missing")


@pytest.mark.parametrize(
    "patch",
    [
        {"spec": {"agentscheduled": "node-1"}},
        b'{"spec": {"agentscheduled": "node-1"}}',
        '{"spec": {"agentscheduled": "node-1"}}',
    ],
)
def test_patch(backups, mock_lightkube_client, patch):
    """Check merge patches are accepted as dicts or JSON."""
    backups.patch("my-backup", patch)

    mock_lightkube_client.patch.assert_called_once_with(
        Backup,
        "my-backup",
        {"spec": {"agentscheduled": "node-1"}},
        namespace=NAMESPACE,
        patch_type=PatchType.MERGE,
    )


@pytest.mark.parametrize("patch", [b"not json", "[1, 2]"])
def test_patch_invalid(backups, mock_lightkube_client, patch):
    """Check a patch must be a JSON object."""
    with pytest.raises(ValueError):
        backups.patch("my-backup", patch)

    mock_lightkube_client.patch.assert_not_called()


def test_transition(backups, mock_lightkube_client, backup):
    """Check transition moves the stored resource and writes it back."""
    backup.status = BackupStatusModel(phase=BackupPhase.STARTED)
    mock_lightkube_client.get.return_value = backup

    backups.transition("my-backup", BackupPhase.COMPLETE, location="s3://b/my-backup")

    sent = mock_lightkube_client.replace.call_args.args[0]
    assert sent.status.phase == BackupPhase.COMPLETE
    assert sent.status.outcome.location == "s3://b/my-backup"


def test_transition_illegal(backups, mock_lightkube_client, backup):
    """Check an illegal transition is not written."""
    backup.status = BackupStatusModel(phase=BackupPhase.COMPLETE)
    mock_lightkube_client.get.return_value = backup

    with pytest.raises(PhaseTransitionError):
        backups.transition("my-backup", BackupPhase.STARTED)

    mock_lightkube_client.replace.assert_not_called()


def test_wait_for_phase(backups, mock_lightkube_client, backup):
    """Check wait_for_phase polls until the phase is reached."""
    scheduled = Backup(metadata=backup.metadata, status=BackupStatusModel(phase="Scheduled"))
    complete = Backup(metadata=backup.metadata, status=BackupStatusModel(phase="Complete"))
    mock_lightkube_client.get.side_effect = [scheduled, scheduled, complete]

    result = backups.wait_for_phase(
        "my-backup", [BackupPhase.COMPLETE, BackupPhase.FAILED], attempts=5, delay=0
    )

    assert result is complete
    assert mock_lightkube_client.get.call_count == 3


def test_wait_for_phase_timeout(backups, mock_lightkube_client, backup):
    """Check wait_for_phase gives up after the given attempts."""
    backup.status = BackupStatusModel(phase="Started")
    mock_lightkube_client.get.return_value = backup

    with pytest.raises(PhaseTimeoutError) as e:
        backups.wait_for_phase("my-backup", [BackupPhase.COMPLETE], attempts=3, delay=0)

    assert str(e.value) == "Backup 'my-backup' is in phase 'Started'"
    assert mock_lightkube_client.get.call_count == 3


def test_wait_for_phase_not_found(backups, mock_lightkube_client):
    """Check a missing resource is not polled again."""
    mock_lightkube_client.get.side_effect = api_error(404, "not found")

    with pytest.raises(NotFoundError):
        backups.wait_for_phase("missing", [BackupPhase.COMPLETE], attempts=3, delay=0)

    assert mock_lightkube_client.get.call_count == 1


def test_backups_for_cluster(operator_client, mock_lightkube_client, backup):
    """Check the backups of a cluster are found by reference."""
    other = Backup(metadata=ObjectMeta(name="other"), spec=BackupSpecModel())
    mock_lightkube_client.list.return_value = [backup, other]

    assert operator_client.backups_for_cluster("my-cluster") == [backup]


def test_in_flight_restores(operator_client, mock_lightkube_client):
    """Check only the unfinished restores of the cluster are in flight."""
    running = make_restore("running", "my-cluster", RestorePhase.STARTED)
    mock_lightkube_client.list.return_value = [
        make_restore("done", "my-cluster", RestorePhase.COMPLETE),
        make_restore("elsewhere", "other-cluster", RestorePhase.STARTED),
        running,
    ]

    assert operator_client.in_flight_restores("my-cluster") == [running]


def test_create_restore(operator_client, mock_lightkube_client, restore):
    """Check a restore is created when its cluster has none in flight."""
    mock_lightkube_client.list.return_value = [
        make_restore("old", "my-cluster", RestorePhase.FAILED)
    ]

    operator_client.create_restore(restore)

    mock_lightkube_client.create.assert_called_once_with(restore, namespace=NAMESPACE)


def test_create_restore_conflict(operator_client, mock_lightkube_client, restore, caplog):
    """Check a second restore of the same cluster is refused."""
    mock_lightkube_client.list.return_value = [make_restore("first", "my-cluster")]

    with pytest.raises(ConflictError) as e:
        operator_client.create_restore(restore)

    assert "first" in str(e.value)
    assert "Cluster 'my-cluster' already has restores in flight" in caplog.text
    mock_lightkube_client.create.assert_not_called()


def test_operator_client_kinds(operator_client, mock_lightkube_client, cluster):
    """Check each kind is served by its own client."""
    mock_lightkube_client.get.return_value = cluster

    operator_client.clusters.get("my-cluster")

    mock_lightkube_client.get.assert_called_once_with(
        Cluster, name="my-cluster", namespace=NAMESPACE
    )
