# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Client façade mapping the MySQL Operator resources onto the Kubernetes API."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
)

from lightkube import Client
from lightkube.core.exceptions import ApiError
from lightkube.types import PatchType

from .config import OperatorConfig, get_config
from .constants import K8S_CHECK_ATTEMPTS, K8S_CHECK_DELAY
from .crds import Backup, BackupSchedule, Cluster, Restore
from .defaults import ensure_defaults
from .errors import ConflictError, MySQLOperatorError, NotFoundError, PhaseTimeoutError
from .k8s_utils import api_error_code, k8s_retry_check, load_patch
from .lifecycle import (
    advance_backup,
    advance_backup_schedule,
    advance_cluster,
    advance_restore,
    get_phase,
)
from .phases import Phase, is_terminal
from .validation import validate

logger = logging.getLogger(__name__)

R = TypeVar("R", Cluster, Backup, BackupSchedule, Restore)

ADVANCERS = {
    Cluster: advance_cluster,
    Backup: advance_backup,
    BackupSchedule: advance_backup_schedule,
    Restore: advance_restore,
}


class EventType(str, Enum):
    """Type of a change observed on a watched resource."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass
class ResourceEvent(Generic[R]):
    """A change observed on a watched resource."""

    type: EventType
    object: R


class _PhaseNotReached(MySQLOperatorError):
    pass


class ResourceClient(Generic[R]):
    """CRUD and watch operations on one kind of MySQL Operator resource."""

    def __init__(
        self,
        kube_client: Client,
        resource_type: Type[R],
        namespace: str,
        config: Optional[OperatorConfig] = None,
    ) -> None:
        """Initialize the ResourceClient class.

        Args:
            kube_client: The lightkube client used to interact with the cluster.
            resource_type: The resource class handled by this client.
            namespace: The namespace of the resources.
            config: The operator configuration. Defaults to the process configuration.
        """
        self._kube_client = kube_client
        self._resource_type = resource_type
        self._namespace = namespace
        self._config = config

    @property
    def _kind(self) -> str:
        return self._resource_type.__name__

    @property
    def config(self) -> OperatorConfig:
        """Return the operator configuration used for defaulting and validation."""
        return self._config or get_config()

    def _translate(self, ae: ApiError, action: str, name: Optional[str]) -> MySQLOperatorError:
        code = api_error_code(ae)
        if code == 404:
            logger.warning("%s '%s' not found", self._kind, name)
            return NotFoundError(f"{self._kind} '{name}' not found")
        if code == 409:
            logger.warning("Conflict on %s of %s '%s': %s", action, self._kind, name, ae)
            return ConflictError(f"Conflict on {action} of {self._kind} '{name}': {ae}")
        logger.error("Failed to %s %s '%s': %s", action, self._kind, name, ae)
        return MySQLOperatorError(f"Failed to {action} {self._kind} '{name}'")

    def get(self, name: str) -> R:
        """Return the resource with the given name.

        Raises:
            NotFoundError: If the resource does not exist.
        """
        try:
            return self._kube_client.get(self._resource_type, name=name, namespace=self._namespace)
        except ApiError as ae:
            raise self._translate(ae, "get", name) from ae

    def list(self, labels: Optional[Dict[str, Any]] = None) -> List[R]:
        """Return the resources matching a label selector."""
        try:
            return list(
                self._kube_client.list(
                    self._resource_type, namespace=self._namespace, labels=labels
                )
            )
        except ApiError as ae:
            raise self._translate(ae, "list", None) from ae

    def watch(
        self,
        labels: Optional[Dict[str, Any]] = None,
        resource_version: Optional[str] = None,
    ) -> Iterator[ResourceEvent[R]]:
        """Yield the changes to the resources matching a label selector."""
        events = self._kube_client.watch(
            self._resource_type,
            namespace=self._namespace,
            labels=labels,
            resource_version=resource_version,
        )
        for op, obj in events:
            try:
                event_type = EventType(op)
            except ValueError:
                logger.debug("Ignoring '%s' watch event for %s", op, self._kind)
                continue
            yield ResourceEvent(event_type, obj)

    def _check(self, resource: R) -> None:
        result = validate(resource, self.config)
        if result is not None:
            logger.info("Rejected %s '%s': %s", self._kind, resource.name, result)
            raise result

    def create(self, resource: R) -> R:
        """Default, validate and create a resource.

        Raises:
            AggregateError: If the resource is invalid. Nothing is sent to the store.
            ConflictError: If the resource already exists.
        """
        ensure_defaults(resource, self.config)
        self._check(resource)
        try:
            created = self._kube_client.create(resource, namespace=self._namespace)
        except ApiError as ae:
            raise self._translate(ae, "create", resource.name) from ae
        logger.info("Created %s '%s' in '%s'", self._kind, resource.name, self._namespace)
        return created

    def update(self, resource: R) -> R:
        """Default, validate and replace a resource.

        Raises:
            AggregateError: If the resource is invalid. Nothing is sent to the store.
            ConflictError: If the resource was changed since it was read.
            NotFoundError: If the resource does not exist.
        """
        ensure_defaults(resource, self.config)
        self._check(resource)
        try:
            return self._kube_client.replace(resource, namespace=self._namespace)
        except ApiError as ae:
            raise self._translate(ae, "update", resource.name) from ae

    def delete(self, name: str) -> None:
        """Delete a resource.

        Raises:
            NotFoundError: If the resource does not exist.
        """
        try:
            self._kube_client.delete(self._resource_type, name, namespace=self._namespace)
        except ApiError as ae:
            raise self._translate(ae, "delete", name) from ae
        logger.info("Deleted %s '%s' from '%s'", self._kind, name, self._namespace)

    def patch(self, name: str, patch: Union[Dict[str, Any], bytes, str]) -> R:
        """Apply a JSON merge patch to a resource.

        Raises:
            ValueError: If the patch is not a JSON object.
            NotFoundError: If the resource does not exist.
        """
        try:
            return self._kube_client.patch(
                self._resource_type,
                name,
                load_patch(patch),
                namespace=self._namespace,
                patch_type=PatchType.MERGE,
            )
        except ApiError as ae:
            raise self._translate(ae, "patch", name) from ae

    def transition(self, name: str, target: Phase, **kwargs) -> R:
        """Move a stored resource to the ``target`` phase.

        Keyword arguments are passed to the lifecycle helper of the kind, e.g.
        ``location`` for a completed Backup.

        Raises:
            PhaseTransitionError: If the move is not a legal forward transition.
            ConflictError: If the resource was changed concurrently.
        """
        resource = self.get(name)
        ADVANCERS[self._resource_type](resource, target, **kwargs)
        try:
            return self._kube_client.replace(resource, namespace=self._namespace)
        except ApiError as ae:
            raise self._translate(ae, "update status", name) from ae

    def wait_for_phase(
        self,
        name: str,
        phases: Iterable[Phase],
        attempts: int = K8S_CHECK_ATTEMPTS,
        delay: float = K8S_CHECK_DELAY,
    ) -> R:
        """Poll a resource until it reaches one of ``phases``.

        Raises:
            PhaseTimeoutError: If the resource did not reach any of the phases.
            NotFoundError: If the resource does not exist.
        """
        expected = set(phases)
        observed: Dict[str, R] = {}

        def check_phase() -> None:
            resource = self.get(name)
            observed["resource"] = resource
            phase = get_phase(resource)
            if phase not in expected:
                raise _PhaseNotReached(f"{self._kind} '{name}' is in phase '{phase.value}'")

        logger.info(
            "Waiting for %s '%s' to reach %s",
            self._kind,
            name,
            ", ".join(sorted(f"'{phase.value}'" for phase in expected)),
        )
        try:
            k8s_retry_check(
                check_phase,
                retry_exceptions=(_PhaseNotReached,),
                attempts=attempts,
                delay=delay,
            )
        except _PhaseNotReached as pnr:
            raise PhaseTimeoutError(str(pnr)) from pnr
        return observed["resource"]


class MySQLOperatorClient:
    """Access to the MySQL Operator resources of one namespace."""

    def __init__(
        self, kube_client: Client, namespace: str, config: Optional[OperatorConfig] = None
    ) -> None:
        self._namespace = namespace
        self.clusters = ResourceClient(kube_client, Cluster, namespace, config)
        self.backups = ResourceClient(kube_client, Backup, namespace, config)
        self.backup_schedules = ResourceClient(kube_client, BackupSchedule, namespace, config)
        self.restores = ResourceClient(kube_client, Restore, namespace, config)

    def backups_for_cluster(self, cluster_name: str) -> List[Backup]:
        """Return the Backups referencing a Cluster."""
        return [
            backup
            for backup in self.backups.list()
            if backup.spec and backup.spec.cluster and backup.spec.cluster.name == cluster_name
        ]

    def restores_for_cluster(self, cluster_name: str) -> List[Restore]:
        """Return the Restores referencing a Cluster."""
        return [
            restore
            for restore in self.restores.list()
            if restore.spec
            and restore.spec.clusterRef
            and restore.spec.clusterRef.name == cluster_name
        ]

    def in_flight_restores(self, cluster_name: str) -> List[Restore]:
        """Return the Restores of a Cluster that have not terminated."""
        return [
            restore
            for restore in self.restores_for_cluster(cluster_name)
            if not is_terminal(get_phase(restore))
        ]

    def create_restore(self, restore: Restore) -> Restore:
        """Create a Restore unless its Cluster already has one in flight.

        Raises:
            ConflictError: If another Restore of the same Cluster has not terminated.
            AggregateError: If the restore is invalid.
        """
        cluster_name = (
            restore.spec.clusterRef.name if restore.spec and restore.spec.clusterRef else None
        )
        if cluster_name:
            in_flight = [r.name for r in self.in_flight_restores(cluster_name)]
            if in_flight:
                logger.warning(
                    "Cluster '%s' already has restores in flight: %s", cluster_name, in_flight
                )
                raise ConflictError(
                    f"Cluster '{cluster_name}' already has a restore in flight: "
                    + ", ".join(in_flight)
                )
        return self.restores.create(restore)
