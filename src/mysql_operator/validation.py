# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Validation of the MySQL Operator resources.

Validators never raise on an invalid resource and never mutate it. They collect
every violation into an ``ErrorList`` of field-addressed ``FieldError`` values
and hand back a single ``AggregateError`` (or ``None`` when the resource is
valid) so that callers can report all problems in one round trip.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from lightkube.models.core_v1 import LocalObjectReference

from .config import OperatorConfig, get_config
from .constants import (
    BACKUP_EXECUTORS,
    BACKUP_STORAGE_PROVIDERS,
    CLUSTER_NAME_MAX_LEN,
    MAX_BASE_SERVER_ID,
    MAX_INNODB_CLUSTER_MEMBERS,
)
from .crds import (
    Backup,
    BackupPhase,
    BackupSchedule,
    BackupSchedulePhase,
    BackupSpecModel,
    Cluster,
    ClusterPhase,
    Restore,
    RestorePhase,
)
from .errors import MySQLOperatorError
from .providers import STORAGE_CONFIGS
from .schedule import parse_schedule

logger = logging.getLogger(__name__)

Resource = Union[Cluster, Backup, BackupSchedule, Restore]


class ErrorType(str, Enum):
    """Kind of a field validation error."""

    REQUIRED = "Required value"
    INVALID = "Invalid value"
    NOT_SUPPORTED = "Unsupported value"
    TOO_LONG = "Too long"


@dataclass(frozen=True)
class FieldError:
    """A single validation failure of one field."""

    type: ErrorType
    field: str
    bad_value: Any = None
    detail: str = ""

    @property
    def message(self) -> str:
        """Return the human readable message, without the field path."""
        if self.type in (ErrorType.REQUIRED, ErrorType.TOO_LONG):
            return f"{self.type.value}: {self.detail}" if self.detail else self.type.value
        message = f"{self.type.value}: {self.bad_value!r}"
        return f"{message}: {self.detail}" if self.detail else message

    def __str__(self) -> str:
        """Return the field path followed by the message."""
        return f"{self.field}: {self.message}"


class AggregateError(MySQLOperatorError):
    """All the validation failures of a resource."""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        super().__init__(self._format())

    def _format(self) -> str:
        if len(self.errors) == 1:
            return str(self.errors[0])
        return "[" + ", ".join(str(error) for error in self.errors) + "]"

    def by_field(self) -> Dict[str, List[str]]:
        """Return the error messages grouped by field path, in reporting order."""
        fields: Dict[str, List[str]] = {}
        for error in self.errors:
            fields.setdefault(error.field, []).append(error.message)
        return fields

    def fields(self) -> List[str]:
        """Return the paths of the invalid fields."""
        return list(self.by_field())


class ErrorList(list):
    """Ordered list of field errors."""

    def required(self, field: str, detail: str = "") -> None:
        """Record a missing value."""
        self.append(FieldError(ErrorType.REQUIRED, field, None, detail))

    def invalid(self, field: str, value: Any, detail: str = "") -> None:
        """Record a value that breaks a rule."""
        self.append(FieldError(ErrorType.INVALID, field, value, detail))

    def not_supported(self, field: str, value: Any, supported) -> None:
        """Record a value outside the supported values."""
        values = ", ".join(repr(v) for v in supported)
        self.append(
            FieldError(ErrorType.NOT_SUPPORTED, field, value, f"supported values: {values}")
        )

    def too_long(self, field: str, value: Any, max_length: int) -> None:
        """Record a value longer than ``max_length``."""
        self.append(
            FieldError(ErrorType.TOO_LONG, field, value, f"must have at most {max_length} bytes")
        )

    def to_aggregate(self) -> Optional[AggregateError]:
        """Return an ``AggregateError`` holding the errors, or None if there are none."""
        if not self:
            return None
        return AggregateError(self)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_name(metadata, errors: ErrorList) -> None:
    if metadata is None or not metadata.name:
        errors.required("metadata.name", "name or generateName is required")


def _validate_reference(
    ref: Optional[LocalObjectReference], path: str, errors: ErrorList, required: bool = True
) -> None:
    if ref is None:
        if required:
            errors.required(path)
        return
    if not ref.name:
        errors.required(f"{path}.name")


def _validate_phase(status, phase_type: Type[Enum], errors: ErrorList) -> None:
    if status is None or status.phase is None:
        return
    if status.phase not in [phase.value for phase in phase_type]:
        errors.not_supported(
            "status.phase", status.phase, [phase.value for phase in phase_type]
        )


def _validate_cluster_spec(
    cluster: Cluster, config: OperatorConfig, errors: ErrorList
) -> None:
    spec = cluster.spec
    if spec is None:
        errors.required("spec")
        return

    if not spec.version:
        errors.required("spec.version")
    elif spec.version not in config.supported_versions:
        errors.not_supported("spec.version", spec.version, config.supported_versions)

    replicas_ok = False
    if spec.replicas is None:
        errors.required("spec.replicas")
    elif not _is_int(spec.replicas):
        errors.invalid("spec.replicas", spec.replicas, "must be an integer")
    elif not 1 <= spec.replicas <= MAX_INNODB_CLUSTER_MEMBERS:
        errors.invalid(
            "spec.replicas",
            spec.replicas,
            f"should be in the range [1, {MAX_INNODB_CLUSTER_MEMBERS}]",
        )
    else:
        replicas_ok = True

    base_ok = False
    if spec.baseServerId is None:
        errors.required("spec.baseServerId")
    elif not _is_int(spec.baseServerId):
        errors.invalid("spec.baseServerId", spec.baseServerId, "must be an integer")
    elif not 1 <= spec.baseServerId <= MAX_BASE_SERVER_ID:
        errors.invalid(
            "spec.baseServerId",
            spec.baseServerId,
            f"should be in the range [1, {MAX_BASE_SERVER_ID}]",
        )
    else:
        base_ok = True

    if replicas_ok and base_ok and spec.baseServerId + spec.replicas - 1 > MAX_BASE_SERVER_ID:
        errors.invalid(
            "spec.baseServerId",
            spec.baseServerId,
            f"server ids of all {spec.replicas} replicas must not exceed {MAX_BASE_SERVER_ID}",
        )

    _validate_reference(spec.secretRef, "spec.secretRef", errors, required=False)
    _validate_reference(spec.configRef, "spec.configRef", errors, required=False)
    _validate_reference(spec.sslSecretRef, "spec.sslSecretRef", errors, required=False)
    if (
        spec.secretRef is not None
        and spec.sslSecretRef is not None
        and spec.secretRef.name
        and spec.secretRef.name == spec.sslSecretRef.name
    ):
        errors.invalid(
            "spec.sslSecretRef.name",
            spec.sslSecretRef.name,
            "must not reference the root password secret in spec.secretRef",
        )


def validate_cluster(
    cluster: Cluster, config: Optional[OperatorConfig] = None
) -> Optional[AggregateError]:
    """Validate a Cluster.

    Args:
        cluster: The cluster, normally already defaulted.
        config: The operator configuration. Defaults to the process configuration.

    Returns:
        An ``AggregateError`` with every violation, or None if the cluster is valid.
    """
    config = config or get_config()
    errors = ErrorList()

    _validate_name(cluster.metadata, errors)
    if cluster.name and len(cluster.name) > CLUSTER_NAME_MAX_LEN:
        errors.too_long("metadata.name", cluster.name, CLUSTER_NAME_MAX_LEN)
    _validate_cluster_spec(cluster, config, errors)
    _validate_phase(cluster.status, ClusterPhase, errors)

    return errors.to_aggregate()


def _validate_backup_spec(spec: Optional[BackupSpecModel], path: str, errors: ErrorList) -> None:
    if spec is None:
        errors.required(path)
        return

    executor = spec.executor
    if executor is None:
        errors.required(f"{path}.executor", "missing executor")
    elif not executor.name:
        errors.required(f"{path}.executor.name", "missing executor name")
    elif executor.name not in BACKUP_EXECUTORS:
        errors.not_supported(f"{path}.executor.name", executor.name, sorted(BACKUP_EXECUTORS))
    elif BACKUP_EXECUTORS[executor.name]:
        if not executor.databases:
            errors.required(f"{path}.executor.databases", "missing databases")
        else:
            for index, database in enumerate(executor.databases):
                if not database:
                    errors.invalid(
                        f"{path}.executor.databases[{index}]", database, "must not be empty"
                    )

    provider = spec.storageProvider
    if provider is None:
        errors.required(f"{path}.storageProvider", "missing storage provider")
    elif not provider.name:
        errors.required(f"{path}.storageProvider.name", "missing storage provider name")
    elif provider.name not in BACKUP_STORAGE_PROVIDERS:
        errors.not_supported(
            f"{path}.storageProvider.name", provider.name, sorted(BACKUP_STORAGE_PROVIDERS)
        )
    else:
        _validate_reference(provider.secretRef, f"{path}.storageProvider.secretRef", errors)
        config_cls = STORAGE_CONFIGS[provider.name]
        for key, error_type, message in config_cls.check(provider.config or {}):
            field = f"{path}.storageProvider.config"
            if key:
                field = f"{field}.{key}"
            if error_type == "missing":
                errors.required(field)
            else:
                errors.invalid(field, (provider.config or {}).get(key), message)

    _validate_reference(spec.cluster, f"{path}.cluster", errors)


def validate_backup(
    backup: Backup, config: Optional[OperatorConfig] = None
) -> Optional[AggregateError]:
    """Validate a Backup, returning every violation or None if it is valid."""
    errors = ErrorList()
    _validate_name(backup.metadata, errors)
    _validate_backup_spec(backup.spec, "spec", errors)
    _validate_phase(backup.status, BackupPhase, errors)
    return errors.to_aggregate()


def validate_backup_schedule(
    schedule: BackupSchedule, config: Optional[OperatorConfig] = None
) -> Optional[AggregateError]:
    """Validate a BackupSchedule.

    The backup template is validated with the Backup rules, its errors are
    reported under ``spec.backupTemplate``.
    """
    errors = ErrorList()
    _validate_name(schedule.metadata, errors)

    spec = schedule.spec
    if spec is None:
        errors.required("spec")
    else:
        if not spec.schedule:
            errors.required("spec.schedule", "missing cron schedule")
        else:
            try:
                parse_schedule(spec.schedule)
            except ValueError as ve:
                errors.invalid("spec.schedule", spec.schedule, str(ve))
        _validate_backup_spec(spec.backupTemplate, "spec.backupTemplate", errors)

    _validate_phase(schedule.status, BackupSchedulePhase, errors)
    return errors.to_aggregate()


def validate_restore(
    restore: Restore, config: Optional[OperatorConfig] = None
) -> Optional[AggregateError]:
    """Validate a Restore, returning every violation or None if it is valid."""
    errors = ErrorList()
    _validate_name(restore.metadata, errors)

    if restore.spec is None:
        errors.required("spec")
    else:
        _validate_reference(restore.spec.clusterRef, "spec.clusterRef", errors)
        _validate_reference(restore.spec.backupRef, "spec.backupRef", errors)

    _validate_phase(restore.status, RestorePhase, errors)
    return errors.to_aggregate()


VALIDATORS = {
    Cluster: validate_cluster,
    Backup: validate_backup,
    BackupSchedule: validate_backup_schedule,
    Restore: validate_restore,
}


def validate(
    resource: Resource, config: Optional[OperatorConfig] = None
) -> Optional[AggregateError]:
    """Validate any MySQL Operator resource.

    Raises:
        TypeError: If the resource is not a MySQL Operator resource.
    """
    try:
        validator = VALIDATORS[type(resource)]
    except KeyError:
        raise TypeError(f"Cannot validate {type(resource).__name__}") from None
    result = validator(resource, config)
    if result is not None:
        logger.debug(
            "%s '%s' is invalid: %s", type(resource).__name__, resource.name, result
        )
    return result
