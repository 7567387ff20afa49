# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

from unittest.mock import MagicMock

import httpx
from lightkube import ApiError
from lightkube.models.core_v1 import LocalObjectReference

from mysql_operator.crds import BackupExecutorModel, BackupSpecModel, BackupStorageProviderModel

NAMESPACE = "test-namespace"
BUILD_VERSION = "0.3.0"


def api_error(code: int, message: str = "error") -> ApiError:
    """Return a lightkube ApiError carrying the given status code."""
    mock_response = MagicMock(spec=httpx.Response)
    mock_response.json.return_value = {"code": code, "message": message}
    return ApiError(request=MagicMock(), response=mock_response)


def backup_spec(cluster: str = "my-cluster") -> BackupSpecModel:
    """Return a valid backup spec."""
    return BackupSpecModel(
        executor=BackupExecutorModel(name="mysqldump", databases=["employees"]),
        storageProvider=BackupStorageProviderModel(
            name="s3",
            secretRef=LocalObjectReference(name="s3-credentials"),
            config={
                "endpoint": "https://s3.example.com",
                "region": "us-east-1",
                "bucket": "mysql-backups",
            },
        ),
        cluster=LocalObjectReference(name=cluster),
    )
