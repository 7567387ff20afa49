# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Backup Storage Providers module."""

from typing import Dict, Type

from ..constants import S3_STORAGE_PROVIDER
from .classes import StorageConfig
from .s3 import S3StorageConfig

STORAGE_CONFIGS: Dict[str, Type[StorageConfig]] = {
    S3_STORAGE_PROVIDER: S3StorageConfig,
}

__all__ = [
    "StorageConfig",
    "S3StorageConfig",
    "STORAGE_CONFIGS",
]
