# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""S3 Backup Storage Provider configuration."""

from typing import Optional

from pydantic import Field

from .classes import StorageConfig


class S3StorageConfig(StorageConfig):
    """Pydantic model for S3 storage config."""

    endpoint: str = Field(min_length=1)
    region: str = Field(min_length=1)
    bucket: str = Field(min_length=1)
    force_path_style: Optional[bool] = Field(None, alias="forcePathStyle")
