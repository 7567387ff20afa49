# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Configuration for the operator resource model."""

import logging
import os
from functools import lru_cache
from typing import List, Mapping, Optional, Self

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from .constants import (
    DEFAULT_VERSION,
    ENV_BUILD_VERSION,
    ENV_DEFAULT_VERSION,
    ENV_SUPPORTED_VERSIONS,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)


class OperatorConfig(BaseModel):
    """Manager for the structured configuration.

    The list of supported MySQL versions is configuration rather than code so
    that new versions can be accepted without a new release.
    """

    build_version: Optional[str] = None
    default_version: str = DEFAULT_VERSION
    supported_versions: List[str] = [DEFAULT_VERSION]

    @field_validator("*", mode="before")
    @classmethod
    def blank_string(cls, value):
        """Convert empty strings to None."""
        if value == "":
            return None
        return value

    @field_validator("supported_versions", mode="before")
    @classmethod
    def split_versions(cls, value):
        """Accept a comma separated string of versions."""
        if isinstance(value, str):
            return [version.strip() for version in value.split(",") if version.strip()]
        return value

    @model_validator(mode="after")
    def check_default_version(self) -> Self:
        """Ensure the default version is one of the supported versions."""
        if self.default_version not in self.supported_versions:
            raise ValueError(
                f"default version '{self.default_version}' is not one of the supported "
                f"versions: {', '.join(self.supported_versions)}"
            )
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OperatorConfig":
        """Load the configuration from environment variables.

        Args:
            environ: The environment to read. Defaults to ``os.environ``.

        Raises:
            ConfigError: If the environment holds an invalid configuration.
        """
        environ = os.environ if environ is None else environ
        data = {
            field: environ[key]
            for field, key in (
                ("build_version", ENV_BUILD_VERSION),
                ("default_version", ENV_DEFAULT_VERSION),
                ("supported_versions", ENV_SUPPORTED_VERSIONS),
            )
            if environ.get(key)
        }
        try:
            return cls(**data)
        except ValidationError as ve:
            logger.error("Invalid operator configuration: %s", ve)
            raise ConfigError(verror_to_str(ve)) from ve


def verror_to_str(ve: ValidationError) -> str:
    """Convert a Pydantic ValidationError to a string."""
    error_messages = []
    for error in ve.errors():
        field = ".".join(map(str, error["loc"]))
        message = error["msg"].replace("Field ", "")
        error_messages.append(f"'{field}' {message}" if field else message)
    return "OperatorConfig errors: " + "; ".join(error_messages)


@lru_cache(maxsize=1)
def get_config() -> OperatorConfig:
    """Return the configuration of the running process."""
    return OperatorConfig.from_env()
