# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

import pytest
from pydantic import ValidationError

from mysql_operator import ConfigError, OperatorConfig, get_config
from mysql_operator.constants import (
    DEFAULT_VERSION,
    ENV_BUILD_VERSION,
    ENV_DEFAULT_VERSION,
    ENV_SUPPORTED_VERSIONS,
)


@pytest.fixture(autouse=True)
def clear_config_cache():
    """Drop the cached process configuration around each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_default_config():
    """Check the configuration defaults."""
    config = OperatorConfig.from_env({})

    assert config.build_version is None
    assert config.default_version == DEFAULT_VERSION
    assert config.supported_versions == [DEFAULT_VERSION]


def test_config_from_env():
    """Check the configuration is read from the environment."""
    config = OperatorConfig.from_env(
        {
            ENV_BUILD_VERSION: "0.3.0",
            ENV_DEFAULT_VERSION: "8.0.12",
            ENV_SUPPORTED_VERSIONS: "8.0.11, 8.0.12,",
        }
    )

    assert config.build_version == "0.3.0"
    assert config.default_version == "8.0.12"
    assert config.supported_versions == ["8.0.11", "8.0.12"]


def test_config_blank_env_ignored():
    """Check blank environment variables fall back to the defaults."""
    config = OperatorConfig.from_env({ENV_BUILD_VERSION: "", ENV_SUPPORTED_VERSIONS: ""})

    assert config.build_version is None
    assert config.supported_versions == [DEFAULT_VERSION]


def test_config_blank_string_is_none():
    """Check empty strings are treated as unset."""
    assert OperatorConfig(build_version="").build_version is None


def test_config_default_version_not_supported():
    """Check the default version must be one of the supported versions."""
    with pytest.raises(ConfigError) as e:
        OperatorConfig.from_env({ENV_DEFAULT_VERSION: "5.7.22"})

    assert str(e.value).startswith("OperatorConfig errors: ")
    assert "5.7.22" in str(e.value)


def test_config_model_rejects_unsupported_default():
    """Check the model itself refuses an unsupported default version."""
    with pytest.raises(ValidationError):
        OperatorConfig(default_version="8.0.12", supported_versions=["8.0.11"])


def test_get_config_is_cached(monkeypatch):
    """Check the process configuration is read once from the environment."""
    monkeypatch.setenv(ENV_BUILD_VERSION, "1.2.3")

    config = get_config()
    monkeypatch.setenv(ENV_BUILD_VERSION, "4.5.6")

    assert config.build_version == "1.2.3"
    assert get_config() is config
