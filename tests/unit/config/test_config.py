"""Unit tests for config.py — AppConfig and load_config()."""

import os
from unittest.mock import patch

import pytest

from graph_drive.config import AppConfig, load_config

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Minimal set of required environment variables for load_config()
_REQUIRED_ENV = {
    "GD_TENANT_ID": "test-tenant-id",
    "GD_CLIENT_ID": "test-client-id",
    "GD_CLIENT_SECRET": "test-secret",
    "GD_DRIVE_ID": "b!drive-id",
}


# ---------------------------------------------------------------------------
# AppConfig tests
# ---------------------------------------------------------------------------


class TestAppConfig:
    def test_transport_settings_have_defaults(self) -> None:
        config = AppConfig(tenant_id="t", client_id="c", client_secret="s", drive_id="d")
        assert config.graph_base_url == "https://graph.microsoft.com/v1.0"
        assert config.authority_base_url == "https://login.microsoftonline.com"
        assert config.request_timeout == 60
        assert config.verify_tls is True

    def test_is_frozen(self) -> None:
        config = AppConfig(tenant_id="t", client_id="c", client_secret="s", drive_id="d")
        with pytest.raises(AttributeError):
            config.drive_id = "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# load_config tests
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_reads_required_values(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config.tenant_id == "test-tenant-id"
        assert config.client_id == "test-client-id"
        assert config.client_secret == "test-secret"
        assert config.drive_id == "b!drive-id"

    def test_optional_values_fall_back_to_defaults(self) -> None:
        with patch.dict(os.environ, _REQUIRED_ENV, clear=True):
            config = load_config()
        assert config.request_timeout == 60
        assert config.verify_tls is True

    def test_optional_values_read_from_env(self) -> None:
        env = {
            **_REQUIRED_ENV,
            "GD_GRAPH_BASE_URL": "https://graph.microsoft.com/beta",
            "GD_REQUEST_TIMEOUT": "5",
            "GD_VERIFY_TLS": "false",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.graph_base_url == "https://graph.microsoft.com/beta"
        assert config.request_timeout == 5
        assert config.verify_tls is False

    def test_raises_key_error_when_drive_id_missing(self) -> None:
        env = {k: v for k, v in _REQUIRED_ENV.items() if k != "GD_DRIVE_ID"}
        with patch.dict(os.environ, env, clear=True), pytest.raises(KeyError):
            load_config()
