"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_AUTHORITY_BASE_URL = "https://login.microsoftonline.com"
DEFAULT_REQUEST_TIMEOUT = 60

_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Transport settings
    have sensible defaults but can be overridden via environment variables.
    """

    # Required: no defaults, fail at startup if missing
    tenant_id: str
    client_id: str
    client_secret: str
    drive_id: str

    # Transport settings: defaults provided, overridable via env
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    authority_base_url: str = DEFAULT_AUTHORITY_BASE_URL
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    verify_tls: bool = True


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSE_VALUES


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        GD_TENANT_ID: Azure AD tenant ID.
        GD_CLIENT_ID: Azure AD application (client) ID.
        GD_CLIENT_SECRET: Azure AD application client secret.
        GD_DRIVE_ID: ID of the drive (document library or OneDrive) to operate on.

    Optional environment variables (with defaults):
        GD_GRAPH_BASE_URL: Graph API root (default: https://graph.microsoft.com/v1.0).
        GD_AUTHORITY_BASE_URL: Token authority root (default: https://login.microsoftonline.com).
        GD_REQUEST_TIMEOUT: Per-request timeout in seconds (default: 60).
        GD_VERIFY_TLS: Set to "false" to skip TLS certificate verification (default: true).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        tenant_id=os.environ["GD_TENANT_ID"],
        client_id=os.environ["GD_CLIENT_ID"],
        client_secret=os.environ["GD_CLIENT_SECRET"],
        drive_id=os.environ["GD_DRIVE_ID"],
        graph_base_url=os.environ.get("GD_GRAPH_BASE_URL", DEFAULT_GRAPH_BASE_URL),
        authority_base_url=os.environ.get("GD_AUTHORITY_BASE_URL", DEFAULT_AUTHORITY_BASE_URL),
        request_timeout=int(os.environ.get("GD_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))),
        verify_tls=_env_flag("GD_VERIFY_TLS", True),
    )
