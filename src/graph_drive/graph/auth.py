"""Token providers for Microsoft Graph: MSAL client credentials or a fixed bearer token."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import msal

from graph_drive.config import DEFAULT_AUTHORITY_BASE_URL
from graph_drive.errors import AuthenticationError

if TYPE_CHECKING:
    from graph_drive.config import AppConfig

logger = logging.getLogger(__name__)

GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]

_REQUIRED_TOKEN_FIELDS = ("access_token", "token_type", "expires_in")


@dataclass(frozen=True)
class AccessToken:
    """A bearer token returned by the token endpoint."""

    access_token: str
    token_type: str
    expires_in: int


class TokenSource(Protocol):
    """Anything that can hand out a bearer token for the next request."""

    def acquire_token(self) -> AccessToken: ...


class TokenProvider:
    """Client credentials flow against Azure AD using MSAL."""

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        authority_base_url: str = DEFAULT_AUTHORITY_BASE_URL,
    ) -> None:
        """Initialise the MSAL confidential client application.

        Args:
            tenant_id: Azure AD tenant ID, or one of "organizations"/"common"
                or the tenant's domain name.
            client_id: Azure AD application (client) ID.
            client_secret: Azure AD application client secret.
            authority_base_url: Authority root the tenant is appended to.
        """
        authority = f"{authority_base_url.rstrip('/')}/{tenant_id}"
        self._app = msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=authority,
        )

    def acquire_token(self) -> AccessToken:
        """Acquire a bearer token using the client credentials flow.

        MSAL serves the token from its in-memory cache until it expires.

        Returns:
            The acquired AccessToken.

        Raises:
            AuthenticationError: If MSAL cannot acquire a token or the result
                lacks any of access_token, token_type, expires_in.
        """
        result: dict[str, Any] = self._app.acquire_token_for_client(scopes=GRAPH_SCOPES) or {}
        missing = [name for name in _REQUIRED_TOKEN_FIELDS if name not in result]
        if missing:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error(
                "[acquire_token] MSAL token acquisition failed; error:%s;missing:%s",
                error,
                ",".join(missing),
            )
            raise AuthenticationError(f"Token acquisition failed: {error}: {description}")
        return AccessToken(
            access_token=str(result["access_token"]),
            token_type=str(result["token_type"]),
            expires_in=int(result["expires_in"]),
        )


class StaticTokenProvider:
    """Serves a bearer token that was acquired elsewhere."""

    def __init__(self, access_token: str, token_type: str = "Bearer", expires_in: int = 0) -> None:
        if not access_token:
            raise AuthenticationError("An empty access token cannot be used")
        self._token = AccessToken(
            access_token=access_token, token_type=token_type, expires_in=expires_in
        )

    def acquire_token(self) -> AccessToken:
        return self._token


def token_provider_from_config(config: AppConfig) -> TokenProvider:
    """Construct a TokenProvider from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured TokenProvider instance.
    """
    return TokenProvider(
        tenant_id=config.tenant_id,
        client_id=config.client_id,
        client_secret=config.client_secret,
        authority_base_url=config.authority_base_url,
    )
