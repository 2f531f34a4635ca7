"""Microsoft Graph API transport: authenticated requests and response classification."""

from __future__ import annotations

import json
import logging
import ssl
from http.client import HTTPException
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode

from graph_drive.config import DEFAULT_GRAPH_BASE_URL, DEFAULT_REQUEST_TIMEOUT
from graph_drive.errors import DriveError, RequestError
from graph_drive.graph.auth import token_provider_from_config

if TYPE_CHECKING:
    from graph_drive.config import AppConfig
    from graph_drive.graph.auth import TokenSource

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = DEFAULT_GRAPH_BASE_URL

DEFAULT_HEADERS = {"Accept": "application/json"}

# Statuses from here on are failures; everything below is handed back to
# the caller to interpret.
SERVER_ERROR_STATUS = 500
CLIENT_ERROR_STATUS = 400


class GraphClient:
    """Authenticated client for Microsoft Graph API."""

    def __init__(
        self,
        token_source: TokenSource,
        base_url: str = GRAPH_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        verify: bool = True,
    ) -> None:
        """Initialise the transport.

        Args:
            token_source: Provider consulted for a bearer token on every request.
            base_url: Graph API root that relative request paths are appended to.
            timeout: Socket timeout in seconds applied to each request.
            verify: Verify the server's TLS certificate. Only disable for
                test tenants behind intercepting proxies.
        """
        self._tokens = token_source
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._ssl_context: ssl.SSLContext | None = None
        if not verify:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            self._ssl_context = context

    @property
    def base_url(self) -> str:
        return self._base_url

    def request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, str] | None = None,
        form: dict[str, str] | None = None,
        json_body: Any = None,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Perform an authenticated request against the Graph API.

        Responses below status 500 are returned to the caller, including 4xx
        error envelopes, so that callers can branch on ``error.code``.

        Args:
            method: HTTP method.
            path: URL path relative to the base URL (must start with '/'), or
                an absolute URL such as an ``@odata.nextLink``.
            query: Optional query string parameters.
            form: Optional form fields, sent urlencoded.
            json_body: Optional JSON-serialisable request body.
            data: Optional raw request body; pass Content-Type via ``headers``.
            headers: Extra headers; these override the defaults.

        Returns:
            The decoded JSON body, the raw body bytes when it is not JSON,
            or None when the body is empty.

        Raises:
            AuthenticationError: If token acquisition fails.
            RequestError: On connection failure or a 5xx status code.
        """
        req = self._build(method, path, query, form, json_body, data, headers)
        _, payload = self._send(req)
        if not payload:
            return None
        try:
            return json.loads(payload)
        except ValueError:
            return payload

    def get(self, path: str, query: dict[str, str] | None = None) -> Any:
        """Perform an authenticated GET request and return the decoded body."""
        return self.request("GET", path, query=query)

    def get_content(self, path: str) -> bytes:
        """Perform an authenticated GET request and return the raw response bytes.

        Redirects to pre-signed download URLs are followed without the
        Authorization header.

        Raises:
            AuthenticationError: If token acquisition fails.
            RequestError: On any status of 400 or above, or connection failure.
        """
        req = self._build("GET", path, None, None, None, None, None)
        status, payload = self._send(req)
        if status >= CLIENT_ERROR_STATUS:
            raise RequestError(status, _error_message(payload, "Content request failed"))
        return payload

    def _build(
        self,
        method: str,
        path: str,
        query: dict[str, str] | None,
        form: dict[str, str] | None,
        json_body: Any,
        data: bytes | None,
        headers: dict[str, str] | None,
    ) -> urllib_request.Request:
        token = self._tokens.acquire_token()
        body, content_headers = _encode_body(form, json_body, data)
        req = urllib_request.Request(
            self._url(path, query),
            data=body,
            headers={**DEFAULT_HEADERS, **content_headers, **(headers or {})},
            method=method.upper(),
        )
        # Not forwarded on redirects: content downloads redirect to pre-signed URLs.
        req.add_unredirected_header("Authorization", f"Bearer {token.access_token}")
        return req

    def _send(self, req: urllib_request.Request) -> tuple[int, bytes]:
        method = req.get_method()
        try:
            with urllib_request.urlopen(
                req, timeout=self._timeout, context=self._ssl_context
            ) as resp:
                status = int(resp.status)
                payload = resp.read()
        except HTTPError as exc:
            status = exc.code
            payload = exc.read() or b""
            if status >= SERVER_ERROR_STATUS:
                logger.warning(
                    "[_send] server error; method:%s;url:%s;status:%d", method, req.full_url, status
                )
                raise RequestError(status, _error_message(payload, str(exc.reason))) from exc
        except URLError as exc:
            logger.warning("[_send] transport failure; method:%s;url:%s", method, req.full_url)
            raise RequestError(0, str(exc.reason)) from exc
        except TimeoutError as exc:
            logger.warning("[_send] request timed out; method:%s;url:%s", method, req.full_url)
            raise RequestError(0, "Request timed out") from exc
        except (OSError, HTTPException) as exc:
            logger.warning(
                "[_send] connection dropped; method:%s;url:%s;error:%s", method, req.full_url, exc
            )
            raise RequestError(0, str(exc) or type(exc).__name__) from exc

        logger.debug("[_send] completed; method:%s;url:%s;status:%d", method, req.full_url, status)
        return status, payload

    def _url(self, path: str, query: dict[str, str] | None) -> str:
        url = path if "://" in path else f"{self._base_url}{path}"
        if query:
            url = f"{url}{'&' if '?' in url else '?'}{urlencode(query)}"
        return url


def _encode_body(
    form: dict[str, str] | None, json_body: Any, data: bytes | None
) -> tuple[bytes | None, dict[str, str]]:
    """Serialise at most one request body and return it with its Content-Type header."""
    supplied = [part for part in (form, json_body, data) if part is not None]
    if len(supplied) > 1:
        raise DriveError("Only one of form, json_body or data may be sent")
    if form is not None:
        return urlencode(form).encode("utf-8"), {
            "Content-Type": "application/x-www-form-urlencoded"
        }
    if json_body is not None:
        return json.dumps(json_body).encode("utf-8"), {"Content-Type": "application/json"}
    return data, {}


def _error_message(payload: bytes, fallback: str) -> str:
    """Pull ``error.message`` out of a Graph error envelope when there is one."""
    try:
        message = json.loads(payload).get("error", {}).get("message")
    except (ValueError, AttributeError):
        return fallback
    return str(message) if message else fallback


def graph_client_from_config(config: AppConfig) -> GraphClient:
    """Construct a GraphClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured GraphClient instance.
    """
    return GraphClient(
        token_source=token_provider_from_config(config),
        base_url=config.graph_base_url,
        timeout=config.request_timeout,
        verify=config.verify_tls,
    )
