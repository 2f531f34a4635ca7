"""Smoke tests — validate the library wires together end-to-end."""

import json
from unittest.mock import MagicMock, patch

import graph_drive
from graph_drive.config import AppConfig
from graph_drive.drive.operations import drive_operations_from_config


def _response(body: dict) -> MagicMock:  # type: ignore[type-arg]
    response = MagicMock()
    response.status = 200
    response.read.return_value = json.dumps(body).encode()
    response.__enter__ = lambda s: s
    response.__exit__ = MagicMock(return_value=False)
    return response


def test_list_children_from_config() -> None:
    """Config → token provider → transport → listing runs without error."""
    config = AppConfig(
        tenant_id="tenant", client_id="client", client_secret="secret", drive_id="drive-1"
    )
    page = {"value": [{"id": "1", "name": "Docs", "webUrl": "https://x/1", "folder": {}}]}

    with (
        patch("graph_drive.graph.auth.msal.ConfidentialClientApplication") as mock_msal,
        patch("graph_drive.graph.client.urllib_request.urlopen") as mock_urlopen,
    ):
        mock_msal.return_value.acquire_token_for_client.return_value = {
            "access_token": "tok",
            "token_type": "Bearer",
            "expires_in": 3599,
        }
        mock_urlopen.return_value = _response(page)
        children = drive_operations_from_config(config).items.list_children()

    assert [child.name for child in children] == ["Docs"]
    req = mock_urlopen.call_args[0][0]
    assert req.full_url == "https://graph.microsoft.com/v1.0/drives/drive-1/items/root/children"
    assert req.unredirected_hdrs["Authorization"] == "Bearer tok"


def test_version() -> None:
    assert graph_drive.__version__ == "0.1.0"
