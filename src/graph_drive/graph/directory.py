"""Discovery of SharePoint sites, their drives and the tenant organization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from graph_drive.errors import MalformedResponseError, NotFoundError, RemoteError
from graph_drive.graph.models import (
    ERROR_ITEM_NOT_FOUND,
    FIELD_ID,
    FIELD_NAME,
    FIELD_WEB_URL,
    error_code,
    error_message,
)
from graph_drive.graph.pagination import collect_all

if TYPE_CHECKING:
    from graph_drive.graph.client import GraphClient

logger = logging.getLogger(__name__)

FIELD_DISPLAY_NAME = "displayName"
FIELD_SITE_COLLECTION = "siteCollection"
FIELD_HOSTNAME = "hostname"

_SITE_FIELDS = (FIELD_ID, FIELD_NAME, FIELD_WEB_URL, FIELD_DISPLAY_NAME)
_DRIVE_FIELDS = (FIELD_ID, FIELD_NAME, FIELD_WEB_URL)


def _require_fields(body: Any, fields: tuple[str, ...], what: str) -> dict[str, Any]:
    """Return ``body`` if it is an object carrying every field, else raise.

    Raises:
        NotFoundError: If the body is an ``itemNotFound`` envelope.
        RemoteError: If the body is any other error envelope.
        MalformedResponseError: If a required field is missing.
    """
    code = error_code(body)
    if code == ERROR_ITEM_NOT_FOUND:
        raise NotFoundError(f"{what} not found: {error_message(body)}")
    if code is not None:
        raise RemoteError(code, error_message(body))
    if not isinstance(body, dict):
        raise MalformedResponseError(f"Cannot parse the {what} response")
    missing = [name for name in fields if name not in body]
    if missing:
        raise MalformedResponseError(
            f"Cannot parse the {what} response; missing:{','.join(missing)}"
        )
    return body


class DirectoryService:
    """Looks up the sites and drives that drive operations are scoped to."""

    def __init__(self, graph_client: GraphClient) -> None:
        self._graph = graph_client

    def root_site(self) -> dict[str, Any]:
        """Return the tenant's root SharePoint site."""
        return _require_fields(self._graph.get("/sites/root"), _SITE_FIELDS, "root site")

    def sharepoint_hostname(self) -> str:
        """Return the SharePoint hostname, e.g. ``contoso.sharepoint.com``."""
        site = self.root_site()
        collection = site.get(FIELD_SITE_COLLECTION)
        if not isinstance(collection, dict) or FIELD_HOSTNAME not in collection:
            raise MalformedResponseError("Root site has no siteCollection.hostname")
        return str(collection[FIELD_HOSTNAME])

    def site_by_name(self, hostname: str, site_name: str) -> dict[str, Any]:
        """Return a site by its server-relative name under ``/sites/``."""
        body = self._graph.get(f"/sites/{hostname}:/sites/{site_name}")
        return _require_fields(body, _SITE_FIELDS, "site")

    def site_id_by_name(self, hostname: str, site_name: str) -> str:
        return str(self.site_by_name(hostname, site_name)[FIELD_ID])

    def site_drive(self, site_id: str) -> dict[str, Any]:
        """Return the default document library of a site."""
        body = self._graph.get(f"/sites/{site_id}/drive")
        return _require_fields(body, _DRIVE_FIELDS, "site drive")

    def site_drive_id(self, site_id: str) -> str:
        drive_id = str(self.site_drive(site_id)[FIELD_ID])
        logger.info("[site_drive_id] resolved drive; site_id:%s;drive_id:%s", site_id, drive_id)
        return drive_id

    def default_organization(self) -> dict[str, Any] | list[dict[str, Any]]:
        """Return the tenant organization.

        The endpoint is a collection; a single entry is unwrapped, otherwise
        all entries are returned.
        """
        organizations = collect_all(self._graph, "/organization")
        if len(organizations) == 1:
            return organizations[0]
        return organizations
