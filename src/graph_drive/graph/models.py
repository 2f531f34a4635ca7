"""Data models for Microsoft Graph API drive items and paged listings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from graph_drive.errors import MalformedResponseError

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_WEB_URL = "webUrl"
FIELD_FOLDER = "folder"
FIELD_FILE = "file"
FIELD_MIME_TYPE = "mimeType"
FIELD_SIZE = "size"
FIELD_LAST_MODIFIED = "lastModifiedDateTime"
FIELD_PARENT_REFERENCE = "parentReference"
FIELD_DRIVE_ID = "driveId"
FIELD_DOWNLOAD_URL = "@microsoft.graph.downloadUrl"
FIELD_CONFLICT_BEHAVIOR = "@microsoft.graph.conflictBehavior"

# Error envelope
FIELD_ERROR = "error"
FIELD_ERROR_CODE = "code"
FIELD_ERROR_MESSAGE = "message"
ERROR_ITEM_NOT_FOUND = "itemNotFound"
ERROR_NAME_ALREADY_EXISTS = "nameAlreadyExists"

# OData response keys
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_VALUE = "value"

_REQUIRED_ITEM_FIELDS = (FIELD_ID, FIELD_NAME, FIELD_WEB_URL)


def error_code(body: Any) -> str | None:
    """Return ``error.code`` from a Graph error envelope, or None if body is not one."""
    if not isinstance(body, dict):
        return None
    error = body.get(FIELD_ERROR)
    if not isinstance(error, dict):
        return None
    return str(error.get(FIELD_ERROR_CODE, ""))


def error_message(body: Any) -> str:
    """Return ``error.message`` from a Graph error envelope, or an empty string."""
    if isinstance(body, dict) and isinstance(body.get(FIELD_ERROR), dict):
        return str(body[FIELD_ERROR].get(FIELD_ERROR_MESSAGE, ""))
    return ""


@dataclass(frozen=True)
class DriveItem:
    """A file or folder as returned by the drive item endpoints.

    ``raw`` keeps the full response body for fields not mapped here.
    """

    id: str
    name: str
    web_url: str
    is_folder: bool
    is_file: bool
    mime_type: str | None = None
    size: int | None = None
    last_modified: str | None = None
    parent_id: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_raw(cls, raw: Any) -> DriveItem:
        """Map a raw Graph API item dict to a DriveItem.

        Raises:
            MalformedResponseError: If the body is not an item (id, name and
                webUrl are all required).
        """
        if not isinstance(raw, dict) or any(name not in raw for name in _REQUIRED_ITEM_FIELDS):
            raise MalformedResponseError("Drive item response is missing id, name or webUrl")
        file_facet = raw.get(FIELD_FILE)
        parent_ref = raw.get(FIELD_PARENT_REFERENCE) or {}
        return cls(
            id=str(raw[FIELD_ID]),
            name=str(raw[FIELD_NAME]),
            web_url=str(raw[FIELD_WEB_URL]),
            is_folder=FIELD_FOLDER in raw,
            is_file=file_facet is not None,
            mime_type=file_facet.get(FIELD_MIME_TYPE) if isinstance(file_facet, dict) else None,
            size=raw.get(FIELD_SIZE),
            last_modified=raw.get(FIELD_LAST_MODIFIED),
            parent_id=parent_ref.get(FIELD_ID),
            raw=raw,
        )


@dataclass
class PageEnvelope:
    """One page of a listing: its items and the link to the next page, if any."""

    items: list[dict[str, Any]]
    next_link: str | None = None

    @classmethod
    def from_raw(cls, raw: Any) -> PageEnvelope:
        """Parse a listing page.

        Raises:
            MalformedResponseError: If the body has no ``value`` list.
        """
        if not isinstance(raw, dict) or not isinstance(raw.get(ODATA_VALUE), list):
            raise MalformedResponseError("Listing response has no 'value' collection")
        return cls(items=raw[ODATA_VALUE], next_link=raw.get(ODATA_NEXT_LINK))
