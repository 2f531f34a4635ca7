"""Read access to drive items: metadata, existence checks, content and listings."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime
from typing import TYPE_CHECKING

from graph_drive.drive.address import (
    ROOT,
    SUFFIX_CHILDREN,
    SUFFIX_CONTENT,
    SUFFIX_DOWNLOAD_URL,
    DriveScope,
    ResourceAddress,
    as_address,
    resolve,
)
from graph_drive.errors import (
    MalformedResponseError,
    NotAFileError,
    NotAFolderError,
    NotFoundError,
    RemoteError,
    RequestError,
)
from graph_drive.graph.models import (
    ERROR_ITEM_NOT_FOUND,
    FIELD_DOWNLOAD_URL,
    DriveItem,
    error_code,
    error_message,
)
from graph_drive.graph.pagination import iter_items

if TYPE_CHECKING:
    from graph_drive.graph.client import GraphClient

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


class ItemReader:
    """Looks up drive items by path or id within one drive."""

    def __init__(self, graph_client: GraphClient, scope: DriveScope) -> None:
        """Initialise the reader.

        Args:
            graph_client: Authenticated GraphClient instance.
            scope: Drive that every address is resolved within.
        """
        self._graph = graph_client
        self._scope = scope

    @property
    def scope(self) -> DriveScope:
        return self._scope

    def get_metadata(self, address: ResourceAddress | str) -> DriveItem | None:
        """Fetch the metadata of an item.

        Absence is an expected outcome here, not an error.

        Args:
            address: Item to look up; a plain string is a path.

        Returns:
            The item, or None if the drive reports ``itemNotFound``.

        Raises:
            RemoteError: If the drive answers with any other error.
            MalformedResponseError: If the body is not a drive item.
        """
        body = self._graph.get(resolve(self._scope, as_address(address)))
        code = error_code(body)
        if code == ERROR_ITEM_NOT_FOUND:
            return None
        if code is not None:
            raise RemoteError(code, error_message(body))
        return DriveItem.from_raw(body)

    def require(self, address: ResourceAddress | str) -> DriveItem:
        """Fetch the metadata of an item that must exist.

        Raises:
            NotFoundError: If the item does not exist.
        """
        item = self.get_metadata(address)
        if item is None:
            raise NotFoundError(f"Item not found: {as_address(address)}")
        return item

    def exists(self, address: ResourceAddress | str) -> bool:
        return self.get_metadata(address) is not None

    def file_exists(self, address: ResourceAddress | str) -> bool:
        """Check for a file; a folder at the address is a caller error.

        Raises:
            NotAFileError: If the address points at a folder.
        """
        item = self.get_metadata(address)
        if item is not None and item.is_folder:
            raise NotAFileError(f"Expected a file but found a folder: {as_address(address)}")
        return item is not None

    def folder_exists(self, address: ResourceAddress | str) -> bool:
        """Check for a folder; a file at the address is a caller error.

        Raises:
            NotAFolderError: If the address points at a file.
        """
        item = self.get_metadata(address)
        if item is not None and item.is_file:
            raise NotAFolderError(f"Expected a folder but found a file: {as_address(address)}")
        return item is not None

    def last_modified(self, address: ResourceAddress | str) -> int:
        """Return the last modification time as a Unix timestamp."""
        item = self.require(address)
        if not item.last_modified:
            raise MalformedResponseError("Drive item has no lastModifiedDateTime")
        # fromisoformat accepts the trailing "Z" from Python 3.11 on.
        return int(datetime.fromisoformat(item.last_modified).timestamp())

    def mime_type(self, address: ResourceAddress | str) -> str:
        item = self.require(address)
        if item.mime_type is None:
            raise MalformedResponseError("Drive item has no file.mimeType")
        return item.mime_type

    def size(self, address: ResourceAddress | str) -> int:
        item = self.require(address)
        if item.size is None:
            raise MalformedResponseError("Drive item has no size")
        return int(item.size)

    def read_file(self, address: ResourceAddress | str) -> bytes:
        """Download the content of a file into memory.

        Raises:
            NotFoundError: If the file does not exist.
            RequestError: On any other failed download.
        """
        address = as_address(address)
        try:
            return self._graph.get_content(resolve(self._scope, address, SUFFIX_CONTENT))
        except RequestError as exc:
            if exc.status_code == HTTP_NOT_FOUND:
                raise NotFoundError(f"Item not found: {address}") from exc
            raise

    def download_url(self, address: ResourceAddress | str) -> str:
        """Return a short-lived pre-authenticated URL for the file's content.

        Raises:
            NotFoundError: If the file does not exist.
            MalformedResponseError: If the response carries no download URL.
        """
        address = as_address(address)
        body = self._graph.get(resolve(self._scope, address, SUFFIX_DOWNLOAD_URL))
        code = error_code(body)
        if code == ERROR_ITEM_NOT_FOUND:
            raise NotFoundError(f"Item not found: {address}")
        if code is not None:
            raise RemoteError(code, error_message(body))
        if not isinstance(body, dict) or FIELD_DOWNLOAD_URL not in body:
            raise MalformedResponseError("Response has no @microsoft.graph.downloadUrl")
        return str(body[FIELD_DOWNLOAD_URL])

    def iter_children(self, address: ResourceAddress | str = ROOT) -> Iterator[DriveItem]:
        """Lazily yield the children of a folder, following every page."""
        target = resolve(self._scope, as_address(address), SUFFIX_CHILDREN)
        for raw in iter_items(self._graph, target):
            yield DriveItem.from_raw(raw)

    def list_children(self, address: ResourceAddress | str = ROOT) -> list[DriveItem]:
        """Return all children of a folder (the drive root by default)."""
        children = list(self.iter_children(address))
        logger.debug(
            "[list_children] listed folder; address:%s;child_count:%d",
            as_address(address),
            len(children),
        )
        return children
