"""Drive operations that combine lookup, provisioning and mutation requests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from graph_drive.drive.address import (
    ROOT,
    SUFFIX_CONTENT,
    SUFFIX_COPY,
    ById,
    ByPath,
    DriveScope,
    ResourceAddress,
    as_address,
    resolve,
)
from graph_drive.drive.items import ItemReader
from graph_drive.drive.provisioning import FolderProvisioner
from graph_drive.errors import (
    ConflictError,
    InvalidPathError,
    NotAFolderError,
    NotFoundError,
    RemoteError,
)
from graph_drive.graph.client import graph_client_from_config
from graph_drive.graph.models import (
    ERROR_ITEM_NOT_FOUND,
    ERROR_NAME_ALREADY_EXISTS,
    FIELD_DRIVE_ID,
    FIELD_ID,
    FIELD_NAME,
    FIELD_PARENT_REFERENCE,
    DriveItem,
    error_code,
    error_message,
)

if TYPE_CHECKING:
    from graph_drive.config import AppConfig
    from graph_drive.graph.client import GraphClient

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "text/plain"


class DriveOperations:
    """Move, copy, write and delete drive items addressed by path or id.

    ``items`` and ``folders`` expose the underlying reader and provisioner
    for lookups, listings and explicit folder creation.
    """

    def __init__(self, graph_client: GraphClient, scope: DriveScope) -> None:
        """Initialise the operations facade.

        Args:
            graph_client: Authenticated GraphClient instance.
            scope: Drive that every address is resolved within.
        """
        self._graph = graph_client
        self._scope = scope
        self.items = ItemReader(graph_client, scope)
        self.folders = FolderProvisioner(graph_client, self.items)

    @property
    def scope(self) -> DriveScope:
        return self._scope

    def move(
        self,
        source: ResourceAddress | str,
        destination: ResourceAddress | str,
        new_name: str | None = None,
    ) -> DriveItem:
        """Move an item into a destination folder, optionally renaming it.

        The destination folder is provisioned when it does not exist yet.

        Args:
            source: Item to move.
            destination: Folder to move the item into.
            new_name: New name for the item, if it should be renamed.

        Returns:
            The item's updated metadata.

        Raises:
            NotFoundError: If the source does not exist.
            NotAFolderError: If the destination is a file.
            ConflictError: If the destination already holds an item with that name.
        """
        item = self.items.require(source)
        parent_id = self._destination_id(destination)
        body: dict[str, Any] = {FIELD_PARENT_REFERENCE: {FIELD_ID: parent_id}}
        if new_name is not None:
            body[FIELD_NAME] = new_name

        response = self._graph.request("PATCH", resolve(self._scope, ById(item.id)), json_body=body)
        _raise_for_error(response, f"Cannot move {as_address(source)}")
        logger.info(
            "[move] moved item; source:%s;destination:%s;new_name:%s",
            as_address(source),
            as_address(destination),
            new_name,
        )
        return DriveItem.from_raw(response)

    def copy(
        self,
        source: ResourceAddress | str,
        destination: ResourceAddress | str,
        new_name: str | None = None,
    ) -> bool:
        """Ask the drive to copy an item into a destination folder.

        Copies run asynchronously on the server. A True result means the
        request was accepted, not that the copy has finished. The source is
        never deleted.

        Args:
            source: Item to copy.
            destination: Folder to copy the item into; provisioned if missing.
            new_name: Name for the copy, if it should differ from the source.

        Returns:
            True when the drive accepted the copy with an empty response.

        Raises:
            NotFoundError: If the source does not exist.
            NotAFolderError: If the destination is a file.
            ConflictError: If the destination already holds an item with that name.
        """
        item = self.items.require(source)
        parent_reference = {FIELD_ID: self._destination_id(destination)}
        if self._scope.drive_id is not None:
            parent_reference = {FIELD_DRIVE_ID: self._scope.drive_id, **parent_reference}
        body: dict[str, Any] = {FIELD_PARENT_REFERENCE: parent_reference}
        if new_name is not None:
            body[FIELD_NAME] = new_name

        response = self._graph.request(
            "POST", resolve(self._scope, ById(item.id), SUFFIX_COPY), json_body=body
        )
        _raise_for_error(response, f"Cannot copy {as_address(source)}")
        accepted = response is None
        logger.info(
            "[copy] copy requested; source:%s;destination:%s;accepted:%s",
            as_address(source),
            as_address(destination),
            accepted,
        )
        return accepted

    def write(
        self,
        path: ByPath | str,
        content: bytes | str,
        mime_type: str = DEFAULT_MIME_TYPE,
    ) -> DriveItem | None:
        """Upload content to a file path, creating missing parent folders first.

        Existing files are overwritten.

        Args:
            path: File path, e.g. ``/reports/2024/q1.csv``.
            content: File content; text is encoded as UTF-8.
            mime_type: Content-Type sent with the upload.

        Returns:
            The written file's metadata, or None if the drive answered with
            an empty body.

        Raises:
            InvalidPathError: If ``path`` is the root or not a path.
        """
        address = as_address(path)
        if not isinstance(address, ByPath) or address.is_root:
            raise InvalidPathError("Files can only be written to a path below the root")

        parent = address.parent
        if parent.is_root:
            parent_id = self.items.require(ROOT).id
        else:
            parent_id = self.folders.ensure_path(parent)
        target = resolve(self._scope, ById(parent_id), f":/{quote(address.name)}:{SUFFIX_CONTENT}")
        data = content.encode("utf-8") if isinstance(content, str) else content

        response = self._graph.request(
            "PUT", target, data=data, headers={"Content-Type": mime_type}
        )
        _raise_for_error(response, f"Cannot write {address}")
        logger.info(
            "[write] wrote file; path:%s;bytes:%d;mime_type:%s", address, len(data), mime_type
        )
        if response is None:
            return None
        return DriveItem.from_raw(response)

    def delete(self, address: ResourceAddress | str) -> bool:
        """Delete an item (folders are deleted with their contents).

        Returns:
            True if the item was deleted, False if it did not exist.

        Raises:
            RemoteError: If the drive refused the deletion.
            RequestError: On transport failure or a server error.
        """
        address = as_address(address)
        response = self._graph.request("DELETE", resolve(self._scope, address))
        if error_code(response) == ERROR_ITEM_NOT_FOUND:
            logger.info("[delete] item already absent; address:%s", address)
            return False
        _raise_for_error(response, f"Cannot delete {address}")
        logger.info("[delete] deleted item; address:%s", address)
        return True

    def _destination_id(self, destination: ResourceAddress | str) -> str:
        """Return the id of a destination folder, provisioning it if it is missing."""
        address = as_address(destination)
        existing = self.items.get_metadata(address)
        if existing is not None:
            if existing.is_file:
                raise NotAFolderError(f"Destination is a file: {address}")
            return existing.id
        if isinstance(address, ById):
            raise NotFoundError(f"Destination folder not found: {address}")
        return self.folders.ensure_path(address)


def _raise_for_error(response: Any, context: str) -> None:
    """Translate a Graph error envelope into the matching exception."""
    code = error_code(response)
    if code is None:
        return
    message = f"{context}: {error_message(response)}"
    if code == ERROR_NAME_ALREADY_EXISTS:
        raise ConflictError(message)
    if code == ERROR_ITEM_NOT_FOUND:
        raise NotFoundError(message)
    raise RemoteError(code, message)


def drive_operations_from_config(
    config: AppConfig, graph_client: GraphClient | None = None
) -> DriveOperations:
    """Construct DriveOperations for the configured drive.

    Args:
        config: Application configuration instance.
        graph_client: Client to reuse; one is built from the config when omitted.

    Returns:
        Configured DriveOperations instance.
    """
    return DriveOperations(
        graph_client=graph_client or graph_client_from_config(config),
        scope=DriveScope.for_drive(config.drive_id),
    )
