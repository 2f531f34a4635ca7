"""Folder provisioning: create every missing folder along a path, top-down."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from graph_drive.drive.address import (
    ROOT,
    SUFFIX_CHILDREN,
    ById,
    ByPath,
    ResourceAddress,
    as_address,
    resolve,
)
from graph_drive.errors import ConflictError, InvalidPathError, ProvisioningError
from graph_drive.graph.models import (
    ERROR_NAME_ALREADY_EXISTS,
    FIELD_CONFLICT_BEHAVIOR,
    FIELD_FOLDER,
    FIELD_ID,
    FIELD_NAME,
    DriveItem,
    error_code,
    error_message,
)

if TYPE_CHECKING:
    from graph_drive.drive.items import ItemReader
    from graph_drive.graph.client import GraphClient

logger = logging.getLogger(__name__)


class FolderProvisioner:
    """Creates folders, and whole folder chains, inside one drive.

    Provisioning is check-then-create and not atomic. Two callers
    provisioning overlapping paths at the same time can race on a segment;
    the loser gets a ConflictError rather than a silent retry, so such calls
    must be serialized by the caller.
    """

    def __init__(self, graph_client: GraphClient, reader: ItemReader) -> None:
        """Initialise the provisioner.

        Args:
            graph_client: Authenticated GraphClient instance.
            reader: ItemReader for the same drive, used for existence checks.
        """
        self._graph = graph_client
        self._reader = reader

    def create_folder(self, parent: ResourceAddress | str, name: str) -> DriveItem:
        """Create a single folder under an existing parent.

        The request asks the drive to fail on a name clash instead of
        renaming the new folder.

        Args:
            parent: Existing parent folder (the drive root is allowed).
            name: Name of the folder to create.

        Returns:
            The created folder.

        Raises:
            ConflictError: If an item with this name already exists in the parent.
            ProvisioningError: If the drive did not return the new folder's id.
        """
        parent = as_address(parent)
        body = self._graph.request(
            "POST",
            resolve(self._reader.scope, parent, SUFFIX_CHILDREN),
            json_body={FIELD_NAME: name, FIELD_FOLDER: {}, FIELD_CONFLICT_BEHAVIOR: "fail"},
        )
        code = error_code(body)
        if code == ERROR_NAME_ALREADY_EXISTS:
            raise ConflictError(f"{name} already exists in {parent}: {error_message(body)}")
        if not isinstance(body, dict) or not body.get(FIELD_ID):
            message = error_message(body) or "response carried no item id"
            label = parent.child(name).path if isinstance(parent, ByPath) else f"{parent}/{name}"
            raise ProvisioningError(label, message)
        logger.info("[create_folder] created folder; parent:%s;name:%s", parent, name)
        return DriveItem.from_raw(body)

    def ensure_path(self, path: ResourceAddress | str) -> str:
        """Make sure every folder along ``path`` exists, creating missing ones in order.

        Each segment is checked in turn; an existing folder's id becomes the
        parent of the next segment, a missing one is created under the
        current parent (the drive root for the first segment). Re-running on
        a complete path only performs existence checks.

        Args:
            path: Folder path to provision, e.g. ``/reports/2024``.

        Returns:
            The id of the deepest folder on the path.

        Raises:
            InvalidPathError: If ``path`` is the root or is not a path.
            ConflictError: If a segment was created concurrently by someone else.
            ProvisioningError: If a folder could not be created.
        """
        address = as_address(path)
        if not isinstance(address, ByPath):
            raise InvalidPathError("Folders can only be provisioned by path")
        if address.is_root:
            raise InvalidPathError("Cannot create the root folder, it always exists")

        parent: ResourceAddress = ROOT
        prefix = ROOT
        folder_id = ""
        created = 0
        for segment in address.segments:
            prefix = prefix.child(segment)
            existing = self._reader.get_metadata(prefix)
            if existing is not None:
                logger.debug("[ensure_path] segment exists; path:%s", prefix)
                folder_id = existing.id
            else:
                folder_id = self.create_folder(parent, segment).id
                created += 1
            parent = ById(folder_id)

        logger.info("[ensure_path] provisioned path; path:%s;created_count:%d", address, created)
        return folder_id
