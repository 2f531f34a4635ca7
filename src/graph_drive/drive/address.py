"""Drive item addressing: by path or by item id, and the request targets they map to.

Graph addresses a drive item in three syntactic forms::

    /drives/{drive-id}/items/root                      the drive root
    /drives/{drive-id}/items/root:/{path}[:{suffix}]   an item by path
    /drives/{drive-id}/items/{item-id}[{suffix}]       an item by id

A suffix such as ``/children`` follows a ``:`` terminator when the item is
addressed by path, and is appended directly otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from graph_drive.errors import InvalidAddressError, InvalidPathError

SUFFIX_CONTENT = "/content"
SUFFIX_CHILDREN = "/children"
SUFFIX_COPY = "/copy"
SUFFIX_DOWNLOAD_URL = "?select=@microsoft.graph.downloadUrl"

PATH_SEPARATOR = "/"


@dataclass(frozen=True)
class DriveScope:
    """The drive that addresses are resolved within."""

    prefix: str
    drive_id: str | None = None

    @classmethod
    def for_drive(cls, drive_id: str) -> DriveScope:
        """Scope for a drive by id (a document library or a OneDrive)."""
        if not drive_id:
            raise InvalidAddressError("A drive id is required")
        return cls(prefix=f"/drives/{drive_id}", drive_id=drive_id)

    @classmethod
    def for_user(cls, user: str) -> DriveScope:
        """Scope for a user's OneDrive by UPN or object id."""
        if not user:
            raise InvalidAddressError("A user principal name or id is required")
        return cls(prefix=f"/users/{user}/drive")


@dataclass(frozen=True)
class ByPath:
    """An item addressed by its slash-separated path from the drive root.

    An empty segment tuple is the root itself.
    """

    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for segment in self.segments:
            if not segment or PATH_SEPARATOR in segment:
                raise InvalidPathError(f"Invalid path segment: {segment!r}")

    @classmethod
    def parse(cls, path: str) -> ByPath:
        """Split a path like ``/reports/2024`` into segments; empty segments are dropped."""
        return cls(tuple(part for part in path.split(PATH_SEPARATOR) if part))

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def path(self) -> str:
        return PATH_SEPARATOR + PATH_SEPARATOR.join(self.segments)

    @property
    def name(self) -> str:
        if self.is_root:
            raise InvalidPathError("The root has no name")
        return self.segments[-1]

    @property
    def parent(self) -> ByPath:
        if self.is_root:
            raise InvalidPathError("The root has no parent")
        return ByPath(self.segments[:-1])

    def child(self, name: str) -> ByPath:
        return ByPath((*self.segments, name))

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class ById:
    """An item addressed by its opaque drive item id."""

    item_id: str

    def __post_init__(self) -> None:
        if not self.item_id:
            raise InvalidAddressError("An item id must not be empty")

    def __str__(self) -> str:
        return self.item_id


ResourceAddress = ByPath | ById

ROOT = ByPath()


def address_from(path: str | None = None, item_id: str | None = None) -> ResourceAddress:
    """Build an address from exactly one of a path or an item id.

    Empty strings count as missing; the root is addressed as ``"/"``.

    Raises:
        InvalidAddressError: If both or neither are given.
    """
    if path and item_id:
        raise InvalidAddressError("Address by path or by item id, not both")
    if item_id:
        return ById(item_id)
    if path:
        return ByPath.parse(path)
    raise InvalidAddressError("Either a path or an item id is required")


def as_address(value: ResourceAddress | str) -> ResourceAddress:
    """Accept a ready address or treat a plain string as a path.

    Raises:
        InvalidAddressError: If the string is empty; the root is ``"/"``.
    """
    if isinstance(value, str):
        if not value:
            raise InvalidAddressError("Either a path or an item id is required")
        return ByPath.parse(value)
    return value


def resolve(scope: DriveScope, address: ResourceAddress, suffix: str | None = None) -> str:
    """Return the request target for an address within a drive.

    Args:
        scope: Drive the address belongs to.
        address: Item to target.
        suffix: Optional modifier such as ``/content`` or ``/children``.

    Returns:
        Path relative to the Graph base URL.
    """
    if isinstance(address, ById):
        return f"{scope.prefix}/items/{address.item_id}{suffix or ''}"
    if address.is_root:
        return f"{scope.prefix}/items/root{suffix or ''}"
    target = f"{scope.prefix}/items/root:/{quote(PATH_SEPARATOR.join(address.segments))}"
    return f"{target}:{suffix}" if suffix else target
