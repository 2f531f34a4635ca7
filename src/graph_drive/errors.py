"""Exception hierarchy for graph_drive."""

from __future__ import annotations


class DriveError(Exception):
    """Base class for all errors raised by graph_drive."""


class AuthenticationError(DriveError):
    """Raised when the client credentials exchange fails or returns an unusable token."""


class InvalidAddressError(DriveError):
    """Raised when a resource address is malformed or ambiguous."""


class InvalidPathError(InvalidAddressError):
    """Raised when a path cannot be used for the requested operation."""


class NotAFileError(InvalidAddressError):
    """Raised when a file was expected but the address points at a folder."""


class NotAFolderError(InvalidAddressError):
    """Raised when a folder was expected but the address points at a file."""


class MalformedResponseError(DriveError):
    """Raised when the Graph API returns a body missing required fields."""


class NotFoundError(DriveError):
    """Raised when an operation requires an item that does not exist."""


class ConflictError(DriveError):
    """Raised when the target name already exists at the destination."""


class RequestError(DriveError):
    """Raised on transport failure or a 5xx response from the Graph API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Graph API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class RemoteError(DriveError):
    """Raised when the Graph API answers with an error envelope we do not handle."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"Graph API error {code}: {message}")
        self.code = code
        self.message = message


class ProvisioningError(DriveError):
    """Raised when a folder could not be created while provisioning a path."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Cannot create folder {path}: {message}")
        self.path = path
        self.message = message
