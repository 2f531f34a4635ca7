"""Microsoft Graph drive client with path-addressed operations."""

__version__ = "0.1.0"
