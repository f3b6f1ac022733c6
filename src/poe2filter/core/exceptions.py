"""
Custom exceptions for filter synchronization.

This module defines a hierarchy of exceptions for the sync pipeline,
providing structured error handling with context preservation.

Exception Hierarchy:
    SyncError (base)
    ├── MalformedDescriptor (bad user input, no network attempted)
    ├── SourceError (source-related errors)
    │   ├── RemoteRequestError (non-success status or transport failure)
    │   └── RemoteProtocolError (response body has unexpected shape)
    ├── ArchiveError (downloaded archive unusable)
    ├── PersistenceError (files cannot be written)
    ├── GameDirectoryNotFoundError (no data directory located)
    └── LaunchError (chained command cannot be started)

Example:
    >>> from poe2filter.core.exceptions import RemoteRequestError
    >>> try:
    ...     raise RemoteRequestError("github", "HTTP 404", status_code=404)
    ... except RemoteRequestError as e:
    ...     print(f"Error from {e.source}: {e}")
    ...     print(f"Status: {e.status_code}")
"""


class SyncError(Exception):
    """
    Base exception for all sync errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class MalformedDescriptor(SyncError):
    """
    Raised when a source descriptor cannot be understood.

    Covers a missing ``type:`` prefix, an unsupported source type and a
    payload with the wrong shape for its source. Raised before any
    network request is made.
    """

    def __init__(self, descriptor: str, message: str, **context: object) -> None:
        super().__init__(message, descriptor=descriptor, **context)
        self.descriptor = descriptor

    def __str__(self) -> str:
        return f"{self.message}: {self.descriptor!r}"


class SourceError(SyncError):
    """
    Base exception for errors talking to a remote source.

    Attributes:
        source: Name of the source that failed (e.g., "github")
    """

    def __init__(self, source: str, message: str, **context: object) -> None:
        super().__init__(message, source=source, **context)
        self.source = source

    def __str__(self) -> str:
        return f"[{self.source}] {self.message}"


class RemoteRequestError(SourceError):
    """
    Raised when a request fails.

    ``status_code`` holds the HTTP status for non-success responses and is
    None when the request never produced a response (DNS, TLS, timeout).
    The underlying httpx exception is kept as ``__cause__``.
    """

    def __init__(
        self,
        source: str,
        message: str,
        status_code: int | None = None,
        **context: object,
    ) -> None:
        super().__init__(source, message, status_code=status_code, **context)
        self.status_code = status_code


class RemoteProtocolError(SourceError):
    """Raised when a response body is missing or does not match the expected structure."""


class ArchiveError(SyncError):
    """Raised when downloaded bytes are not a valid zip archive or an entry cannot be read."""


class PersistenceError(SyncError):
    """Raised when the state file or an extracted filter cannot be written."""


class GameDirectoryNotFoundError(SyncError):
    """Raised when no game data directory could be located."""


class LaunchError(SyncError):
    """Raised when the command chained after the sync cannot be started."""


__all__ = [
    "SyncError",
    "MalformedDescriptor",
    "SourceError",
    "RemoteRequestError",
    "RemoteProtocolError",
    "ArchiveError",
    "PersistenceError",
    "GameDirectoryNotFoundError",
    "LaunchError",
]
