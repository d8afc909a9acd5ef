"""Custom exception hierarchy for the bridgefs adapter layer."""

from __future__ import annotations


class BridgeError(Exception):
    """Base exception for all bridgefs errors."""


class PathNotFoundError(BridgeError):
    """Raised when a file or directory path does not exist on the remote."""


class StorageError(BridgeError):
    """Raised on remote backend failures detected by the adapter itself."""


class MoveIncompleteError(StorageError):
    """Raised when a move left the source and destination in an inconsistent state.

    The destination may hold a full copy while the source still exists (or
    the other way round). Callers should inspect both paths and retry.
    """

    def __init__(self, message: str, *, src: str, dst: str) -> None:
        super().__init__(message)
        self.src = src
        self.dst = dst


class ConsistencyError(BridgeError):
    """Raised when data integrity is compromised."""


class IntegrityMismatchError(ConsistencyError):
    """Raised when the remote reports a size different from what was uploaded.

    The object may exist on the remote but must not be trusted.
    """

    def __init__(self, path: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Size mismatch after upload of {path}: "
            f"staged {expected} bytes, remote reports {actual}"
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class ConfigError(BridgeError):
    """Raised when the configuration blob cannot be decrypted or parsed."""


class BackendConnectionError(BridgeError):
    """Raised when an adapter cannot be bound to its remote."""
