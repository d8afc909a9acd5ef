"""RemoteBackend protocol: runtime-checkable interfaces.

Split into a core protocol and opt-in capability protocols so that
backends which only offer list/read/write/delete can implement just the
core. The adapter checks the capability protocols with ``isinstance``
and falls back to slower algorithms built on the core when they are
missing.

All paths are remote paths relative to the connection root (see
``bridgefs.utils.normalize_remote_path``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .types import RemoteObject


@runtime_checkable
class RemoteBackend(Protocol):
    """Core interface every remote must implement."""

    def list_dir(self, path: str) -> list[RemoteObject]:
        """Direct children of ``path`` in the backend's native order.

        Raises ``FileNotFoundError`` if ``path`` does not exist.
        """
        ...

    def open(self, path: str) -> BinaryIO:
        """Open an object for streaming read."""
        ...

    def put(self, path: str, source: BinaryIO, size: int, mtime: float) -> RemoteObject:
        """Upload ``size`` bytes from ``source`` and return the stored object.

        The returned object carries the size the remote reports, which
        callers compare against what they sent.
        """
        ...

    def mkdir(self, path: str) -> None: ...

    def remove(self, path: str) -> None:
        """Remove a single object. Raises ``FileNotFoundError`` if absent."""
        ...

    def purge(self, path: str) -> None:
        """Remove a directory and everything below it."""
        ...

    def close(self) -> None:
        """Release the connection. No-op if not needed."""
        ...


@runtime_checkable
class SupportsStat(Protocol):
    """Opt-in: single-call metadata lookup for one path."""

    def stat(self, path: str) -> RemoteObject:
        """Raises ``FileNotFoundError`` if ``path`` does not exist."""
        ...


@runtime_checkable
class SupportsMove(Protocol):
    """Opt-in: server-side move of files and directory trees."""

    def move_file(self, src: str, dst: str) -> None: ...

    def move_dir(self, src: str, dst: str) -> None: ...
