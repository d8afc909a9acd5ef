"""Listing types: FileEntry, RemoteObject, EntryKind."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntryKind(str, Enum):
    """Whether a remote path is a file or a directory."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class RemoteObject:
    """A single entry as reported by a remote backend listing.

    ``remote`` is the path relative to the connection root, without a
    leading slash (``"docs/a.txt"``).
    """

    remote: str
    is_dir: bool
    size: int = 0
    mtime: float = 0.0


@dataclass
class FileEntry:
    """File/directory metadata returned by ``Adapter.ls``."""

    name: str
    kind: EntryKind
    mtime: int
    size: int
    path: str
    # None means "unknown"; backends that know better may set them
    can_rename: bool | None = None
    can_move: bool | None = None
    can_delete: bool | None = None

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @classmethod
    def from_remote(cls, obj: RemoteObject) -> FileEntry:
        name = obj.remote.rstrip("/").rsplit("/", 1)[-1]
        if obj.is_dir:
            return cls(
                name=name,
                kind=EntryKind.DIRECTORY,
                mtime=int(obj.mtime),
                size=0,
                path=obj.remote,
            )
        return cls(
            name=name,
            kind=EntryKind.FILE,
            mtime=int(obj.mtime),
            size=obj.size,
            path=obj.remote,
        )
