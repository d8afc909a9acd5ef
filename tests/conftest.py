"""Shared fixtures for bridgefs tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO

import fsspec
import pytest

from bridgefs.adapter import Adapter
from bridgefs.remote import FsspecRemote
from bridgefs.staging import UploadStager

if TYPE_CHECKING:
    from pathlib import Path

    from bridgefs.types import RemoteObject

# Small staging threshold so both staging paths run on tiny payloads
THRESHOLD = 16


class CoreOnlyRemote:
    """Wraps a remote and exposes only the core RemoteBackend methods.

    No ``stat``, no ``move_file`` / ``move_dir``: existence checks go
    through parent listings and moves through copy-then-delete.
    """

    def __init__(self, inner: FsspecRemote) -> None:
        self.inner = inner
        self.calls: list[str] = []

    def list_dir(self, path: str) -> list[RemoteObject]:
        self.calls.append(f"list_dir:{path}")
        return self.inner.list_dir(path)

    def open(self, path: str) -> BinaryIO:
        self.calls.append(f"open:{path}")
        return self.inner.open(path)

    def put(self, path: str, source: BinaryIO, size: int, mtime: float) -> RemoteObject:
        self.calls.append(f"put:{path}")
        return self.inner.put(path, source, size, mtime)

    def mkdir(self, path: str) -> None:
        self.calls.append(f"mkdir:{path}")
        self.inner.mkdir(path)

    def remove(self, path: str) -> None:
        self.calls.append(f"remove:{path}")
        self.inner.remove(path)

    def purge(self, path: str) -> None:
        self.calls.append(f"purge:{path}")
        self.inner.purge(path)

    def close(self) -> None:
        self.inner.close()


class LyingRemote(CoreOnlyRemote):
    """Reports one byte more than it stored."""

    def put(self, path: str, source: BinaryIO, size: int, mtime: float) -> RemoteObject:
        obj = super().put(path, source, size, mtime)
        obj.size += 1
        return obj


class StuckSourceRemote(CoreOnlyRemote):
    """Refuses to delete anything, so copy-then-delete moves stay half done."""

    def remove(self, path: str) -> None:
        raise PermissionError(f"remove denied: {path}")

    def purge(self, path: str) -> None:
        raise PermissionError(f"purge denied: {path}")


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def remote(root_dir: Path) -> FsspecRemote:
    """FsspecRemote on local disk, rooted at a temporary directory."""
    return FsspecRemote(fsspec.filesystem("file"), str(root_dir))


@pytest.fixture
def core_remote(remote: FsspecRemote) -> CoreOnlyRemote:
    return CoreOnlyRemote(remote)


@pytest.fixture
def stager() -> UploadStager:
    return UploadStager(max_memory=THRESHOLD, chunk_size=4)


@pytest.fixture
def adapter(remote: FsspecRemote, stager: UploadStager) -> Adapter:
    return Adapter(remote, stager=stager)


@pytest.fixture
def core_adapter(core_remote: CoreOnlyRemote, stager: UploadStager) -> Adapter:
    """Adapter over a remote without stat or native move."""
    return Adapter(core_remote, stager=stager)


@pytest.fixture
def lying_remote(remote: FsspecRemote) -> LyingRemote:
    return LyingRemote(remote)


@pytest.fixture
def stuck_remote(remote: FsspecRemote) -> StuckSourceRemote:
    return StuckSourceRemote(remote)
