"""FsspecRemote: RemoteBackend over an fsspec filesystem, and the connection factory."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, BinaryIO

import fsspec
from fsspec.implementations.local import LocalFileSystem

from .exceptions import BackendConnectionError
from .types import RemoteObject
from .utils import join_remote_path, normalize_remote_path, split_remote_path

if TYPE_CHECKING:
    from fsspec import AbstractFileSystem

    from .config_store import ConfigStore

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1 << 20

# Listing keys that carry a modification time, most specific first
_MTIME_KEYS = ("mtime", "LastModified", "last_modified", "updated", "created")


def _modified(info: dict[str, Any]) -> float:
    for key in _MTIME_KEYS:
        value = info.get(key)
        if value is None:
            continue
        if isinstance(value, datetime):
            return value.timestamp()
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
            except ValueError:
                continue
    return 0.0


class FsspecRemote:
    """A remote bound to ``root`` on an fsspec filesystem.

    Implements ``RemoteBackend`` plus the ``SupportsStat`` and
    ``SupportsMove`` capabilities. All paths taken and returned are
    relative to ``root``.
    """

    def __init__(self, fs: AbstractFileSystem, root: str = "") -> None:
        self.fs = fs
        root = root.strip()
        if not root and isinstance(fs, LocalFileSystem):
            # relative local paths resolve against the working directory
            root = "."
        if root:
            stripped = fs._strip_protocol(root)
            root = stripped if stripped == "/" else stripped.rstrip("/")
        self.root = root

    def __repr__(self) -> str:
        return f"FsspecRemote(protocol={self.fs.protocol!r}, root={self.root!r})"

    # =========================================================================
    # Path Mapping
    # =========================================================================

    def _full(self, path: str) -> str:
        rel = normalize_remote_path(path)
        if not self.root:
            return rel
        if not rel:
            return self.root
        return self.root.rstrip("/") + "/" + rel

    def _relative(self, name: str) -> str:
        prefix = self.root.rstrip("/") + "/"
        if name == self.root:
            return ""
        if name.startswith(prefix):
            name = name[len(prefix):]
        return name.strip("/")

    def _to_object(self, info: dict[str, Any]) -> RemoteObject:
        is_dir = info.get("type") == "directory"
        return RemoteObject(
            remote=self._relative(info["name"]),
            is_dir=is_dir,
            size=0 if is_dir else int(info.get("size") or 0),
            mtime=_modified(info),
        )

    # =========================================================================
    # RemoteBackend
    # =========================================================================

    def list_dir(self, path: str) -> list[RemoteObject]:
        full = self._full(path)
        target = normalize_remote_path(path)
        self.fs.invalidate_cache(full)
        entries = [self._to_object(info) for info in self.fs.ls(full, detail=True)]
        # a file path lists as the file itself
        if len(entries) == 1 and entries[0].remote == target and not entries[0].is_dir:
            raise NotADirectoryError(f"Not a directory: {path}")
        return [e for e in entries if e.remote != target]

    def open(self, path: str) -> BinaryIO:
        return self.fs.open(self._full(path), "rb")

    def put(self, path: str, source: BinaryIO, size: int, mtime: float) -> RemoteObject:
        full = self._full(path)
        parent, _ = split_remote_path(path)
        if parent:
            self.fs.makedirs(self._full(parent), exist_ok=True)

        logger.debug("Uploading %d bytes to %s", size, full)
        with self.fs.open(full, "wb") as f:
            shutil.copyfileobj(source, f, COPY_CHUNK_SIZE)

        self._set_mtime(full, mtime)
        self.fs.invalidate_cache(full)
        return self._to_object(self.fs.info(full))

    def mkdir(self, path: str) -> None:
        self.fs.makedirs(self._full(path), exist_ok=True)

    def remove(self, path: str) -> None:
        self.fs.rm_file(self._full(path))

    def purge(self, path: str) -> None:
        self.fs.rm(self._full(path), recursive=True)

    def close(self) -> None:
        closer = getattr(self.fs, "close", None)
        if callable(closer):
            closer()

    def _set_mtime(self, full: str, mtime: float) -> None:
        # only local disk lets us set it; object stores stamp their own time
        if isinstance(self.fs, LocalFileSystem):
            os.utime(full, (mtime, mtime))

    # =========================================================================
    # Capabilities
    # =========================================================================

    def stat(self, path: str) -> RemoteObject:
        full = self._full(path)
        self.fs.invalidate_cache(full)
        return self._to_object(self.fs.info(full))

    def move_file(self, src: str, dst: str) -> None:
        self._ensure_parent(dst)
        self.fs.mv(self._full(src), self._full(dst))

    def move_dir(self, src: str, dst: str) -> None:
        """Move the tree at ``src`` to ``dst``.

        An existing ``dst`` directory is merged into: the children of
        ``src`` land directly under ``dst``.
        """
        full_dst = self._full(dst)
        self.fs.invalidate_cache(full_dst)
        if not self.fs.isdir(full_dst):
            self._ensure_parent(dst)
            self.fs.mv(self._full(src), full_dst, recursive=True)
            return

        for entry in self.list_dir(src):
            _, leaf = split_remote_path(entry.remote)
            child_src = join_remote_path(src, leaf)
            child_dst = join_remote_path(dst, leaf)
            if entry.is_dir:
                self.move_dir(child_src, child_dst)
            else:
                self.fs.mv(self._full(child_src), self._full(child_dst))
        self.purge(src)

    def _ensure_parent(self, path: str) -> None:
        parent, _ = split_remote_path(path)
        if parent:
            self.fs.makedirs(self._full(parent), exist_ok=True)


# =============================================================================
# Connection Factory
# =============================================================================


@dataclass
class RemoteSpec:
    """A parsed ``storage`` string.

    ``name:path`` names a config section, ``:type,key=value:path`` is an
    on-the-fly remote defined inline.
    """

    name: str
    root: str = ""
    options: dict[str, str] = field(default_factory=dict)

    @property
    def on_the_fly(self) -> bool:
        return self.name.startswith(":")


def parse_storage(storage: str) -> RemoteSpec:
    """Parse a storage string into a RemoteSpec.

    Examples:
        parse_storage("s3:bucket/dir") -> RemoteSpec("s3", "bucket/dir")
        parse_storage("work") -> RemoteSpec("work", "")
        parse_storage(":memory:/data") -> RemoteSpec(":memory", "/data", {"type": "memory"})
    """
    storage = storage.strip()
    if storage.startswith(":"):
        head, _, root = storage[1:].partition(":")
        backend, *pairs = head.split(",")
        if not backend:
            raise BackendConnectionError(f"Missing backend type in {storage!r}")
        options = {"type": backend}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            if not sep or not key:
                raise BackendConnectionError(f"Bad on the fly option {pair!r} in {storage!r}")
            options[key.strip()] = value.strip()
        return RemoteSpec(name=":" + backend, root=root, options=options)

    name, _, root = storage.partition(":")
    if not name:
        raise BackendConnectionError(f"Missing remote name in {storage!r}")
    return RemoteSpec(name=name, root=root)


def _coerce(options: dict[str, str]) -> dict[str, Any]:
    coerced: dict[str, Any] = {}
    for key, value in options.items():
        lowered = value.lower()
        if lowered == "true":
            coerced[key] = True
        elif lowered == "false":
            coerced[key] = False
        else:
            coerced[key] = value
    return coerced


def connect(store: ConfigStore, storage: str | None = None) -> FsspecRemote:
    """Build the remote named by ``storage`` from the definitions in ``store``.

    With no ``storage`` the first remote in the config is used.
    """
    if not storage:
        sections = store.get_section_list()
        if not sections:
            raise BackendConnectionError("No storage given and config defines no remotes")
        storage = sections[0]
        logger.debug("No storage given, using first remote %r", storage)

    spec = parse_storage(storage)

    if spec.on_the_fly:
        options = dict(spec.options)
        for key, value in options.items():
            store.set_value(spec.name, key, value)
    else:
        if not store.has_section(spec.name):
            raise BackendConnectionError(f"Didn't find section in config file: {spec.name!r}")
        options = store.get_section(spec.name)

    protocol = options.pop("type", "")
    if not protocol:
        raise BackendConnectionError(f"Remote {spec.name!r} has no type")

    try:
        fs = fsspec.filesystem(protocol, skip_instance_cache=True, **_coerce(options))
    except (ValueError, ImportError, TypeError, OSError) as e:
        raise BackendConnectionError(f"Failed to create remote {spec.name!r}: {e}") from e

    remote = FsspecRemote(fs, spec.root)
    logger.info("Connected to %r", remote)
    return remote
