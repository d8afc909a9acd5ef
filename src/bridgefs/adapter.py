"""Adapter: the uniform file-manager contract over one remote connection."""

from __future__ import annotations

import io
import logging
import time
from typing import TYPE_CHECKING, Any, BinaryIO

from .config_store import ConfigStore
from .exceptions import (
    BackendConnectionError,
    ConfigError,
    IntegrityMismatchError,
    PathNotFoundError,
)
from .move import MoveStrategy
from .options import AdapterOptions
from .remote import connect
from .resolver import ExistenceResolver
from .staging import UploadStager
from .types import EntryKind, FileEntry
from .utils import normalize_remote_path

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .protocol import RemoteBackend

logger = logging.getLogger(__name__)


class Adapter:
    """File-manager operations (ls, cat, mkdir, rm, mv, save, touch) on one remote.

    Every call is synchronous and maps to one or more remote operations.
    Backend exceptions propagate unchanged, except that missing paths are
    reported as ``PathNotFoundError`` and ``rm`` of a missing file succeeds.

    Usage::

        with Adapter.from_params({"config": blob, "password": pw, "storage": "work:"}) as a:
            a.save("/notes/today.txt", io.BytesIO(b"hello"))
            entries = a.ls("/notes")
    """

    def __init__(
        self,
        remote: RemoteBackend,
        *,
        config: ConfigStore | None = None,
        stager: UploadStager | None = None,
        prefer_stat: bool = True,
        prefer_native_move: bool = True,
    ) -> None:
        self.remote = remote
        self.config = config if config is not None else ConfigStore()
        self.stager = stager if stager is not None else UploadStager()
        self.resolver = ExistenceResolver(remote, prefer_stat=prefer_stat)
        self.mover = MoveStrategy(remote, self.resolver, prefer_native=prefer_native_move)
        self._closed = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_options(cls, options: AdapterOptions, **kwargs: Any) -> Adapter:
        """Load the config, then bind to the remote named by ``options.storage``.

        Raises ``BackendConnectionError`` if either step fails.
        """
        store = ConfigStore()
        try:
            store.load(options.config, options.password)
        except ConfigError as e:
            raise BackendConnectionError(f"Failed to load config: {e}") from e

        remote = connect(store, options.storage)
        return cls(remote, config=store, **kwargs)

    @classmethod
    def from_params(cls, params: Mapping[str, str], **kwargs: Any) -> Adapter:
        return cls.from_options(AdapterOptions.from_params(params), **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.remote.close()

    def __enter__(self) -> Adapter:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def serialize_config(self, password: str | None = None) -> str:
        return self.config.serialize(password)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def ls(self, path: str = "/") -> list[FileEntry]:
        """Direct children of ``path``, in the order the remote lists them."""
        target = normalize_remote_path(path)
        try:
            objects = self.remote.list_dir(target)
        except FileNotFoundError as e:
            raise PathNotFoundError(f"Directory not found: {path}") from e
        except NotADirectoryError as e:
            raise PathNotFoundError(f"Not a directory: {path}") from e
        return [FileEntry.from_remote(obj) for obj in objects]

    def cat(self, path: str) -> BinaryIO:
        """Open ``path`` for streaming read. The caller closes the stream."""
        target = normalize_remote_path(path)
        try:
            return self.remote.open(target)
        except FileNotFoundError as e:
            raise PathNotFoundError(f"File not found: {path}") from e

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def mkdir(self, path: str) -> None:
        self.remote.mkdir(normalize_remote_path(path))

    def rm(self, path: str) -> None:
        """Remove a file, or a directory with everything below it.

        Removing a path that does not exist succeeds.
        """
        target = normalize_remote_path(path)
        if not target:
            raise ValueError("Refusing to remove the remote root")

        try:
            kind = self.resolver.resolve(target)
        except PathNotFoundError:
            logger.debug("rm: %s already absent", target)
            return

        if kind is EntryKind.DIRECTORY:
            self.remote.purge(target)
            return

        try:
            self.remote.remove(target)
        except (FileNotFoundError, PathNotFoundError):
            logger.debug("rm: %s vanished before removal", target)

    def mv(self, src: str, dst: str) -> None:
        self.mover.move(src, dst)

    def save(self, path: str, content: BinaryIO) -> None:
        """Upload ``content`` to ``path`` and check the size the remote reports.

        Raises ``IntegrityMismatchError`` if the remote's size differs
        from the number of bytes read from ``content``.
        """
        target = normalize_remote_path(path)
        with self.stager.stage(content) as staged:
            obj = self.remote.put(target, staged.source, staged.size, time.time())

        if obj.size != staged.size:
            logger.warning(
                "Upload of %s reported %d bytes, expected %d", target, obj.size, staged.size
            )
            raise IntegrityMismatchError(target, staged.size, obj.size)

    def touch(self, path: str) -> None:
        target = normalize_remote_path(path)
        self.remote.put(target, io.BytesIO(b""), 0, time.time())
