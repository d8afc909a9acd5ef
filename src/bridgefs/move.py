"""MoveStrategy: native move when the remote has one, copy-then-delete otherwise."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import (
    IntegrityMismatchError,
    MoveIncompleteError,
    PathNotFoundError,
)
from .protocol import SupportsMove, SupportsStat
from .types import EntryKind
from .utils import (
    join_remote_path,
    normalize_remote_path,
    same_remote_path,
    split_remote_path,
)

if TYPE_CHECKING:
    from .protocol import RemoteBackend
    from .resolver import ExistenceResolver
    from .types import RemoteObject

logger = logging.getLogger(__name__)


class MoveStrategy:
    """Relocates a file or a directory tree on one remote.

    With a ``SupportsMove`` backend the move is a single server-side call
    for a file or a whole tree. Without it, files are streamed to the
    destination, checked against the source size, and only then removed;
    directories are recreated and moved entry by entry. Either way an
    existing destination directory is merged into, and a destination
    inside the source tree is refused before anything is written.

    A destination written but a source left behind raises
    ``MoveIncompleteError`` so callers can detect and repair it.
    """

    def __init__(
        self,
        remote: RemoteBackend,
        resolver: ExistenceResolver,
        *,
        prefer_native: bool = True,
    ) -> None:
        self.remote = remote
        self.resolver = resolver
        self.prefer_native = prefer_native

    @property
    def native(self) -> bool:
        return self.prefer_native and isinstance(self.remote, SupportsMove)

    def move(self, src: str, dst: str) -> None:
        src = normalize_remote_path(src)
        dst = normalize_remote_path(dst)
        if not src:
            raise ValueError("Cannot move the remote root")
        if same_remote_path(src, dst):
            return
        if dst.startswith(src + "/"):
            raise ValueError(f"Cannot move {src} into its own subtree {dst}")

        kind = self.resolver.resolve(src)

        if self.native:
            if kind is EntryKind.FILE:
                self.remote.move_file(src, dst)  # type: ignore[attr-defined]
            else:
                self.remote.move_dir(src, dst)  # type: ignore[attr-defined]
            logger.debug("Moved %s -> %s (native)", src, dst)
            return

        if kind is EntryKind.FILE:
            self._copy_delete_file(src, dst)
        else:
            self._copy_delete_dir(src, dst)
        logger.debug("Moved %s -> %s (copy and delete)", src, dst)

    # ------------------------------------------------------------------
    # Fallback
    # ------------------------------------------------------------------

    def _copy_delete_file(self, src: str, dst: str) -> None:
        info = self._source_info(src)
        with self.remote.open(src) as reader:
            obj = self.remote.put(dst, reader, info.size, info.mtime)
        if obj.size != info.size:
            raise IntegrityMismatchError(dst, info.size, obj.size)

        try:
            self.remote.remove(src)
        except Exception as e:
            logger.error("Copied %s to %s but could not remove source: %s", src, dst, e)
            raise MoveIncompleteError(
                f"Copied {src} to {dst} but failed to remove the source: {e}",
                src=src,
                dst=dst,
            ) from e

    def _copy_delete_dir(self, src: str, dst: str) -> None:
        self.remote.mkdir(dst)
        moved = 0
        for entry in self.remote.list_dir(src):
            leaf = normalize_remote_path(entry.remote).rsplit("/", 1)[-1]
            child_src = join_remote_path(src, leaf)
            child_dst = join_remote_path(dst, leaf)
            try:
                if entry.is_dir:
                    self._copy_delete_dir(child_src, child_dst)
                else:
                    self._copy_delete_file(child_src, child_dst)
            except MoveIncompleteError:
                raise
            except Exception as e:
                if not moved:
                    raise
                raise MoveIncompleteError(
                    f"Moved {moved} entries of {src} to {dst}, then failed on {child_src}: {e}",
                    src=src,
                    dst=dst,
                ) from e
            moved += 1

        try:
            self.remote.purge(src)
        except Exception as e:
            logger.error("Moved contents of %s to %s but could not remove it: %s", src, dst, e)
            raise MoveIncompleteError(
                f"Moved contents of {src} to {dst} but failed to remove the source: {e}",
                src=src,
                dst=dst,
            ) from e

    def _source_info(self, src: str) -> RemoteObject:
        if isinstance(self.remote, SupportsStat):
            try:
                return self.remote.stat(src)
            except FileNotFoundError as e:
                raise PathNotFoundError(f"Not found: {src}") from e

        parent, _ = split_remote_path(src)
        for entry in self.remote.list_dir(parent):
            if same_remote_path(entry.remote, src):
                return entry
        raise PathNotFoundError(f"Not found: {src}")
