"""ExistenceResolver: file-or-directory lookup for remotes without stat."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import PathNotFoundError
from .protocol import SupportsStat
from .types import EntryKind
from .utils import normalize_remote_path, split_remote_path

if TYPE_CHECKING:
    from .protocol import RemoteBackend

logger = logging.getLogger(__name__)


class ExistenceResolver:
    """Classifies a remote path as a file or a directory.

    Backends implementing ``SupportsStat`` answer with one call. Others
    are asked for a listing of the parent directory, and the matching
    entry decides.
    """

    def __init__(self, remote: RemoteBackend, *, prefer_stat: bool = True) -> None:
        self.remote = remote
        self.prefer_stat = prefer_stat

    def resolve(self, path: str) -> EntryKind:
        target = normalize_remote_path(path)
        if not target:
            return EntryKind.DIRECTORY

        if self.prefer_stat and isinstance(self.remote, SupportsStat):
            return self._resolve_stat(target)
        return self._resolve_listing(target)

    def is_file(self, path: str) -> bool:
        return self.resolve(path) is EntryKind.FILE

    def exists(self, path: str) -> bool:
        try:
            self.resolve(path)
        except PathNotFoundError:
            return False
        return True

    def _resolve_stat(self, target: str) -> EntryKind:
        try:
            obj = self.remote.stat(target)  # type: ignore[attr-defined]
        except (FileNotFoundError, NotADirectoryError) as e:
            raise PathNotFoundError(f"Not found: {target}") from e
        return EntryKind.DIRECTORY if obj.is_dir else EntryKind.FILE

    def _resolve_listing(self, target: str) -> EntryKind:
        parent, _ = split_remote_path(target)
        try:
            entries = self.remote.list_dir(parent)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise PathNotFoundError(f"Not found: {target}") from e

        for entry in entries:
            if normalize_remote_path(entry.remote) != target:
                continue
            return EntryKind.DIRECTORY if entry.is_dir else EntryKind.FILE

        logger.debug("No entry for %s in listing of %r", target, parent)
        raise PathNotFoundError(f"Not found: {target}")
