"""Remote path helpers.

Remote paths are relative to a connection root: no leading slash, no
trailing slash, ``""`` for the root itself.
"""

from __future__ import annotations

import posixpath


def normalize_remote_path(path: str) -> str:
    """Normalize a path as seen by a remote backend.

    Examples:
        normalize_remote_path("/foo/bar/") -> "foo/bar"
        normalize_remote_path("foo//bar") -> "foo/bar"
        normalize_remote_path("/") -> ""
        normalize_remote_path("") -> ""
    """
    path = path.strip()
    if not path:
        return ""
    path = posixpath.normpath("/" + path)
    return path.strip("/")


def split_remote_path(path: str) -> tuple[str, str]:
    """Split a remote path into (parent, leaf).

    Examples:
        split_remote_path("foo/bar.txt") -> ("foo", "bar.txt")
        split_remote_path("/bar.txt") -> ("", "bar.txt")
        split_remote_path("foo/dir/") -> ("foo", "dir")
        split_remote_path("") -> ("", "")
    """
    path = normalize_remote_path(path)
    if not path:
        return "", ""
    parent, _, leaf = path.rpartition("/")
    return parent, leaf


def join_remote_path(*parts: str) -> str:
    """Join path segments into a normalized remote path."""
    return normalize_remote_path("/".join(p.strip("/") for p in parts if p))


def same_remote_path(a: str, b: str) -> bool:
    return normalize_remote_path(a) == normalize_remote_path(b)
