"""Tests for utils.py: remote path helpers."""

from __future__ import annotations

import pytest

from bridgefs.utils import (
    join_remote_path,
    normalize_remote_path,
    same_remote_path,
    split_remote_path,
)


class TestNormalizeRemotePath:
    @pytest.mark.parametrize(
        ("input_path", "expected"),
        [
            pytest.param("", "", id="empty"),
            pytest.param("/", "", id="root"),
            pytest.param("foo/bar", "foo/bar", id="relative"),
            pytest.param("/foo/bar/", "foo/bar", id="slashes"),
            pytest.param("foo//bar", "foo/bar", id="double-slash"),
            pytest.param("/foo/../bar", "bar", id="dotdot"),
            pytest.param("/../..", "", id="dotdot-above-root"),
            pytest.param("  /a/b  ", "a/b", id="whitespace"),
        ],
    )
    def test_normalize(self, input_path: str, expected: str):
        assert normalize_remote_path(input_path) == expected


class TestSplitRemotePath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            pytest.param("foo/bar.txt", ("foo", "bar.txt"), id="nested"),
            pytest.param("/bar.txt", ("", "bar.txt"), id="top-level"),
            pytest.param("a/b/dir/", ("a/b", "dir"), id="trailing-slash"),
            pytest.param("", ("", ""), id="root"),
        ],
    )
    def test_split(self, path: str, expected: tuple[str, str]):
        assert split_remote_path(path) == expected


class TestJoinRemotePath:
    def test_join(self):
        assert join_remote_path("a/", "/b", "c.txt") == "a/b/c.txt"

    def test_join_skips_empty(self):
        assert join_remote_path("", "b") == "b"

    def test_same_path(self):
        assert same_remote_path("/a/b/", "a/b")
        assert not same_remote_path("a/b", "a/c")
