"""Tests for crypt.py: encrypted config container."""

from __future__ import annotations

import base64
from contextlib import contextmanager

import pytest

from bridgefs import crypt
from bridgefs.crypt import (
    ENCRYPT_MARKER,
    config_key,
    decrypt_config,
    encrypt_config,
    is_encrypted,
)
from bridgefs.exceptions import ConfigError

PLAIN = "[work]\ntype = memory\n"


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


class TestEncryptDecrypt:
    def test_round_trip(self):
        blob = encrypt_config(PLAIN, "hunter2")
        assert is_encrypted(blob)
        assert "type = memory" not in blob
        assert decrypt_config(blob, "hunter2") == PLAIN

    def test_header(self):
        blob = encrypt_config(PLAIN, "pw")
        lines = blob.splitlines()
        assert lines[0] == "# Encrypted rclone configuration File"
        assert lines[2] == ENCRYPT_MARKER

    def test_fresh_nonce_each_time(self):
        assert encrypt_config(PLAIN, "pw") != encrypt_config(PLAIN, "pw")

    def test_unicode_password_normalized(self):
        # "ﬁ" (U+FB01) folds to "fi" under NFKC
        blob = encrypt_config(PLAIN, "ﬁle")
        assert decrypt_config(blob, "file") == PLAIN

    def test_wrapped_payload(self):
        blob = encrypt_config(PLAIN, "pw")
        header, payload = blob.split(ENCRYPT_MARKER + "\n")
        wrapped = "\n".join(payload[i : i + 20] for i in range(0, len(payload), 20))
        assert decrypt_config(header + ENCRYPT_MARKER + "\n" + wrapped, "pw") == PLAIN


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------


class TestPlainText:
    def test_plain_passes_through(self):
        assert not is_encrypted(PLAIN)
        assert decrypt_config(PLAIN, "anything") == PLAIN

    def test_comments_before_plain(self):
        blob = "# my remotes\n; old\n\n" + PLAIN
        assert decrypt_config(blob, "pw") == blob

    def test_empty(self):
        assert decrypt_config("", "pw") == ""


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestDecryptFailures:
    def test_wrong_password(self):
        blob = encrypt_config(PLAIN, "right")
        with pytest.raises(ConfigError, match="wrong password"):
            decrypt_config(blob, "wrong")

    def test_unknown_version(self):
        with pytest.raises(ConfigError, match="Unsupported"):
            decrypt_config("RCLONE_ENCRYPT_V9:\nAAAA\n", "pw")

    def test_too_short(self):
        payload = base64.b64encode(b"x" * 10).decode()
        with pytest.raises(ConfigError, match="too short"):
            decrypt_config(f"{ENCRYPT_MARKER}\n{payload}\n", "pw")

    def test_bad_base64(self):
        with pytest.raises(ConfigError, match="base64"):
            decrypt_config(f"{ENCRYPT_MARKER}\n!!!not base64!!!\n", "pw")

    def test_empty_password(self):
        blob = encrypt_config(PLAIN, "pw")
        with pytest.raises(ConfigError, match="No characters"):
            decrypt_config(blob, "")


class TestConfigKey:
    def test_key_zeroed_after_use(self):
        with config_key("pw") as key:
            held = key
            assert any(held)
            assert len(held) == 32
        assert not any(held)

    def test_key_zeroed_on_error(self):
        with pytest.raises(RuntimeError), config_key("pw") as key:
            held = key
            raise RuntimeError("boom")
        assert not any(held)

    def test_same_password_same_key(self):
        with config_key("pw") as a:
            first = bytes(a)
        with config_key("pw") as b:
            second = bytes(b)
        assert first == second

    @pytest.mark.parametrize("password", ["pw", "wrong"], ids=["decrypts", "wrong-password"])
    def test_decrypt_zeroes_key(self, monkeypatch, password):
        blob = encrypt_config(PLAIN, "pw")
        seen = []

        @contextmanager
        def recording(pw):
            with config_key(pw) as key:
                seen.append(key)
                yield key

        monkeypatch.setattr(crypt, "config_key", recording)
        if password == "pw":
            assert decrypt_config(blob, password) == PLAIN
        else:
            with pytest.raises(ConfigError):
                decrypt_config(blob, password)
        [key] = seen
        assert not any(key)
