"""Encrypted container for configuration documents.

The container is the one rclone writes for encrypted config files::

    # Encrypted rclone configuration File

    RCLONE_ENCRYPT_V0:
    <base64(nonce || secretbox(plaintext))>

The key is the SHA-256 of ``"[" + password + "][rclone-config]"`` and the
payload is sealed with NaCl secretbox (XSalsa20-Poly1305). Blobs without
the marker are plain INI text and pass through untouched.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import unicodedata
from contextlib import contextmanager
from typing import TYPE_CHECKING

import nacl.utils
from nacl.exceptions import CryptoError
from nacl.secret import SecretBox

from .exceptions import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

ENCRYPT_MARKER = "RCLONE_ENCRYPT_V0:"
ENCRYPT_MARKER_PREFIX = "RCLONE_ENCRYPT_V"
ENCRYPTED_HEADER = f"# Encrypted rclone configuration File\n\n{ENCRYPT_MARKER}\n"
MIN_PAYLOAD = SecretBox.NONCE_SIZE + SecretBox.MACBYTES


def _prepare_password(password: str) -> str:
    if password.strip() != password:
        logger.warning("Config password has leading/trailing whitespace; it is used as-is")
    password = unicodedata.normalize("NFKC", password)
    if not password.strip():
        raise ConfigError("No characters in config password")
    return password


@contextmanager
def config_key(password: str) -> Iterator[bytearray]:
    """Derive the config key for the duration of a ``with`` block.

    The yielded buffer is zeroed on exit, including when the block raises.
    Copies made from it, such as the ``bytes`` handed to ``SecretBox``,
    are immutable and stay in memory until garbage collected, so callers
    drop them as soon as they are done.
    """
    password = _prepare_password(password)
    key = bytearray(hashlib.sha256(f"[{password}][rclone-config]".encode()).digest())
    try:
        yield key
    finally:
        for i in range(len(key)):
            key[i] = 0


def is_encrypted(blob: str) -> bool:
    """True if the first meaningful line of ``blob`` is an encryption marker."""
    for line in blob.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", ";")):
            continue
        return stripped.startswith(ENCRYPT_MARKER_PREFIX)
    return False


def decrypt_config(blob: str, password: str) -> str:
    """Return the plain INI text held in ``blob``."""
    lines = blob.splitlines()
    payload_start = None
    for i, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", ";")):
            continue
        if stripped == ENCRYPT_MARKER:
            payload_start = i + 1
            break
        if stripped.startswith(ENCRYPT_MARKER_PREFIX):
            raise ConfigError(f"Unsupported configuration encryption: {stripped}")
        return blob

    if payload_start is None:
        return blob

    encoded = "".join("".join(lines[payload_start:]).split())
    try:
        box = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigError(f"Failed to load base64 encoded data: {e}") from e

    if len(box) < MIN_PAYLOAD:
        raise ConfigError("Configuration data too short")

    with config_key(password) as key:
        secret = SecretBox(bytes(key))
        try:
            plain = secret.decrypt(box)
        except CryptoError as e:
            raise ConfigError(
                "Couldn't decrypt configuration, most likely wrong password"
            ) from e
        finally:
            del secret

    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ConfigError(f"Decrypted configuration is not UTF-8: {e}") from e


def encrypt_config(text: str, password: str) -> str:
    """Wrap plain INI text in the encrypted container."""
    with config_key(password) as key:
        nonce = nacl.utils.random(SecretBox.NONCE_SIZE)
        secret = SecretBox(bytes(key))
        sealed = secret.encrypt(text.encode("utf-8"), nonce)
        del secret
    return ENCRYPTED_HEADER + base64.b64encode(bytes(sealed)).decode("ascii") + "\n"
