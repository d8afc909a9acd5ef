"""ConfigStore: encrypted in-memory key/value store for connection credentials."""

from __future__ import annotations

import configparser
import io
import logging
import threading

from .crypt import decrypt_config, encrypt_config
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

EPHEMERAL_SECTION_MARKER = ":"


def is_ephemeral_section(section: str) -> bool:
    """True for on-the-fly sections, which must never be persisted."""
    return section.startswith(EPHEMERAL_SECTION_MARKER)


def _new_document() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


class ConfigStore:
    """INI document of remote definitions, one section per remote.

    Loaded once per connection from an (optionally encrypted) blob and
    rendered back to a string on demand. The password is only used
    inside ``load`` / ``serialize`` and is never kept on the instance.

    Every method takes the same lock; the store is built for correctness
    under occasional concurrent access, not throughput.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._doc = _new_document()

    @classmethod
    def from_blob(cls, blob: str, password: str) -> ConfigStore:
        store = cls()
        store.load(blob, password)
        return store

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, blob: str, password: str) -> None:
        """Replace the document with the one held in ``blob``.

        On failure the store is left holding an empty document and
        ``ConfigError`` is raised.
        """
        with self._lock:
            self._doc = _new_document()
            text = decrypt_config(blob, password)
            doc = _new_document()
            try:
                doc.read_string(text)
            except configparser.Error as e:
                raise ConfigError(f"Failed to parse config: {e}") from e
            self._doc = doc
            logger.debug("Loaded config with %d sections", len(doc.sections()))

    def serialize(self, password: str | None = None) -> str:
        """Render the persistent sections as INI text.

        With a ``password`` the text is wrapped in the encrypted container.
        """
        with self._lock:
            out = _new_document()
            for section in self._doc.sections():
                if is_ephemeral_section(section):
                    continue
                out.add_section(section)
                for key, value in self._doc.items(section, raw=True):
                    out.set(section, key, value)

            buf = io.StringIO()
            out.write(buf)
            text = buf.getvalue()

        if password is None:
            return text
        return encrypt_config(text, password)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def has_section(self, section: str) -> bool:
        with self._lock:
            return self._doc.has_section(section)

    def get_section_list(self) -> list[str]:
        with self._lock:
            return self._doc.sections()

    def get_key_list(self, section: str) -> list[str]:
        with self._lock:
            if not self._doc.has_section(section):
                return []
            return list(self._doc.options(section))

    def get_value(self, section: str, key: str) -> tuple[str, bool]:
        """Return ``(value, found)``; ``("", False)`` when absent."""
        with self._lock:
            try:
                return self._doc.get(section, key, raw=True), True
            except (configparser.NoSectionError, configparser.NoOptionError):
                return "", False

    def get_section(self, section: str) -> dict[str, str]:
        with self._lock:
            if not self._doc.has_section(section):
                return {}
            return dict(self._doc.items(section, raw=True))

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def set_value(self, section: str, key: str, value: str) -> None:
        """Set ``key`` in ``section``, creating the section if needed.

        Writes to on-the-fly sections are dropped with a warning.
        """
        with self._lock:
            if is_ephemeral_section(section):
                logger.warning(
                    "Can't save config %r for on the fly backend %r", key, section
                )
                return
            if not self._doc.has_section(section):
                self._doc.add_section(section)
            self._doc.set(section, key, value)

    def delete_section(self, section: str) -> None:
        with self._lock:
            self._doc.remove_section(section)

    def delete_key(self, section: str, key: str) -> bool:
        """Remove ``key`` from ``section``. Returns True if it existed."""
        with self._lock:
            try:
                return self._doc.remove_option(section, key)
            except configparser.NoSectionError:
                return False
