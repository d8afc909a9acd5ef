"""AdapterOptions and the login form description."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .exceptions import BackendConnectionError

if TYPE_CHECKING:
    from collections.abc import Mapping

BACKEND_TYPE = "bridgefs"


@dataclass
class AdapterOptions:
    """Parameters for binding an Adapter to one remote."""

    config: str
    """Config blob, encrypted or plain INI text."""

    password: str = field(repr=False)
    """Config password. Used for decryption only; never logged."""

    storage: str | None = None
    """Remote to open, e.g. ``"work:projects"``. Defaults to the first remote in ``config``."""

    def __post_init__(self) -> None:
        if not self.config:
            raise BackendConnectionError("Missing required parameter: config")
        if not self.password:
            raise BackendConnectionError("Missing required parameter: password")
        self.storage = (self.storage or "").strip() or None

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> AdapterOptions:
        return cls(
            config=params.get("config", ""),
            password=params.get("password", ""),
            storage=params.get("storage"),
        )


def login_form() -> list[dict[str, Any]]:
    """Credential fields a UI layer renders to build AdapterOptions."""
    return [
        {
            "name": "type",
            "type": "hidden",
            "value": BACKEND_TYPE,
        },
        {
            "name": "config",
            "type": "long_text",
            "placeholder": "Encrypted config",
            "description": "Encrypted rclone-style config holding the remote definitions",
            "required": True,
        },
        {
            "name": "password",
            "type": "password",
            "placeholder": "Password for the config",
            "required": True,
        },
        {
            "name": "storage",
            "type": "text",
            "placeholder": "Storage from the config",
            "description": "Remote to open, as name:path",
            "required": False,
        },
    ]
