"""bridgefs: file-manager operations over any fsspec remote.

List, read, write, move and delete on object stores and cloud drives
through one contract, with bounded-memory uploads and an encrypted
rclone-style config for credentials.
"""

__version__ = "0.1.0"

from bridgefs.adapter import Adapter
from bridgefs.config_store import ConfigStore, is_ephemeral_section
from bridgefs.exceptions import (
    BackendConnectionError,
    BridgeError,
    ConfigError,
    ConsistencyError,
    IntegrityMismatchError,
    MoveIncompleteError,
    PathNotFoundError,
    StorageError,
)
from bridgefs.move import MoveStrategy
from bridgefs.options import AdapterOptions, login_form
from bridgefs.protocol import RemoteBackend, SupportsMove, SupportsStat
from bridgefs.remote import FsspecRemote, connect, parse_storage
from bridgefs.resolver import ExistenceResolver
from bridgefs.staging import StagedUpload, UploadStager
from bridgefs.types import EntryKind, FileEntry, RemoteObject

__all__ = [
    "Adapter",
    "AdapterOptions",
    "BackendConnectionError",
    "BridgeError",
    "ConfigError",
    "ConfigStore",
    "ConsistencyError",
    "EntryKind",
    "ExistenceResolver",
    "FileEntry",
    "FsspecRemote",
    "IntegrityMismatchError",
    "MoveIncompleteError",
    "MoveStrategy",
    "PathNotFoundError",
    "RemoteBackend",
    "RemoteObject",
    "StagedUpload",
    "StorageError",
    "SupportsMove",
    "SupportsStat",
    "UploadStager",
    "__version__",
    "connect",
    "is_ephemeral_section",
    "login_form",
    "parse_storage",
]
