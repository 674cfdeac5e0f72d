"""
strings-sync - Synchronize .lproj string bundles with CloudKit records

Converts between locale-major and key-major string tables, diffs key-major
snapshots, and moves the results between local Localizable.strings files and
CloudKit records. English ("en") is the canonical locale.

Quick start:
    strings-sync diff old/ new/
    strings-sync upload old/ new/ localizedStrings --api-token $TOKEN
    strings-sync synchronize Resources/ Article localizedStrings --api-token $TOKEN
"""

__version__ = "1.0.0"

from .diff import ChangeSet, diff
from .errors import (
    ConfigurationError,
    EnglishResourceMissing,
    FilesystemFailure,
    InternalError,
    InvalidFormat,
    RemoteStoreFailure,
    RemovalNotAllowed,
    SyncError,
)
from .transform import ENGLISH, prune_orphans, to_key_major, to_locale_major

__all__ = [
    "ChangeSet",
    "diff",
    "ENGLISH",
    "prune_orphans",
    "to_key_major",
    "to_locale_major",
    "SyncError",
    "EnglishResourceMissing",
    "InvalidFormat",
    "RemovalNotAllowed",
    "RemoteStoreFailure",
    "FilesystemFailure",
    "ConfigurationError",
    "InternalError",
]
