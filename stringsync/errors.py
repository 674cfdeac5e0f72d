#!/usr/bin/env python3
"""
Error types raised by strings-sync.

Every error is fatal: the CLI reports the description and exits non-zero,
nothing is retried and no partial result is reported as success.
"""

from typing import Optional


class SyncError(Exception):
    """Base class for all strings-sync failures."""

    description = "Synchronization error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        message = f"{self.description}: {detail}" if detail else self.description
        super().__init__(message)


class EnglishResourceMissing(SyncError):
    description = "English resource missing"


class InvalidFormat(SyncError):
    description = "Malformed data"


class RemovalNotAllowed(SyncError):
    description = "Removal is not allowed"

    def __init__(self, keys: list[str]):
        self.keys = sorted(keys)
        preview = ", ".join(self.keys[:10])
        if len(self.keys) > 10:
            preview += f" (+{len(self.keys) - 10} more)"
        super().__init__(f"{len(self.keys)} key(s) would be removed: {preview}")


class RemoteStoreFailure(SyncError):
    """CloudKit reported a failure. The original exception is kept as ``cause``."""

    description = "CloudKit error"

    def __init__(self, detail: Optional[str] = None, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(detail)


class FilesystemFailure(SyncError):
    description = "Filesystem error"


class ConfigurationError(SyncError):
    description = "Configuration error"


class InternalError(SyncError):
    description = "Internal error"
