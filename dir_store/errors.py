"""dir_store exception hierarchy.

Filesystem and serialization failures raised by mutating operations
surface as one of these. Cache misses and blob decode failures never do.
"""

from __future__ import annotations


class DirStoreError(Exception):
    """Base exception for all dir_store failures."""


class DecodeError(DirStoreError):
    """Raised when a store file holds malformed or invalid content."""


class EncodeError(DirStoreError):
    """Raised when the in-memory collection cannot be serialized."""


class WriteError(DirStoreError):
    """Raised when a store or asset file cannot be written."""


class LocationError(DirStoreError):
    """Raised for container creation, removal, or file move failures."""


class InvalidDataError(DirStoreError):
    """Raised when asset content cannot be decoded into a blob."""


class AssetConsumedError(DirStoreError):
    """Raised when a temporary asset is used after promotion."""
