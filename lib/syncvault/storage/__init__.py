"""
SyncVault Core - Blob Storage
=============================
Blob store abstractions for the document-sync read/write path.

Supported:
    - Local filesystem (root index as a reserved blob)
    - S3-compatible object storage (presigned URLs, native checksums)
"""

from .base import BaseBlobStore, BlobReader
from .checksum import (
    Checksum,
    ChecksumAlgorithm,
    parse_checksum,
    format_checksum,
    select_checksum,
)
from .filesystem import DirectoryFileSystem, FileSystemDelegate, StoredBlob
from .local_store import LocalBlobStore
from .object_store import ObjectBlobStore, generation_from_size
from .root_index import RootIndex, RootIndexView
from .factory import BlobStoreFactory

__all__ = [
    "BaseBlobStore",
    "BlobReader",
    "Checksum",
    "ChecksumAlgorithm",
    "parse_checksum",
    "format_checksum",
    "select_checksum",
    "DirectoryFileSystem",
    "FileSystemDelegate",
    "StoredBlob",
    "LocalBlobStore",
    "ObjectBlobStore",
    "generation_from_size",
    "RootIndex",
    "RootIndexView",
    "BlobStoreFactory",
]
