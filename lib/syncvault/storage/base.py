"""
SyncVault Core - Base Blob Store
================================
Abstract base class for all blob storage backends.

Blob stores serve the document-sync read/write path:
- Load and store content-addressed blobs per user
- Track the per-user root index (root hash + generation)
- Optionally hand out presigned URLs for direct client transfer

Operations run synchronously in the caller's thread. Writes to distinct
(owner, id) pairs are independent; the store never orders two writes to
the same id.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional, Tuple

from ..errors import UnsupportedOperationError
from .checksum import Checksum, parse_checksum


@dataclass
class BlobReader:
    """
    Open blob returned by load_blob.

    The caller owns the stream and must close it on every exit path;
    using the reader as a context manager does that.
    """
    stream: BinaryIO
    size: int
    checksum: Optional[str] = None

    def read(self, size: int = -1) -> bytes:
        return self.stream.read(size)

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "BlobReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BaseBlobStore(ABC):
    """
    Abstract base class for blob storage backends.

    All backends (local filesystem, S3, ...) must implement this interface
    to be usable with the BlobStoreFactory.

    Root index contract:
    - A user without any root index write reads back ("", 0), never an error
    - A successful write is visible to the next read for the same user
    - Concurrent writers to the same root index race; last write wins
    """

    @abstractmethod
    def load_blob(self, uid: str, blob_id: str) -> BlobReader:
        """
        Open a blob for reading.

        Args:
            uid: Owner user id
            blob_id: Opaque blob id

        Returns:
            BlobReader with stream, size and tagged checksum (if known)

        Raises:
            BlobNotFoundError: If the blob doesn't exist
            OSError: On backend I/O failure
        """
        pass

    @abstractmethod
    def store_blob(
        self,
        uid: str,
        blob_id: str,
        stream: BinaryIO,
        checksum: Optional[str] = None,
    ) -> None:
        """
        Store a blob.

        Args:
            uid: Owner user id
            blob_id: Opaque blob id
            stream: Readable binary stream with the blob content
            checksum: Tagged checksum ('sha256=...'), or None if not supplied

        Raises:
            InvalidChecksumError: If the checksum algorithm is unrecognized
            OSError: On backend I/O failure
        """
        pass

    @abstractmethod
    def get_root_index(self, uid: str) -> Tuple[str, int]:
        """
        Read the user's root index.

        Args:
            uid: Owner user id

        Returns:
            Tuple of (root_hash, generation); ("", 0) if never written
        """
        pass

    @abstractmethod
    def write_root_index(self, uid: str, generation: int, root_hash: str) -> int:
        """
        Write the user's root index.

        Args:
            uid: Owner user id
            generation: Generation the caller last observed
            root_hash: Root index payload

        Returns:
            New generation as assigned by the backend
        """
        pass

    @abstractmethod
    def get_provider_type(self) -> str:
        """
        Get backend type identifier.

        Returns:
            Backend type string (e.g., 'local', 's3')
        """
        pass

    def get_blob_url(self, uid: str, blob_id: str, for_write: bool = False) -> Tuple[str, datetime]:
        """
        Create a URL the client can use to transfer the blob directly.

        Default implementation raises UnsupportedOperationError.
        Backends capable of direct transfer should override.

        Args:
            uid: Owner user id
            blob_id: Opaque blob id
            for_write: True for an upload URL, False for a download URL

        Returns:
            Tuple of (absolute URL, absolute UTC expiry)
        """
        raise UnsupportedOperationError(
            f"Presigned URLs not supported by the {self.get_provider_type()} backend"
        )

    def supports_blob_urls(self) -> bool:
        """Check whether get_blob_url is implemented by this backend."""
        return type(self).get_blob_url is not BaseBlobStore.get_blob_url

    @staticmethod
    def validate_checksum(checksum: Optional[str]) -> Optional[Checksum]:
        """
        Validate a tagged checksum before handing it to the backend.

        Args:
            checksum: Tagged checksum string or None/empty

        Returns:
            Parsed Checksum, or None when no checksum was supplied

        Raises:
            InvalidChecksumError: If the algorithm is unrecognized
        """
        if not checksum:
            return None
        return parse_checksum(checksum)
