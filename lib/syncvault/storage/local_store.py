"""
Local Blob Store
================
Blob store that delegates per-file persistence to a filesystem delegate.

The root index is stored as an ordinary blob at the reserved id 'root';
its generation is whatever the delegate reports.
"""

import io
import logging
from typing import BinaryIO, Optional, Tuple

from .base import BaseBlobStore, BlobReader
from .filesystem import FileSystemDelegate
from ..config.constants import BLOB_BACKEND_LOCAL, ROOT_BLOB_ID
from ..errors import BlobNotFoundError

logger = logging.getLogger(__name__)


class LocalBlobStore(BaseBlobStore):
    """Blob store on top of a local filesystem delegate."""

    def __init__(self, filesystem: FileSystemDelegate):
        self.filesystem = filesystem

    def load_blob(self, uid: str, blob_id: str) -> BlobReader:
        stored = self.filesystem.load_blob(uid, blob_id)
        return BlobReader(stream=stored.stream, size=stored.size, checksum=stored.checksum)

    def store_blob(
        self,
        uid: str,
        blob_id: str,
        stream: BinaryIO,
        checksum: Optional[str] = None,
    ) -> None:
        self.validate_checksum(checksum)
        self.filesystem.store_blob(uid, blob_id, stream, checksum or None)

    def get_root_index(self, uid: str) -> Tuple[str, int]:
        try:
            stored = self.filesystem.load_blob(uid, ROOT_BLOB_ID)
        except BlobNotFoundError:
            logger.info(f"root not found for user {uid}")
            return "", 0

        with stored.stream:
            root_hash = stored.stream.read().decode('utf-8')
        return root_hash, stored.generation

    def write_root_index(self, uid: str, generation: int, root_hash: str) -> int:
        payload = io.BytesIO(root_hash.encode('utf-8'))
        new_generation = self.filesystem.store_blob(uid, ROOT_BLOB_ID, payload, None, generation)
        logger.debug(f"root index for {uid} now at generation {new_generation}")
        return new_generation

    def get_provider_type(self) -> str:
        return BLOB_BACKEND_LOCAL
