"""
Filesystem Delegate
===================
Per-file storage used by LocalBlobStore.

Layout under the data directory:
    <root>/<uid>/blobs/<blob_id>        blob content
    <root>/<uid>/meta/<blob_id>.json    {"checksum": ..., "generation": ...}

Every write renames staged files into place and bumps the blob's generation
by one. The generation passed by the caller is not enforced here.
"""

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Optional, Protocol, Union

from ..config.constants import COPY_CHUNK_SIZE
from ..errors import BlobNotFoundError
from ..utils.file_utils import validate_storage_key

logger = logging.getLogger(__name__)


@dataclass
class StoredBlob:
    """Blob as returned by a filesystem delegate."""
    stream: BinaryIO
    size: int
    checksum: Optional[str]
    generation: int


class FileSystemDelegate(Protocol):
    """Interface LocalBlobStore expects from its per-file storage."""

    def load_blob(self, uid: str, blob_id: str) -> StoredBlob:
        ...

    def store_blob(
        self,
        uid: str,
        blob_id: str,
        stream: BinaryIO,
        checksum: Optional[str] = None,
        generation: int = -1,
    ) -> int:
        ...


class DirectoryFileSystem:
    """Filesystem delegate backed by a plain directory tree."""

    BLOB_DIR = "blobs"
    META_DIR = "meta"

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _user_dir(self, uid: str) -> Path:
        if not validate_storage_key(uid):
            raise ValueError(f"Invalid user id: {uid!r}")
        return self.root / uid

    def _blob_path(self, uid: str, blob_id: str) -> Path:
        if not validate_storage_key(blob_id):
            raise ValueError(f"Invalid blob id: {blob_id!r}")
        return self._user_dir(uid) / self.BLOB_DIR / blob_id

    def _meta_path(self, uid: str, blob_id: str) -> Path:
        return self._user_dir(uid) / self.META_DIR / f"{blob_id}.json"

    def _read_meta(self, uid: str, blob_id: str) -> Dict[str, Any]:
        path = self._meta_path(uid, blob_id)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return {}

    @staticmethod
    def _stage(path: Path, write: Callable[[BinaryIO], None]) -> str:
        """Write to a synced temp file beside path and return its name."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, 'wb') as tmp:
                write(tmp)
                tmp.flush()
                os.fsync(tmp.fileno())
        except BaseException:
            os.unlink(tmp_name)
            raise
        return tmp_name

    @staticmethod
    def _keep_previous(path: Path, backup_name: str) -> Optional[str]:
        """Hard-link the current content aside; None on a first write."""
        try:
            os.link(path, backup_name)
        except FileNotFoundError:
            return None
        return backup_name

    @staticmethod
    def _restore_previous(path: Path, backup: Optional[str]) -> None:
        if backup is None:
            os.unlink(path)
        else:
            os.replace(backup, path)

    @staticmethod
    def _commit_meta(tmp_name: str, path: Path) -> None:
        os.replace(tmp_name, path)

    @staticmethod
    def _discard(*names: Optional[str]) -> None:
        for name in names:
            if name and os.path.exists(name):
                os.unlink(name)

    def load_blob(self, uid: str, blob_id: str) -> StoredBlob:
        """
        Open a stored blob.

        Raises:
            BlobNotFoundError: If the blob doesn't exist
        """
        path = self._blob_path(uid, blob_id)
        try:
            stream = open(path, 'rb')
        except FileNotFoundError:
            raise BlobNotFoundError(uid, blob_id)

        try:
            size = os.fstat(stream.fileno()).st_size
            meta = self._read_meta(uid, blob_id)
        except BaseException:
            stream.close()
            raise

        return StoredBlob(
            stream=stream,
            size=size,
            checksum=meta.get('checksum'),
            generation=int(meta.get('generation', 0)),
        )

    def store_blob(
        self,
        uid: str,
        blob_id: str,
        stream: BinaryIO,
        checksum: Optional[str] = None,
        generation: int = -1,
    ) -> int:
        """
        Store a blob and return its new generation.

        Content and sidecar are both staged before either is renamed into
        place. If the sidecar can't be committed, the previous content is
        put back, so content and checksum never disagree.

        Args:
            uid: Owner user id
            blob_id: Blob id
            stream: Content to copy
            checksum: Tagged checksum recorded alongside the content
            generation: Generation last seen by the caller (-1 if unknown)

        Returns:
            Generation assigned to this write
        """
        path = self._blob_path(uid, blob_id)
        meta_path = self._meta_path(uid, blob_id)
        current = int(self._read_meta(uid, blob_id).get('generation', 0))
        new_generation = current + 1

        if generation >= 0 and generation != current:
            logger.debug(
                f"Writing {blob_id} for {uid} at generation {current} "
                f"(caller saw {generation})"
            )

        meta = json.dumps({'checksum': checksum, 'generation': new_generation}).encode('utf-8')

        blob_tmp = self._stage(path, lambda out: shutil.copyfileobj(stream, out, COPY_CHUNK_SIZE))
        meta_tmp = backup = None
        try:
            meta_tmp = self._stage(meta_path, lambda out: out.write(meta))
            backup = self._keep_previous(path, f"{blob_tmp}.prev")
            os.replace(blob_tmp, path)
            try:
                self._commit_meta(meta_tmp, meta_path)
            except BaseException:
                logger.error(f"Sidecar commit failed for {blob_id} of {uid}, restoring previous content")
                self._restore_previous(path, backup)
                raise
        finally:
            self._discard(blob_tmp, meta_tmp, backup)

        return new_generation
