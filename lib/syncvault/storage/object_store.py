"""
Object Blob Store
=================
S3-compatible blob store built on boto3.

Features:
- Objects keyed '<prefix><uid>/<blob_id>'
- Provider-native checksums on read and write
- Presigned GET/PUT URLs for direct client transfer
- Root index generation derived from the stored object size

Generation arithmetic:
The root index payload is historically written as fixed-width records of
86 bytes (timestamp, separator, 64 character hash, newline) by the sync
protocol layer. The generation is therefore the number of whole records in
the stored object. This store never writes a generation of its own, so it
offers no compare-and-swap: only an after-the-fact version read.
"""

import io
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, BinaryIO, Dict, Optional, Tuple, Union

import boto3
from botocore.exceptions import ClientError

from .base import BaseBlobStore, BlobReader
from .checksum import select_checksum
from ..config.constants import (
    BLOB_BACKEND_S3,
    READ_STORAGE_EXPIRATION_MINUTES,
    ROOT_BLOB_ID,
    ROOT_INDEX_RECORD_SIZE,
    S3_CHECKSUM_FIELDS,
)
from ..errors import BlobNotFoundError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset(['404', 'NoSuchKey', 'NotFound'])


def generation_from_size(size: int) -> int:
    """Number of whole root-index records in an object of the given size."""
    return size // ROOT_INDEX_RECORD_SIZE


def _is_not_found(error: ClientError) -> bool:
    return error.response.get('Error', {}).get('Code') in NOT_FOUND_CODES


class ObjectBlobStore(BaseBlobStore):
    """
    Blob store backed by an S3 bucket.

    Credentials:
    - access_key/secret_key if given, otherwise the default boto3
      credential chain (environment, profile, instance role)
    - endpoint_url for S3-compatible services (MinIO, R2, ...)
    """

    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        prefix: str = "",
        endpoint_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        expiry_minutes: int = READ_STORAGE_EXPIRATION_MINUTES,
        client: Any = None,
    ):
        """
        Initialize S3 blob store.

        Args:
            bucket: S3 bucket name
            region: AWS region (e.g., 'us-east-1')
            prefix: Optional key prefix for all objects
            endpoint_url: Custom endpoint for S3-compatible services
            access_key: AWS access key ID (optional)
            secret_key: AWS secret access key (optional)
            expiry_minutes: Lifetime of presigned URLs
            client: Pre-built boto3 S3 client (skips client creation)
        """
        if not bucket:
            raise ValueError("Missing required setting: bucket")

        self.bucket = bucket
        self.prefix = prefix
        self.expiry = timedelta(minutes=expiry_minutes)

        if client is not None:
            self.s3_client = client
        elif access_key and secret_key:
            self.s3_client = boto3.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
            )
        else:
            # Use default credentials from environment/IAM role
            self.s3_client = boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    def _object_key(self, uid: str, blob_id: str) -> str:
        return f"{self.prefix}{uid}/{blob_id}"

    def load_blob(self, uid: str, blob_id: str) -> BlobReader:
        key = self._object_key(uid, blob_id)

        try:
            result = self.s3_client.get_object(
                Bucket=self.bucket,
                Key=key,
                ChecksumMode='ENABLED',
            )
        except ClientError as e:
            if _is_not_found(e):
                raise BlobNotFoundError(uid, blob_id)
            raise

        checksum = select_checksum(
            {name: result.get(field) for name, field in S3_CHECKSUM_FIELDS.items()}
        )

        return BlobReader(
            stream=result['Body'],
            size=result['ContentLength'],
            checksum=str(checksum) if checksum else None,
        )

    def store_blob(
        self,
        uid: str,
        blob_id: str,
        stream: BinaryIO,
        checksum: Optional[str] = None,
    ) -> None:
        parsed = self.validate_checksum(checksum)

        params: Dict[str, Any] = {
            'Bucket': self.bucket,
            'Key': self._object_key(uid, blob_id),
            'Body': self._request_body(stream),
        }
        if parsed is not None:
            params[S3_CHECKSUM_FIELDS[parsed.algorithm.value]] = parsed.value

        self.s3_client.put_object(**params)

    @staticmethod
    def _request_body(stream: BinaryIO) -> Union[BinaryIO, bytes]:
        """put_object needs a length; buffer streams that can't seek."""
        seekable = getattr(stream, 'seekable', None)
        if seekable is not None and seekable():
            return stream
        return stream.read()

    def get_root_index(self, uid: str) -> Tuple[str, int]:
        try:
            result = self.s3_client.get_object(
                Bucket=self.bucket,
                Key=self._object_key(uid, ROOT_BLOB_ID),
            )
        except ClientError as e:
            if _is_not_found(e):
                logger.info(f"root not found for user {uid}")
                return "", 0
            raise

        body = result['Body']
        try:
            data = body.read()
        finally:
            body.close()

        size = result.get('ContentLength', len(data))
        return data.decode('utf-8'), generation_from_size(size)

    def write_root_index(self, uid: str, generation: int, root_hash: str) -> int:
        payload = root_hash.encode('utf-8')

        self.s3_client.put_object(
            Bucket=self.bucket,
            Key=self._object_key(uid, ROOT_BLOB_ID),
            Body=io.BytesIO(payload),
        )

        new_generation = generation_from_size(len(payload))
        logger.debug(
            f"root index for {uid} written ({len(payload)} bytes), "
            f"generation {generation} -> {new_generation}"
        )
        return new_generation

    def get_blob_url(self, uid: str, blob_id: str, for_write: bool = False) -> Tuple[str, datetime]:
        expiry = datetime.now(timezone.utc) + self.expiry
        operation = 'put_object' if for_write else 'get_object'

        url = self.s3_client.generate_presigned_url(
            operation,
            Params={'Bucket': self.bucket, 'Key': self._object_key(uid, blob_id)},
            ExpiresIn=int(self.expiry.total_seconds()),
        )
        return url, expiry

    def get_provider_type(self) -> str:
        return BLOB_BACKEND_S3
