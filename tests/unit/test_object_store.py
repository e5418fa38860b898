"""
Unit Tests: Object Blob Store
=============================
Tests ObjectBlobStore against a mocked S3 client. Presigning uses a real
boto3 client with dummy credentials; signing is local, no network.
"""

import io
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

SHA256_B64 = "n4bQgYhMfWWaL+qgxVrQFaO/TxsrC4Is0V1sFbDwCgg="


def _client_error(code, operation="GetObject"):
    return ClientError({'Error': {'Code': code, 'Message': 'error'}}, operation)


def _get_object_result(data, **fields):
    body = MagicMock()
    body.read.return_value = data
    result = {'Body': body, 'ContentLength': len(data)}
    result.update(fields)
    return result


class TestGenerationFromSize:
    """Tests for generation_from_size function."""

    @pytest.mark.unit
    @pytest.mark.parametrize("size,expected", [
        (0, 0),
        (85, 0),
        (86, 1),
        (171, 1),
        (172, 2),
        (86 * 10 + 5, 10),
    ])
    def test_whole_records(self, size, expected):
        from syncvault.storage import generation_from_size

        assert generation_from_size(size) == expected


class TestLoadBlob:
    """Tests for load_blob."""

    @pytest.mark.unit
    def test_returns_stream_size_and_checksum(self, object_store, s3_client):
        s3_client.get_object.return_value = _get_object_result(
            b"content", ChecksumSHA256=SHA256_B64
        )

        reader = object_store.load_blob("user-1", "doc-1")

        assert reader.size == 7
        assert reader.checksum == f"sha256={SHA256_B64}"
        s3_client.get_object.assert_called_once_with(
            Bucket="test-bucket", Key="sync/user-1/doc-1", ChecksumMode='ENABLED'
        )

    @pytest.mark.unit
    def test_checksum_priority(self, object_store, s3_client):
        """CRC32 is preferred over the cryptographic checksums."""
        s3_client.get_object.return_value = _get_object_result(
            b"content",
            ChecksumSHA256=SHA256_B64,
            ChecksumSHA1="qZk+NkcGgWq6PiVxeFDCbJzQ2J0=",
            ChecksumCRC32="d4s5Fg==",
        )

        reader = object_store.load_blob("user-1", "doc-1")

        assert reader.checksum == "crc32=d4s5Fg=="

    @pytest.mark.unit
    def test_no_checksum_reported(self, object_store, s3_client):
        s3_client.get_object.return_value = _get_object_result(b"content")

        assert object_store.load_blob("user-1", "doc-1").checksum is None

    @pytest.mark.unit
    @pytest.mark.parametrize("code", ["NoSuchKey", "404"])
    def test_missing_object(self, object_store, s3_client, code):
        from syncvault.errors import BlobNotFoundError

        s3_client.get_object.side_effect = _client_error(code)

        with pytest.raises(BlobNotFoundError):
            object_store.load_blob("user-1", "doc-1")

    @pytest.mark.unit
    def test_other_errors_propagate(self, object_store, s3_client):
        s3_client.get_object.side_effect = _client_error("AccessDenied")

        with pytest.raises(ClientError):
            object_store.load_blob("user-1", "doc-1")


class TestStoreBlob:
    """Tests for store_blob."""

    @pytest.mark.unit
    def test_passes_native_checksum(self, object_store, s3_client):
        body = io.BytesIO(b"content")

        object_store.store_blob("user-1", "doc-1", body, f"sha256={SHA256_B64}")

        s3_client.put_object.assert_called_once_with(
            Bucket="test-bucket",
            Key="sync/user-1/doc-1",
            Body=body,
            ChecksumSHA256=SHA256_B64,
        )

    @pytest.mark.unit
    def test_without_checksum(self, object_store, s3_client):
        object_store.store_blob("user-1", "doc-1", io.BytesIO(b"content"), None)

        kwargs = s3_client.put_object.call_args.kwargs
        assert not any(k.startswith("Checksum") for k in kwargs)

    @pytest.mark.unit
    def test_unknown_algorithm_rejected(self, object_store, s3_client):
        from syncvault.errors import InvalidChecksumError

        with pytest.raises(InvalidChecksumError):
            object_store.store_blob("user-1", "doc-1", io.BytesIO(b"x"), "md5=abc")

        s3_client.put_object.assert_not_called()

    @pytest.mark.unit
    def test_buffers_unseekable_stream(self, object_store, s3_client):
        stream = MagicMock()
        stream.seekable.return_value = False
        stream.read.return_value = b"streamed"

        object_store.store_blob("user-1", "doc-1", stream)

        assert s3_client.put_object.call_args.kwargs["Body"] == b"streamed"


class TestRootIndex:
    """Tests for get_root_index / write_root_index."""

    @pytest.mark.unit
    def test_absent_root_index(self, object_store, s3_client):
        s3_client.get_object.side_effect = _client_error("NoSuchKey")

        assert object_store.get_root_index("user-1") == ("", 0)

    @pytest.mark.unit
    def test_generation_derived_from_size(self, object_store, s3_client):
        payload = b"x" * (86 * 3 + 10)
        s3_client.get_object.return_value = _get_object_result(payload)

        root_hash, generation = object_store.get_root_index("user-1")

        assert root_hash == payload.decode()
        assert generation == 3
        s3_client.get_object.return_value['Body'].close.assert_called_once()

    @pytest.mark.unit
    def test_write_returns_size_generation(self, object_store, s3_client):
        root_hash = "r" * (86 * 2)

        generation = object_store.write_root_index("user-1", 1, root_hash)

        assert generation == 2
        kwargs = s3_client.put_object.call_args.kwargs
        assert kwargs["Key"] == "sync/user-1/root"
        assert kwargs["Body"].getvalue() == root_hash.encode()

    @pytest.mark.unit
    def test_write_then_read(self, object_store, s3_client):
        """A write is visible to the next read with generation size // 86."""
        stored = {}

        def put_object(**kwargs):
            stored[kwargs["Key"]] = kwargs["Body"].read()

        def get_object(**kwargs):
            if kwargs["Key"] not in stored:
                raise _client_error("NoSuchKey")
            return _get_object_result(stored[kwargs["Key"]])

        s3_client.put_object.side_effect = put_object
        s3_client.get_object.side_effect = get_object

        first_hash = "a" * 86
        second_hash = "b" * 86 * 2
        object_store.write_root_index("user-1", 0, first_hash)
        written = object_store.write_root_index("user-1", 1, second_hash)

        assert object_store.get_root_index("user-1") == (second_hash, written)
        assert written == len(second_hash) // 86


class TestPresignedUrls:
    """Tests for get_blob_url."""

    @pytest.fixture
    def signing_store(self):
        import boto3
        from syncvault.storage import ObjectBlobStore

        client = boto3.client(
            "s3",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        return ObjectBlobStore(bucket="test-bucket", prefix="sync/", client=client, expiry_minutes=5)

    @pytest.mark.unit
    def test_read_url(self, signing_store):
        before = datetime.now(timezone.utc)

        url, expiry = signing_store.get_blob_url("user-1", "doc-1")

        assert url.startswith("https://")
        assert "test-bucket" in url
        assert "sync/user-1/doc-1" in url
        assert expiry.tzinfo is not None
        assert before + timedelta(minutes=5) <= expiry <= datetime.now(timezone.utc) + timedelta(minutes=5)

    @pytest.mark.unit
    def test_write_url_uses_put(self, object_store, s3_client):
        s3_client.generate_presigned_url.return_value = "https://example.com/signed"

        url, _ = object_store.get_blob_url("user-1", "doc-1", for_write=True)

        assert url == "https://example.com/signed"
        s3_client.generate_presigned_url.assert_called_once_with(
            'put_object',
            Params={'Bucket': 'test-bucket', 'Key': 'sync/user-1/doc-1'},
            ExpiresIn=300,
        )

    @pytest.mark.unit
    def test_supports_blob_urls(self, object_store):
        assert object_store.supports_blob_urls() is True
        assert object_store.get_provider_type() == "s3"
