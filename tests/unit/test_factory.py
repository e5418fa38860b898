"""
Unit Tests: Blob Store Factory
==============================
Tests backend selection and registration.
"""

from unittest.mock import patch

import pytest


class TestBlobStoreFactory:
    """Tests for BlobStoreFactory."""

    @pytest.mark.unit
    def test_creates_local_store(self, settings):
        from syncvault.storage import BlobStoreFactory, LocalBlobStore

        store = BlobStoreFactory.create("local", settings)

        assert isinstance(store, LocalBlobStore)
        assert store.filesystem.root == settings.data_dir / "blobs"

    @pytest.mark.unit
    def test_type_is_normalized(self, settings):
        from syncvault.storage import BlobStoreFactory, LocalBlobStore

        assert isinstance(BlobStoreFactory.create("  LOCAL ", settings), LocalBlobStore)

    @pytest.mark.unit
    def test_creates_s3_store(self, settings):
        from syncvault.storage import BlobStoreFactory, ObjectBlobStore

        settings.blob_backend = "s3"
        settings.s3_bucket = "sync-bucket"
        settings.s3_prefix = "blobs/"

        with patch("syncvault.storage.object_store.boto3.client") as client:
            store = BlobStoreFactory.create_from_settings(settings)

        assert isinstance(store, ObjectBlobStore)
        assert store.bucket == "sync-bucket"
        assert store.prefix == "blobs/"
        client.assert_called_once_with("s3", region_name=None, endpoint_url=None)

    @pytest.mark.unit
    def test_unknown_backend(self, settings):
        from syncvault.storage import BlobStoreFactory

        with pytest.raises(ValueError, match="Unknown blob backend"):
            BlobStoreFactory.create("ftp", settings)

    @pytest.mark.unit
    def test_supported_backends(self):
        from syncvault.storage import BlobStoreFactory

        assert set(BlobStoreFactory.get_supported_backends()) >= {"local", "s3"}
        assert BlobStoreFactory.is_backend_supported("S3")
        assert not BlobStoreFactory.is_backend_supported("ftp")

    @pytest.mark.unit
    def test_register_backend(self, settings, local_store):
        from syncvault.storage import BlobStoreFactory

        BlobStoreFactory.register_backend("memory", lambda s: local_store)
        try:
            assert BlobStoreFactory.create("memory", settings) is local_store
        finally:
            BlobStoreFactory._backends.pop("memory", None)

    @pytest.mark.unit
    def test_register_requires_callable(self):
        from syncvault.storage import BlobStoreFactory

        with pytest.raises(TypeError):
            BlobStoreFactory.register_backend("broken", "not-callable")
