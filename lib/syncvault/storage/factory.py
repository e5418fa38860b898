"""
Blob Store Factory
==================
Factory for creating blob store instances from settings.
"""

from typing import Callable, Dict

from .base import BaseBlobStore
from .filesystem import DirectoryFileSystem
from .local_store import LocalBlobStore
from .object_store import ObjectBlobStore

from ..config.constants import (
    BLOB_BACKEND_LOCAL,
    BLOB_BACKEND_S3,
)
from ..config.settings import Settings


def _create_local(settings: Settings) -> BaseBlobStore:
    return LocalBlobStore(DirectoryFileSystem(settings.data_dir / "blobs"))


def _create_s3(settings: Settings) -> BaseBlobStore:
    return ObjectBlobStore(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        prefix=settings.s3_prefix,
        endpoint_url=settings.s3_endpoint_url,
        expiry_minutes=settings.presign_expiry_minutes,
    )


class BlobStoreFactory:
    """
    Factory for creating blob store instances.

    Usage:
        # From settings
        store = BlobStoreFactory.create_from_settings(Settings.from_env())

        # Explicit backend type
        store = BlobStoreFactory.create("local", settings)
    """

    # Registered backend builders
    _backends: Dict[str, Callable[[Settings], BaseBlobStore]] = {
        BLOB_BACKEND_LOCAL: _create_local,
        BLOB_BACKEND_S3: _create_s3,
    }

    @classmethod
    def create(cls, backend_type: str, settings: Settings) -> BaseBlobStore:
        """
        Create a blob store instance.

        Args:
            backend_type: Backend type ('local', 's3')
            settings: Runtime settings

        Returns:
            Configured blob store

        Raises:
            ValueError: If backend type unknown
        """
        backend_type = backend_type.lower().strip()

        if backend_type not in cls._backends:
            supported = ", ".join(cls._backends.keys())
            raise ValueError(
                f"Unknown blob backend: '{backend_type}'. "
                f"Supported: {supported}"
            )

        return cls._backends[backend_type](settings)

    @classmethod
    def create_from_settings(cls, settings: Settings) -> BaseBlobStore:
        """Create the backend named by settings.blob_backend."""
        return cls.create(settings.blob_backend, settings)

    @classmethod
    def get_supported_backends(cls) -> list:
        """Get list of supported backend types."""
        return list(cls._backends.keys())

    @classmethod
    def is_backend_supported(cls, backend_type: str) -> bool:
        """Check if a backend type is supported."""
        return backend_type.lower().strip() in cls._backends

    @classmethod
    def register_backend(cls, backend_type: str, builder: Callable[[Settings], BaseBlobStore]) -> None:
        """
        Register a new backend builder.

        Args:
            backend_type: Backend type identifier
            builder: Callable taking Settings and returning a BaseBlobStore
        """
        if not callable(builder):
            raise TypeError("Backend builder must be callable")
        cls._backends[backend_type.lower().strip()] = builder
