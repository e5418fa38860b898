"""
SyncVault Core
==============
Storage and synchronization core of a document-sync backend: blob stores
with a generation-tracked root index, and cloud-drive integrations.
"""

from .config import (
    SHARED_VERSION,
    Settings,
    mask_credentials,
)
from .errors import (
    SyncVaultError,
    BlobNotFoundError,
    InvalidChecksumError,
    UnsupportedOperationError,
    GenerationConflictError,
    IntegrationUnavailableError,
    StateMismatchError,
    ExchangeFailureError,
    PersistenceFailureError,
    UpstreamError,
)
from .storage import (
    BaseBlobStore,
    BlobReader,
    BlobStoreFactory,
    LocalBlobStore,
    ObjectBlobStore,
    DirectoryFileSystem,
    RootIndexView,
)
from .integrations import (
    FileUserStore,
    ServiceContext,
    oauth_redirect,
    oauth_complete,
    list_integration_folder,
    get_integration_metadata,
)

__version__ = SHARED_VERSION

__all__ = [
    # Config
    "SHARED_VERSION",
    "Settings",
    "mask_credentials",
    # Errors
    "SyncVaultError",
    "BlobNotFoundError",
    "InvalidChecksumError",
    "UnsupportedOperationError",
    "GenerationConflictError",
    "IntegrationUnavailableError",
    "StateMismatchError",
    "ExchangeFailureError",
    "PersistenceFailureError",
    "UpstreamError",
    # Storage
    "BaseBlobStore",
    "BlobReader",
    "BlobStoreFactory",
    "LocalBlobStore",
    "ObjectBlobStore",
    "DirectoryFileSystem",
    "RootIndexView",
    # Integrations
    "FileUserStore",
    "ServiceContext",
    "oauth_redirect",
    "oauth_complete",
    "list_integration_folder",
    "get_integration_metadata",
]
