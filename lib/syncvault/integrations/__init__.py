"""
SyncVault Core - Integrations
=============================
External cloud-drive integrations used as import sources.

Supported:
    - Google Drive (OAuth2 authorization, folder walks, export, upload)
"""

from .models import (
    IntegrationConfig,
    IntegrationFile,
    IntegrationFolder,
    IntegrationMetadata,
)
from .users import User, UserStore, FileUserStore
from .oauth import (
    OAuthToken,
    OAuthStateRegistry,
    GoogleOAuthClient,
    IntegrationAuthorizer,
)
from .content_types import CONVERTIBLE_MIME_TYPES, is_convertible, provided_content_type
from .walker import (
    RemoteDirectoryWalker,
    RemoteEntry,
    RemoteFile,
    RemoteFolder,
    RemoteListingSource,
)
from .google_drive import GoogleDriveIntegration, to_remote_entry
from .context import ServiceContext
from .handlers import (
    oauth_redirect,
    oauth_complete,
    list_integration_folder,
    get_integration_metadata,
)

__all__ = [
    # Models
    "IntegrationConfig",
    "IntegrationFile",
    "IntegrationFolder",
    "IntegrationMetadata",
    "User",
    "UserStore",
    "FileUserStore",
    # Authorization
    "OAuthToken",
    "OAuthStateRegistry",
    "GoogleOAuthClient",
    "IntegrationAuthorizer",
    # Content types
    "CONVERTIBLE_MIME_TYPES",
    "is_convertible",
    "provided_content_type",
    # Walking
    "RemoteDirectoryWalker",
    "RemoteEntry",
    "RemoteFile",
    "RemoteFolder",
    "RemoteListingSource",
    # Google Drive
    "GoogleDriveIntegration",
    "to_remote_entry",
    # Wiring
    "ServiceContext",
    "oauth_redirect",
    "oauth_complete",
    "list_integration_folder",
    "get_integration_metadata",
]
