"""
Configuration module - Settings, credentials and constants management.
"""

from .credentials import (
    generate_fernet_key,
    get_encryption_key,
    decrypt_credential,
    resolve_secret,
    mask_credentials,
)

from .settings import Settings

from .constants import (
    SHARED_VERSION,
    ROOT_BLOB_ID,
    ROOT_INDEX_RECORD_SIZE,
    READ_STORAGE_EXPIRATION_MINUTES,
    CHECKSUM_PRIORITY,
    # Backend identifiers
    BLOB_BACKEND_LOCAL,
    BLOB_BACKEND_S3,
    # Integrations
    INTEGRATION_PROVIDER_GOOGLE_DRIVE,
    ROOT_FOLDER_ID,
    EXPORT_MIME_TYPE,
)

__all__ = [
    # Credentials
    "generate_fernet_key",
    "get_encryption_key",
    "decrypt_credential",
    "resolve_secret",
    "mask_credentials",
    # Settings
    "Settings",
    # Constants
    "SHARED_VERSION",
    "ROOT_BLOB_ID",
    "ROOT_INDEX_RECORD_SIZE",
    "READ_STORAGE_EXPIRATION_MINUTES",
    "CHECKSUM_PRIORITY",
    # Backend identifiers
    "BLOB_BACKEND_LOCAL",
    "BLOB_BACKEND_S3",
    # Integrations
    "INTEGRATION_PROVIDER_GOOGLE_DRIVE",
    "ROOT_FOLDER_ID",
    "EXPORT_MIME_TYPE",
]
