"""
SyncVault Core - Constants and Configuration
============================================
Shared constants for blob storage backends and the cloud-drive
integration engine.
"""

from typing import Dict, Tuple

# Version identifier for SyncVault Core
SHARED_VERSION = "1.0.0"
PACKAGE_NAME = "syncvault-core"

# =============================================================================
# BLOB STORAGE
# =============================================================================

# Reserved blob id holding a user's root index
ROOT_BLOB_ID: str = "root"

# Width of one historical root-index record:
# timestamp (20) + 1 separator + 64 hash characters + 1 newline
ROOT_INDEX_RECORD_SIZE: int = 86

# Presigned URL lifetime (minutes)
READ_STORAGE_EXPIRATION_MINUTES: int = 5

# Chunk size used when copying blob streams to disk (bytes)
COPY_CHUNK_SIZE: int = 1024 * 1024  # 1MB

# Backend identifiers
BLOB_BACKEND_LOCAL: str = "local"
BLOB_BACKEND_S3: str = "s3"

# =============================================================================
# CHECKSUMS
# =============================================================================

CHECKSUM_CRC32: str = "crc32"
CHECKSUM_CRC32C: str = "crc32c"
CHECKSUM_SHA1: str = "sha1"
CHECKSUM_SHA256: str = "sha256"

# Cheap checks before cryptographic ones
CHECKSUM_PRIORITY: Tuple[str, ...] = (
    CHECKSUM_CRC32,
    CHECKSUM_CRC32C,
    CHECKSUM_SHA1,
    CHECKSUM_SHA256,
)

# S3 response / request field carrying each algorithm
S3_CHECKSUM_FIELDS: Dict[str, str] = {
    CHECKSUM_CRC32: 'ChecksumCRC32',
    CHECKSUM_CRC32C: 'ChecksumCRC32C',
    CHECKSUM_SHA1: 'ChecksumSHA1',
    CHECKSUM_SHA256: 'ChecksumSHA256',
}

# =============================================================================
# INTEGRATIONS
# =============================================================================

# Provider identifiers
INTEGRATION_PROVIDER_GOOGLE_DRIVE: str = "google"

# Synthesized root folder id and its display name
ROOT_FOLDER_ID: str = "root"
GOOGLE_DRIVE_ROOT_NAME: str = "Google Drive root"

# Default listing depth for folder walks
DEFAULT_WALK_DEPTH: int = 3

# Where the browser lands after a successful authorization
INTEGRATIONS_SUCCESS_PATH: str = "/integrations"

# Path appended to the storage URL for the OAuth callback
GOOGLE_OAUTH_CALLBACK_PATH: str = "ui/api/integrations/google/complete"

# =============================================================================
# GOOGLE DRIVE
# =============================================================================

GOOGLE_MIME_TYPE_FOLDER: str = "application/vnd.google-apps.folder"
GOOGLE_MIME_TYPE_SPREADSHEET: str = "application/vnd.google-apps.spreadsheet"
GOOGLE_MIME_TYPE_PRESENTATION: str = "application/vnd.google-apps.presentation"
GOOGLE_MIME_TYPE_DOCUMENT: str = "application/vnd.google-apps.document"

# Universal format native documents are exported to
EXPORT_MIME_TYPE: str = "application/pdf"

GOOGLE_DRIVE_SCOPES: Tuple[str, ...] = ("https://www.googleapis.com/auth/drive",)

GOOGLE_FILE_FIELDS: str = (
    "id, name, appProperties, mimeType, size, modifiedTime, "
    "createdTime, fullFileExtension, thumbnailLink"
)

# =============================================================================
# API ENDPOINTS
# =============================================================================

GOOGLE_AUTH_URL: str = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URL: str = "https://accounts.google.com/o/oauth2/token"

# Timeout for token exchange and thumbnail requests (seconds)
HTTP_TIMEOUT_SECONDS: int = 30
