"""
Error Taxonomy
==============
Exceptions raised by the blob stores and the integration engine.

Each error also derives from the closest builtin so callers that already
catch FileNotFoundError, ValueError or ConnectionError keep working.
"""


class SyncVaultError(Exception):
    """Base class for all SyncVault errors."""


class BlobNotFoundError(SyncVaultError, FileNotFoundError):
    """A content blob does not exist. Never raised for a missing root index."""

    def __init__(self, uid: str, blob_id: str):
        self.uid = uid
        self.blob_id = blob_id
        super().__init__(f"Blob not found: {blob_id} (user {uid})")


class InvalidChecksumError(SyncVaultError, ValueError):
    """Checksum tag uses an unsupported algorithm or has no tag at all."""


class UnsupportedOperationError(SyncVaultError, NotImplementedError):
    """The backend lacks the requested capability (e.g. presigned URLs)."""


class GenerationConflictError(SyncVaultError):
    """Root index generation moved between read and write."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Root index generation changed: expected {expected}, found {actual}"
        )


class IntegrationUnavailableError(SyncVaultError):
    """The integration cannot be used: no OAuth client configured or an unreadable stored token."""


class StateMismatchError(SyncVaultError):
    """OAuth callback state does not match the pending request."""


class ExchangeFailureError(SyncVaultError):
    """Upstream rejected the authorization-code exchange."""


class PersistenceFailureError(SyncVaultError):
    """Credential could not be saved to the user record."""


class UpstreamError(SyncVaultError, ConnectionError):
    """Network or API failure while talking to a remote provider."""
