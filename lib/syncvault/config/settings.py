"""
Runtime Settings
================
Process configuration loaded once at startup from the environment
(optionally seeded from a .env file).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from .constants import (
    BLOB_BACKEND_LOCAL,
    GOOGLE_OAUTH_CALLBACK_PATH,
    READ_STORAGE_EXPIRATION_MINUTES,
)
from .credentials import resolve_secret

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Configuration shared by the blob stores and the integration engine."""

    storage_url: str = "http://localhost:3000"
    data_dir: Path = Path("data")
    blob_backend: str = BLOB_BACKEND_LOCAL

    # Object storage
    s3_bucket: str = ""
    s3_region: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    s3_prefix: str = ""
    presign_expiry_minutes: int = READ_STORAGE_EXPIRATION_MINUTES

    # Google Drive OAuth client
    gdrive_client_id: str = ""
    gdrive_client_secret: str = ""

    @property
    def gdrive_redirect_url(self) -> str:
        """OAuth callback URL derived from the public storage URL."""
        base = self.storage_url
        if not base.endswith('/'):
            base += '/'
        return base + GOOGLE_OAUTH_CALLBACK_PATH

    @property
    def gdrive_configured(self) -> bool:
        return bool(self.gdrive_client_id and self.gdrive_client_secret)

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env_file: Optional .env file loaded before reading the environment.
                Existing variables are not overridden.

        Returns:
            Populated Settings instance
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        settings = cls(
            storage_url=os.getenv("SYNCVAULT_STORAGE_URL", cls.storage_url),
            data_dir=Path(os.getenv("SYNCVAULT_DATA_DIR", str(cls.data_dir))),
            blob_backend=os.getenv("SYNCVAULT_BLOB_BACKEND", BLOB_BACKEND_LOCAL).lower().strip(),
            s3_bucket=os.getenv("SYNCVAULT_S3_BUCKET", ""),
            s3_region=os.getenv("SYNCVAULT_S3_REGION") or None,
            s3_endpoint_url=os.getenv("SYNCVAULT_S3_ENDPOINT_URL") or None,
            s3_prefix=os.getenv("SYNCVAULT_S3_PREFIX", ""),
            presign_expiry_minutes=int(
                os.getenv("SYNCVAULT_PRESIGN_EXPIRY_MINUTES", READ_STORAGE_EXPIRATION_MINUTES)
            ),
            gdrive_client_id=os.getenv("GDRIVE_CLIENT_ID", ""),
            gdrive_client_secret=resolve_secret("GDRIVE_CLIENT_SECRET"),
        )

        if not settings.gdrive_configured:
            logger.warning(
                "GDRIVE_CLIENT_ID or GDRIVE_CLIENT_SECRET not filled, "
                "Google Drive integration will not be available."
            )

        return settings
