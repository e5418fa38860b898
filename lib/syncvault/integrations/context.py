"""
Service Context
===============
Everything a request handler needs, built once at startup and passed in
explicitly: settings, the user store, the OAuth state registry, the Drive
OAuth client (None when not configured), an HTTP session and the blob
store.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests

from .google_drive import GoogleDriveIntegration
from .models import IntegrationConfig
from .oauth import GoogleOAuthClient, IntegrationAuthorizer, OAuthStateRegistry
from .users import UserStore
from ..config.constants import INTEGRATION_PROVIDER_GOOGLE_DRIVE
from ..config.settings import Settings
from ..errors import IntegrationUnavailableError
from ..storage.base import BaseBlobStore
from ..storage.factory import BlobStoreFactory
from ..storage.root_index import RootIndexView

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    settings: Settings
    user_store: UserStore
    states: OAuthStateRegistry = field(default_factory=OAuthStateRegistry)
    oauth_client: Optional[GoogleOAuthClient] = None
    http: requests.Session = field(default_factory=requests.Session)
    blob_store: Optional[BaseBlobStore] = None

    @classmethod
    def build(cls, settings: Settings, user_store: UserStore) -> "ServiceContext":
        """
        Wire up a context from settings.

        A missing Drive client is not fatal; the integration endpoints then
        report the integration as unavailable.
        """
        oauth_client = GoogleOAuthClient.from_settings(settings)
        blob_store = BlobStoreFactory.create_from_settings(settings)
        logger.info(
            f"Service context ready (blob backend: {blob_store.get_provider_type()}, "
            f"google drive: {'on' if oauth_client else 'off'})"
        )
        return cls(
            settings=settings,
            user_store=user_store,
            oauth_client=oauth_client,
            blob_store=blob_store,
        )

    @property
    def authorizer(self) -> IntegrationAuthorizer:
        """
        Authorization flow for the Drive integration.

        Raises:
            IntegrationUnavailableError: If no OAuth client is configured
        """
        if self.oauth_client is None:
            raise IntegrationUnavailableError(
                "Google Drive integration is not available, "
                "please read the documentation in order to enable it."
            )
        return IntegrationAuthorizer(self.oauth_client, self.states, self.user_store)

    def open_integration(self, config: IntegrationConfig) -> GoogleDriveIntegration:
        """Client for a registered integration."""
        if config.provider != INTEGRATION_PROVIDER_GOOGLE_DRIVE:
            raise IntegrationUnavailableError(f"Unsupported integration provider: {config.provider}")
        if self.oauth_client is None:
            raise IntegrationUnavailableError("Google Drive integration is not available")
        return GoogleDriveIntegration.from_config(config, self.oauth_client, http=self.http)

    def find_integration(self, uid: str, integration_id: str) -> IntegrationConfig:
        """
        Look up one of the user's registered integrations.

        Raises:
            KeyError: If the user or the integration doesn't exist
        """
        user = self.user_store.get_user(uid)
        for integration in user.integrations:
            if integration.id == integration_id:
                return integration
        raise KeyError(f"Integration not found: {integration_id}")

    def root_index(self, uid: str) -> RootIndexView:
        if self.blob_store is None:
            raise RuntimeError("No blob store configured")
        return RootIndexView(self.blob_store, uid)
