"""
Integration OAuth Flow
======================
OAuth2 authorization-code flow for cloud-drive integrations.

Flow:
    begin()     NoState -> Pending      state token assigned, auth URL returned
    complete()  Pending -> Registered   state checked, code exchanged,
                                        credential saved on the user record

A failure at any step leaves the user's integration list untouched. A
failure to persist keeps the pending state so the same callback can be
retried. Pending states never expire on their own; an abandoned flow stays
until the user starts a new one or it is dropped.
"""

import json
import logging
import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Sequence
from urllib.parse import urlencode

import requests

from .models import IntegrationConfig
from .users import UserStore
from ..config.constants import (
    GOOGLE_AUTH_URL,
    GOOGLE_DRIVE_SCOPES,
    GOOGLE_TOKEN_URL,
    HTTP_TIMEOUT_SECONDS,
)
from ..config.credentials import mask_credentials
from ..config.settings import Settings
from ..errors import (
    ExchangeFailureError,
    PersistenceFailureError,
    StateMismatchError,
)

logger = logging.getLogger(__name__)


@dataclass
class OAuthToken:
    """OAuth token as returned by the token endpoint."""
    access_token: str
    refresh_token: str = ""
    token_type: str = "Bearer"
    expiry: Optional[datetime] = None
    scope: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expiry": self.expiry.isoformat() if self.expiry else None,
            "scope": self.scope,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OAuthToken":
        expiry = None
        if data.get("expiry"):
            expiry = datetime.fromisoformat(data["expiry"])
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or "",
            token_type=data.get("token_type", "Bearer"),
            expiry=expiry,
            scope=data.get("scope", ""),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> "OAuthToken":
        return cls.from_dict(json.loads(raw))

    @classmethod
    def from_token_response(cls, data: Dict[str, Any]) -> "OAuthToken":
        """Build a token from a token-endpoint JSON response."""
        expiry = None
        if "expires_in" in data:
            expiry = datetime.now(timezone.utc) + timedelta(seconds=int(data["expires_in"]))
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", ""),
            token_type=data.get("token_type", "Bearer"),
            expiry=expiry,
            scope=data.get("scope", ""),
        )


class OAuthStateRegistry:
    """
    Pending authorizations keyed by user id.

    At most one authorization is in flight per user: create() overwrites
    any earlier entry. All access goes through a lock so concurrent
    requests, for the same or different users, never interleave.
    """

    TOKEN_BYTES = 32

    def __init__(self):
        self._states: Dict[str, IntegrationConfig] = {}
        self._lock = threading.Lock()

    def create(self, uid: str, config: IntegrationConfig) -> str:
        """
        Register a pending authorization for uid.

        Assigns a fresh unpredictable token to config.id.

        Returns:
            The assigned token
        """
        token = secrets.token_urlsafe(self.TOKEN_BYTES)
        config.id = token
        with self._lock:
            self._states[uid] = config
        return token

    def compare(self, uid: str, token: Optional[str]) -> bool:
        """True iff uid has a pending entry whose token equals token."""
        with self._lock:
            config = self._states.get(uid)
        if config is None or not token:
            return False
        return secrets.compare_digest(config.id.encode("utf-8"), token.encode("utf-8"))

    def get(self, uid: str) -> Optional[IntegrationConfig]:
        with self._lock:
            return self._states.get(uid)

    def drop(self, uid: str) -> None:
        """Remove uid's pending entry, if any."""
        with self._lock:
            self._states.pop(uid, None)

    def drop_if(self, uid: str, token: str) -> bool:
        """Remove uid's pending entry only if it still carries token."""
        with self._lock:
            config = self._states.get(uid)
            if config is None or config.id != token:
                return False
            del self._states[uid]
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)


class GoogleOAuthClient:
    """
    OAuth2 client for Google Drive.

    Builds the consent URL and exchanges authorization codes for tokens.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_url: str,
        scopes: Sequence[str] = GOOGLE_DRIVE_SCOPES,
        auth_url: str = GOOGLE_AUTH_URL,
        token_url: str = GOOGLE_TOKEN_URL,
        session: Optional[requests.Session] = None,
    ):
        if not client_id:
            raise ValueError("Missing required credential: client_id")
        if not client_secret:
            raise ValueError("Missing required credential: client_secret")

        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self.scopes = tuple(scopes)
        self.auth_url = auth_url
        self.token_url = token_url
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["GoogleOAuthClient"]:
        """Client for the configured Drive app, or None if not configured."""
        if not settings.gdrive_configured:
            return None
        return cls(
            client_id=settings.gdrive_client_id,
            client_secret=settings.gdrive_client_secret,
            redirect_url=settings.gdrive_redirect_url,
        )

    def authorization_url(self, state: str) -> str:
        """
        Consent URL for the user's browser.

        Args:
            state: Per-user CSRF token echoed back on the callback

        Returns:
            Absolute authorization URL
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_url,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "access_type": "offline",  # Get refresh token
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}"

    def exchange_code(self, code: str) -> OAuthToken:
        """
        Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the callback

        Returns:
            OAuth token

        Raises:
            ExchangeFailureError: If the request fails or is rejected
        """
        if not code:
            raise ExchangeFailureError("missing authorization code")

        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_url,
        }

        try:
            response = self.session.post(self.token_url, data=data, timeout=HTTP_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            raise ExchangeFailureError(str(e)) from e
        finally:
            data.clear()  # Clear credentials from memory

        if response.status_code != 200:
            raise ExchangeFailureError(
                f"token endpoint returned {response.status_code}: {response.text[:200]}"
            )

        try:
            payload = response.json()
            token = OAuthToken.from_token_response(payload)
        except (ValueError, KeyError) as e:
            raise ExchangeFailureError(f"malformed token response: {e}") from e

        logger.debug(f"Token exchange succeeded: {mask_credentials(token.to_dict())}")
        return token


class IntegrationAuthorizer:
    """Drives one provider's authorization flow against the user store."""

    def __init__(
        self,
        oauth_client: GoogleOAuthClient,
        states: OAuthStateRegistry,
        user_store: UserStore,
    ):
        self.oauth_client = oauth_client
        self.states = states
        self.user_store = user_store

    def begin(self, uid: str, config: IntegrationConfig) -> str:
        """
        Start an authorization for uid.

        Returns:
            Authorization URL carrying the new state token
        """
        token = self.states.create(uid, config)
        logger.info(f"Authorization started for user {uid} ({config.provider})")
        return self.oauth_client.authorization_url(token)

    def complete(self, uid: str, code: str, state: str) -> IntegrationConfig:
        """
        Finish an authorization and register the integration.

        Args:
            uid: User completing the flow
            code: Authorization code from the callback
            state: State token from the callback

        Returns:
            The registered integration

        Raises:
            StateMismatchError: No pending state or token mismatch
            ExchangeFailureError: Code exchange rejected
            PersistenceFailureError: User record could not be read or updated
        """
        if not self.states.compare(uid, state):
            raise StateMismatchError("Authentication request expired")

        token = self.oauth_client.exchange_code(code)

        pending = self.states.get(uid)
        if pending is None or pending.id != state:
            raise StateMismatchError("Authentication request expired")

        integration = replace(pending, access_token=token.to_json())

        try:
            user = self.user_store.get_user(uid)
        except Exception as e:
            logger.error(f"Unable to load user {uid}: {e}")
            raise PersistenceFailureError(f"unable to load user {uid}") from e

        updated = replace(user, integrations=[*user.integrations, integration])

        try:
            self.user_store.update_user(updated)
        except Exception as e:
            logger.error(f"error updating user {uid}: {e}")
            raise PersistenceFailureError(f"unable to update user {uid}") from e

        self.states.drop_if(uid, state)
        logger.info(f"Integration {integration.provider} registered for user {uid}")
        return integration
