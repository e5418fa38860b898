"""
Pytest Configuration and Fixtures
==================================
Loads test credentials from environment and provides reusable fixtures.
"""

import os
import sys
import pytest
from pathlib import Path
from unittest.mock import MagicMock
from dotenv import load_dotenv

# Add lib to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "lib"))

# Load test environment variables
env_file = project_root / ".env.test"
if env_file.exists():
    load_dotenv(env_file)
else:
    # Try loading from CI environment
    load_dotenv()


# =============================================================================
# CREDENTIAL FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def google_drive_token():
    """Google Drive OAuth client and refresh token from environment."""
    creds = {
        "client_id": os.getenv("TEST_GDRIVE_CLIENT_ID"),
        "client_secret": os.getenv("TEST_GDRIVE_CLIENT_SECRET"),
        "refresh_token": os.getenv("TEST_GDRIVE_REFRESH_TOKEN"),
    }

    if not all(creds.values()):
        pytest.skip("Google Drive credentials not configured")

    return creds


@pytest.fixture(scope="session")
def google_drive_test_folder():
    """Google Drive test folder ID."""
    folder_id = os.getenv("TEST_GDRIVE_TEST_FOLDER_ID")
    if not folder_id:
        pytest.skip("Google Drive test folder not configured")
    return folder_id


@pytest.fixture(scope="session")
def s3_bucket():
    """S3 bucket for live object store tests."""
    bucket = os.getenv("TEST_S3_BUCKET")
    if not bucket:
        pytest.skip("S3 bucket not configured")
    return bucket


@pytest.fixture(scope="session")
def encryption_key():
    """Fernet encryption key for testing."""
    key = os.getenv("TEST_ENCRYPTION_KEY")

    if not key:
        # Generate a temporary key for unit tests
        from cryptography.fernet import Fernet
        key = Fernet.generate_key().decode()

    return key


# =============================================================================
# STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def local_store(tmp_path):
    """LocalBlobStore on a temporary directory."""
    from syncvault.storage import DirectoryFileSystem, LocalBlobStore

    return LocalBlobStore(DirectoryFileSystem(tmp_path / "blobs"))


@pytest.fixture
def s3_client():
    """Mocked boto3 S3 client."""
    return MagicMock(name="s3_client")


@pytest.fixture
def object_store(s3_client):
    """ObjectBlobStore backed by the mocked client."""
    from syncvault.storage import ObjectBlobStore

    return ObjectBlobStore(bucket="test-bucket", prefix="sync/", client=s3_client)


# =============================================================================
# INTEGRATION FIXTURES
# =============================================================================

class InMemoryUserStore:
    """UserStore keeping users in a dict; failures can be injected."""

    def __init__(self, users=None):
        self.users = {u.id: u for u in (users or [])}
        self.fail_get = False
        self.fail_update = False
        self.updates = 0

    def get_user(self, uid):
        if self.fail_get:
            raise OSError("user store unavailable")
        return self.users[uid]

    def update_user(self, user):
        if self.fail_update:
            raise OSError("user store unavailable")
        self.updates += 1
        self.users[user.id] = user


@pytest.fixture
def user_store():
    """In-memory user store holding one user, 'user-1'."""
    from syncvault.integrations import User

    return InMemoryUserStore([User(id="user-1", email="user@example.com")])


@pytest.fixture
def settings(tmp_path):
    """Settings with a configured Drive client and local blobs."""
    from syncvault.config import Settings

    return Settings(
        storage_url="https://sync.example.com",
        data_dir=tmp_path,
        gdrive_client_id="client-id.apps.googleusercontent.com",
        gdrive_client_secret="client-secret-value",
    )


@pytest.fixture
def oauth_client(settings):
    """GoogleOAuthClient with a mocked HTTP session."""
    from syncvault.integrations import GoogleOAuthClient

    return GoogleOAuthClient(
        client_id=settings.gdrive_client_id,
        client_secret=settings.gdrive_client_secret,
        redirect_url=settings.gdrive_redirect_url,
        session=MagicMock(name="session"),
    )


@pytest.fixture
def drive_service():
    """Mocked Drive v3 service resource."""
    return MagicMock(name="drive_service")


@pytest.fixture
def http_session():
    """Mocked requests session for thumbnails."""
    return MagicMock(name="http_session")


@pytest.fixture
def mock_env(monkeypatch):
    """Helper to mock environment variables."""
    def _mock_env(env_dict):
        for key, value in env_dict.items():
            monkeypatch.setenv(key, value)
    return _mock_env


# =============================================================================
# TEST MARKERS COLLECTION
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: Tests that call external APIs")
    config.addinivalue_line("markers", "google_drive: Tests requiring Google Drive credentials")
    config.addinivalue_line("markers", "s3: Tests requiring S3 credentials")
