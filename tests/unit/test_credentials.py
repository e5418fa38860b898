"""
Unit Tests: Credentials Module
==============================
Tests encryption key handling, secret resolution and masking.
No external API calls - runs fast.
"""

import pytest
from cryptography.fernet import Fernet


class TestGenerateFernetKey:
    """Tests for generate_fernet_key function."""

    @pytest.mark.unit
    def test_generates_valid_key(self):
        """Generated key should be valid Fernet format."""
        from syncvault.config import generate_fernet_key

        key = generate_fernet_key()

        # Should be base64-encoded, 44 chars
        assert len(key) == 44
        assert key.endswith('=')

        # Should be usable as Fernet key
        fernet = Fernet(key.encode())
        assert fernet is not None

    @pytest.mark.unit
    def test_generates_unique_keys(self):
        """Each call should generate a different key."""
        from syncvault.config import generate_fernet_key

        keys = [generate_fernet_key() for _ in range(10)]

        assert len(set(keys)) == 10


class TestDecryptCredential:
    """Tests for decrypt_credential function."""

    @pytest.mark.unit
    def test_decrypts_valid_credential(self, encryption_key):
        """Should decrypt a properly encrypted value."""
        from syncvault.config import decrypt_credential

        fernet = Fernet(encryption_key.encode())
        original = "my-client-secret"
        encrypted = fernet.encrypt(original.encode()).decode()

        assert decrypt_credential(encrypted, encryption_key) == original

    @pytest.mark.unit
    def test_raises_on_invalid_key(self):
        """Should raise ValueError with wrong key."""
        from syncvault.config import decrypt_credential

        key1 = Fernet.generate_key().decode()
        key2 = Fernet.generate_key().decode()
        encrypted = Fernet(key1.encode()).encrypt(b"secret").decode()

        with pytest.raises(ValueError, match="Failed to decrypt"):
            decrypt_credential(encrypted, key2)

    @pytest.mark.unit
    def test_raises_on_invalid_encrypted_value(self, encryption_key):
        """Should raise ValueError with garbage input."""
        from syncvault.config import decrypt_credential

        with pytest.raises(ValueError, match="Failed to decrypt"):
            decrypt_credential("not-valid-encrypted-data", encryption_key)


class TestGetEncryptionKey:
    """Tests for get_encryption_key function."""

    @pytest.mark.unit
    def test_gets_key_from_environment(self, mock_env):
        """Should retrieve key from environment variable."""
        from syncvault.config import get_encryption_key

        mock_env({"SYNCVAULT_ENCRYPTION_KEY": "test-key-value"})

        assert get_encryption_key() == "test-key-value"

    @pytest.mark.unit
    def test_reads_explicit_mapping(self):
        """An explicit mapping takes the place of os.environ."""
        from syncvault.config import get_encryption_key

        assert get_encryption_key({"SYNCVAULT_ENCRYPTION_KEY": "k"}) == "k"

    @pytest.mark.unit
    def test_raises_when_missing(self):
        """Should raise ValueError if no key is configured."""
        from syncvault.config import get_encryption_key

        with pytest.raises(ValueError, match="No encryption key found"):
            get_encryption_key({})


class TestResolveSecret:
    """Tests for resolve_secret function."""

    @pytest.mark.unit
    def test_plain_value(self):
        from syncvault.config import resolve_secret

        assert resolve_secret("GDRIVE_CLIENT_SECRET", {"GDRIVE_CLIENT_SECRET": "plain"}) == "plain"

    @pytest.mark.unit
    def test_decrypts_encrypted_variant(self, encryption_key):
        """Should decrypt <name>_ENCRYPTED with the deployment key."""
        from syncvault.config import resolve_secret

        encrypted = Fernet(encryption_key.encode()).encrypt(b"gdrive-secret").decode()
        env = {
            "GDRIVE_CLIENT_SECRET_ENCRYPTED": encrypted,
            "SYNCVAULT_ENCRYPTION_KEY": encryption_key,
        }

        assert resolve_secret("GDRIVE_CLIENT_SECRET", env) == "gdrive-secret"

    @pytest.mark.unit
    def test_plain_value_wins(self, encryption_key):
        from syncvault.config import resolve_secret

        env = {
            "GDRIVE_CLIENT_SECRET": "plain",
            "GDRIVE_CLIENT_SECRET_ENCRYPTED": "ignored",
        }

        assert resolve_secret("GDRIVE_CLIENT_SECRET", env) == "plain"

    @pytest.mark.unit
    def test_missing_returns_empty(self):
        from syncvault.config import resolve_secret

        assert resolve_secret("GDRIVE_CLIENT_SECRET", {}) == ""

    @pytest.mark.unit
    def test_encrypted_without_key_raises(self):
        from syncvault.config import resolve_secret

        with pytest.raises(ValueError, match="No encryption key found"):
            resolve_secret("GDRIVE_CLIENT_SECRET", {"GDRIVE_CLIENT_SECRET_ENCRYPTED": "x"})


class TestMaskCredentials:
    """Tests for mask_credentials function."""

    @pytest.mark.unit
    def test_masks_sensitive_fields(self):
        """Should mask known sensitive fields."""
        from syncvault.config import mask_credentials

        data = {
            "access_token": "ya29.abcdefghijklmnop",
            "client_secret": "1234567890abcdef",
            "state": "state-token-value",
            "uid": "not-sensitive",
        }

        masked = mask_credentials(data)

        assert masked["access_token"] == "ya29...mnop"
        assert masked["client_secret"] == "1234...cdef"
        assert masked["state"] == "stat...alue"
        assert masked["uid"] == "not-sensitive"

    @pytest.mark.unit
    def test_masks_short_values(self):
        """Short values should be fully masked."""
        from syncvault.config import mask_credentials

        assert mask_credentials({"code": "short"})["code"] == "***"

    @pytest.mark.unit
    def test_handles_nested_credentials(self):
        """Should mask nested credential dictionaries."""
        from syncvault.config import mask_credentials

        data = {
            "token_data": {
                "refresh_token": "very-long-refresh-token-value",
            },
        }

        masked = mask_credentials(data)

        assert masked["token_data"]["refresh_token"] == "very...alue"
        # Original untouched
        assert data["token_data"]["refresh_token"] == "very-long-refresh-token-value"

    @pytest.mark.unit
    def test_handles_non_dict_input(self):
        """Should return non-dict input unchanged."""
        from syncvault.config import mask_credentials

        assert mask_credentials("string") == "string"
        assert mask_credentials(123) == 123
        assert mask_credentials(None) is None
