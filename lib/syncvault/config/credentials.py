"""
Credentials Management
======================
Handles the deployment encryption key and secret decryption.

OAuth client secrets may be supplied either in plain text or Fernet
encrypted. Encrypted values live in an environment variable with an
``_ENCRYPTED`` suffix and are decrypted with the key stored in
``SYNCVAULT_ENCRYPTION_KEY``.

To generate a new key:
    from cryptography.fernet import Fernet
    print(Fernet.generate_key().decode())

Or use: generate_fernet_key() from this module.
"""

import os
from typing import Dict, Any, Optional
from cryptography.fernet import Fernet

ENCRYPTION_KEY_ENV = "SYNCVAULT_ENCRYPTION_KEY"
ENCRYPTED_SUFFIX = "_ENCRYPTED"


def generate_fernet_key() -> str:
    """
    Generate a new Fernet encryption key.

    Returns:
        Base64-encoded Fernet key string
    """
    return Fernet.generate_key().decode()


def get_encryption_key(env: Optional[Dict[str, str]] = None) -> str:
    """
    Get the deployment encryption key from the environment.

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        Encryption key string

    Raises:
        ValueError: If no key is configured
    """
    env = os.environ if env is None else env
    encryption_key = env.get(ENCRYPTION_KEY_ENV)

    if not encryption_key:
        raise ValueError(
            f"No encryption key found. Set {ENCRYPTION_KEY_ENV} to decrypt "
            f"*{ENCRYPTED_SUFFIX} settings."
        )

    return encryption_key


def decrypt_credential(encrypted_value: str, encryption_key: str) -> str:
    """
    Decrypt a single encrypted credential value.

    Args:
        encrypted_value: Fernet-encrypted string
        encryption_key: Fernet key string

    Returns:
        Decrypted string value

    Raises:
        ValueError: If decryption fails
    """
    try:
        fernet = Fernet(encryption_key.encode())
        decrypted = fernet.decrypt(encrypted_value.encode()).decode()
        return decrypted
    except Exception as e:
        raise ValueError(f"Failed to decrypt credential: {e}")


def resolve_secret(name: str, env: Optional[Dict[str, str]] = None) -> str:
    """
    Read a secret setting, decrypting the ``<name>_ENCRYPTED`` variant if set.

    The plain variable wins when both are present.

    Args:
        name: Environment variable name (e.g. 'GDRIVE_CLIENT_SECRET')
        env: Mapping to read from (defaults to os.environ)

    Returns:
        Secret value, or empty string if neither variant is set
    """
    env = os.environ if env is None else env

    plain = env.get(name)
    if plain:
        return plain

    encrypted = env.get(f"{name}{ENCRYPTED_SUFFIX}")
    if not encrypted:
        return ""

    return decrypt_credential(encrypted, get_encryption_key(env))


def mask_credentials(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a masked copy of data for safe logging.

    Args:
        data: Dictionary potentially containing sensitive values

    Returns:
        Dictionary with sensitive values masked
    """
    if not isinstance(data, dict):
        return data

    masked = data.copy()
    sensitive_fields = [
        'access_token', 'refresh_token', 'token', 'id_token',
        'client_secret', 'code', 'state',
        'aws_access_key_id', 'aws_secret_access_key',
    ]

    for field in sensitive_fields:
        if field in masked and masked[field]:
            value = masked[field]
            if isinstance(value, str) and len(value) > 8:
                masked[field] = f"{value[:4]}...{value[-4:]}"
            else:
                masked[field] = "***"

    # Handle nested credentials
    for nested_key in ['credentials', 'token_data']:
        if nested_key in masked and isinstance(masked[nested_key], dict):
            masked[nested_key] = mask_credentials(masked[nested_key])

    return masked
