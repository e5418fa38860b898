"""
File Utilities
==============
Storage key validation and file name helpers.
"""

import os
from typing import Optional


def validate_storage_key(key: str) -> bool:
    """
    Validate that a user id or blob id is safe to use as a single path component.

    Rejects empty values, path separators, relative components and NUL bytes
    so a key can never escape its owner's directory.

    Args:
        key: Key to validate

    Returns:
        True if valid, False otherwise
    """
    if not key or not isinstance(key, str):
        return False

    return (
        '/' not in key and
        '\\' not in key and
        '\x00' not in key and
        key not in ('.', '..')
    )


def get_file_extension(filename: Optional[str]) -> str:
    """
    Get file extension from filename.

    Args:
        filename: Filename or path

    Returns:
        Extension including dot (e.g., '.pdf'), case preserved
    """
    if not filename:
        return ''

    _, ext = os.path.splitext(filename)
    return ext


def basename(path: str) -> str:
    """Last component of a slash separated path ('a/b/c' -> 'c')."""
    if not path:
        return path
    stripped = path.rstrip('/')
    if not stripped:
        return '/'
    return stripped.rsplit('/', 1)[-1]
