"""
Utilities module - Storage key validation and file name helpers.
"""

from .file_utils import (
    validate_storage_key,
    get_file_extension,
    basename,
)

__all__ = [
    "validate_storage_key",
    "get_file_extension",
    "basename",
]
