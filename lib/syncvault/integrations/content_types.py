"""
Content Type Translation
========================
Native Google editor documents cannot be downloaded as-is; they are
exported to a universal format instead. Every other type is served as
stored.
"""

from ..config.constants import (
    EXPORT_MIME_TYPE,
    GOOGLE_MIME_TYPE_DOCUMENT,
    GOOGLE_MIME_TYPE_PRESENTATION,
    GOOGLE_MIME_TYPE_SPREADSHEET,
)

CONVERTIBLE_MIME_TYPES = frozenset({
    GOOGLE_MIME_TYPE_SPREADSHEET,
    GOOGLE_MIME_TYPE_PRESENTATION,
    GOOGLE_MIME_TYPE_DOCUMENT,
})


def is_convertible(native_type: str) -> bool:
    """Check if a native type must be exported rather than downloaded"""
    return native_type in CONVERTIBLE_MIME_TYPES


def provided_content_type(native_type: str) -> str:
    """
    Content type a download of native_type will actually yield.

    Args:
        native_type: MIME type reported by the provider

    Returns:
        EXPORT_MIME_TYPE for convertible documents, otherwise native_type
    """
    if is_convertible(native_type):
        return EXPORT_MIME_TYPE
    return native_type
