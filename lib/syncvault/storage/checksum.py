"""
Checksum Codec
==============
Parses and formats tagged checksums of the form ``<algorithm>=<value>``.

Supported algorithms: crc32, crc32c, sha1, sha256. Values are opaque to
this layer; the backend that receives them is responsible for validating
their encoding.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from ..config.constants import (
    CHECKSUM_CRC32,
    CHECKSUM_CRC32C,
    CHECKSUM_SHA1,
    CHECKSUM_SHA256,
    CHECKSUM_PRIORITY,
)
from ..errors import InvalidChecksumError

SEPARATOR = "="


class ChecksumAlgorithm(Enum):
    """Checksum algorithms accepted on the wire."""
    CRC32 = CHECKSUM_CRC32
    CRC32C = CHECKSUM_CRC32C
    SHA1 = CHECKSUM_SHA1
    SHA256 = CHECKSUM_SHA256


@dataclass(frozen=True)
class Checksum:
    """A checksum value tagged with exactly one algorithm."""
    algorithm: ChecksumAlgorithm
    value: str

    def __str__(self) -> str:
        return format_checksum(self)


def parse_checksum(tagged: str) -> Checksum:
    """
    Parse a tagged checksum string.

    Args:
        tagged: String such as 'sha256=9f86d0...'

    Returns:
        Parsed Checksum

    Raises:
        InvalidChecksumError: If the tag is missing or the algorithm is unknown
    """
    if not tagged or SEPARATOR not in tagged:
        raise InvalidChecksumError(f"unknown hash method {tagged!r}")

    name, value = tagged.split(SEPARATOR, 1)
    try:
        algorithm = ChecksumAlgorithm(name)
    except ValueError:
        raise InvalidChecksumError(f"unknown hash method {tagged!r}")

    return Checksum(algorithm=algorithm, value=value)


def format_checksum(checksum: Checksum) -> str:
    """Format a checksum back to its tagged wire form."""
    return f"{checksum.algorithm.value}{SEPARATOR}{checksum.value}"


def select_checksum(candidates: Mapping[str, Optional[str]]) -> Optional[Checksum]:
    """
    Pick one checksum out of several reported by a backend.

    The first algorithm present in priority order wins:
    crc32 > crc32c > sha1 > sha256.

    Args:
        candidates: Algorithm name -> reported value (None or '' if absent)

    Returns:
        Selected Checksum, or None when no algorithm was reported
    """
    for name in CHECKSUM_PRIORITY:
        value = candidates.get(name)
        if value:
            return Checksum(algorithm=ChecksumAlgorithm(name), value=value)
    return None
