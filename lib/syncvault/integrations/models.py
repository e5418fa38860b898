"""
Integration Models
==================
Integration configuration and the folder/file metadata tree produced by
remote folder walks.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..config.constants import INTEGRATION_PROVIDER_GOOGLE_DRIVE


@dataclass
class IntegrationConfig:
    """
    A registered (or pending) cloud-drive connection.

    id doubles as the CSRF state token while the authorization is pending.
    access_token holds the serialized OAuth credential once registered.
    """
    id: str = ""
    provider: str = INTEGRATION_PROVIDER_GOOGLE_DRIVE
    name: str = ""
    access_token: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "provider": self.provider,
            "name": self.name,
            "accessToken": self.access_token,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntegrationConfig":
        return cls(
            id=data.get("id", ""),
            provider=data.get("provider", INTEGRATION_PROVIDER_GOOGLE_DRIVE),
            name=data.get("name", ""),
            access_token=data.get("accessToken", ""),
        )


@dataclass
class IntegrationFile:
    """A leaf entry of a remote folder listing."""
    id: str
    name: str
    size: int = 0
    source_type: str = ""
    provided_type: str = ""
    extension: str = ""
    changed: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fileId": self.id,
            "name": self.name,
            "size": self.size,
            "sourceFileType": self.source_type,
            "providedFileType": self.provided_type,
            "fileType": self.extension,
            "fileExtension": self.extension,
            "dateChanged": self.changed.isoformat() if self.changed else None,
        }


@dataclass
class IntegrationMetadata(IntegrationFile):
    """Single-file metadata, including the thumbnail bytes when available."""
    thumbnail: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["thumbnail"] = base64.b64encode(self.thumbnail).decode("ascii")
        return data


@dataclass
class IntegrationFolder:
    """A folder node; subfolders and files keep provider listing order."""
    id: str
    name: str
    subfolders: List["IntegrationFolder"] = field(default_factory=list)
    files: List[IntegrationFile] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subfolders": [folder.to_dict() for folder in self.subfolders],
            "files": [f.to_dict() for f in self.files],
        }
