"""
User Records
============
User model and the UserStore interface consumed by the authorization flow,
plus a JSON-file implementation for single-node deployments.
"""

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Protocol, Union

from .models import IntegrationConfig
from ..utils.file_utils import validate_storage_key


@dataclass
class User:
    """A sync user and the integrations registered on their account."""
    id: str
    email: str = ""
    integrations: List[IntegrationConfig] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "integrations": [i.to_dict() for i in self.integrations],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            email=data.get("email", ""),
            integrations=[IntegrationConfig.from_dict(i) for i in data.get("integrations", [])],
        )


class UserStore(Protocol):
    """User record persistence."""

    def get_user(self, uid: str) -> User:
        ...

    def update_user(self, user: User) -> None:
        ...


class FileUserStore:
    """UserStore keeping one JSON document per user under a directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _user_path(self, uid: str) -> Path:
        if not validate_storage_key(uid):
            raise ValueError(f"Invalid user id: {uid!r}")
        return self.root / f"{uid}.json"

    def get_user(self, uid: str) -> User:
        """
        Load a user record.

        Raises:
            KeyError: If the user doesn't exist
        """
        path = self._user_path(uid)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return User.from_dict(json.load(f))
        except FileNotFoundError:
            raise KeyError(f"User not found: {uid}")

    def update_user(self, user: User) -> None:
        """Write a user record, replacing any previous version atomically."""
        path = self._user_path(user.id)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(user.to_dict(), f, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
