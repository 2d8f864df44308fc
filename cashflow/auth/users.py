"""
User records and the directory they are looked up in.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from cashflow.config import DEFAULT_USERS, USERS_FILE


class UserRole(str, Enum):
    ADMIN = "admin"
    OPERATOR = "operacional"


@dataclass(frozen=True)
class User:
    id: str
    username: str
    name: str
    role: UserRole
    active: bool
    email: str = ""
    password_hash: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        role = str(data.get("role") or "operacional").lower().strip()
        return cls(
            id=str(data["id"]),
            username=str(data["username"]),
            name=str(data.get("name", data["username"])),
            role=UserRole(role),
            active=bool(data.get("active", True)),
            email=str(data.get("email") or ""),
            password_hash=str(data.get("password_hash") or "").lower(),
        )

    def public(self) -> dict:
        """Serializable view without the password hash."""
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "role": self.role.value,
            "active": self.active,
            "email": self.email,
        }


class UserDirectory:
    """Case-insensitive username → User lookup."""

    def __init__(self, users: Iterable[User]) -> None:
        self._by_username: dict[str, User] = {}
        for u in users:
            key = u.username.lower()
            if key in self._by_username:
                raise ValueError(f"Duplicate username: {u.username}")
            self._by_username[key] = u

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "UserDirectory":
        return cls(User.from_dict(r) for r in records)

    @classmethod
    def load(cls, path: Path = USERS_FILE) -> "UserDirectory":
        """Users from a JSON file, or the built-in table when the file does not exist."""
        if not path.exists():
            logger.warning(f"No users file at {path}; using built-in user table")
            return cls.from_records(DEFAULT_USERS)
        records = json.loads(path.read_text(encoding="utf-8"))
        logger.info(f"Loaded {len(records)} users from {path}")
        return cls.from_records(records)

    def find(self, username: str) -> Optional[User]:
        return self._by_username.get((username or "").strip().lower())

    def all(self) -> list[User]:
        return list(self._by_username.values())

    def __len__(self) -> int:
        return len(self._by_username)
