"""User, role and session data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(Enum):
    """Statically known account roles."""

    USER = "user"
    ADMIN = "admin"


@dataclass
class User:
    """A registered account."""

    id: int
    username: str
    password_hash: str
    salt: str
    email: Optional[str] = None
    role: Role = Role.USER


@dataclass(frozen=True)
class Session:
    """Authenticated caller context, passed explicitly into service calls."""

    user_id: int
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
