"""Credential checks and session creation."""

import hashlib
import hmac
import secrets
from typing import Optional

from .models.user import Role, Session, User
from .exceptions.storefront_exception import (
    AuthenticationError,
    InvalidCredentialsError,
)


class AuthService:
    """
    Resolves a username/password pair to a role.

    Roles are read from the stored account only. There is no built-in admin
    account; admins are registered like any other user with ``Role.ADMIN``.
    """

    def __init__(self, database, iterations: int = 100_000):
        self.db = database
        self.iterations = iterations

    def _hash_password(self, password: str, salt: str) -> str:
        return hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), bytes.fromhex(salt), self.iterations
        ).hex()

    def register_user(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        role: Role = Role.USER,
    ) -> User:
        """Create an account; raises InvalidCredentialsError on blank or taken names."""
        if not username or not username.strip():
            raise InvalidCredentialsError("Username cannot be blank")
        if not password:
            raise InvalidCredentialsError("Password cannot be blank")

        salt = secrets.token_hex(16)
        user = self.db.insert_user(
            username=username.strip(),
            password_hash=self._hash_password(password, salt),
            salt=salt,
            email=email,
            role=role,
        )
        print(f"User {user.username} registered with role {user.role.value}")
        return user

    def resolve(self, username: str, password: str) -> Optional[Role]:
        """Return the account's role, or None if the credentials are rejected."""
        user = self.db.find_user(username.strip()) if username else None
        if user is None or not password:
            return None

        candidate = self._hash_password(password, user.salt)
        if not hmac.compare_digest(candidate, user.password_hash):
            return None
        return user.role

    def login(self, username: str, password: str) -> Session:
        """Authenticate any account and open a session carrying its role."""
        role = self.resolve(username, password)
        if role is None:
            raise AuthenticationError("Invalid username or password")

        user = self.db.find_user(username.strip())
        print(f"Login successful. Welcome, {user.username}!")
        return Session(user_id=user.id, username=user.username, role=role)

    def login_admin(self, username: str, password: str) -> Session:
        """Authenticate an account that holds the admin role."""
        role = self.resolve(username, password)
        if role is None:
            raise AuthenticationError("Invalid admin credentials")
        if role != Role.ADMIN:
            raise AuthenticationError(
                "User authenticated but does not have admin role. Admin login failed."
            )

        user = self.db.find_user(username.strip())
        print(f"Admin login successful: {user.username}")
        return Session(user_id=user.id, username=user.username, role=role)
