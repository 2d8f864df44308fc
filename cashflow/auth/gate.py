"""
Credential check against the user directory.

The gate receives an already hashed password; the HTTP layer does the
hashing server-side so the comparison never runs in the client.
"""
from __future__ import annotations

import hashlib
import hmac

from loguru import logger

from cashflow.auth.users import User, UserDirectory
from cashflow.exceptions import InactiveUserError, UserNotFoundError, WrongPasswordError


def hash_password(password: str) -> str:
    """SHA-256 hex digest, the format stored in the user table."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class AuthGate:
    def __init__(self, directory: UserDirectory) -> None:
        self.directory = directory

    def authenticate(self, username: str, password_hash: str) -> User:
        """Return the matching active user or raise the specific AuthError.

        Checks run in order: unknown user, wrong password, inactive account.
        """
        user = self.directory.find(username)
        if user is None:
            logger.info(f"Login failed for '{username}': user not found")
            raise UserNotFoundError("User not found.")

        supplied = (password_hash or "").strip().lower().encode("utf-8")
        if not hmac.compare_digest(user.password_hash.encode("utf-8"), supplied):
            logger.info(f"Login failed for '{user.username}': wrong password")
            raise WrongPasswordError("Wrong password.")

        if not user.active:
            logger.info(f"Login refused for '{user.username}': account inactive")
            raise InactiveUserError("User inactive. Contact the administrator.")

        logger.info(f"Login ok: {user.username} ({user.role.value})")
        return user
