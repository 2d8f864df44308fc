"""
Exception hierarchy shared by the data, auth and API layers.
"""
from __future__ import annotations


class CashflowError(Exception):
    """Base class for all application errors."""


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------

class SourceError(CashflowError):
    """The ledger source could not be fetched or parsed."""


class DataNotLoadedError(CashflowError):
    """No ledger snapshot is available (never loaded, or the last load failed)."""


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class AuthError(CashflowError):
    """Credential check failed."""

    reason = "auth_failed"


class UserNotFoundError(AuthError):
    reason = "not_found"


class WrongPasswordError(AuthError):
    reason = "wrong_password"


class InactiveUserError(AuthError):
    reason = "inactive"
