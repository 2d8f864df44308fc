"""User directory and credential check."""
from .users import User, UserDirectory, UserRole
from .gate import AuthGate, hash_password
