# ── src/ingestor/credentials.py ──────────────────────────────────────────────
"""
Credential store: registration and login.

Passwords are stored according to the configured scheme:
- "sha256_crypt": passlib sha256_crypt hash (default)
- "plaintext":    stored verbatim and compared with plain equality (legacy
                  behaviour, kept for existing user records)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from passlib.hash import sha256_crypt

from .errors import DuplicateUsername, InvalidCredentials
from .repository import UserRepository
from .tokens import TokenService
from .users import build_user_doc

_logger = logging.getLogger(__name__)

SCHEME_SHA256_CRYPT = "sha256_crypt"
SCHEME_PLAINTEXT = "plaintext"


class PasswordScheme:
    def __init__(self, name: str = SCHEME_SHA256_CRYPT):
        if name not in (SCHEME_SHA256_CRYPT, SCHEME_PLAINTEXT):
            raise ValueError(f"Unsupported password scheme: {name}")
        self.name = name

    def hash(self, pwd: str) -> str:
        if self.name == SCHEME_PLAINTEXT:
            return pwd
        return sha256_crypt.hash(pwd)

    def verify(self, pwd: str, stored: Optional[str]) -> bool:
        if stored is None:
            return False
        if self.name == SCHEME_PLAINTEXT:
            return pwd == stored
        try:
            return sha256_crypt.verify(pwd, stored)
        except ValueError:
            # not a sha256_crypt hash
            return False


class CredentialStore:
    def __init__(self, users: UserRepository, scheme: Optional[PasswordScheme] = None):
        self._users = users
        self._scheme = scheme or PasswordScheme()

    def register(self, username: str, password: str, role: Optional[str] = None) -> str:
        if self._users.get(username) is not None:
            raise DuplicateUsername()
        doc = build_user_doc(username, self._scheme.hash(password), role)
        user_id = self._users.create(doc)
        _logger.info("Registered user %s (role=%s)", username, doc["role"])
        return user_id

    def authenticate(self, username: str, password: str) -> Dict[str, Any]:
        user = self._users.get(username)
        if not user or not self._scheme.verify(password, user.get("password")):
            _logger.warning("Failed login for %s", username)
            raise InvalidCredentials()
        return user

    def login(self, username: str, password: str, tokens: TokenService) -> str:
        return tokens.issue_token(self.authenticate(username, password))


__all__ = [
    "SCHEME_SHA256_CRYPT",
    "SCHEME_PLAINTEXT",
    "PasswordScheme",
    "CredentialStore",
]
