# family100/security.py

import secrets
import time
from typing import Any, Dict, Mapping, Optional, Tuple

from passlib.context import CryptContext

from family100.errors import AuthFailure
from family100.models import Role

# Configure the password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class PasswordHasher:
    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a plain password against its hashed version."""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        return pwd_context.hash(password)


def normalize_username(username: str) -> str:
    return username.strip().lower()


class IdentityStore:
    """
    Static credential table. Plain passwords from the configuration are hashed
    once on construction; lookups only ever compare against the hashes.
    """

    def __init__(self, accounts: Mapping[str, Tuple[str, str]]):
        self._users: Dict[str, Tuple[str, Role]] = {
            normalize_username(username): (PasswordHasher.get_password_hash(password), Role(role))
            for username, (password, role) in accounts.items()
        }

    def lookup(self, username: Any, password: Any) -> Role:
        """Return the role granted by the pair, or raise AuthFailure."""
        if not isinstance(username, str) or not isinstance(password, str):
            raise AuthFailure()
        if not username or not password:
            raise AuthFailure()
        user = self._users.get(normalize_username(username))
        if not user or not PasswordHasher.verify_password(password, user[0]):
            raise AuthFailure()
        return user[1]

    def usernames(self) -> list:
        return sorted(self._users)


class SessionStore:
    """In-memory web sessions for the cookie based login."""

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, dict] = {}

    def create(self, username: str, role: Role) -> str:
        self.prune()
        sid = secrets.token_urlsafe(32)
        self._sessions[sid] = {
            "username": username,
            "role": role,
            "exp": time.time() + self.ttl_seconds,
        }
        return sid

    def get(self, sid: Optional[str]) -> Optional[dict]:
        """Return the session record, dropping it if it has expired."""
        if not sid:
            return None
        record = self._sessions.get(sid)
        if record is None:
            return None
        if record["exp"] < time.time():
            self._sessions.pop(sid, None)
            return None
        return record

    def __len__(self) -> int:
        return len(self._sessions)

    def delete(self, sid: Optional[str]) -> None:
        if sid:
            self._sessions.pop(sid, None)

    def prune(self) -> int:
        """Drop every expired record; returns how many were removed."""
        now = time.time()
        expired = [sid for sid, record in self._sessions.items() if record["exp"] < now]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)
