"""Security helpers for password hashing and session signing."""
from __future__ import annotations

from passlib.context import CryptContext
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .config import get_settings


_password_context = CryptContext(schemes=["argon2"], deprecated="auto")


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str) -> bool:
        return _password_context.verify(password, hashed)


class SessionSigner:
    """Sign and unsign session identifiers carried by the session cookie."""

    def __init__(self, salt: str = "scanlog-session") -> None:
        settings = get_settings()
        self._serializer = URLSafeTimedSerializer(settings.secret_key, salt=salt)

    def dumps(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def loads(self, token: str, max_age: int | None = None) -> str:
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired) as exc:
            raise ValueError("Invalid or expired session token") from exc
