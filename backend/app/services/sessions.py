"""Server-side session store behind the signed session cookie."""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Protocol

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.errors import SessionDestroyFailed, SessionFailed
from app.core.security import SessionSigner
from app.models.session import UserSession
from app.models.user import User

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    async def create(self, user: User) -> str:
        ...

    async def destroy(self, token: str) -> None:
        ...

    async def lookup(self, token: str) -> User | None:
        ...


class DatabaseSessionStore:
    """Persist sessions in the database and hand out signed session ids."""

    def __init__(self, session: AsyncSession, signer: SessionSigner | None = None) -> None:
        settings = get_settings()
        self._session = session
        self._signer = signer or SessionSigner()
        self._max_age = timedelta(minutes=settings.session_max_age_minutes)

    def _unsign(self, token: str) -> str | None:
        try:
            return self._signer.loads(token, max_age=int(self._max_age.total_seconds()))
        except ValueError:
            return None

    async def purge_expired(self, now: datetime | None = None) -> int:
        """Delete every session past its expiry and return how many were removed."""
        result = await self._session.execute(
            delete(UserSession)
            .where(UserSession.expires_at <= (now or datetime.utcnow()))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def create(self, user: User) -> str:
        now = datetime.utcnow()
        purged = await self.purge_expired(now)
        if purged:
            logger.info("Purged %d expired session(s)", purged)
        record = UserSession(
            id=secrets.token_urlsafe(32),
            user_id=user.id,
            created_at=now,
            expires_at=now + self._max_age,
        )
        self._session.add(record)
        await self._session.flush()
        logger.info("Opened session for user %s", user.id)
        return self._signer.dumps(record.id)

    async def _get_active(self, token: str) -> UserSession | None:
        session_id = self._unsign(token)
        if not session_id:
            return None
        record = await self._session.get(UserSession, session_id)
        if record is None or record.expires_at <= datetime.utcnow():
            return None
        return record

    async def lookup(self, token: str) -> User | None:
        record = await self._get_active(token)
        if record is None:
            return None
        return await self._session.get(User, record.user_id)

    async def destroy(self, token: str) -> None:
        record = await self._get_active(token)
        if record is None:
            raise SessionFailed("No active session")
        user_id = record.user_id
        try:
            await self._session.delete(record)
            await self._session.flush()
        except SQLAlchemyError as exc:
            logger.exception("Failed to destroy session for user %s", user_id)
            raise SessionDestroyFailed("Unable to destroy session") from exc
        logger.info("Closed session for user %s", user_id)
