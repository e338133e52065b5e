"""User service functions for CRUD and authentication."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AuthenticationFailed, HashingFailed, QueryFailed
from app.core.security import PasswordHasher
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    try:
        return await session.get(User, user_id)
    except SQLAlchemyError as exc:
        logger.exception("Failed to load user %s", user_id)
        raise QueryFailed(f"Unable to load user {user_id}") from exc


async def get_user_by_mail(session: AsyncSession, mail: str) -> User | None:
    normalized = mail.strip().lower()
    try:
        result = await session.execute(select(User).where(User.mail == normalized))
    except SQLAlchemyError as exc:
        logger.exception("Failed to look up user by mail")
        raise QueryFailed("Unable to look up user") from exc
    return result.scalar_one_or_none()


async def users_exist(session: AsyncSession) -> bool:
    try:
        result = await session.execute(select(User.id).limit(1))
    except SQLAlchemyError as exc:
        logger.exception("Failed to count users")
        raise QueryFailed("Unable to count users") from exc
    return result.first() is not None


async def list_users(session: AsyncSession) -> list[User]:
    try:
        result = await session.execute(select(User).order_by(User.id))
    except SQLAlchemyError as exc:
        logger.exception("Failed to list users")
        raise QueryFailed("Unable to list users") from exc
    return list(result.scalars().all())


async def create_user(session: AsyncSession, user_in: UserCreate) -> User:
    mail = user_in.mail.lower()
    if await get_user_by_mail(session, mail):
        raise QueryFailed("Mail already registered")
    # The first account administers the others.
    roles = ["user"] if await users_exist(session) else ["admin"]
    user = User(
        fullname=user_in.fullname,
        mail=mail,
        timezone=user_in.timezone,
        roles=roles,
        password_hash=PasswordHasher.hash(user_in.password),
        number_scan=0,
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise QueryFailed("Mail already registered") from exc
    except SQLAlchemyError as exc:
        logger.exception("Failed to create user")
        raise QueryFailed("Unable to create user") from exc
    logger.info("Created user %s", user.id)
    return user


async def update_user(session: AsyncSession, user_id: int, data: UserUpdate) -> User:
    user = await get_user(session, user_id)
    if not user:
        raise QueryFailed(f"User {user_id} not found")

    if data.mail is not None:
        normalized = data.mail.lower()
        existing = await get_user_by_mail(session, normalized)
        if existing and existing.id != user.id:
            raise QueryFailed("Mail already registered")
        user.mail = normalized
    if data.fullname is not None:
        user.fullname = data.fullname
    if data.timezone is not None:
        user.timezone = data.timezone
    if data.roles is not None:
        user.roles = list(data.roles)
    if data.password is not None:
        user.password_hash = PasswordHasher.hash(data.password)

    try:
        await session.flush()
    except SQLAlchemyError as exc:
        logger.exception("Failed to update user %s", user_id)
        raise QueryFailed(f"Unable to update user {user_id}") from exc
    return user


async def delete_user(session: AsyncSession, user_id: int) -> None:
    user = await get_user(session, user_id)
    if not user:
        raise QueryFailed(f"User {user_id} not found")
    try:
        await session.delete(user)
        await session.flush()
    except SQLAlchemyError as exc:
        logger.exception("Failed to delete user %s", user_id)
        raise QueryFailed(f"Unable to delete user {user_id}") from exc
    logger.info("Deleted user %s", user_id)


async def authenticate_user(session: AsyncSession, mail: str, password: str) -> User:
    user = await get_user_by_mail(session, mail)
    if not user:
        logger.warning("Login attempt for unknown mail %s", mail)
        raise AuthenticationFailed("User does not exist")
    try:
        valid = PasswordHasher.verify(password, user.password_hash)
    except (ValueError, TypeError) as exc:
        logger.exception("Password verification failed for user %s", user.id)
        raise HashingFailed("Unable to verify password") from exc
    if not valid:
        logger.warning("Wrong password for user %s", user.id)
        raise AuthenticationFailed("Incorrect password")
    return user
