"""Scan history recording and the history/statistics queries."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.errors import QueryFailed
from app.models.scan import ScanEvent
from app.models.user import User
from app.schemas.history import LastScanRead, ScanEventRead, TodayCountRead, UserHistoryRead
from app.schemas.product import ProductRead
from app.services.products import get_products

logger = logging.getLogger(__name__)


def today_window(now: datetime | None = None, tz_name: str | None = None) -> tuple[datetime, datetime]:
    """Return the naive UTC bounds of the local day containing ``now``.

    The window runs from 00:00:00 to 23:59:59 local time, both inclusive, so
    anything in the final fraction of the last second is left out. Naive
    ``now`` values are read as UTC.
    """
    zone = ZoneInfo(tz_name or get_settings().stats_timezone)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(zone)
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    end = local.replace(hour=23, minute=59, second=59, microsecond=0)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )


def merge_stats(last_scan: LastScanRead | None, today: TodayCountRead | None) -> list[dict[str, Any]]:
    """Concatenate the last-scan and today-count results, in that order."""
    merged: list[dict[str, Any]] = []
    for part in (last_scan, today):
        if part is not None:
            merged.append(part.model_dump(by_alias=True, mode="json"))
    return merged


async def append_scan_event(
    session: AsyncSession, user_id: int, product_id: int, owner: bool = False
) -> ScanEvent:
    """Record a scan and bump ``number_scan`` inside the caller's transaction."""
    try:
        result = await session.execute(
            update(User)
            .where(User.id == user_id)
            .values(number_scan=User.number_scan + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise QueryFailed(f"User {user_id} not found")
        event = ScanEvent(user_id=user_id, product=product_id, date_scan=datetime.utcnow(), owner=owner)
        session.add(event)
        await session.flush()
    except SQLAlchemyError as exc:
        logger.exception("Failed to record scan of product %s for user %s", product_id, user_id)
        raise QueryFailed(f"Unable to record scan for user {user_id}") from exc
    logger.info("Recorded scan of product %s for user %s", product_id, user_id)
    return event


async def _last_scan(session: AsyncSession, user: User) -> LastScanRead | None:
    result = await session.execute(
        select(ScanEvent)
        .where(ScanEvent.user_id == user.id)
        .order_by(ScanEvent.date_scan.desc(), ScanEvent.id.desc())
        .limit(1)
    )
    event = result.scalar_one_or_none()
    if event is None:
        return None
    products = await get_products(session, [event.product])
    return LastScanRead(
        id=user.id,
        number_scan=user.number_scan,
        history=[ScanEventRead.model_validate(event)],
        productInfo=[ProductRead.model_validate(product) for product in products],
    )


async def _count_today(session: AsyncSession, user_id: int, now: datetime | None) -> TodayCountRead:
    start, end = today_window(now)
    result = await session.execute(
        select(func.count(ScanEvent.id)).where(
            ScanEvent.user_id == user_id,
            ScanEvent.date_scan >= start,
            ScanEvent.date_scan <= end,
        )
    )
    return TodayCountRead(total_today=result.scalar_one())


async def get_stats_and_last_product(
    session: AsyncSession, user_id: int, now: datetime | None = None
) -> list[dict[str, Any]]:
    """Return ``[last_scan, {"total_today": n}]`` for a user, or ``[]`` if unknown."""
    try:
        user = await session.get(User, user_id)
        if user is None:
            return []
        last_scan = await _last_scan(session, user)
        today = await _count_today(session, user_id, now)
    except SQLAlchemyError as exc:
        logger.exception("Statistics query failed for user %s", user_id)
        raise QueryFailed(f"Unable to compute statistics for user {user_id}") from exc
    return merge_stats(last_scan, today)


async def get_history_of_user(session: AsyncSession, user_id: int) -> list[UserHistoryRead]:
    """Return the full history of a user joined with its products."""
    try:
        user = await session.get(User, user_id)
        if user is None:
            return []
        result = await session.execute(
            select(ScanEvent).where(ScanEvent.user_id == user_id).order_by(ScanEvent.id)
        )
        events = list(result.scalars().all())
        products = await get_products(session, (event.product for event in events))
    except SQLAlchemyError as exc:
        logger.exception("History query failed for user %s", user_id)
        raise QueryFailed(f"Unable to load history for user {user_id}") from exc
    return [
        UserHistoryRead(
            id=user.id,
            history=[ScanEventRead.model_validate(event) for event in events],
            productInfo=[ProductRead.model_validate(product) for product in products],
        )
    ]
