# tests/test_history_service.py
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.core.errors import QueryFailed
from app.models.product import Product
from app.models.scan import ScanEvent
from app.models.user import User
from app.schemas.product import ProductCreate
from app.schemas.user import UserCreate
from app.services import history as history_service
from app.services import products as product_service
from app.services import users as user_service


async def _create_user(session, mail: str = "scan@example.com") -> User:
    user = await user_service.create_user(
        session,
        UserCreate(fullname="Scan User", mail=mail, password="long-enough-password"),
    )
    await session.commit()
    return user


async def _create_product(session, name: str, barcode: str) -> Product:
    product = await product_service.create_product(session, ProductCreate(name=name, barcode=barcode, bin=["glass"]))
    await session.commit()
    return product


async def _add_event(session, user: User, product_id: int, date_scan: datetime) -> None:
    session.add(ScanEvent(user_id=user.id, product=product_id, date_scan=date_scan, owner=False))
    await session.commit()


async def test_append_keeps_counter_equal_to_history_length(db_session) -> None:
    user = await _create_user(db_session)
    product = await _create_product(db_session, "Shallot", "5434643466422")

    for _ in range(5):
        await history_service.append_scan_event(db_session, user.id, product.id)
        await db_session.commit()

    await db_session.refresh(user)
    result = await db_session.execute(select(ScanEvent).where(ScanEvent.user_id == user.id))
    assert user.number_scan == 5
    assert len(result.scalars().all()) == 5


async def test_append_for_unknown_user_fails(db_session) -> None:
    with pytest.raises(QueryFailed):
        await history_service.append_scan_event(db_session, 9999, 1)


async def test_history_is_returned_in_append_order(db_session) -> None:
    user = await _create_user(db_session)
    first = await _create_product(db_session, "Shallot", "111")
    second = await _create_product(db_session, "Olive oil", "222")

    for product_id in (second.id, first.id, second.id):
        await history_service.append_scan_event(db_session, user.id, product_id)
    await db_session.commit()

    result = await history_service.get_history_of_user(db_session, user.id)

    assert len(result) == 1
    assert [event.product for event in result[0].history] == [second.id, first.id, second.id]
    assert [product.id for product in result[0].productInfo] == [second.id, first.id]


async def test_history_of_unknown_user_is_empty(db_session) -> None:
    assert await history_service.get_history_of_user(db_session, 4242) == []


async def test_history_with_missing_product_has_no_product_info(db_session) -> None:
    user = await _create_user(db_session)
    await history_service.append_scan_event(db_session, user.id, 31337)
    await db_session.commit()

    result = await history_service.get_history_of_user(db_session, user.id)

    assert len(result[0].history) == 1
    assert result[0].productInfo == []


async def test_stats_for_empty_history(db_session) -> None:
    user = await _create_user(db_session)

    stats = await history_service.get_stats_and_last_product(db_session, user.id)

    assert stats == [{"total_today": 0}]


async def test_stats_for_unknown_user_is_empty(db_session) -> None:
    assert await history_service.get_stats_and_last_product(db_session, 4242) == []


async def test_last_scan_is_the_most_recent_event(db_session) -> None:
    user = await _create_user(db_session)
    old = await _create_product(db_session, "Old", "111")
    recent = await _create_product(db_session, "Recent", "222")
    now = datetime(2024, 5, 20, 12, 0, 0)

    # Appended out of chronological order on purpose.
    await _add_event(db_session, user, recent.id, now - timedelta(hours=1))
    await _add_event(db_session, user, old.id, now - timedelta(days=3))

    stats = await history_service.get_stats_and_last_product(db_session, user.id, now=now)

    last_scan, today = stats
    assert last_scan["_id"] == user.id
    assert len(last_scan["history"]) == 1
    assert last_scan["history"][0]["product"] == recent.id
    assert [product["name"] for product in last_scan["productInfo"]] == ["Recent"]
    assert today == {"total_today": 1}


async def test_today_count_respects_day_boundaries(db_session) -> None:
    user = await _create_user(db_session)
    product = await _create_product(db_session, "Shallot", "111")
    day = datetime(2024, 5, 20)

    await _add_event(db_session, user, product.id, day)  # 00:00:00 counts
    await _add_event(db_session, user, product.id, day.replace(hour=12))
    await _add_event(db_session, user, product.id, day.replace(hour=23, minute=59, second=59))
    await _add_event(db_session, user, product.id, day.replace(hour=23, minute=59, second=59, microsecond=999000))
    await _add_event(db_session, user, product.id, day - timedelta(seconds=1))
    await _add_event(db_session, user, product.id, day + timedelta(days=1))

    stats = await history_service.get_stats_and_last_product(db_session, user.id, now=day.replace(hour=9))

    assert stats[-1] == {"total_today": 3}


async def test_delete_user_wraps_store_failure(db_session, monkeypatch) -> None:
    user = await _create_user(db_session)

    async def _fail(*args, **kwargs):
        raise OperationalError("DELETE FROM users", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "flush", _fail)

    with pytest.raises(QueryFailed):
        await user_service.delete_user(db_session, user.id)


async def test_first_user_is_admin(db_session) -> None:
    first = await _create_user(db_session)
    second = await _create_user(db_session, mail="second@example.com")

    assert first.roles == ["admin"]
    assert second.roles == ["user"]
