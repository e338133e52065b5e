"""Service layer for the product catalogue."""
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import QueryFailed
from app.models.product import Product
from app.schemas.product import ProductCreate

logger = logging.getLogger(__name__)


async def list_products(session: AsyncSession) -> list[Product]:
    try:
        result = await session.execute(select(Product).order_by(Product.name))
    except SQLAlchemyError as exc:
        logger.exception("Failed to list products")
        raise QueryFailed("Unable to list products") from exc
    return list(result.scalars().all())


async def get_product(session: AsyncSession, product_id: int) -> Product | None:
    try:
        return await session.get(Product, product_id)
    except SQLAlchemyError as exc:
        logger.exception("Failed to load product %s", product_id)
        raise QueryFailed(f"Unable to load product {product_id}") from exc


async def get_products(session: AsyncSession, product_ids: Iterable[int]) -> list[Product]:
    """Return existing products for ``product_ids`` in first-reference order."""
    ordered = list(dict.fromkeys(product_ids))
    if not ordered:
        return []
    try:
        result = await session.execute(select(Product).where(Product.id.in_(ordered)))
    except SQLAlchemyError as exc:
        logger.exception("Failed to load products %s", ordered)
        raise QueryFailed("Unable to load products") from exc
    by_id = {product.id: product for product in result.scalars().all()}
    return [by_id[product_id] for product_id in ordered if product_id in by_id]


async def create_product(session: AsyncSession, data: ProductCreate) -> Product:
    product = Product(
        name=data.name,
        description=data.description,
        img=data.img,
        barcode=data.barcode,
        brand=list(data.brand),
        categories=list(data.categories),
        packaging=list(data.packaging),
        bin=list(data.bin),
    )
    session.add(product)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise QueryFailed("Barcode already registered") from exc
    except SQLAlchemyError as exc:
        logger.exception("Failed to create product")
        raise QueryFailed("Unable to create product") from exc
    return product
