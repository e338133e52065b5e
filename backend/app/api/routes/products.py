"""Product catalogue endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db
from app.core.errors import QueryFailed
from app.models.user import User
from app.schemas.product import ProductCreate, ProductRead
from app.services import products as product_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=list[ProductRead])
async def list_products(
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> list[ProductRead]:
    try:
        products = await product_service.list_products(session)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return [ProductRead.model_validate(product) for product in products]


@router.post("/", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> ProductRead:
    try:
        product = await product_service.create_product(session, payload)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    await session.commit()
    return ProductRead.model_validate(product)


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: int,
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> ProductRead:
    try:
        product = await product_service.get_product(session, product_id)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductRead.model_validate(product)
