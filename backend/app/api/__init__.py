"""API router aggregator."""
from fastapi import APIRouter

from app.api.routes import products, users

api_router = APIRouter(prefix="/api")
api_router.include_router(users.router)
api_router.include_router(products.router)

__all__ = ["api_router"]
