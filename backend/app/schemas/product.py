"""Pydantic schemas for catalogue products."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    img: str | None = Field(default=None, max_length=1024)
    barcode: str | None = Field(default=None, max_length=64)
    brand: list[str] = []
    categories: list[str] = []
    packaging: list[str] = []
    bin: list[str] = []


class ProductCreate(ProductBase):
    pass


class ProductRead(ProductBase):
    id: int = Field(..., alias="_id")
    creation_date: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
