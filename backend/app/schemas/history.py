"""Pydantic schemas for scan history and statistics payloads."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.product import ProductRead


class ScanRequest(BaseModel):
    product_id: int = Field(..., alias="_id")
    owner: bool = False

    model_config = ConfigDict(populate_by_name=True)


class ScanEventRead(BaseModel):
    product: int
    date_scan: datetime
    owner: bool

    model_config = ConfigDict(from_attributes=True)


class UserHistoryRead(BaseModel):
    id: int = Field(..., alias="_id")
    history: list[ScanEventRead]
    productInfo: list[ProductRead]

    model_config = ConfigDict(populate_by_name=True)


class LastScanRead(UserHistoryRead):
    """History reduced to its most recent event."""

    number_scan: int


class TodayCountRead(BaseModel):
    total_today: int
