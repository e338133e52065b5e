"""Database model for products referenced by scan events."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Product(Base):
    """Catalogue entry with packaging and recycling details."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    img: Mapped[str | None] = mapped_column(String(1024), default=None)
    barcode: Mapped[str | None] = mapped_column(String(64), unique=True, default=None)
    brand: Mapped[list[str]] = mapped_column(JSON, default=list)
    categories: Mapped[list[str]] = mapped_column(JSON, default=list)
    packaging: Mapped[list[str]] = mapped_column(JSON, default=list)
    bin: Mapped[list[str]] = mapped_column(JSON, default=list)
    creation_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
