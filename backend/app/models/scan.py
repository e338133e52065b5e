"""Database model for scan events embedded in a user's history."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class ScanEvent(Base):
    """One product scan recorded by a user."""

    __tablename__ = "scan_events"

    id: Mapped[int] = mapped_column(primary_key=True)  # insertion sequence
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    # Plain reference: a missing product only shows up as an empty join.
    product: Mapped[int] = mapped_column(Integer, nullable=False)
    date_scan: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)  # naive UTC
    owner: Mapped[bool] = mapped_column(Boolean, default=False)

    user: Mapped["User"] = relationship("User", back_populates="history")
