"""Database model for application users."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class User(Base):
    """Account with hashed password, roles and an embedded scan history."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    fullname: Mapped[str] = mapped_column(String(128), nullable=False)
    mail: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str | None] = mapped_column(String(64), default=None)
    roles: Mapped[list[str]] = mapped_column(JSON, default=lambda: ["user"])
    number_scan: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    registration_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    history: Mapped[list["ScanEvent"]] = relationship(
        "ScanEvent",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="ScanEvent.id",
    )
    sessions: Mapped[list["UserSession"]] = relationship(
        "UserSession", back_populates="user", cascade="all, delete-orphan"
    )
