"""Pydantic schemas for user operations."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserBase(BaseModel):
    fullname: str = Field(..., min_length=1, max_length=128)
    mail: EmailStr
    timezone: str | None = Field(default=None, max_length=64)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8, max_length=128)


class UserProfileRead(BaseModel):
    """Projection served by the profile read path."""

    id: int = Field(..., alias="_id")
    fullname: str
    mail: str
    timezone: str | None
    number_scan: int
    registration_date: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class UserRead(UserProfileRead):
    roles: list[str]


class UserUpdate(BaseModel):
    fullname: str | None = Field(default=None, min_length=1, max_length=128)
    mail: EmailStr | None = None
    timezone: str | None = Field(default=None, max_length=64)
    roles: list[str] | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)

    model_config = ConfigDict(extra="ignore")
