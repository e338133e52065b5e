"""Authentication-related schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    mail: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class LoggedUser(BaseModel):
    userId: int
    roles: list[str]


class LoginResponse(BaseModel):
    message: str
    user: LoggedUser


class MessageResponse(BaseModel):
    message: str
