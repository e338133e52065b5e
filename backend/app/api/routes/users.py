"""User account, authentication and scan history endpoints."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.dependencies import get_current_user, get_db, get_session_store
from app.core.errors import (
    AuthenticationFailed,
    HashingFailed,
    QueryFailed,
    SessionDestroyFailed,
    SessionFailed,
)
from app.models.user import User
from app.schemas.auth import LoggedUser, LoginRequest, LoginResponse, MessageResponse
from app.schemas.history import ScanRequest, UserHistoryRead
from app.schemas.user import UserCreate, UserProfileRead, UserRead, UserUpdate
from app.services import history as history_service
from app.services import users as user_service
from app.services.sessions import SessionStore

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserCreate, session: AsyncSession = Depends(get_db)) -> UserRead:
    try:
        user = await user_service.create_user(session, payload)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    await session.commit()
    return UserRead.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    try:
        user = await user_service.authenticate_user(session, payload.mail, payload.password)
    except AuthenticationFailed as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except (HashingFailed, QueryFailed) as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    try:
        token = await store.create(user)
        await session.commit()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to open session"
        ) from exc
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.session_max_age_minutes * 60,
    )
    return LoginResponse(message="User authenticated", user=LoggedUser(userId=user.id, roles=user.roles))


@router.get("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Logout impossible")
    try:
        await store.destroy(token)
        await session.commit()
    except SessionFailed as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Logout impossible") from exc
    except SessionDestroyFailed as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    response.delete_cookie(settings.session_cookie_name)
    return MessageResponse(message="User logged out")


@router.get("/me", response_model=UserRead)
async def get_current_user_info(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)


@router.get("/all", response_model=list[UserRead])
async def list_users(
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> list[UserRead]:
    try:
        users = await user_service.list_users(session)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return [UserRead.model_validate(user) for user in users]


@router.get("/history/{user_id}", response_model=list[UserHistoryRead])
async def get_history_of_user(
    user_id: int,
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> list[UserHistoryRead]:
    try:
        return await history_service.get_history_of_user(session, user_id)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/stat-history/{user_id}")
async def get_stats_and_last_product(
    user_id: int,
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> list[dict[str, Any]]:
    """Last scanned product of a user followed by the number of scans today."""
    try:
        return await history_service.get_stats_and_last_product(session, user_id)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post(
    "/add-product/history/{user_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_product_in_history(
    user_id: int,
    payload: ScanRequest,
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> MessageResponse:
    try:
        await history_service.append_scan_event(session, user_id, payload.product_id, owner=payload.owner)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    await session.commit()
    return MessageResponse(message="Scanned product added to history")


@router.delete("/delete/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> MessageResponse:
    try:
        await user_service.delete_user(session, user_id)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    await session.commit()
    return MessageResponse(message="User deleted")


@router.get("/{user_id}", response_model=UserProfileRead)
async def get_information_of_user(
    user_id: int,
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> UserProfileRead:
    try:
        user = await user_service.get_user(session, user_id)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserProfileRead.model_validate(user)


@router.put("/{user_id}", response_model=MessageResponse)
async def edit_information_of_user(
    user_id: int,
    payload: UserUpdate,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if payload.roles is not None and "admin" not in current_user.roles:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only administrators can change roles")
    try:
        await user_service.update_user(session, user_id, payload)
    except QueryFailed as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    await session.commit()
    return MessageResponse(message="Profile information updated")
