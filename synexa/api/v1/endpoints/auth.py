"""
Authentication API

- POST /auth/login          staff and parent login (rate limited)
- POST /auth/parent-login   login restricted to PARENT accounts (rate limited)
- POST /auth/refresh        new token pair from a refresh token
- GET  /auth/me             current user
"""
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime
from typing import Optional

from synexa.core.database import get_db
from synexa.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
    token_payload_for,
)
from synexa.core.logging_config import logger, set_actor
from synexa.core.rate_limiter import login_rate_limit
from synexa.models.user import User, UserRole
from synexa.schemas.auth import UserLogin, RefreshTokenRequest, Token
from synexa.schemas.user import LoginResponse, UserResponse
from synexa.modules.auth.dependencies import get_current_user

router = APIRouter()


async def _authenticate(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession,
    event: str,
    required_role: Optional[UserRole] = None,
) -> dict:
    client_ip = request.client.host if request.client else "unknown"
    email = credentials.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event(
            event=event, success=False, user_email=email,
            reason="Invalid credentials", client_ip=client_ip,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email ou palavra-passe incorretos",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if required_role and user.role != required_role:
        logger.log_auth_event(
            event=event, success=False, user_email=email,
            reason=f"Role {user.role.value} not allowed", client_ip=client_ip,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Acesso reservado a encarregados de educação",
        )

    if not user.is_active:
        logger.log_auth_event(
            event=event, success=False, user_email=email,
            reason="Account inactive", client_ip=client_ip,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Conta de utilizador inativa",
        )

    user.last_login = datetime.utcnow()
    await db.commit()

    set_actor(str(user.id), user.role.value)
    logger.log_auth_event(
        event=event, success=True, user_email=email,
        client_ip=client_ip, user_role=user.role.value,
    )

    payload = token_payload_for(user)
    return {
        "access_token": create_access_token(payload),
        "refresh_token": create_refresh_token(payload),
        "token_type": "bearer",
        "user": user,
    }


@router.post("/login", response_model=LoginResponse)
@login_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password"""
    return await _authenticate(request, credentials, db, "login")


@router.post("/parent-login", response_model=LoginResponse)
@login_rate_limit()
async def parent_login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login for the parent portal"""
    return await _authenticate(request, credentials, db, "parent_login", UserRole.PARENT)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    token_data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token for a new token pair"""
    payload = decode_token(token_data.refresh_token)

    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    result = await db.execute(select(User).where(User.id == payload.get("sub")))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        logger.log_auth_event(event="refresh", success=False, reason="User not found or inactive")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive"
        )

    new_payload = token_payload_for(user)
    return {
        "access_token": create_access_token(new_payload),
        "refresh_token": create_refresh_token(new_payload),
        "token_type": "bearer",
    }


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return current_user
