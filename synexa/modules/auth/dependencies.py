"""
Authentication and role dependencies for the v1 API.

These raise HTTPException directly, so auth failures answer with
FastAPI's ``{"detail": ...}`` body rather than the SynexaError envelope.
"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Callable
import uuid

from synexa.core.database import get_db
from synexa.core.security import security, decode_token
from synexa.core.logging_config import set_actor
from synexa.models.user import User, UserRole


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _subject_id(payload: dict) -> str:
    if payload.get("type") != "access":
        raise _unauthorized("Token de acesso inválido")
    try:
        return str(uuid.UUID(payload.get("sub") or ""))
    except ValueError:
        raise _unauthorized("Token sem utilizador válido")


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Active user behind the bearer access token"""
    user = await db.get(User, _subject_id(decode_token(credentials.credentials)))
    if user is None:
        raise _unauthorized("Utilizador inexistente")
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Conta de utilizador inativa"
        )

    set_actor(str(user.id), user.role.value)
    request.state.user_id = str(user.id)
    return user


def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles(UserRole.ADMIN))])
        async def create(..., current_user: User = Depends(require_roles(UserRole.ADMIN))):
    """
    allowed = set(roles)

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Acesso negado para o perfil " + current_user.role.value
            )
        return current_user

    return checker


get_current_admin = require_roles(UserRole.ADMIN)
get_current_parent = require_roles(UserRole.PARENT)

# Role groups used across the API
SCHOOL_ADMIN = (UserRole.ADMIN, UserRole.SECRETARIA)
MANAGEMENT = (UserRole.ADMIN, UserRole.DIRETOR)
OFFICE_READ = (UserRole.ADMIN, UserRole.SECRETARIA, UserRole.DIRETOR)
STAFF_WRITE = (UserRole.ADMIN, UserRole.DIRETOR, UserRole.SECRETARIA)
ACADEMIC_READ = (UserRole.ADMIN, UserRole.SECRETARIA, UserRole.DIRETOR, UserRole.PROFESSOR)
