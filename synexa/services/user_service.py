"""
User Service - staff and parent accounts (ADMIN managed)
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Optional

from synexa.core.exceptions import ConflictError, ResourceNotFoundError
from synexa.core.logging_config import get_logger
from synexa.core.security import get_password_hash
from synexa.models.user import User, UserRole
from synexa.schemas.user import UserCreate, UserUpdate
from synexa.utils.pagination import paginate

logger = get_logger(__name__)


class UserService:
    """Account management"""

    async def _email_taken(self, db: AsyncSession, email: str, exclude_id: Optional[str] = None) -> bool:
        query = select(User.id).where(User.email == email.lower())
        if exclude_id:
            query = query.where(User.id != exclude_id)
        result = await db.execute(query)
        return result.first() is not None

    async def create_user(self, db: AsyncSession, data: UserCreate) -> User:
        if await self._email_taken(db, data.email):
            raise ConflictError(f"Já existe um utilizador com o email {data.email}")

        user = User(
            name=data.name,
            email=data.email.lower(),
            hashed_password=get_password_hash(data.password),
            role=data.role,
            phone=data.phone,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.log_audit_event("create", "user", str(user.id), role=user.role.value)
        return user

    async def list_users(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
    ) -> dict:
        query = select(User)
        if role:
            query = query.where(User.role == role)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        query = query.order_by(User.name)
        return await paginate(db, query, page, page_size)

    async def get_user(self, db: AsyncSession, user_id: str) -> User:
        user = await db.get(User, user_id)
        if not user:
            raise ResourceNotFoundError("User", user_id)
        return user

    async def update_user(self, db: AsyncSession, user_id: str, data: UserUpdate) -> User:
        user = await self.get_user(db, user_id)
        updates = data.model_dump(exclude_unset=True)

        if "email" in updates and updates["email"]:
            if await self._email_taken(db, updates["email"], exclude_id=user_id):
                raise ConflictError(f"Já existe um utilizador com o email {updates['email']}")
            updates["email"] = updates["email"].lower()

        password = updates.pop("password", None)
        if password:
            user.hashed_password = get_password_hash(password)

        for field, value in updates.items():
            setattr(user, field, value)

        await db.commit()
        await db.refresh(user)
        return user

    async def deactivate_user(self, db: AsyncSession, user_id: str) -> User:
        user = await self.get_user(db, user_id)
        user.is_active = False
        await db.commit()
        await db.refresh(user)

        logger.log_audit_event("deactivate", "user", user_id)
        return user


user_service = UserService()
