from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """User roles"""
    ADMIN = "ADMIN"
    DIRETOR = "DIRETOR"
    SECRETARIA = "SECRETARIA"
    PROFESSOR = "PROFESSOR"
    PARENT = "PARENT"


STAFF_ROLES = (UserRole.ADMIN, UserRole.DIRETOR, UserRole.SECRETARIA, UserRole.PROFESSOR)


class User(Base):
    """User model - staff accounts and parent (encarregado) accounts"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)

    role = Column(SQLEnum(UserRole), default=UserRole.SECRETARIA, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    teacher_profile = relationship("Teacher", back_populates="user", uselist=False)
    children = relationship("Student", secondary="parent_students", back_populates="parents")

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
