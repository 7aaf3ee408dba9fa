from sqlalchemy import Column, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class Teacher(Base):
    """Teaching profile of a PROFESSOR user"""
    __tablename__ = "teachers"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    bio = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="teacher_profile", lazy="selectin")
    subjects = relationship("Subject", secondary="subject_teachers", back_populates="teachers")
    classes = relationship("SchoolClass", secondary="class_teachers", back_populates="teachers")

    @property
    def name(self) -> str:
        return self.user.name if self.user else ""

    @property
    def email(self) -> str:
        return self.user.email if self.user else ""

    def __repr__(self):
        return f"<Teacher {self.id}>"
