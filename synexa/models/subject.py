from sqlalchemy import Column, String, Text, DateTime, Table, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


subject_teachers = Table(
    "subject_teachers",
    Base.metadata,
    Column("subject_id", GUID, ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
    Column("teacher_id", GUID, ForeignKey("teachers.id", ondelete="CASCADE"), primary_key=True),
)


class Subject(Base):
    """Disciplina"""
    __tablename__ = "subjects"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    teachers = relationship("Teacher", secondary=subject_teachers, back_populates="subjects")

    def __repr__(self):
        return f"<Subject {self.name}>"
