from sqlalchemy import (
    Column, String, Integer, DateTime, Enum as SQLEnum, Table, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class Shift(str, enum.Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"


class_teachers = Table(
    "class_teachers",
    Base.metadata,
    Column("class_id", GUID, ForeignKey("school_classes.id", ondelete="CASCADE"), primary_key=True),
    Column("teacher_id", GUID, ForeignKey("teachers.id", ondelete="CASCADE"), primary_key=True),
)


class SchoolClass(Base):
    """A turma: one group of students for one academic year"""
    __tablename__ = "school_classes"

    __table_args__ = (
        UniqueConstraint("name", "year", name="uq_school_classes_name_year"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False, index=True)
    shift = Column(SQLEnum(Shift), nullable=False)
    capacity = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    students = relationship("Student", back_populates="school_class")
    teachers = relationship("Teacher", secondary=class_teachers, back_populates="classes")
    enrollments = relationship("Enrollment", back_populates="school_class", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<SchoolClass {self.name} {self.year}>"
