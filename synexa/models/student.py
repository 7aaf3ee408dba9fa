from sqlalchemy import (
    Column, String, Date, DateTime, ForeignKey, Enum as SQLEnum, JSON, Table, Text,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class Gender(str, enum.Enum):
    MASCULINO = "MASCULINO"
    FEMININO = "FEMININO"


# Parent (encarregado) accounts linked to the students they can see in the portal
parent_students = Table(
    "parent_students",
    Base.metadata,
    Column("parent_id", GUID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", GUID, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
)


class Student(Base):
    """Student record"""
    __tablename__ = "students"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    first_name = Column(String(50), nullable=False, index=True)
    last_name = Column(String(50), nullable=False, index=True)
    gender = Column(SQLEnum(Gender), nullable=False)
    birth_date = Column(Date, nullable=False)
    phone = Column(String(20), nullable=True)
    blood_type = Column(String(3), nullable=True)
    profile_photo_url = Column(Text, nullable=True)

    # Identification
    student_number = Column(String(15), unique=True, nullable=False, index=True)
    bi_number = Column(String(20), unique=True, nullable=True, index=True)  # Bilhete de Identidade

    # Current placement (the enrollment table is the history)
    academic_year = Column(String(4), nullable=True)
    class_id = Column(GUID, ForeignKey("school_classes.id", ondelete="SET NULL"), nullable=True)

    # Guardian / address
    guardian_name = Column(String(100), nullable=True)
    guardian_phone = Column(String(20), nullable=True)
    municipality = Column(String(50), nullable=True)
    province = Column(String(50), nullable=True)
    country = Column(String(50), default="Angola", nullable=False)
    parent_email = Column(String(255), nullable=True)
    parent_phone = Column(String(20), nullable=True)
    tags = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    school_class = relationship("SchoolClass", back_populates="students")
    parents = relationship("User", secondary=parent_students, back_populates="children")
    enrollments = relationship("Enrollment", back_populates="student", cascade="all, delete-orphan")
    grades = relationship("Grade", back_populates="student", cascade="all, delete-orphan")
    attendances = relationship("Attendance", back_populates="student", cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="student", cascade="all, delete-orphan")
    documents = relationship("IssuedDocument", back_populates="student", cascade="all, delete-orphan")
    transport = relationship(
        "StudentTransport", back_populates="student", uselist=False, cascade="all, delete-orphan"
    )
    notes = relationship("StudentNote", back_populates="student", cascade="all, delete-orphan")
    timeline = relationship(
        "StudentTimelineEvent", back_populates="student", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Student {self.student_number} {self.full_name}>"
