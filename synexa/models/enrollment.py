from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    CANCELLED = "CANCELLED"
    TRANSFERRED = "TRANSFERRED"


class Enrollment(Base):
    """
    Matrícula: a student placed in a class for one academic year.

    A student holds at most one ACTIVE enrollment per year and a class never
    holds more ACTIVE enrollments than its capacity. Both rules are enforced
    by EnrollmentService.
    """
    __tablename__ = "enrollments"

    __table_args__ = (
        Index("ix_enrollments_student_year", "student_id", "year"),
        Index("ix_enrollments_class_year_status", "class_id", "year", "status"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(GUID, ForeignKey("school_classes.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    status = Column(SQLEnum(EnrollmentStatus), default=EnrollmentStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student", back_populates="enrollments")
    school_class = relationship("SchoolClass", back_populates="enrollments")

    def __repr__(self):
        return f"<Enrollment {self.student_id} {self.year} {self.status}>"
