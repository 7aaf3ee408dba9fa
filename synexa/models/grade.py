from sqlalchemy import (
    Column, Integer, Float, DateTime, ForeignKey, Enum as SQLEnum, UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class GradeType(str, enum.Enum):
    """Angolan assessment components (scale 0-20)"""
    MAC = "MAC"  # Média das Avaliações Contínuas
    NPP = "NPP"  # Nota da Prova do Professor
    NPT = "NPT"  # Nota da Prova Trimestral
    MT = "MT"    # Média Trimestral


class Grade(Base):
    """A single mark for a student in a subject, term and year"""
    __tablename__ = "grades"

    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", "type", "term", "year", name="uq_grade_component"),
        Index("ix_grades_class_term_year", "class_id", "term", "year"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id = Column(GUID, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(GUID, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(GUID, ForeignKey("school_classes.id", ondelete="CASCADE"), nullable=False)
    type = Column(SQLEnum(GradeType), nullable=False)
    term = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    value = Column(Float, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student", back_populates="grades")
    subject = relationship("Subject")
    teacher = relationship("Teacher")
    school_class = relationship("SchoolClass")

    def __repr__(self):
        return f"<Grade {self.type} T{self.term}/{self.year} = {self.value}>"
