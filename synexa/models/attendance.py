from sqlalchemy import Column, Date, DateTime, Boolean, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class Attendance(Base):
    """One student's presence in one subject lesson on one day"""
    __tablename__ = "attendances"

    __table_args__ = (
        UniqueConstraint("date", "student_id", "subject_id", name="uq_attendance_date_student_subject"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    date = Column(Date, nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(GUID, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(GUID, ForeignKey("school_classes.id", ondelete="SET NULL"), nullable=True, index=True)
    teacher_id = Column(GUID, ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    present = Column(Boolean, default=False, nullable=False)
    justified = Column(Boolean, default=False, nullable=False)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student", back_populates="attendances")
    subject = relationship("Subject")
    school_class = relationship("SchoolClass")
    teacher = relationship("Teacher")

    def __repr__(self):
        return f"<Attendance {self.date} {self.student_id} present={self.present}>"
