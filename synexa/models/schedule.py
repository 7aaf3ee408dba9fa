from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class Weekday(str, enum.Enum):
    SEGUNDA = "SEGUNDA"
    TERCA = "TERCA"
    QUARTA = "QUARTA"
    QUINTA = "QUINTA"
    SEXTA = "SEXTA"
    SABADO = "SABADO"


# Calendar order, used to sort a week's timetable
WEEKDAY_ORDER = {day: index for index, day in enumerate(Weekday)}


class Schedule(Base):
    """A teacher's weekly slot for a subject; times are HH:MM, end exclusive"""
    __tablename__ = "schedules"

    __table_args__ = (
        Index("ix_schedules_teacher_weekday", "teacher_id", "weekday"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    teacher_id = Column(GUID, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(GUID, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    weekday = Column(SQLEnum(Weekday), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    teacher = relationship("Teacher", lazy="selectin")
    subject = relationship("Subject", lazy="selectin")

    def __repr__(self):
        return f"<Schedule {self.weekday} {self.start_time}-{self.end_time}>"
