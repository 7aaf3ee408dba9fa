"""
Student Record Models - pedagogical notes and the student's timeline

Notes are written by staff and teachers about a student (observations,
praise, warnings). Timeline events record what happened to the student
over time; enrollments add a MATRICULA event on their own.
"""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SQLEnum, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class NoteType(str, enum.Enum):
    OBSERVACAO = "OBSERVACAO"
    ELOGIO = "ELOGIO"
    ADVERTENCIA = "ADVERTENCIA"


class TimelineEventType(str, enum.Enum):
    MATRICULA = "MATRICULA"
    TRANSFERENCIA = "TRANSFERENCIA"
    OCORRENCIA = "OCORRENCIA"
    DOCUMENTO = "DOCUMENTO"
    OUTRO = "OUTRO"


class StudentNote(Base):
    __tablename__ = "student_notes"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    note_type = Column(SQLEnum(NoteType), default=NoteType.OBSERVACAO, nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    student = relationship("Student", back_populates="notes")
    author = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<StudentNote {self.note_type} {self.student_id}>"


class StudentTimelineEvent(Base):
    __tablename__ = "student_timeline_events"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(SQLEnum(TimelineEventType), nullable=False)
    title = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    event_metadata = Column("metadata", JSON, nullable=True)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    student = relationship("Student", back_populates="timeline")

    def __repr__(self):
        return f"<StudentTimelineEvent {self.event_type} {self.title}>"
