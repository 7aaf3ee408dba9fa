from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Enum as SQLEnum, Index
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class UploadEntity(str, enum.Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"


class FileType(str, enum.Enum):
    MATRICULA = "MATRICULA"
    ATESTADO = "ATESTADO"
    AVALIACAO = "AVALIACAO"
    HISTORICO = "HISTORICO"
    EXAME_MEDICO = "EXAME_MEDICO"
    OUTRO = "OUTRO"


class UploadedFile(Base):
    """File attached to a student or teacher record, stored on local disk"""
    __tablename__ = "uploaded_files"

    __table_args__ = (
        Index("ix_uploaded_files_entity", "entity_type", "entity_id"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    entity_type = Column(SQLEnum(UploadEntity), nullable=False)
    entity_id = Column(GUID, nullable=False)
    file_type = Column(SQLEnum(FileType), default=FileType.OUTRO, nullable=False)

    original_name = Column(String(255), nullable=False)
    stored_name = Column(String(255), nullable=False, unique=True)
    path = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)

    uploaded_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<UploadedFile {self.original_name} ({self.entity_type}:{self.entity_id})>"
