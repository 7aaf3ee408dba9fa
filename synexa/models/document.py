from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class DocumentType(str, enum.Enum):
    CERTIFICATE = "CERTIFICATE"
    DECLARATION = "DECLARATION"
    TRANSCRIPT = "TRANSCRIPT"
    REPORT_CARD = "REPORT_CARD"
    INVOICE = "INVOICE"


class IssuedDocument(Base):
    """A PDF issued by the secretariat, kept under STORAGE_PATH/documents"""
    __tablename__ = "issued_documents"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(DocumentType), nullable=False)
    filename = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    issued_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="documents")

    def __repr__(self):
        return f"<IssuedDocument {self.type} {self.filename}>"
