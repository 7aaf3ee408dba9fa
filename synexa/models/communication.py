"""
Communication Models - internal messaging

- CommunicationMessage: broadcast from staff to a resolved set of recipients
- MessageRecipient: per-recipient delivery row, carries read_at
- MessageThread / ThreadMessage: private conversations between participants
- SchoolNotice: bulletin board entries shown on the parent portal
"""

from sqlalchemy import (
    Column, String, Text, Integer, Boolean, DateTime, ForeignKey, Enum as SQLEnum, JSON,
    Table, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid
from synexa.models.user import UserRole


class MessagePriority(str, enum.Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class MessageAudience(str, enum.Enum):
    PARENTS = "PARENTS"
    TEACHERS = "TEACHERS"
    ALL_STAFF = "ALL_STAFF"
    SPECIFIC_CLASS = "SPECIFIC_CLASS"
    INDIVIDUAL = "INDIVIDUAL"
    GROUP = "GROUP"


class CommunicationMessage(Base):
    __tablename__ = "communication_messages"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    priority = Column(SQLEnum(MessagePriority), default=MessagePriority.NORMAL, nullable=False)
    audience = Column(JSON, default=list, nullable=False)  # list of MessageAudience values
    class_id = Column(GUID, ForeignKey("school_classes.id", ondelete="SET NULL"), nullable=True)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User", lazy="selectin")
    recipients = relationship(
        "MessageRecipient", back_populates="message", cascade="all, delete-orphan", lazy="selectin"
    )

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and datetime.utcnow() > self.expires_at

    @property
    def read_count(self) -> int:
        return sum(1 for r in self.recipients if r.read_at is not None)

    @property
    def recipient_count(self) -> int:
        return len(self.recipients)

    def __repr__(self):
        return f"<CommunicationMessage {self.title[:30]}>"


class MessageRecipient(Base):
    __tablename__ = "message_recipients"

    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_message_recipient"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    message_id = Column(GUID, ForeignKey("communication_messages.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    read_at = Column(DateTime, nullable=True)

    message = relationship("CommunicationMessage", back_populates="recipients")


thread_participants = Table(
    "thread_participants",
    Base.metadata,
    Column("thread_id", GUID, ForeignKey("message_threads.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", GUID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class MessageThread(Base):
    __tablename__ = "message_threads"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    subject = Column(String(200), nullable=True)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)  # last activity

    participants = relationship("User", secondary=thread_participants, lazy="selectin")
    messages = relationship(
        "ThreadMessage",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="ThreadMessage.created_at",
    )


class ThreadMessage(Base):
    __tablename__ = "thread_messages"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    thread_id = Column(GUID, ForeignKey("message_threads.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    thread = relationship("MessageThread", back_populates="messages")
    sender = relationship("User", lazy="selectin")


class SchoolNotice(Base):
    """Aviso published to the school community"""
    __tablename__ = "school_notices"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(String(50), default="GERAL", nullable=False)
    priority = Column(Integer, default=0, nullable=False)  # higher shows first
    target_role = Column(SQLEnum(UserRole), nullable=True)  # None = everyone
    published = Column(Boolean, default=True, nullable=False)
    published_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    author_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    author = relationship("User", lazy="selectin")
