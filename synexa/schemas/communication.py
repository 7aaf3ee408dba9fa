from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from synexa.models.communication import MessagePriority, MessageAudience
from synexa.models.user import UserRole
from synexa.schemas.common import UserBrief


class MessageCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    content: str = Field(..., min_length=10, max_length=2000)
    priority: MessagePriority = MessagePriority.NORMAL
    audience: List[MessageAudience] = Field(..., min_length=1)
    class_id: Optional[str] = None
    target_users: Optional[List[str]] = None
    expires_at: Optional[datetime] = None


class MessageUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=5, max_length=200)
    content: Optional[str] = Field(None, min_length=10, max_length=2000)
    priority: Optional[MessagePriority] = None
    expires_at: Optional[datetime] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    priority: MessagePriority
    audience: List[MessageAudience]
    class_id: Optional[str] = None
    creator: Optional[UserBrief] = None
    expires_at: Optional[datetime] = None
    is_expired: bool = False
    read_count: int = 0
    recipient_count: int = 0
    created_at: datetime


class InboxItem(BaseModel):
    id: str
    title: str
    preview: str
    priority: MessagePriority
    audience: List[MessageAudience]
    creator: Optional[UserBrief] = None
    is_read: bool
    read_at: Optional[datetime] = None
    is_expired: bool
    created_at: datetime


class InboxSummary(BaseModel):
    total_messages: int
    unread_messages: int
    urgent_messages: int
    expired_messages: int


class ThreadCreate(BaseModel):
    subject: Optional[str] = Field(None, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    participant_ids: List[str] = Field(..., min_length=1)


class ThreadReply(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class ThreadMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender: UserBrief
    content: str
    created_at: datetime


class ThreadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    subject: Optional[str] = None
    created_by: str
    participants: List[UserBrief]
    created_at: datetime
    updated_at: datetime


class ThreadDetail(ThreadResponse):
    messages: List[ThreadMessageResponse] = []


class NoticeCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    content: str = Field(..., min_length=1)
    type: str = Field("GERAL", max_length=50)
    priority: int = Field(0, ge=0, le=10)
    target_role: Optional[UserRole] = None
    published: bool = True
    expires_at: Optional[datetime] = None


class NoticeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    type: str
    priority: int
    target_role: Optional[UserRole] = None
    published: bool
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    author: Optional[UserBrief] = None
    created_at: datetime
