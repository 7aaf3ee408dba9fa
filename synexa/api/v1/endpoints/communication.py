"""
Communication API

Messages:
- POST   /communication/messages                 send to an audience (ADMIN, DIRETOR, SECRETARIA)
- GET    /communication/messages/inbox           caller's inbox with summary
- GET    /communication/messages/sent            caller's sent messages
- GET    /communication/messages/stats           delivery stats (ADMIN, DIRETOR)
- GET    /communication/messages/{id}            get
- POST   /communication/messages/{id}/read       mark as read
- PUT    /communication/messages/{id}            update (author, ADMIN, DIRETOR)
- DELETE /communication/messages/{id}            soft delete (author, ADMIN, DIRETOR)

Threads:
- POST   /communication/threads                  open a conversation
- GET    /communication/threads                  caller's conversations
- GET    /communication/threads/{id}             conversation with messages (participants)
- POST   /communication/threads/{id}/reply       reply (participants)

Notices:
- POST   /communication/notices                  publish a notice (ADMIN, DIRETOR, SECRETARIA)
- GET    /communication/notices                  list notices
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional

from synexa.core.database import get_db
from synexa.models.communication import MessageAudience, MessagePriority
from synexa.models.user import User
from synexa.modules.auth.dependencies import (
    get_current_user,
    require_roles,
    STAFF_WRITE,
    MANAGEMENT,
)
from synexa.schemas.common import Page, MessageResponse as ActionResponse
from synexa.schemas.communication import (
    MessageCreate,
    MessageUpdate,
    MessageResponse,
    InboxItem,
    InboxSummary,
    ThreadCreate,
    ThreadReply,
    ThreadResponse,
    ThreadDetail,
    NoticeCreate,
    NoticeResponse,
)
from synexa.services.communication_service import communication_service

router = APIRouter()


class InboxPage(Page[InboxItem]):
    summary: InboxSummary


# ==================== Messages ====================

@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_message(
    data: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*STAFF_WRITE)),
):
    return await communication_service.create_message(db, data, current_user)


@router.get("/messages/inbox", response_model=InboxPage)
async def inbox(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    priority: Optional[MessagePriority] = None,
    audience: Optional[MessageAudience] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    unread_only: bool = False,
    search: Optional[str] = None,
    include_expired: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await communication_service.inbox(
        db, current_user, page, page_size,
        priority=priority, audience=audience, start_date=start_date, end_date=end_date,
        unread_only=unread_only, search=search, include_expired=include_expired,
    )


@router.get("/messages/sent", response_model=Page[MessageResponse])
async def sent_messages(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await communication_service.sent(db, current_user, page, page_size)


@router.get("/messages/stats")
async def message_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await communication_service.stats(db)


@router.get("/messages/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await communication_service.get_message(db, message_id)


@router.post("/messages/{message_id}/read", response_model=ActionResponse)
async def mark_read(
    message_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await communication_service.mark_read(db, message_id, current_user)
    return {"message": "Mensagem marcada como lida"}


@router.put("/messages/{message_id}", response_model=MessageResponse)
async def update_message(
    message_id: str,
    data: MessageUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await communication_service.update_message(db, message_id, data, current_user)


@router.delete("/messages/{message_id}", response_model=ActionResponse)
async def delete_message(
    message_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await communication_service.delete_message(db, message_id, current_user)
    return {"message": "Mensagem removida com sucesso"}


# ==================== Threads ====================

@router.post("/threads", response_model=ThreadDetail, status_code=status.HTTP_201_CREATED)
async def create_thread(
    data: ThreadCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await communication_service.create_thread(db, data, current_user)


@router.get("/threads", response_model=Page[ThreadResponse])
async def list_threads(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await communication_service.list_threads(db, current_user, page, page_size)


@router.get("/threads/{thread_id}", response_model=ThreadDetail)
async def get_thread(
    thread_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await communication_service.get_thread(db, thread_id, current_user)


@router.post("/threads/{thread_id}/reply", response_model=ThreadDetail)
async def reply_thread(
    thread_id: str,
    data: ThreadReply,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await communication_service.reply(db, thread_id, data.content, current_user)


# ==================== Notices ====================

@router.post("/notices", response_model=NoticeResponse, status_code=status.HTTP_201_CREATED)
async def create_notice(
    data: NoticeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*STAFF_WRITE)),
):
    return await communication_service.create_notice(db, data, current_user)


@router.get("/notices", response_model=Page[NoticeResponse])
async def list_notices(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    published: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*STAFF_WRITE)),
):
    return await communication_service.list_notices(db, page, page_size, published=published)
